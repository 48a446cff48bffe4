# src/parley/api/v1/endpoints/messages.py
"""Direct message endpoints for the Parley API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from parley.api.v1.dependencies import CurrentUserDep, MediaStorageDep, MessageServiceDep
from parley.core.errors import ChatError
from parley.schemas.message import (
    ConversationListResponse,
    ConversationOut,
    HistoryEntryOut,
    MessageContentOut,
    MessageDeleted,
    MessageListResponse,
    MessageRecord,
    MessageStatsOut,
)
from parley.services.message_service import HistoryEntry

router = APIRouter(prefix="/messages", tags=["messages"])


def _serialize_entry(entry: HistoryEntry) -> HistoryEntryOut:
    """Convert a projected history entry into its API payload form."""
    return HistoryEntryOut(
        id=entry.id,
        content=MessageContentOut(**entry.content.to_dict()),
        created_at=entry.created_at,
        from_self=entry.from_self,
    )


def _message_list(entries: list[HistoryEntry]) -> MessageListResponse:
    messages = [_serialize_entry(entry) for entry in entries]
    return MessageListResponse(messages=messages, count=len(messages))


@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageRecord,
    response_model_exclude_none=True,
)
async def send_message(
    current_user: CurrentUserDep,
    service: MessageServiceDep,
    media: MediaStorageDep,
    to: Annotated[str | None, Form()] = None,
    message: Annotated[str | None, Form()] = None,
    image: Annotated[UploadFile | None, File()] = None,
) -> MessageRecord:
    """Send a text, image or mixed message to another user."""
    image_path: str | None = None
    if image is not None and image.filename:
        # One byte past the cap is enough to detect an oversized upload.
        data = await image.read(media.max_bytes + 1)
        image_path = media.save(data, image.filename, image.content_type)

    try:
        created = await service.send(current_user, to or "", body=message, image_path=image_path)
    except ChatError:
        if image_path is not None:
            media.delete(image_path)
        raise

    return MessageRecord.from_message(created)


@router.get("/history/{peer_id}", response_model_exclude_none=True)
async def get_history(
    peer_id: str,
    current_user: CurrentUserDep,
    service: MessageServiceDep,
) -> MessageListResponse:
    """Get the full conversation with ``peer_id``, oldest first."""
    return _message_list(service.history(current_user, peer_id))


@router.get("/conversations")
async def get_conversations(
    current_user: CurrentUserDep,
    service: MessageServiceDep,
) -> ConversationListResponse:
    """Get one summary per peer the current user has talked to."""
    conversations = [
        ConversationOut.model_validate(summary)
        for summary in service.conversations(current_user)
    ]
    return ConversationListResponse(conversations=conversations, count=len(conversations))


@router.get("/search", response_model_exclude_none=True)
async def search_messages(
    current_user: CurrentUserDep,
    service: MessageServiceDep,
    q: str = Query("", description="Case-insensitive text to look for"),
) -> MessageListResponse:
    """Search the current user's messages by text, newest first."""
    return _message_list(service.search(current_user, q))


@router.get("/stats")
async def get_message_stats(
    current_user: CurrentUserDep,
    service: MessageServiceDep,
) -> MessageStatsOut:
    """Get sent/received/image message counts for the current user."""
    return MessageStatsOut.model_validate(service.stats(current_user))


@router.delete("/{message_id}")
async def delete_message(
    message_id: int,
    current_user: CurrentUserDep,
    service: MessageServiceDep,
) -> MessageDeleted:
    """Delete one of the current user's messages together with its image."""
    service.remove(message_id, current_user)
    return MessageDeleted(message_id=message_id)
