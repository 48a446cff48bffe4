# src/parley/schemas/message.py
"""Message-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from parley.db.time import as_utc
from parley.models.message import Message


class MessageContentOut(BaseModel):
    """Tagged message content; absent fields are omitted on output."""

    type: str = Field(..., description="One of text, image or mixed")
    text: str | None = None
    image: str | None = Field(None, description="Server-relative path of the attached image")

    @classmethod
    def from_message(cls, message: Message) -> MessageContentOut:
        return cls(type=message.content_type, text=message.body, image=message.image_path)


class MessageRecord(BaseModel):
    """Canonical record returned after a message is created."""

    id: int
    content: MessageContentOut
    sender: str
    participants: list[str]
    created_at: datetime

    @classmethod
    def from_message(cls, message: Message) -> MessageRecord:
        return cls(
            id=message.id,
            content=MessageContentOut.from_message(message),
            sender=message.sender_id,
            participants=list(message.participants),
            created_at=as_utc(message.created_at),
        )


class HistoryEntryOut(BaseModel):
    """A message as seen by one of its participants."""

    id: int
    content: MessageContentOut
    created_at: datetime
    from_self: bool


class MessageListResponse(BaseModel):
    """History and search results."""

    messages: list[HistoryEntryOut]
    count: int


class ConversationOut(BaseModel):
    """Summary of the conversation with one peer."""

    peer_id: str
    last_message_preview: str
    last_message_time: datetime
    message_count: int

    model_config = ConfigDict(from_attributes=True)


class ConversationListResponse(BaseModel):
    """Conversation summaries in no guaranteed order."""

    conversations: list[ConversationOut]
    count: int


class MessageStatsOut(BaseModel):
    """Message counts for the current user."""

    total_messages: int
    sent_messages: int
    received_messages: int
    image_messages: int

    model_config = ConfigDict(from_attributes=True)


class MessageDeleted(BaseModel):
    """Success marker returned by the delete endpoint."""

    status: str = "deleted"
    message_id: int
