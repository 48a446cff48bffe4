"""Service layer orchestrating message creation, reads and deletion."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from parley.core.errors import Forbidden, NotFound, ValidationError
from parley.core.settings import settings
from parley.db.time import as_utc
from parley.models.message import Message
from parley.repositories.message_repo import MessageRepository, MessageStats
from parley.schemas.message import MessageRecord
from parley.services.content import MessageContent, classify_content
from parley.services.conversations import ConversationAggregator, ConversationSummary
from parley.services.delivery import DeliveryNotifier
from parley.services.media import MediaStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """A stored message projected for one of its participants."""

    id: int
    content: MessageContent
    created_at: datetime
    from_self: bool


def _require(**values: str | None) -> None:
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ValidationError(f"Missing required value(s): {', '.join(missing)}")


class MessageService:
    """Create, read and delete direct messages on behalf of a verified user.

    The service never logs or hides storage failures; the only error it
    absorbs is a missing attachment file while deleting a message.
    """

    def __init__(
        self,
        repository: MessageRepository,
        *,
        media: MediaStorage | None = None,
        notifier: DeliveryNotifier | None = None,
        aggregator: ConversationAggregator | None = None,
    ) -> None:
        self.repository = repository
        self.media = media
        self.notifier = notifier
        self.aggregator = aggregator or ConversationAggregator(settings.conversation_peer_rule)

    async def send(
        self,
        sender_id: str,
        recipient_id: str,
        body: str | None = None,
        image_path: str | None = None,
    ) -> Message:
        """Classify, persist and announce a new message.

        The recipient is notified only after the write has been committed.

        Raises:
            ValidationError: If either id is missing.
            InvalidContent: If neither text nor an image was supplied.
            PersistenceError: If the store rejects the write.
        """
        _require(sender_id=sender_id, recipient_id=recipient_id)
        content = classify_content(body, image_path)

        message = self.repository.create(
            sender_id=sender_id,
            recipient_id=recipient_id,
            content=content,
        )
        logger.info("Stored %s message %s", content.type, message.id)

        if self.notifier is not None:
            payload = MessageRecord.from_message(message).model_dump(mode="json", exclude_none=True)
            await self.notifier.notify(recipient_id, payload)
        return message

    def history(self, viewer_id: str, peer_id: str) -> list[HistoryEntry]:
        """Return the pair's messages oldest first, flagged by authorship."""
        _require(viewer_id=viewer_id, peer_id=peer_id)
        return [self._project(m, viewer_id) for m in self.repository.list_between(viewer_id, peer_id)]

    def remove(self, message_id: int, requester_id: str) -> bool:
        """Delete a message owned by ``requester_id`` and its attachment.

        Raises:
            NotFound: If the message does not exist.
            Forbidden: If the requester did not send the message.
        """
        _require(requester_id=requester_id)
        message = self.repository.get_by_id(message_id)
        if message is None:
            raise NotFound("Message not found")
        if message.sender_id != requester_id:
            raise Forbidden("You can only delete your own messages")

        if message.image_path and self.media is not None:
            self.media.delete(message.image_path)

        if not self.repository.delete(message_id):
            raise NotFound("Message not found")
        logger.info("Deleted message %s", message_id)
        return True

    def conversations(self, viewer_id: str) -> list[ConversationSummary]:
        """Return one summary per peer the viewer has exchanged messages with."""
        _require(viewer_id=viewer_id)
        return self.aggregator.summarize(viewer_id, self.repository.list_for_participant(viewer_id))

    def search(self, viewer_id: str, term: str) -> list[HistoryEntry]:
        """Return the viewer's messages containing ``term``, newest first."""
        _require(viewer_id=viewer_id, term=term.strip() if term else term)
        return [self._project(m, viewer_id) for m in self.repository.search(viewer_id, term.strip())]

    def stats(self, viewer_id: str) -> MessageStats:
        _require(viewer_id=viewer_id)
        return self.repository.stats(viewer_id)

    @staticmethod
    def _project(message: Message, viewer_id: str) -> HistoryEntry:
        return HistoryEntry(
            id=message.id,
            content=MessageContent.from_message(message),
            created_at=as_utc(message.created_at),
            from_self=message.sender_id == viewer_id,
        )
