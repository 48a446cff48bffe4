"""Data access helpers for working with messages."""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import and_, case, delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from parley.core.errors import PersistenceError
from parley.models.message import CONTENT_TYPE_IMAGE, CONTENT_TYPE_MIXED, Message
from parley.services.content import MessageContent

__all__ = ["MessageRepository", "MessageStats"]


@dataclass(frozen=True)
class MessageStats:
    """Message counts for a single user."""

    total_messages: int = 0
    sent_messages: int = 0
    received_messages: int = 0
    image_messages: int = 0


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class MessageRepository:
    """Thin wrapper around database access for message entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def create(self, *, sender_id: str, recipient_id: str, content: MessageContent) -> Message:
        """Insert a new message and return the persisted ORM instance.

        Args:
            sender_id: Identifier of the sending user; stored in slot A.
            recipient_id: Identifier of the receiving user; stored in slot B.
            content: Classified content whose tag is stored as-is.

        Raises:
            PersistenceError: If the database rejects the write.
        """
        message = Message(
            participant_a=sender_id,
            participant_b=recipient_id,
            sender_id=sender_id,
            content_type=content.type,
            body=content.text,
            image_path=content.image,
        )
        try:
            self.session.add(message)
            self.session.commit()
            self.session.refresh(message)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError("Failed to store message") from exc
        return message

    def get_by_id(self, message_id: int) -> Message | None:
        """Return a message by identifier."""
        return self._scalar_first(select(Message).where(Message.id == message_id))

    def list_between(self, user_a: str, user_b: str) -> list[Message]:
        """Return the full history for a pair, oldest first."""
        stmt = (
            select(Message)
            .where(
                or_(
                    and_(Message.participant_a == user_a, Message.participant_b == user_b),
                    and_(Message.participant_a == user_b, Message.participant_b == user_a),
                )
            )
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        return self._scalars(stmt)

    def list_for_participant(self, user_id: str) -> list[Message]:
        """Return every message in which the user occupies either slot."""
        stmt = select(Message).where(
            or_(Message.participant_a == user_id, Message.participant_b == user_id)
        )
        return self._scalars(stmt)

    def search(self, user_id: str, term: str) -> list[Message]:
        """Return the user's messages whose text contains ``term``, newest first."""
        pattern = f"%{_escape_like(term)}%"
        stmt = (
            select(Message)
            .where(
                or_(Message.participant_a == user_id, Message.participant_b == user_id),
                Message.body.is_not(None),
                Message.body.ilike(pattern, escape="\\"),
            )
            .order_by(Message.created_at.desc(), Message.id.desc())
        )
        return self._scalars(stmt)

    def stats(self, user_id: str) -> MessageStats:
        """Return total/sent/received/image counts for the user."""
        is_sender = Message.sender_id == user_id
        has_image = Message.content_type.in_((CONTENT_TYPE_IMAGE, CONTENT_TYPE_MIXED))
        stmt = select(
            func.count(Message.id),
            func.coalesce(func.sum(case((is_sender, 1), else_=0)), 0),
            func.coalesce(func.sum(case((is_sender, 0), else_=1)), 0),
            func.coalesce(func.sum(case((has_image, 1), else_=0)), 0),
        ).where(or_(Message.participant_a == user_id, Message.participant_b == user_id))
        try:
            total, sent, received, images = self.session.execute(stmt).one()
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to compute message statistics") from exc
        return MessageStats(
            total_messages=int(total),
            sent_messages=int(sent),
            received_messages=int(received),
            image_messages=int(images),
        )

    def count(self) -> int:
        """Return the number of stored messages."""
        try:
            return int(self.session.execute(select(func.count(Message.id))).scalar_one())
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to count messages") from exc

    def delete(self, message_id: int) -> bool:
        """Delete a message by id and report whether a row existed.

        Attached files are left alone; removing them is the caller's job.
        """
        try:
            result = self.session.execute(delete(Message).where(Message.id == message_id))
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError("Failed to delete message") from exc
        return bool(result.rowcount)

    def _scalars(self, stmt) -> list[Message]:
        try:
            return list(self.session.execute(stmt).scalars())
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to read messages") from exc

    def _scalar_first(self, stmt) -> Message | None:
        try:
            return self.session.execute(stmt).scalars().first()
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to read message") from exc
