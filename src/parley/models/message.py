# src/parley/models/message.py
"""Model describing a direct message between two users."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from parley.db.session import Base
from parley.db.time import utcnow

CONTENT_TYPE_TEXT = "text"
CONTENT_TYPE_IMAGE = "image"
CONTENT_TYPE_MIXED = "mixed"
CONTENT_TYPES = (CONTENT_TYPE_TEXT, CONTENT_TYPE_IMAGE, CONTENT_TYPE_MIXED)


class Message(Base):
    """A text and/or image message exchanged between two participants.

    Participants are stored positionally: slot A holds the sender and slot B
    the recipient at creation time. The content type is computed once when the
    message is created and is never re-derived from ``body``/``image_path``.
    """

    __tablename__ = "message"
    __table_args__ = (
        Index("ix_message_participants", "participant_a", "participant_b"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    participant_a: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    participant_b: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    sender_id: Mapped[str] = mapped_column(String(128), nullable=False)

    content_type: Mapped[str] = mapped_column(String(16), nullable=False)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Server-relative reference such as "/uploads/image-1700000000-42.png".
    image_path: Mapped[str | None] = mapped_column(String(512), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )

    @property
    def participants(self) -> tuple[str, str]:
        """Return the participant pair in stored slot order."""
        return (self.participant_a, self.participant_b)

    def involves(self, user_id: str) -> bool:
        """Return True if ``user_id`` occupies either participant slot, compared as strings."""
        return str(user_id) in {str(p) for p in self.participants}
