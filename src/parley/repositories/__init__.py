"""Repository classes wrapping database access."""

from .message_repo import MessageRepository, MessageStats

__all__ = ["MessageRepository", "MessageStats"]
