"""Error taxonomy for the messaging core.

Every error carries the HTTP status the API layer should answer with, so the
boundary can translate them without inspecting individual types.
"""

from __future__ import annotations

from fastapi import status


class ChatError(Exception):
    """Base class for all errors raised by the messaging core."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(ChatError):
    """A required identifier or input is missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidContent(ValidationError):
    """A message carries neither text nor an image."""


class UnsupportedMediaType(ValidationError):
    """An uploaded attachment is not an image."""

    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


class MediaTooLarge(ValidationError):
    """An uploaded attachment exceeds the configured size limit."""

    status_code = 413


class NotFound(ChatError):
    """The referenced message does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(ChatError):
    """The requester does not own the message."""

    status_code = status.HTTP_403_FORBIDDEN


class PersistenceError(ChatError):
    """The storage layer failed; the original error is chained as the cause."""


__all__ = [
    "ChatError",
    "Forbidden",
    "InvalidContent",
    "MediaTooLarge",
    "NotFound",
    "PersistenceError",
    "UnsupportedMediaType",
    "ValidationError",
]
