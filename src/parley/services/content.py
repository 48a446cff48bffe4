"""Content classification for outgoing messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from parley.core.errors import InvalidContent
from parley.models.message import (
    CONTENT_TYPE_IMAGE,
    CONTENT_TYPE_MIXED,
    CONTENT_TYPE_TEXT,
    Message,
)

# Preview shown for a conversation whose latest message is image-only.
IMAGE_PREVIEW_MARKER = "📷 Image"
# Appended to the body when the latest message carries both text and an image.
MIXED_PREVIEW_SUFFIX = " 📷"


@dataclass(frozen=True)
class MessageContent:
    """Normalized message payload tagged with its content type."""

    type: str
    text: str | None = None
    image: str | None = None

    @property
    def preview(self) -> str:
        """Return the display string used in conversation summaries."""
        if self.type == CONTENT_TYPE_TEXT:
            return self.text or ""
        if self.type == CONTENT_TYPE_IMAGE:
            return IMAGE_PREVIEW_MARKER
        return f"{self.text or ''}{MIXED_PREVIEW_SUFFIX}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{type, text?, image?}`` omitting absent fields."""
        data: dict[str, Any] = {"type": self.type}
        if self.text is not None:
            data["text"] = self.text
        if self.image is not None:
            data["image"] = self.image
        return data

    @classmethod
    def from_message(cls, message: Message) -> MessageContent:
        """Rebuild the content value from a stored message using its stored tag."""
        return cls(type=message.content_type, text=message.body, image=message.image_path)


def _has_text(body: str | None) -> bool:
    return body is not None and body.strip() != ""


def classify_content(body: str | None, image_path: str | None) -> MessageContent:
    """Derive the content type tag from which inputs are present.

    Args:
        body: Optional message text. Whitespace-only text counts as absent.
        image_path: Optional server-relative reference to a stored image.

    Returns:
        ``Mixed`` when both are present, ``Image`` for an image alone and
        ``Text`` otherwise.

    Raises:
        InvalidContent: If neither text nor an image was supplied.
    """
    has_text = _has_text(body)
    has_image = bool(image_path)

    if not has_text and not has_image:
        raise InvalidContent("Message text or image is required")

    if has_text and has_image:
        return MessageContent(type=CONTENT_TYPE_MIXED, text=body, image=image_path)
    if has_image:
        return MessageContent(type=CONTENT_TYPE_IMAGE, image=image_path)
    return MessageContent(type=CONTENT_TYPE_TEXT, text=body)
