"""Local filesystem storage for message image attachments."""

from __future__ import annotations

import logging
import secrets
import time
from pathlib import Path, PurePosixPath

from parley.core.errors import MediaTooLarge, UnsupportedMediaType
from parley.core.settings import settings

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"


class MediaStorage:
    """Stores uploaded images and removes them when their message is deleted.

    Files live flat under ``root``; callers only ever see the server-relative
    path ``/uploads/<filename>``.
    """

    def __init__(self, root: str | Path | None = None, max_bytes: int | None = None) -> None:
        self.root = Path(root if root is not None else settings.upload_dir)
        self.max_bytes = max_bytes if max_bytes is not None else settings.max_upload_bytes

    def save(self, data: bytes, filename: str | None, content_type: str | None) -> str:
        """Persist an uploaded image and return its server-relative path.

        Raises:
            UnsupportedMediaType: If the upload is not an ``image/*`` type.
            MediaTooLarge: If the upload exceeds ``max_bytes``.
        """
        if not content_type or not content_type.startswith("image/"):
            raise UnsupportedMediaType("Only image files are allowed")
        if len(data) > self.max_bytes:
            raise MediaTooLarge(f"Image exceeds the {self.max_bytes} byte limit")

        suffix = PurePosixPath(filename or "").suffix.lower()
        name = f"image-{int(time.time() * 1000)}-{secrets.token_hex(4)}{suffix}"

        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / name).write_bytes(data)
        logger.debug("Stored upload %s (%d bytes)", name, len(data))
        return f"{PUBLIC_PREFIX}/{name}"

    def resolve(self, image_path: str) -> Path:
        """Map a server-relative path to the file on disk.

        Only the final path component is used, so references cannot escape
        the storage root.
        """
        return self.root / PurePosixPath(image_path).name

    def delete(self, image_path: str) -> bool:
        """Remove a stored image; a missing file is not an error."""
        try:
            self.resolve(image_path).unlink()
        except FileNotFoundError:
            logger.debug("Attachment %s already gone", image_path)
            return False
        return True
