"""Tests for image attachment storage."""

import pytest

from parley.core.errors import MediaTooLarge, UnsupportedMediaType
from parley.services.media import MediaStorage


def test_save_returns_server_relative_path(media: MediaStorage) -> None:
    path = media.save(b"GIF89a", "Photo.GIF", "image/gif")

    assert path.startswith("/uploads/image-")
    assert path.endswith(".gif")
    assert media.resolve(path).read_bytes() == b"GIF89a"


def test_saved_names_are_unique(media: MediaStorage) -> None:
    paths = {media.save(b"x", "a.png", "image/png") for _ in range(5)}
    assert len(paths) == 5


def test_rejects_non_images(media: MediaStorage) -> None:
    with pytest.raises(UnsupportedMediaType):
        media.save(b"%PDF", "doc.pdf", "application/pdf")
    with pytest.raises(UnsupportedMediaType):
        media.save(b"x", "blob", None)


def test_rejects_oversized_uploads(tmp_path) -> None:
    storage = MediaStorage(root=tmp_path, max_bytes=4)

    with pytest.raises(MediaTooLarge):
        storage.save(b"12345", "big.png", "image/png")
    assert list(tmp_path.iterdir()) == []


def test_delete_is_best_effort(media: MediaStorage) -> None:
    path = media.save(b"x", "a.png", "image/png")

    assert media.delete(path) is True
    assert media.delete(path) is False


def test_resolve_stays_inside_root(media: MediaStorage) -> None:
    resolved = media.resolve("/uploads/../../etc/passwd")
    assert resolved.parent == media.root
