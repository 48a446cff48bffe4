"""Tests for the message service."""

import pytest

from parley.core.errors import Forbidden, InvalidContent, NotFound, PersistenceError, ValidationError
from parley.services.content import IMAGE_PREVIEW_MARKER, MIXED_PREVIEW_SUFFIX


@pytest.mark.asyncio
async def test_send_text(service, repository) -> None:
    message = await service.send("u1", "u2", body="hi")

    assert message.content_type == "text"
    assert message.body == "hi"
    assert message.image_path is None
    assert repository.get_by_id(message.id) is not None


@pytest.mark.asyncio
async def test_send_mixed_preview(service) -> None:
    await service.send("u1", "u2", body="look", image_path="/uploads/a.png")

    (summary,) = service.conversations("u1")

    assert summary.last_message_preview == "look" + MIXED_PREVIEW_SUFFIX


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("sender", "recipient"),
    [("", "u2"), ("u1", ""), (None, "u2")],
)
async def test_send_requires_both_ids(service, repository, notifier, sender, recipient) -> None:
    with pytest.raises(ValidationError):
        await service.send(sender, recipient, body="hi")

    assert repository.count() == 0
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_send_without_content_persists_nothing(service, repository, notifier) -> None:
    with pytest.raises(InvalidContent):
        await service.send("u1", "u2")

    assert repository.count() == 0
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_send_notifies_recipient_with_canonical_record(service, notifier) -> None:
    message = await service.send("u1", "u2", body="hi")

    assert len(notifier.calls) == 1
    recipient, payload = notifier.calls[0]
    assert recipient == "u2"
    assert payload["id"] == message.id
    assert payload["content"] == {"type": "text", "text": "hi"}
    assert payload["sender"] == "u1"
    assert payload["participants"] == ["u1", "u2"]


@pytest.mark.asyncio
async def test_send_does_not_notify_when_store_fails(service, repository, notifier, mocker) -> None:
    mocker.patch.object(repository, "create", side_effect=PersistenceError("Failed to store message"))

    with pytest.raises(PersistenceError):
        await service.send("u1", "u2", body="hi")

    assert notifier.calls == []


@pytest.mark.asyncio
async def test_history_is_ordered_and_flags_own_messages(service) -> None:
    for sender, recipient, body in [("A", "B", "1"), ("B", "A", "2"), ("A", "B", "3"), ("A", "C", "x")]:
        await service.send(sender, recipient, body=body)

    history = service.history("A", "B")

    assert [entry.content.text for entry in history] == ["1", "2", "3"]
    assert [entry.from_self for entry in history] == [True, False, True]
    assert all(a.created_at <= b.created_at for a, b in zip(history, history[1:]))


@pytest.mark.asyncio
async def test_history_is_repeatable(service) -> None:
    await service.send("A", "B", body="1")
    await service.send("B", "A", body="2")

    assert service.history("A", "B") == service.history("A", "B")


def test_history_requires_ids(service) -> None:
    with pytest.raises(ValidationError):
        service.history("A", "")


@pytest.mark.asyncio
async def test_remove_by_non_sender_is_forbidden(service, repository) -> None:
    message = await service.send("A", "B", body="mine")

    with pytest.raises(Forbidden):
        service.remove(message.id, "B")

    assert repository.get_by_id(message.id) is not None


@pytest.mark.asyncio
async def test_remove_by_sender(service) -> None:
    message = await service.send("A", "B", body="oops")
    keep = await service.send("B", "A", body="reply")

    assert service.remove(message.id, "A") is True
    assert [entry.id for entry in service.history("A", "B")] == [keep.id]


def test_remove_missing_message(service) -> None:
    with pytest.raises(NotFound):
        service.remove(999, "A")


@pytest.mark.asyncio
async def test_remove_deletes_attachment(service, media) -> None:
    image_path = media.save(b"\x89PNG", "cat.png", "image/png")
    message = await service.send("A", "B", image_path=image_path)

    service.remove(message.id, "A")

    assert not media.resolve(image_path).exists()


@pytest.mark.asyncio
async def test_remove_tolerates_missing_attachment(service, repository) -> None:
    message = await service.send("A", "B", image_path="/uploads/already-gone.png")

    assert service.remove(message.id, "A") is True
    assert repository.get_by_id(message.id) is None


@pytest.mark.asyncio
async def test_conversations_counts_per_peer(service) -> None:
    await service.send("A", "B", body="b1")
    await service.send("B", "A", body="b2")
    await service.send("A", "B", body="b3")
    await service.send("C", "A", body="c1")

    summaries = {s.peer_id: s for s in service.conversations("A")}

    assert set(summaries) == {"B", "C"}
    assert summaries["B"].message_count == 3
    assert summaries["B"].last_message_preview == "b3"
    assert summaries["C"].message_count == 1


@pytest.mark.asyncio
async def test_two_user_scenario(service) -> None:
    first = await service.send("u1", "u2", body="hi")
    second = await service.send("u2", "u1", image_path="img1.png")

    assert first.content_type == "text" and first.body == "hi"
    assert second.content_type == "image" and second.image_path == "img1.png"

    history = service.history("u1", "u2")
    assert [entry.id for entry in history] == [first.id, second.id]
    assert [entry.from_self for entry in history] == [True, False]
    assert history[0].content.to_dict() == {"type": "text", "text": "hi"}
    assert history[1].content.to_dict() == {"type": "image", "image": "img1.png"}

    (summary,) = service.conversations("u1")
    assert summary.peer_id == "u2"
    assert summary.message_count == 2
    assert summary.last_message_preview == IMAGE_PREVIEW_MARKER


@pytest.mark.asyncio
async def test_search_and_stats(service) -> None:
    await service.send("A", "B", body="Dinner tonight?")
    await service.send("B", "A", body="dinner sounds good", image_path="/uploads/menu.png")
    await service.send("A", "C", image_path="/uploads/cat.png")

    results = service.search("A", "DINNER")
    assert [entry.from_self for entry in results] == [False, True]

    stats = service.stats("A")
    assert stats.total_messages == 3
    assert stats.sent_messages == 2
    assert stats.received_messages == 1
    assert stats.image_messages == 2


def test_search_requires_term(service) -> None:
    with pytest.raises(ValidationError):
        service.search("A", "   ")


@pytest.mark.asyncio
async def test_remove_reports_message_deleted_concurrently(service, repository, mocker) -> None:
    message = await service.send("A", "B", body="racing")
    mocker.patch.object(repository, "delete", return_value=False)

    with pytest.raises(NotFound):
        service.remove(message.id, "A")
