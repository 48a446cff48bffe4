"""Per-peer conversation summaries built from the flat message store.

The aggregation runs in two passes over the viewer's messages:

1. filter to messages where the viewer is a participant and group them by peer;
2. reduce every group to its most recent message and a message count.

Which participant counts as the peer is decided by a pluggable rule:

- ``semantic`` takes the set difference ``participants - {viewer}``, so slot
  order never matters;
- ``positional`` reproduces the legacy rule: the peer is slot B when slot A
  literally equals the viewer id, and slot A otherwise.

The two rules agree whenever ids are stored in one canonical representation.
They diverge when slot A holds the viewer under a different representation of
the same id (an integer where the caller passes a string, say): ``positional``
then groups the message under the viewer's own id.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from parley.db.time import as_utc
from parley.models.message import Message
from parley.services.content import MessageContent

PeerRule = Literal["semantic", "positional"]
PeerSelector = Callable[[Message, str], str]


@dataclass(frozen=True)
class ConversationSummary:
    """Derived view of one conversation as seen by a viewer."""

    peer_id: str
    last_message_preview: str
    last_message_time: datetime
    message_count: int


def semantic_peer(message: Message, viewer_id: str) -> str:
    """Return the participant that is not the viewer, regardless of slot."""
    others = [str(p) for p in message.participants if str(p) != str(viewer_id)]
    # A self-addressed message has no other participant.
    return others[0] if others else str(viewer_id)


def positional_peer(message: Message, viewer_id: str) -> str:
    """Return slot B if slot A literally equals the viewer, else slot A."""
    if message.participant_a == viewer_id:
        return message.participant_b
    return message.participant_a


PEER_SELECTORS: dict[str, PeerSelector] = {
    "semantic": semantic_peer,
    "positional": positional_peer,
}


def _recency_key(message: Message) -> tuple[datetime, int]:
    return (as_utc(message.created_at), message.id or 0)


class ConversationAggregator:
    """Group a viewer's messages by peer and summarize each group."""

    def __init__(self, peer_rule: PeerRule = "semantic") -> None:
        try:
            self._select_peer = PEER_SELECTORS[peer_rule]
        except KeyError as exc:
            raise ValueError(f"Unknown peer rule: {peer_rule!r}") from exc
        self.peer_rule = peer_rule

    def peer_of(self, message: Message, viewer_id: str) -> str:
        """Return the peer of ``message`` from the viewer's point of view."""
        return self._select_peer(message, viewer_id)

    def group(self, viewer_id: str, messages: Iterable[Message]) -> dict[str, list[Message]]:
        """Filter to the viewer's messages and partition them by peer."""
        groups: dict[str, list[Message]] = {}
        for message in messages:
            if not message.involves(viewer_id):
                continue
            groups.setdefault(self.peer_of(message, viewer_id), []).append(message)
        return groups

    def summarize(self, viewer_id: str, messages: Iterable[Message]) -> list[ConversationSummary]:
        """Return one summary per distinct peer.

        Within a group the most recent message wins; equal timestamps are
        broken by the higher (later inserted) id. Callers must not rely on
        the order of the returned list.
        """
        summaries = []
        for peer_id, group in self.group(viewer_id, messages).items():
            latest = max(group, key=_recency_key)
            summaries.append(
                ConversationSummary(
                    peer_id=peer_id,
                    last_message_preview=MessageContent.from_message(latest).preview,
                    last_message_time=as_utc(latest.created_at),
                    message_count=len(group),
                )
            )
        summaries.sort(key=lambda s: s.last_message_time, reverse=True)
        return summaries
