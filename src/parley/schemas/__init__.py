"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .message import (
    ConversationListResponse,
    ConversationOut,
    HistoryEntryOut,
    MessageContentOut,
    MessageDeleted,
    MessageListResponse,
    MessageRecord,
    MessageStatsOut,
)

__all__ = [
    "ConversationListResponse", "ConversationOut",
    "HistoryEntryOut", "MessageContentOut",
    "MessageDeleted", "MessageListResponse",
    "MessageRecord", "MessageStatsOut",
]
