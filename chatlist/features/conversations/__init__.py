from __future__ import annotations

from .constants import UNKNOWN_DISPLAY_NAME
from .errors import (
    ConversationsDomainError,
    MalformedResponseError,
    UnauthorizedError,
    UnavailableError,
)
from .selection import counterpart_of, latest_per_counterpart, order_by_recency
from .service import get_latest_messages, list_conversations, parse_user_id
from .types import (
    ConversationListCursor,
    ConversationSummary,
    LatestMessageRecord,
    LatestMessageRow,
)

__all__ = [
    "ConversationListCursor",
    "ConversationSummary",
    "ConversationsDomainError",
    "LatestMessageRecord",
    "LatestMessageRow",
    "MalformedResponseError",
    "UNKNOWN_DISPLAY_NAME",
    "UnauthorizedError",
    "UnavailableError",
    "counterpart_of",
    "get_latest_messages",
    "latest_per_counterpart",
    "list_conversations",
    "order_by_recency",
    "parse_user_id",
]
