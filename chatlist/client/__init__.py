from __future__ import annotations

from .controller import (
    CONVERSATION_ROUTE,
    EXPLORE_ROUTE,
    ChatListController,
    ChatListView,
    EmptyState,
)
from .http_client import HttpAggregationClient
from .ports import AggregationClient, CurrentUser, IdentityProvider, Navigator, Notifier
from .states import ChatListState, ChatRow, Failed, Idle, Loaded, Loading

__all__ = [
    "AggregationClient",
    "CONVERSATION_ROUTE",
    "ChatListController",
    "ChatListState",
    "ChatListView",
    "ChatRow",
    "CurrentUser",
    "EXPLORE_ROUTE",
    "EmptyState",
    "Failed",
    "HttpAggregationClient",
    "IdentityProvider",
    "Idle",
    "Loaded",
    "Loading",
    "Navigator",
    "Notifier",
]
