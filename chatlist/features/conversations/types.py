from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class LatestMessageRow:
    """One rank-1 row of the per-counterpart reduction, before name fallback."""

    counterpart_id: UUID
    message_id: UUID
    content: str
    created_at: datetime
    display_name: str | None
    avatar_url: str | None


@dataclass(frozen=True)
class ConversationSummary:
    counterpart_id: UUID
    counterpart_display_name: str
    last_message_id: UUID
    last_message_content: str
    last_message_timestamp: datetime
    counterpart_avatar_url: str | None


@dataclass(frozen=True)
class ConversationListCursor:
    sort_at: datetime
    message_id: UUID


class LatestMessageRecord(BaseModel):
    """Wire shape returned by the ``get_latest_messages`` procedure."""

    model_config = ConfigDict(extra="ignore")

    other_user_id: str
    name: str | None
    content: str
    timestamp: datetime
    profile_picture: str | None
