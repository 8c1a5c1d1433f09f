from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone, tzinfo
from typing import Any

from pydantic import ValidationError

from chatlist.features.conversations.constants import UNKNOWN_DISPLAY_NAME
from chatlist.features.conversations.errors import MalformedResponseError
from chatlist.features.conversations.types import LatestMessageRecord
from chatlist.features.shared.text import clean_text, log_cleanup_stats, truncate_text

from .states import ChatRow

logger = logging.getLogger(__name__)

PREVIEW_MAX_LENGTH = 120


def coerce_record(item: LatestMessageRecord | Mapping[str, Any]) -> LatestMessageRecord:
    if isinstance(item, LatestMessageRecord):
        return item
    try:
        return LatestMessageRecord.model_validate(item)
    except ValidationError as exc:
        raise MalformedResponseError(f"Unexpected conversation record shape: {exc}") from exc


def build_message_preview(content: str, *, max_length: int = PREVIEW_MAX_LENGTH) -> str:
    """Collapse a message body into a single display line."""
    cleaned, stats = clean_text(content, single_line=True)
    log_cleanup_stats(logger, location="client.message_preview", stats=stats)
    return truncate_text(cleaned, max_length=max_length)


def format_timestamp(
    value: datetime,
    *,
    fmt: str,
    display_timezone: tzinfo | None = None,
) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(display_timezone).strftime(fmt)


def to_chat_row(
    item: LatestMessageRecord | Mapping[str, Any],
    *,
    default_avatar_url: str,
    timestamp_format: str,
    display_timezone: tzinfo | None = None,
) -> ChatRow:
    record = coerce_record(item)
    return ChatRow(
        user_id=record.other_user_id,
        name=record.name or UNKNOWN_DISPLAY_NAME,
        last_message=build_message_preview(record.content),
        timestamp=format_timestamp(
            record.timestamp,
            fmt=timestamp_format,
            display_timezone=display_timezone,
        ),
        profile_picture=record.profile_picture or default_avatar_url,
    )
