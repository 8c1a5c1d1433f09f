from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.exc import DBAPIError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from chatlist.features.shared.text import clean_optional_text, log_cleanup_stats

from . import repo
from .constants import MAX_PAGE_SIZE, UNKNOWN_DISPLAY_NAME
from .errors import UnauthorizedError, UnavailableError
from .types import ConversationListCursor, ConversationSummary, LatestMessageRecord, LatestMessageRow

logger = logging.getLogger(__name__)


def parse_user_id(value: UUID | str | None) -> UUID:
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str) or not value.strip():
        raise UnauthorizedError("Missing user identity.")
    try:
        return UUID(value.strip())
    except ValueError as exc:
        raise UnauthorizedError("Invalid user identity.") from exc


def _clean_display_name(name: str | None) -> str | None:
    cleaned, stats = clean_optional_text(name, single_line=True)
    log_cleanup_stats(logger, location="conversations.display_name", stats=stats)
    return cleaned or None


async def _fetch_latest_rows(
    session: AsyncSession,
    *,
    user_id: UUID | str | None,
    limit: int | None,
    cursor: ConversationListCursor | None,
) -> list[LatestMessageRow]:
    user_uuid = parse_user_id(user_id)
    if limit is not None and not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}.")

    try:
        profile = await repo.get_profile(session, user_uuid)
        if profile is None:
            raise UnauthorizedError(f"Unknown user '{user_uuid}'.")
        rows = await repo.list_latest_messages(
            session,
            user_id=user_uuid,
            limit=limit,
            cursor=cursor,
        )
    except (DBAPIError, PoolTimeoutError) as exc:
        logger.warning("Message store unavailable while listing conversations.", exc_info=True)
        raise UnavailableError("Message store is unavailable.") from exc

    logger.debug("Aggregated %d conversation(s) for user %s.", len(rows), user_uuid)
    return rows


def _to_summary(row: LatestMessageRow) -> ConversationSummary:
    return ConversationSummary(
        counterpart_id=row.counterpart_id,
        counterpart_display_name=_clean_display_name(row.display_name) or UNKNOWN_DISPLAY_NAME,
        last_message_id=row.message_id,
        last_message_content=row.content,
        last_message_timestamp=row.created_at,
        counterpart_avatar_url=row.avatar_url or None,
    )


def _to_record(row: LatestMessageRow) -> LatestMessageRecord:
    return LatestMessageRecord(
        other_user_id=str(row.counterpart_id),
        name=_clean_display_name(row.display_name),
        content=row.content,
        timestamp=row.created_at,
        profile_picture=row.avatar_url or None,
    )


async def list_conversations(
    session: AsyncSession,
    *,
    requesting_user_id: UUID | str | None,
    limit: int | None = None,
    cursor: ConversationListCursor | None = None,
) -> list[ConversationSummary]:
    rows = await _fetch_latest_rows(
        session,
        user_id=requesting_user_id,
        limit=limit,
        cursor=cursor,
    )
    return [_to_summary(row) for row in rows]


async def get_latest_messages(
    session: AsyncSession,
    *,
    current_user_id: UUID | str | None,
) -> list[LatestMessageRecord]:
    rows = await _fetch_latest_rows(
        session,
        user_id=current_user_id,
        limit=None,
        cursor=None,
    )
    return [_to_record(row) for row in rows]
