from __future__ import annotations

import base64
import binascii
import json
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from chatlist.core.config import get_settings
from chatlist.db.session import get_db_session
from chatlist.features.conversations import (
    ConversationListCursor,
    ConversationSummary,
    ConversationsDomainError,
    LatestMessageRecord,
    UnauthorizedError,
    UnavailableError,
    get_latest_messages,
    list_conversations,
)
from chatlist.features.conversations.constants import MAX_PAGE_SIZE

router = APIRouter(prefix="/api", tags=["conversations"])


class ConversationSummaryResponse(BaseModel):
    counterpart_id: str
    counterpart_display_name: str
    last_message_id: str
    last_message_content: str
    last_message_timestamp: datetime
    counterpart_avatar_url: str | None


class ConversationListPageResponse(BaseModel):
    items: list[ConversationSummaryResponse]
    next_cursor: str | None
    has_more: bool


class LatestMessagesRequest(BaseModel):
    current_user_id: str | None = None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_summary_response(item: ConversationSummary) -> ConversationSummaryResponse:
    return ConversationSummaryResponse(
        counterpart_id=str(item.counterpart_id),
        counterpart_display_name=item.counterpart_display_name,
        last_message_id=str(item.last_message_id),
        last_message_content=item.last_message_content,
        last_message_timestamp=_as_utc(item.last_message_timestamp),
        counterpart_avatar_url=item.counterpart_avatar_url,
    )


def _encode_cursor(cursor: ConversationListCursor) -> str:
    payload = {
        "sort_at": _as_utc(cursor.sort_at).isoformat(),
        "message_id": str(cursor.message_id),
    }
    encoded = base64.urlsafe_b64encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    return encoded.decode("ascii").rstrip("=")


def _decode_cursor(raw_cursor: str) -> ConversationListCursor:
    padded = raw_cursor + "=" * (-len(raw_cursor) % 4)
    try:
        decoded = base64.urlsafe_b64decode(padded.encode("ascii"))
        payload = json.loads(decoded.decode("utf-8"))
        sort_at = datetime.fromisoformat(payload["sort_at"])
        message_id = UUID(payload["message_id"])
    except (ValueError, KeyError, TypeError, json.JSONDecodeError, binascii.Error) as exc:
        raise ValueError("Invalid pagination cursor.") from exc

    if sort_at.tzinfo is None:
        raise ValueError("Invalid pagination cursor.")

    return ConversationListCursor(sort_at=sort_at, message_id=message_id)


def _to_http_error(exc: ConversationsDomainError) -> HTTPException:
    if isinstance(exc, UnauthorizedError):
        return HTTPException(status_code=401, detail=str(exc))
    if isinstance(exc, UnavailableError):
        return HTTPException(status_code=503, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


@router.get("/conversations", response_model=ConversationListPageResponse)
async def get_conversations(
    limit: int | None = Query(default=None, ge=1, le=MAX_PAGE_SIZE),
    cursor: str | None = Query(default=None),
    user_id: str | None = Header(default=None, alias="X-User-Id"),
    session: AsyncSession = Depends(get_db_session),
) -> ConversationListPageResponse:
    page_size = limit or get_settings().conversations_default_limit
    decoded_cursor: ConversationListCursor | None = None
    if cursor:
        try:
            decoded_cursor = _decode_cursor(cursor)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        rows = await list_conversations(
            session,
            requesting_user_id=user_id,
            limit=page_size,
            cursor=decoded_cursor,
        )
    except ConversationsDomainError as exc:
        raise _to_http_error(exc) from exc

    has_more = len(rows) > page_size
    page_rows = rows[:page_size]
    next_cursor = None
    if has_more and page_rows:
        last_item = page_rows[-1]
        next_cursor = _encode_cursor(
            ConversationListCursor(
                sort_at=last_item.last_message_timestamp,
                message_id=last_item.last_message_id,
            )
        )
    return ConversationListPageResponse(
        items=[_to_summary_response(item) for item in page_rows],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.post("/rpc/get_latest_messages", response_model=list[LatestMessageRecord])
async def rpc_get_latest_messages(
    payload: LatestMessagesRequest,
    session: AsyncSession = Depends(get_db_session),
) -> list[LatestMessageRecord]:
    try:
        records = await get_latest_messages(
            session,
            current_user_id=payload.current_user_id,
        )
    except ConversationsDomainError as exc:
        raise _to_http_error(exc) from exc
    return [
        record.model_copy(update={"timestamp": _as_utc(record.timestamp)})
        for record in records
    ]
