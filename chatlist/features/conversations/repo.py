from __future__ import annotations

from uuid import UUID

from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from chatlist.db.models import Message, UserProfile

from .types import ConversationListCursor, LatestMessageRow


async def get_profile(session: AsyncSession, user_id: UUID) -> UserProfile | None:
    return await session.get(UserProfile, user_id)


def _counterpart_expression(user_id: UUID):
    return case(
        (Message.sender_id == user_id, Message.recipient_id),
        else_=Message.sender_id,
    )


async def list_latest_messages(
    session: AsyncSession,
    *,
    user_id: UUID,
    limit: int | None = None,
    cursor: ConversationListCursor | None = None,
) -> list[LatestMessageRow]:
    """Return the newest message per counterpart of ``user_id``, newest first.

    The grouping runs inside the database: messages are partitioned by
    counterpart and ranked by ``(created_at, id)`` descending, and only rank 1
    survives. With ``limit`` set, ``limit + 1`` rows are fetched so callers can
    tell whether another page exists.
    """
    counterpart = _counterpart_expression(user_id)
    ranked = (
        select(
            Message.id.label("message_id"),
            counterpart.label("counterpart_id"),
            Message.content.label("content"),
            Message.created_at.label("created_at"),
            func.row_number()
            .over(
                partition_by=counterpart,
                order_by=(Message.created_at.desc(), Message.id.desc()),
            )
            .label("recency_rank"),
        )
        .where(
            or_(Message.sender_id == user_id, Message.recipient_id == user_id),
            Message.sender_id != Message.recipient_id,
        )
        .subquery("ranked_messages")
    )

    stmt = (
        select(
            ranked.c.counterpart_id,
            ranked.c.message_id,
            ranked.c.content,
            ranked.c.created_at,
            UserProfile.display_name,
            UserProfile.avatar_url,
        )
        .select_from(ranked)
        .outerjoin(UserProfile, UserProfile.id == ranked.c.counterpart_id)
        .where(ranked.c.recency_rank == 1)
        .order_by(ranked.c.created_at.desc(), ranked.c.message_id.desc())
    )
    if cursor is not None:
        stmt = stmt.where(
            or_(
                ranked.c.created_at < cursor.sort_at,
                and_(
                    ranked.c.created_at == cursor.sort_at,
                    ranked.c.message_id < cursor.message_id,
                ),
            )
        )
    if limit is not None:
        stmt = stmt.limit(limit + 1)

    rows = (await session.execute(stmt)).all()
    return [
        LatestMessageRow(
            counterpart_id=counterpart_id,
            message_id=message_id,
            content=content,
            created_at=created_at,
            display_name=display_name,
            avatar_url=avatar_url,
        )
        for counterpart_id, message_id, content, created_at, display_name, avatar_url in rows
    ]
