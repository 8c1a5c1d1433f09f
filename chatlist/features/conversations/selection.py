from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol
from uuid import UUID


class MessageLike(Protocol):
    id: UUID
    sender_id: UUID
    recipient_id: UUID
    content: str
    created_at: datetime


def counterpart_of(message: MessageLike, user_id: UUID) -> UUID | None:
    """Return the other participant, or None when ``user_id`` is not in the pair."""
    if message.sender_id == message.recipient_id:
        return None
    if message.sender_id == user_id:
        return message.recipient_id
    if message.recipient_id == user_id:
        return message.sender_id
    return None


def _recency_key(message: MessageLike) -> tuple[datetime, str]:
    # UUID hex order matches the database ordering of uuid columns.
    return message.created_at, message.id.hex


def latest_per_counterpart(
    messages: Iterable[MessageLike],
    user_id: UUID,
) -> dict[UUID, MessageLike]:
    latest: dict[UUID, MessageLike] = {}
    for message in messages:
        counterpart_id = counterpart_of(message, user_id)
        if counterpart_id is None:
            continue
        current = latest.get(counterpart_id)
        if current is None or _recency_key(message) > _recency_key(current):
            latest[counterpart_id] = message
    return latest


def order_by_recency(latest: dict[UUID, MessageLike]) -> list[tuple[UUID, MessageLike]]:
    return sorted(
        latest.items(),
        key=lambda item: _recency_key(item[1]),
        reverse=True,
    )
