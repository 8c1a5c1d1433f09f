from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from chatlist.features.conversations.types import LatestMessageRecord


@dataclass(frozen=True)
class CurrentUser:
    id: str
    attributes: Mapping[str, Any] = field(default_factory=dict)


class IdentityProvider(Protocol):
    """Session collaborator that knows who is signed in."""

    async def get_current_user(self) -> CurrentUser:
        """Return the signed-in user or raise ``UnauthorizedError``."""


class AggregationClient(Protocol):
    async def get_latest_messages(
        self,
        current_user_id: str,
    ) -> Sequence[LatestMessageRecord | Mapping[str, Any]]:
        """Return one record per counterpart of ``current_user_id``."""


class Navigator(Protocol):
    def navigate(self, route: str, params: Mapping[str, str]) -> None:
        ...


class Notifier(Protocol):
    def alert(self, title: str, message: str) -> None:
        """Show a dismissible notification."""
