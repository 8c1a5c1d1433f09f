from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ChatRow:
    user_id: str
    name: str
    last_message: str
    timestamp: str
    profile_picture: str


@dataclass(frozen=True)
class Idle:
    rows: tuple[ChatRow, ...] = ()


@dataclass(frozen=True)
class Loading:
    rows: tuple[ChatRow, ...] = ()


@dataclass(frozen=True)
class Loaded:
    rows: tuple[ChatRow, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.rows


@dataclass(frozen=True)
class Failed:
    error: Exception
    rows: tuple[ChatRow, ...] = ()


ChatListState = Union[Idle, Loading, Loaded, Failed]
