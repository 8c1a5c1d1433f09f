from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import tzinfo

from chatlist.core.config import get_settings
from chatlist.features.conversations.errors import ConversationsDomainError, UnavailableError

from .formatting import to_chat_row
from .ports import AggregationClient, IdentityProvider, Navigator, Notifier
from .states import ChatListState, ChatRow, Failed, Idle, Loaded, Loading

logger = logging.getLogger(__name__)

CONVERSATION_ROUTE = "/(app)/chat"
EXPLORE_ROUTE = "/(app)/users"
FETCH_ERROR_TITLE = "Error fetching chats"


@dataclass(frozen=True)
class EmptyState:
    title: str = "No messages yet?"
    description: str = "Find something you like and start a conversation!"
    action_label: str = "Explore people"


@dataclass(frozen=True)
class ChatListView:
    loading: bool
    rows: tuple[ChatRow, ...]
    empty_state: EmptyState | None
    explore_label: str = "Explore people"
    loading_label: str = "Loading chats..."


class ChatListController:
    """Drives the chat list screen through its fetch cycles.

    Each fetch cycle gets a generation number. Only the newest generation may
    write state, so an older response that resolves late is dropped, and
    ``unmount`` bumps the generation so nothing lands on a torn-down screen.
    """

    def __init__(
        self,
        *,
        identity: IdentityProvider,
        aggregation: AggregationClient,
        navigator: Navigator,
        notifier: Notifier,
        default_avatar_url: str | None = None,
        timestamp_format: str | None = None,
        display_timezone: tzinfo | None = None,
    ) -> None:
        settings = get_settings()
        self._identity = identity
        self._aggregation = aggregation
        self._navigator = navigator
        self._notifier = notifier
        self._default_avatar_url = default_avatar_url or settings.default_avatar_url
        self._timestamp_format = timestamp_format or settings.timestamp_display_format
        self._display_timezone = display_timezone
        self._state: ChatListState = Idle()
        self._settled: ChatListState = self._state
        self._generation = 0
        self._mounted = False

    @property
    def state(self) -> ChatListState:
        return self._state

    @property
    def mounted(self) -> bool:
        return self._mounted

    async def mount(self) -> None:
        self._mounted = True
        await self.refresh()

    def unmount(self) -> None:
        self._mounted = False
        self._generation += 1
        if isinstance(self._state, Loading):
            self._state = self._settled

    async def refresh(self) -> None:
        if not self._mounted:
            logger.debug("Ignoring chat list refresh on an unmounted screen.")
            return

        self._generation += 1
        generation = self._generation
        self._state = Loading(rows=self._state.rows)

        try:
            records = await self._fetch_records()
            rows = tuple(
                to_chat_row(
                    record,
                    default_avatar_url=self._default_avatar_url,
                    timestamp_format=self._timestamp_format,
                    display_timezone=self._display_timezone,
                )
                for record in records
            )
        except ConversationsDomainError as exc:
            if not self._is_current(generation):
                logger.debug("Discarding failure from superseded fetch %d.", generation)
                return
            logger.warning("Chat list fetch failed: %s", exc)
            self._settle(Failed(error=exc, rows=self._state.rows))
            self._notifier.alert(FETCH_ERROR_TITLE, str(exc))
            return

        if not self._is_current(generation):
            logger.debug("Discarding response from superseded fetch %d.", generation)
            return
        self._settle(Loaded(rows=rows))

    async def _fetch_records(self):
        try:
            user = await self._identity.get_current_user()
            return await self._aggregation.get_latest_messages(user.id)
        except ConversationsDomainError:
            raise
        except Exception as exc:
            # Collaborators outside this package may raise their own errors.
            raise UnavailableError(str(exc) or type(exc).__name__) from exc

    def _settle(self, state: ChatListState) -> None:
        self._state = state
        self._settled = state

    def _is_current(self, generation: int) -> bool:
        return self._mounted and generation == self._generation

    def select(self, row: ChatRow) -> None:
        self._navigator.navigate(
            CONVERSATION_ROUTE,
            {"userId": row.user_id, "name": row.name},
        )

    def explore(self) -> None:
        self._navigator.navigate(EXPLORE_ROUTE, {})

    def view(self) -> ChatListView:
        state = self._state
        empty_state = EmptyState() if isinstance(state, Loaded) and state.is_empty else None
        return ChatListView(
            loading=isinstance(state, Loading),
            rows=state.rows,
            empty_state=empty_state,
        )
