from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from chatlist.client import (
    CONVERSATION_ROUTE,
    EXPLORE_ROUTE,
    ChatListController,
    ChatRow,
    CurrentUser,
    Failed,
    Idle,
    Loaded,
    Loading,
)
from chatlist.features.conversations import MalformedResponseError, UnauthorizedError, UnavailableError

BASE = datetime(2026, 10, 1, 9, 30, tzinfo=timezone.utc)
DEFAULT_AVATAR = "asset://placeholder.png"


def _record(index: int, *, name: str | None = "Friend", picture: str | None = None) -> dict:
    return {
        "other_user_id": f"user-{index}",
        "name": name,
        "content": f"message {index}",
        "timestamp": (BASE - timedelta(minutes=index)).isoformat(),
        "profile_picture": picture,
    }


class _Identity:
    def __init__(self, user_id: str = "me", error: Exception | None = None):
        self.user_id = user_id
        self.error = error
        self.calls = 0

    async def get_current_user(self) -> CurrentUser:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return CurrentUser(id=self.user_id)


class _Aggregation:
    """Each call parks on a future the test resolves explicitly."""

    def __init__(self):
        self.calls: list[tuple[str, asyncio.Future]] = []

    async def get_latest_messages(self, current_user_id: str):
        future = asyncio.get_running_loop().create_future()
        self.calls.append((current_user_id, future))
        return await future

    def resolve(self, index: int, records) -> None:
        self.calls[index][1].set_result(records)

    def fail(self, index: int, error: Exception) -> None:
        self.calls[index][1].set_exception(error)


class _ImmediateAggregation:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.user_ids: list[str] = []

    async def get_latest_messages(self, current_user_id: str):
        self.user_ids.append(current_user_id)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class _Navigator:
    def __init__(self):
        self.calls: list[tuple[str, dict]] = []

    def navigate(self, route, params):
        self.calls.append((route, dict(params)))


class _Notifier:
    def __init__(self):
        self.alerts: list[tuple[str, str]] = []

    def alert(self, title, message):
        self.alerts.append((title, message))


def _controller(aggregation, *, identity=None):
    navigator = _Navigator()
    notifier = _Notifier()
    controller = ChatListController(
        identity=identity or _Identity(),
        aggregation=aggregation,
        navigator=navigator,
        notifier=notifier,
        default_avatar_url=DEFAULT_AVATAR,
        timestamp_format="%H:%M",
        display_timezone=timezone.utc,
    )
    return controller, navigator, notifier


async def _until(predicate) -> None:
    for _ in range(100):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


@pytest.mark.asyncio
async def test_mount_loads_rows_for_current_user():
    aggregation = _ImmediateAggregation([_record(0, picture="https://cdn.example/a.png"), _record(1)])
    controller, _, notifier = _controller(aggregation, identity=_Identity("user-42"))

    assert isinstance(controller.state, Idle)
    await controller.mount()

    assert aggregation.user_ids == ["user-42"]
    assert isinstance(controller.state, Loaded)
    assert controller.state.rows == (
        ChatRow(
            user_id="user-0",
            name="Friend",
            last_message="message 0",
            timestamp="09:30",
            profile_picture="https://cdn.example/a.png",
        ),
        ChatRow(
            user_id="user-1",
            name="Friend",
            last_message="message 1",
            timestamp="09:29",
            profile_picture=DEFAULT_AVATAR,
        ),
    )
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_state_is_loading_while_fetch_is_in_flight():
    aggregation = _Aggregation()
    controller, _, _ = _controller(aggregation)

    task = asyncio.create_task(controller.mount())
    await _until(lambda: len(aggregation.calls) == 1)

    assert isinstance(controller.state, Loading)
    assert controller.view().loading is True

    aggregation.resolve(0, [])
    await task
    assert controller.view().loading is False


@pytest.mark.asyncio
async def test_empty_result_shows_call_to_action_not_error():
    controller, navigator, notifier = _controller(_ImmediateAggregation([]))

    await controller.mount()
    view = controller.view()

    assert isinstance(controller.state, Loaded)
    assert controller.state.is_empty
    assert view.empty_state is not None
    assert view.empty_state.action_label == "Explore people"
    assert notifier.alerts == []

    controller.explore()
    assert navigator.calls == [(EXPLORE_ROUTE, {})]


@pytest.mark.asyncio
async def test_missing_name_is_shown_as_unknown():
    controller, _, _ = _controller(_ImmediateAggregation([_record(0, name=None)]))

    await controller.mount()

    assert controller.state.rows[0].name == "Unknown"


@pytest.mark.asyncio
async def test_only_latest_fetch_is_rendered_when_responses_arrive_out_of_order():
    aggregation = _Aggregation()
    controller, _, notifier = _controller(aggregation)

    first = asyncio.create_task(controller.mount())
    await _until(lambda: len(aggregation.calls) == 1)
    second = asyncio.create_task(controller.refresh())
    await _until(lambda: len(aggregation.calls) == 2)

    aggregation.resolve(1, [_record(7)])
    await second
    aggregation.resolve(0, [_record(1), _record(2)])
    await first

    assert isinstance(controller.state, Loaded)
    assert [row.user_id for row in controller.state.rows] == ["user-7"]
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_stale_failure_does_not_override_newer_success():
    aggregation = _Aggregation()
    controller, _, notifier = _controller(aggregation)

    first = asyncio.create_task(controller.mount())
    await _until(lambda: len(aggregation.calls) == 1)
    second = asyncio.create_task(controller.refresh())
    await _until(lambda: len(aggregation.calls) == 2)

    aggregation.resolve(1, [_record(3)])
    await second
    aggregation.fail(0, UnavailableError("timed out"))
    await first

    assert isinstance(controller.state, Loaded)
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_rows_and_alerts():
    aggregation = _ImmediateAggregation(
        [_record(0), _record(1), _record(2)],
        UnavailableError("network down"),
    )
    controller, _, notifier = _controller(aggregation)

    await controller.mount()
    await controller.refresh()

    assert isinstance(controller.state, Failed)
    assert len(controller.state.rows) == 3
    assert len(controller.view().rows) == 3
    assert controller.view().empty_state is None
    assert notifier.alerts == [("Error fetching chats", "network down")]


@pytest.mark.asyncio
async def test_next_refresh_recovers_from_failure():
    aggregation = _ImmediateAggregation(UnavailableError("network down"), [_record(4)])
    controller, _, notifier = _controller(aggregation)

    await controller.mount()
    assert isinstance(controller.state, Failed)
    assert controller.state.rows == ()

    await controller.refresh()
    assert isinstance(controller.state, Loaded)
    assert [row.user_id for row in controller.state.rows] == ["user-4"]
    assert len(notifier.alerts) == 1


@pytest.mark.asyncio
async def test_identity_failure_is_reported_without_calling_aggregation():
    aggregation = _ImmediateAggregation()
    identity = _Identity(error=UnauthorizedError("Session expired."))
    controller, _, notifier = _controller(aggregation, identity=identity)

    await controller.mount()

    assert isinstance(controller.state, Failed)
    assert isinstance(controller.state.error, UnauthorizedError)
    assert aggregation.user_ids == []
    assert notifier.alerts == [("Error fetching chats", "Session expired.")]


@pytest.mark.asyncio
async def test_unexpected_collaborator_error_fails_the_cycle():
    aggregation = _ImmediateAggregation([_record(0), _record(1)])
    identity = _Identity()
    controller, _, notifier = _controller(aggregation, identity=identity)
    await controller.mount()

    identity.error = ConnectionError("identity backend unreachable")
    await controller.refresh()

    assert isinstance(controller.state, Failed)
    assert isinstance(controller.state.error, UnavailableError)
    assert isinstance(controller.state.error.__cause__, ConnectionError)
    assert len(controller.state.rows) == 2
    assert controller.view().loading is False
    assert notifier.alerts == [("Error fetching chats", "identity backend unreachable")]


@pytest.mark.asyncio
async def test_unexpected_aggregation_error_without_message_is_named():
    controller, _, notifier = _controller(_ImmediateAggregation(RuntimeError()))

    await controller.mount()

    assert isinstance(controller.state, Failed)
    assert notifier.alerts == [("Error fetching chats", "RuntimeError")]

@pytest.mark.asyncio
async def test_malformed_record_fails_the_cycle():
    broken = _record(0)
    del broken["content"]
    controller, _, notifier = _controller(_ImmediateAggregation([broken]))

    await controller.mount()

    assert isinstance(controller.state, Failed)
    assert isinstance(controller.state.error, MalformedResponseError)
    assert len(notifier.alerts) == 1


@pytest.mark.asyncio
async def test_results_arriving_after_unmount_are_discarded():
    aggregation = _Aggregation()
    controller, _, notifier = _controller(aggregation)

    pending_success = asyncio.create_task(controller.mount())
    await _until(lambda: len(aggregation.calls) == 1)
    controller.unmount()
    aggregation.resolve(0, [_record(0)])
    await pending_success

    assert not isinstance(controller.state, Loaded)
    assert controller.view().loading is False

    pending_failure = asyncio.create_task(controller.mount())
    await _until(lambda: len(aggregation.calls) == 2)
    controller.unmount()
    aggregation.fail(1, UnavailableError("late"))
    await pending_failure

    assert notifier.alerts == []
    assert controller.view().loading is False


@pytest.mark.asyncio
async def test_unmount_mid_refresh_restores_last_settled_rows():
    aggregation = _Aggregation()
    controller, _, notifier = _controller(aggregation)

    first = asyncio.create_task(controller.mount())
    await _until(lambda: len(aggregation.calls) == 1)
    aggregation.resolve(0, [_record(0), _record(1)])
    await first

    second = asyncio.create_task(controller.refresh())
    await _until(lambda: len(aggregation.calls) == 2)
    assert isinstance(controller.state, Loading)

    controller.unmount()

    assert isinstance(controller.state, Loaded)
    assert [row.user_id for row in controller.state.rows] == ["user-0", "user-1"]
    assert controller.view().loading is False

    aggregation.resolve(1, [_record(5)])
    await second
    assert [row.user_id for row in controller.state.rows] == ["user-0", "user-1"]
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_refresh_on_unmounted_screen_is_ignored():
    aggregation = _ImmediateAggregation()
    controller, _, _ = _controller(aggregation)

    await controller.refresh()

    assert isinstance(controller.state, Idle)
    assert aggregation.user_ids == []


def test_selecting_a_row_navigates_to_conversation():
    controller, navigator, _ = _controller(_ImmediateAggregation())
    row = ChatRow(
        user_id="user-9",
        name="Nina",
        last_message="see you",
        timestamp="10:00",
        profile_picture=DEFAULT_AVATAR,
    )

    controller.select(row)

    assert navigator.calls == [(CONVERSATION_ROUTE, {"userId": "user-9", "name": "Nina"})]
    assert isinstance(controller.state, Idle)
