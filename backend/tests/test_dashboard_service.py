"""Tests for services/dashboard_service.py — the per-session controller."""

import asyncio
from datetime import date, datetime, timezone

import pytest

from conftest import TODAY
from data_access.base import BaseStore, DataAccessError, ErrorKind
from schemas import HabitStatus, ViewName
from services import dashboard_service, dates
from services.dashboard_service import DashboardController


def run(coro):
    return asyncio.run(coro)


class FlakyStore(BaseStore):
    """Wraps a real store; fails every call while `error` is set."""

    def __init__(self, inner: BaseStore):
        super().__init__(inner.user_id)
        self.inner = inner
        self.error: DataAccessError | None = None
        self.calls: list[str] = []

    @property
    def name(self) -> str:
        return "flaky"

    def _check(self, op: str):
        self.calls.append(op)
        if self.error is not None:
            raise self.error

    async def list_all(self, table, order_by, descending=True):
        self._check(f"list {table}")
        return await self.inner.list_all(table, order_by, descending)

    async def insert(self, table, record):
        self._check(f"insert {table}")
        return await self.inner.insert(table, record)

    async def update(self, table, record_id, partial):
        self._check(f"update {table}")
        return await self.inner.update(table, record_id, partial)

    async def delete(self, table, record_id):
        self._check(f"delete {table}")
        return await self.inner.delete(table, record_id)

    async def upsert(self, table, record, on_conflict):
        self._check(f"upsert {table}")
        return await self.inner.upsert(table, record, on_conflict)


@pytest.fixture
def flaky(store):
    return FlakyStore(store)


def test_initial_state(controller):
    assert controller.state.view == ViewName.OVERVIEW
    assert controller.state.selected_date == TODAY
    assert controller.state.loaded_at is None
    assert not controller.state.loading


def test_load_replaces_collections(controller, store):
    run(store.insert("habits", {"name": "Read"}))
    run(store.insert("tasks", {"title": "Call", "date": "2024-01-03"}))

    result = run(controller.load())

    assert result.ok
    assert [h.name for h in controller.state.habits] == ["Read"]
    assert [t.title for t in controller.state.tasks] == ["Call"]
    assert controller.state.loaded_at is not None
    assert controller.state.last_error is None


def test_add_habit_reloads(controller):
    result = run(controller.add_habit("  Read  ", description="20 pages", color="#fff"))
    assert result.ok
    assert [h.name for h in controller.state.habits] == ["Read"]
    assert controller.state.habits[0].color == "#fff"


def test_add_habit_rejects_blank_name(controller, flaky):
    controller.store = flaky
    result = run(controller.add_habit("   "))
    assert not result.ok
    assert result.error.kind == ErrorKind.VALIDATION
    assert flaky.calls == []


def test_log_status_overwrites_same_day(controller):
    run(controller.add_habit("Read"))
    habit_id = controller.state.habits[0].id

    run(controller.log_status(habit_id, TODAY, "completed"))
    run(controller.log_status(habit_id, TODAY, HabitStatus.SKIPPED))

    logs = controller.state.logs
    assert len(logs) == 1
    assert logs[0].status == HabitStatus.SKIPPED
    assert logs[0].date == TODAY


def test_log_status_rejects_unknown_status(controller, flaky):
    controller.store = flaky
    result = run(controller.log_status("1", TODAY, "done"))
    assert result.error.kind == ErrorKind.VALIDATION
    assert flaky.calls == []


def test_whitespace_task_title_creates_nothing(controller, flaky):
    controller.store = flaky
    result = run(controller.add_task("  "))
    assert not result.ok
    assert result.error.kind == ErrorKind.VALIDATION
    assert flaky.calls == []
    assert controller.state.tasks == []


def test_add_task_defaults_to_selected_date(controller):
    controller.change_date(-1)
    run(controller.add_task(" Buy milk "))
    task = controller.state.tasks[0]
    assert task.title == "Buy milk"
    assert task.date == date(2024, 1, 2)
    assert task.completed is False


def test_toggle_and_delete_task(controller):
    run(controller.add_task("Buy milk", "2024-01-03"))
    task_id = controller.state.tasks[0].id

    run(controller.toggle_task(task_id, True))
    assert controller.state.tasks[0].completed is True
    assert controller.state.tasks[0].title == "Buy milk"

    run(controller.delete_task(task_id))
    assert controller.state.tasks == []


def test_update_and_delete_habit(controller):
    run(controller.add_habit("Read"))
    habit_id = controller.state.habits[0].id
    run(controller.log_status(habit_id, TODAY, "completed"))

    result = run(controller.update_habit(habit_id, name="Read more", color="#000"))
    assert result.ok
    assert controller.state.habits[0].name == "Read more"

    run(controller.delete_habit(habit_id))
    assert controller.state.habits == []
    assert controller.state.logs == []


def test_update_habit_needs_fields(controller):
    result = run(controller.update_habit("1"))
    assert result.error.kind == ErrorKind.VALIDATION


def test_failed_write_leaves_state_untouched(controller, flaky):
    run(controller.add_habit("Read"))
    controller.store = flaky
    before = controller.snapshot()

    flaky.error = DataAccessError(ErrorKind.CONNECTIVITY, "offline")
    result = run(controller.add_habit("Run"))

    assert not result.ok
    assert result.error.kind == ErrorKind.CONNECTIVITY
    assert result.error.retryable
    after = controller.snapshot()
    assert after["habits"] == before["habits"]
    assert after["last_error"]["kind"] == "connectivity"


def test_failed_load_keeps_previous_collections(controller, flaky):
    run(controller.add_habit("Read"))
    controller.store = flaky
    flaky.error = DataAccessError(ErrorKind.AUTHORIZATION, "JWT expired")

    result = run(controller.load())

    assert result.error.kind == ErrorKind.AUTHORIZATION
    assert not result.error.retryable
    assert [h.name for h in controller.state.habits] == ["Read"]
    assert controller.state.loading is False


def test_missing_row_is_not_found(controller):
    result = run(controller.delete_task("42"))
    assert result.error.kind == ErrorKind.NOT_FOUND


def test_concurrent_loads_do_not_overlap(controller, store):
    active = 0
    peak = 0
    real_list_all = store.list_all

    async def slow_list_all(table, order_by, descending=True):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.01)
        try:
            return await real_list_all(table, order_by, descending)
        finally:
            active -= 1

    store.list_all = slow_list_all

    async def scenario():
        return await asyncio.gather(controller.load(), controller.load(), controller.load())

    results = run(scenario())
    assert all(r.ok for r in results)
    # one load fans out to three list calls; a second load never joins them
    assert peak == 3


def test_merge_strategy_matches_reload(store):
    merged = DashboardController(store, clock=lambda: TODAY, sync_strategy="merge")
    run(merged.load())

    run(merged.add_habit("Read"))
    habit_id = merged.state.habits[0].id
    run(merged.log_status(habit_id, TODAY, "completed"))
    run(merged.log_status(habit_id, TODAY, "missed"))
    run(merged.add_task("Buy milk"))
    run(merged.toggle_task(merged.state.tasks[0].id, True))

    reloaded = DashboardController(store, clock=lambda: TODAY)
    run(reloaded.load())

    for field in ("habits", "logs", "tasks"):
        assert merged.snapshot()[field] == reloaded.snapshot()[field]

    run(merged.delete_habit(habit_id))
    assert merged.state.habits == []
    assert merged.state.logs == []


def test_change_date_crosses_leap_day(controller):
    controller.set_date("2024-02-29")
    assert controller.change_date(1) == date(2024, 3, 1)
    assert controller.change_date(-2) == date(2024, 2, 28)


def test_select_view_any_to_any(controller):
    for view in ["weekly", "badges", "daily-focus", "overview", "badges"]:
        assert controller.select_view(view) == ViewName(view)
    assert controller.state.view == ViewName.BADGES
    with pytest.raises(ValueError):
        controller.select_view("calendar")


def test_notes_are_per_day(controller):
    controller.set_note(TODAY, "Felt good")
    assert controller.note_for("2024-01-03") == "Felt good"
    assert controller.note_for("2024-01-02") == ""
    controller.set_note(TODAY, "  ")
    assert controller.state.notes == {}


def test_merge_write_waits_for_load_in_flight(store):
    merged = DashboardController(store, clock=lambda: TODAY, sync_strategy="merge")
    real_list_all = store.list_all

    async def slow_list_all(table, order_by, descending=True):
        await asyncio.sleep(0.05)
        return await real_list_all(table, order_by, descending)

    store.list_all = slow_list_all

    async def scenario():
        pending = asyncio.create_task(merged.load())
        await asyncio.sleep(0)
        written = await merged.add_habit("Read")
        await pending
        return written

    result = run(scenario())
    assert result.ok
    assert [h.name for h in merged.state.habits] == ["Read"]


NOW = datetime(2024, 1, 3, 23, 30, tzinfo=timezone.utc)


@pytest.fixture
def local_controller(store, monkeypatch):
    # late evening UTC is already the next day in Tokyo
    monkeypatch.setattr(dashboard_service, "today", lambda tz_name=None: dates.today(tz_name, NOW))
    return DashboardController(store)


def test_set_timezone_moves_default_day(local_controller):
    assert local_controller.state.selected_date == date(2024, 1, 3)
    local_controller.set_timezone("Asia/Tokyo")
    assert local_controller.today() == date(2024, 1, 4)
    assert local_controller.state.selected_date == date(2024, 1, 4)


def test_set_timezone_keeps_chosen_day(local_controller):
    local_controller.set_date("2024-01-01")
    local_controller.set_timezone("Asia/Tokyo")
    assert local_controller.state.selected_date == date(2024, 1, 1)
