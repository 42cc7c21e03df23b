"""
dashboard_service.py — Per-session dashboard state
Holds the user's habits, logs and tasks plus the view selection and the
selected date. Every mutating intent goes to the store, then the in-memory
collections are brought back in line (full reload, or a local merge).
Intents never raise store failures; they return an OperationResult.
"""

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field, ValidationError

from config import DEFAULT_HABIT_COLOR, SYNC_STRATEGY
from data_access.base import BaseStore, DataAccessError, ErrorKind, RETRYABLE_KINDS
from schemas import Habit, HabitLog, HabitStatus, Task, ViewName
from services.dates import parse_day, shift, today

logger = logging.getLogger(__name__)

HABIT_FIELDS = ("name", "description", "color")


class OperationError(BaseModel):
    kind: ErrorKind
    message: str
    retryable: bool = False


class OperationResult(BaseModel):
    ok: bool = True
    error: Optional[OperationError] = None
    data: Optional[dict[str, Any]] = None

    @classmethod
    def success(cls, data: dict | None = None) -> "OperationResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "OperationResult":
        return cls(ok=False, error=OperationError(kind=kind, message=message, retryable=kind in RETRYABLE_KINDS))


class DashboardState(BaseModel):
    habits: list[Habit] = Field(default_factory=list)
    logs: list[HabitLog] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    loading: bool = False
    view: ViewName = ViewName.OVERVIEW
    selected_date: date
    notes: dict[str, str] = Field(default_factory=dict)  # ISO date → text, session only
    last_error: Optional[OperationError] = None
    loaded_at: Optional[datetime] = None


class DashboardController:
    """One instance per user session. Owns the state; everything else reads it."""

    def __init__(
        self,
        store: BaseStore,
        clock: Callable[[], date] | None = None,
        sync_strategy: str = SYNC_STRATEGY,
        tz_name: str | None = None,
    ):
        self.store = store
        self.tz_name = tz_name
        self._clock = clock or (lambda: today(self.tz_name))
        self.sync_strategy = sync_strategy
        self.state = DashboardState(selected_date=self.today())
        self._load_lock = asyncio.Lock()

    def today(self) -> date:
        return self._clock()

    def set_timezone(self, tz_name: str | None) -> None:
        """Viewer timezone used to resolve "today"; None means APP_TIMEZONE."""
        previous_today = self.today()
        self.tz_name = tz_name
        # A selection still on the old "today" follows the viewer's calendar
        if self.state.selected_date == previous_today:
            self.state.selected_date = self.today()

    # ------------------------------------------------------------------
    def _fail(self, operation: str, error: DataAccessError) -> OperationResult:
        logger.warning(f"{operation} failed for user {self.store.user_id}: [{error.kind.value}] {error.message}")
        result = OperationResult.failure(error.kind, error.message)
        self.state.last_error = result.error
        return result

    @staticmethod
    def _reject(message: str) -> OperationResult:
        return OperationResult.failure(ErrorKind.VALIDATION, message)

    async def load(self) -> OperationResult:
        """
        Fetch all three collections and swap them in together. A load that
        arrives while another is in flight waits its turn. On failure the
        previous collections stay as they were.
        """
        async with self._load_lock:
            self.state.loading = True
            try:
                habit_rows, log_rows, task_rows = await asyncio.gather(
                    self.store.list_all("habits", "created_at"),
                    self.store.list_all("habit_logs", "date"),
                    self.store.list_all("tasks", "created_at"),
                )
                habits = [Habit.model_validate(r) for r in habit_rows]
                logs = [HabitLog.model_validate(r) for r in log_rows]
                tasks = [Task.model_validate(r) for r in task_rows]
            except DataAccessError as e:
                return self._fail("load", e)
            except ValidationError as e:
                return self._fail("load", DataAccessError(ErrorKind.VALIDATION, f"Malformed row: {e}"))
            finally:
                self.state.loading = False

            self.state.habits = habits
            self.state.logs = logs
            self.state.tasks = tasks
            self.state.loaded_at = datetime.now(timezone.utc)
            self.state.last_error = None
            logger.info(
                f"Loaded {len(habits)} habits, {len(logs)} logs, {len(tasks)} tasks for user {self.store.user_id}"
            )
            return OperationResult.success()

    async def ensure_loaded(self) -> OperationResult:
        if self.state.loaded_at is None:
            return await self.load()
        return OperationResult.success()

    # ------------------------------------------------------------------
    async def _write(self, operation: str, table: str, action: str, call) -> OperationResult:
        """
        Run one store write while holding the load lock, so a load already in
        flight finishes first and cannot overwrite the written record.
        """
        async with self._load_lock:
            try:
                row = await call
            except DataAccessError as e:
                return self._fail(operation, e)
            if self.sync_strategy == "merge":
                self._merge(table, action, row)
                return OperationResult.success(row)

        await self.load()
        return OperationResult.success(row)

    def _merge(self, table: str, action: str, row: dict) -> None:
        """Fold one written record into the loaded collections without refetching."""
        s = self.state
        if table == "habits":
            if action == "delete":
                s.habits = [h for h in s.habits if h.id != row["id"]]
                s.logs = [l for l in s.logs if l.habit_id != row["id"]]
                return
            habit = Habit.model_validate(row)
            if action == "insert":
                s.habits = [habit] + [h for h in s.habits if h.id != habit.id]
            else:
                s.habits = [habit if h.id == habit.id else h for h in s.habits]
        elif table == "habit_logs":
            log = HabitLog.model_validate(row)
            others = [l for l in s.logs if not (l.habit_id == log.habit_id and l.date == log.date)]
            s.logs = sorted([log] + others, key=lambda l: l.date, reverse=True)
        elif table == "tasks":
            if action == "delete":
                s.tasks = [t for t in s.tasks if t.id != row["id"]]
                return
            task = Task.model_validate(row)
            if action == "insert":
                s.tasks = [task] + [t for t in s.tasks if t.id != task.id]
            else:
                s.tasks = [task if t.id == task.id else t for t in s.tasks]

    async def _delete(self, operation: str, table: str, record_id: str) -> OperationResult:
        async def call():
            await self.store.delete(table, record_id)
            return {"id": str(record_id)}
        return await self._write(operation, table, "delete", call())

    # ------------------------------------------------------------------
    async def log_status(self, habit_id: str, day, status) -> OperationResult:
        """Upsert the (habit, day) log; a second call for the same day overwrites."""
        try:
            status = HabitStatus(status)
            day = parse_day(day)
        except ValueError as e:
            return self._reject(str(e))
        record = {"habit_id": str(habit_id), "date": day.isoformat(), "status": status.value}
        return await self._write(
            "log_status",
            "habit_logs",
            "upsert",
            self.store.upsert("habit_logs", record, on_conflict=("habit_id", "date")),
        )

    async def add_habit(self, name: str, description: str | None = None, color: str | None = None) -> OperationResult:
        name = (name or "").strip()
        if not name:
            return self._reject("Habit name is empty")
        record = {
            "name": name,
            "description": (description or "").strip() or None,
            "color": color or DEFAULT_HABIT_COLOR,
        }
        return await self._write("add_habit", "habits", "insert", self.store.insert("habits", record))

    async def update_habit(self, habit_id: str, **fields) -> OperationResult:
        partial = {k: v for k, v in fields.items() if k in HABIT_FIELDS and v is not None}
        if "name" in partial:
            partial["name"] = partial["name"].strip()
            if not partial["name"]:
                return self._reject("Habit name is empty")
        if not partial:
            return self._reject("Nothing to update")
        return await self._write(
            "update_habit", "habits", "update", self.store.update("habits", habit_id, partial)
        )

    async def delete_habit(self, habit_id: str) -> OperationResult:
        # Logs go with the habit through the store's foreign key cascade
        return await self._delete("delete_habit", "habits", habit_id)

    async def add_task(self, title: str, day=None) -> OperationResult:
        title = (title or "").strip()
        if not title:
            return self._reject("Task title is empty")
        try:
            day = parse_day(day) if day is not None else self.state.selected_date
        except ValueError as e:
            return self._reject(str(e))
        record = {"title": title, "date": day.isoformat(), "completed": False}
        return await self._write("add_task", "tasks", "insert", self.store.insert("tasks", record))

    async def toggle_task(self, task_id: str, completed: bool) -> OperationResult:
        return await self._write(
            "toggle_task", "tasks", "update", self.store.update("tasks", task_id, {"completed": bool(completed)})
        )

    async def delete_task(self, task_id: str) -> OperationResult:
        return await self._delete("delete_task", "tasks", task_id)

    # ------------------------------------------------------------------
    def change_date(self, delta_days: int) -> date:
        self.state.selected_date = shift(self.state.selected_date, int(delta_days))
        return self.state.selected_date

    def set_date(self, day) -> date:
        self.state.selected_date = parse_day(day)
        return self.state.selected_date

    def select_view(self, view) -> ViewName:
        # Everything is loaded eagerly, so switching views never fetches
        self.state.view = ViewName(view)
        return self.state.view

    def set_note(self, day, text: str) -> None:
        key = parse_day(day).isoformat()
        if text and text.strip():
            self.state.notes[key] = text
        else:
            self.state.notes.pop(key, None)

    def note_for(self, day) -> str:
        return self.state.notes.get(parse_day(day).isoformat(), "")

    def snapshot(self) -> dict:
        return self.state.model_dump(mode="json")
