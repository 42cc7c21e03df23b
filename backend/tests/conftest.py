"""Shared test fixtures for the habit tracker backend."""

import os

# Settings are read at import time, so pin them before any app module loads
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DATA_BACKEND"] = "supabase"
os.environ["SUPABASE_URL"] = "https://example.supabase.co"
os.environ["SUPABASE_ANON_KEY"] = "anon-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["APP_TIMEZONE"] = "UTC"

from datetime import date

import pytest

from data_access.sql_store import SqlStore
from database import init_db, make_engine, make_session_factory
from schemas import Habit, HabitLog, HabitStatus, Task
from services.dashboard_service import DashboardController

# A Wednesday; its week starts on Monday 2024-01-01
TODAY = date(2024, 1, 3)
USER_ID = "user-1"


@pytest.fixture
def session_factory():
    """Fresh in-memory database with the habit tables."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def store(session_factory) -> SqlStore:
    return SqlStore(USER_ID, session_factory)


@pytest.fixture
def controller(store) -> DashboardController:
    return DashboardController(store, clock=lambda: TODAY, sync_strategy="reload")


def make_habit(habit_id: str, name: str = None, color: str = "#fff") -> Habit:
    return Habit(id=habit_id, user_id=USER_ID, name=name or f"Habit {habit_id}", color=color)


def make_log(habit_id: str, day, status: str = "completed") -> HabitLog:
    return HabitLog(habit_id=habit_id, user_id=USER_ID, date=day, status=HabitStatus(status))


def make_task(task_id: str, day, title: str = "Task", completed: bool = False) -> Task:
    return Task(id=task_id, user_id=USER_ID, title=title, date=day, completed=completed)


@pytest.fixture
def habits():
    return [make_habit("a", "Read", "#fff"), make_habit("b", "Run", "#000"), make_habit("c", "Meditate")]
