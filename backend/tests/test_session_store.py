"""Tests for services/session_store.py — per-user controller registry."""

import pytest

from conftest import TODAY
from data_access.sql_store import SqlStore
from services import session_store
from services.dashboard_service import DashboardController
from services.session_store import SessionStore


class Clock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock(monkeypatch):
    clock = Clock()
    monkeypatch.setattr(session_store.time, "time", clock)
    return clock


@pytest.fixture
def registry(session_factory):
    return SessionStore(
        ttl_seconds=60,
        store_factory=lambda user_id, token: SqlStore(user_id, session_factory),
        controller_factory=lambda store: DashboardController(store, clock=lambda: TODAY),
    )


def test_same_user_gets_same_controller(registry, clock):
    first = registry.get("user-1")
    clock.now += 30
    assert registry.get("user-1") is first
    stats = registry.get_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1


def test_expired_session_is_replaced(registry, clock):
    first = registry.get("user-1")
    clock.now += 61
    assert registry.get("user-1") is not first
    assert registry.get_stats()["active_sessions"] == 1


def test_lookup_evicts_idle_sessions(registry, clock):
    registry.get("user-1")
    registry.get("user-2")
    clock.now += 61
    registry.get("user-3")
    assert registry.get_stats()["active_sessions"] == 1
