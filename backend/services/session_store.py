"""
session_store.py — Dashboard sessions
In-memory registry of one DashboardController per user, with TTL-based
expiry and hit statistics. The access token is refreshed on every lookup
so a long session keeps talking to the store with the newest token.
"""

import sys
import time
from typing import Callable

from config import SESSION_TTL_SECONDS
from data_access import BaseStore, build_store
from services.dashboard_service import DashboardController


class SessionStore:
    """In-memory controller registry with TTL and hit tracking."""

    def __init__(
        self,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        store_factory: Callable[[str, str | None], BaseStore] = build_store,
        controller_factory: Callable[[BaseStore], DashboardController] = DashboardController,
    ):
        # user_id → {controller, timestamp}
        self._sessions: dict[str, dict] = {}
        self._hits: int = 0
        self._misses: int = 0
        self.ttl_seconds = ttl_seconds
        self.store_factory = store_factory
        self.controller_factory = controller_factory

    # ------------------------------------------------------------------
    def get(self, user_id: str, access_token: str | None = None) -> DashboardController:
        """
        Existing live controller for the user, or a fresh one (not yet loaded).
        A miss also evicts every session idle past the TTL.
        """
        key = str(user_id)
        entry = self._sessions.get(key)
        if entry is not None and time.time() - entry["timestamp"] <= self.ttl_seconds:
            self._hits += 1
            entry["timestamp"] = time.time()
            controller = entry["controller"]
            if access_token and hasattr(controller.store, "access_token"):
                controller.store.access_token = access_token
            return controller

        self._misses += 1
        self.clear_expired()
        controller = self.controller_factory(self.store_factory(key, access_token))
        self._sessions[key] = {"controller": controller, "timestamp": time.time()}
        return controller

    # ------------------------------------------------------------------
    def drop(self, user_id: str) -> None:
        self._sessions.pop(str(user_id), None)

    # ------------------------------------------------------------------
    def clear_expired(self):
        """Evict all sessions idle past the TTL."""
        now = time.time()
        expired = [
            k for k, v in self._sessions.items()
            if now - v["timestamp"] > self.ttl_seconds
        ]
        for k in expired:
            del self._sessions[k]

    # ------------------------------------------------------------------
    def get_stats(self) -> dict:
        total_lookups = self._hits + self._misses
        return {
            "active_sessions": len(self._sessions),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total_lookups, 4) if total_lookups else 0.0,
            "estimated_memory_bytes": sys.getsizeof(self._sessions),
        }


sessions = SessionStore()
