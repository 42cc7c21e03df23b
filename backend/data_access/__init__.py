from config import DATA_BACKEND
from data_access.base import BaseStore, DataAccessError, ErrorKind, RETRYABLE_KINDS
from data_access.sql_store import SqlStore
from data_access.supabase_store import SupabaseRestStore


def build_store(user_id: str, access_token: str | None = None, backend: str = DATA_BACKEND) -> BaseStore:
    """Store for one user on the configured backend."""
    if backend == "sqlite":
        from database import SessionLocal
        return SqlStore(user_id, SessionLocal)
    if backend == "supabase":
        return SupabaseRestStore(user_id, access_token or "")
    raise ValueError(f"Unsupported DATA_BACKEND: {backend}")


__all__ = [
    "BaseStore",
    "DataAccessError",
    "ErrorKind",
    "RETRYABLE_KINDS",
    "SqlStore",
    "SupabaseRestStore",
    "build_store",
]
