from abc import ABC, abstractmethod
from enum import Enum


class ErrorKind(str, Enum):
    CONNECTIVITY = "connectivity"
    TIMEOUT = "timeout"
    AUTHORIZATION = "authorization"
    CONSTRAINT = "constraint"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"


RETRYABLE_KINDS = {ErrorKind.CONNECTIVITY, ErrorKind.TIMEOUT}


class DataAccessError(Exception):
    """A store call failed; `kind` says how."""

    def __init__(self, kind: ErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS


class BaseStore(ABC):
    """
    Abstract base class for the per-user data-access collaborator.
    Every call is scoped to the user the store was built for.
    """

    def __init__(self, user_id: str):
        self.user_id = str(user_id)

    @property
    @abstractmethod
    def name(self) -> str:
        """The name of this backend (e.g. 'supabase', 'sql')."""
        ...

    @abstractmethod
    async def list_all(self, table: str, order_by: str, descending: bool = True) -> list[dict]:
        """All of the user's rows in `table`, ordered by `order_by`."""
        ...

    @abstractmethod
    async def insert(self, table: str, record: dict) -> dict:
        """Insert a row owned by the user and return it as stored."""
        ...

    @abstractmethod
    async def update(self, table: str, record_id: str, partial: dict) -> dict:
        """
        Apply `partial` to the row with `record_id`.
        Raises DataAccessError(NOT_FOUND) when the user has no such row.
        """
        ...

    @abstractmethod
    async def delete(self, table: str, record_id: str) -> None:
        ...

    @abstractmethod
    async def upsert(self, table: str, record: dict, on_conflict: tuple[str, ...]) -> dict:
        """Insert, or overwrite the row that collides on the `on_conflict` columns."""
        ...
