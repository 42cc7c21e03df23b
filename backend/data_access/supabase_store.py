"""
supabase_store.py — HTTP-based store using Supabase's PostgREST API.
Requests carry the user's own access token, so row-level security scopes
them to that user; the user_id filter on reads is belt and braces.
"""
import logging

import httpx

from config import SUPABASE_URL, SUPABASE_ANON_KEY, HTTP_TIMEOUT_SECONDS
from data_access.base import BaseStore, DataAccessError, ErrorKind

logger = logging.getLogger(__name__)

# Postgres error codes PostgREST passes through in the body
_CONSTRAINT_CODES = {"23505", "23503", "23502", "23514"}


def _error_for(resp: httpx.Response) -> DataAccessError:
    try:
        body = resp.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    message = body.get("message") or resp.text or resp.reason_phrase
    code = str(body.get("code", ""))

    if resp.status_code in (401, 403) or code == "42501":
        kind = ErrorKind.AUTHORIZATION
    elif resp.status_code == 409 or code in _CONSTRAINT_CODES:
        kind = ErrorKind.CONSTRAINT
    elif resp.status_code == 404:
        kind = ErrorKind.NOT_FOUND
    elif resp.status_code >= 500:
        kind = ErrorKind.CONNECTIVITY
    else:
        kind = ErrorKind.VALIDATION
    return DataAccessError(kind, message)


class SupabaseRestStore(BaseStore):
    """PostgREST store for one authenticated user."""

    def __init__(
        self,
        user_id: str,
        access_token: str,
        url: str = SUPABASE_URL,
        api_key: str = SUPABASE_ANON_KEY,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(user_id)
        self.access_token = access_token
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    @property
    def name(self) -> str:
        return "supabase"

    def _headers(self, prefer: str = "return=representation") -> dict:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
            "Prefer": prefer,
        }

    def _owned(self, **filters) -> dict:
        params = {"user_id": f"eq.{self.user_id}"}
        for key, value in filters.items():
            params[key] = f"eq.{value}"
        return params

    async def _request(self, method: str, table: str, params: dict = None,
                       json=None, prefer: str = "return=representation") -> list[dict]:
        url = f"{self.base_url}/{table}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.request(method, url, params=params, json=json, headers=self._headers(prefer))
        except httpx.TimeoutException:
            logger.warning(f"{method} {table} timed out after {self.timeout}s")
            raise DataAccessError(ErrorKind.TIMEOUT, f"Request to {table} timed out")
        except httpx.TransportError as e:
            logger.warning(f"{method} {table} failed: {e}")
            raise DataAccessError(ErrorKind.CONNECTIVITY, f"Could not reach the database: {e}")

        if resp.status_code >= 400:
            error = _error_for(resp)
            logger.warning(f"{method} {table} -> {resp.status_code} ({error.kind.value}): {error.message}")
            raise error

        if not resp.content:
            return []
        result = resp.json()
        return result if isinstance(result, list) else [result]

    # ------------------------------------------------------------------
    async def list_all(self, table: str, order_by: str, descending: bool = True) -> list[dict]:
        params = {"select": "*", **self._owned()}
        params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        return await self._request("GET", table, params=params)

    async def insert(self, table: str, record: dict) -> dict:
        data = {**record, "user_id": self.user_id}
        rows = await self._request("POST", table, json=data)
        return rows[0] if rows else {}

    async def update(self, table: str, record_id: str, partial: dict) -> dict:
        rows = await self._request("PATCH", table, params=self._owned(id=record_id), json=partial)
        if not rows:
            raise DataAccessError(ErrorKind.NOT_FOUND, f"No row {record_id} in {table}")
        return rows[0]

    async def delete(self, table: str, record_id: str) -> None:
        rows = await self._request("DELETE", table, params=self._owned(id=record_id))
        if not rows:
            raise DataAccessError(ErrorKind.NOT_FOUND, f"No row {record_id} in {table}")

    async def upsert(self, table: str, record: dict, on_conflict: tuple[str, ...]) -> dict:
        data = {**record, "user_id": self.user_id}
        rows = await self._request(
            "POST",
            table,
            params={"on_conflict": ",".join(on_conflict)},
            json=data,
            prefer="resolution=merge-duplicates,return=representation",
        )
        return rows[0] if rows else {}
