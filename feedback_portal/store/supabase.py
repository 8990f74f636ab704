"""
Supabase record store client.

Talks to the PostgREST endpoint (``<url>/rest/v1/<table>``) with the
project's API key. Every failure, transport or HTTP, surfaces as a
RecordStoreError so callers can show it inline.
"""

import logging
from typing import Any, Optional

import httpx

from feedback_portal.store.base import RecordNotFoundError, RecordStore, RecordStoreError, Row

logger = logging.getLogger(__name__)

SINGLE_OBJECT = "application/vnd.pgrst.object+json"


def _error_message(response: httpx.Response) -> str:
    """Pull PostgREST's ``message`` out of an error body when there is one."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}"


def _filter_params(filters: Optional[dict[str, Any]]) -> dict[str, str]:
    return {column: f"eq.{value}" for column, value in (filters or {}).items()}


class SupabaseStore(RecordStore):
    """PostgREST client built on httpx."""

    def __init__(
        self,
        url: str,
        key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={
                "apikey": key,
                "Authorization": f"Bearer {key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[dict[str, str]] = None,
        json: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        try:
            response = self._client.request(
                method, f"/{table}", params=params, json=json, headers=headers
            )
        except httpx.HTTPError as e:
            logger.error("Record store %s %s failed: %s", method, table, e)
            raise RecordStoreError(f"Could not reach the record store: {e}") from e

        if response.status_code == 406 and headers and headers.get("Accept") == SINGLE_OBJECT:
            raise RecordNotFoundError(_error_message(response), response.status_code)
        if response.is_error:
            message = _error_message(response)
            logger.error(
                "Record store %s %s returned %s: %s",
                method, table, response.status_code, message,
            )
            raise RecordStoreError(message, response.status_code)

        if not response.content:
            return []
        return response.json()

    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[dict[str, Any]] = None,
        order: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Row]:
        params = {"select": columns, **_filter_params(filters)}
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)
        return self._request("GET", table, params=params)

    def select_single(
        self, table: str, columns: str = "*", filters: Optional[dict[str, Any]] = None
    ) -> Row:
        params = {"select": columns, **_filter_params(filters)}
        return self._request("GET", table, params=params, headers={"Accept": SINGLE_OBJECT})

    def insert(self, table: str, rows: list[Row]) -> list[Row]:
        created = self._request(
            "POST", table, json=rows, headers={"Prefer": "return=representation"}
        )
        logger.debug("Inserted %d row(s) into %s", len(created), table)
        return created

    def update(self, table: str, values: Row, filters: dict[str, Any]) -> list[Row]:
        if not filters:
            raise ValueError("Refusing to update without a filter")
        return self._request(
            "PATCH",
            table,
            params=_filter_params(filters),
            json=values,
            headers={"Prefer": "return=representation"},
        )
