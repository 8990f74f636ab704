"""
Record store interface shared by the Supabase client and the in-memory store.

Only the handful of PostgREST operations the portal needs are modelled:
equality-filtered selects, single-row fetch, ordered/limited fetch, insert
and filtered update.
"""

from typing import Any, Optional

Row = dict[str, Any]


class RecordStoreError(Exception):
    """Raised when a record store call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RecordNotFoundError(RecordStoreError):
    """Raised when a single-row fetch matches zero (or several) rows."""


class RecordStore:
    """Abstract record store. Subclasses talk to a real or fake backend."""

    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[dict[str, Any]] = None,
        order: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Row]:
        raise NotImplementedError

    def select_single(
        self, table: str, columns: str = "*", filters: Optional[dict[str, Any]] = None
    ) -> Row:
        """Fetch exactly one row or raise RecordNotFoundError."""
        raise NotImplementedError

    def insert(self, table: str, rows: list[Row]) -> list[Row]:
        """Insert rows and return them as stored (ids assigned)."""
        raise NotImplementedError

    def update(self, table: str, values: Row, filters: dict[str, Any]) -> list[Row]:
        """Update every row matching ``filters`` and return the updated rows."""
        raise NotImplementedError
