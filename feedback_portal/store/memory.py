"""
In-memory record store.

Used by the test suite and for local development when no Supabase project
is configured. Behaves like PostgREST for the operations the portal uses.
"""

import copy
import logging
import uuid
from typing import Any, Optional

from feedback_portal.store.base import RecordNotFoundError, RecordStore, RecordStoreError, Row

logger = logging.getLogger(__name__)


def _matches(row: Row, filters: Optional[dict[str, Any]]) -> bool:
    return all(str(row.get(column)) == str(value) for column, value in (filters or {}).items())


def _project(row: Row, columns: str) -> Row:
    if columns.strip() == "*":
        return copy.deepcopy(row)
    wanted = [c.strip() for c in columns.split(",")]
    return {c: copy.deepcopy(row.get(c)) for c in wanted}


class InMemoryStore(RecordStore):
    """Dict-of-lists store keyed by table name."""

    def __init__(self, tables: Optional[dict[str, list[Row]]] = None) -> None:
        self._tables: dict[str, list[Row]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.fail_next: Optional[str] = None

    def _check_failure(self) -> None:
        # Lets tests simulate a single failing call.
        if self.fail_next:
            message, self.fail_next = self.fail_next, None
            raise RecordStoreError(message)

    def rows(self, table: str) -> list[Row]:
        """Raw table contents, for assertions."""
        return self._tables.setdefault(table, [])

    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[dict[str, Any]] = None,
        order: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Row]:
        self._check_failure()
        found = [row for row in self.rows(table) if _matches(row, filters)]
        if order:
            found.sort(key=lambda row: row.get(order) or "", reverse=descending)
        if limit is not None:
            found = found[:limit]
        return [_project(row, columns) for row in found]

    def select_single(
        self, table: str, columns: str = "*", filters: Optional[dict[str, Any]] = None
    ) -> Row:
        found = self.select(table, columns, filters)
        if len(found) != 1:
            raise RecordNotFoundError(
                f"Expected one row in {table}, found {len(found)}", 406
            )
        return found[0]

    def insert(self, table: str, rows: list[Row]) -> list[Row]:
        self._check_failure()
        created = []
        for row in rows:
            stored = {"id": str(uuid.uuid4()), **copy.deepcopy(row)}
            self.rows(table).append(stored)
            created.append(copy.deepcopy(stored))
        logger.debug("Inserted %d row(s) into %s", len(created), table)
        return created

    def update(self, table: str, values: Row, filters: dict[str, Any]) -> list[Row]:
        self._check_failure()
        if not filters:
            raise ValueError("Refusing to update without a filter")
        updated = []
        for row in self.rows(table):
            if _matches(row, filters):
                row.update(copy.deepcopy(values))
                updated.append(copy.deepcopy(row))
        return updated

    def reset(self) -> None:
        """Clear all tables. Used by test fixtures for isolation."""
        self._tables.clear()
        self.fail_next = None
