"""In-memory store adapter.

Notes:
- Per-process only; data is lost on restart.
- Mirrors the PostgREST behaviors the service relies on: generated integer
  ``id`` for records, primary-key uniqueness reported as SQLSTATE ``23505``,
  and strictly typed equality filters (``"42"`` does not match ``42``).
"""

from __future__ import annotations

import asyncio
import copy
import itertools
from typing import Any, Mapping

from mahjong_ledger.adapters.store.base import (
    RECORDS_TABLE,
    SETTINGS_TABLE,
    UNIQUE_VIOLATION,
    AbstractLedgerStore,
    Row,
)
from mahjong_ledger.core.errors import StoreQueryError

# Primary key column per table
PRIMARY_KEYS: dict[str, str] = {
    RECORDS_TABLE: "id",
    SETTINGS_TABLE: "key",
}


def _matches(row: Mapping[str, Any], filters: Mapping[str, Any] | None) -> bool:
    if not filters:
        return True
    return all(
        column in row and type(row[column]) is type(value) and row[column] == value
        for column, value in filters.items()
    )


def _project(row: Row, columns: str) -> Row:
    if columns.strip() == "*":
        return copy.deepcopy(row)
    wanted = [c.strip() for c in columns.split(",") if c.strip()]
    return {c: copy.deepcopy(row[c]) for c in wanted if c in row}


class InMemoryStore(AbstractLedgerStore):
    """Dict-backed store implementing the ledger CRUD contract."""

    def __init__(self, seed: Mapping[str, list[Row]] | None = None) -> None:
        self._tables: dict[str, list[Row]] = {name: [] for name in PRIMARY_KEYS}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()
        for table, rows in (seed or {}).items():
            for row in rows:
                self._insert_locked(table, row)

    def _table(self, table: str) -> list[Row]:
        try:
            return self._tables[table]
        except KeyError:
            raise StoreQueryError(
                code="store_query_failed",
                message=f"relation \"{table}\" does not exist",
                details={"store_code": "42P01"},
            ) from None

    def _insert_locked(self, table: str, row: Mapping[str, Any]) -> Row:
        rows = self._table(table)
        pk = PRIMARY_KEYS[table]
        new_row = copy.deepcopy(dict(row))
        if pk not in new_row and table == RECORDS_TABLE:
            new_row[pk] = self._next_id(rows)
        if pk not in new_row:
            raise StoreQueryError(
                code="store_query_failed",
                message=f"null value in column \"{pk}\" violates not-null constraint",
                details={"store_code": "23502"},
            )
        if any(_matches(existing, {pk: new_row[pk]}) for existing in rows):
            raise StoreQueryError(
                code="store_query_failed",
                message=f"duplicate key value violates unique constraint \"{table}_pkey\"",
                details={"store_code": UNIQUE_VIOLATION},
            )
        rows.append(new_row)
        return new_row

    def _next_id(self, rows: list[Row]) -> int:
        taken = {r.get("id") for r in rows}
        candidate = next(self._ids)
        while candidate in taken:
            candidate = next(self._ids)
        return candidate

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        async with self._lock:
            rows = [r for r in self._table(table) if _matches(r, filters)]
            if order_by:
                # PostgREST puts NULLs first on descending order
                present = [r for r in rows if r.get(order_by) is not None]
                missing = [r for r in rows if r.get(order_by) is None]
                present.sort(key=lambda r: r[order_by], reverse=descending)
                rows = missing + present if descending else present + missing
            return [_project(r, columns) for r in rows]

    async def insert(self, table: str, row: Mapping[str, Any]) -> list[Row]:
        async with self._lock:
            return [copy.deepcopy(self._insert_locked(table, row))]

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        filters: Mapping[str, Any],
    ) -> list[Row]:
        async with self._lock:
            updated = []
            for row in self._table(table):
                if _matches(row, filters):
                    row.update(copy.deepcopy(dict(values)))
                    updated.append(copy.deepcopy(row))
            return updated

    async def delete(self, table: str, *, filters: Mapping[str, Any]) -> list[Row]:
        async with self._lock:
            rows = self._table(table)
            removed = [r for r in rows if _matches(r, filters)]
            self._tables[table] = [r for r in rows if not _matches(r, filters)]
            return removed

    async def upsert(self, table: str, row: Mapping[str, Any]) -> list[Row]:
        async with self._lock:
            pk = PRIMARY_KEYS.get(table)
            rows = self._table(table)
            if pk in row:
                for existing in rows:
                    if _matches(existing, {pk: row[pk]}):
                        existing.clear()
                        existing.update(copy.deepcopy(dict(row)))
                        return [copy.deepcopy(existing)]
            return [copy.deepcopy(self._insert_locked(table, row))]
