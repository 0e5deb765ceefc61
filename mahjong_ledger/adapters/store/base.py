"""Remote store interface.

The cache and the ledger service depend on this abstraction only, so the
Supabase backend can be swapped for the in-memory one (local runs, tests)
without touching them.

Every method raises:
    StoreQueryError: The store rejected the query. ``details["store_code"]``
        carries the backend error code (PostgreSQL SQLSTATE, e.g. ``23505``).
    StoreUnavailableError: The store could not be reached.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

Row = dict[str, Any]

RECORDS_TABLE = "records"
SETTINGS_TABLE = "settings"

ALIASES_KEY = "mahjong_aliases"
SUB_ADMIN_PASSWORD_KEY = "sub_admin_password"

# PostgreSQL SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class AbstractLedgerStore(ABC):
    """CRUD contract over the ``records`` and ``settings`` tables.

    Filters are equality matches on column values; values are compared as
    given (``"42"`` and ``42`` are different keys).
    """

    @abstractmethod
    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        """Return matching rows, optionally ordered by one column."""
        raise NotImplementedError

    @abstractmethod
    async def insert(self, table: str, row: Mapping[str, Any]) -> list[Row]:
        """Insert one row and return it as stored (with generated columns)."""
        raise NotImplementedError

    @abstractmethod
    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        filters: Mapping[str, Any],
    ) -> list[Row]:
        """Apply ``values`` to matching rows and return the updated rows."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, table: str, *, filters: Mapping[str, Any]) -> list[Row]:
        """Delete matching rows and return them."""
        raise NotImplementedError

    @abstractmethod
    async def upsert(self, table: str, row: Mapping[str, Any]) -> list[Row]:
        """Insert or replace a row by primary key and return it."""
        raise NotImplementedError
