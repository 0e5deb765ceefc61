"""Supabase (PostgREST) store adapter."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, AsyncClientOptions, acreate_client

from mahjong_ledger.adapters.store.base import AbstractLedgerStore, Row
from mahjong_ledger.core.errors import StoreQueryError, StoreUnavailableError

logger = logging.getLogger(__name__)


class SupabaseStore(AbstractLedgerStore):
    """Store backed by the official ``supabase`` async client.

    The client is created lazily on first use because ``acreate_client`` is a
    coroutine and settings are read at import time.
    """

    def __init__(self, url: str | None, key: str | None, timeout_seconds: float = 10.0) -> None:
        """Remember connection parameters.

        Args:
            url: Supabase project URL.
            key: Service role or anon key.
            timeout_seconds: PostgREST request timeout.
        """
        self._url = url
        self._key = key
        self._timeout_seconds = timeout_seconds
        self._client: AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _get_client(self) -> AsyncClient:
        if not self._url or not self._key:
            raise StoreUnavailableError(
                code="store_missing_credentials",
                message="Supabase provider requires SUPABASE_URL and SUPABASE_KEY environment variables",
                details={"provider": "supabase"},
            )
        if self._client is None:
            async with self._client_lock:
                if self._client is None:
                    self._client = await acreate_client(
                        self._url,
                        self._key,
                        options=AsyncClientOptions(
                            postgrest_client_timeout=self._timeout_seconds,
                        ),
                    )
        return self._client

    async def _execute(
        self,
        operation: str,
        table: str,
        build: Callable[[AsyncClient], Awaitable[Any]],
    ) -> list[Row]:
        """Run a query and translate backend failures into store errors.

        Args:
            operation: Name of the CRUD operation (for logs and messages).
            table: Target table.
            build: Coroutine factory issuing the request against the client.

        Returns:
            Rows returned by PostgREST (empty list when none).
        """
        try:
            client = await self._get_client()
            response = await build(client)
        except APIError as exc:
            logger.warning(
                "store.query_failed",
                extra={
                    "operation": operation,
                    "table": table,
                    "store_code": exc.code,
                    "error_msg": exc.message,
                },
            )
            raise StoreQueryError(
                code="store_query_failed",
                message=exc.message or f"Supabase {operation} on '{table}' failed",
                details={"store_code": str(exc.code or ""), "hint": exc.hint or ""},
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(
                "store.unavailable",
                extra={
                    "operation": operation,
                    "table": table,
                    "error_type": type(exc).__name__,
                },
            )
            raise StoreUnavailableError(
                code="store_unavailable",
                message=f"Supabase {operation} on '{table}' failed: {exc}",
            ) from exc

        return list(response.data or [])

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        def build(client: AsyncClient):
            query = client.table(table).select(columns)
            for column, value in (filters or {}).items():
                query = query.eq(column, value)
            if order_by:
                query = query.order(order_by, desc=descending)
            return query.execute()

        return await self._execute("select", table, build)

    async def insert(self, table: str, row: Mapping[str, Any]) -> list[Row]:
        return await self._execute(
            "insert", table, lambda client: client.table(table).insert(dict(row)).execute()
        )

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        filters: Mapping[str, Any],
    ) -> list[Row]:
        def build(client: AsyncClient):
            query = client.table(table).update(dict(values))
            for column, value in filters.items():
                query = query.eq(column, value)
            return query.execute()

        return await self._execute("update", table, build)

    async def delete(self, table: str, *, filters: Mapping[str, Any]) -> list[Row]:
        def build(client: AsyncClient):
            query = client.table(table).delete()
            for column, value in filters.items():
                query = query.eq(column, value)
            return query.execute()

        return await self._execute("delete", table, build)

    async def upsert(self, table: str, row: Mapping[str, Any]) -> list[Row]:
        return await self._execute(
            "upsert", table, lambda client: client.table(table).upsert(dict(row)).execute()
        )
