"""Process-wide ledger cache kept in step with the remote store.

The cache holds one immutable snapshot of everything the API serves: all
records (newest ``play_date`` first), the aliases mapping and the sub-admin
password. ``sync`` rebuilds the whole snapshot from the store and publishes it
with a single reference swap, so readers see either the old or the new
snapshot and never a mix of the two.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from mahjong_ledger.adapters.store.base import (
    ALIASES_KEY,
    RECORDS_TABLE,
    SETTINGS_TABLE,
    SUB_ADMIN_PASSWORD_KEY,
    AbstractLedgerStore,
    Row,
)
from mahjong_ledger.core.errors import StoreQueryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerSnapshot:
    """Immutable view of the ledger as of ``synced_at``.

    Attributes:
        records: All records ordered by ``play_date`` descending.
        aliases: Entity name to display alias.
        sub_admin_password: Sub-admin secret, None when the tier is disabled.
        synced_at: UNIX time the snapshot was built (None for the empty one).
    """

    records: tuple[Row, ...] = ()
    aliases: dict[str, Any] = field(default_factory=dict)
    sub_admin_password: str | None = None
    synced_at: float | None = None

    @property
    def is_populated(self) -> bool:
        return bool(self.records)


class LedgerCache:
    """Read-through/write-through cache over an ``AbstractLedgerStore``."""

    def __init__(self, store: AbstractLedgerStore) -> None:
        self._store = store
        self._snapshot = LedgerSnapshot()
        self._publish_lock = asyncio.Lock()
        self._sync_count = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"LedgerCache(records={len(self._snapshot.records)}, "
            f"synced_at={self._snapshot.synced_at}, syncs={self._sync_count})"
        )

    @property
    def store(self) -> AbstractLedgerStore:
        return self._store

    def snapshot(self) -> LedgerSnapshot:
        """Return the currently published snapshot."""

        return self._snapshot

    def stats(self) -> dict[str, int | float | None]:
        snapshot = self._snapshot
        return {
            "records": len(snapshot.records),
            "aliases": len(snapshot.aliases),
            "sub_admin_enabled": int(bool(snapshot.sub_admin_password)),
            "synced_at": snapshot.synced_at,
            "syncs": self._sync_count,
        }

    async def sync(self, force_refresh: bool = False) -> LedgerSnapshot:
        """Load records, aliases and the sub-admin password from the store.

        Args:
            force_refresh: Reload even when records are already cached.

        Returns:
            The snapshot published after this call.

        Raises:
            StoreUnavailableError: The store could not be reached. The previous
                snapshot stays published.
        """

        if not force_refresh and self._snapshot.is_populated:
            return self._snapshot

        started = time.perf_counter()
        results = await asyncio.gather(
            self._store.select(RECORDS_TABLE, order_by="play_date", descending=True),
            self._read_setting(ALIASES_KEY),
            self._read_setting(SUB_ADMIN_PASSWORD_KEY),
            return_exceptions=True,
        )

        # Anything other than a rejected query (store down, bugs) is fatal
        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, StoreQueryError):
                raise result

        records_result, aliases_result, password_result = results

        if isinstance(records_result, StoreQueryError):
            logger.error(
                "cache.sync.records_failed",
                extra={"error_msg": records_result.message, "details": records_result.details},
            )
            records: tuple[Row, ...] = ()
        else:
            records = tuple(records_result)

        snapshot = LedgerSnapshot(
            records=records,
            aliases=self._coerce_aliases(aliases_result),
            sub_admin_password=self._coerce_password(password_result),
            synced_at=time.time(),
        )

        async with self._publish_lock:
            self._snapshot = snapshot
            self._sync_count += 1

        logger.info(
            "cache.sync.completed",
            extra={
                "forced": force_refresh,
                "records": len(snapshot.records),
                "aliases": len(snapshot.aliases),
                "sub_admin_enabled": bool(snapshot.sub_admin_password),
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return snapshot

    async def _read_setting(self, key: str) -> Any:
        rows = await self._store.select(SETTINGS_TABLE, columns="value", filters={"key": key})
        return rows[0].get("value") if rows else None

    @staticmethod
    def _coerce_aliases(result: Any) -> dict[str, Any]:
        if isinstance(result, StoreQueryError):
            logger.warning("cache.sync.aliases_failed", extra={"error_msg": result.message})
            return {}
        if isinstance(result, dict):
            return result
        if result is not None:
            logger.warning(
                "cache.sync.aliases_invalid",
                extra={"value_type": type(result).__name__},
            )
        return {}

    @staticmethod
    def _coerce_password(result: Any) -> str | None:
        if isinstance(result, StoreQueryError):
            logger.warning("cache.sync.sub_admin_password_failed", extra={"error_msg": result.message})
            return None
        if result is None:
            return None
        return str(result)
