"""Ledger service composing the store, cache, auth roles and write throttle.

Every mutation goes straight to the remote store and is followed by a forced
cache resync (write-through). Reads are served from the cache after a lazy
sync. Store failures are translated into the domain error taxonomy:
- unique violation on insert -> ConflictAppError (409)
- update target missing -> NotFoundAppError (404)
- anything else -> StoreAppError (500), message passed through
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from mahjong_ledger.adapters.rate_limit.base import AbstractWriteThrottle
from mahjong_ledger.adapters.store.base import (
    ALIASES_KEY,
    RECORDS_TABLE,
    SETTINGS_TABLE,
    SUB_ADMIN_PASSWORD_KEY,
    UNIQUE_VIOLATION,
    Row,
)
from mahjong_ledger.core.auth import Role
from mahjong_ledger.core.errors import (
    ConflictAppError,
    NotFoundAppError,
    StoreQueryError,
)
from mahjong_ledger.core.rate_limit import check_write_allowed, record_successful_write
from mahjong_ledger.utils.ledger_cache import LedgerCache

logger = logging.getLogger(__name__)

_INTEGER_ID = re.compile(r"-?\d+")

LOGIN_MESSAGES = {
    Role.SUPER_ADMIN: "Authenticated as super-admin",
    Role.SUB_ADMIN: "Authenticated as sub-admin",
}


def numeric_id(record_id: str) -> int | None:
    """Return ``record_id`` as an int when it is a decimal integer literal.

    Examples:
        >>> numeric_id("42")
        42
        >>> numeric_id("a1b2") is None
        True
    """
    if _INTEGER_ID.fullmatch(record_id):
        return int(record_id)
    return None


class LedgerService:
    """Request handlers for the ledger API.

    Attributes:
        cache: Process-wide ledger cache (owns the store reference).
        limiter: Throttle applied to sub-admin record writes.
    """

    def __init__(self, cache: LedgerCache, limiter: AbstractWriteThrottle) -> None:
        self.cache = cache
        self.limiter = limiter

    @property
    def store(self):
        return self.cache.store

    async def _resync(self, reason: str) -> None:
        """Force a cache reload after a successful mutation.

        A failing resync is logged, not raised: the mutation already happened
        and the next sync will pick it up.
        """
        try:
            await self.cache.sync(force_refresh=True)
        except Exception as exc:
            logger.error(
                "cache.resync_failed",
                extra={
                    "reason": reason,
                    "error_type": type(exc).__name__,
                    "error_code": getattr(exc, "code", None),
                    "error_msg": str(exc),
                },
            )

    def login(self, role: Role) -> dict[str, Any]:
        return {"success": True, "role": role.value, "message": LOGIN_MESSAGES.get(role, "")}

    async def list_records(self) -> list[Row]:
        """Return all records, newest ``play_date`` first."""
        snapshot = await self.cache.sync(force_refresh=False)
        return list(snapshot.records)

    async def create_record(self, role: Role, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Insert a record on behalf of ``role``.

        Sub-admins are throttled before the insert; their cooldown starts only
        once the insert succeeded.

        Raises:
            ThrottleAppError: Sub-admin cooldown is active.
            ConflictAppError: The record duplicates an existing one.
            StoreAppError: Any other store failure.
        """
        check_write_allowed(role, self.limiter)

        try:
            await self.store.insert(RECORDS_TABLE, payload)
        except StoreQueryError as exc:
            if (exc.details or {}).get("store_code") == UNIQUE_VIOLATION:
                raise ConflictAppError(
                    code="duplicate_record",
                    message="Duplicate record",
                    details={"store_code": UNIQUE_VIOLATION},
                ) from exc
            raise

        record_successful_write(role, self.limiter)
        logger.info("records.created", extra={"role": role.value})
        await self._resync("record_created")
        return {"success": True}

    async def get_aliases(self) -> dict[str, Any]:
        """Return the aliases mapping; ``{}`` on any failure."""
        try:
            snapshot = await self.cache.sync(force_refresh=False)
        except Exception as exc:
            logger.warning(
                "aliases.read_failed",
                extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
            )
            return {}
        return dict(snapshot.aliases)

    async def save_aliases(self, aliases: Mapping[str, Any]) -> dict[str, Any]:
        """Replace the aliases mapping wholesale."""
        await self.store.upsert(SETTINGS_TABLE, {"key": ALIASES_KEY, "value": dict(aliases)})
        logger.info("aliases.saved", extra={"entries": len(aliases)})
        await self._resync("aliases_saved")
        return {"success": True}

    async def set_sub_admin_password(self, password: str) -> dict[str, Any]:
        """Set or clear (empty string) the sub-admin password.

        The forced resync is what makes the new password effective for the
        auth resolver, so it always runs after the upsert.
        """
        await self.store.upsert(SETTINGS_TABLE, {"key": SUB_ADMIN_PASSWORD_KEY, "value": password})
        logger.info("settings.sub_admin_password_set", extra={"enabled": bool(password)})
        await self._resync("sub_admin_password_set")
        return {"success": True}

    async def update_record(self, record_id: str, updates: Mapping[str, Any]) -> dict[str, Any]:
        """Apply a partial update to one record.

        The route delivers ids as strings while the table may key records by
        integer, so a miss on the string id is retried once as an int.

        Raises:
            NotFoundAppError: No record matched either form of the id.
            StoreAppError: The store failed.
        """
        values = {k: v for k, v in updates.items() if k != "id"}

        rows = await self.store.update(RECORDS_TABLE, values, filters={"id": record_id})
        as_int = numeric_id(record_id)
        if not rows and as_int is not None:
            logger.debug("records.update_numeric_retry", extra={"record_id": record_id})
            rows = await self.store.update(RECORDS_TABLE, values, filters={"id": as_int})

        if not rows:
            raise NotFoundAppError(
                code="record_not_found",
                message="Record not found or not editable",
                details={"record_id": record_id},
            )

        logger.info("records.updated", extra={"record_id": record_id, "fields": sorted(values)})
        await self._resync("record_updated")
        return {"success": True, "record": rows[0]}

    async def delete_record(self, record_id: str) -> dict[str, Any]:
        """Delete one record; succeeds whether or not it existed."""
        rows = await self.store.delete(RECORDS_TABLE, filters={"id": record_id})
        as_int = numeric_id(record_id)
        if not rows and as_int is not None:
            rows = await self.store.delete(RECORDS_TABLE, filters={"id": as_int})

        logger.info("records.deleted", extra={"record_id": record_id, "matched": len(rows)})
        await self._resync("record_deleted")
        return {"success": True}
