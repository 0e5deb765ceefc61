"""Unit tests for the ledger cache synchronizer."""

import asyncio

import pytest

from mahjong_ledger.adapters.store.in_memory import InMemoryStore
from mahjong_ledger.core.errors import StoreQueryError, StoreUnavailableError
from mahjong_ledger.utils.ledger_cache import LedgerCache

from conftest import SUB_ADMIN_PASSWORD


class CountingStore(InMemoryStore):
    """In-memory store that counts select calls and can inject failures."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.selects = 0
        self.failures: dict[str, Exception] = {}

    async def select(self, table, **kwargs):
        self.selects += 1
        key = (kwargs.get("filters") or {}).get("key", table)
        if key in self.failures:
            raise self.failures[key]
        return await super().select(table, **kwargs)


def _query_error() -> StoreQueryError:
    return StoreQueryError(code="store_query_failed", message="permission denied", details={"store_code": "42501"})


@pytest.fixture
def counting_store(store: InMemoryStore) -> CountingStore:
    seeded = CountingStore()
    seeded._tables = store._tables
    return seeded


@pytest.mark.asyncio
async def test_sync_loads_all_three_sources(counting_store: CountingStore) -> None:
    cache = LedgerCache(counting_store)

    snapshot = await cache.sync()

    assert [r["id"] for r in snapshot.records] == [2, 1, 42]
    assert snapshot.aliases == {"Ana": "Anastasia"}
    assert snapshot.sub_admin_password == SUB_ADMIN_PASSWORD
    assert snapshot.synced_at is not None
    assert counting_store.selects == 3


@pytest.mark.asyncio
async def test_lazy_sync_skips_store_when_populated(counting_store: CountingStore) -> None:
    cache = LedgerCache(counting_store)
    first = await cache.sync()
    counting_store.selects = 0

    second = await cache.sync(force_refresh=False)

    assert counting_store.selects == 0
    assert second is first


@pytest.mark.asyncio
async def test_lazy_sync_reloads_while_records_empty() -> None:
    store = CountingStore()
    cache = LedgerCache(store)

    await cache.sync()
    await cache.sync()

    assert store.selects == 6


@pytest.mark.asyncio
async def test_forced_sync_replaces_snapshot(counting_store: CountingStore) -> None:
    cache = LedgerCache(counting_store)
    before = await cache.sync()
    await counting_store.insert("records", {"play_date": "2024-04-01"})

    after = await cache.sync(force_refresh=True)

    assert after is not before
    assert len(after.records) == len(before.records) + 1
    assert after.records[0]["play_date"] == "2024-04-01"
    assert cache.snapshot() is after


@pytest.mark.asyncio
async def test_records_query_failure_degrades_to_empty(counting_store: CountingStore) -> None:
    counting_store.failures["records"] = _query_error()
    cache = LedgerCache(counting_store)

    snapshot = await cache.sync()

    assert snapshot.records == ()
    assert snapshot.aliases == {"Ana": "Anastasia"}
    assert snapshot.sub_admin_password == SUB_ADMIN_PASSWORD


@pytest.mark.asyncio
async def test_settings_query_failures_degrade_to_defaults(counting_store: CountingStore) -> None:
    counting_store.failures["mahjong_aliases"] = _query_error()
    counting_store.failures["sub_admin_password"] = _query_error()
    cache = LedgerCache(counting_store)

    snapshot = await cache.sync()

    assert len(snapshot.records) == 3
    assert snapshot.aliases == {}
    assert snapshot.sub_admin_password is None


@pytest.mark.asyncio
async def test_missing_settings_rows_use_defaults() -> None:
    cache = LedgerCache(InMemoryStore(seed={"records": [{"id": 1, "play_date": "2024-01-01"}]}))

    snapshot = await cache.sync()

    assert snapshot.aliases == {}
    assert snapshot.sub_admin_password is None


@pytest.mark.asyncio
async def test_non_mapping_aliases_value_is_ignored() -> None:
    cache = LedgerCache(InMemoryStore(seed={"settings": [{"key": "mahjong_aliases", "value": ["not", "a", "map"]}]}))

    snapshot = await cache.sync()

    assert snapshot.aliases == {}


@pytest.mark.asyncio
async def test_transport_failure_propagates_and_keeps_previous_snapshot(
    counting_store: CountingStore,
) -> None:
    cache = LedgerCache(counting_store)
    before = await cache.sync()
    counting_store.failures["sub_admin_password"] = StoreUnavailableError(
        code="store_unavailable", message="connection refused"
    )

    with pytest.raises(StoreUnavailableError):
        await cache.sync(force_refresh=True)

    assert cache.snapshot() is before


@pytest.mark.asyncio
async def test_readers_never_observe_partial_snapshot(store: InMemoryStore) -> None:
    """A reader during a forced resync sees the old or the new snapshot, whole."""

    gate = asyncio.Event()

    class GatedStore(InMemoryStore):
        async def select(self, table, **kwargs):
            rows = await super().select(table, **kwargs)
            if (kwargs.get("filters") or {}).get("key") == "mahjong_aliases":
                await gate.wait()
            return rows

    gated = GatedStore()
    gated._tables = store._tables
    cache = LedgerCache(gated)
    gate.set()
    old = await cache.sync()
    gate.clear()

    await gated.insert("records", {"play_date": "2024-05-01"})
    await gated.upsert("settings", {"key": "mahjong_aliases", "value": {"Bo": "Bob"}})

    resync = asyncio.create_task(cache.sync(force_refresh=True))
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    # Records are already read, aliases still pending: nothing published yet
    mid = cache.snapshot()
    assert mid is old
    assert mid.aliases == {"Ana": "Anastasia"}
    assert len(mid.records) == 3

    gate.set()
    new = await resync

    assert cache.snapshot() is new
    assert new.aliases == {"Bo": "Bob"}
    assert len(new.records) == 4


@pytest.mark.asyncio
async def test_snapshot_is_immutable(counting_store: CountingStore) -> None:
    snapshot = await LedgerCache(counting_store).sync()

    with pytest.raises(AttributeError):
        snapshot.records = ()  # type: ignore[misc]


@pytest.mark.asyncio
async def test_stats_track_published_snapshot(store: InMemoryStore) -> None:
    cache = LedgerCache(store)
    assert cache.stats()["syncs"] == 0

    await cache.sync()

    stats = cache.stats()
    assert stats["records"] == 3
    assert stats["aliases"] == 1
    assert stats["sub_admin_enabled"] == 1
    assert stats["syncs"] == 1
