"""Tests for the store adapters and their factory."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from postgrest.exceptions import APIError
from pydantic import ValidationError as PydanticValidationError

from mahjong_ledger.adapters.store.factory import create_store
from mahjong_ledger.adapters.store.in_memory import InMemoryStore
from mahjong_ledger.adapters.store.supabase_client import SupabaseStore
from mahjong_ledger.core.config import AppSettings
from mahjong_ledger.core.errors import ConfigurationAppError, StoreQueryError, StoreUnavailableError


class TestInMemoryStore:
    @pytest.mark.asyncio
    async def test_insert_assigns_integer_ids(self) -> None:
        store = InMemoryStore()

        first = await store.insert("records", {"play_date": "2024-01-01"})
        second = await store.insert("records", {"play_date": "2024-01-02"})

        assert first[0]["id"] == 1
        assert second[0]["id"] == 2

    @pytest.mark.asyncio
    async def test_generated_ids_skip_seeded_ones(self) -> None:
        store = InMemoryStore(seed={"records": [{"id": 1, "play_date": "2024-01-01"}]})

        row = await store.insert("records", {"play_date": "2024-01-02"})

        assert row[0]["id"] == 2

    @pytest.mark.asyncio
    async def test_duplicate_primary_key_reports_unique_violation(self) -> None:
        store = InMemoryStore(seed={"records": [{"id": 7, "play_date": "2024-01-01"}]})

        with pytest.raises(StoreQueryError) as exc_info:
            await store.insert("records", {"id": 7, "play_date": "2024-01-02"})

        assert exc_info.value.details["store_code"] == "23505"

    @pytest.mark.asyncio
    async def test_filters_are_type_strict(self) -> None:
        store = InMemoryStore(seed={"records": [{"id": 42, "play_date": "2024-01-01"}]})

        assert await store.update("records", {"x": 1}, filters={"id": "42"}) == []
        assert len(await store.update("records", {"x": 1}, filters={"id": 42})) == 1

    @pytest.mark.asyncio
    async def test_select_orders_and_projects(self) -> None:
        store = InMemoryStore(
            seed={
                "records": [
                    {"id": 1, "play_date": "2024-01-02"},
                    {"id": 2, "play_date": "2024-01-03"},
                    {"id": 3, "play_date": "2024-01-01"},
                ],
                "settings": [{"key": "k", "value": {"a": 1}}],
            }
        )

        rows = await store.select("records", order_by="play_date", descending=True)
        settings_rows = await store.select("settings", columns="value", filters={"key": "k"})

        assert [r["id"] for r in rows] == [2, 1, 3]
        assert settings_rows == [{"value": {"a": 1}}]

    @pytest.mark.asyncio
    async def test_returned_rows_are_copies(self) -> None:
        store = InMemoryStore(seed={"settings": [{"key": "k", "value": {"a": 1}}]})

        rows = await store.select("settings")
        rows[0]["value"]["a"] = 99

        assert (await store.select("settings"))[0]["value"] == {"a": 1}

    @pytest.mark.asyncio
    async def test_upsert_replaces_by_key(self) -> None:
        store = InMemoryStore()

        await store.upsert("settings", {"key": "mahjong_aliases", "value": {"a": "A"}})
        await store.upsert("settings", {"key": "mahjong_aliases", "value": {"b": "B"}})

        assert await store.select("settings") == [{"key": "mahjong_aliases", "value": {"b": "B"}}]

    @pytest.mark.asyncio
    async def test_delete_returns_removed_rows(self) -> None:
        store = InMemoryStore(seed={"records": [{"id": 1, "play_date": "2024-01-01"}]})

        assert len(await store.delete("records", filters={"id": 1})) == 1
        assert await store.delete("records", filters={"id": 1}) == []

    @pytest.mark.asyncio
    async def test_unknown_table(self) -> None:
        with pytest.raises(StoreQueryError):
            await InMemoryStore().select("players")


def _client_returning(execute: AsyncMock) -> MagicMock:
    """Fake supabase client whose query builders all end in ``execute``."""
    builder = MagicMock()
    for method in ("select", "insert", "update", "delete", "upsert", "eq", "order"):
        getattr(builder, method).return_value = builder
    builder.execute = execute
    client = MagicMock()
    client.table.return_value = builder
    return client


class TestSupabaseStore:
    @pytest.mark.asyncio
    async def test_select_builds_ordered_filtered_query(self) -> None:
        execute = AsyncMock(return_value=MagicMock(data=[{"id": 1}]))
        client = _client_returning(execute)
        store = SupabaseStore(url="https://example.supabase.co", key="anon")

        with patch.object(store, "_get_client", AsyncMock(return_value=client)):
            rows = await store.select("records", filters={"id": 1}, order_by="play_date", descending=True)

        assert rows == [{"id": 1}]
        builder = client.table.return_value
        client.table.assert_called_with("records")
        builder.eq.assert_called_with("id", 1)
        builder.order.assert_called_with("play_date", desc=True)

    @pytest.mark.asyncio
    async def test_none_data_becomes_empty_list(self) -> None:
        client = _client_returning(AsyncMock(return_value=MagicMock(data=None)))
        store = SupabaseStore(url="https://example.supabase.co", key="anon")

        with patch.object(store, "_get_client", AsyncMock(return_value=client)):
            assert await store.delete("records", filters={"id": "x"}) == []

    @pytest.mark.asyncio
    async def test_api_error_becomes_query_error_with_code(self) -> None:
        error = APIError({"message": "duplicate key value", "code": "23505", "hint": None, "details": None})
        client = _client_returning(AsyncMock(side_effect=error))
        store = SupabaseStore(url="https://example.supabase.co", key="anon")

        with patch.object(store, "_get_client", AsyncMock(return_value=client)):
            with pytest.raises(StoreQueryError) as exc_info:
                await store.insert("records", {"id": 1})

        assert exc_info.value.details["store_code"] == "23505"
        assert exc_info.value.message == "duplicate key value"

    @pytest.mark.asyncio
    async def test_transport_error_becomes_unavailable(self) -> None:
        client = _client_returning(AsyncMock(side_effect=httpx.ConnectError("refused")))
        store = SupabaseStore(url="https://example.supabase.co", key="anon")

        with patch.object(store, "_get_client", AsyncMock(return_value=client)):
            with pytest.raises(StoreUnavailableError):
                await store.upsert("settings", {"key": "k", "value": 1})


class TestFactory:
    @patch("mahjong_ledger.adapters.store.factory.settings")
    def test_memory_provider(self, mock_settings) -> None:
        mock_settings.app.store_provider = "memory"

        assert isinstance(create_store(), InMemoryStore)

    @patch("mahjong_ledger.adapters.store.factory.settings")
    def test_supabase_provider(self, mock_settings) -> None:
        mock_settings.app.store_provider = "supabase"
        mock_settings.store.url = "https://example.supabase.co"
        mock_settings.store.key = "anon"
        mock_settings.store.timeout_seconds = 5.0

        assert isinstance(create_store(), SupabaseStore)

    @pytest.mark.asyncio
    @patch("mahjong_ledger.adapters.store.factory.settings")
    async def test_supabase_without_credentials_fails_on_first_query(self, mock_settings) -> None:
        mock_settings.app.store_provider = "supabase"
        mock_settings.store.url = None
        mock_settings.store.key = None
        mock_settings.store.timeout_seconds = 5.0

        store = create_store()

        assert isinstance(store, SupabaseStore)
        with pytest.raises(StoreUnavailableError) as exc_info:
            await store.select("records")
        assert exc_info.value.code == "store_missing_credentials"
        assert exc_info.value.status_code == 500

    @patch("mahjong_ledger.adapters.store.factory.settings")
    def test_unknown_provider(self, mock_settings) -> None:
        mock_settings.app.store_provider = "mongo"

        with pytest.raises(ConfigurationAppError) as exc_info:
            create_store()

        assert exc_info.value.code == "store_unknown_provider"
        assert exc_info.value.status_code == 500

    def test_unknown_provider_is_rejected_at_settings_load(self) -> None:
        with pytest.raises(PydanticValidationError):
            AppSettings(store_provider="mongo")
