"""Factory for creating the configured store adapter."""

import logging

from mahjong_ledger.adapters.store.base import AbstractLedgerStore
from mahjong_ledger.adapters.store.in_memory import InMemoryStore
from mahjong_ledger.adapters.store.supabase_client import SupabaseStore
from mahjong_ledger.core.config import settings
from mahjong_ledger.core.errors import ConfigurationAppError

logger = logging.getLogger(__name__)


def create_store() -> AbstractLedgerStore:
    """Instantiate the store adapter selected by ``APP_STORE_PROVIDER``.

    A Supabase store without credentials is still built: every query on it
    fails as a store outage, so public reads keep their usual failure
    behavior instead of the whole service refusing to start.

    Returns:
        AbstractLedgerStore: Configured store instance.

    Raises:
        ConfigurationAppError: If the provider is unknown.
    """
    provider = settings.app.store_provider.lower()

    if provider == "supabase":
        if not settings.store.url or not settings.store.key:
            logger.error("store.missing_credentials", extra={"provider": provider})
        return SupabaseStore(
            url=settings.store.url,
            key=settings.store.key,
            timeout_seconds=settings.store.timeout_seconds,
        )

    if provider == "memory":
        return InMemoryStore()

    raise ConfigurationAppError(
        code="store_unknown_provider",
        message=f"Unknown store provider: '{provider}'. Supported providers: supabase, memory",
        details={"provider": provider},
    )
