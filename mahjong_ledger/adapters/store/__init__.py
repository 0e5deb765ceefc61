"""Remote store adapter layer - narrow CRUD contract over the ledger tables."""

from mahjong_ledger.adapters.store.base import AbstractLedgerStore, Row
from mahjong_ledger.adapters.store.factory import create_store
from mahjong_ledger.adapters.store.in_memory import InMemoryStore
from mahjong_ledger.adapters.store.supabase_client import SupabaseStore

__all__ = [
    "AbstractLedgerStore",
    "InMemoryStore",
    "Row",
    "SupabaseStore",
    "create_store",
]
