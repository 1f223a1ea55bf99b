"""Select the ledger store engine from configuration"""

from finance_tracker.config import Settings
from finance_tracker.infrastructure.database.session import build_engine
from finance_tracker.infrastructure.storage.base import LedgerStore
from finance_tracker.infrastructure.storage.json_store import JsonLedgerStore
from finance_tracker.infrastructure.storage.sql_store import SqlLedgerStore


def build_store(settings: Settings) -> LedgerStore:
    """
    Raises:
        ValueError: On an unknown storage_backend
    """
    backend = settings.storage_backend.lower()
    if backend == "json":
        return JsonLedgerStore(settings.data_file)
    if backend == "sql":
        return SqlLedgerStore(build_engine(settings.database_url))
    raise ValueError(f"Unknown storage backend: {settings.storage_backend!r} (expected 'json' or 'sql')")
