"""
Persistent Storage Module.

Provides SQLite-backed persistence for:
- Auction parameters and seller (one record per auction)
- Auction state (one record per auction)
"""

from gda.core.storage.sqlite_adapter import SQLiteAdapter
from gda.core.storage.storage_manager import StorageManager, StoredAuction

__all__ = ["SQLiteAdapter", "StorageManager", "StoredAuction"]
