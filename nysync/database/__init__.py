"""Database module - connection management and data access."""

from nysync.database.connection import (
    get_async_client,
    get_async_database,
    close_async_client,
    ping_database,
)
from nysync.database.store import BillStore, StoreError

__all__ = [
    "get_async_client",
    "get_async_database",
    "close_async_client",
    "ping_database",
    "BillStore",
    "StoreError",
]
