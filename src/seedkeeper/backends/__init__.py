"""Storage backends for the seed ledger and seed bodies."""

from seedkeeper.backends.base import Storage, split_table
from seedkeeper.backends.memory import MemoryStorage
from seedkeeper.backends.postgres import PostgresStorage

__all__ = ["MemoryStorage", "PostgresStorage", "Storage", "split_table"]
