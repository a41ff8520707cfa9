"""
Storage Services Package

Provides the key-value store interface and concrete implementations.
The JSON file store is the durable backend; the in-memory store is used
for tests and when no storage path is configured.
"""

from expense_ledger.services.storage.interface import (
    KeyValueStoreInterface,
    ParseError,
    PersistenceError,
)
from expense_ledger.services.storage.file_store import JsonFileKeyValueStore
from expense_ledger.services.storage.memory import InMemoryKeyValueStore

__all__ = [
    # Interfaces
    "KeyValueStoreInterface",
    # Exceptions
    "ParseError",
    "PersistenceError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]
