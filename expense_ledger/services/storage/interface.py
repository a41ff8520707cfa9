"""
Abstract Storage Interface

DESIGN DECISION: The ledger only needs whole-blob get/set on a string key.
Keeping the interface that small means:
1. Any key-value backend (file, embedded DB, remote blob) can be plugged in
2. In-memory storage works for tests
3. Business logic stays decoupled from storage implementation

There is no partial write and no compare-and-set. Callers that need
read-modify-write must serialize it themselves.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for a text key-value store.

    Both operations may suspend and must be safe to call repeatedly.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the text stored under a key.

        Args:
            key: The entry key

        Returns:
            The stored text, or None if nothing is stored under the key

        Raises:
            PersistenceError: If the backend could not be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> bool:
        """
        Replace the text stored under a key.

        Args:
            key: The entry key
            value: Text to store

        Returns:
            True if stored successfully

        Raises:
            PersistenceError: If the write fails
        """
        pass


class PersistenceError(Exception):
    """Base exception for storage operations."""
    pass


class ParseError(PersistenceError):
    """Stored text is not in the expected format."""
    pass
