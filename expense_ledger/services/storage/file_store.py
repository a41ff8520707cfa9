"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON file is the default durable backend because:
1. No database setup required
2. Users can open and back up their data directly
3. The ledger is small (one personal expense history)

TRADEOFFS:
- Every write rewrites the whole file (fine at this size)
- No locking between processes

All entries live in one JSON object, {key: text}. Writes go to a temp
file that is then renamed over the original, so a crash mid-write leaves
the previous contents intact.
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from expense_ledger.services.storage.interface import (
    KeyValueStoreInterface,
    ParseError,
    PersistenceError,
)


logger = structlog.get_logger(__name__)


class JsonFileKeyValueStore(KeyValueStoreInterface):
    """
    File-backed implementation of the key-value store.

    Blocking file I/O runs in a worker thread so the event loop only
    suspends at get/set.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _read_document(self) -> dict[str, str]:
        """Read the whole document. Missing file means empty document."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}

        if not raw.strip():
            return {}

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(f"Store file {self._path} is not valid JSON: {e}")

        if not isinstance(document, dict):
            raise ParseError(f"Store file {self._path} does not hold a JSON object")

        return document

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write_document(self, document: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self._path)

    def _set_sync(self, key: str, value: str) -> None:
        try:
            document = self._read_document()
        except ParseError as e:
            # Keep the unreadable file for inspection and start a fresh document
            corrupt_path = self._path.with_name(self._path.name + ".corrupt")
            logger.warning(
                "store_file_corrupt",
                path=str(self._path),
                moved_to=str(corrupt_path),
                error=str(e),
            )
            os.replace(self._path, corrupt_path)
            document = {}

        document[key] = value
        self._write_document(document)

    async def get(self, key: str) -> Optional[str]:
        try:
            document = await asyncio.to_thread(self._read_document)
        except OSError as e:
            raise PersistenceError(f"Failed to read {self._path}: {e}")

        value = document.get(key)
        if value is not None and not isinstance(value, str):
            raise ParseError(f"Entry {key!r} in {self._path} is not text")
        return value

    async def set(self, key: str, value: str) -> bool:
        try:
            await asyncio.to_thread(self._set_sync, key, value)
        except OSError as e:
            raise PersistenceError(f"Failed to write {self._path}: {e}")
        return True
