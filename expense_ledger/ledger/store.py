"""
Ledger Store

Durable, append-only persistence of the expense ledger on top of a
whole-blob key-value store.

DESIGN DECISION: The store only offers get/set of a whole value, so append
is read-the-collection / add one / write-the-collection. The in-memory
ledger advances ONLY after the write succeeds; a failed write leaves it
exactly where it was so the caller can retry.

Appends and loads on one LedgerStore are serialized with an asyncio.Lock.
Two LedgerStore instances (or two processes) writing the same key are
NOT coordinated; the later write wins.

Load never fails: a missing entry is the normal first-run state, and an
unreadable or corrupt entry degrades to an empty ledger (logged), so the
user can keep recording expenses.
"""

import asyncio
from typing import Optional, Union
from uuid import UUID

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from expense_ledger.audit import AuditLogger
from expense_ledger.config import get_settings
from expense_ledger.models.expense import Expense, Ledger
from expense_ledger.services.storage import (
    KeyValueStoreInterface,
    ParseError,
    PersistenceError,
)
from expense_ledger.validation import ExpenseValidator, ValidationError
from expense_ledger.validation.validator import Candidate


_ledger_adapter = TypeAdapter(list[Expense])


def parse_ledger(text: Union[str, bytes]) -> Ledger:
    """
    Parse the persisted text into a ledger.

    Raises:
        ParseError: If the text is not a JSON array of valid records
    """
    try:
        return tuple(_ledger_adapter.validate_json(text))
    except PydanticValidationError as e:
        raise ParseError(f"Stored ledger is not a valid expense list: {e}")


def serialize_ledger(ledger: Ledger) -> bytes:
    """Serialize a ledger to the persisted layout (a bare JSON array)."""
    return _ledger_adapter.dump_json(list(ledger), by_alias=True)


class LedgerStore:
    """
    Owns the ledger and the single storage entry it lives in.

    Callers only ever receive tuple snapshots; nothing outside this class
    can change the ledger.
    """

    def __init__(
        self,
        storage: KeyValueStoreInterface,
        storage_key: Optional[str] = None,
        validator: Optional[ExpenseValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Initialize the ledger store.

        Args:
            storage: Key-value backend holding the ledger
            storage_key: Entry key. Defaults to LEDGER_STORAGE_KEY ("expenses").
            validator: Candidate validator. Defaults to the configured one.
            audit_logger: Defaults to a local structlog audit logger.
        """
        self._storage = storage
        self._key = storage_key or get_settings().ledger.storage_key
        self._validator = validator or ExpenseValidator()
        self._audit_logger = audit_logger or AuditLogger()
        self._ledger: Ledger = ()
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def storage_key(self) -> str:
        return self._key

    @property
    def ledger(self) -> Ledger:
        """Current snapshot. Empty until the first load or append."""
        return self._ledger

    @property
    def validator(self) -> ExpenseValidator:
        return self._validator

    async def _read(self) -> Ledger:
        text = await self._storage.get(self._key)
        if text is None:
            return ()
        return parse_ledger(text)

    async def load(self, correlation_id: Optional[UUID] = None) -> Ledger:
        """
        Load the persisted ledger and make it the current state.

        Never raises for missing, unreadable or corrupt data; those
        all yield an empty ledger. Waits for an in-flight append so the
        snapshot never goes back past a saved record.
        """
        async with self._lock:
            return await self._load_locked(correlation_id)

    async def _load_locked(self, correlation_id: Optional[UUID]) -> Ledger:
        try:
            ledger = await self._read()
        except PersistenceError as e:
            self._audit_logger.log_ledger_load_failed(
                storage_key=self._key,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            ledger = ()
        except Exception as e:
            # Backend raised something outside the storage contract
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": "load", "storage_key": self._key},
                correlation_id=correlation_id,
            )
            self._audit_logger.log_ledger_load_failed(
                storage_key=self._key,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            ledger = ()
        else:
            self._audit_logger.log_ledger_loaded(
                record_count=len(ledger),
                storage_key=self._key,
                correlation_id=correlation_id,
            )

        self._ledger = ledger
        self._loaded = True
        return ledger

    async def append(
        self,
        candidate: Candidate,
        correlation_id: Optional[UUID] = None,
    ) -> Ledger:
        """
        Validate a candidate, append it and persist the whole ledger.

        Returns:
            The new ledger, which is now the current state

        Raises:
            ValidationError: Candidate is invalid; nothing was written
            PersistenceError: The write failed; the ledger is unchanged
        """
        try:
            expense = self._validator.ensure_valid(candidate)
        except ValidationError as e:
            self._audit_logger.log_expense_rejected(
                issues=e.to_dicts(),
                correlation_id=correlation_id,
            )
            raise

        async with self._lock:
            if not self._loaded:
                await self._load_locked(correlation_id)

            updated: Ledger = self._ledger + (expense,)
            payload = serialize_ledger(updated).decode("utf-8")

            try:
                stored = await self._storage.set(self._key, payload)
            except PersistenceError as e:
                self._audit_logger.log_save_failed(
                    storage_key=self._key,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
                raise
            except Exception as e:
                self._audit_logger.log_save_failed(
                    storage_key=self._key,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
                raise PersistenceError(
                    f"Failed to write ledger under key {self._key!r}: {e}"
                ) from e

            if not stored:
                self._audit_logger.log_save_failed(
                    storage_key=self._key,
                    error_message="Store reported the write as unsuccessful",
                    correlation_id=correlation_id,
                )
                raise PersistenceError(
                    f"Store did not accept the write for key {self._key!r}"
                )

            self._ledger = updated

        self._audit_logger.log_expense_saved(
            name=expense.name,
            category=expense.category,
            amount=f"{expense.amount:.2f}",
            record_count=len(updated),
            correlation_id=correlation_id,
        )
        return updated
