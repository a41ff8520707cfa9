"""
Main Orchestrator for Expense Ledger

This module ties together all the components and defines the
end-to-end flows for:
1. Expense creation (edit draft → validate → append → persist → reset draft)
2. Dashboard (load → aggregate → project)

DESIGN DECISION: Flows never raise for user-correctable problems.
Validation and storage failures come back as outcome objects the UI can
render directly; the ledger store underneath still raises.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from expense_ledger.audit import AuditLogger, create_correlation_id
from expense_ledger.config import get_settings
from expense_ledger.ledger import LedgerStore
from expense_ledger.models.expense import (
    DashboardView,
    Expense,
    ExpenseDraft,
    Ledger,
    ValidationIssue,
    apply_edit,
    new_draft,
)
from expense_ledger.projection import ViewProjection
from expense_ledger.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStoreInterface,
    PersistenceError,
)
from expense_ledger.validation import ValidationError


class CreationOutcome(BaseModel):
    """What happened when the user pressed "Create Expense"."""

    success: bool
    ledger: Ledger = ()
    issues: list[ValidationIssue] = Field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def created(self) -> Optional[Expense]:
        """The record that was appended, if any."""
        if self.success and self.ledger:
            return self.ledger[-1]
        return None


class ExpenseCreationFlow:
    """
    Orchestrates the expense creation form.

    Flow:
    1. Edit → each field change produces a new draft
    2. Submit → validate and append through the ledger store
    3. Reset → on success only, the draft returns to its initial state

    On failure the draft is kept so the user can correct and resubmit.
    """

    def __init__(
        self,
        ledger_store: LedgerStore,
        default_category: Optional[str] = None,
    ):
        self._ledger_store = ledger_store
        self._default_category = (
            default_category or get_settings().ledger.default_category
        )
        self._draft = new_draft(self._default_category)

    @property
    def draft(self) -> ExpenseDraft:
        return self._draft

    @property
    def categories(self) -> list[str]:
        """Options for the category picker."""
        return self._ledger_store.validator.categories

    def edit(self, **changes) -> ExpenseDraft:
        """Apply a field delta to the current draft."""
        self._draft = apply_edit(self._draft, **changes)
        return self._draft

    def reset(self) -> ExpenseDraft:
        self._draft = new_draft(self._default_category)
        return self._draft

    async def submit(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> CreationOutcome:
        """
        Create an expense from the current draft.

        Returns:
            CreationOutcome; never raises for invalid input or storage errors
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            ledger = await self._ledger_store.append(
                self._draft,
                correlation_id=correlation_id,
            )
        except ValidationError as e:
            return CreationOutcome(
                success=False,
                ledger=self._ledger_store.ledger,
                issues=e.issues,
                error_message=str(e),
            )
        except PersistenceError as e:
            return CreationOutcome(
                success=False,
                ledger=self._ledger_store.ledger,
                error_message=f"Could not save the expense, please try again ({e})",
            )

        self.reset()
        return CreationOutcome(success=True, ledger=ledger)


class ExpenseDashboardFlow:
    """
    Orchestrates the charts and table screens.

    Every call reloads the ledger and recomputes the dashboard.
    """

    def __init__(
        self,
        ledger_store: LedgerStore,
        projection: Optional[ViewProjection] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._ledger_store = ledger_store
        self._projection = projection or ViewProjection()
        self._audit_logger = audit_logger or AuditLogger()

    async def load(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> DashboardView:
        """Load the ledger and build the dashboard from it."""
        correlation_id = correlation_id or create_correlation_id()

        ledger = await self._ledger_store.load(correlation_id=correlation_id)
        return self.build(ledger, correlation_id=correlation_id)

    def build(
        self,
        ledger: Ledger,
        correlation_id: Optional[UUID] = None,
    ) -> DashboardView:
        """Build the dashboard for a snapshot the caller already holds."""
        view = self._projection.build_dashboard(ledger)

        self._audit_logger.log_dashboard_built(
            record_count=view.record_count,
            category_count=len(view.category_series),
            day_count=len(view.day_series),
            correlation_id=correlation_id,
        )
        return view


def create_storage() -> KeyValueStoreInterface:
    """
    Build the configured key-value store.

    LEDGER_STORAGE_PATH set → JSON file store; otherwise in-memory.
    """
    storage_path = get_settings().ledger.storage_path
    if storage_path:
        return JsonFileKeyValueStore(storage_path)
    return InMemoryKeyValueStore()


def create_app_components(
    storage: Optional[KeyValueStoreInterface] = None,
) -> tuple[ExpenseCreationFlow, ExpenseDashboardFlow, LedgerStore]:
    """
    Factory function to create all application components.

    Args:
        storage: Backend to use. Defaults to create_storage().

    Returns:
        (creation_flow, dashboard_flow, ledger_store)
    """
    audit_logger = AuditLogger()
    ledger_store = LedgerStore(
        storage or create_storage(),
        audit_logger=audit_logger,
    )

    creation_flow = ExpenseCreationFlow(ledger_store=ledger_store)
    dashboard_flow = ExpenseDashboardFlow(
        ledger_store=ledger_store,
        audit_logger=audit_logger,
    )

    return creation_flow, dashboard_flow, ledger_store
