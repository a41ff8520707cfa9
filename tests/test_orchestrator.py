"""Tests for the creation and dashboard flows"""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from expense_ledger.audit import AuditLogger
from expense_ledger.ledger import LedgerStore
from expense_ledger.orchestrator import (
    ExpenseCreationFlow,
    ExpenseDashboardFlow,
    create_app_components,
    create_storage,
)
from expense_ledger.projection import ViewProjection
from expense_ledger.services.storage import InMemoryKeyValueStore, JsonFileKeyValueStore


def fill_lunch(flow: ExpenseCreationFlow) -> None:
    flow.edit(name="Lunch")
    flow.edit(amount="12.5")
    flow.edit(creation_date=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


class TestExpenseCreationFlow:
    """Tests for the create-expense form flow."""

    @pytest.mark.asyncio
    async def test_submit_creates_expense_and_resets_draft(self, ledger_store):
        """Test a valid draft is saved and the form is cleared."""
        flow = ExpenseCreationFlow(ledger_store)
        fill_lunch(flow)

        outcome = await flow.submit()

        assert outcome.success is True
        assert outcome.created.name == "Lunch"
        assert outcome.created.amount == Decimal("12.5")
        assert flow.draft.name == ""
        assert flow.draft.amount == ""
        assert flow.draft.category == "Food"

    @pytest.mark.asyncio
    async def test_invalid_draft_is_kept_for_correction(self, ledger_store):
        """Test a rejected draft reports issues and stays as typed."""
        flow = ExpenseCreationFlow(ledger_store)
        flow.edit(name="Lunch", amount="0")

        outcome = await flow.submit()

        assert outcome.success is False
        assert outcome.created is None
        assert [issue.field for issue in outcome.issues] == ["amount"]
        assert flow.draft.name == "Lunch"
        assert ledger_store.ledger == ()

    @pytest.mark.asyncio
    async def test_empty_form_reports_missing_fields(self, ledger_store):
        """Test submitting an untouched form asks for name and amount."""
        outcome = await ExpenseCreationFlow(ledger_store).submit()
        assert {issue.field for issue in outcome.issues} == {"name", "amount"}

    @pytest.mark.asyncio
    async def test_storage_failure_reported(self, failing_write_store):
        """Test a failed write comes back as an error message, not an exception."""
        flow = ExpenseCreationFlow(LedgerStore(failing_write_store))
        fill_lunch(flow)

        outcome = await flow.submit()

        assert outcome.success is False
        assert outcome.issues == []
        assert "try again" in outcome.error_message
        assert outcome.ledger == ()
        assert flow.draft.name == "Lunch"

    def test_default_category_from_settings(self, monkeypatch, ledger_store):
        """Test LEDGER_DEFAULT_CATEGORY preselects the category."""
        monkeypatch.setenv("LEDGER_DEFAULT_CATEGORY", "Travel")
        flow = ExpenseCreationFlow(ledger_store)
        assert flow.draft.category == "Travel"

    def test_category_options(self, ledger_store):
        """Test the picker lists the configured categories."""
        flow = ExpenseCreationFlow(ledger_store)
        assert flow.categories == ["Food", "Travel", "Entertainment", "Other"]

    def test_edit_unknown_field(self, ledger_store):
        """Test editing a non-existent field is refused."""
        with pytest.raises(ValueError):
            ExpenseCreationFlow(ledger_store).edit(price="3")


class TestExpenseDashboardFlow:
    """Tests for the charts/table flow."""

    @pytest.mark.asyncio
    async def test_dashboard_reflects_new_expenses(self, storage):
        """Test the dashboard is recomputed after each create."""
        ledger_store = LedgerStore(storage)
        creation = ExpenseCreationFlow(ledger_store)
        dashboard = ExpenseDashboardFlow(ledger_store, projection=ViewProjection(["c0", "c1"]))

        assert (await dashboard.load()).is_empty is True

        fill_lunch(creation)
        await creation.submit()
        creation.edit(name="Taxi", category="Travel", amount="20",
                      creation_date=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc))
        await creation.submit()

        view = await dashboard.load()
        assert view.record_count == 2
        assert [(p.label, p.color) for p in view.category_series] == [("Food", "c0"), ("Travel", "c1")]
        assert [p.label for p in view.day_series] == ["01-01"]
        assert view.day_series[0].value == Decimal("32.5")

    @pytest.mark.asyncio
    async def test_corrupt_storage_shows_empty_dashboard(self):
        """Test a corrupt ledger renders as 'no expenses' instead of failing."""
        store = LedgerStore(InMemoryKeyValueStore({"expenses": "oops"}))
        view = await ExpenseDashboardFlow(store).load()
        assert view.is_empty is True

    @pytest.mark.asyncio
    async def test_dashboard_build_is_logged(self, ledger_store, sample_records):
        """Test building a dashboard emits an audit event."""
        await ledger_store.append(sample_records[0])

        with capture_logs() as logs:
            flow = ExpenseDashboardFlow(ledger_store, audit_logger=AuditLogger())
            flow.build(ledger_store.ledger)

        events = [entry for entry in logs if entry.get("event_type") == "dashboard_built"]
        assert events[0]["details"]["record_count"] == 1


class TestAuditLogging:
    """Tests for ledger audit events."""

    @pytest.mark.asyncio
    async def test_save_and_rejection_logged(self, storage, sample_records):
        """Test appends and rejections both leave an audit trail."""
        with capture_logs() as logs:
            store = LedgerStore(storage, audit_logger=AuditLogger())
            await store.append(sample_records[0])
            with pytest.raises(Exception):
                await store.append({**sample_records[0], "name": ""})

        event_types = [entry.get("event_type") for entry in logs]
        assert "ledger_loaded" in event_types
        assert "expense_saved" in event_types
        assert "expense_rejected" in event_types

    @pytest.mark.asyncio
    async def test_degraded_load_logged_as_warning(self, failing_read_store):
        """Test a failed load is visible in the log."""
        with capture_logs() as logs:
            await LedgerStore(failing_read_store, audit_logger=AuditLogger()).load()

        failures = [entry for entry in logs if entry.get("event_type") == "ledger_load_failed"]
        assert failures[0]["log_level"] == "warning"
        assert failures[0]["error_message"] == "storage unavailable"

    @pytest.mark.asyncio
    async def test_events_tagged_with_environment(self, monkeypatch, storage):
        """Test APP_ENVIRONMENT is attached to every audit entry."""
        monkeypatch.setenv("APP_ENVIRONMENT", "staging")
        with capture_logs() as logs:
            await LedgerStore(storage, audit_logger=AuditLogger()).load()

        assert logs
        assert {entry["environment"] for entry in logs} == {"staging"}


class TestComponentFactory:
    """Tests for wiring the application together."""

    def test_in_memory_by_default(self):
        """Test no storage path means an in-memory store."""
        assert isinstance(create_storage(), InMemoryKeyValueStore)

    def test_file_store_when_path_configured(self, monkeypatch, tmp_path):
        """Test LEDGER_STORAGE_PATH selects the JSON file store."""
        path = tmp_path / "ledger.json"
        monkeypatch.setenv("LEDGER_STORAGE_PATH", str(path))

        storage = create_storage()

        assert isinstance(storage, JsonFileKeyValueStore)
        assert storage.path == path

    @pytest.mark.asyncio
    async def test_components_share_one_ledger(self, tmp_path):
        """Test the flows built by the factory see each other's changes."""
        path = tmp_path / "ledger.json"
        creation, dashboard, ledger_store = create_app_components(JsonFileKeyValueStore(path))

        fill_lunch(creation)
        await creation.submit()

        view = await dashboard.load()
        assert view.rows[0].amount == "12.50"
        assert json.loads(json.loads(path.read_text(encoding="utf-8"))["expenses"])[0]["name"] == "Lunch"
        assert ledger_store.ledger == (await LedgerStore(JsonFileKeyValueStore(path)).load())
