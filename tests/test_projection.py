"""Tests for the view projection"""

import json
from decimal import Decimal

import pytest

from expense_ledger.aggregation import group_by_category, group_by_day
from expense_ledger.ledger import parse_ledger
from expense_ledger.models.expense import GroupBy, GroupTotal
from expense_ledger.projection import ViewProjection, day_label, format_amount


@pytest.fixture
def ledger(sample_records):
    return parse_ledger(json.dumps(sample_records))


@pytest.fixture
def projection() -> ViewProjection:
    return ViewProjection(palette=["red", "green", "blue"])


class TestChartSeries:
    """Tests for bar chart series."""

    def test_color_cycling(self, projection):
        """Test the i-th group gets palette[i % len(palette)]."""
        groups = [GroupTotal(key, Decimal(i + 1)) for i, key in enumerate("ABCDE")]
        points = projection.to_chart_series(groups)
        assert [p.color for p in points] == ["red", "green", "blue", "red", "green"]
        assert [p.label for p in points] == ["A", "B", "C", "D", "E"]

    def test_values_are_raw_totals(self, projection):
        """Test chart values are not rounded."""
        points = projection.to_chart_series([GroupTotal("Food", Decimal("10.005"))])
        assert points[0].value == Decimal("10.005")

    def test_category_series(self, projection, ledger):
        """Test the sample scenario's category bars."""
        points = projection.to_chart_series(group_by_category(ledger))
        assert [(p.label, p.value, p.color) for p in points] == [
            ("Food", Decimal("17.0"), "red"),
            ("Travel", Decimal("20"), "green"),
        ]

    def test_day_series_strips_year(self, projection, ledger):
        """Test day bars are labelled MM-DD."""
        points = projection.to_chart_series(group_by_day(ledger), by=GroupBy.DAY)
        assert [p.label for p in points] == ["01-01", "01-02"]
        assert points[0].value == Decimal("32.5")

    def test_empty_groups(self, projection):
        """Test no groups gives no points."""
        assert projection.to_chart_series([]) == []

    def test_default_palette_from_settings(self):
        """Test the default palette is the configured eight colors."""
        projection = ViewProjection()
        assert len(projection.palette) == 8
        assert projection.palette[0] == "#177AD5"

    def test_palette_from_environment(self, monkeypatch):
        """Test CHART_PALETTE overrides the default colors."""
        monkeypatch.setenv("CHART_PALETTE", "#000, #fff")
        assert ViewProjection().palette == ("#000", "#fff")

    def test_empty_palette_rejected(self):
        """Test a palette with no colors is a configuration error."""
        with pytest.raises(ValueError):
            ViewProjection(palette=[])


class TestPieSeries:
    """Tests for distribution slices."""

    def test_slices_follow_category_order(self, projection, ledger):
        """Test slices match category groups one to one."""
        slices = projection.to_pie_series(group_by_category(ledger))
        assert [(s.text, s.value, s.color) for s in slices] == [
            ("Food", Decimal("17.0"), "red"),
            ("Travel", Decimal("20"), "green"),
        ]


class TestTableRows:
    """Tests for the flat expense table."""

    def test_sample_scenario(self, projection, ledger):
        """Test one row per record in insertion order with formatted amounts."""
        rows = projection.to_table_rows(ledger)
        assert [row.name for row in rows] == ["Lunch", "Taxi", "Coffee"]
        assert [row.amount for row in rows] == ["12.50", "20.00", "4.50"]
        assert [row.date for row in rows] == ["2024-01-01", "2024-01-01", "2024-01-02"]
        assert rows[1].category == "Travel"

    def test_empty_ledger(self, projection):
        """Test an empty ledger gives no rows."""
        assert projection.to_table_rows(()) == []

    @pytest.mark.parametrize("amount,expected", [
        (Decimal("0.005"), "0.01"),
        (Decimal("2.675"), "2.68"),
        (Decimal("1234567.1"), "1234567.10"),
        (Decimal("7"), "7.00"),
    ])
    def test_format_amount(self, amount, expected):
        """Test amounts get exactly two decimals, rounding half up."""
        assert format_amount(amount) == expected

    def test_day_label(self):
        """Test the year is stripped from a day key."""
        assert day_label("2024-12-31") == "12-31"


class TestDashboard:
    """Tests for the combined dashboard snapshot."""

    def test_dashboard_from_sample(self, projection, ledger):
        """Test every part of the dashboard is computed from the ledger."""
        view = projection.build_dashboard(ledger)

        assert view.record_count == 3
        assert view.total == Decimal("37.0")
        assert [p.label for p in view.category_series] == ["Food", "Travel"]
        assert [p.label for p in view.day_series] == ["01-01", "01-02"]
        assert [s.text for s in view.distribution] == ["Food", "Travel"]
        assert len(view.rows) == 3
        assert view.is_empty is False

    def test_dashboard_of_empty_ledger(self, projection):
        """Test an empty ledger gives an empty dashboard."""
        view = projection.build_dashboard(())
        assert view.is_empty is True
        assert view.category_series == []
        assert view.rows == []
