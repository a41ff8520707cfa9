"""
View Projection

Turns aggregation results and ledger records into what the charts and
table render. Projection never aggregates, sorts or filters; it maps one
input item to one output item, in input order.

Colors are assigned by position: the i-th group gets palette[i % len(palette)].
"""

from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from expense_ledger.aggregation import group_by_category, group_by_day, total_amount
from expense_ledger.config import get_settings
from expense_ledger.models.expense import (
    ChartPoint,
    DashboardView,
    Expense,
    GroupBy,
    GroupTotal,
    PieSlice,
    TableRow,
)


TWO_PLACES = Decimal("0.01")


def format_amount(amount: Decimal) -> str:
    """Format an amount with exactly two decimals (half-up)."""
    return str(amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def day_label(day_key: str) -> str:
    """Chart label for a day key: YYYY-MM-DD -> MM-DD."""
    return day_key[5:]


class ViewProjection:
    """Maps ledger data onto chart series and table rows."""

    def __init__(self, palette: Optional[Sequence[str]] = None):
        """
        Args:
            palette: Colors to cycle through. Defaults to CHART_PALETTE.

        Raises:
            ValueError: If the palette is empty
        """
        if palette is None:
            palette = get_settings().chart.palette_list
        self._palette = tuple(palette)
        if not self._palette:
            raise ValueError("Chart palette must contain at least one color")

    @property
    def palette(self) -> tuple[str, ...]:
        return self._palette

    def color_for(self, index: int) -> str:
        return self._palette[index % len(self._palette)]

    def to_chart_series(
        self,
        groups: Iterable[GroupTotal],
        by: GroupBy = GroupBy.CATEGORY,
    ) -> list[ChartPoint]:
        """
        Bar chart points, one per group, colored by position.

        Day groups are labelled MM-DD; category groups by their name.
        """
        points = []
        for index, (key, total) in enumerate(groups):
            label = day_label(key) if by == GroupBy.DAY else key
            points.append(ChartPoint(
                label=label,
                value=total,
                color=self.color_for(index),
            ))
        return points

    def to_pie_series(self, groups: Iterable[GroupTotal]) -> list[PieSlice]:
        """Donut slices, one per group, colored by position."""
        return [
            PieSlice(text=key, value=total, color=self.color_for(index))
            for index, (key, total) in enumerate(groups)
        ]

    def to_table_rows(self, ledger: Iterable[Expense]) -> list[TableRow]:
        """One row per record, in ledger order."""
        return [
            TableRow(
                name=expense.name,
                category=expense.category,
                amount=format_amount(expense.amount),
                date=expense.day_key,
            )
            for expense in ledger
        ]

    def build_dashboard(self, ledger: Sequence[Expense]) -> DashboardView:
        """
        Recompute every aggregation for a ledger snapshot and project it.

        Nothing is cached; call again after the ledger changes.
        """
        by_category = group_by_category(ledger)
        by_day = group_by_day(ledger)

        return DashboardView(
            category_series=self.to_chart_series(by_category, by=GroupBy.CATEGORY),
            day_series=self.to_chart_series(by_day, by=GroupBy.DAY),
            distribution=self.to_pie_series(by_category),
            rows=self.to_table_rows(ledger),
            total=total_amount(ledger),
            record_count=len(ledger),
        )
