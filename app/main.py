"""
Streamlit Frontend for Expense Ledger

Two pages:
1. Create Expense - a form that fills a draft and submits it
2. View Expenses - "Charts" and "Table" tabs over the saved ledger

The UI holds no ledger state of its own. It renders whatever the flows
return and reloads the dashboard every time the page is shown.

Run with:
    LEDGER_STORAGE_PATH=data/ledger.json streamlit run app/main.py
"""

import asyncio
from datetime import datetime, time, timezone

import plotly.graph_objects as go
import streamlit as st

from expense_ledger.audit import configure_logging, create_correlation_id
from expense_ledger.config import validate_all_settings
from expense_ledger.models.expense import DashboardView
from expense_ledger.orchestrator import (
    ExpenseCreationFlow,
    ExpenseDashboardFlow,
    create_app_components,
)


# Page configuration
st.set_page_config(
    page_title="Expense Ledger",
    page_icon="💸",
    layout="wide",
    initial_sidebar_state="expanded",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    configure_logging()
    return create_app_components()


def check_settings() -> bool:
    """Show configuration problems in the sidebar. Returns True if all are valid."""
    status = validate_all_settings()
    errors = [
        message for key, message in status.items()
        if key.endswith("_error")
    ]
    for message in errors:
        st.sidebar.error(f"Configuration error: {message}")
    return not errors


def main():
    """Main application entry point."""
    st.sidebar.title("💸 Expense Ledger")
    st.sidebar.markdown("---")

    if not check_settings():
        st.stop()

    creation_flow, dashboard_flow, _ = get_components()

    page = st.sidebar.radio(
        "Navigate to:",
        ["➕ Create Expense", "📊 View Expenses"],
        index=0,
    )

    if page == "➕ Create Expense":
        render_create_page(creation_flow)
    else:
        render_view_page(dashboard_flow)


def render_create_page(creation_flow: ExpenseCreationFlow):
    """Render the expense creation form."""
    st.title("➕ Create Expense")

    draft = creation_flow.draft
    categories = creation_flow.categories
    category_index = (
        categories.index(draft.category) if draft.category in categories else 0
    )

    with st.form("expense_form"):
        name = st.text_input(
            "Expense Name",
            value=draft.name,
            placeholder="Enter expense name",
        )
        category = st.selectbox("Category", categories, index=category_index)
        amount = st.text_input(
            "Amount",
            value=draft.amount,
            placeholder="Enter amount",
        )
        picked_date = st.date_input("Date", value=draft.creation_date.date())

        submitted = st.form_submit_button("Create Expense", type="primary")

    if not submitted:
        return

    creation_flow.edit(
        name=name,
        category=category,
        amount=amount,
        creation_date=datetime.combine(picked_date, time(), tzinfo=timezone.utc),
    )
    outcome = run_async(creation_flow.submit(correlation_id=create_correlation_id()))

    if outcome.success:
        created = outcome.created
        st.success(f"Saved {created.name} ({created.category}) - {created.amount:.2f}")
    elif outcome.issues:
        for issue in outcome.issues:
            st.error(issue.message)
    else:
        st.error(outcome.error_message)


def render_view_page(dashboard_flow: ExpenseDashboardFlow):
    """Render the charts and table tabs."""
    st.title("📊 Expenses")

    with st.spinner("Loading expenses..."):
        view = run_async(dashboard_flow.load())

    if view.is_empty:
        st.info("No expenses found")
        return

    st.metric("Total spent", f"{view.total:.2f}", help=f"{view.record_count} expenses")

    charts_tab, table_tab = st.tabs(["Charts", "Table"])
    with charts_tab:
        render_charts(view)
    with table_tab:
        render_table(view)


def render_charts(view: DashboardView):
    st.subheader("Total Expense by Category")
    st.plotly_chart(bar_figure(view.category_series), use_container_width=True)

    st.subheader("Daily Expense Trend")
    st.plotly_chart(bar_figure(view.day_series), use_container_width=True)

    st.subheader("Expense Distribution")
    pie = go.Figure(go.Pie(
        labels=[slice_.text for slice_ in view.distribution],
        values=[float(slice_.value) for slice_ in view.distribution],
        marker=dict(colors=[slice_.color for slice_ in view.distribution]),
        hole=0.5,
        textinfo="label+value",
        sort=False,
    ))
    pie.update_layout(margin=dict(t=30, b=10, l=10, r=10))
    st.plotly_chart(pie, use_container_width=True)


def bar_figure(points) -> go.Figure:
    fig = go.Figure(go.Bar(
        x=[point.label for point in points],
        y=[float(point.value) for point in points],
        marker_color=[point.color for point in points],
    ))
    fig.update_layout(margin=dict(t=30, b=10, l=10, r=10))
    return fig


def render_table(view: DashboardView):
    st.subheader("Expense List")
    st.dataframe(
        [
            {
                "Name": row.name,
                "Category": row.category,
                "Amount": row.amount,
                "Date": row.date,
            }
            for row in view.rows
        ],
        use_container_width=True,
        hide_index=True,
    )


if __name__ == "__main__":
    main()
