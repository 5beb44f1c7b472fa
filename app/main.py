"""
Streamlit Frontend for Bills Tracker

This is the screen the user works with every month.

DESIGN PRINCIPLES:
1. Overview first: what is due, what is paid, what is left
2. One click to mark a bill paid for this month
3. Clear error messages next to the field that caused them
4. Nothing changes without an explicit button press

All numbers come from the tracker's query methods; this module only
lays them out and forwards button presses as commands.
"""

import asyncio
import html
from decimal import Decimal

import plotly.graph_objects as go
import streamlit as st

from bills_tracker.config import get_settings, validate_all_settings
from bills_tracker.models.expense import (
    INPUT_CATEGORY_DEFAULT,
    BillRow,
    CommandResult,
    DueStatus,
    ExpenseDraft,
    LegendEntry,
)
from bills_tracker.models.preferences import AppPreferences
from bills_tracker.orchestrator import (
    BillsTracker,
    PreferencesManager,
    create_app_components,
)
from bills_tracker.queries import describe_due
from bills_tracker.services.storage import StorageError


# Page configuration
st.set_page_config(
    page_title="Bills Tracker",
    page_icon="🧾",
    layout="wide",
    initial_sidebar_state="expanded",
)

STATUS_COLORS = {
    DueStatus.PAID: "#28a745",
    DueStatus.OVERDUE: "#dc3545",
    DueStatus.DUE_SOON: "#fd7e14",
    DueStatus.UPCOMING: "#b0bec5",
}


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
    return create_app_components(use_storage=True)


def apply_theme(preferences: AppPreferences):
    """Inject CSS for the accent colour and dark mode."""
    background = "#121212" if preferences.dark_mode else "#F6F8FC"
    text = "#ECEFF1" if preferences.dark_mode else "#2c3e50"
    st.markdown(f"""
    <style>
        .stApp {{
            background-color: {background};
            color: {text};
        }}
        .stButton>button {{
            width: 100%;
            border-color: {preferences.seed_color};
        }}
        .bill-card {{
            padding: 12px 16px;
            border-radius: 10px;
            margin: 6px 0;
            border-left: 6px solid var(--status-color);
        }}
    </style>
    """, unsafe_allow_html=True)


def format_amount(amount: Decimal) -> str:
    symbol = get_settings().app.currency_symbol
    return f"{symbol}{amount:,.2f}"


def show_result(result: CommandResult, success_message: str):
    """Flash the outcome of a command."""
    if result.success:
        st.session_state.flash = ("success", success_message)
    else:
        st.session_state.flash = ("error", result.error_message or "Something went wrong")


def render_flash():
    flash = st.session_state.pop("flash", None)
    if not flash:
        return
    kind, message = flash
    if kind == "success":
        st.success(message)
    else:
        st.error(message)


def main():
    """Main application entry point."""
    tracker, preferences_manager, audit_logger = get_components()

    if not tracker.is_loaded:
        try:
            run_async(tracker.load())
        except StorageError as e:
            st.error(f"Could not read your saved bills: {e}")
            st.stop()

    preferences = run_async(preferences_manager.load())
    apply_theme(preferences)

    # Sidebar navigation
    st.sidebar.title("🧾 Bills Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🏠 Overview", "📋 Bills", "📊 Analytics", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("➕ Add Bill", type="primary"):
        st.session_state.editing_id = None
        st.session_state.show_form = True

    render_flash()

    if st.session_state.get("show_form"):
        render_expense_form(tracker)

    # Route to appropriate page
    if page == "🏠 Overview":
        render_overview_page(tracker)
    elif page == "📋 Bills":
        render_bills_page(tracker)
    elif page == "📊 Analytics":
        render_analytics_page(tracker)
    elif page == "⚙️ Settings":
        render_settings_page(preferences_manager, preferences, audit_logger)


def render_expense_form(tracker: BillsTracker):
    """Add or edit a bill."""
    editing_id = st.session_state.get("editing_id")
    existing = tracker.get_expense(editing_id) if editing_id else None
    presets = get_settings().app.preset_categories_list

    st.subheader("Edit bill" if existing else "Add bill")

    with st.form("expense_form", clear_on_submit=False):
        name = st.text_input(
            "Name (e.g., Rent, Wi-Fi) *",
            value=existing.name if existing else "",
        )
        amount = st.text_input(
            "Amount *",
            value=f"{existing.amount:.2f}" if existing else "",
        )

        col1, col2 = st.columns(2)
        current_category = existing.category if existing else INPUT_CATEGORY_DEFAULT
        default_index = presets.index(INPUT_CATEGORY_DEFAULT) if INPUT_CATEGORY_DEFAULT in presets else 0
        with col1:
            preset = st.selectbox(
                "Category",
                options=presets,
                index=presets.index(current_category) if current_category in presets else default_index,
            )
        with col2:
            custom = st.text_input(
                "Or type a category",
                value="" if current_category in presets else current_category,
            )

        due_day = st.slider(
            "Due day",
            min_value=1,
            max_value=31,
            value=existing.due_day if existing else tracker.now().day,
            help="Short months will clamp to their last day (e.g., Feb).",
        )

        submit_col, cancel_col = st.columns(2)
        with submit_col:
            submitted = st.form_submit_button("Save" if existing else "Add", type="primary")
        with cancel_col:
            cancelled = st.form_submit_button("Cancel")

    if cancelled:
        st.session_state.show_form = False
        st.rerun()

    if submitted:
        draft = ExpenseDraft(
            name=name,
            category=custom.strip() or preset,
            amount=amount,
            due_day=due_day,
        )
        if existing:
            result = run_async(tracker.update_expense(existing.id, draft))
        else:
            result = run_async(tracker.add_expense(draft))

        if result.validation is not None and not result.validation.is_valid:
            st.error(result.error_message)
            return

        show_result(result, f"Saved {result.expense.name}" if result.expense else "Saved")
        st.session_state.show_form = False
        st.rerun()


def render_metric_cards(tracker: BillsTracker):
    metrics = tracker.overview()

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Total monthly bills", format_amount(metrics.total_all))
    with col2:
        st.metric(
            "Paid this month",
            format_amount(metrics.total_paid),
            help=f"{metrics.paid_count} of {metrics.bill_count} bills",
        )
    with col3:
        st.metric("Unpaid this month", format_amount(metrics.total_unpaid))


def render_overview_page(tracker: BillsTracker):
    """Render the overview page."""
    now = tracker.now()
    st.title(f"🏠 {now:%B %Y}")

    render_metric_cards(tracker)
    st.markdown("---")

    paid_only = st.toggle("Paid this month only", value=True, key="overview_paid_only")
    render_pie(tracker.category_legend(paid_only=paid_only))

    st.markdown("---")
    st.subheader("Bills")
    render_bill_list(tracker)


def render_bills_page(tracker: BillsTracker):
    """Render the bills list page."""
    st.title("📋 Bills")
    render_bill_list(tracker)


def render_analytics_page(tracker: BillsTracker):
    """Render the category breakdown."""
    st.title("📊 Analytics")

    paid_only = st.toggle("Paid this month only", value=True, key="analytics_paid_only")
    legend = tracker.category_legend(paid_only=paid_only)

    render_pie(legend)

    if legend:
        st.markdown("### Spend by category")
        for entry in legend:
            st.markdown(
                f"- **{entry.category}**: {format_amount(entry.amount)} "
                f"({entry.percent:.0f}%)"
            )


def render_pie(legend: list[LegendEntry]):
    """Category pie chart; shows a placeholder when there is nothing to chart."""
    if not legend:
        st.info("No data to chart yet")
        return

    fig = go.Figure(
        go.Pie(
            labels=[entry.category for entry in legend],
            values=[float(entry.amount) for entry in legend],
            hole=0.35,
            sort=False,
            textinfo="percent",
        )
    )
    fig.update_layout(title="Spend by category", margin=dict(t=40, b=0, l=0, r=0))
    st.plotly_chart(fig, use_container_width=True)


def render_bill_list(tracker: BillsTracker):
    rows = tracker.bill_rows()

    if not rows:
        st.info("No expenses yet. Click “Add Bill”.")
        return

    for row in rows:
        render_bill_row(tracker, row)


def render_bill_row(tracker: BillsTracker, row: BillRow):
    expense = row.expense
    color = STATUS_COLORS[row.status]

    info_col, paid_col, edit_col, delete_col = st.columns([6, 2, 1, 1])

    with info_col:
        st.markdown(f"""
        <div class="bill-card" style="--status-color: {color};">
            <strong>{html.escape(expense.name)}</strong> · {html.escape(expense.category)}<br/>
            {format_amount(expense.amount)} · due {row.due_date:%b} {row.due_date.day}
            · <span style="color: {color};">{describe_due(row)}</span>
        </div>
        """, unsafe_allow_html=True)

    with paid_col:
        paid = st.checkbox("Paid", value=row.is_paid, key=f"paid_{expense.id}")
        if paid != row.is_paid:
            result = run_async(tracker.toggle_paid(expense.id))
            state = "paid" if paid else "unpaid"
            show_result(result, f"{expense.name} marked {state}")
            st.rerun()

    with edit_col:
        if st.button("✏️", key=f"edit_{expense.id}", help="Edit"):
            st.session_state.editing_id = expense.id
            st.session_state.show_form = True
            st.rerun()

    with delete_col:
        if st.button("🗑️", key=f"delete_{expense.id}", help="Delete"):
            st.session_state.confirm_delete = expense.id

    if st.session_state.get("confirm_delete") == expense.id:
        st.warning(f"Delete expense? This will remove \"{expense.name}\".")
        yes_col, no_col = st.columns(2)
        with yes_col:
            if st.button("Delete", key=f"confirm_delete_{expense.id}", type="primary"):
                result = run_async(tracker.delete_expense(expense.id))
                st.session_state.confirm_delete = None
                show_result(result, f"Deleted {expense.name}")
                st.rerun()
        with no_col:
            if st.button("Cancel", key=f"cancel_delete_{expense.id}"):
                st.session_state.confirm_delete = None
                st.rerun()


def render_settings_page(
    preferences_manager: PreferencesManager,
    preferences: AppPreferences,
    audit_logger,
):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Appearance")
    dark_mode = st.toggle("Dark mode", value=preferences.dark_mode)
    seed_color = st.color_picker("Accent colour", value=preferences.seed_color)

    if st.button("Save appearance", type="primary"):
        updated = AppPreferences(dark_mode=dark_mode, seed_color=seed_color.upper())
        if run_async(preferences_manager.save(updated)):
            st.session_state.flash = ("success", "Appearance saved")
        else:
            st.session_state.flash = ("error", "Could not save appearance")
        st.rerun()

    st.markdown("---")
    st.markdown("### Storage")

    status = validate_all_settings()
    if status.get("storage", False):
        st.success(f"✅ Saving to {get_settings().storage.store_path}")
    else:
        st.error(f"❌ Storage - {status.get('storage_error', 'Not configured')}")

    st.markdown(
        "To change where bills are kept, set `BILLS_STORAGE_DATA_DIR` "
        "in a `.env` file. See `.env.example`."
    )

    st.markdown("---")
    with st.expander("🕘 Recent activity"):
        events = audit_logger.recent_events(limit=20)
        if not events:
            st.markdown("Nothing yet.")
        for event in events:
            st.markdown(f"- `{event.timestamp:%H:%M:%S}` {event.description}")


if __name__ == "__main__":
    main()
