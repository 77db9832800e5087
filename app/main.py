"""
Streamlit Frontend for PG Ledger

This is the page the week's in-charge keeps open while collecting money
and doing the shopping.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Explicit confirmation before anything is removed or reset
3. Clear error messages in simple language
4. A finalized week is shown read-only

All state lives in the TrackerFlow; this module only draws it and
forwards clicks.
"""

import streamlit as st

from pgledger.config import validate_all_settings
from pgledger.ledger import format_amount
from pgledger.orchestrator import OperationResult, TrackerFlow, create_app_components


# Page configuration
st.set_page_config(
    page_title="PG Expense Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_tracker() -> TrackerFlow:
    """Get or create the tracker (cached for the server process)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize storage: {e}")
        return create_app_components(use_storage=False)


def show_result(result: OperationResult) -> None:
    """
    Queue a result so it survives the rerun that follows a click.

    Also starts a new confirmation round: every confirm checkbox gets a
    fresh key, so no tick carries over to whatever is drawn next.
    """
    st.session_state.last_result = result
    st.session_state.confirm_round = st.session_state.get("confirm_round", 0) + 1


def confirm_key(tracker: TrackerFlow, name: str) -> str:
    """Widget key for a confirm checkbox, unique per week and round."""
    confirm_round = st.session_state.get("confirm_round", 0)
    return f"confirm_{name}_w{tracker.current_week}_r{confirm_round}"


def render_last_result() -> None:
    result = st.session_state.pop("last_result", None)
    if result is None:
        return
    if result.success:
        st.success(result.message)
    else:
        st.error(result.message)
    if result.warning:
        st.warning(result.warning)


def main():
    """Main application entry point."""
    tracker = get_tracker()
    symbol = tracker.currency_symbol

    st.sidebar.title("💰 PG Expense Tracker")
    st.sidebar.markdown("---")
    page = st.sidebar.radio(
        "Navigate to:",
        ["📅 This Week", "⚙️ Settings"],
        index=0,
    )

    if page == "📅 This Week":
        render_week_page(tracker, symbol)
    else:
        render_settings_page(tracker)


def render_week_page(tracker: TrackerFlow, symbol: str):
    """Render the current week."""
    record = tracker.current_record
    finalized = record.finalized

    st.title(f"Week {tracker.current_week} · Month {tracker.current_month}")
    render_last_result()

    nav_prev, nav_next, _ = st.columns([1, 1, 4])
    if nav_prev.button("◀ Previous Week", disabled=tracker.current_week == 1):
        show_result(tracker.retreat_week())
        st.rerun()
    if nav_next.button("Next Week ▶"):
        show_result(tracker.advance_week())
        st.rerun()

    st.markdown("---")
    left, right = st.columns(2)

    with left:
        st.subheader("In-Charge & Payments")
        st.markdown(f"**Current in-charge:** {record.in_charge or 'Not Set'}")
        with st.form("in_charge_form", clear_on_submit=True):
            name = st.text_input("In-charge name", value=record.in_charge, disabled=finalized)
            if st.form_submit_button("Save In-Charge", disabled=finalized):
                show_result(tracker.set_in_charge(name))
                st.rerun()

        with st.form("payment_form", clear_on_submit=True):
            payer = st.text_input("Payer name", disabled=finalized)
            amount = st.text_input("Amount paid", disabled=finalized)
            if st.form_submit_button("Add Entry", disabled=finalized):
                show_result(tracker.add_payment(payer, amount))
                st.rerun()

        if not record.payments:
            st.caption("No payment entries for this week yet.")
        for index, payment in enumerate(record.payments):
            row, confirm, remove = st.columns([4, 2, 1])
            row.write(f"{payment.payer}: {format_amount(payment.amount, symbol)}")
            sure = confirm.checkbox(
                "Confirm",
                key=confirm_key(tracker, f"payment_{index}"),
                disabled=finalized,
            )
            if remove.button("✕", key=f"remove_payment_{index}", disabled=finalized or not sure):
                show_result(tracker.remove_payment(index))
                st.rerun()

        with st.form("expense_form"):
            expense = st.text_input(
                "Weekly total expense",
                value=str(record.expense) if record.expense else "",
                disabled=finalized,
            )
            if st.form_submit_button("Save Weekly Expense", disabled=finalized):
                show_result(tracker.set_expense(expense))
                st.rerun()

    with right:
        st.subheader("Market List")
        with st.form("market_form", clear_on_submit=True):
            item = st.text_input("Item", disabled=finalized)
            if st.form_submit_button("Add Item", disabled=finalized):
                show_result(tracker.add_market_item(item))
                st.rerun()

        if not record.market_items:
            st.caption("No items added for this week yet.")
        for index, market_item in enumerate(record.market_items):
            row, confirm, remove = st.columns([4, 2, 1])
            row.write(market_item)
            sure = confirm.checkbox(
                "Confirm",
                key=confirm_key(tracker, f"item_{index}"),
                disabled=finalized,
            )
            if remove.button("✕", key=f"remove_item_{index}", disabled=finalized or not sure):
                show_result(tracker.remove_market_item(index))
                st.rerun()

    st.markdown("---")
    render_summary(tracker, symbol)

    st.markdown("---")
    finalize_col, report_col, reset_col = st.columns(3)

    with finalize_col:
        if finalized:
            st.button("Week Finalized", disabled=True)
        else:
            sure = st.checkbox(
                "No more changes can be made once finalized",
                key=confirm_key(tracker, "finalize"),
            )
            if st.button("Finalize Week Entries", type="primary", disabled=not sure):
                show_result(tracker.finalize())
                st.rerun()

    with report_col:
        st.download_button(
            "Download Report",
            data=tracker.render_report(),
            file_name=f"expense_report_week_{tracker.current_week}.html",
            mime="text/html",
        )

    with reset_col:
        sure = st.checkbox(
            "I understand ALL weeks will be cleared",
            key=confirm_key(tracker, "reset"),
        )
        if st.button("Reset All Data", disabled=not sure):
            show_result(tracker.reset_all())
            st.rerun()


def render_summary(tracker: TrackerFlow, symbol: str):
    """Weekly and monthly totals, rounded for display only."""
    record = tracker.current_record
    totals = tracker.monthly_totals()

    st.subheader("Summary")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Weekly Total Paid", format_amount(tracker.weekly_total_paid(), symbol))
    c2.metric("Weekly Expense", format_amount(record.expense, symbol))
    c3.metric("Monthly Total Paid", format_amount(totals.total_paid, symbol))
    c4.metric("Monthly Expense", format_amount(totals.total_expense, symbol))
    st.caption(
        f"Month {totals.month} covers weeks {totals.start_week}-{totals.end_week}. "
        f"Status: {record.status_label}"
    )


def render_settings_page(tracker: TrackerFlow):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")
    status = validate_all_settings()
    for name, key in [("Storage", "storage"), ("Application", "app")]:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")

    st.markdown("### Recent Activity")
    storage = tracker.audit_logger.storage
    if storage is None:
        st.info("Activity is only logged locally in this session.")
    else:
        for event in storage.get_recent_events(limit=20):
            st.write(f"{event.timestamp:%Y-%m-%d %H:%M} · {event.description}")

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
