"""
Streamlit Frontend for MilkyWay Ledger

This is the screen a household uses every day to note deliveries and
payments.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. The view holds no ledger rules - every action goes through LedgerService
3. Destructive actions (bulk-fill) say so before they run
4. The AI summary never blocks or breaks the ledger pages
"""

import asyncio
from datetime import date

import streamlit as st

from milkyway.config import validate_all_settings
from milkyway.ledger import MonthScope
from milkyway.models.record import EntryMode, RecordStatus
from milkyway.orchestrator import LedgerService, create_app_components


# Page configuration
st.set_page_config(
    page_title="MilkyWay Ledger",
    page_icon="🥛",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


STATUS_BADGES = {
    RecordStatus.PAID_IN_FULL: "✅ Paid",
    RecordStatus.PARTIALLY_PAID: "🟡 Partial",
    RecordStatus.UNPAID: "⭕ Unpaid",
    RecordStatus.PAYMENT_ONLY: "💰 Payment",
    RecordStatus.EMPTY: "",
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
def get_service() -> LedgerService:
    """Get or create the ledger service (cached)."""
    try:
        return create_app_components(use_file_storage=True)
    except Exception as e:
        st.error(f"Failed to open local storage, using a temporary ledger: {e}")
        return create_app_components(use_file_storage=False)


def main():
    """Main application entry point."""
    service = get_service()

    # Sidebar navigation
    st.sidebar.title("🥛 MilkyWay Ledger")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📅 Month", "✏️ Day Entry", "🧰 Manage", "✨ Insights", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **How to use:**
        1. Pick a day and note the delivery
        2. Record payments on the day you make them
        3. Use *Manage* to fill or settle a whole month
        """
    )

    if page == "📅 Month":
        render_month_page(service)
    elif page == "✏️ Day Entry":
        render_entry_page(service)
    elif page == "🧰 Manage":
        render_manage_page(service)
    elif page == "✨ Insights":
        render_insights_page(service)
    elif page == "⚙️ Settings":
        render_settings_page(service)


def _selected_month() -> MonthScope:
    if "month_scope" not in st.session_state:
        st.session_state.month_scope = MonthScope.of(date.today())
    return st.session_state.month_scope


def render_month_page(service: LedgerService):
    """Render the month overview: stats cards and the day list."""
    settings = service.get_settings()
    scope = _selected_month()

    col_prev, col_title, col_next = st.columns([1, 3, 1])
    with col_prev:
        if st.button("◀ Previous"):
            st.session_state.month_scope = scope.previous()
            st.rerun()
    with col_title:
        st.title(scope.first_day.strftime("%B %Y"))
    with col_next:
        if st.button("Next ▶"):
            st.session_state.month_scope = scope.next()
            st.rerun()

    stats = service.month_stats(scope.year, scope.month)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Quantity", settings.format_quantity(stats.total_quantity))
    col2.metric("Total Cost", settings.format_amount(stats.total_cost))
    col3.metric("Paid", settings.format_amount(stats.total_paid))
    col4.metric(
        "Balance Due",
        settings.format_amount(stats.balance),
        help=stats.balance_message,
    )
    st.caption(stats.balance_message)

    st.markdown("---")

    month_records = [
        record for record in service.records() if scope.contains(record.date_key)
    ]
    if not month_records:
        st.info("No entries this month yet. Use 'Day Entry' or 'Manage' to add some.")
        return

    st.dataframe(
        [
            {
                "Date": record.day.strftime("%a %d %b"),
                "Quantity": settings.format_quantity(record.quantity),
                "Cost": settings.format_amount(record.cost),
                "Paid": settings.format_amount(record.payment_amount),
                "Status": STATUS_BADGES[record.status],
                "Notes": record.notes or "",
            }
            for record in month_records
        ],
        use_container_width=True,
        hide_index=True,
    )


def render_entry_page(service: LedgerService):
    """Render the single-day editor."""
    st.title("✏️ Day Entry")
    settings = service.get_settings()

    day = st.date_input("Date", value=date.today())
    draft = service.suggest_entry(day)

    mode = st.radio(
        "Entry type",
        options=list(EntryMode),
        index=list(EntryMode).index(draft.mode),
        format_func=lambda m: "🥛 Delivery" if m == EntryMode.MILK else "💰 Payment only",
        horizontal=True,
        key=f"mode_{draft.date_key}",
    )

    with st.form(f"entry_{draft.date_key}"):
        col1, col2 = st.columns(2)
        with col1:
            quantity = st.number_input(
                f"Quantity ({settings.unit_label})",
                value=float(draft.quantity) if mode == EntryMode.MILK else 0.0,
                min_value=0.0,
                step=0.5,
                disabled=mode == EntryMode.PAYMENT,
            )
            price = st.number_input(
                f"Price per {settings.unit_label} ({settings.currency_symbol})",
                value=float(draft.price_per_unit),
                min_value=0.0,
                step=1.0,
            )
        with col2:
            payment = st.number_input(
                f"Amount paid ({settings.currency_symbol})",
                value=float(draft.payment_amount),
                min_value=0.0,
                step=10.0,
            )
            notes = st.text_input("Notes (optional)", value=draft.notes or "")

        submitted = st.form_submit_button("💾 Save Record", type="primary")

    if mode == EntryMode.PAYMENT:
        quantity = 0.0

    st.markdown(
        f"**Cost:** {settings.format_amount(quantity * price)} · "
        f"**Remaining:** {settings.format_amount(max(0.0, quantity * price - payment))}"
    )
    st.caption("Saving zero quantity and zero payment removes the day.")

    if submitted:
        try:
            service.save_entry(day, quantity, price, payment, notes or None)
            st.success(f"Saved {draft.date_key}")
        except Exception as e:
            st.error(f"Failed to save: {str(e)}")


def render_manage_page(service: LedgerService):
    """Render bulk-fill, bulk-settle and export."""
    st.title("🧰 Manage")
    settings = service.get_settings()
    scope = _selected_month()

    tab_fill, tab_settle, tab_export = st.tabs(["Bulk Add", "Payments", "Export"])

    with tab_fill:
        st.markdown(f"""
        <div class="warning-box">
            Bulk add <strong>overwrites</strong> quantity and price for every day in the range.
            Payments already recorded are kept.
        </div>
        """, unsafe_allow_html=True)
        with st.form("bulk_fill"):
            col1, col2 = st.columns(2)
            start = col1.date_input("From", value=scope.first_day, key="fill_start")
            end = col2.date_input("To", value=scope.last_day, key="fill_end")
            quantity = col1.number_input(
                f"Quantity per day ({settings.unit_label})", value=1.0, min_value=0.0, step=0.5
            )
            price = col2.number_input(
                f"Price per {settings.unit_label}",
                value=float(settings.default_price),
                min_value=0.0,
            )
            if st.form_submit_button("Add Bulk Entries", type="primary"):
                if start > end:
                    st.warning("The start date is after the end date; nothing was changed.")
                else:
                    service.bulk_fill(start, end, quantity, price)
                    st.success(f"Filled {start:%d %b} to {end:%d %b}")

    with tab_settle:
        global_stats = service.global_stats()
        st.metric("Global Balance Due", settings.format_amount(global_stats.balance))
        st.caption(global_stats.balance_message)
        with st.form("bulk_settle"):
            col1, col2 = st.columns(2)
            start = col1.date_input("From", value=scope.first_day, key="settle_start")
            end = col2.date_input("To", value=scope.last_day, key="settle_end")
            if st.form_submit_button("Mark Range as Paid"):
                service.bulk_settle(start, end)
                st.success("Marked as paid")

    with tab_export:
        st.markdown("Download a CSV file with all your purchase history, costs and payments.")
        filename, content = service.export()
        st.download_button(
            "Download CSV",
            data=content.encode("utf-8"),
            file_name=filename,
            mime="text/csv",
        )


def render_insights_page(service: LedgerService):
    """Render the AI summary page."""
    st.title("✨ Insights")
    st.markdown("Get a friendly summary of your recent deliveries and payments.")

    if st.button("✨ Generate Insights", type="primary"):
        with st.spinner("Analyzing your records..."):
            st.session_state.insights = run_async(service.generate_insights())

    if st.session_state.get("insights"):
        st.markdown(st.session_state.insights)


def render_settings_page(service: LedgerService):
    """Render the settings form and connection status."""
    st.title("⚙️ Settings")
    settings = service.get_settings()

    with st.form("settings"):
        default_price = st.number_input(
            "Default price per unit", value=float(settings.default_price), min_value=0.0
        )
        currency_symbol = st.text_input("Currency symbol", value=settings.currency_symbol)
        unit_label = st.text_input("Unit label", value=settings.unit_label)
        if st.form_submit_button("Save Settings", type="primary"):
            try:
                service.update_settings(default_price, currency_symbol, unit_label)
                st.success("Settings saved")
            except ValueError as e:
                st.error(f"Invalid settings: {e}")

    st.markdown("---")
    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Local Storage", "storage"),
        ("Gemini (AI Insights)", "gemini"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Ready")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")


if __name__ == "__main__":
    main()
