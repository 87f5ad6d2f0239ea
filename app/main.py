"""
Streamlit Frontend for the Expense Tracker

One page: a form to add an item with a price, the live list of items
with a delete button each, and the running total.

The page holds no state of its own. Each browser session gets one
ExpenseTracker in st.session_state; the list section re-runs on a timer,
polls the tracker for new snapshots and redraws from render().

Run with:
    streamlit run app/main.py
"""

import asyncio
import html

import streamlit as st

from expense_tracker.audit import configure_logging
from expense_tracker.config import get_settings, validate_all_settings
from expense_tracker.models.item import DraftValidationError
from expense_tracker.services.storage import StorageError
from expense_tracker.tracker import ExpenseTracker, create_item_store
from expense_tracker.views import (
    DELETE_LABEL,
    NAME_PLACEHOLDER,
    PAGE_TITLE,
    PRICE_PLACEHOLDER,
    SUBMIT_LABEL,
    TOTAL_LABEL,
    render,
)


# Page configuration
st.set_page_config(
    page_title=PAGE_TITLE,
    page_icon="💸",
    layout="centered",
)

st.markdown("""
<style>
    .item-row {
        padding: 12px 16px;
        background-color: #020617;
        color: white;
        font-family: monospace;
        border-radius: 4px;
    }
    .total-row {
        display: flex;
        justify-content: space-between;
        padding: 12px 16px;
        font-family: monospace;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def escape_dollars(text: str) -> str:
    """Keep Streamlit markdown from reading "$10 ... $5" as LaTeX."""
    return text.replace("$", "\\$")


@st.cache_resource
def get_store():
    """Get or create the item store (shared by all sessions)."""
    return create_item_store()


def get_tracker() -> ExpenseTracker:
    """This session's tracker, subscribed on first use."""
    if "tracker" not in st.session_state:
        st.session_state.tracker = ExpenseTracker(get_store())
        st.session_state.draft_name = ""
        st.session_state.draft_price = ""

    tracker = st.session_state.tracker
    tracker.start()
    return tracker


def submit_draft() -> None:
    """Form callback: runs before the rerun, so the inputs can still be reset."""
    tracker: ExpenseTracker = st.session_state.tracker
    tracker.update_draft(
        name=st.session_state.draft_name,
        price=st.session_state.draft_price,
    )
    try:
        item_id = run_async(tracker.add_item())
    except (DraftValidationError, StorageError):
        # Recorded on tracker.state.last_error; the page shows it
        return

    if item_id is not None:
        st.session_state.draft_name = tracker.state.draft.name
        st.session_state.draft_price = tracker.state.draft.price


def delete_item(item_id: str) -> None:
    """Delete-button callback. The row stays until the next snapshot."""
    tracker: ExpenseTracker = st.session_state.tracker
    try:
        run_async(tracker.delete_item(item_id))
    except StorageError:
        # Recorded on tracker.state.last_error; the page shows it
        return


def render_form() -> None:
    with st.form("add_item", clear_on_submit=False, border=True):
        name_col, price_col, submit_col = st.columns([3, 2, 1], vertical_alignment="bottom")
        with name_col:
            st.text_input(
                "Item",
                key="draft_name",
                placeholder=NAME_PLACEHOLDER,
                label_visibility="collapsed",
            )
        with price_col:
            st.text_input(
                "Price",
                key="draft_price",
                placeholder=PRICE_PLACEHOLDER,
                label_visibility="collapsed",
            )
        with submit_col:
            st.form_submit_button(
                SUBMIT_LABEL,
                on_click=submit_draft,
                use_container_width=True,
            )


@st.fragment(run_every=get_settings().app.refresh_interval_seconds)
def render_items(tracker: ExpenseTracker) -> None:
    """Live section: poll for snapshots, then draw list and total."""
    tracker.poll()
    view = render(tracker.state)

    if view.error:
        st.error(view.error)

    for row in view.rows:
        name_col, price_col, delete_col = st.columns([4, 2, 1], vertical_alignment="center")
        name_col.markdown(
            f'<div class="item-row">{html.escape(row.name)}</div>',
            unsafe_allow_html=True,
        )
        price_col.markdown(escape_dollars(row.price_label))
        delete_col.button(
            DELETE_LABEL,
            key=f"delete_{row.item_id}",
            on_click=delete_item,
            args=(row.item_id,),
        )

    if view.show_total:
        st.markdown(
            f'<div class="total-row"><span>{TOTAL_LABEL}</span>'
            f'<span>{view.total_label}</span></div>',
            unsafe_allow_html=True,
        )


def render_status_sidebar() -> None:
    """Connection status, as reported by the settings check."""
    st.sidebar.title("⚙️ Status")
    status = validate_all_settings()

    for name, key in [("Firestore", "firestore"), ("App settings", "app")]:
        if status.get(key, False):
            st.sidebar.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.sidebar.error(f"❌ {name} - {error}")

    st.sidebar.markdown(f"**Backend:** {get_settings().app.store_backend}")


def main():
    """Main application entry point."""
    configure_logging(get_settings().app.log_level)

    st.title(PAGE_TITLE)
    render_status_sidebar()

    try:
        tracker = get_tracker()
    except StorageError as e:
        st.error(f"Could not reach the item store: {e}")
        st.stop()

    render_form()
    render_items(tracker)


if __name__ == "__main__":
    main()
