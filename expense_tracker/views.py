"""
Presentation model for the expense page.

render() turns the tracker state into everything the page shows, with
no Streamlit calls, so the page layout stays trivially thin and the
display rules can be tested directly.
"""

import math
from typing import Optional

from pydantic import BaseModel

from expense_tracker.models.item import Draft
from expense_tracker.tracker import TrackerState


PAGE_TITLE = "Expense Tracker"
NAME_PLACEHOLDER = "Enter Item"
PRICE_PLACEHOLDER = "Enter $"
SUBMIT_LABEL = "+"
DELETE_LABEL = "X"
TOTAL_LABEL = "Total"


def format_amount(value: float) -> str:
    """
    Dollar sign plus the number in its shortest form: 10 -> "$10",
    3.5 -> "$3.5". No rounding to cents.
    """
    if math.isnan(value):
        return "$NaN"
    if math.isinf(value):
        return "$Infinity" if value > 0 else "$-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return f"${int(value)}"
    return f"${value!r}"


def capitalize_words(text: str) -> str:
    """Upper-case the first letter of each word, leaving the rest as typed."""
    return " ".join(word[:1].upper() + word[1:] for word in text.split(" "))


class ItemRow(BaseModel):
    item_id: Optional[str]
    name: str
    price_label: str


class PageView(BaseModel):
    title: str = PAGE_TITLE
    draft: Draft
    rows: list[ItemRow]
    show_total: bool
    total_label: Optional[str] = None
    error: Optional[str] = None


def render(state: TrackerState) -> PageView:
    """Build the page from the tracker state. Rows keep snapshot order."""
    rows = [
        ItemRow(
            item_id=item.id,
            name=capitalize_words(item.name),
            price_label=format_amount(item.price),
        )
        for item in state.items
    ]
    show_total = len(state.items) > 0

    return PageView(
        draft=state.draft,
        rows=rows,
        show_total=show_total,
        total_label=format_amount(state.total) if show_total else None,
        error=state.last_error,
    )
