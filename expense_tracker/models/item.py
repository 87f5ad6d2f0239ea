"""
Core Data Models for the Expense Tracker

Three shapes flow through the tracker:
1. Item     - a persisted expense record, owned by the store
2. Draft    - the unsaved form input, owned by the page
3. Snapshot - a full copy of the item collection pushed by the store

DESIGN DECISION: The page never edits Items locally. It only ever
replaces its list with the latest Snapshot, so the Item model is a
read-only projection of whatever the store holds.
"""

import math
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


class DraftValidationError(ValueError):
    """The draft cannot be turned into an Item."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


def parse_price(text: str) -> float:
    """
    Parse the price text typed into the form.

    Accepts anything Python's float() accepts after trimming
    ("3.5", "10", "1e3"). Rejects text that is not a number and the
    non-finite values float() would otherwise let through ("nan", "inf").
    """
    try:
        value = float(text.strip())
    except ValueError:
        raise DraftValidationError("price", f"Price must be a number, got {text!r}")

    if not math.isfinite(value):
        raise DraftValidationError("price", f"Price must be a finite number, got {text!r}")

    return value


def compute_total(items: list["Item"]) -> float:
    """Sum of every item's price. Empty list totals 0."""
    return sum((item.price for item in items), 0.0)


class Item(BaseModel):
    """
    A named expense with a price.

    `id` is assigned by the store; it is None until the item has been
    persisted and read back through a snapshot.
    """
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = Field(
        default=None,
        description="Opaque identifier assigned by the store"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="What the money was spent on"
    )
    price: float = Field(
        ...,
        description="Amount spent"
    )

    def to_record(self) -> dict:
        """The document body written to the store (the id is never part of it)."""
        return {"name": self.name, "price": self.price}


class Draft(BaseModel):
    """Form input before submission. Both fields stay as typed text."""

    name: str = ""
    price: str = ""

    @property
    def is_complete(self) -> bool:
        return self.name != "" and self.price != ""

    def to_item(self) -> Item:
        """
        Build the Item to submit.

        Raises:
            DraftValidationError: If a field is missing or the price is
                not a finite number
        """
        if not self.is_complete:
            missing = "name" if self.name == "" else "price"
            raise DraftValidationError(missing, f"The {missing} field is empty")

        name = self.name.strip()
        if not name:
            raise DraftValidationError("name", "The name field is blank")

        return Item(name=name, price=parse_price(self.price))


class Snapshot(BaseModel):
    """Full point-in-time copy of the item collection."""

    items: list[Item] = Field(default_factory=list)

    @field_validator("items")
    @classmethod
    def require_ids(cls, v: list[Item]) -> list[Item]:
        """Items delivered by the store always carry their id."""
        for item in v:
            if item.id is None:
                raise ValueError(f"Snapshot item {item.name!r} has no id")
        return v

    @property
    def total(self) -> float:
        return compute_total(self.items)
