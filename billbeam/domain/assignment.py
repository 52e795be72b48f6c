"""Operations on the item <-> person assignment and on bill amounts.

Every function here mutates the bill it is given in place. Functions that
touch prices or extras recompute ``subtotal``/``total`` before returning, so
``total == subtotal + tax + tip + miscellaneous`` holds after each call.
Unknown item or person ids are ignored.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from billbeam.domain.bill import Bill, Person, ReceiptItem

SplitMode = Literal["equal", "manual"]

_ITEM_FIELDS = {"description", "price", "original_price", "discount"}


def toggle_assignment(bill: Bill, item_id: str, person_id: str) -> None:
    """Add ``person_id`` to the item, or remove it if already there."""
    item = bill.find_item(item_id)
    if item is None:
        return
    if person_id in item.assigned_to:
        item.assigned_to = [pid for pid in item.assigned_to if pid != person_id]
    else:
        item.assigned_to = [*item.assigned_to, person_id]


def assign_all_to_all(bill: Bill, people: Sequence[Person]) -> None:
    """Put everyone on every item, replacing any partial assignment."""
    person_ids = [person.id for person in people]
    for item in bill.items:
        item.assigned_to = list(person_ids)


def clear_all_assignments(bill: Bill) -> None:
    for item in bill.items:
        item.assigned_to = []


def apply_split_mode(bill: Bill, people: Sequence[Person], mode: SplitMode) -> None:
    """Switch between equal split (everyone shares everything) and manual mode."""
    if mode == "equal":
        assign_all_to_all(bill, people)
    elif mode == "manual":
        clear_all_assignments(bill)
    else:
        raise ValueError(f"Unknown split mode: {mode!r}")


def remove_person(bill: Bill | None, people: list[Person], person_id: str) -> None:
    """Drop a person from the roster and from every item they were on."""
    people[:] = [person for person in people if person.id != person_id]
    if bill is None:
        return
    for item in bill.items:
        if person_id in item.assigned_to:
            item.assigned_to = [pid for pid in item.assigned_to if pid != person_id]


def _reconcile_discount(item: ReceiptItem, changed: set[str]) -> None:
    if not item.discount or item.discount <= 0:
        item.discount = None
        item.original_price = None
        return
    if item.original_price is None or ("price" in changed and not changed & {"original_price", "discount"}):
        item.original_price = item.price + item.discount
    else:
        item.price = item.original_price - item.discount


def update_item(bill: Bill, item_id: str, **fields: object) -> None:
    """
    Merge edited fields into an item, then recompute subtotal and total.

    Accepted fields: description, price, original_price, discount.
    """
    unknown = set(fields) - _ITEM_FIELDS
    if unknown:
        raise TypeError(f"Unknown item fields: {', '.join(sorted(unknown))}")

    item = bill.find_item(item_id)
    if item is None:
        return

    # None clears the discount pair but never the description or price
    changed = {name for name, value in fields.items() if value is not None or name in {"original_price", "discount"}}

    if "description" in changed:
        item.description = str(fields["description"])
    if "price" in changed:
        item.price = float(fields["price"])  # type: ignore[arg-type]
    for name in ("original_price", "discount"):
        if name in changed:
            value = fields[name]
            setattr(item, name, float(value) if value is not None else None)  # type: ignore[arg-type]

    _reconcile_discount(item, changed)
    bill.recompute_subtotal()
    bill.recompute_total()


def update_receipt_totals(
    bill: Bill,
    tax: float | None = None,
    tip: float | None = None,
    miscellaneous: float | None = None,
) -> None:
    """Replace any provided extra, keep the rest, and recompute total."""
    if tax is not None:
        bill.tax = float(tax)
    if tip is not None:
        bill.tip = float(tip)
    if miscellaneous is not None:
        bill.miscellaneous = float(miscellaneous)
    bill.recompute_total()


def prune_assignments(bill: Bill, people: Sequence[Person]) -> None:
    """Drop assignment ids that are not in the roster."""
    known = {person.id for person in people}
    for item in bill.items:
        item.assigned_to = [pid for pid in item.assigned_to if pid in known]
