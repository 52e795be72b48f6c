"""Per-person settlement for a split bill.

Tax, tip and miscellaneous charges are spread by a single ratio,
``1 + extras / subtotal``, applied to each person's share of item prices.
The ratio uses the subtotal of the whole bill, so the extras of items nobody
is assigned to are carried by the people who are assigned.

Item prices on one item are split evenly between its assignees. Unassigned
items are left out. With ``round_to_dollar`` each total is rounded on its
own; the rounded totals are not reconciled against the bill total.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from billbeam.domain.bill import Bill, Person, ReceiptItem


@dataclass(frozen=True)
class ItemShare:
    item: ReceiptItem
    share_price: float


@dataclass(frozen=True)
class SettlementLine:
    """What one person owes."""

    person: Person
    item_shares: tuple[ItemShare, ...] = field(default_factory=tuple)
    subtotal: float = 0.0
    extra_cost: float = 0.0
    total: float = 0.0


@dataclass(frozen=True)
class SettlementSummary:
    """Sum of person totals against the bill total."""

    settled_total: float
    bill_total: float

    @property
    def drift(self) -> float:
        return self.settled_total - self.bill_total


def round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


def allocation_ratio(bill: Bill) -> float:
    """Multiplier that adds a share of tax/tip/misc to an item subtotal."""
    total_assigned_value = sum(item.price for item in bill.items if item.is_assigned)
    if total_assigned_value <= 0 or bill.subtotal == 0:
        return 1.0
    return 1 + bill.extra_pool / bill.subtotal


def calculate_settlement(
    bill: Bill | None,
    people: Sequence[Person],
    round_to_dollar: bool = False,
) -> list[SettlementLine]:
    """Compute settlement lines, in roster order, for people who owe something."""
    if bill is None:
        return []

    ratio = allocation_ratio(bill)
    lines: list[SettlementLine] = []

    for person in people:
        shares = tuple(
            ItemShare(item=item, share_price=item.price / len(item.assigned_to))
            for item in bill.items
            if person.id in item.assigned_to
        )
        subtotal = sum(share.share_price for share in shares)
        total = subtotal * ratio

        if round_to_dollar:
            total = round_half_up(total)
            # Display-only approximation of the pre-rounding subtotal
            subtotal = total / ratio

        if total == 0:
            continue

        lines.append(
            SettlementLine(
                person=person,
                item_shares=shares,
                subtotal=subtotal,
                extra_cost=total - subtotal,
                total=total,
            )
        )

    return lines


def settlement_summary(lines: Sequence[SettlementLine], bill: Bill) -> SettlementSummary:
    return SettlementSummary(
        settled_total=sum(line.total for line in lines),
        bill_total=bill.total,
    )
