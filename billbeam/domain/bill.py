"""Data models for a bill being split."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

# Display colors handed out to people in insertion order.
PALETTE = (
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#96CEB4",
    "#FFEEAD",
    "#D4A5A5",
    "#9B59B6",
    "#3498DB",
    "#E67E22",
    "#2ECC71",
)


def new_id() -> str:
    return str(uuid.uuid4())


def color_for_index(insertion_count: int) -> str:
    """Palette color for the Nth person ever added to a session."""
    return PALETTE[insertion_count % len(PALETTE)]


@dataclass
class ReceiptItem:
    """A single line item on a receipt."""

    id: str
    description: str
    # Final, post-discount price. This is what people pay.
    price: float
    original_price: float | None = None
    discount: float | None = None
    assigned_to: list[str] = field(default_factory=list)

    @property
    def is_assigned(self) -> bool:
        return bool(self.assigned_to)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "price": self.price,
            "assignedTo": list(self.assigned_to),
        }
        if self.discount is not None:
            data["originalPrice"] = self.original_price
            data["discount"] = self.discount
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReceiptItem:
        discount = data.get("discount")
        original_price = data.get("originalPrice")
        return cls(
            id=str(data.get("id") or new_id()),
            description=str(data.get("description", "")),
            price=float(data["price"]),
            original_price=float(original_price) if original_price is not None else None,
            discount=float(discount) if discount is not None else None,
            assigned_to=[str(pid) for pid in data.get("assignedTo", [])],
        )


@dataclass
class Person:
    """Someone sharing the bill."""

    id: str
    name: str
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Person:
        return cls(id=str(data["id"]), name=str(data["name"]), color=str(data.get("color", PALETTE[0])))


@dataclass
class Bill:
    """Captured receipt: items plus tax, tip, miscellaneous and total.

    ``subtotal`` and ``total`` are stored, not derived on read. Every mutation
    in ``billbeam.domain.assignment`` keeps them consistent.
    """

    items: list[ReceiptItem] = field(default_factory=list)
    subtotal: float = 0.0
    tax: float = 0.0
    tip: float = 0.0
    miscellaneous: float = 0.0
    total: float = 0.0
    title: str | None = None

    @property
    def extra_pool(self) -> float:
        return self.tax + self.tip + self.miscellaneous

    def find_item(self, item_id: str) -> ReceiptItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def recompute_subtotal(self) -> None:
        self.subtotal = sum(item.price for item in self.items)

    def recompute_total(self) -> None:
        self.total = self.subtotal + self.tax + self.tip + self.miscellaneous

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "items": [item.to_dict() for item in self.items],
            "subtotal": self.subtotal,
            "tax": self.tax,
            "tip": self.tip,
            "miscellaneous": self.miscellaneous,
            "total": self.total,
        }
        if self.title:
            data["title"] = self.title
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Bill:
        bill = cls(
            items=[ReceiptItem.from_dict(item) for item in data.get("items", [])],
            tax=float(data.get("tax") or 0.0),
            tip=float(data.get("tip") or 0.0),
            miscellaneous=float(data.get("miscellaneous") or 0.0),
            title=data.get("title") or None,
        )
        bill.recompute_subtotal()
        bill.recompute_total()
        return bill
