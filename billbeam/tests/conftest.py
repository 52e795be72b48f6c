"""Shared pytest fixtures for billbeam tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from billbeam.domain.bill import Bill, Person, ReceiptItem
from billbeam.runtime.paths import ProjectPaths


@pytest.fixture
def paths(tmp_path: Path) -> ProjectPaths:
    return ProjectPaths(root=tmp_path, data=tmp_path / "data")


@pytest.fixture
def alice() -> Person:
    return Person(id="A", name="Alice", color="#FF6B6B")


@pytest.fixture
def bob() -> Person:
    return Person(id="B", name="Bob", color="#4ECDC4")


def make_bill(items: list[tuple[str, float, list[str]]], tax: float = 0.0, tip: float = 0.0, misc: float = 0.0) -> Bill:
    """Build a consistent bill from (id, price, assigned_to) tuples."""
    bill = Bill(
        items=[ReceiptItem(id=item_id, description=item_id, price=price, assigned_to=list(assigned)) for item_id, price, assigned in items],
        tax=tax,
        tip=tip,
        miscellaneous=misc,
    )
    bill.recompute_subtotal()
    bill.recompute_total()
    return bill


@pytest.fixture
def example_bill() -> Bill:
    """Ten dollars for Alice, twenty shared by Alice and Bob, three dollars tax."""
    return make_bill([("pasta", 10.0, ["A"]), ("pizza", 20.0, ["A", "B"])], tax=3.0)
