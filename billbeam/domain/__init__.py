"""Core domain models for BillBeam.

This package provides the bill-splitting core:
- Bill, ReceiptItem, Person: the captured bill and its roster
- assignment operations: who shares which item
- calculate_settlement: what everyone owes
- SplitSession: phase, bill and roster of one session

Usage:
    from billbeam.domain import Bill, SplitSession, calculate_settlement
"""

from billbeam.domain.assignment import (
    apply_split_mode,
    assign_all_to_all,
    clear_all_assignments,
    remove_person,
    toggle_assignment,
    update_item,
    update_receipt_totals,
)
from billbeam.domain.bill import PALETTE, Bill, Person, ReceiptItem
from billbeam.domain.phase import Phase, PhaseTransitionError
from billbeam.domain.session import SplitSession
from billbeam.domain.settlement import SettlementLine, calculate_settlement, settlement_summary

__all__ = [
    "PALETTE",
    "Bill",
    "Person",
    "ReceiptItem",
    "Phase",
    "PhaseTransitionError",
    "SplitSession",
    "SettlementLine",
    "apply_split_mode",
    "assign_all_to_all",
    "calculate_settlement",
    "clear_all_assignments",
    "remove_person",
    "settlement_summary",
    "toggle_assignment",
    "update_item",
    "update_receipt_totals",
]
