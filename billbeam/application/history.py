"""Saving and reloading receipts for a user."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from billbeam.domain.session import SplitSession
from billbeam.runtime.storage import JsonDocumentStore, SavedReceipt

SaveStatus = Literal["saved", "updated", "nothing_to_save"]


@dataclass(frozen=True)
class SaveReceiptResult:
    status: SaveStatus
    receipt_id: str | None = None


def save_session_receipt(session: SplitSession, store: JsonDocumentStore) -> SaveReceiptResult:
    """Save the session's bill, or update the saved copy it came from."""
    if session.bill is None:
        return SaveReceiptResult(status="nothing_to_save")

    if session.saved_receipt_id is not None:
        store.update_receipt(session.saved_receipt_id, session.bill, session.people)
        return SaveReceiptResult(status="updated", receipt_id=session.saved_receipt_id)

    receipt_id = store.save_receipt(session.bill, session.people)
    session.saved_receipt_id = receipt_id
    return SaveReceiptResult(status="saved", receipt_id=receipt_id)


def load_saved_receipt(session: SplitSession, store: JsonDocumentStore, receipt_id: str) -> SavedReceipt:
    """Replace the session's bill and roster with a saved receipt."""
    saved = store.get_receipt(receipt_id)
    session.load(saved.bill, saved.people, receipt_id=saved.id)
    return saved


def list_saved_receipts(store: JsonDocumentStore) -> list[SavedReceipt]:
    return store.list_receipts()
