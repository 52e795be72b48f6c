"""Workflows that combine the domain core with runtime services."""

from billbeam.application.capture import CaptureRequest, CaptureResult, run_capture
from billbeam.application.groups import (
    create_group_from_session,
    load_group_into_session,
    start_session,
    toggle_default_group,
)
from billbeam.application.history import (
    SaveReceiptResult,
    list_saved_receipts,
    load_saved_receipt,
    save_session_receipt,
)

__all__ = [
    "CaptureRequest",
    "CaptureResult",
    "run_capture",
    "SaveReceiptResult",
    "save_session_receipt",
    "load_saved_receipt",
    "list_saved_receipts",
    "create_group_from_session",
    "load_group_into_session",
    "toggle_default_group",
    "start_session",
]
