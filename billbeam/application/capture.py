"""Receipt capture workflow orchestration."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from billbeam.domain.bill import Bill
from billbeam.domain.session import SplitSession
from billbeam.receipt.extraction import ExtractedReceipt, ExtractionError
from billbeam.runtime.extraction_service import call_extraction_service
from billbeam.runtime.logging import get_logger

logger = get_logger(__name__)

CaptureStatus = Literal["captured", "extraction_failed", "empty_image"]

Extractor = Callable[[bytes, str], ExtractedReceipt]


@dataclass(frozen=True)
class CaptureRequest:
    """Inputs for capturing a receipt photo into a session."""

    image_bytes: bytes
    mime_type: str
    extractor: Extractor | None = None


@dataclass(frozen=True)
class CaptureResult:
    """Outcome of the capture workflow."""

    status: CaptureStatus
    bill: Bill | None = None
    warnings: tuple[str, ...] = ()
    error: str | None = None


def run_capture(session: SplitSession, request: CaptureRequest) -> CaptureResult:
    """Run capture flow: extract -> validate -> accept into session -> assignment phase.

    On any failure the session is left exactly as it was.
    """
    if not request.image_bytes:
        return CaptureResult(status="empty_image", error="No image received")

    extractor = request.extractor or call_extraction_service
    try:
        extracted = extractor(request.image_bytes, request.mime_type)
    except ExtractionError as exc:
        logger.error("Receipt extraction failed for session %s: %s", session.id, exc)
        return CaptureResult(status="extraction_failed", error=str(exc))

    session.accept_bill(extracted.bill)
    logger.info("Session %s captured %d items", session.id, len(extracted.bill.items))
    return CaptureResult(status="captured", bill=extracted.bill, warnings=tuple(extracted.warnings))
