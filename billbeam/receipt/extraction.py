"""Validate AI extraction output and turn it into a Bill.

The extraction service answers with JSON shaped like::

    {
      "items": [{"description": "Burger", "price": 8.99, "originalPrice": 10.99, "discount": 2.0}],
      "subtotal": 8.99, "tax": 1.0, "tip": 2.0, "total": 11.99
    }

Item prices are final (post-discount). Anything that does not fit is
rejected as a whole; a partially valid bill is never returned.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field
from typing import Any

from billbeam.domain.bill import Bill, ReceiptItem, new_id

# Tolerance when comparing our recomputed amounts with the model's own numbers
_AMOUNT_TOLERANCE = 0.01

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


class ExtractionError(RuntimeError):
    """Raised when a receipt cannot be extracted or the result is unusable."""


@dataclass
class ExtractedReceipt:
    bill: Bill
    warnings: list[str] = field(default_factory=list)


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences the model sometimes wraps around JSON."""
    return _CODE_FENCE.sub("", text).strip()


def _number(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ExtractionError(f"Could not read {what}: expected a number, got {value!r}")
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise ExtractionError(f"Could not read {what}: {value!r}")
    return number


def _optional_number(value: Any, what: str) -> float:
    if value is None:
        return 0.0
    return _number(value, what)


def _parse_item(raw: Any, index: int) -> ReceiptItem:
    if not isinstance(raw, dict):
        raise ExtractionError(f"Item {index + 1} is not an object")

    description = str(raw.get("description") or "").strip() or f"Item {index + 1}"
    price = _number(raw.get("price"), f"price of {description!r}")

    discount_raw = raw.get("discount")
    discount = _number(discount_raw, f"discount of {description!r}") if discount_raw is not None else None
    original_price: float | None = None
    if discount is not None and discount > 0:
        original_raw = raw.get("originalPrice")
        if original_raw is not None:
            original_price = _number(original_raw, f"original price of {description!r}")
        else:
            original_price = price + discount
        # The post-discount price wins; keep the pair consistent with it
        if not math.isclose(original_price - discount, price, abs_tol=_AMOUNT_TOLERANCE):
            original_price = price + discount
    else:
        discount = None

    return ReceiptItem(
        id=new_id(),
        description=description,
        price=price,
        original_price=original_price,
        discount=discount,
        assigned_to=[],
    )


def parse_extraction_payload(payload: dict[str, Any]) -> ExtractedReceipt:
    """
    Build a Bill from decoded extraction JSON.

    Raises:
        ExtractionError: if items are missing or any amount is not numeric.
    """
    if not isinstance(payload, dict):
        raise ExtractionError("Extraction result is not a JSON object")

    raw_items = payload.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        raise ExtractionError("No items found in receipt. Please try again.")

    items = [_parse_item(raw, index) for index, raw in enumerate(raw_items)]

    bill = Bill(
        items=items,
        tax=_optional_number(payload.get("tax"), "tax"),
        tip=_optional_number(payload.get("tip"), "tip"),
        miscellaneous=_optional_number(payload.get("miscellaneous"), "miscellaneous"),
    )
    bill.recompute_subtotal()
    bill.recompute_total()

    warnings: list[str] = []
    reported_subtotal = payload.get("subtotal")
    if isinstance(reported_subtotal, (int, float)) and not isinstance(reported_subtotal, bool):
        if not math.isclose(float(reported_subtotal), bill.subtotal, abs_tol=_AMOUNT_TOLERANCE):
            warnings.append(
                f"Receipt subtotal {float(reported_subtotal):.2f} differs from item sum {bill.subtotal:.2f}"
            )
    reported_total = payload.get("total")
    if isinstance(reported_total, (int, float)) and not isinstance(reported_total, bool):
        if not math.isclose(float(reported_total), bill.total, abs_tol=_AMOUNT_TOLERANCE):
            warnings.append(f"Receipt total {float(reported_total):.2f} differs from computed {bill.total:.2f}")

    return ExtractedReceipt(bill=bill, warnings=warnings)


def parse_extraction_text(text: str) -> ExtractedReceipt:
    """Decode the model's text answer and validate it."""
    json_text = strip_code_fences(text)
    if not json_text:
        raise ExtractionError("Empty response from extraction service")
    try:
        payload = json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise ExtractionError("Failed to parse AI response as JSON") from exc
    return parse_extraction_payload(payload)
