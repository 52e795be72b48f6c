"""Runtime client for the AI receipt extraction service (Gemini)."""

from __future__ import annotations

import base64
import time

import httpx
from PIL import Image

from billbeam.receipt.extraction import ExtractedReceipt, ExtractionError, parse_extraction_text
from billbeam.receipt.image_helpers import prepare_image_bytes
from billbeam.runtime.logging import get_logger
from billbeam.runtime.settings import Settings, load_settings

logger = get_logger(__name__)

EXTRACTION_PROMPT = """
Analyze this receipt image and extract the following data in strict JSON format:
{
  "items": [
    {"description": "Item Name", "price": 8.99, "originalPrice": 10.99, "discount": 2.00}
  ],
  "subtotal": 8.99,
  "tax": 1.00,
  "tip": 2.00,
  "total": 11.99
}

Rules:
1. Extract all line items. Ignore "Thank You" or other decorative text.
2. Group modifiers with their parent item (e.g. "Burger" + "Cheese" -> "Burger with Cheese").
3. If an item has a discount, coupon or savings associated with it:
   - Set "price" to the final price (original price - discount).
   - Set "originalPrice" to the listed price.
   - Set "discount" to the discount amount as a positive number.
4. If there is no discount, set "price" and omit "originalPrice"/"discount".
5. Do not list discounts as separate items.
6. If tip is not present, set it to 0. If tax is not listed, calculate it or set it to 0.
7. All amounts must be numbers (10.50, not "$10.50").
8. Return ONLY the JSON object, no markdown formatting.
"""


def _response_text(body: dict) -> str:
    try:
        parts = body["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ExtractionError("Extraction service returned no candidates") from exc
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def call_extraction_service(
    image_bytes: bytes,
    mime_type: str,
    settings: Settings | None = None,
    client: httpx.Client | None = None,
) -> ExtractedReceipt:
    """
    Send a receipt photo to Gemini and validate the structured result.

    Args:
        image_bytes: Raw image as uploaded
        mime_type: MIME type of the upload (used if the image cannot be re-encoded)
        settings: Settings override, defaults to load_settings()
        client: Optional httpx client (tests pass one with a mock transport)

    Raises:
        ExtractionError: on missing configuration, network/HTTP failure or an
            unusable result.
    """
    settings = settings or load_settings()
    if not settings.gemini_api_key:
        raise ExtractionError("Missing Gemini API key")

    try:
        upload_bytes = prepare_image_bytes(image_bytes, max_dimension=settings.max_image_dimension)
        upload_mime = "image/jpeg"
    except (Image.DecompressionBombError, ValueError) as exc:
        logger.error("Rejected receipt image: %s", exc)
        raise ExtractionError("Image too large or unreadable") from exc
    except OSError as exc:
        logger.warning("Could not re-encode image, sending as-is: %s", exc)
        upload_bytes = image_bytes
        upload_mime = mime_type

    payload = {
        "contents": [
            {
                "parts": [
                    {"text": EXTRACTION_PROMPT},
                    {
                        "inline_data": {
                            "mime_type": upload_mime,
                            "data": base64.b64encode(upload_bytes).decode("ascii"),
                        }
                    },
                ]
            }
        ],
        "generationConfig": {"responseMimeType": "application/json", "temperature": 0.2},
    }
    url = f"{settings.gemini_base_url}/models/{settings.gemini_model}:generateContent"

    logger.info("Sending receipt to extraction service (%s)...", settings.gemini_model)
    owns_client = client is None
    http = client or httpx.Client(timeout=settings.extraction_timeout)
    try:
        start_time = time.time()
        response = http.post(url, params={"key": settings.gemini_api_key}, json=payload)
        logger.info("Extraction service returned in %.2f seconds", time.time() - start_time)
    except httpx.RequestError as exc:
        logger.error("Failed to connect to extraction service: %s", exc)
        raise ExtractionError(f"Failed to connect to extraction service: {exc}") from exc
    finally:
        if owns_client:
            http.close()

    if response.status_code != 200:
        logger.error("Extraction service error: %s", response.status_code)
        raise ExtractionError(f"Extraction service error: {response.status_code}")

    try:
        body = response.json()
    except ValueError as exc:
        raise ExtractionError("Extraction service returned invalid JSON") from exc

    text = _response_text(body)
    logger.debug("Extraction raw response: %s", text)

    extracted = parse_extraction_text(text)
    for warning in extracted.warnings:
        logger.warning("%s", warning)
    logger.info("Extracted %d items, total %.2f", len(extracted.bill.items), extracted.bill.total)
    return extracted
