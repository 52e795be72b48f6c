"""Receipt extraction parsing and settlement share formatting."""

from billbeam.receipt.extraction import ExtractedReceipt, ExtractionError, parse_extraction_payload, parse_extraction_text
from billbeam.receipt.share import format_share_text, format_whatsapp_message, whatsapp_share_url

__all__ = [
    "ExtractedReceipt",
    "ExtractionError",
    "parse_extraction_payload",
    "parse_extraction_text",
    "format_share_text",
    "format_whatsapp_message",
    "whatsapp_share_url",
]
