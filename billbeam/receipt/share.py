"""Format a settlement as messages for sharing."""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import quote

from billbeam.domain.bill import Bill
from billbeam.domain.settlement import SettlementLine

WHATSAPP_SEND_URL = "https://api.whatsapp.com/send?text="

_RECEIPT_ICON = "\U0001f9fe"
_PERSON_ICON = "\U0001f464"
_MONEY_ICON = "\U0001f4b0"


def _money(amount: float) -> str:
    return f"${amount:.2f}"


def format_share_text(lines: Sequence[SettlementLine], bill: Bill) -> str:
    """Short plain-text summary: one line per person plus the bill total."""
    per_person = "\n".join(f"{line.person.name}: {_money(line.total)}" for line in lines)
    return f"Here is the split:\n\n{per_person}\n\nTotal: {_money(bill.total)}"


def format_whatsapp_message(lines: Sequence[SettlementLine], bill: Bill) -> str:
    """Itemized breakdown per person followed by the bill details."""
    blocks: list[str] = []
    for line in lines:
        item_lines = [f"• {share.item.description}: {_money(share.share_price)}" for share in line.item_shares]
        blocks.append("\n".join([f"{_PERSON_ICON} *{line.person.name}*", *item_lines, f"Total: {_money(line.total)}"]))

    details = [
        f"{_MONEY_ICON} *Bill Details*",
        f"Subtotal: {_money(bill.subtotal)}",
        f"Tax: {_money(bill.tax)}",
        f"Tip: {_money(bill.tip)}",
    ]
    if bill.miscellaneous:
        details.append(f"Misc: {_money(bill.miscellaneous)}")
    details.append(f"Total: {_money(bill.total)}")

    title = bill.title or "BillBeam Receipt"
    return f"{_RECEIPT_ICON} *{title}*\n\n" + "\n\n".join(blocks) + "\n\n" + "\n".join(details)


def whatsapp_share_url(message: str) -> str:
    return WHATSAPP_SEND_URL + quote(message, safe="")
