"""Tests for share message formatting."""

from __future__ import annotations

from urllib.parse import unquote

from billbeam.domain.bill import Bill, Person
from billbeam.domain.settlement import calculate_settlement
from billbeam.receipt.share import format_share_text, format_whatsapp_message, whatsapp_share_url


def test_plain_share_text(example_bill: Bill, alice: Person, bob: Person) -> None:
    lines = calculate_settlement(example_bill, [alice, bob])
    assert format_share_text(lines, example_bill) == (
        "Here is the split:\n\nAlice: $22.00\nBob: $11.00\n\nTotal: $33.00"
    )


def test_whatsapp_message_itemizes_each_person(example_bill: Bill, alice: Person, bob: Person) -> None:
    lines = calculate_settlement(example_bill, [alice, bob])
    message = format_whatsapp_message(lines, example_bill)

    assert message.startswith("\U0001f9fe *BillBeam Receipt*\n\n")
    assert "\U0001f464 *Alice*\n• pasta: $10.00\n• pizza: $10.00\nTotal: $22.00" in message
    assert "\U0001f464 *Bob*\n• pizza: $10.00\nTotal: $11.00" in message
    assert message.endswith("Subtotal: $30.00\nTax: $3.00\nTip: $0.00\nTotal: $33.00")
    assert "Misc" not in message


def test_whatsapp_message_shows_misc_and_title(example_bill: Bill, alice: Person, bob: Person) -> None:
    example_bill.miscellaneous = 2.0
    example_bill.recompute_total()
    example_bill.title = "Friday dinner"
    message = format_whatsapp_message(calculate_settlement(example_bill, [alice, bob]), example_bill)
    assert message.startswith("\U0001f9fe *Friday dinner*")
    assert "Misc: $2.00\nTotal: $35.00" in message


def test_whatsapp_url_is_fully_encoded() -> None:
    url = whatsapp_share_url("A & B: $5\n#1")
    assert url.startswith("https://api.whatsapp.com/send?text=")
    encoded = url.split("text=", 1)[1]
    for raw in (" ", "&", "\n", "#", "$"):
        assert raw not in encoded
    assert unquote(encoded) == "A & B: $5\n#1"
