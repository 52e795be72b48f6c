"""Command handlers used by the unified CLI."""

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from billbeam.runtime import get_logger, load_settings

if TYPE_CHECKING:
    from billbeam.domain.session import SplitSession

logger = get_logger(__name__)

_MIME_BY_SUFFIX = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".heic": "image/heic",
}


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI server."""
    import uvicorn

    from billbeam.runtime import server

    settings = load_settings()
    host = args.host or settings.server_host
    port = args.port or settings.server_port
    print(f"Starting BillBeam server on {host}:{port}")
    print("Press Ctrl+C to stop")

    uvicorn.run(server.app, host=host, port=port)


def _prompt_assignments(session: "SplitSession") -> None:
    """Ask who shared each item. Blank input leaves the item unassigned."""
    print("\nPeople:")
    for i, person in enumerate(session.people, 1):
        print(f"  {i}. {person.name}")
    assert session.bill is not None
    for item in session.bill.items:
        print(f"{item.description} (${item.price:.2f}) - who shared? [e.g. 1,3] ", end="")
        answer = input().strip()
        for token in filter(None, (part.strip() for part in answer.split(","))):
            try:
                person = session.people[int(token) - 1]
            except (ValueError, IndexError):
                print(f"  Ignoring unknown person: {token}")
                continue
            session.toggle_assignment(item.id, person.id)


def cmd_split(args: argparse.Namespace) -> None:
    """Extract a receipt photo, assign items, and print the settlement."""
    from billbeam.application.capture import CaptureRequest, run_capture
    from billbeam.application.groups import start_session
    from billbeam.domain.settlement import calculate_settlement
    from billbeam.receipt.share import format_whatsapp_message
    from billbeam.runtime.storage import JsonDocumentStore

    image_path = Path(args.image)
    if not image_path.exists():
        print(f"Error: Receipt file not found: {image_path}")
        sys.exit(1)

    store = JsonDocumentStore(args.user) if args.user else None
    session = start_session(store)
    for name in args.people or []:
        session.add_person(name)
    if not session.people:
        print("Error: name at least one person with --people or set a default group.")
        sys.exit(1)

    result = run_capture(
        session,
        CaptureRequest(
            image_bytes=image_path.read_bytes(),
            mime_type=_MIME_BY_SUFFIX.get(image_path.suffix.lower(), "image/jpeg"),
        ),
    )
    if result.status != "captured" or session.bill is None:
        logger.error("%s", result.error)
        print(f"Extraction failed: {result.error}")
        sys.exit(1)

    bill = session.bill
    print("\n" + "=" * 60)
    print(f"RECEIPT ({len(bill.items)} items)")
    print("=" * 60)
    for i, item in enumerate(bill.items, 1):
        discount_str = f" (was ${item.original_price:.2f})" if item.discount else ""
        print(f"  {i}. {item.description} - ${item.price:.2f}{discount_str}")
    print(f"Subtotal: ${bill.subtotal:.2f}  Tax: ${bill.tax:.2f}  Tip: ${bill.tip:.2f}  Total: ${bill.total:.2f}")
    for warning in result.warnings:
        print(f"Warning: {warning}")

    if args.equal:
        session.set_split_mode("equal")
    else:
        _prompt_assignments(session)

    session.move_to("settlement")
    lines = calculate_settlement(bill, session.people, round_to_dollar=args.round)

    print("\n" + "=" * 60)
    print("SETTLEMENT")
    print("=" * 60)
    for line in lines:
        print(f"  {line.person.name:<20} ${line.total:>8.2f}  (items ${line.subtotal:.2f} + extras ${line.extra_cost:.2f})")
    print("=" * 60)

    if args.share:
        print()
        print(format_whatsapp_message(lines, bill))

    if store is not None and args.save:
        from billbeam.application.history import save_session_receipt

        saved = save_session_receipt(session, store)
        print(f"Saved receipt {saved.receipt_id}")


def cmd_history(args: argparse.Namespace) -> None:
    """List saved receipts, newest first."""
    from billbeam.runtime.storage import JsonDocumentStore

    receipts = JsonDocumentStore(args.user).list_receipts()
    if not receipts:
        print("No saved receipts.")
        return
    for saved in receipts:
        title = saved.bill.title or "Untitled"
        names = ", ".join(person.name for person in saved.people)
        print(f"{saved.created_at:%Y-%m-%d %H:%M}  {title:<30} ${saved.bill.total:>8.2f}  [{names}]  {saved.id}")


def cmd_groups(args: argparse.Namespace) -> None:
    """List saved groups, marking the default one."""
    from billbeam.runtime.storage import JsonDocumentStore

    store = JsonDocumentStore(args.user)
    groups = store.list_groups()
    if not groups:
        print("No saved groups.")
        return
    default_group_id = store.get_preferences().default_group_id
    for group in groups:
        marker = "*" if group.id == default_group_id else " "
        names = ", ".join(person.name for person in group.people)
        print(f"{marker} {group.name:<20} [{names}]  {group.id}")
