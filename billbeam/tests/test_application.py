"""Tests for the capture, history and group workflows."""

from __future__ import annotations

import pytest
from billbeam.application.capture import CaptureRequest, run_capture
from billbeam.application.groups import (
    create_group_from_session,
    load_group_into_session,
    start_session,
    toggle_default_group,
)
from billbeam.application.history import list_saved_receipts, load_saved_receipt, save_session_receipt
from billbeam.domain.session import SplitSession
from billbeam.receipt.extraction import ExtractedReceipt, ExtractionError
from billbeam.runtime.paths import ProjectPaths
from billbeam.runtime.storage import JsonDocumentStore

from conftest import make_bill


@pytest.fixture
def store(paths: ProjectPaths) -> JsonDocumentStore:
    return JsonDocumentStore("user-1", paths)


def _extractor(image_bytes: bytes, mime_type: str) -> ExtractedReceipt:
    return ExtractedReceipt(bill=make_bill([("tea", 4.0, []), ("cake", 6.0, [])], tip=1.0), warnings=["Reported total differs"])


def _failing_extractor(image_bytes: bytes, mime_type: str) -> ExtractedReceipt:
    raise ExtractionError("Failed to parse AI response as JSON")


def test_capture_accepts_bill_and_moves_to_assignment() -> None:
    session = SplitSession()
    result = run_capture(session, CaptureRequest(image_bytes=b"img", mime_type="image/jpeg", extractor=_extractor))

    assert result.status == "captured"
    assert result.warnings == ("Reported total differs",)
    assert session.phase == "assignment"
    assert session.bill is result.bill


def test_capture_failure_leaves_session_untouched() -> None:
    session = SplitSession()
    session.add_person("Ana")
    result = run_capture(session, CaptureRequest(image_bytes=b"img", mime_type="image/jpeg", extractor=_failing_extractor))

    assert result.status == "extraction_failed"
    assert result.error == "Failed to parse AI response as JSON"
    assert session.phase == "capture"
    assert session.bill is None
    assert [p.name for p in session.people] == ["Ana"]


def test_capture_rejects_empty_upload() -> None:
    session = SplitSession()
    result = run_capture(session, CaptureRequest(image_bytes=b"", mime_type="image/jpeg", extractor=_extractor))
    assert result.status == "empty_image"
    assert session.bill is None


def test_recapture_clears_saved_receipt_link(store: JsonDocumentStore) -> None:
    session = SplitSession()
    run_capture(session, CaptureRequest(image_bytes=b"img", mime_type="image/jpeg", extractor=_extractor))
    save_session_receipt(session, store)
    assert session.saved_receipt_id is not None

    run_capture(session, CaptureRequest(image_bytes=b"img", mime_type="image/jpeg", extractor=_extractor))
    assert session.saved_receipt_id is None


def test_save_then_update(store: JsonDocumentStore) -> None:
    session = SplitSession()
    assert save_session_receipt(session, store).status == "nothing_to_save"

    session.add_person("Ana")
    session.accept_bill(make_bill([("tea", 4.0, [])]))
    first = save_session_receipt(session, store)
    assert first.status == "saved"
    assert session.saved_receipt_id == first.receipt_id

    session.bill.tip = 2.0  # type: ignore[union-attr]
    second = save_session_receipt(session, store)
    assert second.status == "updated"
    assert second.receipt_id == first.receipt_id
    assert len(list_saved_receipts(store)) == 1
    assert store.get_receipt(first.receipt_id).bill.tip == 2.0  # type: ignore[arg-type]


def test_load_saved_receipt_restores_roster_and_assignments(store: JsonDocumentStore) -> None:
    source = SplitSession()
    ana = source.add_person("Ana")
    source.accept_bill(make_bill([("tea", 4.0, [])]))
    source.toggle_assignment("tea", ana.id)
    receipt_id = save_session_receipt(source, store).receipt_id
    assert receipt_id is not None

    target = SplitSession()
    load_saved_receipt(target, store, receipt_id)

    assert target.phase == "assignment"
    assert target.saved_receipt_id == receipt_id
    assert [p.id for p in target.people] == [ana.id]
    assert target.bill.items[0].assigned_to == [ana.id]  # type: ignore[union-attr]


def test_group_roundtrip_through_session(store: JsonDocumentStore) -> None:
    session = SplitSession()
    session.add_person("Ana")
    session.add_person("Ben")
    group_id = create_group_from_session(session, store, "  Flat  ")
    assert store.get_group(group_id).name == "Flat"

    other = SplitSession()
    load_group_into_session(other, store, group_id)
    assert [p.name for p in other.people] == ["Ana", "Ben"]
    assert other.add_person("Cy").color != other.people[0].color


def test_group_name_is_required(store: JsonDocumentStore) -> None:
    with pytest.raises(ValueError):
        create_group_from_session(SplitSession(), store, "   ")


def test_toggle_default_group(store: JsonDocumentStore) -> None:
    session = SplitSession()
    session.add_person("Ana")
    group_id = create_group_from_session(session, store, "Solo")

    assert toggle_default_group(store, group_id) == group_id
    assert [p.name for p in start_session(store).people] == ["Ana"]

    assert toggle_default_group(store, group_id) is None
    assert start_session(store).people == []


def test_start_session_clears_dangling_default(store: JsonDocumentStore, paths: ProjectPaths) -> None:
    session = SplitSession()
    session.add_person("Ana")
    group_id = create_group_from_session(session, store, "Gone")
    store.set_default_group(group_id)
    (paths.user_groups("user-1") / f"{group_id}.json").unlink()

    fresh = start_session(store)

    assert fresh.people == []
    assert store.get_preferences().default_group_id is None


def test_start_session_without_user() -> None:
    session = start_session()
    assert session.phase == "capture"
    assert session.people == []
