"""Tests for the command line entry point."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from _pytest.monkeypatch import MonkeyPatch
from billbeam.application import capture as capture_workflow
from billbeam.cli import main as unified_cli
from billbeam.domain.bill import Person
from billbeam.receipt.extraction import ExtractedReceipt, ExtractionError
from billbeam.runtime import paths as paths_module
from billbeam.runtime.paths import ProjectPaths
from billbeam.runtime.storage import JsonDocumentStore

from conftest import make_bill


@pytest.fixture(autouse=True)
def _isolated_paths(monkeypatch: MonkeyPatch, paths: ProjectPaths) -> None:
    monkeypatch.setattr(paths_module, "_paths", paths)


@pytest.fixture
def receipt_image(tmp_path: Path) -> Path:
    image = tmp_path / "receipt.jpg"
    image.write_bytes(b"jpeg bytes")
    return image


def _fake_extraction(image_bytes: bytes, mime_type: str) -> ExtractedReceipt:
    return ExtractedReceipt(bill=make_bill([("Noodles", 12.0, []), ("Tea", 6.0, [])], tax=1.8))


def test_no_command_prints_help() -> None:
    assert unified_cli.main([]) == 1


def test_split_with_equal_mode(monkeypatch: MonkeyPatch, capsys: pytest.CaptureFixture[str], receipt_image: Path) -> None:
    monkeypatch.setattr(capture_workflow, "call_extraction_service", _fake_extraction)

    exit_code = unified_cli.main(["split", str(receipt_image), "--people", "Ana", "Ben", "--equal", "--share"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "RECEIPT (2 items)" in out
    assert "Ana" in out and "$    9.90" in out
    assert "*Bill Details*" in out


def test_split_with_rounding(monkeypatch: MonkeyPatch, capsys: pytest.CaptureFixture[str], receipt_image: Path) -> None:
    monkeypatch.setattr(capture_workflow, "call_extraction_service", _fake_extraction)

    assert unified_cli.main(["split", str(receipt_image), "--people", "Ana", "Ben", "--equal", "--round"]) == 0
    assert "$   10.00" in capsys.readouterr().out


def test_split_prompts_for_assignments(monkeypatch: MonkeyPatch, capsys: pytest.CaptureFixture[str], receipt_image: Path) -> None:
    monkeypatch.setattr(capture_workflow, "call_extraction_service", _fake_extraction)
    answers = iter(["1", "1,2"])
    monkeypatch.setattr("builtins.input", lambda: next(answers))

    assert unified_cli.main(["split", str(receipt_image), "--people", "Ana", "Ben"]) == 0

    out = capsys.readouterr().out
    # Ana: 12 + 3 = 15 of 18 subtotal, plus 1.5 of tax
    assert "$   16.50" in out
    assert "$    3.30" in out


def test_split_missing_image_fails(tmp_path: Path) -> None:
    assert unified_cli.main(["split", str(tmp_path / "missing.jpg"), "--people", "Ana"]) == 1


def test_split_requires_people(receipt_image: Path) -> None:
    assert unified_cli.main(["split", str(receipt_image)]) == 1


def test_split_reports_extraction_failure(monkeypatch: MonkeyPatch, capsys: pytest.CaptureFixture[str], receipt_image: Path) -> None:
    def failing(image_bytes: bytes, mime_type: str) -> ExtractedReceipt:
        raise ExtractionError("Extraction service error: 503")

    monkeypatch.setattr(capture_workflow, "call_extraction_service", failing)

    assert unified_cli.main(["split", str(receipt_image), "--people", "Ana", "--equal"]) == 1
    assert "Extraction service error: 503" in capsys.readouterr().out


def test_split_saves_and_history_lists(
    monkeypatch: MonkeyPatch, capsys: pytest.CaptureFixture[str], receipt_image: Path
) -> None:
    monkeypatch.setattr(capture_workflow, "call_extraction_service", _fake_extraction)

    assert unified_cli.main(["split", str(receipt_image), "--people", "Ana", "--equal", "--user", "u1", "--save"]) == 0
    assert "Saved receipt" in capsys.readouterr().out

    assert unified_cli.main(["history", "--user", "u1"]) == 0
    out = capsys.readouterr().out
    assert "Receipt " in out
    assert "[Ana]" in out


def test_history_empty(capsys: pytest.CaptureFixture[str]) -> None:
    assert unified_cli.main(["history", "--user", "nobody"]) == 0
    assert "No saved receipts." in capsys.readouterr().out


def test_groups_marks_default(capsys: pytest.CaptureFixture[str], paths: ProjectPaths) -> None:
    store = JsonDocumentStore("u1", paths)
    lunch = store.create_group("Lunch", [Person(id="p1", name="Ana", color="#FF6B6B")])
    store.create_group("Trip", [])
    store.set_default_group(lunch)

    assert unified_cli.main(["groups", "--user", "u1"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert any(line.startswith("* Lunch") for line in lines)
    assert any(line.startswith("  Trip") for line in lines)


def test_invalid_user_reports_storage_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert unified_cli.main(["history", "--user", "../x"]) == 1
    assert "Storage error" in capsys.readouterr().out


def test_entry_point_configures_logging(monkeypatch: MonkeyPatch) -> None:
    calls: list[object] = []
    monkeypatch.setattr(unified_cli, "configure_logging", lambda: calls.append("configure"))
    monkeypatch.setattr(unified_cli, "set_log_level", calls.append)

    assert unified_cli.main(["history", "--user", "nobody"]) == 0
    assert calls == ["configure"]

    calls.clear()
    assert unified_cli.main(["--verbose", "history", "--user", "nobody"]) == 0
    assert calls == ["configure", logging.DEBUG]
