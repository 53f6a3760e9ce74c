"""Tests for the change-detection ledger."""

from __future__ import annotations

import json
from pathlib import Path

from figpull.stores import ChangeStatus, Ledger, file_hash
from figpull.stores.ledger import LEDGER_FILENAME, LEDGER_VERSION


def _icon_file(tmp_path: Path, name: str = "home.svg", data: bytes = b"<svg/>") -> Path:
    path = tmp_path / "assets" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


def test_classification_does_not_mutate(ledger: Ledger, tmp_path: Path) -> None:
    target = tmp_path / "assets" / "home.svg"

    assert ledger.classify_icon("1:1", "home.svg", "https://a", target) is ChangeStatus.NEW
    assert ledger.classify_icon("1:1", "home.svg", "https://a", target) is ChangeStatus.NEW
    assert ledger.classify_color("red", "0xFFFF0000", "Red") is ChangeStatus.NEW
    assert ledger.classify_color("red", "0xFFFF0000", "Red") is ChangeStatus.NEW
    assert ledger.stats() == {"colors": 0, "icons": 0, "generatedFiles": 0}


def test_recorded_icon_is_unchanged(ledger: Ledger, tmp_path: Path) -> None:
    target = _icon_file(tmp_path)

    record = ledger.record_icon("1:1", "home.svg", "https://a", target)

    assert record.content_hash == file_hash(target)
    assert record.file_path == str(target)
    assert ledger.classify_icon("1:1", "home.svg", "https://a", target) is ChangeStatus.UNCHANGED


def test_icon_changes_on_locator_name_missing_file_or_edit(ledger: Ledger, tmp_path: Path) -> None:
    target = _icon_file(tmp_path)
    ledger.record_icon("1:1", "home.svg", "https://a", target)

    assert ledger.classify_icon("1:1", "home.svg", "https://b", target) is ChangeStatus.CHANGED
    assert ledger.classify_icon("1:1", "house.svg", "https://a", target) is ChangeStatus.CHANGED

    target.write_bytes(b"<svg>edited</svg>")
    assert ledger.classify_icon("1:1", "home.svg", "https://a", target) is ChangeStatus.CHANGED

    target.unlink()
    assert ledger.classify_icon("1:1", "home.svg", "https://a", target) is ChangeStatus.CHANGED


def test_color_changes_on_value_or_original_name(ledger: Ledger) -> None:
    ledger.record_color("red", "0xFFFF0000", "Red")

    assert ledger.classify_color("red", "0xFFFF0000", "Red") is ChangeStatus.UNCHANGED
    assert ledger.classify_color("red", "0xFFEE0000", "Red") is ChangeStatus.CHANGED
    assert ledger.classify_color("red", "0xFFFF0000", "Brand/Red") is ChangeStatus.CHANGED


def test_generated_file_classification_uses_source_hash(ledger: Ledger) -> None:
    source = {"colors": [{"name": "red", "value": "0xFFFF0000"}]}
    assert ledger.classify_generated("app_colors.dart", source) is ChangeStatus.NEW

    ledger.record_generated("app_colors.dart", source)

    reordered = {"colors": [{"value": "0xFFFF0000", "name": "red"}]}
    assert ledger.classify_generated("app_colors.dart", reordered) is ChangeStatus.UNCHANGED
    assert ledger.classify_generated("app_colors.dart", {"colors": []}) is ChangeStatus.CHANGED


def test_orphans_and_removal(ledger: Ledger, tmp_path: Path) -> None:
    for node_id in ("A", "B", "C"):
        ledger.record_icon(node_id, f"{node_id}.svg", "https://x", tmp_path / f"{node_id}.svg")
    ledger.record_color("red", "0xFFFF0000", "Red")
    ledger.record_color("blue", "0xFF0000FF", "Blue")

    assert ledger.orphaned_icons(["B"]) == ["A", "C"]
    assert ledger.orphaned_colors(["blue"]) == ["red"]

    removed = ledger.remove_icon("A")
    assert removed is not None and removed.file_name == "A.svg"
    assert ledger.remove_icon("missing") is None
    assert ledger.remove_color("red") is not None
    assert ledger.stats() == {"colors": 1, "icons": 2, "generatedFiles": 0}


def test_persist_round_trip(ledger: Ledger, ledger_path: Path, tmp_path: Path) -> None:
    target = _icon_file(tmp_path)
    ledger.record_icon("1:1", "home.svg", "https://a", target)
    ledger.record_color("red", "0xFFFF0000", "Red")
    ledger.record_generated("app_colors.dart", {"colors": ["red"]})

    ledger.persist(source_document_key="FILE123")

    payload = json.loads(ledger_path.read_text(encoding="utf-8"))
    assert payload["version"] == LEDGER_VERSION
    assert payload["sourceDocumentKey"] == "FILE123"
    assert payload["colors"]["red"]["hexValue"] == "0xFFFF0000"
    assert payload["icons"]["1:1"]["remoteLocator"] == "https://a"
    assert "sourceHash" in payload["generatedFiles"]["app_colors.dart"]

    reloaded = Ledger(ledger_path)
    assert reloaded.source_document_key == "FILE123"
    assert reloaded.last_sync == ledger.last_sync
    assert reloaded.icons == ledger.icons
    assert reloaded.colors == ledger.colors
    assert reloaded.classify_icon("1:1", "home.svg", "https://a", target) is ChangeStatus.UNCHANGED
    assert reloaded.classify_generated("app_colors.dart", {"colors": ["red"]}) is ChangeStatus.UNCHANGED


def test_missing_ledger_starts_empty(tmp_path: Path) -> None:
    ledger = Ledger.for_output_dir(tmp_path / "nowhere")

    assert ledger.path == tmp_path / "nowhere" / LEDGER_FILENAME
    assert ledger.last_sync is None
    assert ledger.stats() == {"colors": 0, "icons": 0, "generatedFiles": 0}


def test_corrupt_ledger_starts_fresh(ledger_path: Path) -> None:
    ledger_path.parent.mkdir(parents=True)
    ledger_path.write_text("{not json", encoding="utf-8")

    ledger = Ledger(ledger_path)

    assert ledger.stats() == {"colors": 0, "icons": 0, "generatedFiles": 0}
    assert ledger.classify_color("red", "0xFFFF0000", "Red") is ChangeStatus.NEW


def test_schema_errors_discard_whole_ledger(ledger_path: Path) -> None:
    ledger_path.parent.mkdir(parents=True)
    payload = {
        "version": LEDGER_VERSION,
        "lastSync": "2026-01-01T00:00:00Z",
        "sourceDocumentKey": "FILE",
        "colors": {"red": {"hexValue": "0xFFFF0000", "originalName": "Red", "lastUpdated": "x"}},
        "icons": {"1:1": {"fileName": 42}},
    }
    ledger_path.write_text(json.dumps(payload), encoding="utf-8")

    ledger = Ledger(ledger_path)

    assert ledger.colors == {}
    assert ledger.source_document_key == ""


def test_version_mismatch_starts_fresh(ledger_path: Path) -> None:
    ledger_path.parent.mkdir(parents=True)
    ledger_path.write_text(
        json.dumps({"version": "0.9.0", "colors": {}, "icons": {}}), encoding="utf-8"
    )

    ledger = Ledger(ledger_path)

    assert ledger.schema_version == LEDGER_VERSION
    assert ledger.last_sync is None


def test_in_memory_ledger_never_touches_disk(tmp_path: Path) -> None:
    ledger = Ledger(None, clock=lambda: "2026-01-01T00:00:00Z")
    ledger.record_color("red", "0xFFFF0000", "Red")
    ledger.persist()

    assert ledger.last_sync == "2026-01-01T00:00:00Z"
    assert ledger.stats()["colors"] == 1
    assert list(tmp_path.iterdir()) == []
