"""Persisted record of processed colors, icons and generated files."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from ..errors import LedgerCorruption
from ..logging import get_logger

LEDGER_VERSION = "1.0.0"
LEDGER_FILENAME = ".figma_manifest.json"

Clock = Callable[[], str]


class ChangeStatus(str, Enum):
    NEW = "new"
    CHANGED = "changed"
    UNCHANGED = "unchanged"

    @property
    def needs_work(self) -> bool:
        return self is not ChangeStatus.UNCHANGED


@dataclass(frozen=True)
class IconRecord:
    node_id: str
    file_name: str
    remote_locator: str
    content_hash: Optional[str]
    last_updated: str
    file_path: Optional[str] = None


@dataclass(frozen=True)
class ColorRecord:
    color_name: str
    hex_value: str
    original_name: str
    last_updated: str


@dataclass(frozen=True)
class GeneratedFileRecord:
    file_name: str
    source_hash: str
    last_updated: str


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def content_hash(data: bytes) -> str:
    """Return the SHA-256 hex digest of ``data``."""
    return hashlib.sha256(data).hexdigest()


def file_hash(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def data_hash(data: Any) -> str:
    """Hash a JSON-serialisable structure independent of key order."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return content_hash(canonical.encode("utf-8"))


class Ledger:
    """Change-detection ledger keyed by icon node id and color name.

    Classification methods are read-only; state changes only through the
    ``record_*`` and ``remove_*`` methods, and reaches disk on :meth:`persist`.
    """

    def __init__(self, path: Path | None, *, clock: Clock | None = None) -> None:
        self._path = path
        self._clock = clock or utc_timestamp
        self.logger = get_logger("ledger")
        self._reset()
        if self._path is not None:
            self._load(self._path)

    @classmethod
    def for_output_dir(cls, output_dir: Path, *, clock: Clock | None = None) -> "Ledger":
        return cls(Path(output_dir) / LEDGER_FILENAME, clock=clock)

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def schema_version(self) -> str:
        return self._version

    @property
    def last_sync(self) -> Optional[str]:
        return self._last_sync

    @property
    def source_document_key(self) -> str:
        return self._source_document_key

    @property
    def colors(self) -> Mapping[str, ColorRecord]:
        return dict(self._colors)

    @property
    def icons(self) -> Mapping[str, IconRecord]:
        return dict(self._icons)

    def icon_entry(self, node_id: str) -> Optional[IconRecord]:
        return self._icons.get(node_id)

    # ------------------------------------------------------------------
    # Classification

    def classify_icon(
        self, node_id: str, file_name: str, remote_locator: str, local_path: Path
    ) -> ChangeStatus:
        entry = self._icons.get(node_id)
        if entry is None:
            return ChangeStatus.NEW
        if entry.remote_locator != remote_locator:
            return ChangeStatus.CHANGED
        if entry.file_name != file_name:
            return ChangeStatus.CHANGED
        local_path = Path(local_path)
        if not local_path.is_file():
            return ChangeStatus.CHANGED
        if entry.content_hash is not None and file_hash(local_path) != entry.content_hash:
            return ChangeStatus.CHANGED
        return ChangeStatus.UNCHANGED

    def classify_color(self, name: str, hex_value: str, original_name: str) -> ChangeStatus:
        entry = self._colors.get(name)
        if entry is None:
            return ChangeStatus.NEW
        if entry.hex_value != hex_value or entry.original_name != original_name:
            return ChangeStatus.CHANGED
        return ChangeStatus.UNCHANGED

    def classify_generated(self, file_name: str, source_data: Any) -> ChangeStatus:
        entry = self._generated.get(file_name)
        if entry is None:
            return ChangeStatus.NEW
        if entry.source_hash != data_hash(source_data):
            return ChangeStatus.CHANGED
        return ChangeStatus.UNCHANGED

    # ------------------------------------------------------------------
    # Mutation

    def record_icon(
        self, node_id: str, file_name: str, remote_locator: str, local_path: Path
    ) -> IconRecord:
        local_path = Path(local_path)
        digest = file_hash(local_path) if local_path.is_file() else None
        record = IconRecord(
            node_id=node_id,
            file_name=file_name,
            remote_locator=remote_locator,
            content_hash=digest,
            last_updated=self._clock(),
            file_path=str(local_path),
        )
        self._icons[node_id] = record
        return record

    def record_color(self, name: str, hex_value: str, original_name: str) -> ColorRecord:
        record = ColorRecord(
            color_name=name,
            hex_value=hex_value,
            original_name=original_name,
            last_updated=self._clock(),
        )
        self._colors[name] = record
        return record

    def record_generated(self, file_name: str, source_data: Any) -> GeneratedFileRecord:
        record = GeneratedFileRecord(
            file_name=file_name,
            source_hash=data_hash(source_data),
            last_updated=self._clock(),
        )
        self._generated[file_name] = record
        return record

    def orphaned_icons(self, current_node_ids: Iterable[str]) -> List[str]:
        current = set(current_node_ids)
        return [node_id for node_id in self._icons if node_id not in current]

    def orphaned_colors(self, current_names: Iterable[str]) -> List[str]:
        current = set(current_names)
        return [name for name in self._colors if name not in current]

    def remove_icon(self, node_id: str) -> Optional[IconRecord]:
        return self._icons.pop(node_id, None)

    def remove_color(self, name: str) -> Optional[ColorRecord]:
        return self._colors.pop(name, None)

    def stats(self) -> Dict[str, int]:
        return {
            "colors": len(self._colors),
            "icons": len(self._icons),
            "generatedFiles": len(self._generated),
        }

    def persist(self, source_document_key: str | None = None) -> None:
        """Overwrite the persisted ledger with the in-memory state."""
        if source_document_key is not None:
            self._source_document_key = source_document_key
        self._last_sync = self._clock()
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(self.to_dict(), indent=2, sort_keys=True), encoding="utf-8"
        )
        self.logger.debug("Persisted ledger to %s", self._path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self._version,
            "lastSync": self._last_sync,
            "sourceDocumentKey": self._source_document_key,
            "colors": {name: _color_to_dict(record) for name, record in self._colors.items()},
            "icons": {node_id: _icon_to_dict(record) for node_id, record in self._icons.items()},
            "generatedFiles": {
                name: _generated_to_dict(record) for name, record in self._generated.items()
            },
        }

    # ------------------------------------------------------------------
    # Internal helpers

    def _reset(self) -> None:
        self._version = LEDGER_VERSION
        self._last_sync: Optional[str] = None
        self._source_document_key = ""
        self._colors: Dict[str, ColorRecord] = {}
        self._icons: Dict[str, IconRecord] = {}
        self._generated: Dict[str, GeneratedFileRecord] = {}

    def _load(self, path: Path) -> None:
        try:
            self._apply(_read_payload(path))
        except FileNotFoundError:
            return
        except LedgerCorruption as exc:
            self.logger.warning("Ignoring unreadable ledger at %s, starting fresh: %s", path, exc)
            self._reset()

    def _apply(self, payload: object) -> None:
        if not isinstance(payload, dict):
            raise LedgerCorruption("ledger root must be an object")
        version = payload.get("version")
        if version != LEDGER_VERSION:
            raise LedgerCorruption(f"unsupported ledger version {version!r}")
        last_sync = payload.get("lastSync")
        if last_sync is not None and not isinstance(last_sync, str):
            raise LedgerCorruption("lastSync must be a string")
        source_key = payload.get("sourceDocumentKey", "")
        if not isinstance(source_key, str):
            raise LedgerCorruption("sourceDocumentKey must be a string")

        colors = {
            name: _color_from_dict(name, raw)
            for name, raw in _section(payload, "colors").items()
        }
        icons = {
            node_id: _icon_from_dict(node_id, raw)
            for node_id, raw in _section(payload, "icons").items()
        }
        generated = {
            name: _generated_from_dict(name, raw)
            for name, raw in _section(payload, "generatedFiles", required=False).items()
        }

        self._last_sync = last_sync
        self._source_document_key = source_key
        self._colors = colors
        self._icons = icons
        self._generated = generated


def _read_payload(path: Path) -> object:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as exc:
        raise LedgerCorruption(f"unreadable ledger: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise LedgerCorruption(f"invalid JSON: {exc}") from exc


def _section(payload: Mapping[str, Any], key: str, *, required: bool = True) -> Dict[str, Any]:
    value = payload.get(key)
    if value is None and not required:
        return {}
    if not isinstance(value, dict):
        raise LedgerCorruption(f"'{key}' must be an object")
    return value


def _require_str(raw: Mapping[str, Any], key: str, owner: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise LedgerCorruption(f"{owner}: '{key}' must be a string")
    return value


def _optional_str(raw: Mapping[str, Any], key: str, owner: str) -> Optional[str]:
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        raise LedgerCorruption(f"{owner}: '{key}' must be a string or null")
    return value


def _color_from_dict(name: str, raw: object) -> ColorRecord:
    owner = f"color {name!r}"
    if not isinstance(raw, dict):
        raise LedgerCorruption(f"{owner} must be an object")
    return ColorRecord(
        color_name=name,
        hex_value=_require_str(raw, "hexValue", owner),
        original_name=_require_str(raw, "originalName", owner),
        last_updated=_require_str(raw, "lastUpdated", owner),
    )


def _icon_from_dict(node_id: str, raw: object) -> IconRecord:
    owner = f"icon {node_id!r}"
    if not isinstance(raw, dict):
        raise LedgerCorruption(f"{owner} must be an object")
    return IconRecord(
        node_id=node_id,
        file_name=_require_str(raw, "fileName", owner),
        remote_locator=_require_str(raw, "remoteLocator", owner),
        content_hash=_optional_str(raw, "contentHash", owner),
        last_updated=_require_str(raw, "lastUpdated", owner),
        file_path=_optional_str(raw, "filePath", owner),
    )


def _generated_from_dict(name: str, raw: object) -> GeneratedFileRecord:
    owner = f"generated file {name!r}"
    if not isinstance(raw, dict):
        raise LedgerCorruption(f"{owner} must be an object")
    return GeneratedFileRecord(
        file_name=name,
        source_hash=_require_str(raw, "sourceHash", owner),
        last_updated=_require_str(raw, "lastUpdated", owner),
    )


def _color_to_dict(record: ColorRecord) -> Dict[str, Any]:
    return {
        "hexValue": record.hex_value,
        "originalName": record.original_name,
        "lastUpdated": record.last_updated,
    }


def _icon_to_dict(record: IconRecord) -> Dict[str, Any]:
    return {
        "fileName": record.file_name,
        "remoteLocator": record.remote_locator,
        "contentHash": record.content_hash,
        "filePath": record.file_path,
        "lastUpdated": record.last_updated,
    }


def _generated_to_dict(record: GeneratedFileRecord) -> Dict[str, Any]:
    return {
        "sourceHash": record.source_hash,
        "lastUpdated": record.last_updated,
    }


__all__ = [
    "ChangeStatus",
    "ColorRecord",
    "GeneratedFileRecord",
    "IconRecord",
    "LEDGER_FILENAME",
    "LEDGER_VERSION",
    "Ledger",
    "content_hash",
    "data_hash",
    "file_hash",
]
