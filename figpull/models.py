"""Core data models shared across figpull components."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

SOLID_FILL = "SOLID"
FILL_STYLE = "FILL"
FILL_SLOT = "fill"


@dataclass(frozen=True)
class ColorValue:
    """RGBA color with channels in the 0..1 range as reported by Figma."""

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: float = 1.0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ColorValue":
        return cls(
            r=_as_channel(payload.get("r"), 0.0),
            g=_as_channel(payload.get("g"), 0.0),
            b=_as_channel(payload.get("b"), 0.0),
            a=_as_channel(payload.get("a"), 1.0),
        )

    def to_hex(self) -> str:
        """Return the color as a ``0xAARRGGBB`` literal, alpha first."""
        channels = (self.a, self.r, self.g, self.b)
        return "0x" + "".join(f"{_to_byte(value):02X}" for value in channels)


@dataclass(frozen=True)
class Node:
    """Single element of the design document tree."""

    id: str
    name: str
    kind: str
    children: Tuple["Node", ...] = ()
    fills: Optional[Tuple[Mapping[str, Any], ...]] = None
    style_refs: Optional[Mapping[str, str]] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Node":
        raw_children = payload.get("children")
        children: List[Node] = []
        if isinstance(raw_children, list):
            for child in raw_children:
                if isinstance(child, Mapping):
                    children.append(cls.from_dict(child))

        raw_fills = payload.get("fills")
        fills = None
        if isinstance(raw_fills, list):
            fills = tuple(fill for fill in raw_fills if isinstance(fill, Mapping))

        raw_styles = payload.get("styles")
        style_refs = None
        if isinstance(raw_styles, Mapping):
            style_refs = {
                str(slot): value
                for slot, value in raw_styles.items()
                if isinstance(value, str)
            }

        return cls(
            id=_as_text(payload.get("id")),
            name=_as_text(payload.get("name")),
            kind=_as_text(payload.get("type")),
            children=tuple(children),
            fills=fills,
            style_refs=style_refs,
        )

    @property
    def fill_style_id(self) -> Optional[str]:
        if not self.style_refs:
            return None
        return self.style_refs.get(FILL_SLOT)

    def first_solid_color(self) -> Optional[ColorValue]:
        """Return the color of the first SOLID fill carrying a color payload."""
        if not self.fills:
            return None
        for fill in self.fills:
            color = fill.get("color")
            if fill.get("type") == SOLID_FILL and isinstance(color, Mapping):
                return ColorValue.from_dict(color)
        return None


@dataclass(frozen=True)
class StyleDescriptor:
    """Named, reusable style referenced by id from document nodes."""

    key: str
    name: str
    kind: str
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "StyleDescriptor":
        description = payload.get("description")
        return cls(
            key=_as_text(payload.get("key")),
            name=_as_text(payload.get("name")),
            kind=_as_text(payload.get("styleType")),
            description=description if isinstance(description, str) else None,
        )


@dataclass(frozen=True)
class DesignFile:
    """A fetched Figma file: the document tree plus its style table."""

    name: str
    root: Node
    styles: Mapping[str, StyleDescriptor] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DesignFile":
        raw_document = payload.get("document")
        if not isinstance(raw_document, Mapping):
            raw_document = {}
        raw_styles = payload.get("styles")
        styles: Dict[str, StyleDescriptor] = {}
        if isinstance(raw_styles, Mapping):
            for style_id, raw in raw_styles.items():
                if isinstance(raw, Mapping):
                    styles[str(style_id)] = StyleDescriptor.from_dict(raw)
        return cls(
            name=_as_text(payload.get("name")),
            root=Node.from_dict(raw_document),
            styles=styles,
        )

    @property
    def pages(self) -> Tuple[Node, ...]:
        return self.root.children


@dataclass(frozen=True)
class ColorEntry:
    """Named color resolved from the document."""

    name: str
    original_name: str
    description: str
    hex_value: str
    color: ColorValue


@dataclass(frozen=True)
class IconCandidate:
    """Icon node paired with the remote image locator it renders to."""

    node_id: str
    name: str
    original_name: str
    file_name: str
    remote_locator: str
    format: str

    def asset_path(self, prefix: str = "assets/icons/") -> str:
        return f"{prefix}{self.file_name}"


def _to_byte(value: float) -> int:
    # Half away from zero, not banker's rounding.
    scaled = math.floor(value * 255 + 0.5)
    return max(0, min(255, int(scaled)))


def _as_channel(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    return default


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


__all__ = [
    "ColorEntry",
    "ColorValue",
    "DesignFile",
    "FILL_STYLE",
    "IconCandidate",
    "Node",
    "SOLID_FILL",
    "StyleDescriptor",
]
