"""Resolve named colors from fill styles and directly filled nodes."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from ..models import FILL_STYLE, ColorEntry, ColorValue, DesignFile, Node
from ..naming import to_description, to_variable_name
from ..tree import compile_name_pattern, find_in_pages, iter_nodes

ColorMap = Dict[str, ColorEntry]


def extract_colors(design: DesignFile) -> ColorMap:
    """Return colors keyed by derived variable name.

    Style-backed colors are resolved first and win over colors taken from
    unstyled nodes that derive the same name.
    """
    colors: ColorMap = {}
    for style_id, style in design.styles.items():
        if style.kind != FILL_STYLE:
            continue
        color = _color_for_style(design, style_id)
        if color is None:
            continue
        name = to_variable_name(style.name)
        colors[name] = ColorEntry(
            name=name,
            original_name=style.name,
            description=style.description or to_description(style.name),
            hex_value=color.to_hex(),
            color=color,
        )

    _collect_unstyled(design.pages, colors)
    return colors


def extract_colors_from_frame(design: DesignFile, frame_pattern: str) -> ColorMap:
    """Collect directly filled, unstyled nodes under frames matching ``frame_pattern``."""
    regex = compile_name_pattern(frame_pattern)
    frames = find_in_pages(design, lambda node: regex.search(node.name) is not None)
    colors: ColorMap = {}
    _collect_unstyled(frames, colors)
    return colors


def _color_for_style(design: DesignFile, style_id: str) -> Optional[ColorValue]:
    for page in design.pages:
        for node in iter_nodes(page):
            if node.fill_style_id == style_id:
                # Only the first referencing node is consulted.
                return node.first_solid_color()
    return None


def _collect_unstyled(roots: Iterable[Node], colors: ColorMap) -> None:
    for root in roots:
        for node in iter_nodes(root):
            if node.fill_style_id is not None:
                continue
            color = node.first_solid_color()
            if color is None:
                continue
            name = to_variable_name(node.name)
            if name in colors:
                continue
            colors[name] = ColorEntry(
                name=name,
                original_name=node.name,
                description=to_description(node.name),
                hex_value=color.to_hex(),
                color=color,
            )


__all__ = ["ColorMap", "extract_colors", "extract_colors_from_frame"]
