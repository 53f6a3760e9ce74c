"""Extractors turning a design document into color and icon candidates."""

from .colors import ColorMap, extract_colors, extract_colors_from_frame
from .icons import IconCollection, collect_icons, extract_icons

__all__ = [
    "ColorMap",
    "IconCollection",
    "collect_icons",
    "extract_colors",
    "extract_colors_from_frame",
    "extract_icons",
]
