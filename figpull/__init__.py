"""Pull color tokens and icon assets from Figma files with change detection."""

from .errors import ExtractionError, FigpullError, LedgerCorruption, TransportError
from .extractors import collect_icons, extract_colors, extract_icons
from .models import ColorEntry, ColorValue, DesignFile, IconCandidate, Node, StyleDescriptor
from .stores import ChangeStatus, Ledger
from .tree import find_by_kind, find_by_name_pattern

__version__ = "0.1.0"

__all__ = [
    "ChangeStatus",
    "ColorEntry",
    "ColorValue",
    "DesignFile",
    "ExtractionError",
    "FigpullError",
    "IconCandidate",
    "Ledger",
    "LedgerCorruption",
    "Node",
    "StyleDescriptor",
    "TransportError",
    "collect_icons",
    "extract_colors",
    "extract_icons",
    "find_by_kind",
    "find_by_name_pattern",
]
