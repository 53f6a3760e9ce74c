"""Dart/Flutter source generators for colors and icons."""

from .colors import (
    categorize_color,
    color_source_data,
    render_categorized_color_class,
    render_color_class,
    render_theme_extension,
)
from .icons import (
    categorize_icon,
    icon_source_data,
    render_categorized_icon_class,
    render_icon_class,
    render_icon_documentation,
    render_icon_widgets,
    render_pubspec_assets,
)

__all__ = [
    "categorize_color",
    "categorize_icon",
    "color_source_data",
    "icon_source_data",
    "render_categorized_color_class",
    "render_categorized_icon_class",
    "render_color_class",
    "render_icon_class",
    "render_icon_documentation",
    "render_icon_widgets",
    "render_pubspec_assets",
    "render_theme_extension",
]
