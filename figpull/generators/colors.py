"""Render Dart sources for extracted colors."""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence, Tuple

from ..models import ColorEntry

HEADER = (
    "/// Generated colors from Figma",
    "/// This file is auto-generated. Do not modify manually.",
)

# Checked in order; the first matching keyword group decides the category.
_CATEGORY_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Primary", ("primary",)),
    ("Secondary", ("secondary",)),
    ("Accent", ("accent",)),
    ("Background", ("background", "bg")),
    ("Text", ("text", "font")),
    ("Border", ("border", "stroke")),
    ("Error", ("error", "danger")),
    ("Success", ("success", "green")),
    ("Warning", ("warning", "yellow")),
    ("Info", ("info", "blue")),
)
DEFAULT_CATEGORY = "General"


def sorted_colors(colors: Mapping[str, ColorEntry]) -> List[ColorEntry]:
    return [colors[name] for name in sorted(colors)]


def color_source_data(colors: Mapping[str, ColorEntry]) -> List[Dict[str, str]]:
    """Return the fields generated color sources depend on, in stable order."""
    return [
        {
            "name": entry.name,
            "originalName": entry.original_name,
            "description": entry.description,
            "hexValue": entry.hex_value,
        }
        for entry in sorted_colors(colors)
    ]


def categorize_color(original_name: str) -> str:
    lowered = original_name.lower()
    for category, keywords in _CATEGORY_RULES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def render_color_class(colors: Mapping[str, ColorEntry], class_name: str = "AppColors") -> str:
    entries = sorted_colors(colors)
    lines = ["import 'package:flutter/material.dart';", "", *HEADER]
    lines.extend([f"class {class_name} {{", f"  {class_name}._();", ""])
    for entry in entries:
        lines.extend(_constant_lines(entry))

    lines.append("  /// Get all colors as a map")
    lines.append("  static Map<String, Color> get allColors => {")
    lines.extend(f"    '{entry.name}': {entry.name}," for entry in entries)
    lines.extend(["  };", ""])
    lines.extend(
        [
            "  /// Get color by name (case-insensitive)",
            "  static Color? getColorByName(String name) {",
            "    final lowerName = name.toLowerCase();",
            "    for (final entry in allColors.entries) {",
            "      if (entry.key.toLowerCase() == lowerName) {",
            "        return entry.value;",
            "      }",
            "    }",
            "    return null;",
            "  }",
            "}",
        ]
    )
    return "\n".join(lines) + "\n"


def render_categorized_color_class(
    colors: Mapping[str, ColorEntry], class_name: str = "AppColors"
) -> str:
    categories: Dict[str, List[ColorEntry]] = {}
    for entry in sorted_colors(colors):
        categories.setdefault(categorize_color(entry.original_name), []).append(entry)

    lines = ["import 'package:flutter/material.dart';", "", *HEADER]
    lines.extend([f"class {class_name} {{", f"  {class_name}._();", ""])
    for category in sorted(categories):
        lines.append(f"  // {category} Colors")
        for entry in categories[category]:
            lines.extend(_constant_lines(entry))

    lines.append("  /// Get all colors as a map")
    lines.append("  static Map<String, Color> get allColors => {")
    lines.extend(f"    '{entry.name}': {entry.name}," for entry in sorted_colors(colors))
    lines.extend(["  };", "}"])
    return "\n".join(lines) + "\n"


def render_theme_extension(
    colors: Mapping[str, ColorEntry], extension_name: str = "AppColorTheme"
) -> str:
    entries = sorted_colors(colors)
    lines = [
        "import 'package:flutter/material.dart';",
        "",
        "/// Theme extension for app colors",
        "/// This file is auto-generated. Do not modify manually.",
        "@immutable",
        f"class {extension_name} extends ThemeExtension<{extension_name}> {{",
        "",
        f"  const {extension_name}({{",
    ]
    lines.extend(f"    required this.{entry.name}," for entry in entries)
    lines.extend(["  });", ""])
    for entry in entries:
        lines.extend([f"  /// {_single_line(entry.description)}", f"  final Color {entry.name};", ""])

    lines.extend(["  @override", f"  {extension_name} copyWith({{"])
    lines.extend(f"    Color? {entry.name}," for entry in entries)
    lines.extend(["  }) {", f"    return {extension_name}("])
    lines.extend(f"      {entry.name}: {entry.name} ?? this.{entry.name}," for entry in entries)
    lines.extend(["    );", "  }", ""])

    lines.extend(
        [
            "  @override",
            f"  {extension_name} lerp({extension_name}? other, double t) {{",
            f"    if (other is! {extension_name}) return this;",
            f"    return {extension_name}(",
        ]
    )
    lines.extend(
        f"      {entry.name}: Color.lerp({entry.name}, other.{entry.name}, t)!,"
        for entry in entries
    )
    lines.extend(["    );", "  }", ""])

    lines.append(f"  static const light = {extension_name}(")
    lines.extend(f"    {entry.name}: Color({entry.hex_value})," for entry in entries)
    lines.extend(["  );", "}", ""])
    lines.extend(
        [
            f"extension {extension_name}Extension on ThemeData {{",
            f"  {extension_name} get appColors => extension<{extension_name}>()!;",
            "}",
        ]
    )
    return "\n".join(lines) + "\n"


def _constant_lines(entry: ColorEntry) -> Sequence[str]:
    lines: List[str] = []
    description = _single_line(entry.description)
    if description:
        lines.append(f"  /// {description}")
    lines.append(f"  /// Original name: {_single_line(entry.original_name)}")
    lines.append(f"  static const Color {entry.name} = Color({entry.hex_value});")
    lines.append("")
    return lines


def _single_line(text: str) -> str:
    return " ".join(text.split())


__all__ = [
    "categorize_color",
    "color_source_data",
    "render_categorized_color_class",
    "render_color_class",
    "render_theme_extension",
]
