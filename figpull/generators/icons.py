"""Render Dart sources and docs for downloaded icons."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from ..models import IconCandidate

DEFAULT_ASSET_PREFIX = "assets/icons/"

HEADER = (
    "/// Generated icon assets from Figma",
    "/// This file is auto-generated. Do not modify manually.",
)

_CATEGORY_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Navigation", ("navigation", "nav", "menu", "arrow")),
    ("Social", ("social", "share")),
    ("Actions", ("action", "button")),
    ("Communication", ("communication", "message", "mail", "phone")),
    ("Media", ("media", "play", "video", "music")),
    ("Files", ("file", "document", "folder")),
    ("User", ("user", "person", "profile", "account")),
    ("Settings", ("settings", "config", "gear", "tool")),
)
DEFAULT_CATEGORY = "General"

_WIDGET_PARAMS = (
    "    double? width,",
    "    double? height,",
    "    Color? color,",
    "    BoxFit fit = BoxFit.contain,",
)


def sorted_icons(icons: Sequence[IconCandidate]) -> List[IconCandidate]:
    return sorted(icons, key=lambda icon: icon.name)


def icon_source_data(icons: Sequence[IconCandidate], asset_prefix: str) -> List[Dict[str, str]]:
    return [
        {
            "name": icon.name,
            "originalName": icon.original_name,
            "path": icon.asset_path(asset_prefix),
            "format": icon.format,
        }
        for icon in sorted_icons(icons)
    ]


def categorize_icon(original_name: str) -> str:
    lowered = original_name.lower()
    for category, keywords in _CATEGORY_RULES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def render_icon_class(
    icons: Sequence[IconCandidate],
    class_name: str = "AppIcons",
    asset_prefix: str = DEFAULT_ASSET_PREFIX,
) -> str:
    ordered = sorted_icons(icons)
    lines = [*HEADER, f"class {class_name} {{", f"  {class_name}._();", ""]
    for icon in ordered:
        lines.extend(_constant_lines(icon, asset_prefix))

    lines.append("  /// Get all icon paths as a map")
    lines.append("  static Map<String, String> get allIcons => {")
    lines.extend(f"    '{icon.name}': {icon.name}," for icon in ordered)
    lines.extend(["  };", ""])
    lines.extend(
        [
            "  /// Get icon path by name (case-insensitive)",
            "  static String? getIconByName(String name) {",
            "    final lowerName = name.toLowerCase();",
            "    for (final entry in allIcons.entries) {",
            "      if (entry.key.toLowerCase() == lowerName) {",
            "        return entry.value;",
            "      }",
            "    }",
            "    return null;",
            "  }",
            "",
            "  /// Get all icon names",
            "  static List<String> get iconNames => allIcons.keys.toList();",
            "}",
        ]
    )
    return "\n".join(lines) + "\n"


def render_categorized_icon_class(
    icons: Sequence[IconCandidate],
    class_name: str = "AppIcons",
    asset_prefix: str = DEFAULT_ASSET_PREFIX,
) -> str:
    categories: Dict[str, List[IconCandidate]] = {}
    for icon in sorted_icons(icons):
        categories.setdefault(categorize_icon(icon.original_name), []).append(icon)

    lines = [*HEADER, f"class {class_name} {{", f"  {class_name}._();", ""]
    for category in sorted(categories):
        lines.append(f"  // {category} Icons")
        for icon in categories[category]:
            lines.extend(_constant_lines(icon, asset_prefix))
    lines.append("}")
    return "\n".join(lines) + "\n"


def render_icon_widgets(
    icons: Sequence[IconCandidate],
    class_name: str = "AppIconWidgets",
    asset_prefix: str = DEFAULT_ASSET_PREFIX,
) -> str:
    ordered = sorted_icons(icons)
    lines = [
        "import 'package:flutter/material.dart';",
        "import 'package:flutter_svg/flutter_svg.dart';",
        "",
        "/// Generated icon widgets from Figma",
        "/// This file is auto-generated. Do not modify manually.",
        f"class {class_name} {{",
        f"  {class_name}._();",
        "",
    ]
    for icon in ordered:
        path = icon.asset_path(asset_prefix)
        lines.append(f"  /// {icon.original_name}")
        lines.append(f"  static Widget {icon.name}({{")
        lines.extend(_WIDGET_PARAMS)
        lines.append("  }) {")
        if icon.format == "svg":
            lines.extend(
                [
                    "    return SvgPicture.asset(",
                    f"      '{path}',",
                    "      width: width,",
                    "      height: height,",
                    "      colorFilter: color != null ? ColorFilter.mode(color, BlendMode.srcIn) : null,",
                    "      fit: fit,",
                    "    );",
                ]
            )
        else:
            lines.extend(
                [
                    "    return Image.asset(",
                    f"      '{path}',",
                    "      width: width,",
                    "      height: height,",
                    "      color: color,",
                    "      fit: fit,",
                    "    );",
                ]
            )
        lines.extend(["  }", ""])

    lines.extend(["  /// Get icon widget by name", "  static Widget? getIconByName(", "    String name, {"])
    lines.extend(_WIDGET_PARAMS)
    lines.extend(["  }) {", "    switch (name.toLowerCase()) {"])
    for icon in ordered:
        lines.extend(
            [
                f"      case '{icon.name.lower()}':",
                f"        return {icon.name}(",
                "          width: width,",
                "          height: height,",
                "          color: color,",
                "          fit: fit,",
                "        );",
            ]
        )
    lines.extend(["      default:", "        return null;", "    }", "  }", ""])

    lines.append("  /// Get all available icon names")
    lines.append("  static List<String> get availableIcons => [")
    lines.extend(f"    '{icon.name}'," for icon in ordered)
    lines.extend(["  ];", "}"])
    return "\n".join(lines) + "\n"


def render_icon_documentation(icons: Sequence[IconCandidate]) -> str:
    ordered = sorted_icons(icons)
    lines = [
        "# App Icons",
        "",
        "This document lists all icons imported from Figma.",
        "",
        f"**Total Icons:** {len(ordered)}",
        "",
        "| Icon Name | Original Name | File Name | Format |",
        "|-----------|---------------|-----------|--------|",
    ]
    for icon in ordered:
        lines.append(
            f"| `{icon.name}` | {icon.original_name} | {icon.file_name} | {icon.format.upper()} |"
        )
    lines.extend(["", "## Usage", "", "### Using AppIcons class:", "```dart"])
    lines.extend(["import 'package:your_app/generated/app_icons.dart';", "", "// Get icon path"])
    if ordered:
        lines.append(f"String iconPath = AppIcons.{ordered[0].name};")
    lines.extend(["```", "", "### Using AppIconWidgets class:", "```dart"])
    lines.extend(
        ["import 'package:your_app/generated/app_icon_widgets.dart';", "", "// Use as widget"]
    )
    if ordered:
        lines.extend(
            [
                f"Widget icon = AppIconWidgets.{ordered[0].name}(",
                "  width: 24,",
                "  height: 24,",
                "  color: Colors.blue,",
                ");",
            ]
        )
    lines.append("```")
    return "\n".join(lines) + "\n"


def render_pubspec_assets(
    icons: Sequence[IconCandidate], asset_prefix: str = DEFAULT_ASSET_PREFIX
) -> str:
    lines = ["  assets:"]
    lines.extend(f"    - {icon.asset_path(asset_prefix)}" for icon in icons)
    return "\n".join(lines) + "\n"


def _constant_lines(icon: IconCandidate, asset_prefix: str) -> Sequence[str]:
    return (
        f"  /// {icon.original_name}",
        f"  static const String {icon.name} = '{icon.asset_path(asset_prefix)}';",
        "",
    )


__all__ = [
    "DEFAULT_ASSET_PREFIX",
    "categorize_icon",
    "icon_source_data",
    "render_categorized_icon_class",
    "render_icon_class",
    "render_icon_documentation",
    "render_icon_widgets",
    "render_pubspec_assets",
]
