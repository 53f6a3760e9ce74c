"""Configuration loading for figpull (.figpull.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILENAME = ".figpull.yml"
ICON_FORMATS = ("svg", "png")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class FigmaConfig:
    """Figma API access settings."""

    file_key: Optional[str] = None
    token: Optional[str] = None
    base_url: Optional[str] = None
    request_timeout: Optional[float] = None


@dataclass
class OutputConfig:
    """Where generated sources and downloaded assets are written."""

    output_dir: Path = Path("lib/generated")
    assets_dir: Path = Path("assets/icons")
    asset_prefix: str = "assets/icons/"


@dataclass
class IconConfig:
    """Icon discovery and download behaviour."""

    frame: str = "Icons"
    format: str = "svg"
    scale: float = 1.0
    widgets: bool = False
    prune_orphans: bool = False
    pacing_delay: float = 0.1
    download_timeout: float = 30.0
    max_consecutive_failures: int = 5


@dataclass
class ColorConfig:
    """Color source generation options."""

    class_name: str = "AppColors"
    categorized: bool = False
    theme_extension: bool = False


@dataclass
class FigpullConfig:
    """Represents the settings defined in .figpull.yml."""

    root: Path
    figma: FigmaConfig = field(default_factory=FigmaConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    icons: IconConfig = field(default_factory=IconConfig)
    colors: ColorConfig = field(default_factory=ColorConfig)

    @property
    def output_dir(self) -> Path:
        return _anchor(self.root, self.output.output_dir)

    @property
    def assets_dir(self) -> Path:
        return _anchor(self.root, self.output.assets_dir)


def load_config(config_path: Path) -> FigpullConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return FigpullConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = FigpullConfig(root=root)

    figma_data = _as_dict(data.get("figma"))
    if figma_data:
        config.figma = FigmaConfig(
            file_key=_as_str(figma_data.get("file_key")),
            token=_as_str(figma_data.get("token")),
            base_url=_as_str(figma_data.get("base_url")),
            request_timeout=_as_float(figma_data.get("request_timeout")),
        )

    output_data = _as_dict(data.get("output"))
    if output_data:
        output_dir = _as_str(output_data.get("output_dir"))
        assets_dir = _as_str(output_data.get("assets_dir"))
        if output_dir:
            config.output.output_dir = Path(output_dir)
        if assets_dir:
            config.output.assets_dir = Path(assets_dir)
        prefix = _as_str(output_data.get("asset_prefix"))
        if prefix is None and assets_dir:
            prefix = assets_dir
        if prefix:
            config.output.asset_prefix = prefix if prefix.endswith("/") else f"{prefix}/"

    icon_data = _as_dict(data.get("icons"))
    if icon_data:
        icons = config.icons
        icons.frame = _as_str(icon_data.get("frame")) or icons.frame
        icon_format = _as_str(icon_data.get("format"))
        if icon_format is not None:
            if icon_format.lower() not in ICON_FORMATS:
                raise ConfigError(
                    f"icons.format must be one of {', '.join(ICON_FORMATS)}; got {icon_format!r}"
                )
            icons.format = icon_format.lower()
        icons.scale = _pick(_as_float(icon_data.get("scale")), icons.scale)
        icons.widgets = _pick(_as_bool(icon_data.get("widgets")), icons.widgets)
        icons.prune_orphans = _pick(_as_bool(icon_data.get("prune_orphans")), icons.prune_orphans)
        icons.pacing_delay = _pick(_as_float(icon_data.get("pacing_delay")), icons.pacing_delay)
        icons.download_timeout = _pick(
            _as_float(icon_data.get("download_timeout")), icons.download_timeout
        )
        icons.max_consecutive_failures = _pick(
            _as_int(icon_data.get("max_consecutive_failures")), icons.max_consecutive_failures
        )

    color_data = _as_dict(data.get("colors"))
    if color_data:
        colors = config.colors
        colors.class_name = _as_str(color_data.get("class_name")) or colors.class_name
        colors.categorized = _pick(_as_bool(color_data.get("categorized")), colors.categorized)
        colors.theme_extension = _pick(
            _as_bool(color_data.get("theme_extension")), colors.theme_extension
        )

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _anchor(root: Path, path: Path) -> Path:
    return path if path.is_absolute() else root / path


def _pick(value: Any, default: Any) -> Any:
    return default if value is None else value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = [
    "CONFIG_FILENAME",
    "ColorConfig",
    "ConfigError",
    "FigmaConfig",
    "FigpullConfig",
    "IconConfig",
    "OutputConfig",
    "load_config",
]
