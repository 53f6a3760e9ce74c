"""Pull pipeline: fetch a Figma file, then emit colors and icons that changed."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .client import FigmaClient
from .config import FigpullConfig
from .downloader import DownloadReport, IconDownloader, Sleeper
from .events import (
    FILE_GENERATED,
    FILE_UNCHANGED,
    ORPHAN_FOUND,
    ORPHAN_REMOVED,
    EventSink,
    LoggingEventSink,
    PullEvent,
)
from .extractors import IconCollection, collect_icons, extract_colors
from .generators import (
    color_source_data,
    icon_source_data,
    render_categorized_color_class,
    render_categorized_icon_class,
    render_color_class,
    render_icon_class,
    render_icon_documentation,
    render_icon_widgets,
    render_pubspec_assets,
    render_theme_extension,
)
from .logging import get_logger
from .models import ColorEntry, IconCandidate
from .stores.ledger import ChangeStatus, Ledger

COLORS_FILE = "app_colors.dart"
THEME_FILE = "app_color_theme.dart"
ICONS_FILE = "app_icons.dart"
ICON_WIDGETS_FILE = "app_icon_widgets.dart"
ICON_DOCS_FILE = "ICONS.md"

_GENERATED_PREFIXES = ("app_colors", "app_icons", "app_color_theme", "app_icon_widgets")


@dataclass
class PullOptions:
    """Effective settings for one pull run."""

    file_key: str
    output_dir: Path = Path("lib/generated")
    assets_dir: Path = Path("assets/icons")
    asset_prefix: str = "assets/icons/"
    icons_frame: str = "Icons"
    icon_format: str = "svg"
    icon_scale: float = 1.0
    include_colors: bool = True
    include_icons: bool = True
    categorized: bool = False
    theme_extension: bool = False
    icon_widgets: bool = False
    color_class_name: str = "AppColors"
    clean: bool = False
    prune_orphans: bool = False
    pacing_delay: float = 0.1
    download_timeout: float = 30.0
    max_consecutive_failures: int = 5

    @classmethod
    def from_config(cls, config: FigpullConfig, **overrides: Any) -> "PullOptions":
        values: Dict[str, Any] = {
            "file_key": config.figma.file_key or "",
            "output_dir": config.output_dir,
            "assets_dir": config.assets_dir,
            "asset_prefix": config.output.asset_prefix,
            "icons_frame": config.icons.frame,
            "icon_format": config.icons.format,
            "icon_scale": config.icons.scale,
            "categorized": config.colors.categorized,
            "theme_extension": config.colors.theme_extension,
            "icon_widgets": config.icons.widgets,
            "color_class_name": config.colors.class_name,
            "prune_orphans": config.icons.prune_orphans,
            "pacing_delay": config.icons.pacing_delay,
            "download_timeout": config.icons.download_timeout,
            "max_consecutive_failures": config.icons.max_consecutive_failures,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


@dataclass
class ChangeSummary:
    """Per-run classification of colors and icons."""

    new_colors: List[str] = field(default_factory=list)
    changed_colors: List[str] = field(default_factory=list)
    unchanged_colors: List[str] = field(default_factory=list)
    orphaned_colors: List[str] = field(default_factory=list)
    orphaned_icons: List[str] = field(default_factory=list)

    def is_empty(self, downloads: Optional[DownloadReport]) -> bool:
        icon_changes = bool(downloads and downloads.downloaded)
        return not (
            self.new_colors
            or self.changed_colors
            or self.orphaned_colors
            or self.orphaned_icons
            or icon_changes
        )


@dataclass
class PullOutcome:
    """Result of a pull run."""

    document_name: str
    colors: Dict[str, ColorEntry] = field(default_factory=dict)
    icons: List[IconCandidate] = field(default_factory=list)
    skipped_duplicates: List[IconCandidate] = field(default_factory=list)
    downloads: Optional[DownloadReport] = None
    generated_files: List[Path] = field(default_factory=list)
    unchanged_files: List[Path] = field(default_factory=list)
    pubspec_assets: Optional[str] = None
    summary: ChangeSummary = field(default_factory=ChangeSummary)

    @property
    def partial(self) -> bool:
        return self.downloads is not None and not self.downloads.complete


class PullPipeline:
    """Coordinates a pull run as a single sequential task."""

    def __init__(
        self,
        client: FigmaClient,
        *,
        ledger: Ledger | None = None,
        sink: EventSink | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.client = client
        self._ledger = ledger
        self.sink = sink or LoggingEventSink()
        self._sleep = sleep
        self.logger = get_logger("pipeline")

    async def run(self, options: PullOptions) -> PullOutcome:
        output_dir = Path(options.output_dir)
        assets_dir = Path(options.assets_dir)
        if options.clean:
            self._clean(output_dir, assets_dir, include_assets=options.include_icons)

        ledger = self._ledger or Ledger.for_output_dir(output_dir)
        self.logger.info("Fetching Figma file %s", options.file_key)
        design = await self.client.fetch_document(options.file_key)
        self.logger.info("Fetched file: %s", design.name)

        outcome = PullOutcome(document_name=design.name)
        try:
            if options.include_colors:
                self._process_colors(extract_colors(design), options, ledger, outcome)
            if options.include_icons:
                collection = await collect_icons(
                    design,
                    self.client.locator_lookup(options.file_key),
                    container_pattern=options.icons_frame,
                    format=options.icon_format,
                    scale=options.icon_scale,
                    sink=self.sink,
                )
                await self._process_icons(collection, options, ledger, outcome)
        finally:
            ledger.persist(source_document_key=options.file_key)
        return outcome

    # ------------------------------------------------------------------
    # Colors

    def _process_colors(
        self,
        design_colors: Dict[str, ColorEntry],
        options: PullOptions,
        ledger: Ledger,
        outcome: PullOutcome,
    ) -> None:
        outcome.colors = design_colors
        summary = outcome.summary
        for name in sorted(design_colors):
            entry = design_colors[name]
            status = ledger.classify_color(name, entry.hex_value, entry.original_name)
            if status is ChangeStatus.NEW:
                summary.new_colors.append(name)
            elif status is ChangeStatus.CHANGED:
                summary.changed_colors.append(name)
            else:
                summary.unchanged_colors.append(name)

        if not design_colors:
            self.logger.warning("No colors found in the Figma file")
        else:
            output_dir = Path(options.output_dir)
            source = color_source_data(design_colors)
            if options.categorized:
                content = render_categorized_color_class(design_colors, options.color_class_name)
            else:
                content = render_color_class(design_colors, options.color_class_name)
            variant = {
                "className": options.color_class_name,
                "categorized": options.categorized,
                "colors": source,
            }
            self._emit(ledger, output_dir / COLORS_FILE, content, variant, outcome)
            if options.theme_extension:
                self._emit(
                    ledger,
                    output_dir / THEME_FILE,
                    render_theme_extension(design_colors),
                    {"colors": source},
                    outcome,
                )
            for name in summary.new_colors + summary.changed_colors:
                entry = design_colors[name]
                ledger.record_color(name, entry.hex_value, entry.original_name)

        orphans = ledger.orphaned_colors(design_colors)
        summary.orphaned_colors.extend(orphans)
        for name in orphans:
            self.sink(PullEvent(ORPHAN_FOUND, name, "color"))
            if options.prune_orphans:
                ledger.remove_color(name)
                self.sink(PullEvent(ORPHAN_REMOVED, name, "color"))

    # ------------------------------------------------------------------
    # Icons

    async def _process_icons(
        self,
        collection: IconCollection,
        options: PullOptions,
        ledger: Ledger,
        outcome: PullOutcome,
    ) -> None:
        outcome.icons = list(collection.icons)
        outcome.skipped_duplicates = list(collection.skipped)
        if not collection.icons:
            self.logger.warning("No icons found in frame %r", options.icons_frame)
        else:
            downloader = IconDownloader(
                self.client.fetch_bytes,
                ledger=ledger,
                sink=self.sink,
                pacing_delay=options.pacing_delay,
                timeout=options.download_timeout,
                max_consecutive_failures=options.max_consecutive_failures,
                sleep=self._sleep,
            )
            outcome.downloads = await downloader.download(collection.icons, Path(options.assets_dir))
            self._write_icon_sources(collection.icons, options, ledger, outcome)

        orphans = ledger.orphaned_icons(collection.node_ids)
        outcome.summary.orphaned_icons.extend(orphans)
        assets_dir = Path(options.assets_dir)
        live_paths = {_normalize(assets_dir / icon.file_name) for icon in collection.icons}
        for node_id in orphans:
            record = ledger.icon_entry(node_id)
            label = record.file_name if record else node_id
            self.sink(PullEvent(ORPHAN_FOUND, label, "icon"))
            if not options.prune_orphans:
                continue
            # A recreated node can own the orphan's file under a new id.
            if record is not None and record.file_path:
                orphan_path = Path(record.file_path)
                if _normalize(orphan_path) in live_paths:
                    self.logger.debug("Keeping %s, still used by a current icon", orphan_path)
                else:
                    self._delete_file(orphan_path)
            ledger.remove_icon(node_id)
            self.sink(PullEvent(ORPHAN_REMOVED, label, "icon"))

    def _write_icon_sources(
        self,
        icons: List[IconCandidate],
        options: PullOptions,
        ledger: Ledger,
        outcome: PullOutcome,
    ) -> None:
        output_dir = Path(options.output_dir)
        prefix = options.asset_prefix
        source = icon_source_data(icons, prefix)
        if options.categorized:
            content = render_categorized_icon_class(icons, asset_prefix=prefix)
        else:
            content = render_icon_class(icons, asset_prefix=prefix)
        self._emit(
            ledger,
            output_dir / ICONS_FILE,
            content,
            {"categorized": options.categorized, "icons": source},
            outcome,
        )
        if options.icon_widgets:
            self._emit(
                ledger,
                output_dir / ICON_WIDGETS_FILE,
                render_icon_widgets(icons, asset_prefix=prefix),
                {"icons": source},
                outcome,
            )
        self._emit(
            ledger,
            output_dir / ICON_DOCS_FILE,
            render_icon_documentation(icons),
            {"icons": source},
            outcome,
        )
        outcome.pubspec_assets = render_pubspec_assets(icons, prefix)

    # ------------------------------------------------------------------
    # Internal helpers

    def _emit(
        self,
        ledger: Ledger,
        path: Path,
        content: str,
        source_data: Any,
        outcome: PullOutcome,
    ) -> None:
        status = ledger.classify_generated(path.name, source_data)
        if not status.needs_work and path.exists():
            outcome.unchanged_files.append(path)
            self.sink(PullEvent(FILE_UNCHANGED, str(path)))
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        ledger.record_generated(path.name, source_data)
        outcome.generated_files.append(path)
        self.sink(PullEvent(FILE_GENERATED, str(path), status.value))

    def _clean(self, output_dir: Path, assets_dir: Path, *, include_assets: bool) -> None:
        if output_dir.is_dir():
            for path in sorted(output_dir.iterdir()):
                if not path.is_file():
                    continue
                if path.name == ICON_DOCS_FILE or path.name.startswith(_GENERATED_PREFIXES):
                    self._delete_file(path)
        if include_assets and assets_dir.is_dir():
            deleted = 0
            for path in sorted(assets_dir.iterdir()):
                if path.is_file() and self._delete_file(path):
                    deleted += 1
            self.logger.info("Deleted %d asset files from %s", deleted, assets_dir)

    def _delete_file(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            self.logger.warning("Failed to delete %s: %s", path, exc)
            return False
        self.logger.debug("Deleted %s", path)
        return True


def _normalize(path: Path) -> Path:
    return path.resolve(strict=False)


__all__ = ["ChangeSummary", "PullOptions", "PullOutcome", "PullPipeline"]
