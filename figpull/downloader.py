"""Sequential icon downloads with change detection and failure limits."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence

from .errors import TransportError
from .events import (
    DOWNLOAD_ABORTED,
    ICON_CHANGED,
    ICON_DOWNLOADED,
    ICON_FAILED,
    ICON_NEW,
    ICON_UNCHANGED,
    EventSink,
    PullEvent,
    null_sink,
)
from .logging import get_logger
from .models import IconCandidate
from .stores.ledger import ChangeStatus, Ledger

DEFAULT_PACING_DELAY = 0.1
DEFAULT_DOWNLOAD_TIMEOUT = 30.0
DEFAULT_MAX_CONSECUTIVE_FAILURES = 5

ByteFetcher = Callable[..., Awaitable[bytes]]
Sleeper = Callable[[float], Awaitable[None]]


@dataclass
class DownloadReport:
    """Outcome of a download run, by file name."""

    new: List[str] = field(default_factory=list)
    changed: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    remaining: List[str] = field(default_factory=list)
    aborted: bool = False

    @property
    def downloaded(self) -> List[str]:
        return self.new + self.changed

    @property
    def succeeded(self) -> int:
        return len(self.downloaded) + len(self.unchanged)

    @property
    def complete(self) -> bool:
        return not self.aborted and not self.failed


class IconDownloader:
    """Downloads icons one at a time, skipping those the ledger reports unchanged.

    Without a ledger, an existing file on disk is treated as up to date.
    ``fetch_bytes`` is called as ``fetch_bytes(locator, timeout=...)`` so the
    transport gives up together with the per-item deadline.
    """

    def __init__(
        self,
        fetch_bytes: ByteFetcher,
        *,
        ledger: Ledger | None = None,
        sink: EventSink = null_sink,
        pacing_delay: float = DEFAULT_PACING_DELAY,
        timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
        max_consecutive_failures: int = DEFAULT_MAX_CONSECUTIVE_FAILURES,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._fetch_bytes = fetch_bytes
        self.ledger = ledger
        self.sink = sink
        self.pacing_delay = pacing_delay
        self.timeout = timeout
        self.max_consecutive_failures = max_consecutive_failures
        self._sleep = sleep
        self.logger = get_logger("downloader")

    async def download(
        self, icons: Sequence[IconCandidate], assets_dir: Path
    ) -> DownloadReport:
        assets_dir = Path(assets_dir)
        assets_dir.mkdir(parents=True, exist_ok=True)
        report = DownloadReport()
        self.logger.info("Downloading %d icons to %s", len(icons), assets_dir)

        consecutive_failures = 0
        for index, icon in enumerate(icons):
            target = assets_dir / icon.file_name
            status = self._classify(icon, target)
            if not status.needs_work:
                report.unchanged.append(icon.file_name)
                self.sink(PullEvent(ICON_UNCHANGED, icon.file_name))
                continue

            self.sink(
                PullEvent(
                    ICON_NEW if status is ChangeStatus.NEW else ICON_CHANGED,
                    icon.file_name,
                    f"{index + 1}/{len(icons)}",
                )
            )
            error = await self._download_one(icon, target)
            if error is None:
                consecutive_failures = 0
                bucket = report.new if status is ChangeStatus.NEW else report.changed
                bucket.append(icon.file_name)
                self.sink(PullEvent(ICON_DOWNLOADED, icon.file_name))
            else:
                consecutive_failures += 1
                report.failed.append(icon.file_name)
                self.sink(PullEvent(ICON_FAILED, icon.file_name, error))
                if consecutive_failures > self.max_consecutive_failures:
                    report.aborted = True
                    report.remaining = [item.file_name for item in icons[index + 1 :]]
                    self.sink(
                        PullEvent(
                            DOWNLOAD_ABORTED,
                            f"{len(report.remaining)} icons",
                            f"{consecutive_failures} consecutive failures",
                        )
                    )
                    break

            if index < len(icons) - 1:
                await self._sleep(self.pacing_delay)

        self.logger.info(
            "Icon download finished: %d downloaded, %d unchanged, %d failed",
            len(report.downloaded),
            len(report.unchanged),
            len(report.failed),
        )
        return report

    def _classify(self, icon: IconCandidate, target: Path) -> ChangeStatus:
        if self.ledger is not None:
            return self.ledger.classify_icon(
                icon.node_id, icon.file_name, icon.remote_locator, target
            )
        if target.exists():
            return ChangeStatus.UNCHANGED
        return ChangeStatus.NEW

    async def _download_one(self, icon: IconCandidate, target: Path) -> Optional[str]:
        try:
            data = await asyncio.wait_for(
                self._fetch_bytes(icon.remote_locator, timeout=self.timeout),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            return f"timed out after {self.timeout:g}s"
        except TransportError as exc:
            return str(exc)

        try:
            target.write_bytes(data)
        except OSError as exc:
            return f"could not write {target}: {exc}"

        if self.ledger is not None:
            self.ledger.record_icon(icon.node_id, icon.file_name, icon.remote_locator, target)
        return None


__all__ = ["DownloadReport", "IconDownloader"]
