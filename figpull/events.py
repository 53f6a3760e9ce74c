"""Progress events emitted by the extraction and download stages."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .logging import get_logger

# Event kinds
ICON_FALLBACK = "icon.fallback"
ICON_DUPLICATE = "icon.duplicate"
ICON_NEW = "icon.new"
ICON_CHANGED = "icon.changed"
ICON_UNCHANGED = "icon.unchanged"
ICON_DOWNLOADED = "icon.downloaded"
ICON_FAILED = "icon.failed"
DOWNLOAD_ABORTED = "download.aborted"
FILE_GENERATED = "file.generated"
FILE_UNCHANGED = "file.unchanged"
ORPHAN_FOUND = "orphan.found"
ORPHAN_REMOVED = "orphan.removed"

_WARNING_KINDS = {ICON_FALLBACK, ICON_DUPLICATE, ICON_FAILED, DOWNLOAD_ABORTED}


@dataclass(frozen=True)
class PullEvent:
    """A single progress notification."""

    kind: str
    subject: str
    detail: Optional[str] = None


EventSink = Callable[[PullEvent], None]


class LoggingEventSink:
    """Forwards events to the figpull logger hierarchy."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger("events")

    def __call__(self, event: PullEvent) -> None:
        level = logging.WARNING if event.kind in _WARNING_KINDS else logging.INFO
        if event.detail:
            self.logger.log(level, "%s %s (%s)", event.kind, event.subject, event.detail)
        else:
            self.logger.log(level, "%s %s", event.kind, event.subject)


def null_sink(event: PullEvent) -> None:
    """Discard ``event``."""


__all__ = [
    "EventSink",
    "LoggingEventSink",
    "PullEvent",
    "null_sink",
]
