"""Logger hierarchy and console/file handlers for figpull commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "figpull"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``figpull.<name>``, e.g. ``figpull.downloader``."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class ConsoleFormatter(logging.Formatter):
    """Tags each line with the component that emitted it.

    ``figpull.downloader`` renders as ``[figpull:downloader]``. INFO lines carry
    no level name so routine progress stays short; other levels keep it.
    """

    def format(self, record: logging.LogRecord) -> str:
        component = _component(record.name)
        prefix = f"[{_LOGGER_NAME}:{component}]" if component else f"[{_LOGGER_NAME}]"
        message = record.getMessage()
        if record.levelno != logging.INFO:
            message = f"{record.levelname} {message}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"{prefix} {message}"


def console_level(*, verbose: bool = False, quiet: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install console output and an optional file sink on the figpull logger.

    ``quiet`` limits the console to warnings (skipped duplicates, failed
    downloads, an unreadable ledger). The log file always records DEBUG so a
    failed pull can be diagnosed without rerunning it.
    """
    stream_level = console_level(verbose=verbose, quiet=quiet)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else stream_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(stream_level)
    stream_handler.setFormatter(ConsoleFormatter())
    logger.addHandler(stream_handler)

    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def _component(logger_name: str) -> str:
    if logger_name.startswith(f"{_LOGGER_NAME}."):
        return logger_name[len(_LOGGER_NAME) + 1 :]
    return ""


__all__ = ["ConsoleFormatter", "configure_logging", "console_level", "get_logger"]
