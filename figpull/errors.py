"""Exception types raised by figpull components."""

from __future__ import annotations

from typing import Optional


class FigpullError(RuntimeError):
    """Base class for errors surfaced to figpull callers."""


class TransportError(FigpullError):
    """Raised when a Figma API request fails or returns a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        message = super().__str__()
        if self.body:
            return f"{message}\nResponse: {self.body}"
        return message


class ExtractionError(FigpullError):
    """Raised when icon locators cannot be resolved for a batch of candidates."""


class LedgerCorruption(FigpullError):
    """Raised when persisted ledger content does not match the expected schema."""


__all__ = ["ExtractionError", "FigpullError", "LedgerCorruption", "TransportError"]
