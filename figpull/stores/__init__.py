"""Persistence helpers for figpull."""

from .ledger import ChangeStatus, Ledger, content_hash, file_hash

__all__ = ["ChangeStatus", "Ledger", "content_hash", "file_hash"]
