from __future__ import annotations

from typing import Protocol

from ...domain.models import JournalEntry


class EntriesAdapterError(RuntimeError):
    """Raised when journal entries cannot be loaded from a source."""


class EntriesAdapter(Protocol):
    @property
    def source_name(self) -> str:
        """Stable name used to key the stored snapshot of this source."""

    def get_entries(self) -> list[JournalEntry]:
        """Return every entry the source currently exposes, normalized."""
