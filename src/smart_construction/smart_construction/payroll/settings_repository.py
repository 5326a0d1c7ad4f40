from __future__ import annotations

from typing import Optional, Protocol


class SettingsRepository(Protocol):
    """Key/document store for app-wide settings (settings table)."""

    def get(self, doc_id: str) -> Optional[dict]:
        raise NotImplementedError

    def merge(self, doc_id: str, patch: dict) -> None:
        """Shallow merge `patch` into the stored document, creating it if missing."""
        raise NotImplementedError
