"""Settings repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.settings import AppSetting


class SettingsRepository(Protocol):
    """Repository for named key/value preference slots."""

    def get(self, key: str) -> Optional[AppSetting]:
        """Return the stored setting, or None when the slot is empty."""
        ...

    def set(self, key: str, value: str, description: str | None = None) -> AppSetting:
        """Create or overwrite the slot and return the stored row."""
        ...

    def delete(self, key: str) -> None:
        """Clear the slot if present."""
        ...
