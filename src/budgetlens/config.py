"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "BudgetLens"
    DB_FILENAME = "budgetlens.db"
    CURRENCY_SETTING_KEY = "currency"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("BUDGETLENS_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("BUDGETLENS_DATABASE_URL", self._build_sqlite_url())
        # Explicit locale tag (e.g. "de-DE"); unset means read it from the process environment.
        self.LOCALE = os.getenv("BUDGETLENS_LOCALE") or None
        self.USE_HOST_LOCALE = _env_bool("BUDGETLENS_USE_HOST_LOCALE", default=True)

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the settings database and logs live."""

        data_root = os.getenv("BUDGETLENS_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected install locations fall back to user-local storage.
            fallback_path = Path.home() / ".local" / "share" / self.APP_NAME.lower()
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside DATA_DIR."""

        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
