"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlmodel import Session

from .config import BaseConfig
from .infra.database import bootstrap_database
from .infra.repositories import SQLModelSettingsRepository
from .services.currency_format import (
    CurrencyFormatter,
    ManualFormattingStrategy,
    SettingsCurrencyStore,
    runtime_locale_tag,
)


@dataclass
class AppContext:
    """Centralized application context with services and state."""

    config: BaseConfig
    session_factory: Callable[[], Session]
    settings_repo: SQLModelSettingsRepository
    formatter: CurrencyFormatter
    locale_tag: Optional[str] = None


def create_app_context(config: Optional[BaseConfig] = None) -> AppContext:
    """Create and initialize the application context.

    The formatter is built here, once, and seeded from the persisted currency
    slot before anything can render an amount.
    """

    if config is None:
        config = BaseConfig()

    _engine, session_factory = bootstrap_database(config)
    settings_repo = SQLModelSettingsRepository(session_factory)

    locale_tag = runtime_locale_tag(config.LOCALE)
    store = SettingsCurrencyStore(settings_repo, key=config.CURRENCY_SETTING_KEY)
    strategy = None if config.USE_HOST_LOCALE else ManualFormattingStrategy()
    formatter = CurrencyFormatter(store, locale_tag=locale_tag, strategy=strategy)

    return AppContext(
        config=config,
        session_factory=session_factory,
        settings_repo=settings_repo,
        formatter=formatter,
        locale_tag=locale_tag,
    )
