"""Pytest configuration and shared fixtures for BudgetLens tests.

Provides an isolated SQLite settings store, formatter factories and helper
utilities so tests never touch the real application data directory.
"""

from __future__ import annotations

import logging

import pytest
from sqlmodel import SQLModel, create_engine

from budgetlens.infra.database import create_session_factory
from budgetlens.infra.repositories import SQLModelSettingsRepository
from budgetlens.logging_config import ROOT_LOGGER_NAME
from budgetlens.models import AppSetting  # noqa: F401  # registers the table
from budgetlens.services.budgeting import BudgetRecord
from budgetlens.services.currency_format import (
    CurrencyFormatter,
    ManualFormattingStrategy,
    SettingsCurrencyStore,
)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point configuration at a temporary data dir and a fixed locale."""

    monkeypatch.setenv("BUDGETLENS_DATA_DIR", str(tmp_path / "instance"))
    monkeypatch.setenv("BUDGETLENS_LOCALE", "en-US")
    monkeypatch.delenv("BUDGETLENS_DATABASE_URL", raising=False)
    monkeypatch.delenv("BUDGETLENS_USE_HOST_LOCALE", raising=False)
    yield
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create an isolated SQLite database file for each test."""

    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", echo=False)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching what repositories expect."""

    return create_session_factory(db_engine)


@pytest.fixture
def settings_repo(session_factory) -> SQLModelSettingsRepository:
    return SQLModelSettingsRepository(session_factory)


@pytest.fixture
def currency_store(settings_repo) -> SettingsCurrencyStore:
    return SettingsCurrencyStore(settings_repo)


# =============================================================================
# Formatter Fixtures
# =============================================================================


class MemoryCurrencyStore:
    """In-memory currency slot recording every write."""

    def __init__(self, code: str | None = None):
        self.code = code
        self.writes: list[str] = []

    def load(self) -> str | None:
        return self.code

    def save(self, code: str) -> None:
        self.writes.append(code)
        self.code = code


@pytest.fixture
def memory_store() -> MemoryCurrencyStore:
    return MemoryCurrencyStore()


@pytest.fixture
def formatter_factory(memory_store):
    """Build a fresh formatter using the manual strategy by default."""

    def _create(
        currency: str | None = None,
        *,
        locale_tag: str | None = "en-US",
        strategy=None,
        store=None,
    ) -> CurrencyFormatter:
        target_store = store or memory_store
        if currency is not None:
            target_store.code = currency
        return CurrencyFormatter(
            target_store,
            locale_tag=locale_tag,
            strategy=strategy or ManualFormattingStrategy(),
        )

    return _create


@pytest.fixture
def usd_formatter(formatter_factory) -> CurrencyFormatter:
    return formatter_factory("USD")


# =============================================================================
# Data helpers
# =============================================================================


def records(*rows: tuple[str, float, float]) -> list[BudgetRecord]:
    """Build BudgetRecords from (label, allocated, spent) tuples."""

    return [BudgetRecord(label, allocated, spent) for label, allocated, spent in rows]


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two floats are equal within a tolerance.

    Args:
        actual: Actual value
        expected: Expected value
        tolerance: Maximum allowed difference (default 0.01 = 1 cent)

    Raises:
        AssertionError: If values differ by more than tolerance
    """
    assert abs(actual - expected) <= tolerance, (
        f"Expected {expected}, got {actual} (diff: {abs(actual - expected)}, tolerance: {tolerance})"
    )
