from __future__ import annotations

import threading

import pytest

from budgetlens.services.currency_format import (
    BabelFormattingStrategy,
    CurrencyFormatter,
    ManualFormattingStrategy,
    SettingsCurrencyStore,
    resolve_initial_currency,
    runtime_locale_tag,
)
from budgetlens.services.currency_registry import SUPPORTED_CURRENCIES, lookup_by_code

from tests.conftest import MemoryCurrencyStore


class _BrokenStrategy:
    name = "broken"

    def format(self, value, currency, *, show_symbol):
        raise RuntimeError("no locale data")

    def format_compact(self, value, currency):
        raise RuntimeError("no locale data")


class _FailingStore(MemoryCurrencyStore):
    def __init__(self, code=None):
        super().__init__(code)
        self.fail = False

    def save(self, code):
        if self.fail:
            raise OSError("disk full")
        super().save(code)


# ---------------------------------------------------------------------------
# Manual strategy
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "code,value,expected",
    [
        ("USD", 1234.5, "$1234.50"),
        ("EUR", 1234.5, "1234.50 €"),
        ("CHF", 99, "99.00 CHF"),
        ("JPY", 1000, "¥1000"),
        ("JPY", 1234.5, "¥1235"),
        ("KRW", 15000.4, "₩15000"),
        ("GBP", 0, "£0.00"),
        ("USD", -12.3, "$-12.30"),
    ],
)
def test_manual_format(code, value, expected):
    strategy = ManualFormattingStrategy()
    assert strategy.format(value, lookup_by_code(code), show_symbol=True) == expected


def test_manual_format_rounds_half_up():
    strategy = ManualFormattingStrategy()
    usd = lookup_by_code("USD")

    assert strategy.format(2.675, usd, show_symbol=True) == "$2.68"
    assert strategy.format(0.125, usd, show_symbol=True) == "$0.13"
    assert strategy.format(-0.001, usd, show_symbol=True) == "$0.00"


def test_manual_format_without_symbol():
    strategy = ManualFormattingStrategy()
    assert strategy.format(1234.5, lookup_by_code("EUR"), show_symbol=False) == "1234.50"
    assert strategy.format(1234.5, lookup_by_code("JPY"), show_symbol=False) == "1235"


@pytest.mark.parametrize(
    "value,expected",
    [
        (1_000_000, "$1.0M"),
        (2_450_000, "$2.5M"),
        (-2_500_000, "$-2.5M"),
        (1500, "$1.5K"),
        (1000, "$1.0K"),
        (999, "$999.00"),
        (0, "$0.00"),
    ],
)
def test_manual_format_compact(value, expected):
    strategy = ManualFormattingStrategy()
    assert strategy.format_compact(value, lookup_by_code("USD")) == expected


def test_manual_compact_keeps_symbol_before_for_after_currencies():
    strategy = ManualFormattingStrategy()
    assert strategy.format_compact(3_000_000, lookup_by_code("EUR")) == "€3.0M"


# ---------------------------------------------------------------------------
# Babel strategy
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("code", ["USD", "GBP", "INR"])
@pytest.mark.parametrize("value", [0, 12.5, 1234.5, 1234567.891])
def test_babel_matches_manual_apart_from_grouping(code, value):
    currency = lookup_by_code(code)

    primary = BabelFormattingStrategy().format(value, currency, show_symbol=True)
    fallback = ManualFormattingStrategy().format(value, currency, show_symbol=True)

    assert primary.count(currency.symbol) == 1
    assert primary.replace(",", "") == fallback


def _numeric_part(text):
    return "".join(ch for ch in text if ch.isdigit() or ch in "-.")


@pytest.mark.parametrize(
    "code,value,expected",
    [
        ("JPY", 1234.5, "1235"),
        ("KRW", 2.5, "3"),
        ("USD", 0.125, "0.13"),
        ("USD", 2.675, "2.68"),
        ("USD", -2.675, "-2.68"),
        ("USD", -0.001, "0.00"),
        ("GBP", -0.004, "0.00"),
    ],
)
def test_babel_and_manual_round_ties_the_same(code, value, expected):
    currency = lookup_by_code(code)

    for show_symbol in (True, False):
        primary = BabelFormattingStrategy().format(value, currency, show_symbol=show_symbol)
        fallback = ManualFormattingStrategy().format(value, currency, show_symbol=show_symbol)

        assert _numeric_part(primary) == expected
        assert _numeric_part(fallback) == expected


def test_babel_compact_rounds_ties_half_up():
    result = BabelFormattingStrategy().format_compact(1_250_000, lookup_by_code("USD"))

    assert "1.3" in result
    assert ManualFormattingStrategy().format_compact(1_250_000, lookup_by_code("USD")) == "$1.3M"


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_values_use_textual_form(value):
    formatter = CurrencyFormatter(MemoryCurrencyStore("USD"), locale_tag="en-US")

    assert formatter.strategy_name == "babel"
    assert formatter.format(value) == f"${value}"
    assert formatter.format_compact(value) == f"${value}"


def test_babel_uses_locale_conventions():
    strategy = BabelFormattingStrategy()

    assert strategy.format(1234.5, lookup_by_code("USD"), show_symbol=True) == "$1,234.50"
    euro = strategy.format(1234.5, lookup_by_code("EUR"), show_symbol=True)
    assert "1.234,50" in euro
    assert euro.endswith("€")


def test_babel_zero_fraction_currencies_have_no_decimals():
    strategy = BabelFormattingStrategy()

    yen = strategy.format(1000, lookup_by_code("JPY"), show_symbol=True)
    won = strategy.format(1000, lookup_by_code("KRW"), show_symbol=True)

    assert "1,000" in yen and "." not in yen
    assert "1,000" in won and "." not in won


def test_babel_without_symbol_is_number_only():
    result = BabelFormattingStrategy().format(1234.5, lookup_by_code("USD"), show_symbol=False)
    assert result == "1,234.50"


def test_babel_compact_abbreviates_millions():
    result = BabelFormattingStrategy().format_compact(1_000_000, lookup_by_code("USD"))
    assert "$" in result
    assert "M" in result


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------


def test_formatter_never_raises_for_any_catalog_currency():
    for currency in SUPPORTED_CURRENCIES:
        formatter = CurrencyFormatter(MemoryCurrencyStore(currency.code), locale_tag="en-US")
        for value in (0, -1.5, 999.999, 1234.5, 2_500_000, float("inf")):
            assert isinstance(formatter.format(value), str)
            assert isinstance(formatter.format_compact(value), str)
            assert isinstance(formatter.format(value, show_symbol=False, absolute=True), str)


def test_formatter_falls_back_to_manual_when_strategy_raises(formatter_factory):
    formatter = formatter_factory("EUR", strategy=_BrokenStrategy())

    assert formatter.format(1234.5) == "1234.50 €"
    assert formatter.format(-5, absolute=True) == "5.00 €"
    assert formatter.format_compact(2_000_000) == "€2.0M"


def test_formatter_absolute_and_symbol_flags(usd_formatter):
    assert usd_formatter.format(-42.1) == "$-42.10"
    assert usd_formatter.format(-42.1, absolute=True) == "$42.10"
    assert usd_formatter.format(-42.1, show_symbol=False, absolute=True) == "42.10"


@pytest.mark.parametrize("value", [0, 1, 999, -999, 999.99])
def test_compact_below_threshold_matches_standard(value):
    for strategy in (ManualFormattingStrategy(), BabelFormattingStrategy()):
        formatter = CurrencyFormatter(MemoryCurrencyStore("USD"), strategy=strategy)
        assert formatter.format_compact(value) == formatter.format(value)


def test_get_symbol_tracks_selection(usd_formatter):
    assert usd_formatter.get_symbol() == "$"
    usd_formatter.select("GBP")
    assert usd_formatter.get_symbol() == "£"


def test_select_is_idempotent_and_persists(formatter_factory, memory_store):
    formatter = formatter_factory("USD")

    first = formatter.select("JPY")
    second = formatter.select("JPY")

    assert first == second == formatter.get_active()
    assert memory_store.code == "JPY"
    assert memory_store.writes[-2:] == ["JPY", "JPY"]


def test_select_unknown_code_resolves_to_default(formatter_factory, memory_store):
    formatter = formatter_factory("EUR")

    selected = formatter.select("XYZ")

    assert selected.code == "USD"
    assert formatter.get_active().code == "USD"
    assert memory_store.code == "USD"


def test_select_keeps_previous_currency_when_store_fails():
    store = _FailingStore("GBP")
    formatter = CurrencyFormatter(store, strategy=ManualFormattingStrategy())
    store.fail = True

    with pytest.raises(OSError):
        formatter.select("JPY")

    assert formatter.get_active().code == "GBP"


def test_concurrent_reads_always_see_a_catalog_entry(usd_formatter):
    catalog = set(SUPPORTED_CURRENCIES)
    seen = []

    def writer():
        for currency in SUPPORTED_CURRENCIES * 5:
            usd_formatter.select(currency.code)

    def reader():
        for _ in range(200):
            seen.append(usd_formatter.get_active())
            usd_formatter.format(12.5)

    threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert all(descriptor in catalog for descriptor in seen)


# ---------------------------------------------------------------------------
# Initial resolution and persistence
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "stored,locale_tag,expected,source",
    [
        ("JPY", "en-GB", "JPY", "stored"),
        (None, "en-GB", "GBP", "locale"),
        ("XYZ", "fr-FR", "EUR", "locale"),
        (None, "xx-YY", "USD", "default"),
        (None, None, "USD", "default"),
        ("", "de-CH", "CHF", "locale"),
    ],
)
def test_resolve_initial_currency(stored, locale_tag, expected, source):
    descriptor, origin = resolve_initial_currency(stored, locale_tag)
    assert descriptor.code == expected
    assert origin == source


def test_initialisation_writes_resolved_code_back():
    store = MemoryCurrencyStore("XYZ")

    formatter = CurrencyFormatter(store, locale_tag="en-IN", strategy=ManualFormattingStrategy())

    assert formatter.get_active().code == "INR"
    assert formatter.initial_source == "locale"
    assert store.writes == ["INR"]


def test_initialisation_does_not_rewrite_valid_stored_code():
    store = MemoryCurrencyStore("BRL")

    CurrencyFormatter(store, locale_tag="en-US", strategy=ManualFormattingStrategy())

    assert store.writes == []


def test_selection_survives_restart(currency_store):
    first = CurrencyFormatter(currency_store, locale_tag="en-US", strategy=ManualFormattingStrategy())
    first.select("EUR")

    restarted = CurrencyFormatter(currency_store, locale_tag="en-US", strategy=ManualFormattingStrategy())

    assert restarted.get_active().code == "EUR"
    assert restarted.initial_source == "stored"


def test_settings_store_uses_configured_key(settings_repo):
    store = SettingsCurrencyStore(settings_repo, key="display_currency")

    assert store.load() is None
    store.save("MXN")

    assert store.load() == "MXN"
    assert settings_repo.get("display_currency").value == "MXN"
    assert settings_repo.get("currency") is None


def test_strategy_name_reports_active_strategy(formatter_factory):
    assert formatter_factory("USD").strategy_name == "manual"
    assert CurrencyFormatter(MemoryCurrencyStore("USD")).strategy_name == "babel"


# ---------------------------------------------------------------------------
# Runtime locale
# ---------------------------------------------------------------------------


def test_runtime_locale_tag_normalises_override():
    assert runtime_locale_tag("en_US.UTF-8") == "en-US"
    assert runtime_locale_tag("de-DE") == "de-DE"


def test_runtime_locale_tag_reads_environment(monkeypatch):
    for name in ("LANGUAGE", "LC_ALL", "LC_CTYPE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LANG", "de_DE.UTF-8")

    assert runtime_locale_tag() == "de-DE"
