"""Money rendering under the user's selected display currency.

The ``CurrencyFormatter`` is the context object handed to every rendering call
site. It owns the active ``CurrencyDescriptor`` (seeded from the persisted
slot, the runtime locale, or the catalog default) and renders values through a
pluggable strategy:

* ``BabelFormattingStrategy`` renders with CLDR locale data (best effort).
* ``ManualFormattingStrategy`` assembles strings by hand and never fails.

Whenever the primary strategy raises, the formatter quietly retries with the
manual strategy, so callers always get a string back.
"""

from __future__ import annotations

import math
import re
import threading
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Protocol

from babel import Locale, default_locale
from babel.numbers import format_compact_currency, format_currency, format_decimal

from ..domain.repositories.settings import SettingsRepository
from ..logging_config import get_logger
from .currency_registry import (
    LOCALE_CURRENCY_MAP,
    CurrencyDescriptor,
    SymbolPosition,
    detect_from_locale,
    lookup_by_code,
)

logger = get_logger(__name__)

COMPACT_THRESHOLD = 1_000
_MILLION = 1_000_000
_FRACTION_RE = re.compile(r"\.[0#]+")


class CurrencyStore(Protocol):
    """Persistence slot holding the selected currency code."""

    def load(self) -> str | None:  # pragma: no cover - interface
        ...

    def save(self, code: str) -> None:  # pragma: no cover - interface
        ...


class SettingsCurrencyStore:
    """Currency slot backed by the key/value settings repository."""

    def __init__(self, repository: SettingsRepository, key: str = "currency"):
        self.repository = repository
        self.key = key

    def load(self) -> str | None:
        setting = self.repository.get(self.key)
        return setting.value if setting is not None else None

    def save(self, code: str) -> None:
        self.repository.set(self.key, code, description="Selected display currency")


class FormattingStrategy(Protocol):
    """Renders numbers for a given currency descriptor."""

    name: str

    def format(
        self, value: float, currency: CurrencyDescriptor, *, show_symbol: bool
    ) -> str:  # pragma: no cover - interface
        ...

    def format_compact(
        self, value: float, currency: CurrencyDescriptor
    ) -> str:  # pragma: no cover - interface
        ...


def _quantize_half_up(value: float, digits: int) -> Decimal:
    """Round half away from zero to ``digits`` places; a zero result carries no sign."""

    rounded = Decimal(repr(value)).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)  # no "-0.00"
    return rounded


def _round_fixed(value: float, digits: int) -> str:
    """Round half away from zero to ``digits`` places and render without grouping."""

    if not math.isfinite(value):
        return str(value)
    try:
        rounded = _quantize_half_up(value, digits)
    except InvalidOperation:
        return f"{value:.{digits}f}"
    return f"{rounded:f}"


class ManualFormattingStrategy:
    """Hand-assembled rendering: fixed fraction digits plus the catalog symbol."""

    name = "manual"

    def format(self, value: float, currency: CurrencyDescriptor, *, show_symbol: bool) -> str:
        number = _round_fixed(value, currency.fraction_digits)
        if not show_symbol:
            return number
        if currency.symbol_position is SymbolPosition.BEFORE:
            return f"{currency.symbol}{number}"
        return f"{number} {currency.symbol}"

    def format_compact(self, value: float, currency: CurrencyDescriptor) -> str:
        magnitude = abs(value)
        if magnitude >= _MILLION:
            return f"{currency.symbol}{_round_fixed(value / _MILLION, 1)}M"
        if magnitude >= COMPACT_THRESHOLD:
            return f"{currency.symbol}{_round_fixed(value / COMPACT_THRESHOLD, 1)}K"
        return self.format(value, currency, show_symbol=True)


def _fixed_fraction_pattern(pattern: str, digits: int) -> str:
    """Force a CLDR number pattern to exactly ``digits`` fraction digits."""

    replacement = "." + "0" * digits if digits else ""
    if _FRACTION_RE.search(pattern):
        return _FRACTION_RE.sub(replacement, pattern)
    # Patterns without a fraction part: append one after the last digit placeholder.
    return re.sub(r"([0#])(?!.*[0#])", r"\1" + replacement, pattern, count=1)


class BabelFormattingStrategy:
    """Locale-aware rendering backed by Babel's CLDR data."""

    name = "babel"

    def _locale(self, currency: CurrencyDescriptor) -> Locale:
        return Locale.parse(currency.locale_tag, sep="-")

    def format(self, value: float, currency: CurrencyDescriptor, *, show_symbol: bool) -> str:
        locale = self._locale(currency)
        digits = currency.fraction_digits
        # Pre-rounded so ties and signed zeros come out as in the manual strategy.
        number = _quantize_half_up(value, digits)
        with localcontext() as ctx:
            ctx.rounding = ROUND_HALF_UP
            if show_symbol:
                pattern = _fixed_fraction_pattern(locale.currency_formats["standard"].pattern, digits)
                return format_currency(
                    number, currency.code, format=pattern, locale=locale, currency_digits=False
                )
            pattern = _fixed_fraction_pattern(locale.decimal_formats[None].pattern, digits)
            return format_decimal(number, format=pattern, locale=locale)

    def format_compact(self, value: float, currency: CurrencyDescriptor) -> str:
        magnitude = abs(value)
        number: float | Decimal = value
        if magnitude >= COMPACT_THRESHOLD:
            unit = _MILLION if magnitude >= _MILLION else COMPACT_THRESHOLD
            number = _quantize_half_up(value / unit, 1) * unit
        with localcontext() as ctx:
            ctx.rounding = ROUND_HALF_UP
            return format_compact_currency(
                number,
                currency.code,
                format_type="short",
                fraction_digits=1,
                locale=self._locale(currency),
            )


def runtime_locale_tag(override: str | None = None) -> str | None:
    """Return the runtime locale as a BCP 47 tag (``en_US`` becomes ``en-US``)."""

    raw = override or default_locale()
    if not raw:
        return None
    return raw.split(".", 1)[0].replace("_", "-")


def resolve_initial_currency(
    stored_code: str | None, locale_tag: str | None
) -> tuple[CurrencyDescriptor, str]:
    """Pick the starting currency and report where it came from.

    Order: a recognised persisted code, then the locale table, then the default.
    """

    if stored_code:
        stored = lookup_by_code(stored_code)
        if stored.code == stored_code:
            return stored, "stored"
    source = "locale" if locale_tag in LOCALE_CURRENCY_MAP else "default"
    return lookup_by_code(detect_from_locale(locale_tag)), source


class CurrencyFormatter:
    """Holds the active display currency and renders amounts with it."""

    def __init__(
        self,
        store: CurrencyStore,
        *,
        locale_tag: str | None = None,
        strategy: FormattingStrategy | None = None,
    ) -> None:
        self._store = store
        self._strategy: FormattingStrategy = strategy or BabelFormattingStrategy()
        self._fallback = ManualFormattingStrategy()
        self._lock = threading.Lock()
        self._fallback_logged: set[tuple[str, str]] = set()

        stored_code = store.load()
        active, source = resolve_initial_currency(stored_code, locale_tag)
        if stored_code != active.code:
            store.save(active.code)
        self._active = active
        self.initial_source = source
        logger.info(
            "Active currency initialised",
            extra={"currency": active.code, "source": source, "locale_tag": locale_tag},
        )

    @property
    def strategy_name(self) -> str:
        return self._strategy.name

    def get_active(self) -> CurrencyDescriptor:
        return self._active

    def get_symbol(self) -> str:
        return self._active.symbol

    def select(self, code: str) -> CurrencyDescriptor:
        """Switch the active currency; unknown codes resolve to the default.

        The code is written to the store before the swap so that a store failure
        leaves the previous selection in place.
        """

        currency = lookup_by_code(code)
        with self._lock:
            self._store.save(currency.code)
            self._active = currency
        logger.info("Currency selected", extra={"requested": code, "currency": currency.code})
        return currency

    def format(self, value: float, *, show_symbol: bool = True, absolute: bool = False) -> str:
        currency = self._active
        display_value = abs(value) if absolute else value
        if not math.isfinite(display_value):
            return self._fallback.format(display_value, currency, show_symbol=show_symbol)
        try:
            return self._strategy.format(display_value, currency, show_symbol=show_symbol)
        except Exception as exc:  # host formatting is best effort
            self._note_fallback("format", currency, exc)
            return self._fallback.format(display_value, currency, show_symbol=show_symbol)

    def format_compact(self, value: float) -> str:
        if not math.isfinite(value) or abs(value) < COMPACT_THRESHOLD:
            return self.format(value)
        currency = self._active
        try:
            return self._strategy.format_compact(value, currency)
        except Exception as exc:  # host formatting is best effort
            self._note_fallback("format_compact", currency, exc)
            return self._fallback.format_compact(value, currency)

    def _note_fallback(self, operation: str, currency: CurrencyDescriptor, exc: Exception) -> None:
        key = (operation, currency.code)
        if key in self._fallback_logged:
            return
        self._fallback_logged.add(key)
        logger.debug(
            "Locale formatting unavailable; using manual fallback",
            extra={"operation": operation, "currency": currency.code, "error": repr(exc)},
        )


__all__ = [
    "BabelFormattingStrategy",
    "COMPACT_THRESHOLD",
    "CurrencyFormatter",
    "CurrencyStore",
    "FormattingStrategy",
    "ManualFormattingStrategy",
    "SettingsCurrencyStore",
    "resolve_initial_currency",
    "runtime_locale_tag",
]
