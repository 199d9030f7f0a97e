"""Catalog of supported display currencies and locale detection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SymbolPosition(str, Enum):
    """Where the manual formatter places the currency symbol."""

    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True, slots=True)
class CurrencyDescriptor:
    """Immutable catalog entry for one display currency."""

    code: str
    symbol: str
    display_name: str
    locale_tag: str
    symbol_position: SymbolPosition = SymbolPosition.BEFORE
    fraction_digits: int = 2


SUPPORTED_CURRENCIES: tuple[CurrencyDescriptor, ...] = (
    CurrencyDescriptor("USD", "$", "US Dollar", "en-US"),
    CurrencyDescriptor("EUR", "€", "Euro", "de-DE", SymbolPosition.AFTER),
    CurrencyDescriptor("GBP", "£", "British Pound", "en-GB"),
    CurrencyDescriptor("JPY", "¥", "Japanese Yen", "ja-JP", fraction_digits=0),
    CurrencyDescriptor("CAD", "CA$", "Canadian Dollar", "en-CA"),
    CurrencyDescriptor("AUD", "A$", "Australian Dollar", "en-AU"),
    CurrencyDescriptor("CHF", "CHF", "Swiss Franc", "de-CH", SymbolPosition.AFTER),
    CurrencyDescriptor("CNY", "¥", "Chinese Yuan", "zh-CN"),
    CurrencyDescriptor("INR", "₹", "Indian Rupee", "en-IN"),
    CurrencyDescriptor("MXN", "MX$", "Mexican Peso", "es-MX"),
    CurrencyDescriptor("BRL", "R$", "Brazilian Real", "pt-BR"),
    CurrencyDescriptor("KRW", "₩", "South Korean Won", "ko-KR", fraction_digits=0),
    CurrencyDescriptor("MYR", "RM", "Malaysian Ringgit", "ms-MY"),
    CurrencyDescriptor("EGP", "EGP", "Egyptian Pound", "en-EG"),
    CurrencyDescriptor("SAR", "SAR", "Saudi Riyal", "en-SA"),
)

DEFAULT_CURRENCY_CODE = SUPPORTED_CURRENCIES[0].code

LOCALE_CURRENCY_MAP: dict[str, str] = {
    "en-US": "USD",
    "en-GB": "GBP",
    "de-DE": "EUR",
    "fr-FR": "EUR",
    "es-ES": "EUR",
    "it-IT": "EUR",
    "ja-JP": "JPY",
    "en-CA": "CAD",
    "en-AU": "AUD",
    "de-CH": "CHF",
    "zh-CN": "CNY",
    "en-IN": "INR",
    "es-MX": "MXN",
    "pt-BR": "BRL",
    "ko-KR": "KRW",
    "ms-MY": "MYR",
    "en-MY": "MYR",
    "en-EG": "EGP",
    "en-SA": "SAR",
}

_BY_CODE: dict[str, CurrencyDescriptor] = {c.code: c for c in SUPPORTED_CURRENCIES}


def list_supported() -> tuple[CurrencyDescriptor, ...]:
    """Return the catalog in declaration order."""

    return SUPPORTED_CURRENCIES


def lookup_by_code(code: str | None) -> CurrencyDescriptor:
    """Exact, case-sensitive lookup; unknown codes resolve to the first catalog entry."""

    return _BY_CODE.get(code, SUPPORTED_CURRENCIES[0]) if isinstance(code, str) else SUPPORTED_CURRENCIES[0]


def detect_from_locale(locale_tag: str | None) -> str:
    """Map a BCP 47 locale tag (``en-GB``) to a currency code, defaulting to USD."""

    if not isinstance(locale_tag, str):
        return DEFAULT_CURRENCY_CODE
    return LOCALE_CURRENCY_MAP.get(locale_tag, DEFAULT_CURRENCY_CODE)


__all__ = [
    "CurrencyDescriptor",
    "DEFAULT_CURRENCY_CODE",
    "LOCALE_CURRENCY_MAP",
    "SUPPORTED_CURRENCIES",
    "SymbolPosition",
    "detect_from_locale",
    "list_supported",
    "lookup_by_code",
]
