"""Display formatting for amounts, dates and month keys.

``format_currency`` uses Babel's CLDR data for locale-aware output and falls
back to a small symbol table when the code or locale is not usable. None of
the helpers raise on bad input.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime

from babel.numbers import format_currency as babel_format_currency

logger = logging.getLogger(__name__)

_CURRENCY_CODE_RE = re.compile(r"^[A-Z]{3}$")

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "PLN": "zł",
    "JPY": "¥",
    "CHF": "CHF",
    "CAD": "CA$",
    "AUD": "A$",
    "NZD": "NZ$",
    "SEK": "kr",
    "NOK": "kr",
    "DKK": "kr",
}

NOT_AVAILABLE = "N/A"


def _coerce_amount(amount: object) -> float:
    """Return ``amount`` as a finite float, or 0.0."""
    if isinstance(amount, bool):
        return float(amount)
    try:
        value = float(amount)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def _fallback_currency(value: float, currency: str) -> str:
    symbol = CURRENCY_SYMBOLS.get(currency, "$")
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_currency(amount: object, currency: str = "USD", locale: str = "en_US") -> str:
    """Format ``amount`` as money in ``currency`` for ``locale``.

    Non-numeric and non-finite amounts are shown as 0. Locale-aware formatting
    is attempted only for well-formed ISO 4217 codes; anything else, or any
    formatting failure, uses the symbol table with two decimals.

    Example:
        >>> format_currency(1234.5, "USD")
        '$1,234.50'
        >>> format_currency(float("nan"), "EUR")
        '€0.00'
    """
    value = _coerce_amount(amount)
    code = currency if isinstance(currency, str) else ""

    if _CURRENCY_CODE_RE.match(code):
        try:
            return babel_format_currency(
                value, code, locale=str(locale).replace("-", "_")
            )
        except Exception as e:
            logger.debug("Locale formatting failed for %s/%s: %s", code, locale, e)

    return _fallback_currency(value, code)


def format_compact(value: float, signed: bool = False) -> str:
    """Format large values into b/m/k strings without scientific notation."""
    magnitude = abs(value)
    if magnitude >= 1_000_000_000:
        body = f"{magnitude / 1_000_000_000:.2f}b"
    elif magnitude >= 1_000_000:
        body = f"{magnitude / 1_000_000:.2f}m"
    elif magnitude >= 1_000:
        body = f"{magnitude / 1_000:.2f}k"
    else:
        body = f"{magnitude:.0f}"

    if signed:
        prefix = "+" if value >= 0 else "-"
    else:
        prefix = "-" if value < 0 else ""
    return f"{prefix}{body}"


def format_number(value: float | None, decimals: int = 2) -> str:
    """Format a plain number with thousands separators ('-' for None)."""
    if value is None:
        return "-"
    return f"{_coerce_amount(value):,.{decimals}f}"


def format_date(value: str | date | None) -> str:
    """Format an ISO date as ``'Jan 15, 2024'``.

    Unparsable strings are returned unchanged; empty values become ``'N/A'``.
    """
    if value is None or value == "":
        return NOT_AVAILABLE
    if isinstance(value, date):
        parsed = value
    else:
        text = str(value).strip()
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            try:
                parsed = date.fromisoformat(text[:10])
            except ValueError:
                return str(value)
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def format_month(month_key: str) -> str:
    """Format a ``YYYY-MM`` key as ``'Jan 2024'`` (unchanged when malformed)."""
    try:
        year, month = month_key.split("-", 1)
        return f"{date(int(year), int(month), 1):%b %Y}"
    except (AttributeError, ValueError):
        return month_key
