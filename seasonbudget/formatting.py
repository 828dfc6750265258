# seasonbudget/formatting.py
"""
Display formatting for money amounts.

Amounts are shown in whole units (half-up rounding) with one fixed locale,
so the same input always renders the same string. Only the displayed value
is rounded; callers keep full precision for further math.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from babel.numbers import format_currency as _babel_format_currency
from babel.numbers import validate_currency

from seasonbudget.config import get_settings

__all__ = ["format_currency", "format_signed_currency"]

Number = Union[int, float, Decimal]

# currency sign + grouped integer part, no fraction digits
WHOLE_UNITS_PATTERN = "\xa4#,##0"


def _whole_units(amount: Number) -> Decimal:
    whole = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return whole + 0  # -0 -> 0


def _render(whole: Decimal, currency_code: str, locale: Optional[str]) -> str:
    validate_currency(currency_code)
    return _babel_format_currency(
        whole,
        currency_code,
        format=WHOLE_UNITS_PATTERN,
        locale=locale or get_settings().display_locale,
        currency_digits=False,
    )


def format_currency(
    amount: Number, currency_code: str, locale: Optional[str] = None
) -> str:
    """
    Render `amount` in `currency_code`, e.g. 1234.56 USD -> '$1,235'.

    Raises babel.numbers.UnknownCurrencyError for codes outside ISO 4217.
    No other currency is substituted.
    """
    return _render(_whole_units(amount), currency_code, locale)


def format_signed_currency(
    delta: Number, currency_code: str, locale: Optional[str] = None
) -> str:
    """Like format_currency, with an explicit '+' when the shown amount is above zero."""
    whole = _whole_units(delta)
    text = _render(whole, currency_code, locale)
    return f"+{text}" if whole > 0 else text
