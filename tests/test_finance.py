# tests/test_finance.py
"""Tax resolution, burn rate, runway and tournament math (pure, no DB)."""

from __future__ import annotations

from datetime import date
from types import SimpleNamespace as NS

import pytest

from seasonbudget.finance import (
    DEFAULT_TAX_PCT,
    break_even_round,
    cash_runway_weeks,
    country_tax_pct,
    effective_tax_pct,
    monthly_burn_rate,
    tournament_roi,
)


def test_country_tax_pct():
    assert country_tax_pct("us") == 37
    assert country_tax_pct(" CH ") == 11.5
    assert country_tax_pct("MC") == 0
    assert country_tax_pct("ZZ") == DEFAULT_TAX_PCT
    assert country_tax_pct(None) == DEFAULT_TAX_PCT


@pytest.mark.parametrize(
    "tax_pct,tax_country,expected",
    [
        (25, "US", 25),
        (0, "GB", 0),
        (None, "GB", 45),
        (None, "XX", DEFAULT_TAX_PCT),
        (None, None, 0),
        (None, "", 0),
    ],
)
def test_effective_tax_pct(tax_pct, tax_country, expected):
    budget = NS(tax_pct=tax_pct, tax_country=tax_country)
    assert effective_tax_pct(budget) == expected


def test_monthly_burn_rate_uses_last_three_months():
    today = date(2025, 6, 15)
    expenses = [
        NS(amount=100, spent_on=date(2025, 3, 15)),
        NS(amount=200, spent_on=date(2025, 5, 1)),
        NS(amount=999, spent_on=date(2025, 1, 1)),
    ]
    # 2025-03-15 .. 2025-06-15 is 92 days
    assert monthly_burn_rate(expenses, today) == pytest.approx(300 / (92 / 30))


def test_monthly_burn_rate_without_recent_spend():
    assert monthly_burn_rate([], date(2025, 6, 15)) == 0
    old = [NS(amount=50, spent_on=date(2024, 1, 1))]
    assert monthly_burn_rate(old, date(2025, 6, 15)) == 0


def test_cash_runway_weeks():
    assert cash_runway_weeks(1400, 20) == pytest.approx(10)
    assert cash_runway_weeks(1400, 0) == 0


def test_tournament_roi():
    result = tournament_roi(1000, 500, tax_pct=25)
    assert result.net_profit == 250
    assert result.roi == pytest.approx(0.5)
    assert result.roi_pct == pytest.approx(50)
    assert tournament_roi(100, 0).roi == 0


def test_break_even_round():
    assert break_even_round("ATP 250", 0, 10000) == "R16"
    assert break_even_round("ATP 250", 50, 10000) == "QF"
    assert break_even_round("ITF", 0, 100) == "R32"
    assert break_even_round("ITF", 0, 1_000_000) is None
    with pytest.raises(ValueError, match="unknown tournament category"):
        break_even_round("Exhibition", 0, 100)
