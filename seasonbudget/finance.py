# seasonbudget/finance.py
"""
Athlete-specific money questions on top of the plan: which tax rate applies,
how fast actual spending burns cash, and what a tournament result is worth.

Country rates and prize tables are rough placeholders (top marginal rates,
typical round prize money), good enough for planning and nothing more.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, Optional

from seasonbudget.calculations import to_number
from seasonbudget.periods import shift_months

__all__ = [
    "DEFAULT_TAX_PCT",
    "TAX_PCT_BY_COUNTRY",
    "PRIZE_TABLES",
    "TournamentROI",
    "country_tax_pct",
    "effective_tax_pct",
    "monthly_burn_rate",
    "cash_runway_weeks",
    "tournament_roi",
    "break_even_round",
]

DEFAULT_TAX_PCT = 30.0

# ISO-2 country -> percent
TAX_PCT_BY_COUNTRY: Dict[str, float] = {
    "US": 37.0,
    "GB": 45.0,
    "FR": 45.0,
    "ES": 47.0,
    "IT": 43.0,
    "DE": 42.0,
    "AU": 45.0,
    "CA": 53.0,
    "CH": 11.5,
    "MC": 0.0,
}

BURN_WINDOW_MONTHS = 3
DAYS_PER_MONTH = 30

# tournament category -> round reached -> prize money
PRIZE_TABLES: Dict[str, Dict[str, float]] = {
    "Grand Slam": {
        "R128": 100000, "R64": 180000, "R32": 290000, "R16": 490000,
        "QF": 910000, "SF": 1700000, "F": 3150000, "W": 6200000,
    },
    "Masters 1000": {
        "R64": 22000, "R32": 39000, "R16": 69000, "QF": 127000,
        "SF": 243000, "F": 459000, "W": 875000,
    },
    "ATP 500": {
        "R32": 15000, "R16": 26000, "QF": 47000, "SF": 89000,
        "F": 166000, "W": 315000,
    },
    "ATP 250": {
        "R32": 7500, "R16": 13000, "QF": 23000, "SF": 43000,
        "F": 79000, "W": 150000,
    },
    "WTA 1000": {
        "R64": 12000, "R32": 22000, "R16": 41000, "QF": 73000,
        "SF": 140000, "F": 265000, "W": 500000,
    },
    "WTA 500": {
        "R32": 8500, "R16": 15000, "QF": 27000, "SF": 50000,
        "F": 93000, "W": 175000,
    },
    "WTA 250": {
        "R32": 4200, "R16": 7000, "QF": 12000, "SF": 22000,
        "F": 41000, "W": 76000,
    },
    "Challenger": {
        "R32": 800, "R16": 1200, "QF": 2100, "SF": 3600,
        "F": 6100, "W": 10300,
    },
    "ITF": {
        "R32": 150, "R16": 250, "QF": 400, "SF": 650,
        "F": 1000, "W": 1600,
    },
}  # fmt: skip


@dataclass(frozen=True)
class TournamentROI:
    roi: float  # net_profit / expenses
    net_profit: float
    roi_pct: float


# ---------- Tax ----------


def country_tax_pct(country: Optional[str]) -> float:
    """Placeholder rate for an ISO-2 country code; DEFAULT_TAX_PCT when unknown."""
    if not country:
        return DEFAULT_TAX_PCT
    return TAX_PCT_BY_COUNTRY.get(country.strip().upper(), DEFAULT_TAX_PCT)


def effective_tax_pct(budget: Any) -> float:
    """
    Tax percent to apply to a budget's income.

    An explicit tax_pct wins (0 included). Otherwise tax_country picks a
    country rate. A budget with neither is untaxed.
    """
    tax_pct = getattr(budget, "tax_pct", None)
    if tax_pct is not None:
        return to_number(tax_pct)
    country = getattr(budget, "tax_country", None)
    if country:
        return country_tax_pct(country)
    return 0.0


# ---------- Actual spending ----------


def monthly_burn_rate(expenses: Iterable[Any], today: date) -> float:
    """
    Average monthly spend over the last three months of expense entries.
    The window is never counted as shorter than one month.
    """
    window_start = shift_months(today, -BURN_WINDOW_MONTHS)
    recent = [e for e in expenses if e.spent_on >= window_start]
    if not recent:
        return 0.0
    months = max(1.0, (today - window_start).days / DAYS_PER_MONTH)
    return sum(to_number(e.amount) for e in recent) / months


def cash_runway_weeks(available_cash: float, avg_daily_burn: float) -> float:
    """Weeks the cash lasts at the given daily burn; 0 when nothing is burning."""
    if avg_daily_burn <= 0:
        return 0.0
    return available_cash / avg_daily_burn / 7


# ---------- Tournaments ----------


def tournament_roi(
    prize_money: float, expenses: float, tax_pct: float = 0.0
) -> TournamentROI:
    after_tax = prize_money * (1 - tax_pct / 100)
    net_profit = after_tax - expenses
    roi = net_profit / expenses if expenses > 0 else 0.0
    return TournamentROI(roi=roi, net_profit=net_profit, roi_pct=roi * 100)


def break_even_round(
    category: str, tax_pct: float, planned_budget: float
) -> Optional[str]:
    """
    Earliest round whose after-tax prize covers `planned_budget`.
    None when even the title does not; ValueError for an unknown category.
    """
    try:
        table = PRIZE_TABLES[category]
    except KeyError:
        known = ", ".join(PRIZE_TABLES)
        raise ValueError(f"unknown tournament category {category!r} (one of: {known})") from None
    for round_name, prize in sorted(table.items(), key=lambda kv: kv[1]):
        if prize * (1 - tax_pct / 100) >= planned_budget:
            return round_name
    return None
