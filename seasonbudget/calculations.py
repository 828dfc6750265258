# seasonbudget/calculations.py
"""
Pure budget math: scenario totals, baseline comparison, income roll-ups,
funding gap, cash flow and year-end forecast.

Nothing here touches the database or caches results. Inputs are any objects
with the attributes of the models in seasonbudget.models (SQLModel rows,
dataclasses, SimpleNamespace in tests); sparse numeric fields fall back to
defaults instead of raising:

- LineItem.qty None -> 1, LineItem.unit_cost None -> 0
- IncomeSource.amount_monthly None -> 0
- anything non-numeric (or NaN) -> 0

Amounts are summed as raw numbers whatever their `currency` field says.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Hashable, Iterable, List, Optional, Sequence, Union

from seasonbudget.models import IncomeType
from seasonbudget.periods import months_remaining

__all__ = [
    "MONTH_LABELS",
    "ScenarioTotal",
    "ComparisonRow",
    "IncomeBucket",
    "FundingGap",
    "CashFlowRow",
    "ForecastRow",
    "to_number",
    "line_item_cost",
    "group_line_items_by_scenario",
    "compute_scenario_totals",
    "total_spend",
    "compare_scenarios",
    "lowest_cost_scenario",
    "sum_income",
    "normalize_income_type",
    "group_incomes_by_type",
    "calculate_funding_gap",
    "build_cash_flow",
    "apply_contingency",
    "plan_monthly_cost",
    "forecast_to_year_end",
]

MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)  # fmt: skip


# ---------- Result types ----------


@dataclass(frozen=True)
class ScenarioTotal:
    scenario: Any
    total: float

    @property
    def scenario_id(self) -> Hashable:
        return self.scenario.id

    @property
    def name(self) -> str:
        return self.scenario.name


@dataclass(frozen=True)
class ComparisonRow:
    scenario_id: Hashable
    name: str
    total: float
    variance: float
    variance_pct: float


@dataclass
class IncomeBucket:
    entries: List[Any] = field(default_factory=list)
    total: float = 0.0


@dataclass(frozen=True)
class FundingGap:
    monthly_expenses: float
    monthly_income: float
    net_after_tax: float
    funding_gap: float  # positive = income does not cover the plan
    tax_rate: float  # percent, e.g. 25.0


@dataclass(frozen=True)
class CashFlowRow:
    month: str
    income: float
    expenses: float
    net: float


@dataclass(frozen=True)
class ForecastRow:
    month: str  # YYYY-MM
    planned_cost: float
    planned_income: float
    net: float


# ---------- Numbers ----------


def to_number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return 0.0
    number = float(value)
    return 0.0 if math.isnan(number) else number


def line_item_cost(item: Any) -> float:
    """Monthly cost of one line item: qty (default 1) times unit_cost (default 0)."""
    qty = getattr(item, "qty", None)
    unit_cost = getattr(item, "unit_cost", None)
    return to_number(1 if qty is None else qty) * to_number(unit_cost)


# ---------- Scenario totals ----------


def group_line_items_by_scenario(line_items: Iterable[Any]) -> Dict[Hashable, List[Any]]:
    grouped: Dict[Hashable, List[Any]] = {}
    for item in line_items:
        grouped.setdefault(item.scenario_id, []).append(item)
    return grouped


def compute_scenario_totals(
    scenarios: Sequence[Any], line_items: Iterable[Any]
) -> List[ScenarioTotal]:
    """
    One ScenarioTotal per scenario, in input order.

    Line items pointing at a scenario that is not in `scenarios` are ignored;
    a scenario without items totals 0.
    """
    grouped = group_line_items_by_scenario(line_items)
    return [
        ScenarioTotal(
            scenario=scenario,
            total=sum((line_item_cost(i) for i in grouped.get(scenario.id, [])), 0.0),
        )
        for scenario in scenarios
    ]


def total_spend(totals: Iterable[ScenarioTotal]) -> float:
    """Sum of all scenario totals (the snapshot `spend_total`)."""
    return sum((t.total for t in totals), 0.0)


# ---------- Comparison ----------


def compare_scenarios(
    totals: Sequence[ScenarioTotal], baseline_scenario_id: Optional[Hashable] = None
) -> List[ComparisonRow]:
    """
    Variance of every scenario against a baseline, in input order.

    The baseline is the entry with `baseline_scenario_id`, or the first entry
    when the id is missing or unknown. A zero baseline gives variance_pct 0.
    """
    if not totals:
        return []
    baseline = next(
        (t for t in totals if t.scenario_id == baseline_scenario_id), totals[0]
    )
    rows = []
    for entry in totals:
        variance = entry.total - baseline.total
        pct = (variance / baseline.total) * 100 if baseline.total else 0.0
        rows.append(
            ComparisonRow(
                scenario_id=entry.scenario_id,
                name=entry.name,
                total=entry.total,
                variance=variance,
                variance_pct=pct,
            )
        )
    return rows


def lowest_cost_scenario(totals: Sequence[ScenarioTotal]) -> Optional[ScenarioTotal]:
    """Cheapest scenario; the first one wins a tie. None when there are none."""
    if not totals:
        return None
    return min(totals, key=lambda t: t.total)


# ---------- Income ----------


def sum_income(incomes: Iterable[Any]) -> float:
    return sum((to_number(getattr(i, "amount_monthly", None)) for i in incomes), 0.0)


def normalize_income_type(raw: Union[str, IncomeType, None]) -> IncomeType:
    """Map a stored income type onto the fixed set; anything unknown is 'other'."""
    try:
        return IncomeType(raw)
    except ValueError:
        return IncomeType.other


def group_incomes_by_type(incomes: Iterable[Any]) -> Dict[IncomeType, IncomeBucket]:
    buckets = {t: IncomeBucket() for t in IncomeType}
    for income in incomes:
        bucket = buckets[normalize_income_type(getattr(income, "type", None))]
        bucket.entries.append(income)
        bucket.total += to_number(getattr(income, "amount_monthly", None))
    return buckets


# ---------- Funding ----------


def calculate_funding_gap(
    scenario_total: float, incomes: Iterable[Any], tax_pct: Optional[float] = None
) -> FundingGap:
    monthly_income = sum_income(incomes)
    tax_rate = to_number(tax_pct) / 100
    net_after_tax = monthly_income - monthly_income * tax_rate
    return FundingGap(
        monthly_expenses=scenario_total,
        monthly_income=monthly_income,
        net_after_tax=net_after_tax,
        funding_gap=scenario_total - net_after_tax,
        tax_rate=tax_rate * 100,
    )


def build_cash_flow(
    scenario_total: float, incomes: Iterable[Any], tax_pct: Optional[float] = None
) -> List[CashFlowRow]:
    """Flat Jan..Dec projection of one scenario against after-tax income."""
    gap = calculate_funding_gap(scenario_total, incomes, tax_pct)
    net = (
        gap.net_after_tax - scenario_total if gap.monthly_income else -scenario_total
    )
    return [
        CashFlowRow(
            month=label,
            income=gap.net_after_tax,
            expenses=scenario_total,
            net=net,
        )
        for label in MONTH_LABELS
    ]


def apply_contingency(amount: float, contingency_pct: Optional[float] = None) -> float:
    """Add a percentage buffer: apply_contingency(100, 10) == 110."""
    return amount * (1 + to_number(contingency_pct) / 100)


def plan_monthly_cost(
    line_items: Iterable[Any], contingency_pct: Optional[float] = None
) -> float:
    base = sum((line_item_cost(i) for i in line_items), 0.0)
    return apply_contingency(base, contingency_pct)


def forecast_to_year_end(
    planned_cost: float,
    planned_income: float,
    season_year: int,
    now: Union[date, datetime],
) -> List[ForecastRow]:
    """Same planned month repeated from now's month through December of season_year."""
    return [
        ForecastRow(
            month=month,
            planned_cost=planned_cost,
            planned_income=planned_income,
            net=planned_income - planned_cost,
        )
        for month in months_remaining(season_year, now)
    ]
