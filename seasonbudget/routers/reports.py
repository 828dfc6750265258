# seasonbudget/routers/reports.py
# Read-only numbers derived from a budget: scenario totals and comparison,
# funding gap, cash flow, forecast, burn rate and tournament numbers.
# Everything is recomputed per request.

from __future__ import annotations

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from seasonbudget.calculations import (
    apply_contingency,
    build_cash_flow,
    calculate_funding_gap,
    compare_scenarios,
    compute_scenario_totals,
    forecast_to_year_end,
    group_incomes_by_type,
    lowest_cost_scenario,
    plan_monthly_cost,
    sum_income,
)
from seasonbudget.db import get_session
from seasonbudget.finance import (
    break_even_round,
    cash_runway_weeks,
    effective_tax_pct,
    monthly_burn_rate,
    tournament_roi,
)
from seasonbudget.formatting import format_currency, format_signed_currency
from seasonbudget.models import Scenario, utcnow
from seasonbudget.services.budgets import BudgetData, load_budget_data
from seasonbudget.services.expenses import list_expenses, sum_expenses_for_month

router = APIRouter(prefix="/budgets/{budget_id}", tags=["reports"])


def _load_or_404(session: Session, budget_id: int) -> BudgetData:
    try:
        return load_budget_data(session, budget_id)
    except LookupError as ex:
        raise HTTPException(status_code=404, detail=str(ex))


def _pick_scenario(
    scenarios: List[Scenario], scenario_id: Optional[int]
) -> Optional[Scenario]:
    """Requested scenario, else the one flagged default, else the first."""
    if scenario_id is not None:
        for s in scenarios:
            if s.id == scenario_id:
                return s
        raise HTTPException(status_code=404, detail=f"Scenario {scenario_id} not found")
    return next((s for s in scenarios if s.is_default), scenarios[0] if scenarios else None)


@router.get("/summary")
def budget_summary(
    budget_id: int,
    baseline_id: Optional[int] = Query(None, description="scenario to compare against"),
    scenario_id: Optional[int] = Query(None, description="scenario for funding numbers"),
    session: Session = Depends(get_session),
):
    data = _load_or_404(session, budget_id)
    currency = data.budget.base_currency

    totals = compute_scenario_totals(data.scenarios, data.line_items)
    comparison = compare_scenarios(totals, baseline_id)
    cheapest = lowest_cost_scenario(totals)
    baseline_used = None
    if totals:
        known = any(t.scenario_id == baseline_id for t in totals)
        baseline_used = baseline_id if known else totals[0].scenario_id

    selected = _pick_scenario(data.scenarios, scenario_id)
    selected_total = next(
        (t.total for t in totals if selected and t.scenario_id == selected.id), 0.0
    )
    tax_pct = effective_tax_pct(data.budget)
    funding = calculate_funding_gap(selected_total, data.incomes, tax_pct)
    cash_flow = build_cash_flow(selected_total, data.incomes, tax_pct)

    return {
        "budget_id": data.budget.id,
        "currency": currency,
        "baseline_scenario_id": baseline_used,
        "scenarios": [
            {
                **asdict(row),
                "total_display": format_currency(row.total, currency),
                "variance_display": format_signed_currency(row.variance, currency),
            }
            for row in comparison
        ],
        "lowest_cost": (
            {
                "scenario_id": cheapest.scenario_id,
                "name": cheapest.name,
                "total": cheapest.total,
            }
            if cheapest
            else None
        ),
        "monthly_income": sum_income(data.incomes),
        "income_by_type": {
            t.value: bucket.total for t, bucket in group_incomes_by_type(data.incomes).items()
        },
        "funding": {
            "scenario_id": selected.id if selected else None,
            **asdict(funding),
            "planned_with_contingency": apply_contingency(
                selected_total, data.budget.contingency_pct
            ),
            "funding_gap_display": format_signed_currency(funding.funding_gap, currency),
        },
        "cash_flow": [asdict(r) for r in cash_flow],
        "expenses_this_month": sum_expenses_for_month(session, budget_id, utcnow()),
    }


@router.get("/forecast")
def budget_forecast(
    budget_id: int,
    scenario_id: Optional[int] = Query(None),
    session: Session = Depends(get_session),
):
    """Planned cost (with contingency) vs after-tax income for the rest of the season."""
    data = _load_or_404(session, budget_id)
    selected = _pick_scenario(data.scenarios, scenario_id)
    items = [i for i in data.line_items if selected and i.scenario_id == selected.id]

    planned_cost = plan_monthly_cost(items, data.budget.contingency_pct)
    planned_income = calculate_funding_gap(
        0.0, data.incomes, effective_tax_pct(data.budget)
    ).net_after_tax
    rows = forecast_to_year_end(
        planned_cost, planned_income, data.budget.season_year, utcnow()
    )
    return {
        "budget_id": data.budget.id,
        "scenario_id": selected.id if selected else None,
        "rows": [asdict(r) for r in rows],
    }


@router.get("/runway")
def cash_runway(
    budget_id: int,
    cash_on_hand: float = Query(0.0, ge=0, description="cash available right now"),
    session: Session = Depends(get_session),
):
    """Burn rate from the last three months of actual expenses and how long cash lasts."""
    data = _load_or_404(session, budget_id)
    currency = data.budget.base_currency
    burn = monthly_burn_rate(list_expenses(session, budget_id), utcnow().date())
    daily = burn / 30
    return {
        "budget_id": data.budget.id,
        "cash_on_hand": cash_on_hand,
        "monthly_burn_rate": burn,
        "daily_burn": daily,
        "runway_weeks": cash_runway_weeks(cash_on_hand, daily),
        "monthly_burn_display": format_currency(burn, currency),
    }


@router.get("/break-even")
def tournament_break_even(
    budget_id: int,
    category: str = Query(..., description='e.g. "ATP 250", "Challenger", "ITF"'),
    scenario_id: Optional[int] = Query(None),
    session: Session = Depends(get_session),
):
    """Round a player must reach for the after-tax prize to cover one planned month."""
    data = _load_or_404(session, budget_id)
    selected = _pick_scenario(data.scenarios, scenario_id)
    items = [i for i in data.line_items if selected and i.scenario_id == selected.id]
    planned_cost = plan_monthly_cost(items, data.budget.contingency_pct)
    tax_pct = effective_tax_pct(data.budget)
    try:
        round_needed = break_even_round(category, tax_pct, planned_cost)
    except ValueError as ex:
        raise HTTPException(status_code=400, detail=str(ex))
    return {
        "budget_id": data.budget.id,
        "scenario_id": selected.id if selected else None,
        "category": category,
        "tax_pct": tax_pct,
        "planned_cost": planned_cost,
        "round": round_needed,
        "covered": round_needed is not None,
    }


@router.get("/tournament-roi")
def tournament_return(
    budget_id: int,
    prize_money: float = Query(..., ge=0),
    expenses: float = Query(..., ge=0),
    session: Session = Depends(get_session),
):
    """Return on one tournament's costs, taxed at the budget's effective rate."""
    data = _load_or_404(session, budget_id)
    tax_pct = effective_tax_pct(data.budget)
    return {
        "budget_id": data.budget.id,
        "tax_pct": tax_pct,
        **asdict(tournament_roi(prize_money, expenses, tax_pct)),
    }
