"""
Service helpers for budgets and their children (scenarios, line items, incomes).

Why:
- Keep router code thin.
- One place that knows how to load everything the calculations need.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlmodel import Session, SQLModel, col, select

from seasonbudget.config import get_settings
from seasonbudget.models import (
    BillingUnit,
    Budget,
    BudgetSnapshot,
    ExpenseEntry,
    IncomeSource,
    LineItem,
    LineItemCategory,
    Scenario,
    utcnow,
)

logger = logging.getLogger("sb.budgets")

RowT = TypeVar("RowT", bound=SQLModel)

# (id, kind, label, sort_order)
DEFAULT_CATEGORIES = [
    ("travel", "expense", "Travel", 10),
    ("lodging", "expense", "Lodging", 20),
    ("entry_fees", "expense", "Entry fees", 30),
    ("coaching", "expense", "Coaching", 40),
    ("equipment", "expense", "Equipment", 50),
    ("food", "expense", "Food", 60),
    ("medical", "expense", "Medical & physio", 70),
    ("other", "expense", "Other", 99),
]


@dataclass
class BudgetData:
    """Everything the calculations need for one budget, in display order."""

    budget: Budget
    scenarios: List[Scenario]
    line_items: List[LineItem]
    incomes: List[IncomeSource]


# ---------- Lookups ----------


def get_row(session: Session, model: Type[RowT], row_id: Any) -> RowT:
    """Fetch by primary key or raise LookupError (routers turn it into a 404)."""
    row = session.get(model, row_id)
    if row is None:
        raise LookupError(f"{model.__name__} {row_id} not found")
    return row


def list_budgets(session: Session) -> List[Budget]:
    stmt = select(Budget).order_by(col(Budget.created_at).desc(), col(Budget.id).desc())
    return list(session.exec(stmt).all())


def load_budget_data(session: Session, budget_id: int) -> BudgetData:
    budget = get_row(session, Budget, budget_id)
    scenarios = list(
        session.exec(
            select(Scenario)
            .where(Scenario.budget_id == budget_id)
            .order_by(Scenario.created_at, Scenario.id)
        ).all()
    )
    line_items: List[LineItem] = []
    if scenarios:
        line_items = list(
            session.exec(
                select(LineItem)
                .where(col(LineItem.scenario_id).in_([s.id for s in scenarios]))
                .order_by(LineItem.created_at, LineItem.id)
            ).all()
        )
    incomes = list(
        session.exec(
            select(IncomeSource)
            .where(IncomeSource.budget_id == budget_id)
            .order_by(IncomeSource.created_at, IncomeSource.id)
        ).all()
    )
    return BudgetData(
        budget=budget, scenarios=scenarios, line_items=line_items, incomes=incomes
    )


def budget_for_scenario(session: Session, scenario_id: int) -> Budget:
    scenario = get_row(session, Scenario, scenario_id)
    return get_row(session, Budget, scenario.budget_id)


def effective_currency(row: Any, budget: Budget) -> str:
    """A row's own currency, or the budget's base currency when it has none."""
    return getattr(row, "currency", None) or budget.base_currency


# ---------- Categories ----------


def ensure_default_categories(session: Session) -> List[LineItemCategory]:
    """Insert the default categories that are missing; return all, sorted."""
    existing = {c.id for c in session.exec(select(LineItemCategory)).all()}
    added = 0
    for cat_id, kind, label, sort_order in DEFAULT_CATEGORIES:
        if cat_id not in existing:
            session.add(
                LineItemCategory(id=cat_id, kind=kind, label=label, sort_order=sort_order)
            )
            added += 1
    if added:
        session.commit()
        logger.info("seeded %d line item categories", added)
    stmt = select(LineItemCategory).order_by(
        LineItemCategory.sort_order, LineItemCategory.id
    )
    return list(session.exec(stmt).all())


# ---------- Create ----------


def create_budget(
    session: Session,
    *,
    title: str,
    season_year: int,
    base_currency: Optional[str] = None,
    tax_country: Optional[str] = None,
    tax_pct: Optional[float] = None,
    contingency_pct: Optional[float] = None,
    target_monthly_funding: Optional[float] = None,
) -> Budget:
    title = (title or "").strip()
    if not title:
        raise ValueError("title is required")
    budget = Budget(
        title=title,
        season_year=season_year,
        base_currency=(base_currency or get_settings().base_currency).strip().upper(),
        tax_country=tax_country,
        tax_pct=tax_pct,
        contingency_pct=contingency_pct,
        target_monthly_funding=target_monthly_funding,
        is_active=True,
    )
    session.add(budget)
    session.commit()
    session.refresh(budget)
    logger.info("created budget %s (%s)", budget.id, budget.title)
    return budget


def add_scenario(
    session: Session, *, budget_id: int, name: str, is_default: bool = False
) -> Scenario:
    get_row(session, Budget, budget_id)
    name = (name or "").strip()
    if not name:
        raise ValueError("name is required")
    scenario = Scenario(budget_id=budget_id, name=name, is_default=is_default)
    session.add(scenario)
    session.commit()
    session.refresh(scenario)
    return scenario


def add_line_item(
    session: Session,
    *,
    scenario_id: int,
    label: str,
    qty: Optional[float] = 1,
    unit_cost: Optional[float] = 0,
    unit: BillingUnit | str = BillingUnit.flat_monthly,
    currency: Optional[str] = None,
    category_id: Optional[str] = None,
    commit: bool = True,
) -> LineItem:
    """
    Create a line item under a scenario.
    With commit=False the row is only added to the session (bulk import).
    """
    get_row(session, Scenario, scenario_id)
    if category_id is not None:
        get_row(session, LineItemCategory, category_id)
    if qty is not None and qty < 0:
        raise ValueError("qty must not be negative")
    item = LineItem(
        scenario_id=scenario_id,
        label=(label or "").strip(),
        qty=qty,
        unit_cost=unit_cost,
        unit=BillingUnit(unit),
        currency=(currency.strip().upper() if currency else None),
        category_id=category_id,
    )
    session.add(item)
    if commit:
        session.commit()
        session.refresh(item)
    return item


def add_income(
    session: Session,
    *,
    budget_id: int,
    label: str,
    amount_monthly: Optional[float] = None,
    currency: Optional[str] = None,
    type: Optional[str] = None,
) -> IncomeSource:
    get_row(session, Budget, budget_id)
    income = IncomeSource(
        budget_id=budget_id,
        label=(label or "").strip(),
        amount_monthly=amount_monthly,
        currency=(currency.strip().upper() if currency else None),
        type=type,
    )
    session.add(income)
    session.commit()
    session.refresh(income)
    return income


# ---------- Update ----------


def update_row(session: Session, row: RowT, values: Dict[str, Any]) -> RowT:
    """Apply a partial update (only the keys given) and commit."""
    values = dict(values)
    if isinstance(row, LineItem):
        qty = values.get("qty", row.qty)
        if qty is not None and qty < 0:
            raise ValueError("qty must not be negative")
        if "unit" in values:
            values["unit"] = BillingUnit(values["unit"])
        if values.get("category_id") is not None:
            get_row(session, LineItemCategory, values["category_id"])
        values["updated_at"] = utcnow()
    for key in ("currency", "base_currency"):
        if values.get(key):
            values[key] = values[key].strip().upper()
    for key, value in values.items():
        setattr(row, key, value)
    session.add(row)
    session.commit()
    session.refresh(row)
    return row


# ---------- Delete ----------


def delete_scenario(session: Session, scenario: Scenario) -> None:
    """Delete a scenario together with its line items."""
    items = session.exec(
        select(LineItem).where(LineItem.scenario_id == scenario.id)
    ).all()
    for item in items:
        session.delete(item)
    session.delete(scenario)
    session.commit()


def delete_budget(session: Session, budget: Budget) -> None:
    """Delete a budget and everything hanging off it, snapshots included."""
    data = load_budget_data(session, budget.id)
    children: List[SQLModel] = [*data.line_items, *data.scenarios, *data.incomes]
    children += session.exec(
        select(ExpenseEntry).where(ExpenseEntry.budget_id == budget.id)
    ).all()
    children += session.exec(
        select(BudgetSnapshot).where(BudgetSnapshot.budget_id == budget.id)
    ).all()
    for row in children:
        session.delete(row)
    session.flush()  # children first so the foreign keys stay valid
    session.delete(budget)
    session.commit()
    logger.info("deleted budget %s", budget.id)
