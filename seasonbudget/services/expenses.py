"""
Small service helpers for actual expense entries.

Why:
- Keep router code thin.
- Centralize logic like auto-filling YYYYMM from spent_on.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import Session, col, select

from seasonbudget.models import Budget, ExpenseEntry
from seasonbudget.periods import ym_from_date
from seasonbudget.services.budgets import get_row


def create_expense(
    session: Session,
    *,
    budget_id: int,
    category: str,
    amount: float,
    spent_on: date,
    currency: Optional[str] = None,
    note: Optional[str] = None,
) -> ExpenseEntry:
    """
    Create an ExpenseEntry row and commit it.

    - currency falls back to the budget's base currency.
    - 'ym' (YYYYMM) is computed from spent_on for fast monthly rollups.
    """
    budget = get_row(session, Budget, budget_id)
    category = (category or "").strip()
    if not category:
        raise ValueError("category is required")

    entry = ExpenseEntry(
        budget_id=budget_id,
        category=category,
        amount=float(amount),
        currency=(currency or budget.base_currency).strip().upper(),
        note=note or None,
        spent_on=spent_on,
        ym=ym_from_date(spent_on),
    )
    session.add(entry)
    session.commit()
    session.refresh(entry)
    return entry


def list_expenses(session: Session, budget_id: int) -> List[ExpenseEntry]:
    stmt = (
        select(ExpenseEntry)
        .where(ExpenseEntry.budget_id == budget_id)
        .order_by(col(ExpenseEntry.spent_on).desc(), col(ExpenseEntry.id).desc())
    )
    return list(session.exec(stmt).all())


def sum_expenses_for_month(session: Session, budget_id: int, when: date | datetime) -> float:
    """Total spent in when's calendar month (month to date when `when` is today)."""
    stmt = select(func.coalesce(func.sum(ExpenseEntry.amount), 0.0)).where(
        ExpenseEntry.budget_id == budget_id,
        ExpenseEntry.ym == ym_from_date(when),
    )
    return float(session.exec(stmt).one())
