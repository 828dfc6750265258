# seasonbudget/routers/expenses.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from seasonbudget.db import get_session
from seasonbudget.models import Budget, utcnow
from seasonbudget.schemas import ExpenseCreate
from seasonbudget.services.budgets import get_row
from seasonbudget.services.expenses import (
    create_expense,
    list_expenses,
    sum_expenses_for_month,
)

router = APIRouter(prefix="/budgets/{budget_id}/expenses", tags=["expenses"])


def _require_budget(session: Session, budget_id: int) -> Budget:
    try:
        return get_row(session, Budget, budget_id)
    except LookupError as ex:
        raise HTTPException(status_code=404, detail=str(ex))


@router.get("")
def get_expenses(budget_id: int, session: Session = Depends(get_session)):
    """All expense entries, newest first, plus the month-to-date total."""
    _require_budget(session, budget_id)
    return {
        "entries": list_expenses(session, budget_id),
        "month_to_date": sum_expenses_for_month(session, budget_id, utcnow()),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def add_expense(
    budget_id: int, body: ExpenseCreate, session: Session = Depends(get_session)
):
    _require_budget(session, budget_id)
    try:
        return create_expense(session, budget_id=budget_id, **body.model_dump())
    except ValueError as ex:
        raise HTTPException(status_code=400, detail=str(ex))
