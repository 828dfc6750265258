# seasonbudget/routers/budgets.py
# Purpose: CRUD for budgets and their children (scenarios, line items, incomes).
# - Unknown ids answer 404, service-level validation errors answer 400.
# - Totals are never stored; see routers/reports.py for the derived numbers.

from typing import Any, Type

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import Session, SQLModel

from seasonbudget.db import get_session
from seasonbudget.models import Budget, IncomeSource, LineItem, Scenario
from seasonbudget.schemas import (
    BudgetCreate,
    BudgetUpdate,
    IncomeCreate,
    IncomeUpdate,
    LineItemCreate,
    LineItemUpdate,
    ScenarioCreate,
    ScenarioUpdate,
)
from seasonbudget.services import budgets as svc

router = APIRouter(tags=["budgets"])


def _get_or_404(session: Session, model: Type[SQLModel], row_id: Any):
    try:
        return svc.get_row(session, model, row_id)
    except LookupError as ex:
        raise HTTPException(status_code=404, detail=str(ex))


def _bad_request(ex: Exception) -> HTTPException:
    return HTTPException(status_code=400, detail=str(ex))


# ---------- Budgets ----------


@router.get("/budgets")
def list_budgets(session: Session = Depends(get_session)):
    return svc.list_budgets(session)


@router.post("/budgets", status_code=status.HTTP_201_CREATED)
def create_budget(body: BudgetCreate, session: Session = Depends(get_session)):
    try:
        return svc.create_budget(session, **body.model_dump())
    except ValueError as ex:
        raise _bad_request(ex)


@router.get("/budgets/{budget_id}")
def get_budget(budget_id: int, session: Session = Depends(get_session)):
    """Budget with its scenarios, line items and incomes."""
    try:
        data = svc.load_budget_data(session, budget_id)
    except LookupError as ex:
        raise HTTPException(status_code=404, detail=str(ex))
    return {
        "budget": data.budget,
        "scenarios": data.scenarios,
        "line_items": data.line_items,
        "incomes": data.incomes,
    }


@router.patch("/budgets/{budget_id}")
def update_budget(
    budget_id: int, body: BudgetUpdate, session: Session = Depends(get_session)
):
    budget = _get_or_404(session, Budget, budget_id)
    return svc.update_row(session, budget, body.model_dump(exclude_unset=True))


@router.delete("/budgets/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(budget_id: int, session: Session = Depends(get_session)):
    budget = _get_or_404(session, Budget, budget_id)
    svc.delete_budget(session, budget)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------- Scenarios ----------


@router.post("/budgets/{budget_id}/scenarios", status_code=status.HTTP_201_CREATED)
def create_scenario(
    budget_id: int, body: ScenarioCreate, session: Session = Depends(get_session)
):
    _get_or_404(session, Budget, budget_id)
    try:
        return svc.add_scenario(session, budget_id=budget_id, **body.model_dump())
    except ValueError as ex:
        raise _bad_request(ex)


@router.patch("/scenarios/{scenario_id}")
def update_scenario(
    scenario_id: int, body: ScenarioUpdate, session: Session = Depends(get_session)
):
    scenario = _get_or_404(session, Scenario, scenario_id)
    return svc.update_row(session, scenario, body.model_dump(exclude_unset=True))


@router.delete("/scenarios/{scenario_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_scenario(scenario_id: int, session: Session = Depends(get_session)):
    scenario = _get_or_404(session, Scenario, scenario_id)
    svc.delete_scenario(session, scenario)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------- Line items ----------


@router.get("/categories")
def list_categories(session: Session = Depends(get_session)):
    return svc.ensure_default_categories(session)


@router.post("/scenarios/{scenario_id}/line-items", status_code=status.HTTP_201_CREATED)
def create_line_item(
    scenario_id: int, body: LineItemCreate, session: Session = Depends(get_session)
):
    _get_or_404(session, Scenario, scenario_id)
    try:
        return svc.add_line_item(session, scenario_id=scenario_id, **body.model_dump())
    except (LookupError, ValueError) as ex:  # LookupError: unknown category_id
        raise _bad_request(ex)


@router.patch("/line-items/{item_id}")
def update_line_item(
    item_id: int, body: LineItemUpdate, session: Session = Depends(get_session)
):
    item = _get_or_404(session, LineItem, item_id)
    try:
        return svc.update_row(session, item, body.model_dump(exclude_unset=True))
    except (LookupError, ValueError) as ex:
        raise _bad_request(ex)


@router.delete("/line-items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_line_item(item_id: int, session: Session = Depends(get_session)):
    item = _get_or_404(session, LineItem, item_id)
    session.delete(item)
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------- Incomes ----------


@router.post("/budgets/{budget_id}/incomes", status_code=status.HTTP_201_CREATED)
def create_income(
    budget_id: int, body: IncomeCreate, session: Session = Depends(get_session)
):
    _get_or_404(session, Budget, budget_id)
    return svc.add_income(session, budget_id=budget_id, **body.model_dump())


@router.patch("/incomes/{income_id}")
def update_income(
    income_id: int, body: IncomeUpdate, session: Session = Depends(get_session)
):
    income = _get_or_404(session, IncomeSource, income_id)
    return svc.update_row(session, income, body.model_dump(exclude_unset=True))


@router.delete("/incomes/{income_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_income(income_id: int, session: Session = Depends(get_session)):
    income = _get_or_404(session, IncomeSource, income_id)
    session.delete(income)
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
