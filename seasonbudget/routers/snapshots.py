# seasonbudget/routers/snapshots.py
# Budget history: capture, list, compare (preview only), annotate, delete, restore.
# Restore is its own POST; compare never writes.

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlmodel import Session

from seasonbudget.calculations import compute_scenario_totals, sum_income, total_spend
from seasonbudget.db import get_session
from seasonbudget.formatting import format_signed_currency
from seasonbudget.models import Budget, BudgetSnapshot, utcnow
from seasonbudget.schemas import SnapshotCreate, SnapshotNoteUpdate
from seasonbudget.services import snapshots as svc
from seasonbudget.services.budgets import get_row, load_budget_data
from seasonbudget.snapshots import (
    compare_period,
    diff_against_snapshot,
    select_default_snapshot,
)

router = APIRouter(tags=["snapshots"])


def _get_or_404(session: Session, model, row_id: int):
    try:
        return get_row(session, model, row_id)
    except LookupError as ex:
        raise HTTPException(status_code=404, detail=str(ex))


def _summary(snapshot: BudgetSnapshot) -> dict:
    """Snapshot without the bulky restore payload."""
    return snapshot.model_dump(exclude={"snapshot_data"})


@router.get("/budgets/{budget_id}/snapshots")
def list_snapshots(budget_id: int, session: Session = Depends(get_session)):
    _get_or_404(session, Budget, budget_id)
    return [_summary(s) for s in svc.list_snapshots(session, budget_id)]


@router.post("/budgets/{budget_id}/snapshots", status_code=status.HTTP_201_CREATED)
def create_snapshot(
    budget_id: int,
    body: Optional[SnapshotCreate] = None,
    session: Session = Depends(get_session),
):
    _get_or_404(session, Budget, budget_id)
    snapshot = svc.create_snapshot(session, budget_id, note=body.note if body else None)
    return _summary(snapshot)


@router.get("/budgets/{budget_id}/snapshots/compare")
def compare_with_snapshot(
    budget_id: int,
    snapshot_id: Optional[int] = Query(None, description="defaults to last month's"),
    session: Session = Depends(get_session),
):
    """
    Live budget vs a snapshot, without changing anything.

    `selected` is the snapshot asked for (or the default one) with per-scenario
    rows; `last_month` is always against the default snapshot.
    """
    _get_or_404(session, Budget, budget_id)
    data = load_budget_data(session, budget_id)
    snapshots = svc.list_snapshots(session, budget_id)
    default = select_default_snapshot(snapshots, utcnow())

    if snapshot_id is not None:
        selected = next((s for s in snapshots if s.id == snapshot_id), None)
        if selected is None:
            raise HTTPException(status_code=404, detail=f"Snapshot {snapshot_id} not found")
    else:
        selected = default

    totals = compute_scenario_totals(data.scenarios, data.line_items)
    currency = data.budget.base_currency
    current_spend = total_spend(totals)
    current_income = sum_income(data.incomes)

    last_month = None
    if default is not None:
        period = compare_period(default, totals, current_spend, current_income)
        last_month = {
            "snapshot_id": default.id,
            **asdict(period),
            "spend_tone": period.spend_tone,
            "income_tone": period.income_tone,
            "spend_delta_display": format_signed_currency(period.spend_delta, currency),
            "income_delta_display": format_signed_currency(period.income_delta, currency),
        }

    return {
        "budget_id": budget_id,
        "current_spend": current_spend,
        "current_income": current_income,
        "selected_snapshot_id": selected.id if selected else None,
        "rows": (
            [asdict(r) for r in diff_against_snapshot(selected, totals)]
            if selected
            else []
        ),
        "last_month": last_month,
    }


@router.patch("/snapshots/{snapshot_id}")
def update_snapshot_note(
    snapshot_id: int, body: SnapshotNoteUpdate, session: Session = Depends(get_session)
):
    snapshot = _get_or_404(session, BudgetSnapshot, snapshot_id)
    return _summary(svc.update_snapshot_note(session, snapshot, body.note))


@router.delete("/snapshots/{snapshot_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_snapshot(snapshot_id: int, session: Session = Depends(get_session)):
    snapshot = _get_or_404(session, BudgetSnapshot, snapshot_id)
    svc.delete_snapshot(session, snapshot)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/snapshots/{snapshot_id}/restore")
def restore_snapshot(snapshot_id: int, session: Session = Depends(get_session)):
    """Overwrite the live budget with this snapshot. Destructive."""
    snapshot = _get_or_404(session, BudgetSnapshot, snapshot_id)
    try:
        data = svc.restore_snapshot(session, snapshot)
    except ValueError as ex:
        raise HTTPException(status_code=400, detail=str(ex))
    return {
        "budget": data.budget,
        "scenarios": data.scenarios,
        "line_items": data.line_items,
        "incomes": data.incomes,
        "restored_from": snapshot_id,
    }
