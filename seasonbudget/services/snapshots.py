"""
Persistence side of budget snapshots: capture, list, annotate, delete, restore.

Comparisons live in seasonbudget.snapshots and only read. restore_snapshot is
the one call that writes a snapshot back over the live budget, and nothing
calls it implicitly.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type

from sqlmodel import Session, SQLModel, col, select

from seasonbudget.calculations import compute_scenario_totals
from seasonbudget.models import (
    Budget,
    BudgetSnapshot,
    IncomeSource,
    LineItem,
    Scenario,
    utcnow,
)
from seasonbudget.services.budgets import BudgetData, get_row, load_budget_data
from seasonbudget.snapshots import capture_aggregates, capture_scenario_totals

logger = logging.getLogger("sb.snapshots")

PAYLOAD_KEYS = ("budget", "scenarios", "line_items", "incomes")

# budget columns a restore copies back; is_active and created_at stay live
RESTORED_BUDGET_FIELDS = (
    "title",
    "season_year",
    "base_currency",
    "tax_country",
    "tax_pct",
    "contingency_pct",
    "target_monthly_funding",
)


def _dump(row: SQLModel) -> Dict[str, Any]:
    return row.model_dump(mode="json")


def build_snapshot(data: BudgetData, note: Optional[str] = None) -> BudgetSnapshot:
    """Unsaved snapshot row for the given budget state."""
    totals = compute_scenario_totals(data.scenarios, data.line_items)
    aggregates = capture_aggregates(totals, data.incomes)
    return BudgetSnapshot(
        budget_id=data.budget.id,
        note=(note or "").strip() or None,
        scenario_totals=capture_scenario_totals(totals),
        spend_total=aggregates["spend_total"],
        income_total=aggregates["income_total"],
        snapshot_data={
            "budget": _dump(data.budget),
            "scenarios": [_dump(s) for s in data.scenarios],
            "line_items": [_dump(i) for i in data.line_items],
            "incomes": [_dump(i) for i in data.incomes],
        },
    )


def create_snapshot(
    session: Session, budget_id: int, note: Optional[str] = None
) -> BudgetSnapshot:
    snapshot = build_snapshot(load_budget_data(session, budget_id), note)
    session.add(snapshot)
    session.commit()
    session.refresh(snapshot)
    logger.info(
        "snapshot %s for budget %s: spend=%.2f income=%.2f",
        snapshot.id,
        budget_id,
        snapshot.spend_total,
        snapshot.income_total,
    )
    return snapshot


def list_snapshots(session: Session, budget_id: int) -> List[BudgetSnapshot]:
    """Newest first, the order default selection expects."""
    stmt = (
        select(BudgetSnapshot)
        .where(BudgetSnapshot.budget_id == budget_id)
        .order_by(col(BudgetSnapshot.created_at).desc(), col(BudgetSnapshot.id).desc())
    )
    return list(session.exec(stmt).all())


def update_snapshot_note(
    session: Session, snapshot: BudgetSnapshot, note: Optional[str]
) -> BudgetSnapshot:
    snapshot.note = (note or "").strip() or None
    session.add(snapshot)
    session.commit()
    session.refresh(snapshot)
    return snapshot


def delete_snapshot(session: Session, snapshot: BudgetSnapshot) -> None:
    session.delete(snapshot)
    session.commit()
    logger.info("deleted snapshot %s", snapshot.id)


# ---------- Restore ----------


def parse_snapshot_payload(raw: Any) -> Dict[str, Any]:
    if not isinstance(raw, dict) or not raw:
        raise ValueError("Snapshot is missing data")
    if any(raw.get(key) is None for key in PAYLOAD_KEYS):
        raise ValueError("Snapshot payload is incomplete")
    return {key: raw[key] for key in PAYLOAD_KEYS}


def _reinsert(
    session: Session, model: Type[SQLModel], data: Dict[str, Any], **overrides: Any
) -> SQLModel:
    """
    Recreate a row from its dumped dict.
    Keeps the old primary key when it is free, otherwise lets the DB assign one.
    """
    values = {**data, **overrides}
    if values.get("id") is not None and session.get(model, values["id"]) is not None:
        values["id"] = None
    row = model.model_validate(values)
    session.add(row)
    session.flush()
    return row


def restore_snapshot(session: Session, snapshot: BudgetSnapshot) -> BudgetData:
    """
    Overwrite the live budget with the snapshot's copy.

    Budget settings, scenarios, line items and incomes are replaced in one
    transaction; on any error everything is rolled back and the live budget
    stays as it was. Expense entries and other snapshots are not touched.
    """
    payload = parse_snapshot_payload(snapshot.snapshot_data)
    budget = get_row(session, Budget, snapshot.budget_id)
    current = load_budget_data(session, budget.id)

    try:
        for field_name in RESTORED_BUDGET_FIELDS:
            if field_name in payload["budget"]:
                setattr(budget, field_name, payload["budget"][field_name])
        session.add(budget)

        for row in [*current.line_items, *current.scenarios, *current.incomes]:
            session.delete(row)
        session.flush()

        scenario_ids = {}
        for scenario in payload["scenarios"]:
            new = _reinsert(session, Scenario, scenario, budget_id=budget.id)
            scenario_ids[scenario.get("id")] = new.id
        for item in payload["line_items"]:
            if item.get("scenario_id") not in scenario_ids:
                continue  # item of a scenario the snapshot does not carry
            _reinsert(
                session, LineItem, item, scenario_id=scenario_ids[item["scenario_id"]]
            )
        for income in payload["incomes"]:
            _reinsert(session, IncomeSource, income, budget_id=budget.id)

        snapshot.restored_at = utcnow()
        session.add(snapshot)
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("restore of snapshot %s failed", snapshot.id)
        raise

    logger.info("restored budget %s from snapshot %s", budget.id, snapshot.id)
    return load_budget_data(session, budget.id)
