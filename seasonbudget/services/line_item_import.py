"""
CSV import of line items.

Format (header row required, case-insensitive, any column order):
    scenario,label,qty,unit_cost[,unit]

- scenario is matched by name (case-insensitive) against the budget's scenarios
- rows with an empty label are skipped
- empty qty means 1, empty unit_cost means 0
- unit is optional and must be one of the BillingUnit values

A file imports completely or not at all: every bad row is reported and no
row is written.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlmodel import Session

from seasonbudget.models import BillingUnit, Scenario
from seasonbudget.services.budgets import add_line_item, load_budget_data

logger = logging.getLogger("sb.import")

REQUIRED_HEADERS = ["scenario", "label", "qty", "unit_cost"]
OPTIONAL_HEADERS = ["unit"]


class LineItemImportError(ValueError):
    """Raised with one message per rejected row (or a single header message)."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass(frozen=True)
class ImportRow:
    scenario_id: int
    label: str
    qty: float
    unit_cost: float
    unit: BillingUnit


def template_csv() -> str:
    """A header plus two example rows users can fill in."""
    buf = io.StringIO()
    w = csv.writer(buf)
    w.writerow(REQUIRED_HEADERS + OPTIONAL_HEADERS)
    w.writerow(["Lean", "Flights to tournaments", "2", "350", "per_leg"])
    w.writerow(["Lean", "Stringing", "", "60", "flat_monthly"])
    return buf.getvalue()


def _number(raw: str, default: float, column: str) -> float:
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{column} must be numeric") from None


def parse_line_item_csv(text: str, scenarios: List[Scenario]) -> List[ImportRow]:
    reader = csv.reader(io.StringIO(text))
    try:
        header = [h.strip().lower() for h in next(reader)]
    except StopIteration:
        raise LineItemImportError(["CSV appears to be empty."]) from None

    missing = [h for h in REQUIRED_HEADERS if h not in header]
    if missing:
        raise LineItemImportError([f"Missing columns: {', '.join(missing)}"])

    index = {name: header.index(name) for name in REQUIRED_HEADERS}
    unit_idx: Optional[int] = header.index("unit") if "unit" in header else None
    lookup: Dict[str, int] = {s.name.strip().lower(): s.id for s in scenarios}

    rows: List[ImportRow] = []
    errors: List[str] = []
    for row_no, raw in enumerate(reader, start=2):  # header is line 1
        cells = [c.strip() for c in raw] + [""] * len(header)
        label = cells[index["label"]]
        if not label:
            continue
        try:
            scenario_name = cells[index["scenario"]]
            scenario_id = lookup.get(scenario_name.lower())
            if scenario_id is None:
                raise ValueError(f'scenario "{scenario_name}" not found')
            qty = _number(cells[index["qty"]], 1.0, "qty")
            if qty < 0:
                raise ValueError("qty must not be negative")
            unit_cost = _number(cells[index["unit_cost"]], 0.0, "unit_cost")
            unit_raw = cells[unit_idx] if unit_idx is not None else ""
            try:
                unit = BillingUnit(unit_raw or BillingUnit.flat_monthly.value)
            except ValueError:
                raise ValueError(f'unknown unit "{unit_raw}"') from None
            rows.append(ImportRow(scenario_id, label, qty, unit_cost, unit))
        except ValueError as ex:
            errors.append(f"Row {row_no}: {ex}")

    if errors:
        raise LineItemImportError(errors)
    if not rows:
        raise LineItemImportError(["No line items found in the file."])
    return rows


def import_line_items(session: Session, budget_id: int, text: str) -> int:
    """Parse `text` against the budget's scenarios and insert all rows. Returns the count."""
    data = load_budget_data(session, budget_id)
    rows = parse_line_item_csv(text, data.scenarios)
    for row in rows:
        add_line_item(
            session,
            scenario_id=row.scenario_id,
            label=row.label,
            qty=row.qty,
            unit_cost=row.unit_cost,
            unit=row.unit,
            commit=False,
        )
    session.commit()
    logger.info("imported %d line items into budget %s", len(rows), budget_id)
    return len(rows)
