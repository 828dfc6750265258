# seasonbudget/snapshots.py
"""
Comparing the live budget with stored snapshots.

Everything in this module is a preview: it reads a snapshot and the current
totals and returns numbers. Writing a snapshot back over the live budget is
seasonbudget.services.snapshots.restore_snapshot and is never called from here.

Sign convention for period deltas (current minus snapshot):
- spend_delta > 0  -> spending went up   -> "warning"
- income_delta > 0 -> income went up     -> "positive"
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Hashable, Iterable, List, Optional, Sequence

from seasonbudget.calculations import ScenarioTotal, sum_income, to_number, total_spend
from seasonbudget.periods import month_start, previous_month_start

__all__ = [
    "SnapshotTotalsEntry",
    "DiffRow",
    "ScenarioDelta",
    "PeriodComparison",
    "capture_scenario_totals",
    "capture_aggregates",
    "parse_scenario_totals",
    "select_default_snapshot",
    "diff_against_snapshot",
    "compare_period",
    "trend_tone",
]

FALLBACK_SCENARIO_NAME = "Scenario"


@dataclass(frozen=True)
class SnapshotTotalsEntry:
    scenario_id: Hashable
    name: Optional[str]
    total: float


@dataclass(frozen=True)
class DiffRow:
    scenario_id: Hashable
    name: str
    current_total: float
    previous_total: float
    delta: float


@dataclass(frozen=True)
class ScenarioDelta:
    name: str
    delta: float


@dataclass(frozen=True)
class PeriodComparison:
    spend_delta: float
    income_delta: float
    created_at: Optional[datetime]
    scenario_diff: List[ScenarioDelta]

    @property
    def spend_tone(self) -> str:
        return trend_tone(self.spend_delta, higher_is_better=False)

    @property
    def income_tone(self) -> str:
        return trend_tone(self.income_delta, higher_is_better=True)


def trend_tone(delta: float, higher_is_better: bool) -> str:
    """'positive', 'warning' or 'neutral' for a signed change."""
    if not delta:
        return "neutral"
    improved = delta > 0 if higher_is_better else delta < 0
    return "positive" if improved else "warning"


# ---------- Capture ----------


def capture_scenario_totals(totals: Iterable[ScenarioTotal]) -> List[Dict[str, Any]]:
    """JSON-ready scenario_totals column: one dict per scenario, same order."""
    return [
        {"scenario_id": t.scenario_id, "name": t.name, "total": t.total}
        for t in totals
    ]


def capture_aggregates(
    totals: Sequence[ScenarioTotal], incomes: Iterable[Any]
) -> Dict[str, float]:
    return {"spend_total": total_spend(totals), "income_total": sum_income(incomes)}


def parse_scenario_totals(raw: Any) -> List[SnapshotTotalsEntry]:
    """
    Read a stored scenario_totals value.
    Anything that is not a list yields []; entries may use the older
    camelCase "scenarioId" key.
    """
    if not isinstance(raw, list):
        return []
    entries = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        entries.append(
            SnapshotTotalsEntry(
                scenario_id=item.get("scenario_id", item.get("scenarioId")),
                name=item.get("name"),
                total=to_number(item.get("total")),
            )
        )
    return entries


# ---------- Default selection ----------


def _aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def select_default_snapshot(snapshots: Sequence[Any], now: datetime) -> Optional[Any]:
    """
    Snapshot to compare against when the user has not picked one.

    1. first snapshot created during the previous calendar month
    2. else the first one created before the current month
    3. else the last element of `snapshots`
    Returns None for an empty list. Order of `snapshots` is respected as given
    (the service lists newest first).
    """
    if not snapshots:
        return None

    current_start = _aware(month_start(now))
    last_start = _aware(previous_month_start(now))

    def created(snapshot: Any) -> Optional[datetime]:
        value = getattr(snapshot, "created_at", None)
        return _aware(value) if value is not None else None

    for snapshot in snapshots:
        ts = created(snapshot)
        if ts is not None and last_start <= ts < current_start:
            return snapshot

    for snapshot in snapshots:
        ts = created(snapshot)
        if ts is not None and ts < current_start:
            return snapshot

    return snapshots[-1]


# ---------- Diffs ----------


def diff_against_snapshot(
    snapshot: Any, current_totals: Sequence[ScenarioTotal]
) -> List[DiffRow]:
    """
    Per-scenario change since `snapshot`.

    Covers every scenario on either side (captured ones first, then scenarios
    created since); the missing side counts as 0. The live name wins over the
    captured one.
    """
    captured = parse_scenario_totals(getattr(snapshot, "scenario_totals", None))
    captured_by_id = {}
    for entry in captured:
        captured_by_id.setdefault(entry.scenario_id, entry)
    current_by_id = {t.scenario_id: t for t in current_totals}

    ids = [e.scenario_id for e in captured] + [t.scenario_id for t in current_totals]
    scenario_ids = list(dict.fromkeys(ids))

    rows = []
    for scenario_id in scenario_ids:
        previous = captured_by_id.get(scenario_id)
        current = current_by_id.get(scenario_id)
        name = (
            (current.name if current else None)
            or (previous.name if previous else None)
            or FALLBACK_SCENARIO_NAME
        )
        current_total = current.total if current else 0.0
        previous_total = previous.total if previous else 0.0
        rows.append(
            DiffRow(
                scenario_id=scenario_id,
                name=name,
                current_total=current_total,
                previous_total=previous_total,
                delta=current_total - previous_total,
            )
        )
    return rows


def compare_period(
    snapshot: Any,
    current_totals: Sequence[ScenarioTotal],
    current_spend: float,
    current_income: float,
) -> PeriodComparison:
    """Aggregate spend/income change since `snapshot`, plus its captured scenarios."""
    current_by_id = {t.scenario_id: t for t in current_totals}
    scenario_diff = []
    for entry in parse_scenario_totals(getattr(snapshot, "scenario_totals", None)):
        current = current_by_id.get(entry.scenario_id)
        scenario_diff.append(
            ScenarioDelta(
                name=(current.name if current else entry.name) or FALLBACK_SCENARIO_NAME,
                delta=(current.total if current else 0.0) - entry.total,
            )
        )
    return PeriodComparison(
        spend_delta=current_spend - to_number(getattr(snapshot, "spend_total", None)),
        income_delta=current_income - to_number(getattr(snapshot, "income_total", None)),
        created_at=getattr(snapshot, "created_at", None),
        scenario_diff=scenario_diff,
    )
