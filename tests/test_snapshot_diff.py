# tests/test_snapshot_diff.py
"""Default snapshot selection and live-vs-snapshot diffs (pure, no DB)."""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace as NS

import pytest

from seasonbudget.calculations import compute_scenario_totals
from seasonbudget.snapshots import (
    capture_scenario_totals,
    compare_period,
    diff_against_snapshot,
    parse_scenario_totals,
    select_default_snapshot,
    trend_tone,
)


def snap(sid, created_at, totals=(), spend=0.0, income=0.0):
    return NS(
        id=sid,
        created_at=created_at,
        scenario_totals=list(totals),
        spend_total=spend,
        income_total=income,
    )


def live(*pairs):
    """live((id, name, total), ...) -> ScenarioTotal list."""
    scenarios = [NS(id=sid, name=name) for sid, name, _ in pairs]
    items = [NS(scenario_id=sid, qty=1, unit_cost=total) for sid, _, total in pairs]
    return compute_scenario_totals(scenarios, items)


# ---------- Selection ----------


NOW = datetime(2025, 6, 15, 12, 0)


def test_select_on_empty_list_is_none():
    assert select_default_snapshot([], NOW) is None


def test_select_prefers_previous_month():
    snapshots = [
        snap(3, datetime(2025, 6, 2)),
        snap(2, datetime(2025, 5, 20)),
        snap(1, datetime(2025, 3, 1)),
    ]
    assert select_default_snapshot(snapshots, NOW).id == 2


def test_select_falls_back_to_anything_before_this_month():
    snapshots = [snap(3, datetime(2025, 6, 2)), snap(1, datetime(2025, 2, 10))]
    assert select_default_snapshot(snapshots, NOW).id == 1


def test_select_falls_back_to_last_element():
    snapshots = [snap(5, datetime(2025, 6, 10)), snap(4, datetime(2025, 6, 1))]
    assert select_default_snapshot(snapshots, NOW).id == 4


def test_select_in_january_looks_at_december():
    now = datetime(2026, 1, 5)
    snapshots = [snap(2, datetime(2026, 1, 2)), snap(1, datetime(2025, 12, 31, 23, 0))]
    assert select_default_snapshot(snapshots, now).id == 1


def test_select_mixes_naive_and_aware_timestamps():
    now = datetime(2025, 6, 15, tzinfo=timezone.utc)
    snapshots = [snap(1, datetime(2025, 5, 31, 22, 0))]
    assert select_default_snapshot(snapshots, now).id == 1


# ---------- Diffs ----------


def test_diff_covers_both_sides():
    snapshot = snap(
        1,
        NOW,
        totals=[
            {"scenario_id": "a", "name": "Lean", "total": 100},
            {"scenario_id": "x", "name": "Gone", "total": 40},
        ],
    )
    rows = diff_against_snapshot(snapshot, live(("a", "Lean v2", 150), ("y", "New", 60)))
    by_id = {r.scenario_id: r for r in rows}

    assert [r.scenario_id for r in rows] == ["a", "x", "y"]
    assert by_id["a"].delta == 50
    assert by_id["a"].name == "Lean v2"
    assert (by_id["x"].current_total, by_id["x"].previous_total, by_id["x"].delta) == (0, 40, -40)
    assert (by_id["y"].current_total, by_id["y"].previous_total, by_id["y"].delta) == (60, 0, 60)


def test_diff_name_falls_back_when_nothing_is_known():
    snapshot = snap(1, NOW, totals=[{"scenario_id": 7, "total": 10}])
    assert diff_against_snapshot(snapshot, [])[0].name == "Scenario"


def test_parse_accepts_legacy_camel_case_key():
    entries = parse_scenario_totals([{"scenarioId": "s1", "name": "Lean", "total": "oops"}])
    assert entries[0].scenario_id == "s1"
    assert entries[0].total == 0
    assert parse_scenario_totals(None) == []


def test_capture_round_trips_into_diff():
    totals = live((1, "Lean", 125), (2, "Premium", 300))
    snapshot = snap(1, NOW, totals=capture_scenario_totals(totals))
    assert all(r.delta == 0 for r in diff_against_snapshot(snapshot, totals))


# ---------- Period comparison ----------


def test_period_sign_convention():
    snapshot = snap(1, NOW, spend=800, income=700)
    period = compare_period(snapshot, [], current_spend=1000, current_income=500)
    assert period.spend_delta == 200
    assert period.income_delta == -200
    assert period.spend_tone == "warning"
    assert period.income_tone == "warning"


def test_period_scenario_diff_uses_captured_entries():
    snapshot = snap(
        1, NOW, totals=[{"scenario_id": 1, "name": "Lean", "total": 100}], spend=100
    )
    period = compare_period(snapshot, live((1, "Lean", 80)), 80, 0)
    assert [(d.name, d.delta) for d in period.scenario_diff] == [("Lean", -20)]
    assert period.spend_tone == "positive"
    assert period.created_at == NOW


@pytest.mark.parametrize(
    "delta,higher_is_better,tone",
    [
        (0, True, "neutral"),
        (0, False, "neutral"),
        (10, True, "positive"),
        (-10, True, "warning"),
        (10, False, "warning"),
        (-10, False, "positive"),
    ],
)
def test_trend_tone(delta, higher_is_better, tone):
    assert trend_tone(delta, higher_is_better) == tone
