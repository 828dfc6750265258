# tests/test_api.py
from __future__ import annotations

import pytest

from seasonbudget.models import utcnow

LEAN = [
    {"label": "Flights", "qty": 2, "unit_cost": 50, "unit": "per_leg"},
    {"label": "Strings", "unit_cost": 25},
]
PREMIUM = [{"label": "Coach", "qty": 1, "unit_cost": 300}]


def test_healthz_and_index(client):
    assert client.get("/healthz").text == "ok"
    assert client.get("/").json()["name"] == "Season Budget"


def test_create_budget_validation(client):
    r = client.post("/budgets", json={"title": "X", "season_year": 2025, "base_currency": "XYZ"})
    assert r.status_code == 422
    r = client.post("/budgets", json={"title": "X", "season_year": 2025})
    assert r.status_code == 201
    assert r.json()["base_currency"] == "USD"


def test_unknown_ids_are_404(client):
    assert client.get("/budgets/999").status_code == 404
    assert client.get("/budgets/999/summary").status_code == 404
    assert client.patch("/scenarios/999", json={"name": "x"}).status_code == 404
    assert client.post("/snapshots/999/restore").status_code == 404


def test_summary_compares_against_baseline(client, make_budget):
    budget_id, ids = make_budget(scenarios={"Lean": LEAN, "Premium": PREMIUM}, tax_pct=25)
    client.post(f"/budgets/{budget_id}/incomes", json={"label": "Club", "amount_monthly": 270, "type": "sponsors"})
    client.post(f"/budgets/{budget_id}/incomes", json={"label": "Prize", "amount_monthly": 50, "type": "lottery"})

    r = client.get(f"/budgets/{budget_id}/summary", params={"baseline_id": ids["Lean"]})
    assert r.status_code == 200
    body = r.json()
    assert body["baseline_scenario_id"] == ids["Lean"]
    rows = {row["name"]: row for row in body["scenarios"]}
    assert rows["Lean"]["total"] == 125
    assert rows["Lean"]["variance"] == 0
    assert rows["Premium"]["variance"] == 175
    assert rows["Premium"]["variance_pct"] == pytest.approx(140)
    assert rows["Premium"]["total_display"] == "$300"
    assert rows["Premium"]["variance_display"] == "+$175"
    assert body["lowest_cost"]["name"] == "Lean"
    assert body["monthly_income"] == 320
    assert body["income_by_type"]["sponsors"] == 270
    assert body["income_by_type"]["other"] == 50

    # funding uses the first scenario when none is flagged default
    funding = body["funding"]
    assert funding["scenario_id"] == ids["Lean"]
    assert funding["net_after_tax"] == 240
    assert funding["funding_gap"] == -115
    assert len(body["cash_flow"]) == 12


def test_summary_unknown_baseline_uses_first(client, make_budget):
    budget_id, ids = make_budget(scenarios={"Lean": LEAN, "Premium": PREMIUM})
    body = client.get(f"/budgets/{budget_id}/summary", params={"baseline_id": 12345}).json()
    assert body["baseline_scenario_id"] == ids["Lean"]


def test_summary_of_empty_budget(client, make_budget):
    budget_id, _ = make_budget()
    body = client.get(f"/budgets/{budget_id}/summary").json()
    assert body["scenarios"] == []
    assert body["lowest_cost"] is None
    assert body["baseline_scenario_id"] is None


def test_forecast_rows(client, make_budget):
    year = utcnow().year
    budget_id, ids = make_budget(
        scenarios={"Premium": PREMIUM}, contingency_pct=10, season_year=year
    )
    body = client.get(f"/budgets/{budget_id}/forecast").json()
    assert body["scenario_id"] == ids["Premium"]
    assert body["rows"][-1]["month"] == f"{year}-12"
    for row in body["rows"]:
        assert row["planned_cost"] == pytest.approx(330)
        assert row["net"] == pytest.approx(-330)


def test_line_item_patch_and_delete(client, make_budget):
    budget_id, _ = make_budget(scenarios={"Lean": LEAN})
    item_id = client.get(f"/budgets/{budget_id}").json()["line_items"][0]["id"]

    assert client.patch(f"/line-items/{item_id}", json={"qty": -1}).status_code == 422
    r = client.patch(f"/line-items/{item_id}", json={"unit_cost": 100})
    assert r.status_code == 200
    total = client.get(f"/budgets/{budget_id}/summary").json()["scenarios"][0]["total"]
    assert total == 225

    assert client.delete(f"/line-items/{item_id}").status_code == 204
    total = client.get(f"/budgets/{budget_id}/summary").json()["scenarios"][0]["total"]
    assert total == 25


def test_unknown_category_is_400(client, make_budget):
    _, ids = make_budget(scenarios={"Lean": []})
    r = client.post(f"/scenarios/{ids['Lean']}/line-items", json={"label": "X", "category_id": "nope"})
    assert r.status_code == 400
    assert client.get("/categories").status_code == 200
    r = client.post(f"/scenarios/{ids['Lean']}/line-items", json={"label": "X", "category_id": "travel"})
    assert r.status_code == 201


def test_expenses_endpoint(client, make_budget):
    budget_id, _ = make_budget()
    r = client.post(
        f"/budgets/{budget_id}/expenses",
        json={"category": "travel", "amount": 80, "spent_on": "2025-03-04", "currency": "eur"},
    )
    assert r.status_code == 201
    assert r.json()["ym"] == 202503
    assert r.json()["currency"] == "EUR"
    assert client.post(
        f"/budgets/{budget_id}/expenses",
        json={"category": "travel", "amount": 0, "spent_on": "2025-03-04"},
    ).status_code == 422
    body = client.get(f"/budgets/{budget_id}/expenses").json()
    assert len(body["entries"]) == 1


def test_snapshot_compare_and_restore(client, make_budget):
    budget_id, ids = make_budget(scenarios={"Lean": LEAN, "Premium": PREMIUM})
    r = client.post(f"/budgets/{budget_id}/snapshots", json={"note": "pre-season"})
    assert r.status_code == 201
    snap = r.json()
    assert snap["spend_total"] == 425
    assert "snapshot_data" not in snap

    # live changes after the snapshot
    client.delete(f"/scenarios/{ids['Premium']}")
    client.post(f"/budgets/{budget_id}/scenarios", json={"name": "Budget"})

    body = client.get(
        f"/budgets/{budget_id}/snapshots/compare", params={"snapshot_id": snap["id"]}
    ).json()
    rows = {row["name"]: row for row in body["rows"]}
    assert rows["Premium"]["current_total"] == 0
    assert rows["Premium"]["delta"] == -300
    assert rows["Budget"]["previous_total"] == 0
    assert body["current_spend"] == 125
    # only snapshot is the default one, whatever its month
    assert body["last_month"]["snapshot_id"] == snap["id"]
    assert body["last_month"]["spend_delta"] == -300
    assert body["last_month"]["spend_tone"] == "positive"
    assert body["last_month"]["spend_delta_display"] == "-$300"

    # comparing never writes
    assert len(client.get(f"/budgets/{budget_id}").json()["scenarios"]) == 2

    r = client.post(f"/snapshots/{snap['id']}/restore")
    assert r.status_code == 200
    restored = r.json()
    assert restored["restored_from"] == snap["id"]
    assert [s["name"] for s in restored["scenarios"]] == ["Lean", "Premium"]
    summary = client.get(f"/budgets/{budget_id}/summary").json()
    assert [row["total"] for row in summary["scenarios"]] == [125, 300]


def test_snapshot_note_and_delete(client, make_budget):
    budget_id, _ = make_budget()
    snap_id = client.post(f"/budgets/{budget_id}/snapshots").json()["id"]
    r = client.patch(f"/snapshots/{snap_id}", json={"note": "after clay swing"})
    assert r.json()["note"] == "after clay swing"
    assert client.delete(f"/snapshots/{snap_id}").status_code == 204
    assert client.get(f"/budgets/{budget_id}/snapshots").json() == []
    compare = client.get(f"/budgets/{budget_id}/snapshots/compare").json()
    assert compare["rows"] == []
    assert compare["last_month"] is None
    assert client.get(
        f"/budgets/{budget_id}/snapshots/compare", params={"snapshot_id": snap_id}
    ).status_code == 404


def test_csv_import_endpoint(client, make_budget):
    budget_id, _ = make_budget(scenarios={"Lean": []})
    template = client.get(f"/budgets/{budget_id}/line-items/template.csv")
    assert template.headers["content-type"].startswith("text/csv")

    good = "\ufeffscenario,label,qty,unit_cost\nLean,Flights,2,350\n".encode("utf-8")
    r = client.post(
        f"/budgets/{budget_id}/line-items/import",
        files={"file": ("items.csv", good, "text/csv")},
    )
    assert r.status_code == 200, r.text
    assert r.json() == {"imported": 1}

    bad = b"scenario,label,qty,unit_cost\nGhost,Flights,2,350\n"
    r = client.post(
        f"/budgets/{budget_id}/line-items/import",
        files={"file": ("items.csv", bad, "text/csv")},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == ['Row 2: scenario "Ghost" not found']


def test_delete_budget(client, make_budget):
    budget_id, _ = make_budget(scenarios={"Lean": LEAN})
    client.post(f"/budgets/{budget_id}/snapshots")
    assert client.delete(f"/budgets/{budget_id}").status_code == 204
    assert client.get(f"/budgets/{budget_id}").status_code == 404


def test_patch_rejects_null_for_required_columns(client, make_budget):
    budget_id, ids = make_budget(scenarios={"Lean": LEAN})
    item_id = client.get(f"/budgets/{budget_id}").json()["line_items"][0]["id"]

    for url, body in [
        (f"/budgets/{budget_id}", {"title": None}),
        (f"/budgets/{budget_id}", {"season_year": None}),
        (f"/budgets/{budget_id}", {"base_currency": None}),
        (f"/budgets/{budget_id}", {"is_active": None}),
        (f"/scenarios/{ids['Lean']}", {"name": None}),
        (f"/scenarios/{ids['Lean']}", {"is_default": None}),
        (f"/line-items/{item_id}", {"label": None}),
        (f"/line-items/{item_id}", {"unit": None}),
    ]:
        r = client.patch(url, json=body)
        assert r.status_code == 422, (url, body, r.text)

    assert client.get(f"/budgets/{budget_id}").json()["budget"]["title"] == "Season 2025"

    # nullable columns still accept null
    r = client.patch(f"/budgets/{budget_id}", json={"tax_pct": None, "tax_country": None})
    assert r.status_code == 200
    r = client.patch(f"/line-items/{item_id}", json={"qty": None})
    assert r.status_code == 200


def test_income_patch_rejects_null_label(client, make_budget):
    budget_id, _ = make_budget()
    income_id = client.post(
        f"/budgets/{budget_id}/incomes", json={"label": "Club", "amount_monthly": 100}
    ).json()["id"]
    assert client.patch(f"/incomes/{income_id}", json={"label": None}).status_code == 422
    assert client.patch(f"/incomes/{income_id}", json={"amount_monthly": None}).status_code == 200


def test_summary_taxes_by_country_when_no_rate_is_set(client, make_budget):
    budget_id, _ = make_budget(scenarios={"Premium": PREMIUM}, tax_country="us")
    client.post(f"/budgets/{budget_id}/incomes", json={"label": "Club", "amount_monthly": 1000})
    funding = client.get(f"/budgets/{budget_id}/summary").json()["funding"]
    assert funding["tax_rate"] == pytest.approx(37)
    assert funding["net_after_tax"] == pytest.approx(630)

    client.patch(f"/budgets/{budget_id}", json={"tax_pct": 10})
    funding = client.get(f"/budgets/{budget_id}/summary").json()["funding"]
    assert funding["tax_rate"] == pytest.approx(10)


def test_runway_from_actual_expenses(client, make_budget):
    budget_id, _ = make_budget()
    body = client.get(f"/budgets/{budget_id}/runway", params={"cash_on_hand": 1000}).json()
    assert body["monthly_burn_rate"] == 0
    assert body["runway_weeks"] == 0

    today = utcnow().date().isoformat()
    client.post(
        f"/budgets/{budget_id}/expenses",
        json={"category": "travel", "amount": 900, "spent_on": today},
    )
    body = client.get(f"/budgets/{budget_id}/runway", params={"cash_on_hand": 1000}).json()
    assert body["monthly_burn_rate"] > 0
    assert body["daily_burn"] == pytest.approx(body["monthly_burn_rate"] / 30)
    assert body["runway_weeks"] == pytest.approx(1000 / body["daily_burn"] / 7)


def test_break_even_and_roi(client, make_budget):
    budget_id, ids = make_budget(scenarios={"Premium": PREMIUM}, tax_country="MC")
    body = client.get(f"/budgets/{budget_id}/break-even", params={"category": "ITF"}).json()
    assert body["scenario_id"] == ids["Premium"]
    assert body["tax_pct"] == 0
    assert body["planned_cost"] == 300
    assert body["round"] == "QF"
    assert body["covered"] is True

    r = client.get(f"/budgets/{budget_id}/break-even", params={"category": "Exhibition"})
    assert r.status_code == 400

    client.patch(f"/budgets/{budget_id}", json={"tax_pct": 25})
    body = client.get(
        f"/budgets/{budget_id}/tournament-roi", params={"prize_money": 1000, "expenses": 500}
    ).json()
    assert body["tax_pct"] == 25
    assert body["net_profit"] == 250
    assert body["roi_pct"] == pytest.approx(50)
