# tests/conftest.py
# Test setup: temporary SQLite DB and dependency override for sessions.

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine

# Ensure repo root on sys.path so "import seasonbudget" works without an install
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import seasonbudget.models as _models  # noqa: F401,E402  # registers tables on SQLModel.metadata
from seasonbudget.db import get_session  # noqa: E402
from seasonbudget.main import app as fastapi_app  # noqa: E402


@pytest.fixture()
def tmp_db_path(tmp_path: Path) -> Path:
    return tmp_path / "test_seasonbudget.db"


@pytest.fixture()
def test_engine(tmp_db_path: Path):
    # File-based SQLite so multiple connections share the same DB
    url = f"sqlite:///{tmp_db_path}"
    engine = create_engine(url, connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(test_engine):
    with Session(test_engine) as s:
        yield s


@pytest.fixture()
def client(test_engine):
    # Override the app's DB session to use our test engine
    def _get_test_session():
        with Session(test_engine) as s:
            yield s

    fastapi_app.dependency_overrides[get_session] = _get_test_session
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def make_budget(client):
    """POST a budget with scenarios and line items; returns the ids."""

    def _make(title="Season 2025", scenarios=None, base_currency="USD", **extra):
        r = client.post(
            "/budgets",
            json={"title": title, "season_year": 2025, "base_currency": base_currency, **extra},
        )
        assert r.status_code == 201, r.text
        budget_id = r.json()["id"]
        ids = {}
        for name, items in (scenarios or {}).items():
            rs = client.post(f"/budgets/{budget_id}/scenarios", json={"name": name})
            assert rs.status_code == 201, rs.text
            ids[name] = rs.json()["id"]
            for item in items:
                ri = client.post(f"/scenarios/{ids[name]}/line-items", json=item)
                assert ri.status_code == 201, ri.text
        return budget_id, ids

    return _make
