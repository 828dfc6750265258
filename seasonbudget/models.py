# seasonbudget/models.py
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite drops tzinfo on the way back anyway."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BillingUnit(str, Enum):
    # cadence tag only; totals are always qty * unit_cost per month
    flat_monthly = "flat_monthly"
    per_day = "per_day"
    per_night = "per_night"
    per_tournament = "per_tournament"
    per_leg = "per_leg"


class IncomeType(str, Enum):
    prize = "prize"
    sponsors = "sponsors"
    gifts = "gifts"
    other = "other"


class Budget(SQLModel, table=True):
    __tablename__ = "budget"
    # ids are never reused, snapshots match scenarios by id after deletes
    __table_args__ = {"sqlite_autoincrement": True}
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    season_year: int = Field(index=True)
    base_currency: str = Field(default="USD")  # display currency for child rows
    is_active: bool = Field(default=True)
    tax_country: Optional[str] = None
    tax_pct: Optional[float] = None  # 25 means 25%
    contingency_pct: Optional[float] = None  # buffer on planned cost
    target_monthly_funding: Optional[float] = None
    created_at: datetime = Field(default_factory=utcnow)


class Scenario(SQLModel, table=True):
    __tablename__ = "scenario"
    __table_args__ = {"sqlite_autoincrement": True}
    id: Optional[int] = Field(default=None, primary_key=True)
    budget_id: int = Field(index=True, foreign_key="budget.id")
    name: str
    is_default: bool = Field(default=False)  # informational, never affects totals
    created_at: datetime = Field(default_factory=utcnow)


class LineItemCategory(SQLModel, table=True):
    __tablename__ = "line_item_category"
    id: str = Field(primary_key=True)  # slug, e.g. "travel"
    kind: str = Field(default="expense")
    label: str
    sort_order: Optional[int] = None


class LineItem(SQLModel, table=True):
    __tablename__ = "line_item"
    __table_args__ = {"sqlite_autoincrement": True}
    id: Optional[int] = Field(default=None, primary_key=True)
    scenario_id: int = Field(index=True, foreign_key="scenario.id")
    category_id: Optional[str] = Field(
        default=None, foreign_key="line_item_category.id"
    )
    label: str
    qty: Optional[float] = Field(default=1)  # None counts as 1
    unit_cost: Optional[float] = Field(default=0)  # None counts as 0
    unit: BillingUnit = Field(default=BillingUnit.flat_monthly)
    currency: Optional[str] = None  # None = budget base currency
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class IncomeSource(SQLModel, table=True):
    __tablename__ = "income_source"
    __table_args__ = {"sqlite_autoincrement": True}
    id: Optional[int] = Field(default=None, primary_key=True)
    budget_id: int = Field(index=True, foreign_key="budget.id")
    label: str
    amount_monthly: Optional[float] = None  # None counts as 0
    currency: Optional[str] = None
    type: Optional[str] = Field(default=IncomeType.other.value)  # raw; normalized on read
    created_at: datetime = Field(default_factory=utcnow)


class ExpenseEntry(SQLModel, table=True):
    """
    Money actually spent, as opposed to the planned line items.
    Keeps both the exact date and a YYYYMM integer for month rollups.
    """

    __tablename__ = "expense_entry"
    __table_args__ = {"sqlite_autoincrement": True}
    id: Optional[int] = Field(default=None, primary_key=True)
    budget_id: int = Field(index=True, foreign_key="budget.id")
    category: str
    amount: float
    currency: str = "USD"
    note: Optional[str] = None
    spent_on: date
    ym: int = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow)


class BudgetSnapshot(SQLModel, table=True):
    """
    Frozen copy of a budget taken on request.
    Numeric columns are written once; only the note may change afterwards.
    """

    __tablename__ = "budget_snapshot"
    __table_args__ = {"sqlite_autoincrement": True}
    id: Optional[int] = Field(default=None, primary_key=True)
    budget_id: int = Field(index=True, foreign_key="budget.id")
    note: Optional[str] = None
    # [{"scenario_id": 1, "name": "Lean", "total": 125.0}, ...] in scenario order
    scenario_totals: list = Field(default_factory=list, sa_column=Column(JSON))
    spend_total: float = 0
    income_total: float = 0
    # budget/scenarios/line_items/incomes as plain dicts, used by restore
    snapshot_data: dict = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, index=True)
    restored_at: Optional[datetime] = None
