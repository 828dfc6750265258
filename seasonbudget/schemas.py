"""
Request bodies for the JSON API.

*Create models carry defaults; *Update models are all-optional and are applied
with model_dump(exclude_unset=True) so only the sent fields change.
"""

from __future__ import annotations

from datetime import date
from typing import ClassVar, Optional, Tuple

from babel.numbers import UnknownCurrencyError, validate_currency
from pydantic import BaseModel, Field, field_validator, model_validator

from seasonbudget.models import BillingUnit


def _check_currency(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    code = value.strip().upper()
    try:
        validate_currency(code)
    except UnknownCurrencyError:
        raise ValueError(f"unknown currency code {value!r}") from None
    return code


class _CurrencyChecked(BaseModel):
    @field_validator("currency", "base_currency", check_fields=False)
    @classmethod
    def currency_is_iso(cls, value: Optional[str]) -> Optional[str]:
        return _check_currency(value)


class _Patch(_CurrencyChecked):
    """
    Partial update body. Fields listed in NOT_NULL may be omitted but not
    sent as null, since their columns are NOT NULL.
    """

    NOT_NULL: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def required_columns_not_null(self):
        nulled = [
            name
            for name in self.NOT_NULL
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if nulled:
            raise ValueError(f"{', '.join(nulled)} may not be null")
        return self


# ---------- Budget ----------


class BudgetCreate(_CurrencyChecked):
    title: str = Field(..., min_length=1)
    season_year: int = Field(..., ge=2000, le=2100)
    base_currency: Optional[str] = Field(None, description="defaults to BASE_CURRENCY")
    tax_country: Optional[str] = None
    tax_pct: Optional[float] = Field(None, ge=0, le=100)
    contingency_pct: Optional[float] = Field(None, ge=0)
    target_monthly_funding: Optional[float] = Field(None, ge=0)


class BudgetUpdate(_Patch):
    NOT_NULL = ("title", "season_year", "base_currency", "is_active")

    title: Optional[str] = Field(None, min_length=1)
    season_year: Optional[int] = Field(None, ge=2000, le=2100)
    base_currency: Optional[str] = None
    is_active: Optional[bool] = None
    tax_country: Optional[str] = None
    tax_pct: Optional[float] = Field(None, ge=0, le=100)
    contingency_pct: Optional[float] = Field(None, ge=0)
    target_monthly_funding: Optional[float] = Field(None, ge=0)


# ---------- Scenario ----------


class ScenarioCreate(BaseModel):
    name: str = Field(..., min_length=1)
    is_default: bool = False


class ScenarioUpdate(_Patch):
    NOT_NULL = ("name", "is_default")

    name: Optional[str] = Field(None, min_length=1)
    is_default: Optional[bool] = None


# ---------- Line items ----------


class LineItemCreate(_CurrencyChecked):
    label: str = Field(..., min_length=1)
    qty: Optional[float] = Field(1, ge=0)
    unit_cost: Optional[float] = 0
    unit: BillingUnit = BillingUnit.flat_monthly
    currency: Optional[str] = Field(None, description="defaults to the budget currency")
    category_id: Optional[str] = None


class LineItemUpdate(_Patch):
    NOT_NULL = ("label", "unit")

    label: Optional[str] = Field(None, min_length=1)
    qty: Optional[float] = Field(None, ge=0)
    unit_cost: Optional[float] = None
    unit: Optional[BillingUnit] = None
    currency: Optional[str] = None
    category_id: Optional[str] = None


# ---------- Income ----------


class IncomeCreate(_CurrencyChecked):
    label: str = Field(..., min_length=1)
    amount_monthly: Optional[float] = None
    currency: Optional[str] = None
    type: Optional[str] = Field("other", description="prize | sponsors | gifts | other")


class IncomeUpdate(_Patch):
    NOT_NULL = ("label",)

    label: Optional[str] = Field(None, min_length=1)
    amount_monthly: Optional[float] = None
    currency: Optional[str] = None
    type: Optional[str] = None


# ---------- Expenses ----------


class ExpenseCreate(_CurrencyChecked):
    category: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    spent_on: date
    currency: Optional[str] = None
    note: Optional[str] = None


# ---------- Snapshots ----------


class SnapshotCreate(BaseModel):
    note: Optional[str] = None


class SnapshotNoteUpdate(BaseModel):
    note: Optional[str] = None
