"""initial season budget schema

Revision ID: 0001_initial
Revises:
Create Date: 2025-10-01 09:00:00

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

BILLING_UNITS = ("flat_monthly", "per_day", "per_night", "per_tournament", "per_leg")


def upgrade() -> None:
    op.create_table(
        "budget",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("season_year", sa.Integer(), nullable=False, index=True),
        sa.Column("base_currency", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("tax_country", sa.String(), nullable=True),
        sa.Column("tax_pct", sa.Float(), nullable=True),
        sa.Column("contingency_pct", sa.Float(), nullable=True),
        sa.Column("target_monthly_funding", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "scenario",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("budget_id", sa.Integer(), sa.ForeignKey("budget.id"), nullable=False, index=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "line_item_category",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("kind", sa.String(), nullable=False),
        sa.Column("label", sa.String(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=True),
    )
    op.create_table(
        "line_item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("scenario_id", sa.Integer(), sa.ForeignKey("scenario.id"), nullable=False, index=True),
        sa.Column("category_id", sa.String(), sa.ForeignKey("line_item_category.id"), nullable=True),
        sa.Column("label", sa.String(), nullable=False),
        sa.Column("qty", sa.Float(), nullable=True),
        sa.Column("unit_cost", sa.Float(), nullable=True),
        sa.Column("unit", sa.Enum(*BILLING_UNITS, name="billingunit"), nullable=False),
        sa.Column("currency", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "income_source",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("budget_id", sa.Integer(), sa.ForeignKey("budget.id"), nullable=False, index=True),
        sa.Column("label", sa.String(), nullable=False),
        sa.Column("amount_monthly", sa.Float(), nullable=True),
        sa.Column("currency", sa.String(), nullable=True),
        sa.Column("type", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "expense_entry",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("budget_id", sa.Integer(), sa.ForeignKey("budget.id"), nullable=False, index=True),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(), nullable=False),
        sa.Column("note", sa.String(), nullable=True),
        sa.Column("spent_on", sa.Date(), nullable=False),
        sa.Column("ym", sa.Integer(), nullable=False, index=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "budget_snapshot",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("budget_id", sa.Integer(), sa.ForeignKey("budget.id"), nullable=False, index=True),
        sa.Column("note", sa.String(), nullable=True),
        sa.Column("scenario_totals", sa.JSON(), nullable=True),
        sa.Column("spend_total", sa.Float(), nullable=False),
        sa.Column("income_total", sa.Float(), nullable=False),
        sa.Column("snapshot_data", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, index=True),
        sa.Column("restored_at", sa.DateTime(), nullable=True),
        sqlite_autoincrement=True,
    )


def downgrade() -> None:
    for table in (
        "budget_snapshot",
        "expense_entry",
        "income_source",
        "line_item",
        "line_item_category",
        "scenario",
        "budget",
    ):
        op.drop_table(table)
