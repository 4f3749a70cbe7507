"""Budgets and expenses baseline."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


# Revision identifiers, used by Alembic.
revision = "0001_budgets_expenses"
down_revision = None
branch_labels = None
depends_on = None


BUDGET_CATEGORIES = (
    "electricity",
    "water",
    "internet",
    "rent",
    "supplies",
    "salaries",
    "marketing",
    "transportation",
    "other",
)
BUDGET_PERIODS = ("monthly", "quarterly", "yearly")


def upgrade() -> None:
    op.create_table(
        "budgets",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("company_id", sa.String(64), nullable=False),
        sa.Column("category", sa.Enum(*BUDGET_CATEGORIES, name="budget_category"), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("period", sa.Enum(*BUDGET_PERIODS, name="budget_period"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_budgets_amount_positive"),
        sa.CheckConstraint(
            "(start_date IS NULL) OR (end_date IS NULL) OR (end_date >= start_date)",
            name="ck_budgets_end_after_start",
        ),
    )
    op.create_index("ix_budgets_company_id", "budgets", ["company_id"])
    op.create_index("ix_budgets_company_category", "budgets", ["company_id", "category"])

    op.create_table(
        "expenses",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("company_id", sa.String(64), nullable=False),
        sa.Column("category", sa.String(64), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("vendor", sa.String(200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_expenses_company_id", "expenses", ["company_id"])
    op.create_index("ix_expenses_company_category_date", "expenses", ["company_id", "category", "date"])


def downgrade() -> None:
    op.drop_index("ix_expenses_company_category_date", table_name="expenses")
    op.drop_index("ix_expenses_company_id", table_name="expenses")
    op.drop_table("expenses")
    op.drop_index("ix_budgets_company_category", table_name="budgets")
    op.drop_index("ix_budgets_company_id", table_name="budgets")
    op.drop_table("budgets")
    sa.Enum(name="budget_period").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="budget_category").drop(op.get_bind(), checkfirst=True)
