"""Create users and stock_items tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `users` table (owner references) and the `stock_items`
       table with its enum and quantity check constraints.
Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(24), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "stock_items",
        sa.Column("id", sa.String(24), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(10), nullable=False, server_default=sa.text("'units'")),
        sa.Column("expiration_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "added_date",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("user_id", sa.String(24), nullable=False),
        sa.Column("image", sa.String(1024), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.CheckConstraint(
            "category IN ('Fruits', 'Vegetables', 'Grains', 'Dairy', 'Other')",
            name="ck_stock_items_category",
        ),
        sa.CheckConstraint(
            "unit IN ('kg', 'grams', 'liters', 'units')",
            name="ck_stock_items_unit",
        ),
        sa.CheckConstraint("quantity >= 0", name="ck_stock_items_quantity_non_negative"),
    )

    # Listing returns items in insertion order (ORDER BY added_date)
    op.create_index("idx_stock_items_added_date", "stock_items", ["added_date"])


def downgrade() -> None:
    op.drop_index("idx_stock_items_added_date", table_name="stock_items")
    op.drop_table("stock_items")
    op.drop_table("users")
