"""Create table_rows table

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates `table_rows`, which holds every spreadsheet-like table of the
       SQL backend (one row per sheet row, cells as a JSON array).
Rollback: downgrade() drops the table and every record in it.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "table_rows",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "location",
            sa.String(255),
            nullable=False,
            comment="Spreadsheet id (or equivalent namespace) the table lives in",
        ),
        sa.Column(
            "table_name",
            sa.String(100),
            nullable=False,
            comment="Tab name, e.g. Departments",
        ),
        sa.Column(
            "position",
            sa.Integer(),
            nullable=False,
            comment="1-based row number; 1 is the header row",
        ),
        sa.Column(
            "cells",
            sa.JSON(),
            nullable=False,
            comment="Row cells as a JSON array of strings",
        ),
        sa.PrimaryKeyConstraint("id"),
        # Also serves (location, table_name) scans ordered by position
        sa.UniqueConstraint(
            "location", "table_name", "position", name="uq_table_rows_position"
        ),
    )


def downgrade() -> None:
    op.drop_table("table_rows")
