"""Offers table.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "offers",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("external_id", sa.String(255), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("from_city", sa.String(255), nullable=False),
        sa.Column("to_city", sa.String(255), nullable=False),
        sa.Column("vehicle", sa.String(255), nullable=False),
        sa.Column("price", sa.Float),
        sa.Column("pickup_date", sa.DateTime(timezone=True)),
        sa.Column("dropoff_date", sa.DateTime(timezone=True)),
        sa.Column("link", sa.String(1000), nullable=False),
        sa.Column("distance", sa.Float),
        sa.Column("raw_json", sa.Text, nullable=False, server_default="{}"),
        sa.Column("detected_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("external_id"),
    )
    op.create_index("ix_offers_detected_at", "offers", ["detected_at"])


def downgrade() -> None:
    op.drop_index("ix_offers_detected_at", table_name="offers")
    op.drop_table("offers")
