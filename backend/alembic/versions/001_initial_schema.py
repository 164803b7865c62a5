"""Initial schema - services catalog table.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "services",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("base_price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("capture_duration", sa.Text, nullable=False, server_default="Sob consulta"),
        sa.Column("treatment_duration", sa.Text, nullable=False, server_default="Sob consulta"),
        sa.Column("deliverables", sa.Text, nullable=False, server_default=""),
        sa.Column("possible_add_ons", sa.Text, nullable=False, server_default=""),
        sa.Column("travel_fee", sa.Text, nullable=False, server_default="Sob consulta"),
        sa.Column("details", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("name", name="uq_services_name"),
    )


def downgrade() -> None:
    op.drop_table("services")
