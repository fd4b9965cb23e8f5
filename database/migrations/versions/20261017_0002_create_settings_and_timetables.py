"""create institution settings and department timetables

Revision ID: 20261017_0002
Revises: 20261017_0001
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261017_0002"
down_revision = "20261017_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "institution_settings",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("working_start", sa.String(length=16), nullable=False),
        sa.Column("working_end", sa.String(length=16), nullable=False),
        sa.Column("period_duration", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("number_of_periods", sa.Integer(), nullable=False, server_default="6"),
        sa.Column("break_times", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "department_timetables",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "department_id",
            sa.String(length=36),
            sa.ForeignKey("departments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("period_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("filled_cells", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("empty_cells", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(
        "ix_department_timetables_department_id",
        "department_timetables",
        ["department_id"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("ix_department_timetables_department_id", table_name="department_timetables")
    op.drop_table("department_timetables")
    op.drop_table("institution_settings")
