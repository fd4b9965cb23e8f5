"""make faculty roster position unique

Revision ID: 20261017_0003
Revises: 20261017_0002
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op

revision = "20261017_0003"
down_revision = "20261017_0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("faculty") as batch_op:
        batch_op.drop_index("ix_faculty_roster_position")
        batch_op.create_index("ix_faculty_roster_position", ["roster_position"], unique=True)


def downgrade() -> None:
    with op.batch_alter_table("faculty") as batch_op:
        batch_op.drop_index("ix_faculty_roster_position")
        batch_op.create_index("ix_faculty_roster_position", ["roster_position"], unique=False)
