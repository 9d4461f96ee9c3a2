"""Add parent role for permission inheritance.

Revision ID: 002
Revises: 001
Create Date: 2026-10-20

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column("role", sa.Column("parent", sa.String(100), nullable=True))
    op.create_foreign_key(
        "fk_role_parent", "role", "role", ["parent"], ["name"], ondelete="RESTRICT"
    )
    op.create_index("ix_role_parent", "role", ["parent"])


def downgrade() -> None:
    op.drop_index("ix_role_parent", table_name="role")
    op.drop_constraint("fk_role_parent", "role", type_="foreignkey")
    op.drop_column("role", "parent")
