"""create_task_table

Revision ID: 5c1f0e7a2b94
Revises: 
Create Date: 2026-10-17 10:12:41.508113

"""
from alembic import op
import sqlalchemy as sa



revision = '5c1f0e7a2b94'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "task",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed')",
            name="ck_task_status",
        ),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_task_status", "task", ["status"], unique=False)
    op.create_index("ix_task_created_at", "task", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_task_created_at", table_name="task")
    op.drop_index("ix_task_status", table_name="task")
    op.drop_table("task")
