"""Create the journal_entries table.

Revision ID: 0001
Revises:
"""

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "journal_entries",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("engine", sa.String(32), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("operation", sa.String(50), nullable=False),
        sa.Column("caller", sa.String(255), nullable=False),
        sa.Column("height", sa.Integer(), nullable=False),
        sa.Column("arguments", sa.JSON()),
        sa.Column("result", sa.JSON()),
        sa.Column("prev_hash", sa.String(64), nullable=True),
        sa.Column("entry_hash", sa.String(64), nullable=False),
        sa.Column("signature", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("engine", "sequence", name="uq_journal_engine_sequence"),
    )
    op.create_index("ix_journal_entries_engine", "journal_entries", ["engine"])
    op.create_index("ix_journal_entries_operation", "journal_entries", ["operation"])


def downgrade() -> None:
    op.drop_index("ix_journal_entries_operation", table_name="journal_entries")
    op.drop_index("ix_journal_entries_engine", table_name="journal_entries")
    op.drop_table("journal_entries")
