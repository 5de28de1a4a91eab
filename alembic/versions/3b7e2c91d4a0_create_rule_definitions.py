"""create rule_definitions

Revision ID: 3b7e2c91d4a0
Revises:
Create Date: 2026-10-12 09:00:00.000000

Stores qualification and tag rule definitions as JSONB, keyed by
(kind, rule_id).  Defaults are seeded by the application at startup
when the table is empty, not by this migration.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3b7e2c91d4a0"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "rule_definitions",
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("rule_id", sa.String(length=100), nullable=False),
        sa.Column("definition", postgresql.JSONB(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("kind", "rule_id", name="pk_rule_definitions"),
        sa.CheckConstraint(
            "kind IN ('qualification', 'tag')", name="ck_rule_definitions_kind"
        ),
    )


def downgrade() -> None:
    op.drop_table("rule_definitions")
