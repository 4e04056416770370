"""Create email_templates table

Revision ID: 001
Revises: None
Create Date: 2024-05-01 00:00:00.000000+00:00

What:  Creates the `email_templates` table holding template documents.
How:   Generic column types (Uuid, JSON/JSONB, timestamptz) so the same
       migration runs on PostgreSQL and SQLite.

Rollback: downgrade() drops the table (all templates are lost).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "email_templates",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        # Ordered section blocks; JSONB on PostgreSQL
        sa.Column(
            "sections",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("length(title) > 0", name="ck_email_templates_title_not_empty"),
    )

    op.create_index(
        "idx_email_templates_created_at",
        "email_templates",
        ["created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_email_templates_created_at", table_name="email_templates")
    op.drop_table("email_templates")
