"""
Email Builder Backend — EmailTemplate SQLAlchemy Model
=======================================================

What:  ORM model for the `email_templates` table.
How:   One row per template document. `sections` is stored as a JSON
       document (JSONB on PostgreSQL) so its contents stay opaque.
Who:   Used by TemplateRepository and by Alembic.

Table Design:
    - id:         UUID assigned on insert, never reassigned
    - title:      required, non-empty (NOT NULL + CHECK enforced by the store)
    - sections:   ordered JSON array; the order is the rendering order
    - created_at: set once on insert (UTC)
    - updated_at: set on insert and on every update (UTC)
"""

import uuid
from datetime import datetime, timezone
from typing import Any, List

from sqlalchemy import JSON, CheckConstraint, DateTime, Index, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from emailbuilder.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


SectionsType = JSON().with_variant(JSONB(), "postgresql")


class EmailTemplate(Base):
    """
    A stored email layout: a title plus an ordered list of section blocks.

    Query Patterns:
        - List all:  SELECT ... ORDER BY created_at  (idx_email_templates_created_at)
        - Get one:   SELECT ... WHERE id = :uuid     (primary key)
    """

    __tablename__ = "email_templates"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    # Section contents are owned by the frontend; no schema is applied here.
    sections: Mapped[List[Any]] = mapped_column(
        SectionsType,
        nullable=False,
        default=list,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # Set explicitly by TemplateRepository.update so it strictly increases
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        CheckConstraint("length(title) > 0", name="ck_email_templates_title_not_empty"),
        Index("idx_email_templates_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<EmailTemplate(id={self.id}, title={self.title!r}, "
            f"sections={len(self.sections or [])})>"
        )
