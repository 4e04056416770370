"""
Email Builder Backend — Template Repository
============================================

What:  Domain-level wrapper around the template store.
How:   Each operation performs one store call on the session it was built
       with, commits, and translates the outcome:
         - missing row            → NotFoundError     (404)
         - malformed id           → InvalidIdentifierError (400)
         - any other store error  → PersistenceError  (500, static message)
Who:   Built per request by `get_template_repository`; called by the
       template routes.

The driver error is logged here with the template id and never leaves the
server. No retries: a failed call fails the request.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Sequence, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from emailbuilder.exceptions import (
    InvalidIdentifierError,
    NotFoundError,
    PersistenceError,
)
from emailbuilder.models.email_template import EmailTemplate, utcnow

logger = logging.getLogger(__name__)

TemplateId = Union[str, uuid.UUID]

# Static client-facing messages, one per operation
CREATE_FAILED = "Failed to create email template."
LIST_FAILED = "Failed to fetch email templates."
GET_FAILED = "Failed to fetch the email template."
UPDATE_FAILED = "Failed to update the email template."
DELETE_FAILED = "Failed to delete the email template."


def parse_template_id(raw_id: TemplateId) -> uuid.UUID:
    """
    Convert a path parameter into a UUID.

    Raises:
        InvalidIdentifierError: raw_id is not a well-formed UUID.
    """
    if isinstance(raw_id, uuid.UUID):
        return raw_id
    try:
        return uuid.UUID(str(raw_id))
    except ValueError as e:
        raise InvalidIdentifierError(str(raw_id)) from e


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TemplateRepository:
    """
    CRUD operations over the email_templates collection.

    Responsibilities:
        - create():    insert a new template, return it with its id
        - list_all():  every template in insertion order
        - get_by_id(): one template or NotFoundError
        - update():    full replacement of title and sections
        - delete():    irreversible removal
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _fail(
        self,
        message: str,
        error: Exception,
        template_id: Optional[uuid.UUID] = None,
    ) -> PersistenceError:
        """Roll back, log the driver error, and build the client-safe exception."""
        try:
            await self.db.rollback()
        except Exception as rollback_error:
            logger.warning("Rollback after store failure also failed: %s", str(rollback_error))

        logger.error(
            "%s (template_id=%s, %s: %s)",
            message,
            template_id,
            type(error).__name__,
            str(error),
            exc_info=True,
        )
        context = {"error_type": type(error).__name__}
        if template_id is not None:
            context["template_id"] = str(template_id)
        return PersistenceError(message=message, context=context)

    async def _load(self, template_id: uuid.UUID, failure_message: str) -> EmailTemplate:
        try:
            template = await self.db.get(EmailTemplate, template_id)
        except Exception as e:
            raise await self._fail(failure_message, e, template_id) from e

        if template is None:
            raise NotFoundError(resource="Template", resource_id=str(template_id))
        return template

    async def create(
        self,
        title: Optional[str],
        sections: Optional[Sequence[Any]] = None,
    ) -> EmailTemplate:
        """
        Insert a new template.

        A missing or empty title is rejected by the store's constraints and
        reported like any other write failure.

        Raises:
            PersistenceError: the insert failed for any reason.
        """
        now = utcnow()
        template = EmailTemplate(
            title=title,
            sections=list(sections) if sections is not None else [],
            created_at=now,
            updated_at=now,
        )

        try:
            self.db.add(template)
            await self.db.commit()
        except Exception as e:
            raise await self._fail(CREATE_FAILED, e) from e

        logger.info("Template %s created (%d sections)", template.id, len(template.sections))
        return template

    async def list_all(self) -> List[EmailTemplate]:
        """
        Every stored template, oldest first.

        Raises:
            PersistenceError: the query failed.
        """
        try:
            result = await self.db.execute(
                select(EmailTemplate).order_by(EmailTemplate.created_at, EmailTemplate.id)
            )
            return list(result.scalars().all())
        except Exception as e:
            raise await self._fail(LIST_FAILED, e) from e

    async def get_by_id(self, template_id: TemplateId) -> EmailTemplate:
        """
        Raises:
            InvalidIdentifierError: template_id is not a UUID.
            NotFoundError: no template with that id.
            PersistenceError: the lookup failed.
        """
        return await self._load(parse_template_id(template_id), GET_FAILED)

    async def update(
        self,
        template_id: TemplateId,
        title: Optional[str],
        sections: Optional[Sequence[Any]] = None,
    ) -> EmailTemplate:
        """
        Replace title and sections entirely.

        Omitted sections become an empty list; an omitted title is rejected
        by the store like on create. updated_at always moves forward.

        Raises:
            InvalidIdentifierError, NotFoundError, PersistenceError
        """
        parsed_id = parse_template_id(template_id)
        template = await self._load(parsed_id, UPDATE_FAILED)

        now = utcnow()
        previous = _as_utc(template.updated_at)
        if now <= previous:
            now = previous + timedelta(microseconds=1)

        try:
            template.title = title
            template.sections = list(sections) if sections is not None else []
            template.updated_at = now
            await self.db.commit()
        except Exception as e:
            raise await self._fail(UPDATE_FAILED, e, parsed_id) from e

        logger.info("Template %s updated", parsed_id)
        return template

    async def delete(self, template_id: TemplateId) -> None:
        """
        Remove a template permanently.

        Raises:
            InvalidIdentifierError, NotFoundError, PersistenceError
        """
        parsed_id = parse_template_id(template_id)
        template = await self._load(parsed_id, DELETE_FAILED)

        try:
            await self.db.delete(template)
            await self.db.commit()
        except Exception as e:
            raise await self._fail(DELETE_FAILED, e, parsed_id) from e

        logger.info("Template %s deleted", parsed_id)
