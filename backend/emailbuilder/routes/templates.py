"""
Email Builder Backend — Email Template Route Handlers
======================================================

What:  CRUD endpoints under /api/email-templates.
How:   Parses the JSON body, delegates to TemplateRepository, and returns
       the document(s) with the right status code. Errors are raised as
       application exceptions and formatted by the global handlers.
Who:   Called by the frontend email-builder UI.

Endpoints:
    POST   /api/email-templates        → 201 template
    GET    /api/email-templates        → 200 [template, ...]
    GET    /api/email-templates/{id}   → 200 template | 404
    PUT    /api/email-templates/{id}   → 200 template | 404
    DELETE /api/email-templates/{id}   → 200 {"message"} | 404
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from emailbuilder.dependencies import get_template_repository
from emailbuilder.schemas.common import ErrorResponse
from emailbuilder.schemas.email_template import (
    DeleteResponse,
    TemplatePayload,
    TemplateResponse,
)
from emailbuilder.services.template_repository import TemplateRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/email-templates", tags=["Email Templates"])

NOT_FOUND = {404: {"description": "Template not found", "model": ErrorResponse}}
BAD_ID = {400: {"description": "Malformed template id", "model": ErrorResponse}}
SERVER_ERROR = {500: {"description": "Store failure", "model": ErrorResponse}}


@router.post(
    "",
    status_code=201,
    response_model=TemplateResponse,
    responses={**SERVER_ERROR},
    summary="Create an email template",
)
async def create_template(
    payload: TemplatePayload,
    repository: TemplateRepository = Depends(get_template_repository),
) -> TemplateResponse:
    template = await repository.create(title=payload.title, sections=payload.sections)
    return TemplateResponse.model_validate(template)


@router.get(
    "",
    response_model=List[TemplateResponse],
    responses={**SERVER_ERROR},
    summary="List all email templates",
    description="Returns every stored template, oldest first. No pagination.",
)
async def list_templates(
    repository: TemplateRepository = Depends(get_template_repository),
) -> List[TemplateResponse]:
    templates = await repository.list_all()
    return [TemplateResponse.model_validate(t) for t in templates]


@router.get(
    "/{template_id}",
    response_model=TemplateResponse,
    responses={**BAD_ID, **NOT_FOUND, **SERVER_ERROR},
    summary="Get one email template",
)
async def get_template(
    template_id: str,
    repository: TemplateRepository = Depends(get_template_repository),
) -> TemplateResponse:
    template = await repository.get_by_id(template_id)
    return TemplateResponse.model_validate(template)


@router.put(
    "/{template_id}",
    response_model=TemplateResponse,
    responses={**BAD_ID, **NOT_FOUND, **SERVER_ERROR},
    summary="Replace an email template",
    description=(
        "Replaces title and sections entirely. An omitted `sections` is stored "
        "as an empty list; an omitted `title` is rejected by the store."
    ),
)
async def update_template(
    template_id: str,
    payload: TemplatePayload,
    repository: TemplateRepository = Depends(get_template_repository),
) -> TemplateResponse:
    template = await repository.update(
        template_id,
        title=payload.title,
        sections=payload.sections,
    )
    return TemplateResponse.model_validate(template)


@router.delete(
    "/{template_id}",
    response_model=DeleteResponse,
    responses={**BAD_ID, **NOT_FOUND, **SERVER_ERROR},
    summary="Delete an email template",
)
async def delete_template(
    template_id: str,
    repository: TemplateRepository = Depends(get_template_repository),
) -> DeleteResponse:
    await repository.delete(template_id)
    return DeleteResponse()
