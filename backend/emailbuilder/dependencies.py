"""
Email Builder Backend — FastAPI Dependencies
=============================================

What:  Resolves the per-process handles built in the lifespan
       (`app.state.store`, `app.state.media_uploader`) for route handlers.
How:   Routes declare `Depends(get_template_repository)` or
       `Depends(get_media_uploader)`; tests swap handles through
       `app.dependency_overrides` or by setting `app.state`.
"""

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from emailbuilder.database import TemplateStore
from emailbuilder.exceptions import PersistenceError, UploadError
from emailbuilder.services.media_base import MediaUploader
from emailbuilder.services.template_repository import TemplateRepository


def get_store(request: Request) -> TemplateStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise PersistenceError(
            message="The template store is not available.",
            context={"reason": "store not initialized"},
        )
    return store


async def get_db_session(
    store: TemplateStore = Depends(get_store),
) -> AsyncGenerator[AsyncSession, None]:
    """
    One session per request; rolled back if the handler raises and closed
    when the request ends. Writes are committed by the repository.
    """
    async with store.session() as session:
        yield session


def get_template_repository(
    db: AsyncSession = Depends(get_db_session),
) -> TemplateRepository:
    return TemplateRepository(db)


def get_media_uploader(request: Request) -> MediaUploader:
    uploader = getattr(request.app.state, "media_uploader", None)
    if uploader is None:
        raise UploadError(context={"reason": "media uploader not initialized"})
    return uploader
