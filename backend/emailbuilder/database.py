"""
Email Builder Backend — Template Store Client
==============================================

What:  Async SQLAlchemy engine, session factory, and declarative Base,
       wrapped in a `TemplateStore` handle.
How:   `TemplateStore.connect()` builds the engine, pings the database and
       (optionally) creates the email_templates table. Sessions are handed
       out per request through `TemplateStore.session()`.
Who:   Built once by the application lifespan and published on `app.state`;
       routes reach it only through FastAPI dependencies.
When:  Connected at startup; disposed at shutdown.

Failure model:
    connect() raises StoreConnectionError for an invalid URI or an
    unreachable database. Startup logs it and keeps serving. If the engine
    itself was created, it is kept so the pool can reach the database later;
    no reconnection logic exists beyond what the pool does on checkout.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from emailbuilder.exceptions import PersistenceError, StoreConnectionError

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models, the store's
    auto-create step, and Alembic.
    """
    pass


class TemplateStore:
    """
    Handle on the document store holding email templates.

    Attributes:
        database_url: Async SQLAlchemy URL (postgresql+asyncpg, sqlite+aiosqlite, ...)
        engine:       AsyncEngine once connect() got far enough to build one
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
        echo: bool = False,
        auto_create: bool = True,
    ):
        self.database_url = database_url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_pre_ping = pool_pre_ping
        self.echo = echo
        self.auto_create = auto_create

        self.engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def from_settings(cls, settings) -> "TemplateStore":
        return cls(
            database_url=settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
            auto_create=settings.db_auto_create,
        )

    @property
    def connected(self) -> bool:
        """True once an engine exists (the database may still be down)."""
        return self.engine is not None

    def _engine_options(self) -> dict:
        options = {
            "pool_pre_ping": self.pool_pre_ping,
            "echo": self.echo,
        }
        # SQLite uses a single-file pool that rejects sizing arguments
        if make_url(self.database_url).get_backend_name() != "sqlite":
            options.update(
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_recycle=3600,
            )
        return options

    async def connect(self) -> None:
        """
        Build the engine and verify the database answers.

        Raises:
            StoreConnectionError: URI could not be parsed / driver missing,
                                  or the database did not answer SELECT 1.
        """
        try:
            self.engine = create_async_engine(self.database_url, **self._engine_options())
        except (SQLAlchemyError, ImportError, ValueError) as e:
            raise StoreConnectionError(
                message="Invalid template store connection URI.",
                context={"error": str(e), "error_type": type(e).__name__},
            ) from e

        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        try:
            async with self.engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                if self.auto_create:
                    # Registers the email_templates table on Base.metadata
                    from emailbuilder.models import email_template  # noqa: F401
                    await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            raise StoreConnectionError(
                message="Template store is unreachable.",
                context={"error": str(e), "error_type": type(e).__name__},
            ) from e

        logger.info(
            "Connected to template store (%s)",
            make_url(self.database_url).render_as_string(hide_password=True),
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Yield one AsyncSession; roll back if the caller raises.

        Raises:
            PersistenceError: connect() never produced an engine.
        """
        if self._session_factory is None:
            raise PersistenceError(
                message="The template store is not available.",
                context={"reason": "not connected"},
            )

        async with self._session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> bool:
        """Run SELECT 1; False when there is no engine or the database is down."""
        if self.engine is None:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Template store ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Close all pooled connections."""
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Template store connections closed")
