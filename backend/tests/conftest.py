"""
Email Builder Backend — Test Configuration (conftest.py)
=========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite database file (aiosqlite) under
       tmp_path, so repository and API tests run against a real store.
       The media host is replaced by FakeMediaUploader.

Fixture Hierarchy (all function-scoped):
    test_settings ─┬─ store ── db_session ── repository
                   └─ app (lifespan entered) ── test_client
    fake_uploader ─┘
    mock_db_session: AsyncMock session for failure-path unit tests
"""

import os
from typing import BinaryIO, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time; keep tests off any real services
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./emailbuilder_test.db"
os.environ["DB_AUTO_CREATE"] = "true"
os.environ["CLOUDINARY_CLOUD_NAME"] = "test-cloud"
os.environ["CLOUDINARY_API_KEY"] = "test-key-not-real"
os.environ["CLOUDINARY_API_SECRET"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from emailbuilder.config import Settings
from emailbuilder.database import TemplateStore
from emailbuilder.dependencies import get_media_uploader
from emailbuilder.main import create_app, lifespan
from emailbuilder.schemas.upload import UploadedImage
from emailbuilder.services.media_base import MediaUploader
from emailbuilder.services.template_repository import TemplateRepository


class FakeMediaUploader(MediaUploader):
    """
    In-memory MediaUploader: applies the real format allow-list, records
    every accepted upload, and returns predictable Cloudinary-style URLs.
    """

    def __init__(self, configured: bool = True, error: Optional[Exception] = None):
        self._configured = configured
        self.error = error
        self.uploads: List[Tuple[str, bytes]] = []

    @property
    def is_configured(self) -> bool:
        return self._configured

    async def upload(self, file: BinaryIO, filename: str) -> UploadedImage:
        extension = self.validate_format(filename)
        if self.error is not None:
            raise self.error
        self.uploads.append((filename, file.read()))
        n = len(self.uploads)
        return UploadedImage(
            url=f"https://res.cloudinary.com/test-cloud/image/upload/email-images/img{n}.{extension}",
            public_id=f"email-images/img{n}",
        )


# ══════════════════════════════════════════════════════════════════════════
# Settings & Store
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a fresh SQLite file, ignoring any .env file."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'templates.db'}",
        db_auto_create=True,
        cloudinary_cloud_name="test-cloud",
        cloudinary_api_key="test-key-not-real",
        cloudinary_api_secret="test-secret-not-real",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def store(test_settings):
    """A connected TemplateStore with the email_templates table created."""
    template_store = TemplateStore.from_settings(test_settings)
    await template_store.connect()
    yield template_store
    await template_store.dispose()


@pytest_asyncio.fixture
async def db_session(store):
    async with store.session() as session:
        yield session


@pytest.fixture
def repository(db_session) -> TemplateRepository:
    return TemplateRepository(db_session)


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for driving repository failure paths.

    Usage:
        mock_db_session.get.side_effect = OperationalError(...)
        await TemplateRepository(mock_db_session).get_by_id(uuid4())
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Application & HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_uploader() -> FakeMediaUploader:
    return FakeMediaUploader()


@pytest_asyncio.fixture
async def app(test_settings, fake_uploader):
    """A fresh app with its lifespan running and the media host faked."""
    application = create_app(test_settings)
    application.dependency_overrides[get_media_uploader] = lambda: fake_uploader
    async with lifespan(application):
        yield application


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Sample Data
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def sample_sections():
    """Section blocks shaped like the email-builder UI produces them."""
    return [
        {"type": "header", "content": {"text": "Welcome!", "level": 1}},
        {"type": "text", "value": "Hi", "style": {"color": "#333", "fontSize": 14}},
        {"type": "image", "src": "https://res.cloudinary.com/demo/image/upload/sample.jpg"},
        {"type": "button", "label": "Get started", "href": "https://example.com", "tags": ["cta", 1, None]},
    ]


@pytest.fixture
def sample_image_bytes():
    """Smallest well-formed PNG header followed by an IEND chunk."""
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
        b"\x00\x00\x00\x00IEND\xaeB`\x82"
    )
