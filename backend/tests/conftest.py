from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from qcstudio.api.deps import (
    get_app_settings,
    get_db_session,
    get_extraction_service,
    get_media_storage,
    get_review_session,
    get_ws_manager,
)
from qcstudio.config import Settings
from qcstudio.main import create_app
from qcstudio.models import config_item  # noqa: F401
from qcstudio.services.media_storage import MediaStorage
from qcstudio.services.review_session import ReviewSession
from tests.fixtures import FakeExtractionService, FakeGenerationService, StubWsManager


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        static_dir=str(tmp_path / "static"),
        generation_base_url="http://generator.test",
        generation_max_retries=0,
    )


@pytest.fixture()
def storage(test_settings: Settings) -> MediaStorage:
    storage = MediaStorage(test_settings.static_path())
    storage.ensure_dirs()
    return storage


@pytest.fixture()
def generator() -> FakeGenerationService:
    return FakeGenerationService()


@pytest.fixture()
def extraction() -> FakeExtractionService:
    return FakeExtractionService()


@pytest.fixture()
def review_session(generator: FakeGenerationService, storage: MediaStorage, test_settings: Settings) -> ReviewSession:
    return ReviewSession(generator, storage=storage, placeholder_prompt=test_settings.placeholder_prompt)


@pytest_asyncio.fixture(scope="function")
async def test_session(test_settings: Settings) -> AsyncGenerator[AsyncSession, None]:
    engine = create_async_engine(test_settings.database_url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture()
def ws_manager() -> StubWsManager:
    return StubWsManager()


@pytest_asyncio.fixture(scope="function")
async def app(
    test_session: AsyncSession,
    test_settings: Settings,
    ws_manager: StubWsManager,
    review_session: ReviewSession,
    storage: MediaStorage,
    extraction: FakeExtractionService,
):
    app = create_app()

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        yield test_session

    async def override_get_settings() -> Settings:
        return test_settings

    async def override_get_ws() -> StubWsManager:
        return ws_manager

    async def override_get_review_session() -> ReviewSession:
        return review_session

    async def override_get_storage() -> MediaStorage:
        return storage

    async def override_get_extraction() -> FakeExtractionService:
        return extraction

    app.dependency_overrides[get_db_session] = override_get_session
    app.dependency_overrides[get_app_settings] = override_get_settings
    app.dependency_overrides[get_ws_manager] = override_get_ws
    app.dependency_overrides[get_review_session] = override_get_review_session
    app.dependency_overrides[get_media_storage] = override_get_storage
    app.dependency_overrides[get_extraction_service] = override_get_extraction
    return app


@pytest_asyncio.fixture(scope="function")
async def async_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@asynccontextmanager
async def _no_lifespan(_: object):
    yield


@pytest.fixture()
def ws_client():
    app = create_app()
    app.router.lifespan_context = _no_lifespan
    return TestClient(app)
