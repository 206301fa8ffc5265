"""Pytest fixtures for testing."""
import os

# Must be set before any app imports that trigger Settings validation.
# Tests run against in-memory SQLite and in dev mode (bypasses auth) regardless
# of local .env.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["DEV_MODE"] = "true"

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.config import Settings, get_settings  # noqa: E402
from models.base import Base  # noqa: E402
from models.user import User  # noqa: E402
from services.enrichment import EnrichmentPipeline  # noqa: E402
from services.metadata_extractor import MetadataCandidate, MetadataExtractor  # noqa: E402
from services.strategy import Strategy  # noqa: E402
from services.summary_generator import SummaryGenerator  # noqa: E402

STUB_TITLE = "Stub Page Title"
STUB_FAVICON = "https://cdn.example.com/favicon.ico"
STUB_SUMMARY = (
    "A stubbed page summary that is comfortably longer than fifty characters, "
    "used so tests never touch the network."
)


async def no_sleep(_delay: float) -> None:
    """Sleep replacement so retry backoff does not slow tests down."""


def make_settings(**overrides: object) -> Settings:
    """Settings for unit tests, independent of the cached application settings."""
    values: dict[str, object] = {"database_url": "sqlite+aiosqlite://", "dev_mode": True}
    values.update(overrides)
    return Settings(**values)


def build_stub_pipeline(settings: Settings | None = None) -> EnrichmentPipeline:
    """Pipeline whose only strategies return fixed metadata and summary."""
    settings = settings or make_settings()

    async def stub_metadata(_url: str) -> MetadataCandidate:
        return MetadataCandidate(title=STUB_TITLE, favicon=STUB_FAVICON)

    async def stub_summary(_url: str) -> str:
        return STUB_SUMMARY

    return EnrichmentPipeline(
        MetadataExtractor([Strategy("stub", stub_metadata)], settings, sleep=no_sleep),
        SummaryGenerator([Strategy("stub", stub_summary)], settings, sleep=no_sleep),
    )


@pytest.fixture
def settings() -> Settings:
    """Fresh Settings instance for unit tests."""
    return make_settings()


@pytest.fixture
def stub_pipeline() -> EnrichmentPipeline:
    """Network-free enrichment pipeline."""
    return build_stub_pipeline()


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """
    Create an in-memory SQLite engine for one test.

    StaticPool keeps a single connection so every session sees the same database;
    each test gets a fresh database, which provides isolation.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create an async session on the test database."""
    session_factory = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """A user owning the bookmarks created in service tests."""
    user = User(auth0_id="test|owner", email="owner@example.com")
    db_session.add(user)
    await db_session.flush()
    return user


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    """A second user, for ownership isolation checks."""
    user = User(auth0_id="test|other", email="other@example.com")
    db_session.add(user)
    await db_session.flush()
    return user


@pytest.fixture
async def client(
    db_session: AsyncSession,
    stub_pipeline: EnrichmentPipeline,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database session and enrichment overrides."""
    # Clear the settings cache so it picks up DATABASE_URL from environment
    get_settings.cache_clear()

    from api.dependencies import get_enrichment_pipeline
    from api.main import app
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_enrichment_pipeline] = lambda: stub_pipeline

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
