"""
Test configuration and fixtures.
Uses SQLite in-memory for fast tests. Outbound replay traffic goes through httpx.MockTransport.
"""
import pytest
from unittest.mock import patch
import httpx
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.dialects.postgresql import JSONB

from hookrelay.config import Settings, get_settings
from hookrelay.database import Base, get_db
from hookrelay.api.deps import get_replay_transport
from hookrelay.services.store import WebhookStore
import hookrelay.models  # noqa: F401  (register tables on Base.metadata)


# Register JSONB as JSON for SQLite compatibility in tests
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"


@pytest.fixture
async def db():
    """In-memory SQLite database for tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def store(db):
    return WebhookStore(db)


@pytest.fixture
def settings():
    return Settings(
        app_env="test",
        public_base_url="https://relay.example.com",
        log_level="WARNING",
        database_url="sqlite+aiosqlite:///:memory:",
        stripe_tolerance_seconds=300,
        replay_timeout_seconds=2.0,
        replay_response_max_bytes=1024,
        replay_marker="webhook-inbox",
        sentry_dsn="",
    )


class ReplayTarget:
    """Records requests and answers with a configurable response or error."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body = b"ok"
        self.headers: dict[str, str] = {}
        self.error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(status_code=self.status_code, headers=self.headers, content=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def replay_target():
    return ReplayTarget()


@pytest.fixture
async def api_client(db, settings, replay_target):
    """httpx client bound to the ASGI app with the test session, settings and replay target."""
    from hookrelay.main import create_app

    with patch("hookrelay.main.configure_structured_logging"):
        app = create_app()

    async def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_replay_transport] = lambda: replay_target.transport

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
