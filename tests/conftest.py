import os

# Settings are read at import time, so the environment must be ready first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ACCESS_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("CACHE_BACKEND", "memory")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.exceptions import NotificationError
from app.crud.crud_session import SessionCache
from app.db.base import Base
from app.db.kv_store import InMemoryStore, get_kv_store
from app.db.session import get_db
from app.api.dependencies import get_notifier
from app.schemas.user import RegisterRequest
from app.services.auth_service import AuthService

# Register models with Base.metadata
from app.models.user import User  # noqa: F401
from app.models.product import Category, Supplier, Product  # noqa: F401

PASSWORD = "Secret123"


class FakeClock:
    """Monotonic-style clock the in-memory store reads TTLs from."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, *, minutes: float = 0, seconds: float = 0) -> None:
        self.now += minutes * 60 + seconds


class RecordingNotifier:
    def __init__(self):
        self.sent = []
        self.fail = False

    async def send_reset_code(self, email: str, code: str) -> None:
        if self.fail:
            raise NotificationError("smtp.example.com:587 connection refused")
        self.sent.append((email, code))

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kv_store(clock):
    return InMemoryStore(clock=clock)


@pytest.fixture
def session_cache(kv_store):
    return SessionCache(kv_store)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
async def db_engine():
    # In-memory SQLite shared through a single connection
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def auth_service(db_session, session_cache, notifier):
    return AuthService(db=db_session, session_cache=session_cache, notifier=notifier)


@pytest.fixture
async def registered_user(auth_service):
    return await auth_service.register(
        RegisterRequest(email="alice@example.com", password=PASSWORD, first_name="Alice", username="alice")
    )


@pytest.fixture
async def client(session_factory, kv_store, notifier):
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_kv_store] = lambda: kv_store
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
