"""
Shared test fixtures for the Garage Management API test suite.

Async throughout (aiosqlite + AsyncSession, httpx over ASGITransport).
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-0123456789abcdef0123456789abcdef"
os.environ["BCRYPT_ROUNDS"] = "10"
# CORS (JSON format)
os.environ["CORS_ORIGINS"] = '["http://testserver"]'

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.core.rate_limit import limiter
from app.core.security import create_access_token, get_password_hash
from app.db.base import Base
from app.db.session import enable_sqlite_foreign_keys
from app.main import app
from app.models.user import Role, User

# Separate engine for tests; the app's get_db dependency is overridden below
test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(test_engine)

TestingSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

PASSWORD = "Garage1!pass"


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables before usage and drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Each test starts with fresh login counters."""
    limiter.reset()
    yield
    limiter.reset()


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with TestingSessionLocal() as session:
        yield session


# ── Users & tokens ──────────────────────────────────────────────────
async def create_user(session: AsyncSession, username: str, role: Role = Role.USER) -> User:
    user = User(
        username=username,
        hashed_password=get_password_hash(PASSWORD),
        role=role.value,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


def bearer(user: User) -> dict[str, str]:
    token = create_access_token(user.id, Role(user.role))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "admin_one", Role.ADMIN)


@pytest.fixture
async def regular_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "user_one", Role.USER)


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    return bearer(admin_user)


@pytest.fixture
def user_headers(regular_user: User) -> dict[str, str]:
    return bearer(regular_user)


# ── Seed helpers ────────────────────────────────────────────────────
@pytest.fixture
async def garage(async_client: AsyncClient, admin_headers: dict[str, str]) -> dict:
    """One customer with one vehicle and two priced services."""
    customer = await async_client.post(
        "/api/customers",
        json={"first_name": "Jane", "last_name": "Doe", "email": "jane@example.com", "phone": "555-0100"},
        headers=admin_headers,
    )
    assert customer.status_code == 201, customer.text
    vehicle = await async_client.post(
        "/api/vehicles",
        json={
            "customer_id": customer.json()["id"],
            "make": "Toyota",
            "model": "Corolla",
            "year": 2018,
            "license_plate": "ABC-123",
            "vin": "1HGCM82633A004352",
        },
        headers=admin_headers,
    )
    assert vehicle.status_code == 201, vehicle.text
    oil = await async_client.post(
        "/api/services",
        json={"name": "Oil change", "description": "Synthetic oil and filter", "price": 59.99},
        headers=admin_headers,
    )
    brakes = await async_client.post(
        "/api/services",
        json={"name": "Brake inspection", "description": "Pads and discs", "price": 29.99},
        headers=admin_headers,
    )
    assert oil.status_code == 201 and brakes.status_code == 201
    return {
        "customer": customer.json(),
        "vehicle": vehicle.json(),
        "oil": oil.json(),
        "brakes": brakes.json(),
    }
