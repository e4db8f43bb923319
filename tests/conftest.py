"""Shared test fixtures."""

import os

# Settings are read once at import time, so the environment goes first
os.environ.setdefault("RB_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("RB_DEBUG", "true")
os.environ.setdefault("RB_ADMIN_API_KEY", "studio-admin-key")
os.environ.setdefault("RB_RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RB_RAZORPAY_KEY_SECRET", "rzp_test_secret")
os.environ.setdefault("RB_RAZORPAY_WEBHOOK_SECRET", "rzp_webhook_secret")

from datetime import date, timedelta  # noqa: E402
from unittest.mock import AsyncMock, patch  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from reelbook.core.auth import create_access_token, hash_password  # noqa: E402
from reelbook.core.database import get_db  # noqa: E402
from reelbook.main import app  # noqa: E402
from reelbook.models import Base, Service, User, UserRole  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture
async def session_factory():
    """A fresh in-memory database per test.

    The engine is built inside the test's event loop; a module-level engine
    would hand out connections bound to a previous loop.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def mock_send_email():
    """No test talks to an SMTP server."""
    with patch("reelbook.services.notifications.send_email", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture
async def services(session_factory):
    """Two bookable packages and one retired one, keyed by slug."""
    async with session_factory() as db:
        rows = [
            Service(
                name="wedding-basic",
                display_name="Basic Wedding Package",
                price=25000,
                duration_hours=6,
                features=["6 hours coverage", "300+ edited photos"],
            ),
            Service(
                name="birthday-party",
                display_name="Birthday Party",
                price=15000,
                duration_hours=3,
                features=["3 hours coverage"],
            ),
            Service(name="legacy-album", display_name="Legacy Album", price=5000, is_active=False),
        ]
        db.add_all(rows)
        await db.commit()
        return {s.name: s for s in rows}


async def _create_user(session_factory, name: str, email: str, role: UserRole = UserRole.CUSTOMER) -> User:
    async with session_factory() as db:
        user = User(name=name, email=email, hashed_password=hash_password(PASSWORD), role=role)
        db.add(user)
        await db.commit()
        return user


@pytest.fixture
async def customer(session_factory):
    return await _create_user(session_factory, "Priya Sharma", "priya.sharma@gmail.com")


@pytest.fixture
async def other_customer(session_factory):
    return await _create_user(session_factory, "Rahul Verma", "rahul.verma@gmail.com")


@pytest.fixture
async def admin_user(session_factory):
    return await _create_user(session_factory, "Studio Admin", "admin@reelbook.studio", UserRole.ADMIN)


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}


@pytest.fixture
def customer_headers(customer):
    return bearer(customer)


@pytest.fixture
def other_headers(other_customer):
    return bearer(other_customer)


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture
def admin_key_headers():
    return {"admin-key": "studio-admin-key"}


@pytest.fixture
def event_date():
    return date.today() + timedelta(days=60)


@pytest.fixture
def booking_payload(event_date):
    return {
        "name": "Priya Sharma",
        "email": "priya.sharma@gmail.com",
        "phone": "9876543210",
        "service": "wedding-basic",
        "price": 25000,
        "date": event_date.isoformat(),
        "time": "10:00",
        "location": "Taj Palace, New Delhi",
    }
