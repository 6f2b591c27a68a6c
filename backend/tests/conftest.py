"""
Pytest configuration and shared fixtures for backend tests.
"""

import hashlib
import hmac
import json
import os
import sys
import tempfile
import time
from pathlib import Path

# Test configuration must be in place before settings are first loaded
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("STORAGE_LOCAL_PATH", tempfile.mkdtemp(prefix="creatorvault-uploads-"))

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import AsyncMock

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Import after path is set
from adapters.payments.stripe_adapter import CheckoutSession, StripeAdapter, get_stripe_adapter
from adapters.storage.photo_storage import LocalStorageAdapter, get_storage_adapter
from api.dependencies import token_service
from infrastructure.database.models import Base, Photo, Subscription, User
from infrastructure.database.connection import get_db
from services.accounts import password_hasher

# Database URL for testing (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "TestPass123"
WEBHOOK_SECRET = os.environ["STRIPE_WEBHOOK_SECRET"]


@pytest.fixture
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


async def create_user(
    db: AsyncSession,
    email: str,
    name: str | None = None,
    is_creator: bool = False,
    subscription_price: Decimal | None = None,
    is_active: bool = True,
) -> User:
    user = User(
        email=email,
        password_hash=password_hasher.hash(TEST_PASSWORD),
        name=name,
        is_creator=is_creator,
        is_active=is_active,
        subscription_price=subscription_price,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_photo(
    db: AsyncSession,
    creator: User,
    is_premium: bool = False,
    description: str | None = None,
) -> Photo:
    photo = Photo(
        creator_id=creator.id,
        url=f"http://test/uploads/photos/{creator.id}-{time.perf_counter_ns()}.jpg",
        description=description,
        is_premium=is_premium,
    )
    db.add(photo)
    await db.commit()
    await db.refresh(photo)
    return photo


async def create_subscription(
    db: AsyncSession, subscriber: User, creator: User
) -> Subscription:
    subscription = Subscription(subscriber_id=subscriber.id, creator_id=creator.id)
    db.add(subscription)
    await db.commit()
    await db.refresh(subscription)
    return subscription


def make_auth_headers(user: User) -> dict:
    """Bearer headers for a user."""
    access_token = token_service.create_access_token(
        user_id=user.id, email=user.email, is_creator=user.is_creator
    )
    return {"Authorization": f"Bearer {access_token}"}


def sign_webhook(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header for a payload."""
    ts = str(int(time.time()) if timestamp is None else timestamp)
    signature = hmac.new(
        secret.encode("utf-8"), ts.encode("utf-8") + b"." + payload, hashlib.sha256
    ).hexdigest()
    return f"t={ts},v1={signature}"


def checkout_completed_payload(metadata: dict) -> bytes:
    return json.dumps(
        {
            "id": "evt_test_1",
            "type": "checkout.session.completed",
            "created": int(time.time()),
            "data": {"object": {"id": "cs_test_1", "metadata": metadata}},
        }
    ).encode("utf-8")


@pytest.fixture
async def creator_user(db_session: AsyncSession) -> User:
    """Creator account (A in the premium visibility scenarios)."""
    return await create_user(
        db_session,
        "creator@example.com",
        name="Creator One",
        is_creator=True,
        subscription_price=Decimal("9.99"),
    )


@pytest.fixture
async def second_creator(db_session: AsyncSession) -> User:
    return await create_user(
        db_session,
        "creator2@example.com",
        name="Creator Two",
        is_creator=True,
        subscription_price=Decimal("4.50"),
    )


@pytest.fixture
async def subscriber_user(db_session: AsyncSession) -> User:
    """Regular account that subscribes in tests (B)."""
    return await create_user(db_session, "fan@example.com", name="Fan")


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    """Regular account without any subscription (C)."""
    return await create_user(db_session, "other@example.com")


@pytest.fixture
def creator_headers(creator_user: User) -> dict:
    return make_auth_headers(creator_user)


@pytest.fixture
def subscriber_headers(subscriber_user: User) -> dict:
    return make_auth_headers(subscriber_user)


@pytest.fixture
def other_headers(other_user: User) -> dict:
    return make_auth_headers(other_user)


@pytest.fixture
def stripe_adapter() -> StripeAdapter:
    """Stripe adapter with the network call replaced."""
    adapter = StripeAdapter(secret_key="sk_test_dummy", webhook_secret=WEBHOOK_SECRET)
    adapter.create_checkout_session = AsyncMock(
        return_value=CheckoutSession(
            id="cs_test_123",
            url="https://checkout.stripe.com/c/pay/cs_test_123",
        )
    )
    return adapter


@pytest.fixture
def storage_adapter(tmp_path) -> LocalStorageAdapter:
    return LocalStorageAdapter(base_path=str(tmp_path / "uploads"), base_url="http://test")


@pytest.fixture
async def async_client(
    db_session: AsyncSession,
    stripe_adapter: StripeAdapter,
    storage_adapter: LocalStorageAdapter,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    # Import app here to avoid circular imports
    from main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_stripe_adapter] = lambda: stripe_adapter
    app.dependency_overrides[get_storage_adapter] = lambda: storage_adapter

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# Factory fixtures
# ============================================================================


@pytest.fixture
def user_factory(db_session: AsyncSession):
    async def _create(email: str, **kwargs) -> User:
        return await create_user(db_session, email, **kwargs)

    return _create


@pytest.fixture
def photo_factory(db_session: AsyncSession):
    async def _create(creator: User, is_premium: bool = False, description: str | None = None) -> Photo:
        return await create_photo(db_session, creator, is_premium, description)

    return _create


@pytest.fixture
def subscription_factory(db_session: AsyncSession):
    async def _create(subscriber: User, creator: User) -> Subscription:
        return await create_subscription(db_session, subscriber, creator)

    return _create


@pytest.fixture
def auth_headers_for():
    return make_auth_headers


@pytest.fixture
def webhook_signer():
    return sign_webhook


@pytest.fixture
def checkout_event():
    return checkout_completed_payload


@pytest.fixture
def account_password() -> str:
    """Password of every account created by the fixtures above."""
    return TEST_PASSWORD
