"""
Test configuration and fixtures.

Provides:
- a fresh in-memory SQLite database per test (all tables created)
- fake collaborators: key-value cache, event publisher, auth provider,
  document storage
- factories for profiles, properties, applications, bookings and bills
"""
import os
import uuid
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["UPSTASH_REDIS_REST_URL"] = ""
os.environ["UPSTASH_REDIS_REST_TOKEN"] = ""
os.environ["RABBITMQ_URL"] = ""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from core.get_db import Base
from models.enums import (
    ApplicationStatus,
    BillStatus,
    BillType,
    NotificationType,
    PropertyStatus,
    UserRole,
    VerificationStatus,
)
from models.models import Application, Bill, Booking, Notification, Property, User
from repos.notification_repo import NotificationRepo


# =============================================================================
# Fakes
# =============================================================================


class FakeCache:
    def __init__(self):
        self.store = {}

    async def get_json(self, key):
        return self.store.get(key)

    async def set_json(self, key, value, ttl=3600):
        self.store[key] = value


class FakePublisher:
    def __init__(self):
        self.events = []

    async def publish(self, event_name, data):
        self.events.append((event_name, data))
        return True

    def names(self):
        return [name for name, _ in self.events]


class FakeAuthProvider:
    def __init__(self, fail=False):
        self.fail = fail
        self.revoked = []
        self.confirmed = []

    async def revoke_sessions(self, user_id):
        if self.fail:
            raise ConnectionError("auth provider unreachable")
        self.revoked.append(user_id)

    async def confirm_email(self, user_id):
        if self.fail:
            raise ConnectionError("auth provider unreachable")
        self.confirmed.append(user_id)


class FakeStorage:
    def __init__(self):
        self.deleted = []

    def signed_url(self, document_url, expires_in=None):
        return f"https://signed.example/{document_url}?ttl={expires_in or 300}"

    async def safe_delete(self, *document_urls):
        self.deleted.extend(url for url in document_urls if url)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db(engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
def cache():
    return FakeCache()


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def auth_provider():
    return FakeAuthProvider()


@pytest.fixture
def failing_auth_provider():
    return FakeAuthProvider(fail=True)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def failing_notification_insert(monkeypatch):
    """Every notification insert fails on the NOT NULL user_id column."""

    async def create(self, user_id, title, message, type=NotificationType.INFO, link="/"):
        self.db.add(
            Notification(
                user_id=None,
                title=title,
                message=message,
                type=type,
                link=link,
                is_read=False,
            )
        )
        await self.db.flush()

    monkeypatch.setattr(NotificationRepo, "create", create)


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def make_user(db):
    async def _make_user(
        role=UserRole.RENTER,
        verified=True,
        email=None,
        full_name="Test User",
        **overrides,
    ) -> User:
        values = {
            "id": uuid.uuid4(),
            "email": email or f"user-{uuid.uuid4().hex[:8]}@test.com",
            "full_name": full_name,
            "phone": "+2348012345678",
            "role": role,
            "email_verified": 1 if verified else 0,
            "phone_verified": 1 if verified else 0,
            "id_status": (
                VerificationStatus.VERIFIED if verified else VerificationStatus.UNVERIFIED
            ),
            "is_verified": 1 if verified else 0,
        }
        values.update(overrides)
        user = User(**values)
        db.add(user)
        await db.commit()
        return user

    return _make_user


@pytest.fixture
def make_property(db):
    async def _make_property(owner, title="Sunny Flat", **overrides) -> Property:
        values = {
            "owner_id": owner.id,
            "title": title,
            "address": "12 Palm Street",
            "price": Decimal("1200.00"),
            "bedrooms": 2,
            "bathrooms": 1,
            "status": PropertyStatus.AVAILABLE,
        }
        values.update(overrides)
        prop = Property(**values)
        db.add(prop)
        await db.commit()
        return prop

    return _make_property


@pytest.fixture
def make_application(db):
    async def _make_application(
        prop, renter, status=ApplicationStatus.PENDING, **overrides
    ) -> Application:
        application = Application(
            property_id=prop.id, renter_id=renter.id, status=status, **overrides
        )
        db.add(application)
        await db.commit()
        return application

    return _make_application


@pytest.fixture
def make_booking(db):
    async def _make_booking(prop, renter, is_active=True, **overrides) -> Booking:
        values = {
            "property_id": prop.id,
            "renter_id": renter.id,
            "start_date": date(2026, 1, 1),
            "end_date": date(2027, 1, 1),
            "is_active": is_active,
        }
        values.update(overrides)
        booking = Booking(**values)
        db.add(booking)
        await db.commit()
        return booking

    return _make_booking


@pytest.fixture
def make_bill(db):
    async def _make_bill(
        prop, renter, status=BillStatus.PENDING, due_date=date(2026, 2, 1), **overrides
    ) -> Bill:
        values = {
            "property_id": prop.id,
            "renter_id": renter.id,
            "type": BillType.RENT,
            "amount": Decimal("500.00"),
            "due_date": due_date,
            "status": status,
        }
        values.update(overrides)
        bill = Bill(**values)
        db.add(bill)
        await db.commit()
        return bill

    return _make_bill
