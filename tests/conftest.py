"""
CampusDesk Test Configuration

Provides shared fixtures for async testing with:
- In-memory SQLite database
- Test client with async support
- A frozen clock for SLA evaluation
- Sample data factories for complaints, staff and notifications
"""
import os
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional
import uuid

# Keep the job scheduler out of test runs
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("ENABLE_STRUCTURED_LOGGING", "false")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from campusdesk.core.database import Base, get_db
from campusdesk.main import app
from campusdesk.models.complaint import Complaint, ComplaintCategory, ComplaintStatus
from campusdesk.models.staff import Staff, StaffRole
from campusdesk.models.notification import Notification, NotificationType


# Test database URL - SQLite in-memory with async support
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Frozen instant used by every SLA test
NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def naive(value: datetime) -> datetime:
    """Strip tzinfo the way DateTime columns store values."""
    return value.replace(tzinfo=None)


@pytest_asyncio.fixture(scope="function")
async def async_engine():
    """Create an async engine for testing with in-memory SQLite."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database override."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def frozen_clock(monkeypatch) -> datetime:
    """Pin the SLA clock to NOW."""
    monkeypatch.setattr("campusdesk.services.sla_service.utcnow", lambda: NOW)
    return NOW


# -----------------------------------------------------------------------------
# Data Factories
# -----------------------------------------------------------------------------

class StaffFactory:
    """Factory for creating test staff members."""

    @staticmethod
    async def create(
        db: AsyncSession,
        role: StaffRole = StaffRole.WARDEN,
        email: str = None,
        is_active: bool = True
    ) -> Staff:
        staff = Staff(
            id=str(uuid.uuid4()),
            user_id=f"user-{uuid.uuid4().hex[:8]}",
            name=f"Test {role.value.replace('_', ' ').title()}",
            email=email or f"staff-{uuid.uuid4().hex[:8]}@college.test",
            role=role,
            department="Test Department",
            is_active=is_active
        )
        db.add(staff)
        await db.commit()
        await db.refresh(staff)
        return staff


class ComplaintFactory:
    """Factory for creating test complaints."""

    @staticmethod
    async def create(
        db: AsyncSession,
        student_id: str = "student-1",
        title: str = "Test Complaint",
        category: ComplaintCategory = ComplaintCategory.HOSTEL,
        status: ComplaintStatus = ComplaintStatus.OPEN,
        due_in: Optional[timedelta] = timedelta(days=2),
        rating: Optional[int] = None,
        admin_id: Optional[str] = None,
        assigned_to: Optional[str] = None,
        updated_at: Optional[datetime] = None
    ) -> Complaint:
        complaint = Complaint(
            id=str(uuid.uuid4()),
            student_id=student_id,
            title=title,
            description="Test complaint description",
            category=category,
            status=status,
            due_date=naive(NOW + due_in) if due_in is not None else None,
            rating=rating,
            admin_id=admin_id,
            assigned_to=assigned_to,
            created_at=naive(NOW - timedelta(hours=1)),
            updated_at=naive(updated_at or NOW - timedelta(hours=1))
        )
        db.add(complaint)
        await db.commit()
        await db.refresh(complaint)
        return complaint


class NotificationFactory:
    """Factory for creating test notifications."""

    @staticmethod
    async def create(
        db: AsyncSession,
        user_id: str,
        complaint_id: Optional[str] = None,
        is_read: bool = False
    ) -> Notification:
        notification = Notification(
            id=str(uuid.uuid4()),
            user_id=user_id,
            complaint_id=complaint_id,
            title="Test Notification",
            message="Test notification message",
            type=NotificationType.STATUS_CHANGE,
            is_read=is_read
        )
        db.add(notification)
        await db.commit()
        await db.refresh(notification)
        return notification


# -----------------------------------------------------------------------------
# Common Fixtures
# -----------------------------------------------------------------------------

@pytest_asyncio.fixture
async def warden(db_session: AsyncSession) -> Staff:
    """Create an active warden."""
    return await StaffFactory.create(db_session, role=StaffRole.WARDEN)


@pytest_asyncio.fixture
async def open_complaint(db_session: AsyncSession) -> Complaint:
    """Create an open hostel complaint due in two days."""
    return await ComplaintFactory.create(db_session)


async def store_raw_due_date(db: AsyncSession, complaint_id: str, raw: str = "garbage"):
    """Overwrite a stored due date with text the ORM never writes itself."""
    await db.execute(
        text("UPDATE complaints SET due_date = :raw WHERE id = :id"),
        {"raw": raw, "id": complaint_id}
    )
    await db.commit()
    db.expire_all()


# Export factories for use in tests
__all__ = [
    "NOW",
    "naive",
    "store_raw_due_date",
    "StaffFactory",
    "ComplaintFactory",
    "NotificationFactory",
]
