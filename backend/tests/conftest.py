"""
Pytest fixtures for test database, client, and seeded bookings.

Uses an in-memory SQLite database (aiosqlite), created and dropped per
test for isolation and speed.
"""

import os

os.environ.setdefault("ADMIN_PIN", "4321")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENTRY_LOCK_STRATEGY", "optimistic")

from typing import AsyncGenerator, Awaitable, Callable

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from passgate.main import app
from passgate.db.base import Base
from passgate.db.session import get_db
from passgate.models import Booking, BookingPass, EntryLog, PassType

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
ADMIN_PIN = os.environ["ADMIN_PIN"]

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def pass_type(db_session: AsyncSession) -> PassType:
    pass_type = PassType(name="General", price=500, max_people=4)
    db_session.add(pass_type)
    await db_session.commit()
    return pass_type


BookingFactory = Callable[..., Awaitable[Booking]]


@pytest_asyncio.fixture
async def make_booking(db_session: AsyncSession, pass_type: PassType) -> BookingFactory:
    """
    Create bookings on demand.

    Pass `passes=[(type_name, people_count, people_entered), ...]` for the
    pass-list shape; otherwise the booking uses the flat counters.
    """
    counter = {"n": 0}

    async def _make(
        buyer_name: str = "Asha Rao",
        buyer_phone: str = "9876543210",
        total_people: int = 4,
        people_entered: int = 0,
        payment_status: str = "Paid",
        passes=None,
        booking_code=None,
    ) -> Booking:
        counter["n"] += 1
        booking = Booking(
            booking_code=booking_code or f"BK-{counter['n']:04d}",
            pass_type_id=pass_type.id,
            buyer_name=buyer_name,
            buyer_phone=buyer_phone,
            total_people=total_people,
            people_entered=people_entered,
            total_amount=500 * total_people,
            payment_status=payment_status,
            payment_mode="UPI",
        )
        if passes:
            booking.passes = [
                BookingPass(position=i, pass_type_name=name, people_count=count, people_entered=entered)
                for i, (name, count, entered) in enumerate(passes)
            ]
        db_session.add(booking)
        await db_session.commit()
        booking = await reload_booking(db_session, booking.id)
        # Detach so a request's rollback on the shared session cannot expire it
        db_session.expunge(booking)
        return booking

    return _make


async def reload_booking(db_session: AsyncSession, booking_id: int) -> Booking:
    """Re-read a booking from the database, discarding in-memory state."""
    result = await db_session.execute(
        select(Booking).where(Booking.id == booking_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def count_logs(db_session: AsyncSession, booking_id: int) -> int:
    result = await db_session.execute(
        select(func.count()).select_from(EntryLog).where(EntryLog.booking_id == booking_id)
    )
    return result.scalar_one()
