"""
Tests for concurrent check-in handling: version-conflict retries and per-booking locks.
"""

import asyncio
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from passgate.db.base import Base
from passgate.models import Booking
from passgate.domain.entitlement import FlatEntitlement, apply_entry, entitlement_for
from passgate.domain.errors import CapacityExceededError, EntryConflictError, FullyUtilizedError
from passgate.services.entry_service import MAX_RETRY_ATTEMPTS, mark_entry
from passgate.services.interfaces.optimistic_lock import OptimisticEntryLock
from passgate.services.lock_service import RedisEntryLock
from passgate.services.strategy_factory import get_entry_lock_strategy
from passgate.stores.sql_store import SqlBookingStore, SqlEntryLogStore
from conftest import count_logs, reload_booking


class RacingBookingStore(SqlBookingStore):
    """Simulates other gates committing between our read and our write."""

    def __init__(self, db, competing_entries: int, lose_times: int):
        super().__init__(db)
        self.competing_entries = competing_entries
        self.lose_times = lose_times
        self.attempts = 0

    async def apply_entry(self, booking, expected_version, entitlement, scanned_by, checked_in_at):
        self.attempts += 1
        if self.attempts <= self.lose_times:
            # Another gate admits people and bumps the version first
            competitor = SqlBookingStore(self.db)
            current = await competitor.get_booking(booking.id)
            await competitor.apply_entry(
                current,
                expected_version=current.version,
                entitlement=apply_entry(entitlement_for(current), self.competing_entries),
                scanned_by="gate-other",
                checked_in_at=checked_in_at,
            )
            await self.db.commit()
        return await super().apply_entry(booking, expected_version, entitlement, scanned_by, checked_in_at)


@pytest.mark.asyncio
async def test_version_conflict_retries_and_rechecks(db_session, make_booking):
    """The losing check-in re-reads and accounts for what the winner admitted."""
    booking = await make_booking(total_people=4)
    store = RacingBookingStore(db_session, competing_entries=1, lose_times=1)

    result = await mark_entry(
        store, SqlEntryLogStore(db_session), booking.id, 2, "gate-1", lock=OptimisticEntryLock()
    )
    await db_session.commit()

    assert store.attempts == 2
    assert result.total_entered == 3
    stored = await reload_booking(db_session, booking.id)
    assert stored.people_entered == 3
    assert await count_logs(db_session, booking.id) == 1


@pytest.mark.asyncio
async def test_conflict_recheck_enforces_capacity(db_session, make_booking):
    """If the winner used up the pass, the retry is rejected instead of overcounting."""
    booking = await make_booking(total_people=4)
    store = RacingBookingStore(db_session, competing_entries=4, lose_times=1)

    with pytest.raises(FullyUtilizedError):
        await mark_entry(
            store, SqlEntryLogStore(db_session), booking.id, 1, "gate-1", lock=OptimisticEntryLock()
        )

    stored = await reload_booking(db_session, booking.id)
    assert stored.people_entered == 4
    assert await count_logs(db_session, booking.id) == 0


@pytest.mark.asyncio
async def test_conflict_retries_exhausted(db_session, make_booking):
    booking = await make_booking(total_people=100)
    store = RacingBookingStore(db_session, competing_entries=1, lose_times=MAX_RETRY_ATTEMPTS)

    with pytest.raises(EntryConflictError):
        await mark_entry(
            store, SqlEntryLogStore(db_session), booking.id, 1, "gate-1", lock=OptimisticEntryLock()
        )

    assert store.attempts == MAX_RETRY_ATTEMPTS
    assert await count_logs(db_session, booking.id) == 0


@pytest.mark.asyncio
async def test_stale_version_write_is_refused(db_session, make_booking):
    booking = await make_booking(total_people=4)
    store = SqlBookingStore(db_session)
    applied = await store.apply_entry(
        booking,
        expected_version=booking.version + 1,
        entitlement=FlatEntitlement(4, 2),
        scanned_by="gate-1",
        checked_in_at=datetime.now(timezone.utc),
    )
    assert applied is False
    stored = await reload_booking(db_session, booking.id)
    assert stored.people_entered == 0


class FakeLock:
    def __init__(self, owner, key):
        self.owner = owner
        self.key = key

    async def acquire(self):
        if self.owner.fail:
            raise RedisConnectionError("redis down")
        self.owner.events.append(("acquire", self.key))
        return True

    async def release(self):
        self.owner.events.append(("release", self.key))


class FakeRedis:
    def __init__(self, fail=False):
        self.fail = fail
        self.events = []
        self.lock_kwargs = None

    def lock(self, name, **kwargs):
        self.lock_kwargs = kwargs
        return FakeLock(self, name)


@pytest.mark.asyncio
async def test_redis_lock_is_scoped_to_booking():
    fake = FakeRedis()

    async def factory():
        return fake

    lock = RedisEntryLock(client_factory=factory, timeout=3, blocking_timeout=1)
    async with lock.hold(7):
        fake.events.append(("body", None))

    assert fake.events == [
        ("acquire", "gate:booking:7"),
        ("body", None),
        ("release", "gate:booking:7"),
    ]
    assert fake.lock_kwargs == {"timeout": 3, "blocking_timeout": 1}


@pytest.mark.asyncio
async def test_redis_lock_fails_open():
    fake = FakeRedis(fail=True)

    async def factory():
        return fake

    ran = False
    async with RedisEntryLock(client_factory=factory).hold(1):
        ran = True

    assert ran
    assert fake.events == []


@pytest.mark.asyncio
async def test_redis_lock_without_client():
    async def factory():
        return None

    async with RedisEntryLock(client_factory=factory).hold(1):
        pass


@pytest.mark.asyncio
async def test_redis_lock_released_on_error():
    fake = FakeRedis()

    async def factory():
        return fake

    with pytest.raises(RuntimeError):
        async with RedisEntryLock(client_factory=factory).hold(3):
            raise RuntimeError("boom")

    assert fake.events[-1] == ("release", "gate:booking:3")


def test_default_strategy_is_optimistic():
    assert isinstance(get_entry_lock_strategy(), OptimisticEntryLock)


@pytest_asyncio.fixture
async def shared_engine(tmp_path):
    """File-backed database so each session gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'gate.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()



class GateStore(SqlBookingStore):
    """Holds the first write until every gate has read the booking, optionally until `wait_for` is set."""

    def __init__(self, db, reads: dict, name: str, wait_for=None):
        super().__init__(db)
        self.reads = reads
        self.name = name
        self.wait_for = wait_for
        self.writes = 0

    async def apply_entry(self, booking, expected_version, entitlement, scanned_by, checked_in_at):
        self.writes += 1
        if self.writes == 1:
            self.reads[self.name].set()
            for seen in self.reads.values():
                await seen.wait()
            if self.wait_for is not None:
                await self.wait_for.wait()
        return await super().apply_entry(booking, expected_version, entitlement, scanned_by, checked_in_at)


async def _gate_checkin(sessionmaker, store_factory, booking_id: int, count: int, gate: str, done=None):
    async with sessionmaker() as session:
        try:
            result = await mark_entry(
                store_factory(session), SqlEntryLogStore(session), booking_id, count, gate,
                lock=OptimisticEntryLock(),
            )
            await session.commit()
            return result
        except Exception:
            await session.rollback()
            raise
        finally:
            if done is not None:
                done.set()


@pytest.mark.asyncio
async def test_simultaneous_gates_never_exceed_capacity(shared_engine):
    """Two gates read the same version; the second write loses, re-reads and is refused."""
    sessionmaker = async_sessionmaker(shared_engine, class_=AsyncSession, expire_on_commit=False)
    async with sessionmaker() as session:
        booking = Booking(booking_code="BK-RACE", buyer_name="Asha Rao", buyer_phone="9876543210", total_people=3)
        session.add(booking)
        await session.commit()
        booking_id = booking.id

    reads = {"gate-1": asyncio.Event(), "gate-2": asyncio.Event()}
    first_done = asyncio.Event()
    stores = {}

    def store_for(name, wait_for=None):
        def factory(session):
            stores[name] = GateStore(session, reads, name, wait_for)
            return stores[name]
        return factory

    outcomes = await asyncio.wait_for(
        asyncio.gather(
            _gate_checkin(sessionmaker, store_for("gate-1"), booking_id, 2, "gate-1", done=first_done),
            _gate_checkin(sessionmaker, store_for("gate-2", first_done), booking_id, 2, "gate-2"),
            return_exceptions=True,
        ),
        timeout=10,
    )

    first, second = outcomes
    assert first.total_entered == 2
    assert isinstance(second, CapacityExceededError)
    assert stores["gate-2"].writes == 1

    async with sessionmaker() as session:
        stored = await reload_booking(session, booking_id)
        assert stored.people_entered == 2
        assert stored.version == 2
        assert await count_logs(session, booking_id) == 1
