"""SQLAlchemy implementation of the gate stores.

Check-in writes use optimistic locking on `Booking.version`:

  UPDATE bookings SET people_entered = :n, ..., version = version + 1
  WHERE id = :id AND version = :read_version

Zero rows affected means another check-in committed first. Sub-pass rows
are written only after the version update succeeded, in the same
transaction, so the booking row lock covers them too.
"""

from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from passgate.domain.entitlement import Entitlement, PassListEntitlement
from passgate.models import Booking, BookingPass, EntryLog
from passgate.stores.interfaces import BookingStore, EntryLogStore
from passgate.core.logging import get_logger
from passgate.db.base import MAX_ROW_ID

logger = get_logger(__name__)


class SqlBookingStore(BookingStore):
    """Booking store backed by the request's AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_booking(self, booking_id: int) -> Optional[Booking]:
        if not 0 < booking_id <= MAX_ROW_ID:
            return None
        # populate_existing: check-ins must see committed counters, not a stale identity map
        result = await self.db.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_by_phone(self, phone: str) -> list[Booking]:
        # Uses ix_bookings_buyer_phone
        result = await self.db.execute(
            select(Booking).where(Booking.buyer_phone == phone).order_by(Booking.id.asc())
        )
        return list(result.scalars().all())

    async def find_by_identifier(self, identifier: str) -> Optional[Booking]:
        result = await self.db.execute(select(Booking).where(Booking.booking_code == identifier))
        booking = result.scalar_one_or_none()
        if booking is None and identifier.isascii() and identifier.isdigit():
            booking = await self.get_booking(int(identifier))
        return booking

    async def search_by_name(self, fragment: str) -> list[Booking]:
        result = await self.db.execute(
            select(Booking)
            .where(func.lower(Booking.buyer_name).contains(fragment.lower(), autoescape=True))
            .order_by(Booking.id.asc())
        )
        return list(result.scalars().all())

    async def list_bookings(self) -> list[Booking]:
        result = await self.db.execute(
            select(Booking).order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return list(result.scalars().all())

    async def apply_entry(
        self,
        booking: Booking,
        expected_version: int,
        entitlement: Entitlement,
        scanned_by: str,
        checked_in_at: datetime,
    ) -> bool:
        total_entered = entitlement.entered
        values = {
            "people_entered": total_entered,
            "checked_in": total_entered > 0,
            "checked_in_at": checked_in_at,
            "scanned_by": scanned_by,
        }
        result = await self.db.execute(
            update(Booking)
            .where(Booking.id == booking.id, Booking.version == expected_version)
            .values(version=Booking.version + 1, **values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return False

        if isinstance(entitlement, PassListEntitlement):
            for row, sub in zip(booking.passes, entitlement.passes):
                if row.people_entered == sub.people_entered:
                    continue
                await self.db.execute(
                    update(BookingPass)
                    .where(BookingPass.id == row.id)
                    .values(people_entered=sub.people_entered)
                    .execution_options(synchronize_session=False)
                )
                set_committed_value(row, "people_entered", sub.people_entered)

        for key, value in values.items():
            set_committed_value(booking, key, value)
        set_committed_value(booking, "version", expected_version + 1)
        return True

    async def rollback(self) -> None:
        await self.db.rollback()


class SqlEntryLogStore(EntryLogStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(self, booking_id: int, scanned_by: str, people_entered: int, status: str) -> EntryLog:
        log = EntryLog(
            booking_id=booking_id,
            scanned_by=scanned_by,
            people_entered=people_entered,
            status=status,
            scanned_at=datetime.now(timezone.utc),
        )
        self.db.add(log)
        await self.db.flush()
        return log

    async def recent(self, limit: int) -> Sequence[EntryLog]:
        result = await self.db.execute(
            select(EntryLog).order_by(EntryLog.scanned_at.desc(), EntryLog.id.desc()).limit(limit)
        )
        return list(result.scalars().all())
