"""Store interfaces (repository pattern).

The gate services only talk to these; the SQLAlchemy implementations live
in sql_store.py and can be swapped in tests.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence

from passgate.domain.entitlement import Entitlement
from passgate.models import Booking, EntryLog


class BookingStore(ABC):
    """Interface for booking reads and check-in writes."""

    @abstractmethod
    async def get_booking(self, booking_id: int) -> Optional[Booking]:
        """Return a booking by primary key, or None."""
        ...

    @abstractmethod
    async def find_by_phone(self, phone: str) -> list[Booking]:
        """Return every booking with exactly this buyer phone, in storage order."""
        ...

    @abstractmethod
    async def find_by_identifier(self, identifier: str) -> Optional[Booking]:
        """Return the booking whose booking code (or numeric id) equals identifier."""
        ...

    @abstractmethod
    async def search_by_name(self, fragment: str) -> list[Booking]:
        """Return bookings whose buyer name contains fragment, case-insensitive."""
        ...

    @abstractmethod
    async def list_bookings(self) -> list[Booking]:
        """Return all bookings, newest first."""
        ...

    @abstractmethod
    async def apply_entry(
        self,
        booking: Booking,
        expected_version: int,
        entitlement: Entitlement,
        scanned_by: str,
        checked_in_at: datetime,
    ) -> bool:
        """Write usage fields if the booking is still at expected_version.

        Returns False when another writer got there first; nothing is
        written in that case.
        """
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """Discard the current unit of work so the next read sees committed state."""
        ...


class EntryLogStore(ABC):
    """Append-only entry log."""

    @abstractmethod
    async def append(self, booking_id: int, scanned_by: str, people_entered: int, status: str) -> EntryLog:
        ...

    @abstractmethod
    async def recent(self, limit: int) -> Sequence[EntryLog]:
        """Return up to limit logs, most recent first."""
        ...
