"""
Per-booking entry lock strategy interface.
Allows swapping between different check-in serialization approaches.
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager


class EntryLockStrategy(ABC):
    """
    Interface for serializing check-ins against one booking.

    Implementations:
    - OptimisticEntryLock: No lock, rely on the booking version check
    - RedisEntryLock: Redis lock keyed by booking id, shared across gate workers

    Locks are scoped to a single booking; check-ins against different
    bookings never wait on each other.
    """

    @abstractmethod
    def hold(self, booking_id: int) -> AsyncContextManager[None]:
        """
        Hold the lock for a booking for the duration of the block.

        Args:
            booking_id: Booking being checked in
        """
        pass
