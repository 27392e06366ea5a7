"""
Optimistic entry lock strategy - no lock taken.
Relies entirely on the booking version check in the store.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from passgate.services.interfaces.entry_lock import EntryLockStrategy


class OptimisticEntryLock(EntryLockStrategy):
    """
    No lock - every check-in goes straight to the conditional update.

    Use when:
    - Single gate or low scan rate per booking
    - No Redis available
    """

    @asynccontextmanager
    async def hold(self, booking_id: int) -> AsyncIterator[None]:
        yield
