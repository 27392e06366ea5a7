"""
Pass resolver: turns a gate scan into a booking plus its sibling bookings.

Resolution order:
  1. Exactly 10 digits  -> buyer phone; every booking on that phone
  2. Booking identifier -> that booking, siblings = all bookings on its phone
  3. Anything else      -> case-insensitive substring of buyer name

Unpaid bookings are still resolved and shown; payment is not enforced at
scan time.
"""

import re
from dataclasses import dataclass

from passgate.core.logging import get_logger
from passgate.core.metrics import record_search
from passgate.domain.entitlement import entitlement_for, totals
from passgate.domain.errors import EmptySearchError, NotFoundError
from passgate.models import Booking
from passgate.stores.interfaces import BookingStore

logger = get_logger(__name__)

PHONE_PATTERN = re.compile(r"[0-9]{10}")
# Legacy bookings with no stored capacity count as one person
LEGACY_DEFAULT_PEOPLE = 1


@dataclass
class ResolvedPass:
    primary: Booking
    bookings: list[Booking]
    total_people: int
    total_entered: int

    @property
    def can_enter(self) -> bool:
        return self.total_entered < self.total_people

    @property
    def unpaid_count(self) -> int:
        return sum(1 for b in self.bookings if b.payment_status != "Paid")


def booking_totals(booking: Booking) -> tuple[int, int]:
    """(capacity, entered) for one booking as shown at the gate."""
    ent = entitlement_for(booking, legacy_default=LEGACY_DEFAULT_PEOPLE)
    return ent.capacity, ent.entered


async def _siblings_of(store: BookingStore, booking: Booking) -> list[Booking]:
    if not booking.buyer_phone:
        return [booking]
    return await store.find_by_phone(booking.buyer_phone)


async def resolve_pass(store: BookingStore, search_value: str) -> ResolvedPass:
    """
    Resolve a scan to its primary booking and all related bookings.
    Raises NotFoundError when no strategy matches.
    """
    if search_value is None or not search_value.strip():
        raise EmptySearchError()

    primary = None
    if PHONE_PATTERN.fullmatch(search_value):
        strategy = "phone"
        bookings = await store.find_by_phone(search_value)
    else:
        by_identifier = await store.find_by_identifier(search_value)
        if by_identifier is not None:
            strategy = "identifier"
            primary = by_identifier
            bookings = await _siblings_of(store, by_identifier)
        else:
            strategy = "name"
            bookings = await store.search_by_name(search_value)

    if not bookings:
        record_search(found=False)
        logger.info("pass_not_found", strategy=strategy)
        raise NotFoundError(search_value)

    total_people, total_entered = totals(
        entitlement_for(b, legacy_default=LEGACY_DEFAULT_PEOPLE) for b in bookings
    )
    resolved = ResolvedPass(
        primary=primary if primary is not None else bookings[0],
        bookings=bookings,
        total_people=total_people,
        total_entered=total_entered,
    )

    record_search(found=True)
    logger.info(
        "pass_resolved",
        strategy=strategy,
        booking_id=resolved.primary.id,
        bookings=len(bookings),
        unpaid_bookings=resolved.unpaid_count,
        total_people=total_people,
        total_entered=total_entered,
    )
    return resolved


async def list_gate_bookings(store: BookingStore) -> list[Booking]:
    """All bookings for the gate list view, newest first."""
    return await store.list_bookings()
