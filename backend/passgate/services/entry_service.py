"""
Entry accumulator: admits people against a booking's entitlement.

CONCURRENCY STRATEGY: Optimistic Locking with Retry
====================================================

Problem:
  Two gates scan the same group booking at the same moment.
  Both read people_entered=3 of 4, both add 1, both succeed.
  Result: 5 people in on a 4-person pass.

Solution:
  1. Read the booking and its version
  2. Run the capacity checks against what was read
  3. UPDATE bookings SET ..., version = version + 1
     WHERE id = :booking_id AND version = :read_version
  4. If rows_affected == 0, another check-in committed first -> roll back,
     re-read and re-check

  The checks always run against the state the write is conditioned on, so
  the capacity invariant holds for concurrent callers. Only check-ins on
  the same booking contend; different bookings never share a version.

  An optional EntryLockStrategy (Redis) serializes same-booking check-ins
  across workers up front so the retry path is rarely taken.

Every rejected check-in raises before anything is written. A successful
one writes the booking and exactly one EntryLog in the request transaction.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from passgate.core.logging import get_logger
from passgate.core.metrics import entry_latency, entry_retries, record_entry_attempt
from passgate.core.security import verify_admin_pin
from passgate.domain.entitlement import EntryStatus, apply_entry, classify_status, entitlement_for, pass_type_label
from passgate.domain.errors import (
    BookingNotFoundError,
    CapacityExceededError,
    EntryConflictError,
    FullyUtilizedError,
    InvalidOverrideError,
)
from passgate.models import Booking, EntryLog
from passgate.services.interfaces.entry_lock import EntryLockStrategy
from passgate.services.strategy_factory import get_entry_lock
from passgate.stores.interfaces import BookingStore, EntryLogStore

logger = get_logger(__name__)

MAX_RETRY_ATTEMPTS = 3


@dataclass
class AdmissionResult:
    booking: Booking
    pass_type: str
    total_allowed: int
    total_entered: int
    this_entry: int
    status: EntryStatus
    override_used: bool = False

    @property
    def remaining(self) -> int:
        return self.total_allowed - self.total_entered

    @property
    def fully_utilized(self) -> bool:
        return self.total_entered >= self.total_allowed


async def mark_entry(
    bookings: BookingStore,
    logs: EntryLogStore,
    booking_id: int,
    people_entered: int,
    scanned_by: str,
    admin_override: bool = False,
    admin_pin: Optional[str] = None,
    lock: Optional[EntryLockStrategy] = None,
) -> AdmissionResult:
    """
    Admit `people_entered` more people on a booking.

    Without an override the running total may never pass the booking's
    capacity. With a valid admin PIN the capacity checks are skipped.
    Retries up to MAX_RETRY_ATTEMPTS on version conflicts.
    """
    if people_entered < 0:
        raise ValueError("people_entered cannot be negative")

    if admin_override and not verify_admin_pin(admin_pin):
        record_entry_attempt("invalid_pin")
        logger.warning("entry_rejected", booking_id=booking_id, reason="invalid_pin", scanned_by=scanned_by)
        raise InvalidOverrideError()

    lock = lock or get_entry_lock()

    with entry_latency.time():
        async with lock.hold(booking_id):
            for attempt in range(1, MAX_RETRY_ATTEMPTS + 1):
                result = await _attempt_entry(
                    bookings, logs, booking_id, people_entered, scanned_by, admin_override
                )
                if result is not None:
                    return result

                entry_retries.inc()
                logger.info(
                    "entry_retry",
                    booking_id=booking_id,
                    attempt=attempt,
                    reason="version_conflict",
                )
                await bookings.rollback()

    record_entry_attempt("conflict")
    raise EntryConflictError(booking_id)


async def _attempt_entry(
    bookings: BookingStore,
    logs: EntryLogStore,
    booking_id: int,
    count: int,
    scanned_by: str,
    admin_override: bool,
) -> Optional[AdmissionResult]:
    """One read-check-write pass. Returns None when the conditional write lost the race."""
    booking = await bookings.get_booking(booking_id)
    if booking is None:
        record_entry_attempt("not_found")
        raise BookingNotFoundError(booking_id)

    entitlement = entitlement_for(booking)
    capacity = entitlement.capacity
    current = entitlement.entered

    if current >= capacity and not admin_override:
        record_entry_attempt("fully_utilized")
        logger.info(
            "entry_rejected",
            booking_id=booking_id,
            reason="fully_utilized",
            total_allowed=capacity,
            already_entered=current,
        )
        raise FullyUtilizedError(capacity, current)

    new_total = current + count
    if new_total > capacity and not admin_override:
        record_entry_attempt("exceeded")
        logger.info(
            "entry_rejected",
            booking_id=booking_id,
            reason="capacity_exceeded",
            requested=count,
            remaining=capacity - current,
        )
        raise CapacityExceededError(count, capacity, current)

    updated = apply_entry(entitlement, count)
    checked_in_at = booking.checked_in_at or datetime.now(timezone.utc)

    applied = await bookings.apply_entry(
        booking,
        expected_version=booking.version,
        entitlement=updated,
        scanned_by=scanned_by,
        checked_in_at=checked_in_at,
    )
    if not applied:
        return None

    status = classify_status(new_total, capacity)
    await logs.append(booking.id, scanned_by, count, status.value)

    override_used = admin_override and new_total > capacity
    record_entry_attempt("override" if override_used else "admitted", admitted_count=count)
    logger.info(
        "entry_marked",
        booking_id=booking.id,
        scanned_by=scanned_by,
        this_entry=count,
        total_entered=new_total,
        total_allowed=capacity,
        status=status.value,
        override=override_used,
    )

    return AdmissionResult(
        booking=booking,
        pass_type=pass_type_label(booking),
        total_allowed=capacity,
        total_entered=new_total,
        this_entry=count,
        status=status,
        override_used=override_used,
    )


async def get_entry_logs(logs: EntryLogStore, limit: int) -> Sequence[EntryLog]:
    """Most recent entry logs first."""
    return await logs.recent(limit)
