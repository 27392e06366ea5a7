"""
Gate entry endpoints: pass search, check-in, entry logs.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from passgate.core.config import get_settings
from passgate.core.logging import bind_scan_context
from passgate.db.session import get_db
from passgate.domain.entitlement import pass_type_label
from passgate.schemas.gate import (
    AdmissionSnapshot,
    CheckinRequest,
    CheckinResponse,
    EntryLogResponse,
    GateBookingSummary,
    ResolvedBookingView,
    SearchRequest,
    SearchResponse,
    SiblingBookingView,
)
from passgate.services.entry_service import get_entry_logs, mark_entry
from passgate.services.resolver_service import booking_totals, list_gate_bookings, resolve_pass
from passgate.stores.sql_store import SqlBookingStore, SqlEntryLogStore

router = APIRouter(prefix="/entry", tags=["Gate Entry"])


@router.post("/search", response_model=SearchResponse)
async def search_pass(payload: SearchRequest, db: AsyncSession = Depends(get_db)):
    """
    Look up a pass by 10-digit phone, booking ID or buyer name.

    Totals cover every booking on the buyer's phone. Unpaid bookings are
    listed too; payment is not checked at the gate.
    """
    resolved = await resolve_pass(SqlBookingStore(db), payload.search_value)
    primary = resolved.primary

    siblings = []
    for booking in resolved.bookings:
        total, entered = booking_totals(booking)
        siblings.append(SiblingBookingView(
            id=booking.id,
            booking_id=booking.booking_code,
            buyer_name=booking.buyer_name,
            buyer_phone=booking.buyer_phone,
            pass_type=pass_type_label(booking),
            total_people=total,
            people_entered=entered,
            payment_status=booking.payment_status,
            payment_mode=booking.payment_mode,
            total_amount=float(booking.total_amount or 0),
            checked_in=booking.checked_in,
            checked_in_at=booking.checked_in_at,
        ))

    return SearchResponse(
        booking=ResolvedBookingView(
            id=primary.id,
            booking_id=primary.booking_code,
            buyer_name=primary.buyer_name,
            buyer_phone=primary.buyer_phone,
            pass_type=pass_type_label(primary),
            total_people=resolved.total_people,
            total_people_entered=resolved.total_entered,
            people_entered=resolved.total_entered,
            checked_in=primary.checked_in,
            checked_in_at=primary.checked_in_at,
            scanned_by=primary.scanned_by,
            notes=primary.notes or "",
            can_enter=resolved.can_enter,
        ),
        all_bookings=siblings,
    )


@router.post("/checkin", response_model=CheckinResponse)
async def checkin(payload: CheckinRequest, db: AsyncSession = Depends(get_db)):
    """
    Admit people on one booking.

    Rejects with 400 when the pass is used up or the count exceeds what is
    left (the response carries the remaining count). An admin override with
    the right PIN skips the capacity checks; a wrong PIN is a 403.
    """
    bind_scan_context(booking_id=payload.booking_id, scanned_by=payload.scanned_by)
    result = await mark_entry(
        SqlBookingStore(db),
        SqlEntryLogStore(db),
        booking_id=payload.booking_id,
        people_entered=payload.people_entered,
        scanned_by=payload.scanned_by,
        admin_override=payload.admin_override,
        admin_pin=payload.admin_pin,
    )
    booking = result.booking
    return CheckinResponse(
        booking=AdmissionSnapshot(
            booking_id=booking.id,
            booking_code=booking.booking_code,
            buyer_name=booking.buyer_name,
            pass_type=result.pass_type,
            total_allowed=result.total_allowed,
            total_entered=result.total_entered,
            remaining=result.remaining,
            this_entry=result.this_entry,
            status=result.status.value,
            fully_utilized=result.fully_utilized,
            override_used=result.override_used,
        )
    )


@router.get("/logs", response_model=list[EntryLogResponse])
async def entry_logs(
    limit: int = Query(get_settings().ENTRY_LOG_DEFAULT_LIMIT, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
):
    """Entry log, most recent scan first."""
    logs = await get_entry_logs(SqlEntryLogStore(db), limit)
    return [
        EntryLogResponse(
            id=log.id,
            booking_id=log.booking_id,
            booking_code=log.booking.booking_code if log.booking else None,
            buyer_name=log.booking.buyer_name if log.booking else None,
            buyer_phone=log.booking.buyer_phone if log.booking else None,
            scanned_by=log.scanned_by,
            people_entered=log.people_entered,
            status=log.status,
            scanned_at=log.scanned_at,
        )
        for log in logs
    ]


@router.get("/bookings", response_model=list[GateBookingSummary])
async def gate_bookings(db: AsyncSession = Depends(get_db)):
    """Every booking with its gate totals, newest first."""
    bookings = await list_gate_bookings(SqlBookingStore(db))
    summaries = []
    for booking in bookings:
        total, entered = booking_totals(booking)
        summaries.append(GateBookingSummary(
            id=booking.id,
            booking_code=booking.booking_code,
            buyer_name=booking.buyer_name,
            buyer_phone=booking.buyer_phone,
            total_people=total,
            people_entered=entered,
            payment_status=booking.payment_status,
        ))
    return summaries
