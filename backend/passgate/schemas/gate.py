"""
Pydantic schemas for gate search, check-in and entry log responses.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from passgate.db.base import MAX_ROW_ID


class SearchRequest(BaseModel):
    search_value: Optional[str] = Field(None, max_length=255)


class ResolvedBookingView(BaseModel):
    """Primary booking with totals across every sibling booking."""

    id: int
    booking_id: str
    buyer_name: str
    buyer_phone: Optional[str]
    pass_type: str
    total_people: int
    total_people_entered: int
    people_entered: int
    checked_in: bool
    checked_in_at: Optional[datetime]
    scanned_by: Optional[str]
    notes: str
    can_enter: bool = Field(serialization_alias="canEnter")


class SiblingBookingView(BaseModel):
    id: int
    booking_id: str
    buyer_name: str
    buyer_phone: Optional[str]
    pass_type: str
    total_people: int
    people_entered: int
    payment_status: str
    payment_mode: Optional[str]
    total_amount: float
    checked_in: bool
    checked_in_at: Optional[datetime]


class SearchResponse(BaseModel):
    message: str = "Pass found"
    booking: ResolvedBookingView
    all_bookings: list[SiblingBookingView] = Field(serialization_alias="allBookings")


class CheckinRequest(BaseModel):
    booking_id: int = Field(..., ge=1, le=MAX_ROW_ID)
    people_entered: int = Field(default=1, ge=1, le=1000)
    scanned_by: str = Field(..., min_length=1, max_length=100)
    admin_override: bool = False
    admin_pin: Optional[str] = Field(None, max_length=64)


class AdmissionSnapshot(BaseModel):
    booking_id: int
    booking_code: str
    buyer_name: str
    pass_type: str
    total_allowed: int
    total_entered: int
    remaining: int
    this_entry: int
    status: str
    fully_utilized: bool
    override_used: bool


class CheckinResponse(BaseModel):
    message: str = "Entry marked successfully"
    booking: AdmissionSnapshot


class EntryLogResponse(BaseModel):
    id: int
    booking_id: int
    booking_code: Optional[str]
    buyer_name: Optional[str]
    buyer_phone: Optional[str]
    scanned_by: str
    people_entered: int
    status: str
    scanned_at: datetime


class GateBookingSummary(BaseModel):
    id: int
    booking_code: str
    buyer_name: str
    buyer_phone: Optional[str]
    total_people: int
    people_entered: int
    payment_status: str
