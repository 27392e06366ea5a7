from passgate.schemas.gate import (
    SearchRequest, SearchResponse, ResolvedBookingView, SiblingBookingView,
    CheckinRequest, CheckinResponse, AdmissionSnapshot,
    EntryLogResponse, GateBookingSummary,
)

__all__ = [
    "SearchRequest", "SearchResponse", "ResolvedBookingView", "SiblingBookingView",
    "CheckinRequest", "CheckinResponse", "AdmissionSnapshot",
    "EntryLogResponse", "GateBookingSummary",
]
