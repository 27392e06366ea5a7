"""
Append-only audit record of one successful admission.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, CheckConstraint, Index, func
from sqlalchemy.orm import relationship

from passgate.db.base import Base

ENTRY_STATUSES = ("Checked-in", "Partially Checked-in", "Denied")


class EntryLog(Base):
    __tablename__ = "entry_logs"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    scanned_by = Column(String(100), nullable=False)
    # Count admitted by this attempt, not the running total
    people_entered = Column(Integer, nullable=False)
    status = Column(String(30), nullable=False)
    scanned_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    booking = relationship("Booking", back_populates="entry_logs", lazy="selectin")

    __table_args__ = (
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in ENTRY_STATUSES) + ")",
            name="check_entry_log_status",
        ),
        Index("ix_entry_logs_scanned_at", "scanned_at"),
    )

    def __repr__(self) -> str:
        return f"<EntryLog(id={self.id}, booking={self.booking_id}, people={self.people_entered}, status={self.status})>"
