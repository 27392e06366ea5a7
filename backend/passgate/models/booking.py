"""
Booking model: one buyer's purchase of one or more passes.

Key design decisions:
- `buyer_phone` is indexed; it is the grouping key for all bookings of a buyer
- Two entitlement shapes coexist: legacy bookings carry a flat
  `total_people` / `people_entered` pair, newer ones carry ordered
  `BookingPass` rows with their own counters
- `version` column enables optimistic locking for concurrent check-ins
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy import CheckConstraint
from sqlalchemy.orm import relationship

from passgate.db.base import Base, TimestampMixin

PAYMENT_STATUSES = ("Pending", "Paid", "Refunded")


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    booking_code = Column(String(64), nullable=False, unique=True)
    pass_type_id = Column(Integer, ForeignKey("pass_types.id"), nullable=True)
    buyer_name = Column(String(255), nullable=False)
    buyer_phone = Column(String(20), nullable=True)
    total_people = Column(Integer, nullable=False, default=1)
    people_entered = Column(Integer, nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    payment_status = Column(String(20), nullable=False, default="Pending")
    payment_mode = Column(String(20), nullable=True)
    notes = Column(Text, nullable=False, default="")
    checked_in = Column(Boolean, nullable=False, default=False)
    checked_in_at = Column(DateTime(timezone=True), nullable=True)
    scanned_by = Column(String(100), nullable=True)

    # Optimistic locking version counter
    version = Column(Integer, nullable=False, default=1)

    pass_type = relationship("PassType", back_populates="bookings", lazy="selectin")
    passes = relationship(
        "BookingPass",
        back_populates="booking",
        order_by="BookingPass.position",
        lazy="selectin",
        cascade="all, delete-orphan",
    )
    entry_logs = relationship("EntryLog", back_populates="booking")

    __table_args__ = (
        CheckConstraint("people_entered >= 0", name="check_booking_people_entered_non_negative"),
        CheckConstraint(
            "payment_status IN (" + ", ".join(f"'{s}'" for s in PAYMENT_STATUSES) + ")",
            name="check_booking_payment_status",
        ),
        Index("ix_bookings_buyer_phone", "buyer_phone"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, code={self.booking_code}, phone={self.buyer_phone})>"


class BookingPass(Base):
    """One sub-pass of a rich-shape booking."""

    __tablename__ = "booking_passes"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    pass_type_name = Column(String(100), nullable=False)
    people_count = Column(Integer, nullable=False)
    people_entered = Column(Integer, nullable=False, default=0)

    booking = relationship("Booking", back_populates="passes")

    __table_args__ = (
        CheckConstraint("people_count > 0", name="check_booking_pass_people_count_positive"),
        CheckConstraint("people_entered >= 0", name="check_booking_pass_people_entered_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<BookingPass(booking={self.booking_id}, type={self.pass_type_name}, {self.people_entered}/{self.people_count})>"
