"""
Pass type catalogue. Read-only from the gate's point of view.
"""

from sqlalchemy import Column, Integer, String, Numeric, CheckConstraint
from sqlalchemy.orm import relationship

from passgate.db.base import Base, TimestampMixin


class PassType(Base, TimestampMixin):
    __tablename__ = "pass_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    # Default booking capacity when a booking does not set its own
    max_people = Column(Integer, nullable=False, default=1)

    bookings = relationship("Booking", back_populates="pass_type")

    __table_args__ = (
        CheckConstraint("price >= 0", name="check_pass_type_price_non_negative"),
        CheckConstraint("max_people > 0", name="check_pass_type_max_people_positive"),
    )

    def __repr__(self) -> str:
        return f"<PassType(id={self.id}, name={self.name}, max_people={self.max_people})>"
