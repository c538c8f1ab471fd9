"""
Booking model: one guest's claim on a bed in a room configuration.

Key design decisions:
- Status is a plain string column guarded by a CHECK constraint; the
  allowed transitions live in services.lifecycle, not in the database
- duration_months may be NULL on rows written by older admin screens;
  it is read as 1 month
- (room_config_id, status) index backs the occupancy count, and
  (status, start_date) backs the expiry sweep selection
"""

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship

from pg_inventory.db.base import Base, TimestampMixin
from pg_inventory.services.lifecycle import BookingStatus, booking_end_date


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    room_config_id = Column(Integer, ForeignKey("room_configurations.id"), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    start_date = Column(Date, nullable=False)
    duration_months = Column(Integer, nullable=True, default=1)
    amount = Column(Numeric(10, 2), nullable=True)

    room_configuration = relationship("RoomConfiguration", back_populates="bookings")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="check_booking_status",
        ),
        CheckConstraint(
            "duration_months IS NULL OR duration_months >= 1",
            name="check_booking_duration_positive",
        ),
        Index("ix_bookings_room_config_status", "room_config_id", "status"),
        Index("ix_bookings_status_start_date", "status", "start_date"),
    )

    @property
    def end_date(self):
        return booking_end_date(self.start_date, self.duration_months)

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, config={self.room_config_id}, status={self.status})>"
