"""
Room configuration: one bookable room-type tier of a listing.

Key design decisions:
- `available_beds` is a denormalized counter (stored in the legacy
  `available_rooms` column) kept in step with active bookings by delta
  updates and full recomputes
- `total_beds` is a hybrid property so the store can clamp delta updates
  against capacity inside the UPDATE statement itself
- `version` is bumped whenever a writer claims the row; the claim UPDATE
  takes the row lock that serializes writers on the same configuration
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    case,
)
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship

from pg_inventory.db.base import Base, TimestampMixin
from pg_inventory.services import capacity


class RoomConfiguration(Base, TimestampMixin):
    __tablename__ = "room_configurations"

    id = Column(Integer, primary_key=True, index=True)
    listing_id = Column(Integer, ForeignKey("listings.id"), nullable=False, index=True)
    room_type = Column(String(50), nullable=False)
    rent_per_month = Column(Numeric(10, 2), nullable=False)
    total_rooms = Column(Integer, nullable=False, default=1)
    available_beds = Column("available_rooms", Integer, nullable=False, default=0)
    manual_override = Column(Boolean, nullable=False, default=False)

    version = Column(Integer, nullable=False, default=1)

    listing = relationship("Listing", back_populates="room_configurations")
    bookings = relationship(
        "Booking",
        back_populates="room_configuration",
        lazy="raise",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("available_rooms >= 0", name="check_available_beds_non_negative"),
        CheckConstraint("total_rooms >= 1", name="check_total_rooms_positive"),
    )

    @property
    def beds_per_room(self) -> int:
        return capacity.beds_per_room(self.room_type)

    @hybrid_property
    def total_beds(self) -> int:
        return capacity.total_beds(self.total_rooms, self.room_type)

    @total_beds.expression
    def total_beds(cls):
        return cls.total_rooms * case(capacity.BEDS_PER_ROOM, value=cls.room_type, else_=0)

    def __repr__(self) -> str:
        return (
            f"<RoomConfiguration(id={self.id}, listing={self.listing_id}, type={self.room_type}, "
            f"available={self.available_beds}, override={self.manual_override})>"
        )
