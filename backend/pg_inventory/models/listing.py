"""
Listing model. Only the identity matters to the inventory engine; the rest
of the listing (title, address, amenities, ...) belongs to the admin CRUD.
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from pg_inventory.db.base import Base, TimestampMixin


class Listing(Base, TimestampMixin):
    __tablename__ = "listings"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)

    # Bumped by configuration sync to claim the listing for the transaction
    version = Column(Integer, nullable=False, default=1)

    room_configurations = relationship(
        "RoomConfiguration",
        back_populates="listing",
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, title={self.title})>"
