"""Room listings and their reviews."""
from sqlalchemy import Column, Integer, String, Text, Float, Boolean, ForeignKey, DateTime, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum


class RoomType(str, enum.Enum):
    single = "single"
    double = "double"
    dorm = "dorm"


DEFAULT_MAX_OCCUPANTS = {
    RoomType.single: 1,
    RoomType.double: 2,
    RoomType.dorm: 4,
}


def default_max_occupants(room_type: str | None) -> int:
    """Capacity implied by a room type; unknown or missing types count as single."""
    try:
        return DEFAULT_MAX_OCCUPANTS[RoomType(room_type)]
    except ValueError:
        return 1


class House(Base):
    __tablename__ = "houses"

    id = Column(Integer, primary_key=True, index=True)
    landlord_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(String(500), nullable=False)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)

    price = Column(Float, nullable=False)
    electricity_price = Column(Float, nullable=True)
    water_price = Column(Float, nullable=True)
    costs = Column(JSON, nullable=True)  # [{"name", "price", "unit"}]
    area = Column(Float, nullable=True)
    images = Column(JSON, nullable=True)
    amenities = Column(JSON, nullable=True)

    # Occupancy: written only by app.services.reservations
    room_type = Column(String(20), nullable=True, default="single")
    max_occupants = Column(Integer, nullable=True)  # null on legacy rows; resolved from room_type
    current_occupants = Column(Integer, nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)

    average_rating = Column(Float, nullable=False, default=0)
    total_reviews = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    landlord = relationship("User", backref="houses")
    reviews = relationship("Review", back_populates="house", cascade="all, delete-orphan")

    def resolve_max_occupants(self) -> int:
        """Fill max_occupants from room_type when unset; returns the capacity."""
        if not self.max_occupants:
            if not self.room_type:
                self.room_type = RoomType.single.value
            self.max_occupants = default_max_occupants(self.room_type)
        return self.max_occupants

    def sync_availability(self) -> None:
        self.is_available = (self.current_occupants or 0) < self.resolve_max_occupants()


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("house_id", "user_id", name="uq_reviews_house_user"),)

    id = Column(Integer, primary_key=True, index=True)
    house_id = Column(Integer, ForeignKey("houses.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    is_edited = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    house = relationship("House", back_populates="reviews")
