"""A student's request to take a place in a house."""
from sqlalchemy import Column, Integer, ForeignKey, DateTime, Enum as SQLEnum, Index
from app.database import Base
import enum


class ReservationStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    expired = "expired"
    waitlist = "waitlist"


# Statuses that hold a place in the house's queue
ACTIVE_STATUSES = (ReservationStatus.pending, ReservationStatus.approved)


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        Index("ix_reservations_student_house", "student_id", "house_id"),
        Index("ix_reservations_house_status", "house_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    house_id = Column(Integer, ForeignKey("houses.id"), nullable=False, index=True)
    status = Column(SQLEnum(ReservationStatus), nullable=False, default=ReservationStatus.pending)

    # Set by the service (not server_default) so expires_at is derived from the same instant
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)
