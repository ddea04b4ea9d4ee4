"""Reservation schemas."""
from datetime import datetime
from pydantic import BaseModel, field_validator
from app.models.reservation import ReservationStatus

# Statuses a landlord may set; pending is only ever the creation status
SETTABLE_STATUSES = (
    ReservationStatus.approved,
    ReservationStatus.rejected,
    ReservationStatus.waitlist,
    ReservationStatus.expired,
)


class ReservationCreate(BaseModel):
    house_id: int


class ReservationStatusUpdate(BaseModel):
    status: ReservationStatus

    @field_validator("status")
    @classmethod
    def settable(cls, v: ReservationStatus) -> ReservationStatus:
        if v not in SETTABLE_STATUSES:
            raise ValueError("status must be one of: approved, rejected, waitlist, expired")
        return v


class ReservationResponse(BaseModel):
    id: int
    student_id: int
    house_id: int
    status: ReservationStatus
    expires_at: datetime
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class ReservationSummary(BaseModel):
    id: int
    status: ReservationStatus
    created_at: datetime
    expires_at: datetime

    class Config:
        from_attributes = True
