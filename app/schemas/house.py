"""House listing and review schemas."""
from datetime import datetime
from pydantic import BaseModel, Field, model_validator
from app.models.house import RoomType
from app.schemas.reservation import ReservationSummary
from app.schemas.auth import UserResponse


class CostItem(BaseModel):
    name: str
    price: float
    unit: str | None = None


class HouseCreate(BaseModel):
    title: str
    description: str | None = None
    address: str
    lat: float | None = None
    lng: float | None = None
    price: float = Field(ge=0)
    electricity_price: float | None = None
    water_price: float | None = None
    costs: list[CostItem] = []
    room_type: RoomType = RoomType.single
    max_occupants: int | None = Field(default=None, ge=1)  # defaults from room_type
    area: float | None = None
    images: list[str] = []
    amenities: list[str] = []


NON_NULLABLE_FIELDS = ("title", "address", "price", "room_type")


class HouseUpdate(BaseModel):
    """All optional; only provided fields are updated. Occupancy counters are not writable."""
    title: str | None = None
    description: str | None = None
    address: str | None = None
    lat: float | None = None
    lng: float | None = None
    price: float | None = Field(default=None, ge=0)
    electricity_price: float | None = None
    water_price: float | None = None
    costs: list[CostItem] | None = None
    room_type: RoomType | None = None
    max_occupants: int | None = Field(default=None, ge=1)
    area: float | None = None
    images: list[str] | None = None
    amenities: list[str] | None = None

    @model_validator(mode="after")
    def required_fields_not_cleared(self):
        # Omit a field to keep it; null is only meaningful for the optional columns
        cleared = [f for f in NON_NULLABLE_FIELDS if f in self.model_fields_set and getattr(self, f) is None]
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self


class HouseResponse(BaseModel):
    id: int
    landlord_id: int
    title: str
    description: str | None = None
    address: str
    lat: float | None = None
    lng: float | None = None
    price: float
    electricity_price: float | None = None
    water_price: float | None = None
    costs: list[CostItem] | None = None
    room_type: str | None = None
    max_occupants: int | None = None
    current_occupants: int = 0
    is_available: bool = True
    area: float | None = None
    images: list[str] | None = None
    amenities: list[str] | None = None
    average_rating: float = 0
    total_reviews: int = 0
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str = ""


class ReviewResponse(BaseModel):
    id: int
    house_id: int
    user_id: int
    rating: int
    comment: str | None = None
    is_edited: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class HouseStudent(BaseModel):
    """A student holding a reservation on the landlord's house."""
    student: UserResponse
    reservation: ReservationSummary
