"""Auth and user profile schemas."""
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, model_validator
from app.models.user import UserRole

PASSWORD_MIN_LENGTH = 6


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    confirm_password: str = ""
    role: UserRole
    name: str | None = None

    @model_validator(mode="after")
    def passwords_match(self):
        if self.confirm_password and self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: int
    email: str
    role: UserRole
    name: str | None = None
    age: int | None = None
    phone: str | None = None
    address: str | None = None
    avatar: str | None = None
    is_profile_complete: bool = False
    cleanliness: int | None = None
    noise_level: int | None = None
    sleep_schedule: str | None = None
    hobbies: list[str] | None = None
    roommate_preference: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class UserProfileUpdate(BaseModel):
    """All optional; only provided fields are updated."""
    name: str | None = None
    age: int | None = Field(default=None, ge=0, le=150)
    phone: str | None = None
    address: str | None = None
    avatar: str | None = None
    cleanliness: int | None = Field(default=None, ge=1, le=5)
    noise_level: int | None = Field(default=None, ge=1, le=5)
    sleep_schedule: str | None = None
    hobbies: list[str] | None = None
    roommate_preference: str | None = None


class RoommateMatch(BaseModel):
    user: UserResponse
    similarity_score: int
