"""Students and landlords."""
from sqlalchemy import Column, Integer, String, Enum as SQLEnum, DateTime, Boolean, JSON
from sqlalchemy.sql import func
from app.database import Base
import enum


class UserRole(str, enum.Enum):
    student = "student"
    landlord = "landlord"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), nullable=False)

    name = Column(String(255), nullable=True)
    age = Column(Integer, nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(255), nullable=True)
    avatar = Column(String, nullable=True)  # URL or base64 data URI, stored as-is
    is_profile_complete = Column(Boolean, default=False, nullable=False)

    # Roommate profile (students): 1-5 scales used by the similarity score
    cleanliness = Column(Integer, nullable=True)
    noise_level = Column(Integer, nullable=True)
    sleep_schedule = Column(String(50), nullable=True)  # early_bird, night_owl, flexible
    hobbies = Column(JSON, nullable=True)
    roommate_preference = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def has_roommate_profile(self) -> bool:
        return self.cleanliness is not None and self.noise_level is not None
