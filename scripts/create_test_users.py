"""
Create a test landlord (with one double room) and a test student.

Run from project root:
  python scripts/create_test_users.py

Credentials are printed at the end.
"""
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.database import Base, SessionLocal, engine
from app.models.user import User, UserRole
from app.models.house import House, RoomType, default_max_occupants
from app.services.auth import hash_password

# Default credentials (change if you want)
LANDLORD_EMAIL = "landlord@ulishome.demo"
LANDLORD_PASSWORD = "Password123!"
LANDLORD_NAME = "Test Landlord"

STUDENT_EMAIL = "student@ulishome.demo"
STUDENT_PASSWORD = "Password123!"
STUDENT_NAME = "Test Student"


def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        landlord = db.query(User).filter(User.email == LANDLORD_EMAIL).first()
        if landlord:
            print(f"Landlord already exists: {LANDLORD_EMAIL}")
        else:
            landlord = User(
                email=LANDLORD_EMAIL,
                hashed_password=hash_password(LANDLORD_PASSWORD),
                role=UserRole.landlord,
                name=LANDLORD_NAME,
            )
            db.add(landlord)
            db.flush()
            db.add(House(
                landlord_id=landlord.id,
                title="Demo double room",
                address="144 Xuan Thuy, Cau Giay, Hanoi",
                price=2500000,
                room_type=RoomType.double.value,
                max_occupants=default_max_occupants(RoomType.double),
                current_occupants=0,
                is_available=True,
            ))
            print(f"Created landlord: {LANDLORD_EMAIL} (with one double room)")

        student = db.query(User).filter(User.email == STUDENT_EMAIL).first()
        if student:
            print(f"Student already exists: {STUDENT_EMAIL}")
        else:
            db.add(User(
                email=STUDENT_EMAIL,
                hashed_password=hash_password(STUDENT_PASSWORD),
                role=UserRole.student,
                name=STUDENT_NAME,
                cleanliness=4,
                noise_level=2,
                sleep_schedule="early_bird",
            ))
            print(f"Created student: {STUDENT_EMAIL}")

        db.commit()

        print("\n--- Test users ---")
        print(f"Landlord: {LANDLORD_EMAIL} / {LANDLORD_PASSWORD}")
        print(f"Student:  {STUDENT_EMAIL} / {STUDENT_PASSWORD}")
        print("Done.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
