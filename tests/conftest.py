import os
import tempfile
from pathlib import Path

# Point the app at a throwaway SQLite file before app.config is first imported
_DB_DIR = tempfile.mkdtemp(prefix="ulis-home-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ["RESERVATION_EXPIRY_SWEEP_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine
from app.main import app
from app.models.house import House, default_max_occupants
from app.models.user import User, UserRole
from app.services.auth import issue_token


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.student, **fields) -> User:
        counter["n"] += 1
        user = User(
            email=fields.pop("email", f"{role.value}{counter['n']}@test.ulishome.demo"),
            hashed_password="not-a-real-hash",
            role=role,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_house(db):
    def _make(landlord: User, room_type: str = "single", **fields) -> House:
        if "max_occupants" not in fields:
            fields["max_occupants"] = default_max_occupants(room_type)
        house = House(
            landlord_id=landlord.id,
            title=fields.pop("title", "Room near campus"),
            address=fields.pop("address", "144 Xuan Thuy, Hanoi"),
            price=fields.pop("price", 2000000),
            room_type=room_type,
            current_occupants=fields.pop("current_occupants", 0),
            is_available=fields.pop("is_available", True),
            **fields,
        )
        db.add(house)
        db.commit()
        db.refresh(house)
        return house

    return _make


@pytest.fixture
def headers_for():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {issue_token(user)}"}

    return _headers


@pytest.fixture
def landlord(make_user):
    return make_user(UserRole.landlord, name="Landlord")


@pytest.fixture
def student(make_user):
    return make_user(UserRole.student, name="Student A")


@pytest.fixture
def other_student(make_user):
    return make_user(UserRole.student, name="Student B")
