import pytest

from app.models.house import House
from app.models.reservation import Reservation, ReservationStatus
from app.models.user import User, UserRole
from app.routers import users as users_router
from app.services.reservations import create_reservation, update_reservation_status


def test_register_login_and_me(client):
    reg = client.post(
        "/auth/register",
        json={"email": "Minh@Example.com", "password": "secret1", "confirm_password": "secret1", "role": "student", "name": "Minh"},
    )
    assert reg.status_code == 201
    assert reg.json()["user"]["email"] == "minh@example.com"
    assert reg.json()["token_type"] == "bearer"

    dup = client.post("/auth/register", json={"email": "minh@example.com", "password": "secret1", "role": "student"})
    assert dup.status_code == 400

    bad = client.post("/auth/login", json={"email": "minh@example.com", "password": "wrong-pass"})
    assert bad.status_code == 401

    login = client.post("/auth/login", json={"email": "minh@example.com", "password": "secret1"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["name"] == "Minh"
    assert me.json()["role"] == "student"


def test_register_validation(client):
    short = client.post("/auth/register", json={"email": "a@example.com", "password": "123", "role": "student"})
    assert short.status_code == 422
    mismatch = client.post(
        "/auth/register",
        json={"email": "a@example.com", "password": "secret1", "confirm_password": "secret2", "role": "student"},
    )
    assert mismatch.status_code == 422


def test_profile_update_marks_complete(client, student, headers_for):
    partial = client.put("/users/me", json={"cleanliness": 4}, headers=headers_for(student))
    assert partial.status_code == 200
    assert partial.json()["is_profile_complete"] is False

    full = client.put(
        "/users/me",
        json={"noise_level": 2, "sleep_schedule": "early_bird", "hobbies": ["chess"]},
        headers=headers_for(student),
    )
    assert full.json()["is_profile_complete"] is True
    assert full.json()["hobbies"] == ["chess"]

    assert client.put("/users/me", json={"cleanliness": 9}, headers=headers_for(student)).status_code == 422


def test_similar_roommates_ranked(client, make_user, headers_for):
    me = make_user(UserRole.student, name="Me", cleanliness=5, noise_level=1, sleep_schedule="early_bird")
    twin = make_user(UserRole.student, cleanliness=5, noise_level=1, sleep_schedule="early_bird")
    close = make_user(UserRole.student, cleanliness=4, noise_level=2, sleep_schedule="night_owl")
    far = make_user(UserRole.student, cleanliness=1, noise_level=5, sleep_schedule="night_owl")
    make_user(UserRole.student, name="No profile")
    make_user(UserRole.landlord, cleanliness=5, noise_level=1, sleep_schedule="early_bird")

    resp = client.post("/users/similar-roommates", headers=headers_for(me))
    assert resp.status_code == 200
    matches = resp.json()
    assert [m["user"]["id"] for m in matches] == [twin.id, close.id, far.id]
    assert [m["similarity_score"] for m in matches] == [100, 64, 16]


def test_similar_roommates_top_five(client, make_user, headers_for):
    me = make_user(UserRole.student, cleanliness=3, noise_level=3)
    for _ in range(7):
        make_user(UserRole.student, cleanliness=3, noise_level=3)
    assert len(client.post("/users/similar-roommates", headers=headers_for(me)).json()) == 5


def test_similar_roommates_empty_without_profile(client, student, other_student, db, headers_for):
    other_student.cleanliness = 3
    other_student.noise_level = 3
    db.commit()
    assert client.post("/users/similar-roommates", headers=headers_for(student)).json() == []


def test_landlords_cannot_match_roommates(client, landlord, headers_for):
    assert client.post("/users/similar-roommates", headers=headers_for(landlord)).status_code == 403


def test_get_and_list_users(client, student, landlord, headers_for):
    assert client.get(f"/users/{landlord.id}", headers=headers_for(student)).json()["role"] == "landlord"
    assert client.get("/users/999", headers=headers_for(student)).status_code == 404
    assert len(client.get("/users/", headers=headers_for(student)).json()) == 2


def test_deleting_student_releases_places_and_reviews(client, db, landlord, student, make_house, headers_for):
    house = make_house(landlord)
    r = create_reservation(db, student.id, house.id)
    update_reservation_status(db, r.id, ReservationStatus.approved)
    client.post(f"/houses/{house.id}/reviews", json={"rating": 4}, headers=headers_for(student))
    student_id = student.id

    resp = client.delete("/users/me", headers=headers_for(student))
    assert resp.status_code == 200

    db.expire_all()
    house = db.query(House).filter(House.id == house.id).one()
    assert house.current_occupants == 0
    assert house.is_available is True
    assert house.total_reviews == 0
    assert db.query(Reservation).count() == 0
    assert db.query(User).filter(User.id == student_id).first() is None


def test_landlord_with_listings_cannot_delete_account(client, landlord, make_house, headers_for):
    make_house(landlord)
    assert client.delete("/users/me", headers=headers_for(landlord)).status_code == 400


def test_interrupted_account_delete_can_be_retried(client, db, landlord, student, make_house, headers_for, monkeypatch):
    house = make_house(landlord)
    r = create_reservation(db, student.id, house.id)
    update_reservation_status(db, r.id, ReservationStatus.approved)
    client.post(f"/houses/{house.id}/reviews", json={"rating": 4}, headers=headers_for(student))
    headers = headers_for(student)
    student_id, house_id = student.id, house.id

    def rating_store_down(db, house):
        raise RuntimeError("rating store down")

    monkeypatch.setattr(users_router, "recompute_rating", rating_store_down)
    with pytest.raises(RuntimeError):
        client.delete("/users/me", headers=headers)
    monkeypatch.undo()

    # Places were released and committed; reviews and the account are untouched
    db.expire_all()
    house = db.query(House).filter(House.id == house_id).one()
    assert (house.current_occupants, house.is_available, house.total_reviews) == (0, True, 1)
    assert db.query(User).filter(User.id == student_id).first() is not None

    assert client.delete("/users/me", headers=headers).status_code == 200
    db.expire_all()
    assert db.query(User).filter(User.id == student_id).first() is None
    assert db.query(House).filter(House.id == house_id).one().total_reviews == 0
