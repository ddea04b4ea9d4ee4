import threading

import pytest

from app.database import SessionLocal
from app.models.house import House
from app.models.reservation import Reservation, ReservationStatus as S
from app.models.user import UserRole
from app.services.reservations import HouseFull, create_reservation, update_reservation_status


def _approve_concurrently(reservation_ids: list[int]) -> dict[int, str]:
    barrier = threading.Barrier(len(reservation_ids))
    results: dict[int, str] = {}

    def approve(rid: int) -> None:
        session = SessionLocal()
        try:
            barrier.wait()
            update_reservation_status(session, rid, S.approved)
            results[rid] = "approved"
        except HouseFull:
            results[rid] = "house_full"
        finally:
            session.close()

    threads = [threading.Thread(target=approve, args=(rid,)) for rid in reservation_ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return results


@pytest.mark.parametrize("room_type,capacity,contenders", [("single", 1, 2), ("double", 2, 6)])
def test_concurrent_approvals_never_exceed_capacity(db, landlord, make_user, make_house, room_type, capacity, contenders):
    house = make_house(landlord, room_type=room_type)
    ids = [create_reservation(db, make_user(UserRole.student).id, house.id).id for _ in range(contenders)]

    results = _approve_concurrently(ids)

    assert len(results) == contenders
    assert sorted(results.values()).count("approved") == capacity
    db.expire_all()
    house = db.query(House).filter(House.id == house.id).one()
    assert house.current_occupants == capacity
    assert house.is_available is False
    approved = db.query(Reservation).filter(Reservation.house_id == house.id, Reservation.status == S.approved).count()
    assert approved == capacity
    # losers were waitlisted by the winning approval
    others = db.query(Reservation).filter(Reservation.house_id == house.id, Reservation.status != S.approved).all()
    assert {r.status for r in others} == {S.waitlist}
