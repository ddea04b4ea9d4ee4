from datetime import datetime, timezone

from app.models.reservation import ReservationStatus
from app.services.audit_log import CATEGORY_OCCUPANCY, CATEGORY_RESERVATION, list_house_logs, record_event


def test_meta_is_made_json_safe(db):
    entry = record_event(
        db,
        CATEGORY_OCCUPANCY,
        "Reservation status changed",
        "approved",
        house_id=1,
        meta={"status": ReservationStatus.approved, "at": datetime(2026, 1, 2, tzinfo=timezone.utc), "ids": (3, 4)},
    )
    db.commit()
    db.refresh(entry)
    assert entry.meta == {"status": "approved", "at": "2026-01-02T00:00:00+00:00", "ids": [3, 4]}


def test_blank_fields_fall_back_and_long_ones_are_clipped(db):
    entry = record_event(db, "", "  ", "x" * 10, actor_email="", house_id=1)
    assert entry.category == CATEGORY_RESERVATION
    assert entry.title == "-"
    assert entry.actor_email is None
    long_title = record_event(db, CATEGORY_RESERVATION, "t" * 400, "m", house_id=1)
    assert len(long_title.title) == 255


def test_house_feed_is_newest_first_and_filterable(db):
    first = record_event(db, CATEGORY_RESERVATION, "Reservation created", "a", house_id=7)
    second = record_event(db, CATEGORY_OCCUPANCY, "Reservation status changed", "b", house_id=7)
    record_event(db, CATEGORY_RESERVATION, "Reservation created", "other house", house_id=8)
    db.commit()

    assert [e.id for e in list_house_logs(db, 7)] == [second.id, first.id]
    assert [e.id for e in list_house_logs(db, 7, category=CATEGORY_OCCUPANCY)] == [second.id]
    assert len(list_house_logs(db, 7, limit=1)) == 1
