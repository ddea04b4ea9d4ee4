"""Reservation lifecycle: admission control, occupancy accounting, waitlisting, lazy expiry.

House.current_occupants counts approved reservations and House.is_available mirrors
current_occupants < max_occupants. Every operation that can move those counters runs
under the house's process lock plus a row lock on the house, and commits before the
lock is released, so two approvals can never both take the last place.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.house import House
from app.models.reservation import Reservation, ReservationStatus, ACTIVE_STATUSES
from app.services.audit_log import record_event, CATEGORY_RESERVATION, CATEGORY_OCCUPANCY

settings = get_settings()
logger = logging.getLogger("uvicorn.error")


class ReservationError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(ReservationError):
    status_code = 404


class RoomFull(ReservationError):
    """Queue or availability cap hit when creating."""


class HouseFull(ReservationError):
    """Hard capacity hit when approving."""


class DuplicateReservation(ReservationError):
    pass


class Forbidden(ReservationError):
    status_code = 403


class InvalidTransition(ReservationError):
    status_code = 409


_S = ReservationStatus

ALLOWED_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    _S.pending: frozenset({_S.approved, _S.rejected, _S.waitlist, _S.expired}),
    _S.approved: frozenset({_S.rejected, _S.waitlist}),
    # No automatic promotion; the landlord approves from the waitlist by hand
    _S.waitlist: frozenset({_S.approved, _S.rejected, _S.expired}),
    _S.rejected: frozenset(),
    _S.expired: frozenset(),
}


@dataclass(frozen=True)
class Transition:
    old: ReservationStatus
    new: ReservationStatus
    admits: bool = False
    revokes: bool = False


def plan_transition(old: ReservationStatus, new: ReservationStatus) -> Transition:
    """Classify a status change. Same-status requests are no-ops; anything off the table raises."""
    old, new = ReservationStatus(old), ReservationStatus(new)
    if old == new:
        return Transition(old, new)
    if new not in ALLOWED_TRANSITIONS[old]:
        raise InvalidTransition(f"Cannot change reservation from {old.value} to {new.value}")
    return Transition(
        old,
        new,
        admits=new == _S.approved,
        revokes=old == _S.approved,
    )


# One lock per house id; entries are never removed (a Lock is tiny)
_house_locks: dict[int, threading.Lock] = {}
_house_locks_guard = threading.Lock()


@contextmanager
def house_lock(house_id: int):
    with _house_locks_guard:
        lock = _house_locks.setdefault(house_id, threading.Lock())
    with lock:
        yield


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _lock_house(db: Session, house_id: int) -> House | None:
    return (
        db.query(House)
        .populate_existing()
        .with_for_update()
        .filter(House.id == house_id)
        .first()
    )


def expire_stale(db: Session, *criteria, now: datetime | None = None) -> int:
    """Mark pending reservations past expires_at as expired; returns the row count.

    A conditional UPDATE (status still pending) so it never overwrites a concurrent
    approval. Caller commits."""
    now = now or _utcnow()
    return (
        db.query(Reservation)
        .filter(
            Reservation.status == _S.pending,
            Reservation.expires_at < now,
            *criteria,
        )
        .update(
            {Reservation.status: _S.expired, Reservation.updated_at: now},
            synchronize_session=False,
        )
    )


def apply_lazy_expiry(db: Session, *criteria, now: datetime | None = None) -> int:
    """Read-path expiry: expire matching stale rows and persist before they are returned."""
    expired = expire_stale(db, *criteria, now=now)
    if expired:
        db.commit()
    return expired


def _release_place(house: House) -> None:
    occupants = house.current_occupants or 0
    if occupants <= 0:
        logger.warning("House %s: releasing a place with current_occupants=%s; clamped to 0", house.id, occupants)
        house.current_occupants = 0
    else:
        house.current_occupants = occupants - 1


def _waitlist_pending(db: Session, house_id: int, exclude_id: int, now: datetime) -> list[int]:
    """Move every other pending reservation on the house to waitlist in one UPDATE."""
    criteria = (
        Reservation.house_id == house_id,
        Reservation.status == _S.pending,
        Reservation.id != exclude_id,
    )
    ids = [rid for (rid,) in db.query(Reservation.id).filter(*criteria).all()]
    if ids:
        db.query(Reservation).filter(*criteria).update(
            {Reservation.status: _S.waitlist, Reservation.updated_at: now},
            synchronize_session=False,
        )
    return ids


def create_reservation(
    db: Session,
    student_id: int,
    house_id: int,
    *,
    actor_email: str | None = None,
    now: datetime | None = None,
) -> Reservation:
    now = now or _utcnow()
    with house_lock(house_id):
        try:
            apply_lazy_expiry(db, Reservation.house_id == house_id, now=now)
            house = _lock_house(db, house_id)
            if not house:
                raise NotFound("House not found")

            capacity = house.resolve_max_occupants()
            max_reservations = capacity * settings.reservation_queue_multiplier
            total_reservations = (
                db.query(func.count(Reservation.id))
                .filter(Reservation.house_id == house_id, Reservation.status.in_(ACTIVE_STATUSES))
                .scalar()
            )
            if not house.is_available or total_reservations >= max_reservations:
                raise RoomFull("This room has no places left to reserve")

            existing = (
                db.query(Reservation)
                .filter(
                    Reservation.student_id == student_id,
                    Reservation.house_id == house_id,
                    Reservation.status.in_(ACTIVE_STATUSES),
                )
                .first()
            )
            if existing:
                raise DuplicateReservation("You already have an active reservation for this room")

            reservation = Reservation(
                student_id=student_id,
                house_id=house_id,
                status=_S.pending,
                created_at=now,
                expires_at=now + timedelta(days=settings.reservation_expire_days),
            )
            db.add(reservation)
            db.flush()
            record_event(
                db,
                CATEGORY_RESERVATION,
                "Reservation created",
                f"Student {student_id} reserved house {house_id} (reservation {reservation.id}).",
                house_id=house_id,
                reservation_id=reservation.id,
                actor_user_id=student_id,
                actor_email=actor_email,
                meta={"expires_at": reservation.expires_at, "queue": total_reservations + 1, "queue_cap": max_reservations},
            )
            db.commit()
        except ReservationError:
            db.rollback()
            raise
    db.refresh(reservation)
    return reservation


def update_reservation_status(
    db: Session,
    reservation_id: int,
    new_status: ReservationStatus | str,
    *,
    actor_user_id: int | None = None,
    actor_email: str | None = None,
    now: datetime | None = None,
) -> Reservation:
    new_status = ReservationStatus(new_status)
    now = now or _utcnow()
    found = db.query(Reservation.house_id).filter(Reservation.id == reservation_id).first()
    if not found:
        raise NotFound("Reservation not found")
    house_id = found[0]

    with house_lock(house_id):
        try:
            apply_lazy_expiry(db, Reservation.house_id == house_id, now=now)
            reservation = (
                db.query(Reservation)
                .populate_existing()
                .filter(Reservation.id == reservation_id)
                .first()
            )
            if not reservation:
                raise NotFound("Reservation not found")
            house = _lock_house(db, house_id)
            if not house:
                raise NotFound("House not found")

            transition = plan_transition(reservation.status, new_status)
            capacity = house.resolve_max_occupants()
            waitlisted: list[int] = []

            if transition.admits:
                if (house.current_occupants or 0) >= capacity:
                    raise HouseFull(f"House already has {capacity} occupant(s); cannot approve more")
                house.current_occupants = (house.current_occupants or 0) + 1
                if house.current_occupants >= capacity:
                    waitlisted = _waitlist_pending(db, house.id, reservation.id, now)
                    logger.info(
                        "House %s is full (%s/%s); waitlisted %d pending reservation(s)",
                        house.id, house.current_occupants, capacity, len(waitlisted),
                    )
            elif transition.revokes:
                _release_place(house)
            house.sync_availability()

            reservation.status = new_status
            reservation.updated_at = now
            record_event(
                db,
                CATEGORY_OCCUPANCY if (transition.admits or transition.revokes) else CATEGORY_RESERVATION,
                "Reservation status changed",
                f"Reservation {reservation.id} on house {house.id}: {transition.old.value} -> {transition.new.value}.",
                house_id=house.id,
                reservation_id=reservation.id,
                actor_user_id=actor_user_id,
                actor_email=actor_email,
                meta={
                    "old_status": transition.old,
                    "new_status": transition.new,
                    "current_occupants": house.current_occupants,
                    "max_occupants": capacity,
                    "waitlisted": waitlisted,
                },
            )
            db.commit()
        except ReservationError:
            db.rollback()
            raise
    db.refresh(reservation)
    return reservation


def delete_reservation(
    db: Session,
    reservation_id: int,
    requesting_student_id: int,
    *,
    actor_email: str | None = None,
) -> None:
    found = db.query(Reservation.house_id, Reservation.student_id).filter(Reservation.id == reservation_id).first()
    if not found:
        raise NotFound("Reservation not found")
    house_id, student_id = found
    if student_id != requesting_student_id:
        raise Forbidden("Only the student who made a reservation can delete it")

    with house_lock(house_id):
        try:
            reservation = (
                db.query(Reservation)
                .populate_existing()
                .filter(Reservation.id == reservation_id)
                .first()
            )
            if not reservation:
                raise NotFound("Reservation not found")
            old_status = reservation.status
            house = _lock_house(db, house_id)
            if house and old_status == _S.approved:
                _release_place(house)
                house.sync_availability()
            record_event(
                db,
                CATEGORY_OCCUPANCY if old_status == _S.approved else CATEGORY_RESERVATION,
                "Reservation deleted",
                f"Student {student_id} deleted reservation {reservation_id} on house {house_id} ({old_status.value}).",
                house_id=house_id,
                reservation_id=reservation_id,
                actor_user_id=requesting_student_id,
                actor_email=actor_email,
                meta={"old_status": old_status, "current_occupants": house.current_occupants if house else None},
            )
            db.delete(reservation)
            db.commit()
        except ReservationError:
            db.rollback()
            raise


def get_reservation(db: Session, reservation_id: int, now: datetime | None = None) -> Reservation:
    apply_lazy_expiry(db, Reservation.id == reservation_id, now=now)
    reservation = db.query(Reservation).filter(Reservation.id == reservation_id).first()
    if not reservation:
        raise NotFound("Reservation not found")
    return reservation


def _newest_first(query):
    return query.order_by(Reservation.created_at.desc(), Reservation.id.desc())


def list_for_student(db: Session, student_id: int, now: datetime | None = None) -> list[Reservation]:
    apply_lazy_expiry(db, Reservation.student_id == student_id, now=now)
    return _newest_first(db.query(Reservation).filter(Reservation.student_id == student_id)).all()


def list_for_house(db: Session, house_id: int, now: datetime | None = None) -> list[Reservation]:
    apply_lazy_expiry(db, Reservation.house_id == house_id, now=now)
    return _newest_first(db.query(Reservation).filter(Reservation.house_id == house_id)).all()


def get_for_student_and_house(
    db: Session, student_id: int, house_id: int, now: datetime | None = None
) -> Reservation | None:
    criteria = (Reservation.student_id == student_id, Reservation.house_id == house_id)
    apply_lazy_expiry(db, *criteria, now=now)
    return _newest_first(db.query(Reservation).filter(*criteria)).first()


def approved_houses_for_student(db: Session, student_id: int) -> list[House]:
    return (
        db.query(House)
        .join(Reservation, Reservation.house_id == House.id)
        .filter(Reservation.student_id == student_id, Reservation.status == _S.approved)
        .order_by(Reservation.created_at.desc())
        .all()
    )


def sweep_expired(db: Session, now: datetime | None = None) -> int:
    """Expire every stale pending reservation in one pass."""
    expired = expire_stale(db, now=now)
    db.commit()
    return expired
