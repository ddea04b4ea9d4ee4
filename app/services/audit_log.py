"""House activity feed: append-only records of reservation and occupancy changes.

Entries are only ever inserted. Writers flush and leave the commit to the
surrounding lifecycle operation, so an entry lands exactly when the change it
describes does."""
from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Any

from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog

CATEGORY_RESERVATION = "reservation"
CATEGORY_OCCUPANCY = "occupancy"

# Column limits (match model)
_LIMITS = {"category": 32, "title": 255, "actor_email": 255, "message": 100_000}


def _clip(field: str, value: str | None, fallback: str | None = "-") -> str | None:
    value = (value or "").strip()[: _LIMITS[field]]
    return value or fallback


def _jsonable(v: Any) -> Any:
    """Reduce meta values to what a JSON column accepts."""
    # str-based enums (ReservationStatus) must be unwrapped before the str check
    if isinstance(v, enum.Enum):
        return v.value
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    if isinstance(v, dict):
        return {str(k): _jsonable(x) for k, x in v.items()}
    if isinstance(v, (list, tuple, set)):
        return [_jsonable(x) for x in v]
    return str(v)


def record_event(
    db: Session,
    category: str,
    title: str,
    message: str,
    *,
    house_id: int | None = None,
    reservation_id: int | None = None,
    actor_user_id: int | None = None,
    actor_email: str | None = None,
    meta: dict[str, Any] | None = None,
) -> AuditLog:
    entry = AuditLog(
        category=_clip("category", category, CATEGORY_RESERVATION),
        title=_clip("title", title),
        message=_clip("message", message),
        house_id=house_id,
        reservation_id=reservation_id,
        actor_user_id=actor_user_id,
        actor_email=_clip("actor_email", actor_email, None),
        meta=_jsonable(meta) if meta is not None else None,
    )
    db.add(entry)
    db.flush()
    return entry


def list_house_logs(
    db: Session, house_id: int, limit: int = 100, category: str | None = None
) -> list[AuditLog]:
    """Newest first."""
    q = db.query(AuditLog).filter(AuditLog.house_id == house_id)
    if category:
        q = q.filter(AuditLog.category == category)
    return q.order_by(AuditLog.id.desc()).limit(limit).all()
