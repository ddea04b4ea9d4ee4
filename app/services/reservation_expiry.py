"""Periodic sweep: mark pending reservations past expires_at as expired.
Reads already expire lazily; this only catches reservations nobody reads."""
import logging
from sqlalchemy.orm import Session
from app.database import SessionLocal
from app.services.reservations import sweep_expired

logger = logging.getLogger("uvicorn.error")


def run_reservation_expiry_job() -> int:
    db: Session = SessionLocal()
    try:
        expired = sweep_expired(db)
        if expired:
            logger.info("Reservation expiry: marked %d pending reservation(s) as expired.", expired)
        return expired
    finally:
        db.close()
