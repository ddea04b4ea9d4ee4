"""
All SQLAlchemy models. Schema is the source of truth for new DBs.
Base.metadata.create_all() creates every table; no migration scripts needed for fresh installs.
"""
from app.models.user import User
from app.models.house import House, Review
from app.models.reservation import Reservation
from app.models.audit_log import AuditLog

__all__ = [
    "User",
    "House",
    "Review",
    "Reservation",
    "AuditLog",
]
