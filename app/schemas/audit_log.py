from datetime import datetime
from typing import Any
from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    id: int
    category: str
    title: str
    message: str
    house_id: int | None = None
    reservation_id: int | None = None
    actor_user_id: int | None = None
    actor_email: str | None = None
    meta: dict[str, Any] | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
