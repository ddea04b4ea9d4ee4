"""House listings, reviews, and the landlord's view of who reserved."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.models.house import House, Review, default_max_occupants
from app.models.reservation import Reservation
from app.schemas.house import HouseCreate, HouseUpdate, HouseResponse, ReviewCreate, ReviewResponse, HouseStudent
from app.schemas.auth import UserResponse
from app.schemas.reservation import ReservationSummary
from app.schemas.audit_log import AuditLogResponse
from app.dependencies import get_current_user, require_landlord
from app.services.audit_log import list_house_logs
from app.services.reservations import house_lock, list_for_house
from app.services.reviews import upsert_review

router = APIRouter(prefix="/houses", tags=["houses"])


def _get_house_or_404(db: Session, house_id: int) -> House:
    house = db.query(House).filter(House.id == house_id).first()
    if not house:
        raise HTTPException(status_code=404, detail="House not found")
    return house


def _get_own_house(db: Session, house_id: int, current_user: User) -> House:
    house = _get_house_or_404(db, house_id)
    if house.landlord_id != current_user.id:
        raise HTTPException(status_code=403, detail="Forbidden: not your house")
    return house


@router.get("/", response_model=list[HouseResponse])
def list_houses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    available_only: bool = False,
):
    q = db.query(House)
    if available_only:
        q = q.filter(House.is_available.is_(True))
    return [HouseResponse.model_validate(h) for h in q.order_by(House.created_at.desc(), House.id.desc()).all()]


@router.get("/landlord/{landlord_id}", response_model=list[HouseResponse])
def list_landlord_houses(
    landlord_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    houses = (
        db.query(House)
        .filter(House.landlord_id == landlord_id)
        .order_by(House.created_at.desc(), House.id.desc())
        .all()
    )
    return [HouseResponse.model_validate(h) for h in houses]


@router.get("/{house_id}", response_model=HouseResponse)
def get_house(
    house_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return HouseResponse.model_validate(_get_house_or_404(db, house_id))


@router.post("/", response_model=HouseResponse, status_code=201)
def create_house(
    data: HouseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_landlord),
):
    values = data.model_dump()
    if not values["max_occupants"]:
        values["max_occupants"] = default_max_occupants(data.room_type)
    values["room_type"] = data.room_type.value
    house = House(
        **values,
        landlord_id=current_user.id,
        current_occupants=0,
        is_available=True,
    )
    db.add(house)
    db.commit()
    db.refresh(house)
    return HouseResponse.model_validate(house)


@router.put("/{house_id}", response_model=HouseResponse)
def update_house(
    house_id: int,
    data: HouseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_landlord),
):
    _get_own_house(db, house_id, current_user)
    updates = data.model_dump(exclude_unset=True)
    with house_lock(house_id):
        house = db.query(House).populate_existing().with_for_update().filter(House.id == house_id).first()
        if "room_type" in updates:
            updates["room_type"] = updates["room_type"].value
        if updates.get("max_occupants") is None and ("max_occupants" in updates or "room_type" in updates):
            # Explicit null or a new room type: capacity is the room type's default
            updates["max_occupants"] = default_max_occupants(updates.get("room_type") or house.room_type)
        new_max = updates.get("max_occupants")
        if new_max is not None and new_max < (house.current_occupants or 0):
            db.rollback()
            raise HTTPException(
                status_code=400,
                detail=f"max_occupants cannot be lower than the {house.current_occupants} approved occupant(s)",
            )
        for field, value in updates.items():
            setattr(house, field, value)
        house.sync_availability()
        db.commit()
    db.refresh(house)
    return HouseResponse.model_validate(house)


@router.delete("/{house_id}")
def delete_house(
    house_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_landlord),
):
    house = _get_own_house(db, house_id, current_user)
    with house_lock(house_id):
        db.query(Reservation).filter(Reservation.house_id == house_id).delete(synchronize_session=False)
        db.delete(house)
        db.commit()
    return {"message": "House deleted successfully"}


@router.get("/{house_id}/reviews", response_model=list[ReviewResponse])
def list_reviews(
    house_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _get_house_or_404(db, house_id)
    reviews = db.query(Review).filter(Review.house_id == house_id).order_by(Review.id.desc()).all()
    return [ReviewResponse.model_validate(r) for r in reviews]


@router.post("/{house_id}/reviews", response_model=ReviewResponse)
def add_or_update_review(
    house_id: int,
    data: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    house = _get_house_or_404(db, house_id)
    review = upsert_review(db, house, current_user.id, data.rating, data.comment)
    return ReviewResponse.model_validate(review)


@router.get("/{house_id}/students", response_model=list[HouseStudent])
def list_house_students(
    house_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_landlord),
):
    """Students holding a reservation on this house, each with their latest reservation."""
    _get_own_house(db, house_id, current_user)
    latest: dict[int, Reservation] = {}
    for r in list_for_house(db, house_id):
        latest.setdefault(r.student_id, r)  # newest first, so first seen wins
    if not latest:
        return []
    students = db.query(User).filter(User.id.in_(list(latest))).all()
    return [
        HouseStudent(
            student=UserResponse.model_validate(s),
            reservation=ReservationSummary.model_validate(latest[s.id]),
        )
        for s in sorted(students, key=lambda s: latest[s.id].id, reverse=True)
    ]


@router.get("/{house_id}/activity", response_model=list[AuditLogResponse])
def house_activity(
    house_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_landlord),
    limit: int = 100,
    category: str | None = None,
):
    _get_own_house(db, house_id, current_user)
    return [AuditLogResponse.model_validate(e) for e in list_house_logs(db, house_id, limit=limit, category=category)]
