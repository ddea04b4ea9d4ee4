"""Reservations: students request places, landlords approve, reject or waitlist them."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.models.house import House
from app.models.reservation import Reservation
from app.schemas.reservation import ReservationCreate, ReservationStatusUpdate, ReservationResponse
from app.schemas.house import HouseResponse
from app.dependencies import get_current_user, require_landlord, require_student
from app.services import reservations as lifecycle
from app.services.reservation_expiry import run_reservation_expiry_job

router = APIRouter(prefix="/reservations", tags=["reservations"])


def _http_error(e: lifecycle.ReservationError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.detail)


@router.post("/", response_model=ReservationResponse, status_code=201)
def create_reservation(
    data: ReservationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
):
    try:
        reservation = lifecycle.create_reservation(db, current_user.id, data.house_id, actor_email=current_user.email)
    except lifecycle.ReservationError as e:
        raise _http_error(e)
    return ReservationResponse.model_validate(reservation)


@router.post("/run-expiry-sweep")
def trigger_expiry_sweep(current_user: User = Depends(require_landlord)):
    """Manually run the expiry sweep (normally scheduled when enabled)."""
    return {"status": "ok", "expired": run_reservation_expiry_job()}


@router.get("/student/{student_id}", response_model=list[ReservationResponse])
def list_student_reservations(
    student_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return [ReservationResponse.model_validate(r) for r in lifecycle.list_for_student(db, student_id)]


@router.get("/student/{student_id}/approved", response_model=list[HouseResponse])
def list_approved_houses(
    student_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return [HouseResponse.model_validate(h) for h in lifecycle.approved_houses_for_student(db, student_id)]


@router.get("/student/{student_id}/house/{house_id}", response_model=ReservationResponse | None)
def get_student_house_reservation(
    student_id: int,
    house_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    reservation = lifecycle.get_for_student_and_house(db, student_id, house_id)
    return ReservationResponse.model_validate(reservation) if reservation else None


@router.get("/house/{house_id}", response_model=list[ReservationResponse])
def list_house_reservations(
    house_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return [ReservationResponse.model_validate(r) for r in lifecycle.list_for_house(db, house_id)]


@router.get("/{reservation_id}", response_model=ReservationResponse)
def get_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        reservation = lifecycle.get_reservation(db, reservation_id)
    except lifecycle.ReservationError as e:
        raise _http_error(e)
    return ReservationResponse.model_validate(reservation)


@router.put("/{reservation_id}", response_model=ReservationResponse)
def update_reservation_status(
    reservation_id: int,
    data: ReservationStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Landlord of the house changes the status; approval and revocation move the occupancy counters."""
    landlord_id = (
        db.query(House.landlord_id)
        .join(Reservation, Reservation.house_id == House.id)
        .filter(Reservation.id == reservation_id)
        .scalar()
    )
    if landlord_id is not None and landlord_id != current_user.id:
        raise HTTPException(status_code=403, detail="Only the landlord of this house can change its reservations")
    try:
        reservation = lifecycle.update_reservation_status(
            db,
            reservation_id,
            data.status,
            actor_user_id=current_user.id,
            actor_email=current_user.email,
        )
    except lifecycle.ReservationError as e:
        raise _http_error(e)
    return ReservationResponse.model_validate(reservation)


@router.delete("/{reservation_id}")
def delete_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        lifecycle.delete_reservation(db, reservation_id, current_user.id, actor_email=current_user.email)
    except lifecycle.ReservationError as e:
        raise _http_error(e)
    return {"message": "Reservation deleted successfully"}
