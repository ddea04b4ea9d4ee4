"""User profiles and roommate matching."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.models.house import House, Review
from app.models.reservation import Reservation
from app.schemas.auth import UserResponse, UserProfileUpdate, RoommateMatch
from app.dependencies import get_current_user, require_student
from app.services.reservations import NotFound, delete_reservation
from app.services.reviews import recompute_rating
from app.services.roommates import find_similar_roommates

router = APIRouter(prefix="/users", tags=["users"])


def _profile_complete(user: User) -> bool:
    if not user.name:
        return False
    return user.has_roommate_profile and bool(user.sleep_schedule)


@router.get("/", response_model=list[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return [UserResponse.model_validate(u) for u in db.query(User).order_by(User.id).all()]


@router.post("/similar-roommates", response_model=list[RoommateMatch])
def similar_roommates(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
):
    """Top matches among other students, by cleanliness, noise level and sleep schedule."""
    return [
        RoommateMatch(user=UserResponse.model_validate(u), similarity_score=score)
        for u, score in find_similar_roommates(db, current_user)
    ]


@router.put("/me", response_model=UserResponse)
def update_my_profile(
    data: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)
    current_user.is_profile_complete = _profile_complete(current_user)
    db.commit()
    db.refresh(current_user)
    return UserResponse.model_validate(current_user)


@router.delete("/me")
def delete_my_account(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Not one transaction: each reservation is released under its own house lock and
    committed, then reviews and the account go in a final commit. A failure part way
    leaves a consistent, smaller account; calling again finishes the job."""
    if db.query(House).filter(House.landlord_id == current_user.id).first():
        raise HTTPException(status_code=400, detail="Delete your listings before deleting your account")
    for (reservation_id,) in db.query(Reservation.id).filter(Reservation.student_id == current_user.id).all():
        try:
            delete_reservation(db, reservation_id, current_user.id, actor_email=current_user.email)
        except NotFound:
            # Removed concurrently (house deleted, or a parallel request)
            continue
    reviewed = db.query(Review).filter(Review.user_id == current_user.id).all()
    houses = {r.house for r in reviewed}
    for review in reviewed:
        db.delete(review)
    db.flush()
    for house in houses:
        recompute_rating(db, house)
    db.delete(current_user)
    db.commit()
    return {"message": "User deleted successfully"}


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse.model_validate(user)
