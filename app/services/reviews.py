"""House reviews: one per user per house; posting again edits it."""
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.house import House, Review


def recompute_rating(db: Session, house: House) -> None:
    """average_rating and total_reviews always reflect the stored reviews."""
    avg, count = (
        db.query(func.avg(Review.rating), func.count(Review.id))
        .filter(Review.house_id == house.id)
        .one()
    )
    house.total_reviews = count or 0
    house.average_rating = float(avg) if avg is not None else 0.0


def upsert_review(db: Session, house: House, user_id: int, rating: int, comment: str | None) -> Review:
    review = db.query(Review).filter(Review.house_id == house.id, Review.user_id == user_id).first()
    if review:
        review.rating = rating
        review.comment = comment
        review.is_edited = True
        review.updated_at = datetime.now(timezone.utc)
    else:
        review = Review(house_id=house.id, user_id=user_id, rating=rating, comment=comment)
        db.add(review)
    db.flush()
    recompute_rating(db, house)
    db.commit()
    db.refresh(review)
    return review
