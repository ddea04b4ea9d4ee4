"""Roommate matching by lifestyle similarity."""
from sqlalchemy.orm import Session

from app.models.user import User, UserRole

TOP_MATCHES = 5

# Weights: cleanliness and noise each worth up to 40, same sleep schedule 20
_SCALE_WEIGHT = 8
_SLEEP_MATCH_POINTS = 20


def similarity_score(a: User, b: User) -> int:
    score = (5 - abs(a.cleanliness - b.cleanliness)) * _SCALE_WEIGHT
    score += (5 - abs(a.noise_level - b.noise_level)) * _SCALE_WEIGHT
    if a.sleep_schedule and a.sleep_schedule == b.sleep_schedule:
        score += _SLEEP_MATCH_POINTS
    return score


def find_similar_roommates(db: Session, user: User, limit: int = TOP_MATCHES) -> list[tuple[User, int]]:
    """Other students with a roommate profile, best match first. Empty if user has no profile."""
    if not user.has_roommate_profile:
        return []
    candidates = (
        db.query(User)
        .filter(
            User.id != user.id,
            User.role == UserRole.student,
            User.cleanliness.isnot(None),
            User.noise_level.isnot(None),
        )
        .all()
    )
    scored = [(c, similarity_score(user, c)) for c in candidates]
    scored.sort(key=lambda pair: (-pair[1], pair[0].id))
    return scored[:limit]
