"""Password hashing and access tokens for students and landlords."""
import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from app.config import get_settings
from app.models.user import User

settings = get_settings()
logger = logging.getLogger("uvicorn.error")

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72


def _secret(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_secret(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_secret(plain), hashed.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash (seeded or legacy row)
        return False


def issue_token(user: User) -> str:
    """Signed access token; "sub" carries the user id as a string, as PyJWT requires."""
    issued = datetime.now(timezone.utc)
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.jwt_access_token_expire_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def token_user_id(token: str | None) -> int | None:
    """User id from a valid token, or None when it is missing, expired, forged or malformed."""
    token = (token or "").strip()
    if not token:
        return None
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.debug("Rejected access token: %s", e)
        return None
    try:
        return int(claims.get("sub"))
    except (TypeError, ValueError):
        return None
