"""Request dependencies: the authenticated user and role gates."""
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User, UserRole
from app.services.auth import token_user_id

security = HTTPBearer(auto_error=False)


def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    if not credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")
    user_id = token_user_id(credentials.credentials)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    user = db.get(User, user_id)
    if not user:
        # Token outlived the account
        raise HTTPException(status_code=401, detail="User not found")
    return user


def _role_gate(role: UserRole):
    def gate(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != role:
            raise HTTPException(status_code=403, detail=f"Only {role.value}s can do this")
        return current_user

    return gate


require_landlord = _role_gate(UserRole.landlord)
require_student = _role_gate(UserRole.student)
