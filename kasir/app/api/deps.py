from __future__ import annotations

from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from kasir.app.core.config import settings
from kasir.app.core.database import get_db
from kasir.app.core.security import ALGORITHM
from kasir.app.models.user import RoleEnum, User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login/access-token")
optional_oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login/access-token", auto_error=False
)


def _user_from_token(db: Session, token: str) -> User | None:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
        user_id: str | None = payload.get("sub")
        if user_id is None:
            return None
        user_uuid = UUID(user_id)
    except (JWTError, ValueError):
        return None
    return db.query(User).filter(User.id == user_uuid).first()


def get_current_user(
    db: Session = Depends(get_db),
    token: str = Depends(oauth2_scheme),
) -> User:
    user = _user_from_token(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user"
        )
    return user


def get_optional_user(
    db: Session = Depends(get_db),
    token: str | None = Depends(optional_oauth2_scheme),
) -> User | None:
    """Anonymous-friendly variant for public reads."""
    if not token:
        return None
    user = _user_from_token(db, token)
    if user is None or not user.is_active:
        return None
    return user


def require_role(*roles: RoleEnum):
    """FastAPI dependency factory: the user's role must be one of *roles*."""

    def _checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(r.value for r in roles)}",
            )
        return current_user

    return _checker


require_cashier = require_role(RoleEnum.CASHIER, RoleEnum.ADMIN, RoleEnum.STOCKIST)
require_admin = require_role(RoleEnum.ADMIN)
