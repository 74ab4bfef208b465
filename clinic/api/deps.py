"""
Request dependencies: who is calling, what they may do, how often.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..core.config import Settings
from ..core.database import get_db, get_redis
from ..core.security import (
    AccessClaims, AuthenticationError, AuthorizationError, UserRole, read_access_token
)
from ..models.user import User

bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _resolve_caller(
    credentials: Optional[HTTPAuthorizationCredentials],
    settings: Settings,
    db: Session,
) -> Optional[User]:
    if credentials is None:
        return None

    claims = read_access_token(credentials.credentials, settings)
    if claims is None:
        raise AuthenticationError("Invalid or expired token")

    user = db.query(User).filter(User.id == claims.sub).first()
    if not _token_matches(claims, user):
        # Deleted, or the id now belongs to somebody else
        raise AuthenticationError("Token no longer matches an account")
    return user


def _token_matches(claims: AccessClaims, user: Optional[User]) -> bool:
    return (
        user is not None
        and user.email == claims.email
        and UserRole(user.role) == claims.role
    )


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """The caller when a bearer token is sent, None for anonymous requests."""
    return _resolve_caller(credentials, settings, db)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
) -> User:
    user = _resolve_caller(credentials, settings, db)
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user


def require_role(*allowed: UserRole):
    """Dependency that admits only callers holding one of ``allowed``."""
    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise AuthorizationError(
                f"Access denied. Required roles: {[role.value for role in allowed]}"
            )
        return current_user

    return checker


# Admins pass every guard so they can act on anyone's behalf
require_admin = require_role(UserRole.ADMIN)
require_doctor = require_role(UserRole.DOCTOR, UserRole.ADMIN)
require_patient = require_role(UserRole.PATIENT, UserRole.ADMIN)


def rate_limit_check(
    request: Request,
    settings: Settings = Depends(get_settings),
    redis_client=Depends(get_redis),
) -> None:
    """Fixed-window limit per client address on the public auth endpoints."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    hits = redis_client.get(key)
    if hits is None:
        redis_client.setex(key, settings.RATE_LIMIT_WINDOW_SECONDS, 1)
    elif int(hits) >= settings.RATE_LIMIT_REQUESTS:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please try again later."
        )
    else:
        redis_client.incr(key)
