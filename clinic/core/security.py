"""
Password digests, roles and access tokens.

Tokens carry the user's id, email and role. Every helper that signs or checks
one takes the ``Settings`` of the running app, so a key handed to
``create_app`` is the key in force.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from fastapi import HTTPException, status
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from .config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN = "access"


class UserRole(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"


# Roles an anonymous caller may not give themselves
PRIVILEGED_ROLES = frozenset({UserRole.ADMIN, UserRole.DOCTOR})


class AccessToken(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class AccessClaims(BaseModel):
    sub: int
    email: str
    role: UserRole
    exp: int
    token_type: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def check_password(password: str, digest: str) -> bool:
    return pwd_context.verify(password, digest)


def issue_access_token(user, settings: Settings) -> AccessToken:
    """Sign a bearer token for ``user`` with the app's key and lifetime."""
    lifetime = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        # jose only accepts string subjects
        "sub": str(user.id),
        "email": user.email,
        "role": UserRole(user.role).value,
        "exp": datetime.utcnow() + lifetime,
        "token_type": ACCESS_TOKEN,
    }
    token = jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return AccessToken(access_token=token, expires_in=int(lifetime.total_seconds()))


def read_access_token(token: str, settings: Settings) -> Optional[AccessClaims]:
    """Claims of a valid access token, or None when it is forged, expired or malformed."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        claims = AccessClaims(**payload)
    except (JWTError, ValueError):
        return None
    if claims.token_type != ACCESS_TOKEN:
        return None
    return claims


class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(HTTPException):
    def __init__(self, detail: str = "Not enough permissions"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )
