from pydantic import BaseModel, Field, constr
from typing import Optional

from ..core.security import UserRole


class UserRegister(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=100)
    email: constr(strip_whitespace=True, min_length=3, max_length=255)
    password: str = Field(..., min_length=1)
    # Free-form on purpose: unknown values register as patients
    role: Optional[str] = None
    specialty: Optional[constr(strip_whitespace=True, max_length=100)] = None


class UserLogin(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    specialty: Optional[str] = None

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class DeleteResult(BaseModel):
    ok: bool = True
    deleted: bool
