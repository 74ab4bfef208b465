from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from ...core.config import Settings
from ...core.database import get_db
from ...core.security import (
    PRIVILEGED_ROLES, AuthorizationError, UserRole, issue_access_token
)
from ...api.deps import get_current_user, get_optional_user, get_settings, rate_limit_check
from ...services.user_service import UserService, normalize_role
from ...schemas.user import UserLogin, UserRegister, UserResponse, LoginResponse
from ...models.user import User

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/register", response_model=UserResponse)
def register(
    user_data: UserRegister,
    db: Session = Depends(get_db),
    caller: Optional[User] = Depends(get_optional_user),
    _: None = Depends(rate_limit_check)
):
    """Create an account. Anyone may sign up as a patient; only admins create staff."""
    role = normalize_role(user_data.role)
    if role in PRIVILEGED_ROLES and (caller is None or caller.role != UserRole.ADMIN):
        raise AuthorizationError(f"Only an admin can create {role.value} accounts")

    user = UserService(db).register_user(user_data)
    return UserResponse.model_validate(user)

@router.post("/login", response_model=LoginResponse)
def login(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: None = Depends(rate_limit_check)
):
    """Verify credentials and return the user with an access token."""
    user = UserService(db).authenticate_user(login_data.email, login_data.password)
    token = issue_access_token(user, settings)

    return LoginResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
        user=UserResponse.model_validate(user)
    )

@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information."""
    return UserResponse.model_validate(current_user)
