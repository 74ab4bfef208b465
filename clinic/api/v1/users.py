from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import require_admin, get_current_user
from ...services import projections
from ...services.user_service import UserService
from ...schemas.user import DeleteResult, UserResponse
from ...models.user import User

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("", response_model=List[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin)
):
    """List all users, newest first (admin only)."""
    return [UserResponse.model_validate(user) for user in UserService(db).list_users()]

@router.get("/doctors", response_model=List[UserResponse])
def list_doctors(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user)
):
    """Doctors available for booking."""
    return projections.doctors(UserService(db).list_users())

@router.delete("/{user_id}", response_model=DeleteResult)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin)
):
    """Delete a user and every appointment they are part of (admin only)."""
    deleted = UserService(db).delete_user(user_id)
    return DeleteResult(deleted=deleted)
