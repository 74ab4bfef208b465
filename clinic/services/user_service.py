from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ..models.user import User
from ..core.exceptions import DuplicateEmailError, InvalidCredentialsError
from ..core.security import check_password, hash_password, UserRole
from ..schemas.user import UserRegister
from .appointment_service import AppointmentService
from .medical_record_service import MedicalRecordService

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Canonical form used for both storage and lookup."""
    return email.strip().lower()


def normalize_role(role: Optional[str]) -> UserRole:
    """Map a requested role onto a known one.

    Anything that is not admin, doctor or patient registers as a patient.
    This keeps older clients working that never sent a role.
    """
    if role:
        try:
            return UserRole(role.strip().lower())
        except ValueError:
            pass
    return UserRole.PATIENT


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def register_user(self, user_data: UserRegister) -> User:
        """Register a new user."""
        email = normalize_email(user_data.email)

        # Check if user already exists
        existing_user = self.db.query(User).filter(User.email == email).first()
        if existing_user:
            raise DuplicateEmailError(details={"email": email})

        role = normalize_role(user_data.role)
        if user_data.role is None or role.value != user_data.role.strip().lower():
            logger.info(f"Role {user_data.role!r} not recognized for {email}, registering as patient")

        new_user = User(
            name=user_data.name,
            email=email,
            password_hash=hash_password(user_data.password),
            role=role,
            specialty=user_data.specialty or None,
        )

        self.db.add(new_user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            self.db.rollback()
            raise DuplicateEmailError(details={"email": email})
        self.db.refresh(new_user)

        logger.info(f"Registered {role.value} {new_user.id} <{email}>")
        return new_user

    def authenticate_user(self, email: str, password: str) -> User:
        """Verify credentials and return the matching user."""
        user = self.db.query(User).filter(
            User.email == normalize_email(email)
        ).first()

        if not user or not check_password(password, user.password_hash):
            raise InvalidCredentialsError()

        return user

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def list_users(self) -> List[User]:
        """All users, newest first."""
        return self.db.query(User).order_by(User.id.desc()).all()

    def delete_user(self, user_id: int) -> bool:
        """Delete a user together with every appointment they take part in.

        Medical records of those appointments go as well. Returns False when
        the user did not exist.
        """
        user = self.get_user(user_id)
        if not user:
            return False

        appointments = AppointmentService(self.db)
        appointment_ids = appointments.ids_for_user(user_id)
        removed_records = MedicalRecordService(self.db).delete_for_appointments(appointment_ids)
        removed_appointments = appointments.delete_for_user(user_id)
        self.db.delete(user)
        self.db.commit()

        logger.info(
            f"Deleted user {user_id} with {removed_appointments} appointments "
            f"and {removed_records} medical records"
        )
        return True

    def ensure_admin(self, name: str, email: str, password: str) -> User:
        """Create the bootstrap admin unless the email is already taken."""
        existing_user = self.db.query(User).filter(
            User.email == normalize_email(email)
        ).first()
        if existing_user:
            return existing_user

        return self.register_user(UserRegister(
            name=name,
            email=email,
            password=password,
            role=UserRole.ADMIN.value,
        ))
