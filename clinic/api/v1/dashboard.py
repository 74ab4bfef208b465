from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from ...core.database import get_db
from ...core.security import UserRole
from ...api.deps import require_admin, require_doctor, require_patient
from ...services import projections
from ...services.appointment_service import AppointmentService
from ...services.user_service import UserService
from ...schemas.dashboard import AdminDashboard, DoctorDashboard, PatientDashboard
from ...models.user import User

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

def _subject_id(current_user: User, requested: Optional[int]) -> int:
    # Admins may look at anyone's dashboard; everybody else sees their own
    if current_user.role == UserRole.ADMIN and requested is not None:
        return requested
    return current_user.id

@router.get("/admin", response_model=AdminDashboard)
def admin_dashboard(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin)
):
    """Doctors and patients for account management."""
    return projections.admin_roster(UserService(db).list_users())

@router.get("/doctor", response_model=DoctorDashboard)
def doctor_dashboard(
    doctor_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_doctor)
):
    """Pending queue and completed visits for a doctor."""
    appointments = AppointmentService(db).list_appointments()
    return projections.doctor_dashboard(appointments, _subject_id(current_user, doctor_id))

@router.get("/patient", response_model=PatientDashboard)
def patient_dashboard(
    patient_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_patient)
):
    """Appointment history, latest vitals and bookable doctors for a patient."""
    appointments = AppointmentService(db).list_appointments()
    users = UserService(db).list_users()
    return projections.patient_dashboard(appointments, users, _subject_id(current_user, patient_id))
