from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...core.exceptions import NotFoundError
from ...core.security import AuthorizationError, UserRole
from ...api.deps import require_admin, require_doctor, require_patient
from ...services.appointment_service import AppointmentService
from ...services.lifecycle_service import LifecycleService
from ...schemas.appointment import (
    AppointmentComplete, AppointmentCreate, AppointmentDetail,
    AppointmentResponse, MedicalRecordResponse
)
from ...models.user import User

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.get("", response_model=List[AppointmentDetail])
def list_appointments(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin)
):
    """All appointments with participants and records, latest first."""
    return AppointmentService(db).list_appointments()

@router.post("", response_model=AppointmentResponse)
def book_appointment(
    data: AppointmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_patient)
):
    """Book a Pending appointment. Patients may only book for themselves."""
    if current_user.role == UserRole.PATIENT and data.patient_id != current_user.id:
        raise AuthorizationError("Patients can only book their own appointments")

    appointment = AppointmentService(db).book(data)
    return AppointmentResponse.model_validate(appointment)

@router.put("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_patient)
):
    """Cancel a Pending appointment."""
    if current_user.role == UserRole.PATIENT:
        appointment = AppointmentService(db).get(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment", appointment_id)
        if appointment.patient_id != current_user.id:
            raise AuthorizationError("Patients can only cancel their own appointments")

    appointment = LifecycleService(db).cancel(appointment_id)
    return AppointmentResponse.model_validate(appointment)

@router.post("/{appointment_id}/complete", response_model=MedicalRecordResponse)
def complete_appointment(
    appointment_id: int,
    data: AppointmentComplete,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_doctor)
):
    """Record vitals for the visit and mark it Completed."""
    doctor_id = data.doctor_id if data.doctor_id is not None else current_user.id
    if current_user.role == UserRole.DOCTOR and doctor_id != current_user.id:
        raise AuthorizationError("Doctors can only complete their own appointments")

    record = LifecycleService(db).complete(appointment_id, doctor_id, data)
    return MedicalRecordResponse.model_validate(record)
