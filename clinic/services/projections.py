"""
Role-scoped read views.

Everything here is a pure function over the joined appointment listing
(``AppointmentService.list_appointments``) and the user listing. Timestamps
are compared as the stored strings.
"""

from typing import Iterable, List, Optional, Sequence

from ..core.security import UserRole
from ..models.appointment import AppointmentStatus
from ..schemas.appointment import AppointmentDetail
from ..schemas.dashboard import AdminDashboard, DoctorDashboard, PatientDashboard
from ..schemas.user import UserResponse


def _by_time(appointment: AppointmentDetail) -> str:
    return appointment.scheduled_at


def users_with_role(users: Iterable, role: UserRole) -> List[UserResponse]:
    return [
        UserResponse.model_validate(user)
        for user in users
        if user.role == role
    ]


def doctors(users: Iterable) -> List[UserResponse]:
    """Doctors a patient can book with."""
    return users_with_role(users, UserRole.DOCTOR)


def admin_roster(users: Sequence) -> AdminDashboard:
    return AdminDashboard(
        doctors=users_with_role(users, UserRole.DOCTOR),
        patients=users_with_role(users, UserRole.PATIENT),
    )


def doctor_pending(appointments: Iterable[AppointmentDetail], doctor_id: int) -> List[AppointmentDetail]:
    """The doctor's queue, soonest first."""
    return sorted(
        (a for a in appointments
         if a.doctor_id == doctor_id and a.status == AppointmentStatus.PENDING),
        key=_by_time,
    )


def doctor_completed(appointments: Iterable[AppointmentDetail], doctor_id: int) -> List[AppointmentDetail]:
    """Visits the doctor has closed, most recent first."""
    return sorted(
        (a for a in appointments
         if a.doctor_id == doctor_id and a.status == AppointmentStatus.COMPLETED),
        key=_by_time,
        reverse=True,
    )


def patient_appointments(appointments: Iterable[AppointmentDetail], patient_id: int) -> List[AppointmentDetail]:
    return [a for a in appointments if a.patient_id == patient_id]


def patient_completed(appointments: Iterable[AppointmentDetail], patient_id: int) -> List[AppointmentDetail]:
    return sorted(
        (a for a in appointments
         if a.patient_id == patient_id and a.status == AppointmentStatus.COMPLETED),
        key=_by_time,
        reverse=True,
    )


def latest_vitals(appointments: Iterable[AppointmentDetail], patient_id: int) -> Optional[AppointmentDetail]:
    completed = patient_completed(appointments, patient_id)
    return completed[0] if completed else None


def doctor_dashboard(appointments: Sequence[AppointmentDetail], doctor_id: int) -> DoctorDashboard:
    return DoctorDashboard(
        pending=doctor_pending(appointments, doctor_id),
        completed=doctor_completed(appointments, doctor_id),
    )


def patient_dashboard(
    appointments: Sequence[AppointmentDetail],
    users: Sequence,
    patient_id: int,
) -> PatientDashboard:
    completed = patient_completed(appointments, patient_id)
    return PatientDashboard(
        appointments=patient_appointments(appointments, patient_id),
        completed=completed,
        latest_vitals=completed[0] if completed else None,
        doctors=doctors(users),
    )
