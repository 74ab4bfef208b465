from sqlalchemy import or_
from sqlalchemy.orm import Session, aliased
from typing import List, Optional
import logging

from ..models.appointment import Appointment, AppointmentStatus
from ..models.medical_record import MedicalRecord
from ..models.user import User
from ..core.exceptions import InvalidInputError
from ..core.security import UserRole
from ..schemas.appointment import (
    AppointmentCreate, AppointmentDetail, MedicalRecordResponse
)

logger = logging.getLogger(__name__)


class AppointmentService:
    def __init__(self, db: Session):
        self.db = db

    def book(self, data: AppointmentCreate) -> Appointment:
        """Create a Pending appointment between an existing doctor and patient."""
        self._require_role(data.doctor_id, UserRole.DOCTOR, "doctor_id")
        self._require_role(data.patient_id, UserRole.PATIENT, "patient_id")

        appointment = Appointment(
            doctor_id=data.doctor_id,
            patient_id=data.patient_id,
            scheduled_at=data.scheduled_at,
            status=AppointmentStatus.PENDING,
        )
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)

        logger.info(
            f"Booked appointment {appointment.id}: patient {data.patient_id} "
            f"with doctor {data.doctor_id} at {data.scheduled_at}"
        )
        return appointment

    def get(self, appointment_id: int) -> Optional[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.id == appointment_id
        ).first()

    def list_appointments(self) -> List[AppointmentDetail]:
        """Every appointment with names, doctor specialty and record, latest first."""
        doctor = aliased(User)
        patient = aliased(User)

        rows = (
            self.db.query(
                Appointment,
                doctor.name,
                doctor.specialty,
                patient.name,
                MedicalRecord,
            )
            .outerjoin(doctor, doctor.id == Appointment.doctor_id)
            .outerjoin(patient, patient.id == Appointment.patient_id)
            .outerjoin(MedicalRecord, MedicalRecord.appointment_id == Appointment.id)
            .order_by(Appointment.scheduled_at.desc(), Appointment.id.desc())
            .all()
        )

        return [
            AppointmentDetail(
                id=appointment.id,
                doctor_id=appointment.doctor_id,
                patient_id=appointment.patient_id,
                scheduled_at=appointment.scheduled_at,
                status=appointment.status,
                doctor_name=doctor_name,
                doctor_specialty=doctor_specialty,
                patient_name=patient_name,
                record=MedicalRecordResponse.model_validate(record) if record else None,
            )
            for appointment, doctor_name, doctor_specialty, patient_name, record in rows
        ]

    def ids_for_user(self, user_id: int) -> List[int]:
        rows = self.db.query(Appointment.id).filter(
            or_(Appointment.doctor_id == user_id, Appointment.patient_id == user_id)
        ).all()
        return [row.id for row in rows]

    def delete_for_user(self, user_id: int) -> int:
        """Remove appointments where the user is doctor or patient. Does not commit."""
        return self.db.query(Appointment).filter(
            or_(Appointment.doctor_id == user_id, Appointment.patient_id == user_id)
        ).delete(synchronize_session=False)

    def _require_role(self, user_id: int, role: UserRole, field: str):
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user or user.role != role:
            raise InvalidInputError(
                f"{field} must reference an existing {role.value}",
                {"field": field, "value": user_id},
            )
