"""
Appointment status transitions.

Pending is the only non-terminal status. Completing an appointment writes its
medical record and flips the status in the same transaction, so a record
exists exactly when the appointment is Completed.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from ..models.appointment import Appointment, AppointmentStatus
from ..models.medical_record import MedicalRecord
from ..core.exceptions import (
    DuplicateRecordError, InvalidInputError, InvalidTransitionError, NotFoundError
)
from ..schemas.appointment import Vitals
from .appointment_service import AppointmentService
from .medical_record_service import MedicalRecordService

logger = logging.getLogger(__name__)


class LifecycleService:
    def __init__(self, db: Session):
        self.db = db
        self.appointments = AppointmentService(db)
        self.records = MedicalRecordService(db)

    def cancel(self, appointment_id: int) -> Appointment:
        """Move a Pending appointment to Cancelled.

        Cancelling an already cancelled appointment changes nothing; a
        completed one cannot be cancelled.
        """
        appointment = self._get_or_404(appointment_id)

        if appointment.status == AppointmentStatus.CANCELLED:
            return appointment
        if appointment.status == AppointmentStatus.COMPLETED:
            logger.warning(f"Refused to cancel completed appointment {appointment_id}")
            raise InvalidTransitionError(appointment_id, appointment.status.value, "cancel")

        if not self._transition(appointment_id, AppointmentStatus.CANCELLED):
            # Someone else moved it first
            self.db.rollback()
            current = self._current_status(appointment_id)
            if current is None:
                raise NotFoundError("Appointment", appointment_id)
            if current == AppointmentStatus.COMPLETED:
                raise InvalidTransitionError(appointment_id, current.value, "cancel")
        else:
            self.db.commit()
            logger.info(f"Cancelled appointment {appointment_id}")

        self.db.refresh(appointment)
        return appointment

    def complete(self, appointment_id: int, doctor_id: int, vitals: Vitals) -> MedicalRecord:
        """Record the visit's vitals and mark the appointment Completed."""
        appointment = self._get_or_404(appointment_id)

        if appointment.doctor_id != doctor_id:
            raise InvalidInputError(
                f"Appointment {appointment_id} is assigned to another doctor",
                {"field": "doctor_id", "value": doctor_id},
            )
        if appointment.status == AppointmentStatus.COMPLETED:
            raise DuplicateRecordError(appointment_id)
        if appointment.status == AppointmentStatus.CANCELLED:
            raise InvalidTransitionError(appointment_id, appointment.status.value, "complete")

        try:
            record = self.records.add(appointment_id, doctor_id, vitals)
            completed = self._transition(appointment_id, AppointmentStatus.COMPLETED)
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Concurrent completion of appointment {appointment_id} lost the race")
            raise DuplicateRecordError(appointment_id)

        if not completed:
            self.db.rollback()
            current = self._current_status(appointment_id)
            if current == AppointmentStatus.COMPLETED:
                raise DuplicateRecordError(appointment_id)
            raise InvalidTransitionError(appointment_id, current.value if current else "missing", "complete")

        self.db.commit()
        self.db.refresh(record)

        logger.info(f"Completed appointment {appointment_id} by doctor {doctor_id}")
        return record

    def _get_or_404(self, appointment_id: int) -> Appointment:
        appointment = self.appointments.get(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment", appointment_id)
        return appointment

    def _transition(self, appointment_id: int, target: AppointmentStatus) -> bool:
        """Conditionally leave Pending. Returns False if the row was not Pending."""
        updated = self.db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.status == AppointmentStatus.PENDING,
        ).update({Appointment.status: target}, synchronize_session=False)
        return updated == 1

    def _current_status(self, appointment_id: int):
        return self.db.query(Appointment.status).filter(
            Appointment.id == appointment_id
        ).scalar()
