from sqlalchemy.orm import Session
from typing import Iterable, Optional

from ..models.medical_record import MedicalRecord
from ..schemas.appointment import Vitals


class MedicalRecordService:
    """Storage for the single clinical record attached to a completed visit.

    Nothing here commits; the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_for_appointment(self, appointment_id: int) -> Optional[MedicalRecord]:
        return self.db.query(MedicalRecord).filter(
            MedicalRecord.appointment_id == appointment_id
        ).first()

    def add(self, appointment_id: int, doctor_id: int, vitals: Vitals) -> MedicalRecord:
        """Stage a new record and flush it.

        A second record for the same appointment fails the flush with an
        IntegrityError from the unique constraint.
        """
        record = MedicalRecord(
            appointment_id=appointment_id,
            doctor_id=doctor_id,
            blood_pressure=vitals.blood_pressure,
            heart_rate=vitals.heart_rate,
            temperature=vitals.temperature,
            weight=vitals.weight,
            comments=vitals.comments,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def delete_for_appointments(self, appointment_ids: Iterable[int]) -> int:
        appointment_ids = list(appointment_ids)
        if not appointment_ids:
            return 0
        return self.db.query(MedicalRecord).filter(
            MedicalRecord.appointment_id.in_(appointment_ids)
        ).delete(synchronize_session=False)
