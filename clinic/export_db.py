"""
Dump the clinic database to a JSON snapshot.

    python -m clinic.export_db --output db_dump.json
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import argparse
import json
import logging

from sqlalchemy.orm import Session

from .core.config import settings
from .core.database import Database
from .models.appointment import Appointment
from .models.medical_record import MedicalRecord
from .models.user import User
from .schemas.appointment import AppointmentResponse, MedicalRecordResponse
from .schemas.user import UserResponse

logger = logging.getLogger(__name__)


def export_snapshot(db: Session) -> Dict[str, Any]:
    """Collect every table; users are sanitized, so no password digests."""
    users: List[Dict[str, Any]] = [
        UserResponse.model_validate(user).model_dump(mode="json")
        for user in db.query(User).order_by(User.id).all()
    ]
    appointments = [
        AppointmentResponse.model_validate(appointment).model_dump(mode="json")
        for appointment in db.query(Appointment).order_by(Appointment.id).all()
    ]
    medical_records = [
        MedicalRecordResponse.model_validate(record).model_dump(mode="json")
        for record in db.query(MedicalRecord).order_by(MedicalRecord.id).all()
    ]

    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "users": users,
        "appointments": appointments,
        "medical_records": medical_records,
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Export the clinic database to JSON")
    parser.add_argument("--output", default="db_dump.json", help="file to write")
    parser.add_argument(
        "--database-url",
        default=settings.get_database_url,
        help="SQLAlchemy URL, defaults to the configured database",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.LOG_LEVEL)

    database = Database(args.database_url)
    db = database.session()
    try:
        snapshot = export_snapshot(db)
    finally:
        db.close()
        database.dispose()

    with open(args.output, "w", encoding="utf-8") as fh:
        json.dump(snapshot, fh, indent=2)

    logger.info(
        f"Exported {len(snapshot['users'])} users, {len(snapshot['appointments'])} appointments "
        f"and {len(snapshot['medical_records'])} medical records to {args.output}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
