"""
Domain errors for the clinic scheduling core.

Services raise these; the API layer turns them into structured JSON
responses (see ``clinic.api.errors``).
"""

from typing import Any, Dict, Optional

from fastapi import status


class ClinicError(Exception):
    """Base class for every recoverable domain failure."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "ClinicError"
    default_message = "Request could not be processed"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": False,
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidInputError(ClinicError):
    """A required field is missing or references something unusable."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "InvalidInput"
    default_message = "Invalid input"


class InvalidCredentialsError(ClinicError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "InvalidCredentials"
    default_message = "Invalid email or password"


class NotFoundError(ClinicError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NotFound"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f"{entity} {entity_id} not found",
            {"entity": entity, "id": entity_id},
        )


class DuplicateEmailError(ClinicError):
    status_code = status.HTTP_409_CONFLICT
    code = "DuplicateEmail"
    default_message = "Email already registered"


class DuplicateRecordError(ClinicError):
    """The appointment already carries a medical record."""

    status_code = status.HTTP_409_CONFLICT
    code = "DuplicateRecord"

    def __init__(self, appointment_id: int):
        super().__init__(
            f"Appointment {appointment_id} already has a medical record",
            {"appointment_id": appointment_id},
        )


class InvalidTransitionError(ClinicError):
    """The appointment's current status does not allow the operation."""

    status_code = status.HTTP_409_CONFLICT
    code = "InvalidTransition"

    def __init__(self, appointment_id: int, current_status: str, operation: str):
        super().__init__(
            f"Cannot {operation} appointment {appointment_id} in status {current_status}",
            {
                "appointment_id": appointment_id,
                "status": current_status,
                "operation": operation,
            },
        )


class StorageUnavailableError(ClinicError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "StorageUnavailable"
    default_message = "The database is unavailable"
