from datetime import datetime
from pydantic import AliasChoices, BaseModel, Field
from typing import Optional

from ..models.appointment import AppointmentStatus


class AppointmentCreate(BaseModel):
    # The camelCase names are what the web client sends
    doctor_id: int = Field(..., validation_alias=AliasChoices("doctor_id", "docId"))
    patient_id: int = Field(..., validation_alias=AliasChoices("patient_id", "patId"))
    scheduled_at: str = Field(
        ..., min_length=1, max_length=64,
        validation_alias=AliasChoices("scheduled_at", "datetime"),
    )

    class Config:
        str_strip_whitespace = True


class Vitals(BaseModel):
    blood_pressure: Optional[str] = Field(
        None, max_length=20, validation_alias=AliasChoices("blood_pressure", "bp")
    )
    heart_rate: Optional[int] = Field(None, validation_alias=AliasChoices("heart_rate", "heartRate"))
    temperature: Optional[float] = Field(None, validation_alias=AliasChoices("temperature", "temp"))
    weight: Optional[float] = None
    comments: Optional[str] = None


class AppointmentComplete(Vitals):
    # Defaults to the authenticated doctor
    doctor_id: Optional[int] = Field(None, validation_alias=AliasChoices("doctor_id", "docId"))


class AppointmentResponse(BaseModel):
    id: int
    doctor_id: int
    patient_id: int
    scheduled_at: str
    status: AppointmentStatus

    class Config:
        from_attributes = True


class MedicalRecordResponse(Vitals):
    id: int
    appointment_id: int
    doctor_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AppointmentDetail(AppointmentResponse):
    """An appointment joined with its participants and medical record."""

    doctor_name: Optional[str] = None
    doctor_specialty: Optional[str] = None
    patient_name: Optional[str] = None
    record: Optional[MedicalRecordResponse] = None
