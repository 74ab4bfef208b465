from pydantic import BaseModel
from typing import List, Optional

from .appointment import AppointmentDetail
from .user import UserResponse


class AdminDashboard(BaseModel):
    doctors: List[UserResponse]
    patients: List[UserResponse]


class DoctorDashboard(BaseModel):
    pending: List[AppointmentDetail]
    completed: List[AppointmentDetail]


class PatientDashboard(BaseModel):
    appointments: List[AppointmentDetail]
    completed: List[AppointmentDetail]
    latest_vitals: Optional[AppointmentDetail] = None
    doctors: List[UserResponse]
