from datetime import datetime
from typing import Optional

from pydantic import Field, StrictBool

from telemed.schemas.base import CamelModel


class AppointmentCreate(CamelModel):
    doctor_id: int
    appointment_time: datetime
    symptoms: Optional[str] = Field(None, max_length=2000)


class PersonSummary(CamelModel):
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class AppointmentResponse(CamelModel):
    id: int
    patient_id: int
    doctor_id: int
    appointment_time: datetime
    symptoms: Optional[str] = None
    status: str
    consultation_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    patient_name: Optional[str] = None
    doctor_name: Optional[str] = None

    @classmethod
    def from_orm_row(cls, a) -> "AppointmentResponse":
        out = cls.model_validate(a)
        if a.patient is not None and a.patient.user is not None:
            out.patient_name = a.patient.user.full_name
        if a.doctor is not None and a.doctor.user is not None:
            out.doctor_name = a.doctor.user.full_name
        return out


class DoctorResponse(CamelModel):
    id: int
    user_id: int
    specialization: Optional[str] = None
    qualifications: Optional[str] = None
    experience_years: Optional[int] = None
    is_available: bool = True
    user: PersonSummary


class DoctorStatusUpdate(CamelModel):
    is_available: StrictBool
