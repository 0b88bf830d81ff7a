from datetime import datetime
from typing import List, Optional

from pydantic import Field

from telemed.schemas.appointment import PersonSummary
from telemed.schemas.base import CamelModel
from telemed.schemas.pharmacy import MedicineResponse


class DosageIn(CamelModel):
    dosage: str = Field(..., min_length=1)
    frequency: str = Field(..., min_length=1)
    duration: str = Field(..., min_length=1)


class PrescriptionItemIn(CamelModel):
    medicine_name: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(1, ge=1)
    instructions: Optional[str] = None
    dosage_instructions: List[DosageIn] = []


class MedicalRecordCreate(CamelModel):
    appointment_id: int
    diagnosis: str = Field(..., min_length=1)
    prescription: Optional[str] = None  # free-text notes
    prescription_items: List[PrescriptionItemIn] = []
    pharmacy_id: Optional[int] = None


class MedicalRecordResponse(CamelModel):
    id: int
    patient_id: int
    doctor_id: int
    appointment_id: Optional[int] = None
    diagnosis: str
    prescription: Optional[str] = None
    created_at: Optional[datetime] = None
    doctor_name: Optional[str] = None
    appointment_time: Optional[datetime] = None

    @classmethod
    def from_orm_row(cls, r) -> "MedicalRecordResponse":
        out = cls.model_validate(r)
        if r.doctor is not None and r.doctor.user is not None:
            out.doctor_name = r.doctor.user.full_name
        if r.appointment is not None:
            out.appointment_time = r.appointment.appointment_time
        return out


class DosageInstructionResponse(CamelModel):
    id: int
    language_code: str
    text: str


class PrescriptionItemResponse(CamelModel):
    id: int
    medicine_id: int
    quantity: int
    instructions: Optional[str] = None
    medicine: Optional[MedicineResponse] = None
    dosage_instructions: List[DosageInstructionResponse] = []


class PrescriptionResponse(CamelModel):
    id: int
    patient_id: int
    doctor_id: int
    pharmacy_id: int
    medical_record_id: Optional[int] = None
    status: str
    created_at: Optional[datetime] = None
    patient: Optional[PersonSummary] = None
    doctor: Optional[PersonSummary] = None
    items: List[PrescriptionItemResponse] = []

    @classmethod
    def from_orm_row(cls, p) -> "PrescriptionResponse":
        return cls(
            id=p.id,
            patient_id=p.patient_id,
            doctor_id=p.doctor_id,
            pharmacy_id=p.pharmacy_id,
            medical_record_id=p.medical_record_id,
            status=p.status,
            created_at=p.created_at,
            patient=PersonSummary.model_validate(p.patient.user) if p.patient else None,
            doctor=PersonSummary.model_validate(p.doctor.user) if p.doctor else None,
            items=[PrescriptionItemResponse.model_validate(i) for i in p.items],
        )


class PrescriptionStatusUpdate(CamelModel):
    status: str
