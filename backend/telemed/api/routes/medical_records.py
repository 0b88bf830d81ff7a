"""Consultation records written by doctors, read by patients."""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from telemed.api.deps import get_db, get_doctor_profile, get_patient_profile
from telemed.core.audit import AuditLog
from telemed.core.exceptions import ApiError
from telemed.models.profiles import DoctorProfile, PatientProfile
from telemed.schemas.prescription import MedicalRecordCreate, MedicalRecordResponse
from telemed.services import prescription_service
from telemed.services.prescription_service import AppointmentNotAssigned, PharmacyNotFound, PharmacyRequired
from telemed.services.transitions import InvalidTransition

router = APIRouter()


@router.post("", response_model=MedicalRecordResponse, status_code=status.HTTP_201_CREATED)
def create_medical_record(
    data: MedicalRecordCreate,
    db: Session = Depends(get_db),
    doctor: DoctorProfile = Depends(get_doctor_profile),
):
    """
    Record the diagnosis and, when items are given, issue a prescription to
    ``pharmacyId``. A CONFIRMED appointment becomes COMPLETED in the same
    transaction.
    """
    items = [item.model_dump(by_alias=True) for item in data.prescription_items]
    try:
        record = prescription_service.create_medical_record(
            db,
            doctor,
            data.appointment_id,
            data.diagnosis,
            notes=data.prescription,
            items=items,
            pharmacy_id=data.pharmacy_id,
        )
    except AppointmentNotAssigned:
        raise ApiError.forbidden(f"doctor {doctor.id} on appointment {data.appointment_id}")
    except InvalidTransition as e:
        raise ApiError.conflict(f"Appointment must be CONFIRMED or COMPLETED, not {e.current}")
    except PharmacyRequired as e:
        raise ApiError.bad_request(str(e))
    except PharmacyNotFound:
        raise ApiError.not_found("Pharmacy")

    AuditLog.log_action(
        "create", "medical_record", record.id, doctor.user,
        changes={"appointment_id": data.appointment_id, "items": len(items)},
    )
    return MedicalRecordResponse.from_orm_row(record)


@router.get("/me", response_model=List[MedicalRecordResponse])
def my_medical_records(db: Session = Depends(get_db), patient: PatientProfile = Depends(get_patient_profile)):
    """Newest first."""
    return [MedicalRecordResponse.from_orm_row(r) for r in prescription_service.list_patient_records(db, patient)]
