"""
Consultation write path and e-prescription handling.

create_medical_record writes the record, the optional prescription with its
items and dosage instructions, and the appointment's move to COMPLETED as a
single transaction: either all rows exist afterwards or none do.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from telemed.models.appointment import Appointment, MedicalRecord
from telemed.models.enums import AppointmentStatus, PrescriptionStatus
from telemed.models.pharmacy import Medicine, Pharmacy
from telemed.models.prescription import DosageInstruction, Prescription, PrescriptionItem
from telemed.models.profiles import DoctorProfile, PatientProfile
from telemed.services.transitions import PRESCRIPTION_TRANSITIONS, InvalidTransition, check_transition

logger = logging.getLogger(__name__)

PRESCRIPTION_LIST_LIMIT = 100
RECORDABLE_APPOINTMENT_STATUSES = {AppointmentStatus.CONFIRMED.value, AppointmentStatus.COMPLETED.value}


class AppointmentNotAssigned(LookupError):
    """Appointment missing or not assigned to the doctor. Both look the same to callers."""


class PharmacyRequired(ValueError):
    pass


class PharmacyNotFound(LookupError):
    pass


class PrescriptionNotFound(LookupError):
    pass


class InvalidPrescriptionStatus(ValueError):
    def __init__(self, value):
        allowed = ", ".join(s.value for s in PrescriptionStatus)
        super().__init__(f"Invalid prescription status provided. Allowed: {allowed}")
        self.value = value


def normalize_prescription_status(value: Any) -> PrescriptionStatus:
    """Case-insensitive parse; anything outside the closed set raises."""
    if not isinstance(value, str):
        raise InvalidPrescriptionStatus(value)
    try:
        return PrescriptionStatus(value.strip().upper())
    except ValueError:
        raise InvalidPrescriptionStatus(value)


def format_dosage(dosage: str, frequency: str, duration: str) -> str:
    return f"{dosage} - {frequency} for {duration}"


def resolve_medicine(db: Session, name: str) -> Medicine:
    """Exact, case-insensitive name match after trimming. Unknown names are added to the catalog."""
    name = name.strip()
    medicine = db.query(Medicine).filter(func.lower(Medicine.name) == name.lower()).order_by(Medicine.id).first()
    if medicine is None:
        medicine = Medicine(name=name, generic_name=name)
        db.add(medicine)
        db.flush()
        logger.info(f"Added medicine '{name}' to catalog")
    return medicine


def create_medical_record(
    db: Session,
    doctor: DoctorProfile,
    appointment_id: int,
    diagnosis: str,
    notes: Optional[str] = None,
    items: Optional[List[Dict[str, Any]]] = None,
    pharmacy_id: Optional[int] = None,
) -> MedicalRecord:
    """
    ``items`` entries: {medicineName, quantity, instructions?,
    dosageInstructions: [{dosage, frequency, duration}]}.

    Raises AppointmentNotAssigned, InvalidTransition (appointment neither
    CONFIRMED nor COMPLETED), PharmacyRequired, PharmacyNotFound.
    """
    appointment = db.get(Appointment, appointment_id)
    if appointment is None or appointment.doctor_id != doctor.id:
        raise AppointmentNotAssigned(appointment_id)
    if appointment.status not in RECORDABLE_APPOINTMENT_STATUSES:
        raise InvalidTransition("appointment", appointment.status, AppointmentStatus.COMPLETED.value)

    items = items or []
    if items:
        if pharmacy_id is None:
            raise PharmacyRequired("Pharmacy ID is required for prescriptions")
        if db.get(Pharmacy, pharmacy_id) is None:
            raise PharmacyNotFound(pharmacy_id)

    try:
        record = MedicalRecord(
            patient_id=appointment.patient_id,
            doctor_id=doctor.id,
            appointment_id=appointment.id,
            diagnosis=diagnosis,
            prescription=notes,
        )
        db.add(record)
        db.flush()

        if items:
            prescription = Prescription(
                patient_id=appointment.patient_id,
                doctor_id=doctor.id,
                pharmacy_id=pharmacy_id,
                medical_record_id=record.id,
                status=PrescriptionStatus.PENDING.value,
            )
            for item in items:
                medicine = resolve_medicine(db, item["medicineName"])
                line = PrescriptionItem(
                    medicine_id=medicine.id,
                    quantity=item.get("quantity") or 1,
                    instructions=item.get("instructions"),
                )
                for d in item.get("dosageInstructions") or []:
                    line.dosage_instructions.append(DosageInstruction(
                        language_code="en",
                        text=format_dosage(d["dosage"], d["frequency"], d["duration"]),
                    ))
                prescription.items.append(line)
            db.add(prescription)

        if appointment.status == AppointmentStatus.CONFIRMED.value:
            appointment.status = AppointmentStatus.COMPLETED.value
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(record)
    return record


def list_patient_records(db: Session, patient: PatientProfile) -> List[MedicalRecord]:
    return (
        db.query(MedicalRecord)
        .options(
            joinedload(MedicalRecord.doctor).joinedload(DoctorProfile.user),
            joinedload(MedicalRecord.appointment),
        )
        .filter(MedicalRecord.patient_id == patient.id)
        .order_by(MedicalRecord.created_at.desc(), MedicalRecord.id.desc())
        .all()
    )


def list_prescriptions(
    db: Session,
    pharmacy_id: int,
    status: Optional[PrescriptionStatus] = None,
) -> List[Prescription]:
    q = (
        db.query(Prescription)
        .options(
            joinedload(Prescription.patient).joinedload(PatientProfile.user),
            joinedload(Prescription.doctor).joinedload(DoctorProfile.user),
            joinedload(Prescription.items).joinedload(PrescriptionItem.medicine),
            joinedload(Prescription.items).joinedload(PrescriptionItem.dosage_instructions),
        )
        .filter(Prescription.pharmacy_id == pharmacy_id)
    )
    if status is not None:
        q = q.filter(Prescription.status == status.value)
    return (
        q.order_by(Prescription.created_at.desc(), Prescription.id.desc())
        .limit(PRESCRIPTION_LIST_LIMIT)
        .all()
    )


def update_prescription_status(
    db: Session,
    pharmacy_id: int,
    prescription_id: int,
    raw_status: Any,
) -> Prescription:
    """
    Validate first, then load, then check the transition table. Nothing is
    written unless all three pass.
    """
    target = normalize_prescription_status(raw_status)

    prescription = db.query(Prescription).filter(
        Prescription.id == prescription_id,
        Prescription.pharmacy_id == pharmacy_id,
    ).first()
    if prescription is None:
        raise PrescriptionNotFound(prescription_id)

    check_transition(PRESCRIPTION_TRANSITIONS, "prescription", prescription.status, target.value)

    prescription.status = target.value
    db.commit()
    db.refresh(prescription)
    return prescription
