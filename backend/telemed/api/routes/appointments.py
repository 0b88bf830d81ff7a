"""Appointments: patients book, doctors approve / reject / complete.

Ownership: a doctor can only move their own appointments. Someone else's
appointment and a missing one both answer 404.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from telemed.api.deps import get_db, get_current_user, get_doctor_profile, get_patient_profile
from telemed.core.audit import AuditLog
from telemed.core.exceptions import ApiError
from telemed.models.enums import AppointmentStatus
from telemed.models.profiles import DoctorProfile, PatientProfile
from telemed.models.user import User
from telemed.schemas.appointment import AppointmentCreate, AppointmentResponse
from telemed.services import appointment_service
from telemed.services.appointment_service import AppointmentInPast, AppointmentNotFound, DoctorNotFound
from telemed.services.transitions import InvalidTransition

router = APIRouter()


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: AppointmentCreate,
    db: Session = Depends(get_db),
    patient: PatientProfile = Depends(get_patient_profile),
):
    try:
        appointment = appointment_service.create_appointment(
            db, patient, data.doctor_id, data.appointment_time, data.symptoms
        )
    except DoctorNotFound:
        raise ApiError.not_found("Doctor")
    except AppointmentInPast as e:
        raise ApiError.bad_request(str(e))

    AuditLog.log_action("create", "appointment", appointment.id, patient.user)
    return appointment


@router.get("/my-appointments", response_model=List[AppointmentResponse])
def my_appointments(db: Session = Depends(get_db), patient: PatientProfile = Depends(get_patient_profile)):
    """Upcoming appointments of the patient, soonest first."""
    return [AppointmentResponse.from_orm_row(a) for a in appointment_service.upcoming_for_patient(db, patient)]


@router.get("/pending", response_model=List[AppointmentResponse])
def pending_appointments(db: Session = Depends(get_db), doctor: DoctorProfile = Depends(get_doctor_profile)):
    return [AppointmentResponse.from_orm_row(a) for a in appointment_service.pending_for_doctor(db, doctor)]


@router.get("/today-confirmed", response_model=List[AppointmentResponse])
def today_confirmed(db: Session = Depends(get_db), doctor: DoctorProfile = Depends(get_doctor_profile)):
    return [AppointmentResponse.from_orm_row(a) for a in appointment_service.confirmed_today_for_doctor(db, doctor)]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(appointment_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    try:
        appointment = appointment_service.get_visible_appointment(
            db,
            appointment_id,
            patient=current_user.patient_profile,
            doctor=current_user.doctor_profile,
        )
    except AppointmentNotFound:
        raise ApiError.not_found("Appointment", reason=f"user {current_user.id} on appointment {appointment_id}")
    return AppointmentResponse.from_orm_row(appointment)


def _transition(db: Session, doctor: DoctorProfile, appointment_id: int, target: AppointmentStatus, action: str, notes=None):
    try:
        appointment = appointment_service.transition_appointment(db, doctor, appointment_id, target, notes=notes)
    except AppointmentNotFound:
        raise ApiError.not_found(
            "Appointment", reason=f"doctor {doctor.id} on appointment {appointment_id}"
        )
    except InvalidTransition as e:
        raise ApiError.conflict(str(e))

    AuditLog.log_action(action, "appointment", appointment.id, doctor.user, changes={"status": appointment.status})
    return appointment


@router.put("/{appointment_id}/approve", response_model=AppointmentResponse)
def approve_appointment(appointment_id: int, db: Session = Depends(get_db), doctor: DoctorProfile = Depends(get_doctor_profile)):
    return _transition(db, doctor, appointment_id, AppointmentStatus.CONFIRMED, "approve")


@router.put("/{appointment_id}/reject", response_model=AppointmentResponse)
def reject_appointment(appointment_id: int, db: Session = Depends(get_db), doctor: DoctorProfile = Depends(get_doctor_profile)):
    return _transition(
        db, doctor, appointment_id, AppointmentStatus.CANCELLED, "reject",
        notes=appointment_service.REJECTION_NOTE,
    )


@router.put("/{appointment_id}/complete", response_model=AppointmentResponse)
def complete_appointment(appointment_id: int, db: Session = Depends(get_db), doctor: DoctorProfile = Depends(get_doctor_profile)):
    return _transition(db, doctor, appointment_id, AppointmentStatus.COMPLETED, "complete")
