"""Appointment booking and the doctor-side status transitions."""
import logging
from datetime import datetime, time, timedelta, timezone
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from telemed.models.appointment import Appointment
from telemed.models.enums import AppointmentStatus
from telemed.models.profiles import DoctorProfile, PatientProfile
from telemed.services.transitions import APPOINTMENT_TRANSITIONS, check_transition

logger = logging.getLogger(__name__)

REJECTION_NOTE = "Rejected by doctor"


class DoctorNotFound(LookupError):
    pass


class AppointmentNotFound(LookupError):
    """Missing, or not visible to the caller."""


class AppointmentInPast(ValueError):
    pass


def utc_naive(dt: datetime) -> datetime:
    """Stored times are naive UTC."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _with_people(q):
    return q.options(
        joinedload(Appointment.patient).joinedload(PatientProfile.user),
        joinedload(Appointment.doctor).joinedload(DoctorProfile.user),
    )


def create_appointment(
    db: Session,
    patient: PatientProfile,
    doctor_id: int,
    appointment_time: datetime,
    symptoms: Optional[str] = None,
) -> Appointment:
    doctor = db.get(DoctorProfile, doctor_id)
    if doctor is None:
        raise DoctorNotFound(doctor_id)

    when = utc_naive(appointment_time)
    if when <= utcnow():
        raise AppointmentInPast("Appointment time must be in the future")

    appointment = Appointment(
        patient_id=patient.id,
        doctor_id=doctor.id,
        appointment_time=when,
        symptoms=symptoms,
        status=AppointmentStatus.PENDING.value,
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    logger.info(f"Appointment {appointment.id} booked: patient {patient.id} with doctor {doctor.id}")
    return appointment


def upcoming_for_patient(db: Session, patient: PatientProfile) -> List[Appointment]:
    return (
        _with_people(db.query(Appointment))
        .filter(Appointment.patient_id == patient.id, Appointment.appointment_time > utcnow())
        .order_by(Appointment.appointment_time.asc())
        .all()
    )


def pending_for_doctor(db: Session, doctor: DoctorProfile) -> List[Appointment]:
    return (
        _with_people(db.query(Appointment))
        .filter(
            Appointment.doctor_id == doctor.id,
            Appointment.status == AppointmentStatus.PENDING.value,
        )
        .order_by(Appointment.appointment_time.asc())
        .all()
    )


def confirmed_today_for_doctor(db: Session, doctor: DoctorProfile) -> List[Appointment]:
    start = datetime.combine(utcnow().date(), time.min)
    end = start + timedelta(days=1)
    return (
        _with_people(db.query(Appointment))
        .filter(
            Appointment.doctor_id == doctor.id,
            Appointment.status == AppointmentStatus.CONFIRMED.value,
            Appointment.appointment_time >= start,
            Appointment.appointment_time < end,
        )
        .order_by(Appointment.appointment_time.asc())
        .all()
    )


def get_visible_appointment(
    db: Session,
    appointment_id: int,
    patient: Optional[PatientProfile] = None,
    doctor: Optional[DoctorProfile] = None,
) -> Appointment:
    appointment = _with_people(db.query(Appointment)).filter(Appointment.id == appointment_id).first()
    if appointment is None:
        raise AppointmentNotFound(appointment_id)
    if patient is not None and appointment.patient_id == patient.id:
        return appointment
    if doctor is not None and appointment.doctor_id == doctor.id:
        return appointment
    raise AppointmentNotFound(appointment_id)


def transition_appointment(
    db: Session,
    doctor: DoctorProfile,
    appointment_id: int,
    target: AppointmentStatus,
    notes: Optional[str] = None,
) -> Appointment:
    """
    Move an appointment owned by ``doctor`` to ``target``.

    Raises AppointmentNotFound (missing or someone else's) and
    InvalidTransition (target not reachable from the current status).
    """
    appointment = db.query(Appointment).filter(
        Appointment.id == appointment_id,
        Appointment.doctor_id == doctor.id,
    ).first()
    if appointment is None:
        raise AppointmentNotFound(appointment_id)

    check_transition(APPOINTMENT_TRANSITIONS, "appointment", appointment.status, target.value)

    appointment.status = target.value
    if notes is not None:
        appointment.consultation_notes = notes
    db.commit()
    db.refresh(appointment)
    return appointment
