"""
Admin reporting. Every figure is a grouped count recomputed per request.
"""
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from telemed.models.appointment import Appointment
from telemed.models.enums import AppointmentStatus, Role
from telemed.models.pharmacy import Pharmacy
from telemed.models.profiles import DoctorProfile, PatientProfile
from telemed.models.user import User

RECENT_APPOINTMENTS_LIMIT = 20


def _empty_breakdown() -> Dict[str, int]:
    return {s.value.lower(): 0 for s in AppointmentStatus}


def _breakdowns(db: Session, column) -> Dict[int, Dict[str, Any]]:
    """{owner_id: {"total": n, "statusBreakdown": {...}}} from one GROUP BY (owner, status)."""
    rows = db.query(column, Appointment.status, func.count(Appointment.id)).group_by(column, Appointment.status).all()
    result: Dict[int, Dict[str, Any]] = {}
    for owner_id, status, count in rows:
        entry = result.setdefault(owner_id, {"total": 0, "statusBreakdown": _empty_breakdown()})
        entry["total"] += count
        key = str(status).lower()
        if key in entry["statusBreakdown"]:
            entry["statusBreakdown"][key] += count
    return result


def appointments_summary(db: Session) -> Dict[str, Any]:
    by_status = dict(
        db.query(Appointment.status, func.count(Appointment.id)).group_by(Appointment.status).all()
    )
    totals = {"total": sum(by_status.values())}
    for s in AppointmentStatus:
        totals[s.value.lower()] = by_status.get(s.value, 0)

    per_doctor = _breakdowns(db, Appointment.doctor_id)
    doctors = (
        db.query(DoctorProfile)
        .options(joinedload(DoctorProfile.user))
        .filter(DoctorProfile.id.in_(list(per_doctor)))
        .all()
    ) if per_doctor else []
    bookings_per_doctor = sorted(
        (
            {
                "doctorId": d.id,
                "name": f"Dr. {d.user.full_name}".strip(),
                "email": d.user.email,
                **per_doctor[d.id],
            }
            for d in doctors
        ),
        key=lambda r: r["total"],
        reverse=True,
    )

    per_patient = _breakdowns(db, Appointment.patient_id)
    patients = (
        db.query(PatientProfile)
        .options(joinedload(PatientProfile.user))
        .filter(PatientProfile.id.in_(list(per_patient)))
        .all()
    ) if per_patient else []
    bookings_per_user = sorted(
        (
            {
                "patientId": p.id,
                "name": p.user.full_name,
                "email": p.user.email,
                **per_patient[p.id],
            }
            for p in patients
        ),
        key=lambda r: r["total"],
        reverse=True,
    )

    recent = (
        db.query(Appointment)
        .options(
            joinedload(Appointment.patient).joinedload(PatientProfile.user),
            joinedload(Appointment.doctor).joinedload(DoctorProfile.user),
        )
        .order_by(Appointment.appointment_time.desc(), Appointment.id.desc())
        .limit(RECENT_APPOINTMENTS_LIMIT)
        .all()
    )

    return {
        "totals": totals,
        "bookingsPerDoctor": bookings_per_doctor,
        "bookingsPerUser": bookings_per_user,
        "recentAppointments": recent,
    }


def overview(db: Session) -> Dict[str, int]:
    by_role = dict(db.query(User.role, func.count(User.id)).group_by(User.role).all())
    return {
        "users": sum(by_role.values()),
        "doctors": by_role.get(Role.DOCTOR.value, 0),
        "pharmacists": by_role.get(Role.PHARMACIST.value, 0),
        "patients": by_role.get(Role.PATIENT.value, 0),
        "pharmacies": db.query(func.count(Pharmacy.id)).scalar() or 0,
    }


def list_users(db: Session, role: Role = None) -> List[User]:
    q = db.query(User)
    if role is not None:
        q = q.filter(User.role == role.value)
    return q.order_by(User.created_at.desc(), User.id.desc()).all()


def list_doctors(db: Session, available_only: bool = False) -> List[DoctorProfile]:
    q = db.query(DoctorProfile).join(User, DoctorProfile.user_id == User.id).options(joinedload(DoctorProfile.user))
    q = q.filter(User.role == Role.DOCTOR.value)
    if available_only:
        q = q.filter(DoctorProfile.is_available.is_(True))
    return q.order_by(User.last_name.asc(), DoctorProfile.id.asc()).all()
