"""Doctor directory and the doctor's own availability switch."""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from telemed.api.deps import get_db, get_current_user, get_doctor_profile
from telemed.core.audit import AuditLog
from telemed.models.profiles import DoctorProfile
from telemed.models.user import User
from telemed.schemas.appointment import DoctorResponse, DoctorStatusUpdate
from telemed.services.admin_service import list_doctors

router = APIRouter()


@router.get("", response_model=List[DoctorResponse])
def available_doctors(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Doctors accepting bookings, by last name."""
    return list_doctors(db, available_only=True)


@router.get("/me", response_model=DoctorResponse)
def my_doctor_profile(doctor: DoctorProfile = Depends(get_doctor_profile)):
    return doctor


@router.put("/me/status", response_model=DoctorResponse)
def update_my_status(
    data: DoctorStatusUpdate,
    db: Session = Depends(get_db),
    doctor: DoctorProfile = Depends(get_doctor_profile),
):
    doctor.is_available = data.is_available
    db.commit()
    db.refresh(doctor)
    AuditLog.log_action("update", "doctor_profile", doctor.id, doctor.user, changes={"is_available": data.is_available})
    return doctor
