"""Admin reports. Read-only; every route requires the ADMIN role."""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from telemed.api.deps import get_db, get_current_admin
from telemed.models.enums import Role
from telemed.schemas.appointment import AppointmentResponse, DoctorResponse
from telemed.schemas.user import UserResponse
from telemed.services import admin_service

router = APIRouter(dependencies=[Depends(get_current_admin)])


@router.get("/appointments/summary")
def appointments_summary(db: Session = Depends(get_db)):
    """
    Totals by status, bookings per doctor and per patient (busiest first),
    and the 20 most recent appointments.
    """
    summary = admin_service.appointments_summary(db)
    summary["recentAppointments"] = [
        AppointmentResponse.from_orm_row(a).model_dump(by_alias=True)
        for a in summary["recentAppointments"]
    ]
    return summary


@router.get("/overview")
def overview(db: Session = Depends(get_db)):
    return admin_service.overview(db)


@router.get("/users", response_model=List[UserResponse])
def all_users(db: Session = Depends(get_db)):
    return admin_service.list_users(db)


@router.get("/doctors", response_model=List[DoctorResponse])
def all_doctors(db: Session = Depends(get_db)):
    return admin_service.list_doctors(db)


@router.get("/pharmacists", response_model=List[UserResponse])
def all_pharmacists(db: Session = Depends(get_db)):
    return admin_service.list_users(db, role=Role.PHARMACIST)
