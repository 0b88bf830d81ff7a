"""Pharmacist workspace: inventory, batches, stock flags, alerts, location, e-prescriptions.

Every endpoint is scoped to the caller's own pharmacy, which is created on
first access. Rows of another pharmacy answer 404.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from telemed.api.deps import get_db, get_current_pharmacist, get_pharmacy_id
from telemed.core.audit import AuditLog
from telemed.core.exceptions import ApiError
from telemed.models.enums import StockStatus
from telemed.models.pharmacy import Pharmacy
from telemed.models.user import User
from telemed.schemas.pharmacy import (
    AlertsResponse,
    BatchCreate,
    BatchResponse,
    InventoryItem,
    LocationUpdate,
    PharmacyResponse,
    StockResponse,
    StockStatusUpdate,
)
from telemed.schemas.prescription import PrescriptionResponse, PrescriptionStatusUpdate
from telemed.services import pharmacy_service, prescription_service
from telemed.services.pharmacy_service import MedicineNotFound, StockNotFound
from telemed.services.prescription_service import InvalidPrescriptionStatus, PrescriptionNotFound
from telemed.services.transitions import InvalidTransition

router = APIRouter()


# ==============================================================================
# INVENTORY & STOCK
# ==============================================================================

@router.get("/inventory", response_model=List[InventoryItem])
def get_inventory(
    search: Optional[str] = Query(None),
    status: Optional[StockStatus] = Query(None),
    expiring_in_days: Optional[int] = Query(None, alias="expiringInDays", ge=0),
    db: Session = Depends(get_db),
    pharmacy_id: int = Depends(get_pharmacy_id),
):
    """Per-medicine totals and soonest expiry. All or nothing: query failures are a 500."""
    try:
        return pharmacy_service.get_inventory(db, pharmacy_id, search, status, expiring_in_days)
    except SQLAlchemyError as e:
        raise ApiError.server_error(e)


@router.post("/batches", response_model=BatchResponse, status_code=201)
def create_batch(
    data: BatchCreate,
    db: Session = Depends(get_db),
    pharmacy_id: int = Depends(get_pharmacy_id),
    current_user: User = Depends(get_current_pharmacist),
):
    try:
        batch = pharmacy_service.create_batch(
            db, pharmacy_id, data.medicine_id, data.batch_number, data.quantity, data.expiry_date
        )
    except MedicineNotFound:
        raise ApiError.not_found("Medicine")

    AuditLog.log_action(
        "create", "batch", batch.id, current_user,
        changes={"medicine_id": batch.medicine_id, "quantity": batch.quantity},
    )
    return batch


@router.get("/stock", response_model=List[StockResponse])
def list_stock(
    medicine_name: Optional[str] = Query(None, alias="medicineName"),
    db: Session = Depends(get_db),
    pharmacy_id: int = Depends(get_pharmacy_id),
):
    return pharmacy_service.list_stock(db, pharmacy_id, medicine_name)


@router.put("/stock/{stock_id}", response_model=StockResponse)
def update_stock_status(
    stock_id: int,
    data: StockStatusUpdate,
    db: Session = Depends(get_db),
    pharmacy_id: int = Depends(get_pharmacy_id),
    current_user: User = Depends(get_current_pharmacist),
):
    try:
        stock = pharmacy_service.set_stock_status(db, pharmacy_id, stock_id, data.stock_status)
    except StockNotFound:
        raise ApiError.not_found("Stock", reason=f"stock {stock_id} outside pharmacy {pharmacy_id}")

    AuditLog.log_action("update", "stock", stock.id, current_user, changes={"stock_status": stock.stock_status})
    return stock


@router.get("/alerts/low-stock", response_model=AlertsResponse)
def get_alerts(db: Session = Depends(get_db), pharmacy_id: int = Depends(get_pharmacy_id)):
    return pharmacy_service.get_alerts(db, pharmacy_id)


# ==============================================================================
# LOCATION
# ==============================================================================

@router.get("/location", response_model=PharmacyResponse)
def get_location(db: Session = Depends(get_db), pharmacy_id: int = Depends(get_pharmacy_id)):
    return db.get(Pharmacy, pharmacy_id)


@router.put("/location", response_model=PharmacyResponse)
def update_location(
    data: LocationUpdate,
    db: Session = Depends(get_db),
    pharmacy_id: int = Depends(get_pharmacy_id),
    current_user: User = Depends(get_current_pharmacist),
):
    changes = data.model_dump(exclude_unset=True)
    pharmacy = pharmacy_service.update_location(db, db.get(Pharmacy, pharmacy_id), changes)
    AuditLog.log_action("update", "pharmacy", pharmacy.id, current_user, changes=changes)
    return pharmacy


# ==============================================================================
# E-PRESCRIPTIONS
# ==============================================================================

@router.get("/prescriptions", response_model=List[PrescriptionResponse])
def list_prescriptions(
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    pharmacy_id: int = Depends(get_pharmacy_id),
):
    """Prescriptions addressed to this pharmacy, newest first. ``status`` is case-insensitive."""
    wanted = None
    if status:
        try:
            wanted = prescription_service.normalize_prescription_status(status)
        except InvalidPrescriptionStatus as e:
            raise ApiError.bad_request(str(e))

    rows = prescription_service.list_prescriptions(db, pharmacy_id, wanted)
    return [PrescriptionResponse.from_orm_row(p) for p in rows]


@router.patch("/prescriptions/{prescription_id}/status", response_model=PrescriptionResponse)
def update_prescription_status(
    prescription_id: int,
    data: PrescriptionStatusUpdate,
    db: Session = Depends(get_db),
    pharmacy_id: int = Depends(get_pharmacy_id),
    current_user: User = Depends(get_current_pharmacist),
):
    try:
        prescription = prescription_service.update_prescription_status(db, pharmacy_id, prescription_id, data.status)
    except InvalidPrescriptionStatus as e:
        raise ApiError.bad_request(str(e))
    except PrescriptionNotFound:
        raise ApiError.not_found("Prescription", reason=f"prescription {prescription_id} outside pharmacy {pharmacy_id}")
    except InvalidTransition as e:
        raise ApiError.conflict(str(e))

    AuditLog.log_action("update", "prescription", prescription.id, current_user, changes={"status": prescription.status})
    return PrescriptionResponse.from_orm_row(prescription)
