"""
Public pharmacy directory: listing, proximity search and medicine lookup.

Database errors are not propagated to patients. The caller gets the static
fallback set instead, with every row marked ``source="fallback"`` and the
second tuple element False so the route can set X-Data-Source.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from telemed.models.enums import StockStatus
from telemed.models.pharmacy import Medicine, Pharmacy, PharmacyStock
from telemed.models.profiles import PharmacistProfile
from telemed.services.geo import fallback_medicine_search, fallback_pharmacies, filter_by_distance
from telemed.services.pharmacy_service import contains_pattern, name_matches

logger = logging.getLogger(__name__)


def serialize_pharmacy(p: Pharmacy) -> Dict[str, Any]:
    user = p.pharmacist.user if p.pharmacist is not None else None
    return {
        "id": p.id,
        "name": p.name,
        "address": p.address,
        "city": p.city,
        "state": p.state,
        "pincode": p.pincode,
        "latitude": p.latitude,
        "longitude": p.longitude,
        "phone": p.phone or (user.phone if user else None),
        "email": p.email or (user.email if user else None),
        "pharmacistName": (user.full_name or None) if user else None,
        "operatingHours": p.operating_hours or {},
        "services": p.services or [],
        "source": "database",
    }


def _load_pharmacies(db: Session) -> List[Dict[str, Any]]:
    pharmacies = (
        db.query(Pharmacy)
        .options(joinedload(Pharmacy.pharmacist).joinedload(PharmacistProfile.user))
        .order_by(Pharmacy.id.asc())
        .all()
    )
    return [serialize_pharmacy(p) for p in pharmacies]


def list_pharmacies(db: Session) -> Tuple[List[Dict[str, Any]], bool]:
    try:
        return _load_pharmacies(db), True
    except SQLAlchemyError as e:
        logger.error(f"Pharmacy listing failed, serving fallback data: {e}")
        db.rollback()
        return fallback_pharmacies(), False


def pharmacies_for_patients(
    db: Session,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    radius_km: Optional[float] = None,
) -> Tuple[List[Dict[str, Any]], bool]:
    rows, from_db = list_pharmacies(db)
    return filter_by_distance(rows, latitude, longitude, radius_km), from_db


def search_medicine(db: Session, medicine_name: str) -> Tuple[List[Dict[str, Any]], bool]:
    """IN_STOCK rows across all pharmacies whose medicine name or generic name matches."""
    term = contains_pattern(medicine_name)
    try:
        stocks = (
            db.query(PharmacyStock)
            .join(Medicine, PharmacyStock.medicine_id == Medicine.id)
            .join(Pharmacy, PharmacyStock.pharmacy_id == Pharmacy.id)
            .options(joinedload(PharmacyStock.medicine), joinedload(PharmacyStock.pharmacy))
            .filter(
                name_matches(term),
                PharmacyStock.stock_status == StockStatus.IN_STOCK.value,
            )
            .order_by(Pharmacy.name.asc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Medicine search failed, serving fallback data: {e}")
        db.rollback()
        return fallback_medicine_search(medicine_name), False

    return [
        {
            "pharmacyId": s.pharmacy.id,
            "pharmacyName": s.pharmacy.name,
            "pharmacyAddress": s.pharmacy.address,
            "latitude": s.pharmacy.latitude,
            "longitude": s.pharmacy.longitude,
            "medicine": {
                "id": s.medicine.id,
                "name": s.medicine.name,
                "genericName": s.medicine.generic_name,
            },
            "stockStatus": s.stock_status,
            "source": "database",
        }
        for s in stocks
    ], True


def list_medicines(db: Session, search: Optional[str] = None) -> List[Medicine]:
    q = db.query(Medicine)
    if search and search.strip():
        term = contains_pattern(search)
        q = q.filter(name_matches(term))
    return q.order_by(Medicine.name.asc()).all()
