"""Public pharmacy directory for patients. No authentication.

When the database is unreachable the static fallback set is served instead of
an error. Those rows carry ``source: "fallback"`` and the response carries
``X-Data-Source: fallback``.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from telemed.api.deps import get_db
from telemed.core.exceptions import ApiError
from telemed.services import directory_service

router = APIRouter()


def _mark_source(response: Response, from_db: bool) -> None:
    response.headers["X-Data-Source"] = "database" if from_db else "fallback"


@router.get("")
def list_pharmacies(response: Response, db: Session = Depends(get_db)):
    rows, from_db = directory_service.list_pharmacies(db)
    _mark_source(response, from_db)
    return rows


@router.get("/for-patients")
def pharmacies_for_patients(
    response: Response,
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[float] = Query(None, gt=0),
    db: Session = Depends(get_db),
):
    """
    Pharmacies with a configured location. With latitude and longitude, each
    row gets ``distance`` (km) and only rows within ``radius`` (default 10 km)
    are returned, nearest first.
    """
    rows, from_db = directory_service.pharmacies_for_patients(db, latitude, longitude, radius)
    _mark_source(response, from_db)
    return rows


@router.get("/search")
def search_medicine(
    response: Response,
    medicine_name: Optional[str] = Query(None, alias="medicineName"),
    db: Session = Depends(get_db),
):
    """Pharmacies holding the medicine IN_STOCK, matched on name or generic name."""
    if not medicine_name or not medicine_name.strip():
        raise ApiError.bad_request("Medicine name is required")
    rows, from_db = directory_service.search_medicine(db, medicine_name)
    _mark_source(response, from_db)
    return rows
