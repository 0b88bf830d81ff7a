from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import EmailStr, Field, field_validator

from telemed.models.enums import StockStatus
from telemed.schemas.base import CamelModel


class MedicineResponse(CamelModel):
    id: int
    name: str
    generic_name: Optional[str] = None


class BatchCreate(CamelModel):
    medicine_id: int
    batch_number: str = Field(..., min_length=1, max_length=64)
    quantity: int = Field(..., gt=0)
    expiry_date: date

    @field_validator('batch_number')
    @classmethod
    def batch_number_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('batchNumber must not be blank')
        return v.strip()


class BatchResponse(CamelModel):
    id: int
    pharmacy_id: int
    medicine_id: int
    batch_number: str
    quantity: int
    expiry_date: date
    medicine: Optional[MedicineResponse] = None


class StockResponse(CamelModel):
    id: int
    pharmacy_id: int
    medicine_id: int
    stock_status: str
    medicine: Optional[MedicineResponse] = None


class StockStatusUpdate(CamelModel):
    stock_status: StockStatus


class InventoryItem(CamelModel):
    stock_id: int
    medicine_id: int
    name: str
    generic_name: Optional[str] = None
    status: str
    total_quantity: int
    soonest_expiry: Optional[date] = None


class AlertsResponse(CamelModel):
    low_stock: List[StockResponse]
    expiring_soon: List[BatchResponse]


class LocationUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=512)
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = Field(None, max_length=16)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    operating_hours: Optional[Dict[str, Any]] = None
    services: Optional[List[str]] = None
    is_active: Optional[bool] = None


class PharmacyResponse(CamelModel):
    id: int
    name: str
    address: str
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    latitude: float
    longitude: float
    phone: Optional[str] = None
    email: Optional[str] = None
    operating_hours: Optional[Dict[str, Any]] = None
    services: Optional[List[str]] = None
    is_active: Optional[bool] = True
    pharmacist_id: Optional[int] = None
    has_location: bool = False
