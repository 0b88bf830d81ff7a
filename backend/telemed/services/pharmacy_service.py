"""
Pharmacy stock and inventory.

- Auto-provisioning: every pharmacist owns exactly one Pharmacy, created on
  first access with placeholder address and (0, 0) coordinates.
- Stock status: the PharmacyStock flag is recomputed from batch totals in the
  same transaction that adds a batch.
- Inventory and alerts are pure reads.
"""
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from telemed.models.enums import Role, StockStatus
from telemed.models.pharmacy import Medicine, MedicineBatch, Pharmacy, PharmacyStock
from telemed.models.profiles import PharmacistProfile
from telemed.models.user import User

logger = logging.getLogger(__name__)

# Fixed for every medicine
LOW_STOCK_THRESHOLD = 10
EXPIRY_ALERT_DAYS = 30

LIKE_ESCAPE = "\\"


def contains_pattern(text: str) -> str:
    """LIKE pattern matching ``text`` literally anywhere in the column."""
    escaped = (
        text.strip()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def name_matches(pattern: str):
    return or_(
        Medicine.name.ilike(pattern, escape=LIKE_ESCAPE),
        Medicine.generic_name.ilike(pattern, escape=LIKE_ESCAPE),
    )


class PharmacistProfileNotFound(LookupError):
    def __init__(self):
        super().__init__("PHARMACIST_PROFILE_NOT_FOUND")


class MedicineNotFound(LookupError):
    pass


class StockNotFound(LookupError):
    pass


# ==============================================================================
# AUTO-PROVISIONING
# ==============================================================================

def default_pharmacy_name(user: Optional[User]) -> str:
    parts = []
    if user is not None:
        parts = [p for p in (user.first_name, user.last_name) if p]
    return (" ".join(parts) or "New Pharmacist") + " Pharmacy"


def provision_pharmacy(db: Session, user_id: int, address: Optional[str] = None) -> Pharmacy:
    """
    Find or create the profile and pharmacy of a pharmacist. Flushes, never commits.

    Raises PharmacistProfileNotFound when the user has no pharmacist profile
    and is not a PHARMACIST (a profile is created for pharmacists lacking one).
    """
    profile = db.query(PharmacistProfile).filter(PharmacistProfile.user_id == user_id).first()
    if profile is None:
        user = db.get(User, user_id)
        if user is None or user.role != Role.PHARMACIST.value:
            raise PharmacistProfileNotFound()
        profile = PharmacistProfile(user_id=user.id)
        db.add(profile)
        db.flush()

    if profile.pharmacy_id:
        pharmacy = db.get(Pharmacy, profile.pharmacy_id)
        if pharmacy is not None:
            return pharmacy

    pharmacy = db.query(Pharmacy).filter(Pharmacy.pharmacist_id == profile.id).first()
    if pharmacy is None:
        pharmacy = Pharmacy(
            name=default_pharmacy_name(profile.user),
            address=address or "N/A",
            latitude=0.0,
            longitude=0.0,
            pharmacist_id=profile.id,
        )
        db.add(pharmacy)
        db.flush()
        logger.info(f"Provisioned pharmacy {pharmacy.id} for pharmacist profile {profile.id}")

    profile.pharmacy_id = pharmacy.id
    return pharmacy


def get_pharmacist_pharmacy(db: Session, user_id: int) -> Pharmacy:
    """
    Resolve (creating on first access) the pharmacy owned by ``user_id``.

    The unique constraint on Pharmacy.pharmacist_id makes concurrent first
    calls collide; the loser rolls back and picks up the winner's row.
    """
    try:
        pharmacy = provision_pharmacy(db, user_id)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Concurrent pharmacy provisioning for user {user_id}; re-reading")
        pharmacy = provision_pharmacy(db, user_id)
        db.commit()
    return pharmacy


def resolve_pharmacy_id(db: Session, user_id: int) -> int:
    return get_pharmacist_pharmacy(db, user_id).id


# ==============================================================================
# STOCK STATUS
# ==============================================================================

def derive_stock_status(total_quantity: int) -> StockStatus:
    if total_quantity > LOW_STOCK_THRESHOLD:
        return StockStatus.IN_STOCK
    if total_quantity > 0:
        return StockStatus.LOW_STOCK
    return StockStatus.OUT_OF_STOCK


def batch_total(db: Session, pharmacy_id: int, medicine_id: int) -> int:
    total = db.query(func.coalesce(func.sum(MedicineBatch.quantity), 0)).filter(
        MedicineBatch.pharmacy_id == pharmacy_id,
        MedicineBatch.medicine_id == medicine_id,
    ).scalar()
    return int(total or 0)


def refresh_stock_status(db: Session, pharmacy_id: int, medicine_id: int) -> PharmacyStock:
    """Upsert the stock flag for (pharmacy, medicine) from its batch total. Flushes only."""
    status = derive_stock_status(batch_total(db, pharmacy_id, medicine_id))

    stock = db.query(PharmacyStock).filter(
        PharmacyStock.pharmacy_id == pharmacy_id,
        PharmacyStock.medicine_id == medicine_id,
    ).first()
    if stock is None:
        stock = PharmacyStock(pharmacy_id=pharmacy_id, medicine_id=medicine_id)
        db.add(stock)
    stock.stock_status = status.value
    db.flush()
    return stock


def create_batch(
    db: Session,
    pharmacy_id: int,
    medicine_id: int,
    batch_number: str,
    quantity: int,
    expiry_date: date,
) -> MedicineBatch:
    """Insert a batch and recompute the stock flag in one transaction."""
    if db.get(Medicine, medicine_id) is None:
        raise MedicineNotFound(medicine_id)

    try:
        batch = MedicineBatch(
            pharmacy_id=pharmacy_id,
            medicine_id=medicine_id,
            batch_number=batch_number.strip(),
            quantity=quantity,
            expiry_date=expiry_date,
        )
        db.add(batch)
        db.flush()
        refresh_stock_status(db, pharmacy_id, medicine_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(batch)
    return batch


def set_stock_status(db: Session, pharmacy_id: int, stock_id: int, status: StockStatus) -> PharmacyStock:
    """Manual override of the flag. The next batch mutation recomputes it."""
    stock = db.query(PharmacyStock).filter(
        PharmacyStock.id == stock_id,
        PharmacyStock.pharmacy_id == pharmacy_id,
    ).first()
    if stock is None:
        raise StockNotFound(stock_id)

    stock.stock_status = status.value
    db.commit()
    db.refresh(stock)
    return stock


def list_stock(db: Session, pharmacy_id: int, medicine_name: Optional[str] = None) -> List[PharmacyStock]:
    q = (
        db.query(PharmacyStock)
        .join(Medicine, PharmacyStock.medicine_id == Medicine.id)
        .options(joinedload(PharmacyStock.medicine))
        .filter(PharmacyStock.pharmacy_id == pharmacy_id)
    )
    if medicine_name:
        q = q.filter(Medicine.name.ilike(contains_pattern(medicine_name), escape=LIKE_ESCAPE))
    return q.order_by(Medicine.name.asc()).all()


# ==============================================================================
# INVENTORY & ALERTS
# ==============================================================================

def get_inventory(
    db: Session,
    pharmacy_id: int,
    search: Optional[str] = None,
    status: Optional[StockStatus] = None,
    expiring_in_days: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    Per-medicine view: cached stock flag joined with live batch totals.

    totalQuantity is the sum over the batches of the (pharmacy, medicine) pair,
    soonestExpiry their minimum expiry (None without batches). With
    ``expiring_in_days`` only batches expiring by then are counted.
    """
    stock_q = (
        db.query(PharmacyStock)
        .join(Medicine, PharmacyStock.medicine_id == Medicine.id)
        .options(joinedload(PharmacyStock.medicine))
        .filter(PharmacyStock.pharmacy_id == pharmacy_id)
    )
    if status is not None:
        stock_q = stock_q.filter(PharmacyStock.stock_status == status.value)
    if search and search.strip():
        term = contains_pattern(search)
        stock_q = stock_q.filter(name_matches(term))
    stocks = stock_q.order_by(Medicine.name.asc(), PharmacyStock.id.asc()).all()

    medicine_ids = [s.medicine_id for s in stocks]
    totals: Dict[int, Dict[str, Any]] = {}
    if medicine_ids:
        batch_q = db.query(
            MedicineBatch.medicine_id,
            func.sum(MedicineBatch.quantity).label("total"),
            func.min(MedicineBatch.expiry_date).label("soonest"),
        ).filter(
            MedicineBatch.pharmacy_id == pharmacy_id,
            MedicineBatch.medicine_id.in_(medicine_ids),
        )
        if expiring_in_days is not None:
            batch_q = batch_q.filter(
                MedicineBatch.expiry_date <= date.today() + timedelta(days=expiring_in_days)
            )
        for row in batch_q.group_by(MedicineBatch.medicine_id).all():
            totals[row.medicine_id] = {"total": int(row.total or 0), "soonest": row.soonest}

    return [
        {
            "stockId": s.id,
            "medicineId": s.medicine_id,
            "name": s.medicine.name,
            "genericName": s.medicine.generic_name,
            "status": s.stock_status,
            "totalQuantity": totals.get(s.medicine_id, {}).get("total", 0),
            "soonestExpiry": totals.get(s.medicine_id, {}).get("soonest"),
        }
        for s in stocks
    ]


def get_alerts(db: Session, pharmacy_id: int, today: Optional[date] = None) -> Dict[str, list]:
    """
    Stock rows flagged LOW_STOCK/OUT_OF_STOCK, and batches expiring within
    EXPIRY_ALERT_DAYS (already expired ones included), soonest first.
    """
    today = today or date.today()
    cutoff = today + timedelta(days=EXPIRY_ALERT_DAYS)

    low_stock = (
        db.query(PharmacyStock)
        .options(joinedload(PharmacyStock.medicine))
        .filter(
            PharmacyStock.pharmacy_id == pharmacy_id,
            PharmacyStock.stock_status.in_([StockStatus.LOW_STOCK.value, StockStatus.OUT_OF_STOCK.value]),
        )
        .order_by(PharmacyStock.id.asc())
        .all()
    )
    expiring = (
        db.query(MedicineBatch)
        .options(joinedload(MedicineBatch.medicine))
        .filter(
            MedicineBatch.pharmacy_id == pharmacy_id,
            MedicineBatch.expiry_date <= cutoff,
        )
        .order_by(MedicineBatch.expiry_date.asc(), MedicineBatch.id.asc())
        .all()
    )
    return {"lowStock": low_stock, "expiringSoon": expiring}


# ==============================================================================
# LOCATION
# ==============================================================================

LOCATION_FIELDS = (
    "name", "address", "city", "state", "pincode", "latitude", "longitude",
    "phone", "email", "operating_hours", "services", "is_active",
)


def update_location(db: Session, pharmacy: Pharmacy, changes: Dict[str, Any]) -> Pharmacy:
    """Apply the pharmacist's location-setup form. Unknown keys are ignored."""
    for field, value in changes.items():
        if field in LOCATION_FIELDS:
            setattr(pharmacy, field, value)
    db.commit()
    db.refresh(pharmacy)
    return pharmacy
