"""
Pharmacy catalog and stock.

Stock status on PharmacyStock is a cached flag derived from the batch totals
of the same (pharmacy, medicine) pair; batch mutations recompute it.
"""
from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, Date, Float, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON

from telemed.db.base import Base


class Medicine(Base):
    """Canonical drug catalog. Rows are never deleted."""
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    generic_name = Column(String(255), nullable=True)


class Pharmacy(Base):
    __tablename__ = "pharmacies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(512), nullable=False, default="N/A")
    city = Column(String(128), nullable=True)
    state = Column(String(128), nullable=True)
    pincode = Column(String(16), nullable=True)
    # (0, 0) means "location not configured yet"
    latitude = Column(Float, nullable=False, default=0.0)
    longitude = Column(Float, nullable=False, default=0.0)
    phone = Column(String(64), nullable=True)
    email = Column(String(255), nullable=True)
    operating_hours = Column(JSON, nullable=True)  # {"monday": {"open": "09:00", "close": "21:00", "isOpen": true}, ...}
    services = Column(JSON, nullable=True)  # ["Home Delivery", ...]
    is_active = Column(Boolean, default=True)
    # Unique: at most one pharmacy per pharmacist
    pharmacist_id = Column(Integer, ForeignKey("pharmacist_profiles.id", ondelete="SET NULL"), unique=True, nullable=True)

    pharmacist = relationship("PharmacistProfile", foreign_keys=[pharmacist_id])

    @property
    def has_location(self) -> bool:
        return not (self.latitude == 0 and self.longitude == 0)


class PharmacyStock(Base):
    __tablename__ = "pharmacy_stock"
    __table_args__ = (UniqueConstraint("pharmacy_id", "medicine_id", name="uq_pharmacy_medicine"),)

    id = Column(Integer, primary_key=True, index=True)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id", ondelete="CASCADE"), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id", ondelete="CASCADE"), nullable=False)
    stock_status = Column(String(32), nullable=False, default="OUT_OF_STOCK")  # IN_STOCK | LOW_STOCK | OUT_OF_STOCK

    pharmacy = relationship("Pharmacy", backref="stock")
    medicine = relationship("Medicine")


class MedicineBatch(Base):
    """A dated, quantified lot of one medicine held by one pharmacy."""
    __tablename__ = "medicine_batches"

    id = Column(Integer, primary_key=True, index=True)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id", ondelete="CASCADE"), nullable=False, index=True)
    medicine_id = Column(Integer, ForeignKey("medicines.id", ondelete="CASCADE"), nullable=False, index=True)
    batch_number = Column(String(64), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    expiry_date = Column(Date, nullable=False)

    pharmacy = relationship("Pharmacy", backref="batches")
    medicine = relationship("Medicine")
