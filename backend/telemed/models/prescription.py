"""
E-prescriptions addressed to one pharmacy.
Status flow: PENDING -> DISPENSED (pharmacist only).
"""
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from telemed.db.base import Base


class Prescription(Base):
    __tablename__ = "prescriptions"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patient_profiles.id", ondelete="CASCADE"), nullable=False)
    doctor_id = Column(Integer, ForeignKey("doctor_profiles.id", ondelete="CASCADE"), nullable=False)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id", ondelete="CASCADE"), nullable=False, index=True)
    medical_record_id = Column(Integer, ForeignKey("medical_records.id", ondelete="SET NULL"), nullable=True)
    status = Column(String(32), nullable=False, default="PENDING")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    patient = relationship("PatientProfile")
    doctor = relationship("DoctorProfile")
    pharmacy = relationship("Pharmacy", backref="prescriptions")
    items = relationship("PrescriptionItem", back_populates="prescription", cascade="all, delete-orphan")


class PrescriptionItem(Base):
    __tablename__ = "prescription_items"

    id = Column(Integer, primary_key=True, index=True)
    prescription_id = Column(Integer, ForeignKey("prescriptions.id", ondelete="CASCADE"), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    instructions = Column(Text, nullable=True)

    prescription = relationship("Prescription", back_populates="items")
    medicine = relationship("Medicine")
    dosage_instructions = relationship("DosageInstruction", back_populates="item", cascade="all, delete-orphan")


class DosageInstruction(Base):
    __tablename__ = "dosage_instructions"

    id = Column(Integer, primary_key=True, index=True)
    prescription_item_id = Column(Integer, ForeignKey("prescription_items.id", ondelete="CASCADE"), nullable=False)
    language_code = Column(String(8), nullable=False, default="en")
    text = Column(Text, nullable=False)

    item = relationship("PrescriptionItem", back_populates="dosage_instructions")
