"""Role profiles. One profile row per user, matching User.role."""
from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, Date
from sqlalchemy.orm import relationship, backref

from telemed.db.base import Base


class PatientProfile(Base):
    __tablename__ = "patient_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    dob = Column(Date, nullable=True)
    gender = Column(String(32), nullable=True)
    address = Column(String(512), nullable=True)
    blood_group = Column(String(8), nullable=True)
    emergency_contact = Column(String(128), nullable=True)

    user = relationship("User", backref=backref("patient_profile", uselist=False))


class DoctorProfile(Base):
    __tablename__ = "doctor_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    specialization = Column(String(255), nullable=True)
    qualifications = Column(String(512), nullable=True)
    experience_years = Column(Integer, default=0)
    is_available = Column(Boolean, default=True)

    user = relationship("User", backref=backref("doctor_profile", uselist=False))


class PharmacistProfile(Base):
    __tablename__ = "pharmacist_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    # Denormalized link, backfilled by pharmacy auto-provisioning.
    # Pharmacy.pharmacist_id (unique) is the authoritative side.
    pharmacy_id = Column(Integer, nullable=True)

    user = relationship("User", backref=backref("pharmacist_profile", uselist=False))
