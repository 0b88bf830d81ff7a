from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from telemed.db.base import Base


class Appointment(Base):
    """
    Status flow: PENDING -> CONFIRMED -> COMPLETED, and PENDING/CONFIRMED -> CANCELLED.
    Transitions are validated in appointment_service before any write.
    """
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patient_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctor_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    appointment_time = Column(DateTime(timezone=True), nullable=False)
    symptoms = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="PENDING")
    consultation_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    patient = relationship("PatientProfile", backref="appointments")
    doctor = relationship("DoctorProfile", backref="appointments")


class MedicalRecord(Base):
    __tablename__ = "medical_records"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patient_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctor_profiles.id", ondelete="CASCADE"), nullable=False)
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True)
    diagnosis = Column(Text, nullable=False)
    prescription = Column(Text, nullable=True)  # free-text notes shown to the patient
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    patient = relationship("PatientProfile")
    doctor = relationship("DoctorProfile")
    appointment = relationship("Appointment", backref="medical_records")
