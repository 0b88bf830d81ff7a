from telemed.models.user import User
from telemed.models.profiles import PatientProfile, DoctorProfile, PharmacistProfile
from telemed.models.pharmacy import Medicine, Pharmacy, PharmacyStock, MedicineBatch
from telemed.models.appointment import Appointment, MedicalRecord
from telemed.models.prescription import Prescription, PrescriptionItem, DosageInstruction

__all__ = [
    "User", "PatientProfile", "DoctorProfile", "PharmacistProfile",
    "Medicine", "Pharmacy", "PharmacyStock", "MedicineBatch",
    "Appointment", "MedicalRecord",
    "Prescription", "PrescriptionItem", "DosageInstruction",
]
