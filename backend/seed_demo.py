"""Seed a development database with a demo doctor, patient, pharmacist, catalog and stock."""
from datetime import date, timedelta

from telemed.core.security import get_password_hash
from telemed.db.init_db import init_db
from telemed.db.session import SessionLocal
from telemed.models.pharmacy import Medicine
from telemed.models.profiles import DoctorProfile, PatientProfile
from telemed.models.user import User
from telemed.services.pharmacy_service import create_batch, get_pharmacist_pharmacy, update_location

DEMO_PASSWORD = "Demo@12345"

MEDICINES = [
    ("Paracetamol", "Acetaminophen"),
    ("Ibuprofen", "Ibuprofen"),
    ("Aspirin", "Acetylsalicylic acid"),
    ("Amoxicillin", "Amoxicillin"),
]

# (medicine, batch number, quantity, days until expiry)
BATCHES = [
    ("Paracetamol", "PCM-001", 120, 365),
    ("Paracetamol", "PCM-002", 30, 20),
    ("Ibuprofen", "IBU-001", 8, 180),
    ("Amoxicillin", "AMX-001", 40, 25),
]


def _user(db, email, role, first, last):
    user = db.query(User).filter(User.email == email).first()
    if user:
        return user, False
    user = User(
        email=email,
        hashed_password=get_password_hash(DEMO_PASSWORD),
        role=role,
        first_name=first,
        last_name=last,
    )
    db.add(user)
    db.flush()
    return user, True


def seed_demo():
    init_db()
    db = SessionLocal()
    try:
        doctor, created = _user(db, "doctor@telemed.local", "DOCTOR", "Meera", "Iyer")
        if created:
            db.add(DoctorProfile(user_id=doctor.id, specialization="General Medicine", experience_years=8))
        patient, created = _user(db, "patient@telemed.local", "PATIENT", "Rahul", "Verma")
        if created:
            db.add(PatientProfile(user_id=patient.id))
        pharmacist, _ = _user(db, "pharmacist@telemed.local", "PHARMACIST", "John", "Pharmacist")
        db.commit()

        catalog = {}
        for name, generic in MEDICINES:
            medicine = db.query(Medicine).filter(Medicine.name == name).first()
            if not medicine:
                medicine = Medicine(name=name, generic_name=generic)
                db.add(medicine)
                db.flush()
            catalog[name] = medicine.id
        db.commit()
        print(f"✅ Catalog: {len(catalog)} medicines")

        pharmacy = get_pharmacist_pharmacy(db, pharmacist.id)
        if not pharmacy.has_location:
            update_location(db, pharmacy, {
                "name": "City Center Pharmacy",
                "address": "123 Main St, Los Angeles, CA 90210",
                "latitude": 34.0522,
                "longitude": -118.2437,
                "services": ["Home Delivery", "24/7 Emergency"],
            })
            for name, number, quantity, days in BATCHES:
                create_batch(db, pharmacy.id, catalog[name], number, quantity, date.today() + timedelta(days=days))
            print(f"✅ Stocked {pharmacy.name} with {len(BATCHES)} batches")
        else:
            print(f"⏭️  {pharmacy.name} already set up")

        print(f"\nDemo accounts (password: {DEMO_PASSWORD}):")
        for u in (doctor, patient, pharmacist):
            print(f"  {u.role:<11} {u.email}")
    finally:
        db.close()


if __name__ == "__main__":
    seed_demo()
