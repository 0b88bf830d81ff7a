"""Admin reports: appointment summary and overview counts."""
import pytest

from conftest import PASSWORD, future_iso
from telemed.db.init_db import provision_admin


@pytest.fixture
def admin_headers(client, db):
    provision_admin(db, "admin@example.com", PASSWORD)
    token = client.post("/api/auth/login", json={"email": "admin@example.com", "password": PASSWORD}).json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


def _book(client, headers, doctor_id):
    resp = client.post("/api/appointments", headers=headers, json={"doctorId": doctor_id, "appointmentTime": future_iso()})
    assert resp.status_code == 201
    return resp.json()["id"]


def test_appointments_summary(client, admin_headers, patient, doctor, register):
    p_headers, _ = patient
    d_headers, _ = doctor
    d2_headers, _ = register("doc2@example.com", "DOCTOR", firstName="Lisa", lastName="Cuddy")
    doc1 = client.get("/api/doctors/me", headers=d_headers).json()["id"]
    doc2 = client.get("/api/doctors/me", headers=d2_headers).json()["id"]

    a1 = _book(client, p_headers, doc1)
    a2 = _book(client, p_headers, doc1)
    _book(client, p_headers, doc2)
    client.put(f"/api/appointments/{a1}/approve", headers=d_headers)
    client.put(f"/api/appointments/{a2}/reject", headers=d_headers)

    summary = client.get("/api/admin/appointments/summary", headers=admin_headers).json()

    assert summary["totals"] == {"total": 3, "pending": 1, "confirmed": 1, "completed": 0, "cancelled": 1}
    per_doctor = summary["bookingsPerDoctor"]
    assert [d["doctorId"] for d in per_doctor] == [doc1, doc2]
    assert per_doctor[0]["total"] == 2
    assert per_doctor[0]["statusBreakdown"] == {"pending": 0, "confirmed": 1, "completed": 0, "cancelled": 1}
    assert per_doctor[0]["name"] == "Dr. Gregory House"
    assert summary["bookingsPerUser"][0]["total"] == 3
    assert len(summary["recentAppointments"]) == 3


def test_overview_and_listings(client, admin_headers, patient, doctor, pharmacist):
    overview = client.get("/api/admin/overview", headers=admin_headers).json()

    assert overview == {"users": 4, "doctors": 1, "pharmacists": 1, "patients": 1, "pharmacies": 1}
    assert len(client.get("/api/admin/users", headers=admin_headers).json()) == 4
    assert [d["user"]["lastName"] for d in client.get("/api/admin/doctors", headers=admin_headers).json()] == ["House"]
    assert [p["email"] for p in client.get("/api/admin/pharmacists", headers=admin_headers).json()] == ["pharm@example.com"]
