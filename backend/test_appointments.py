"""Appointment booking and the doctor's transition table."""
from datetime import datetime, timedelta, timezone

from conftest import future_iso


def _doctor_profile_id(client, headers):
    return client.get("/api/doctors/me", headers=headers).json()["id"]


def _book(client, patient_headers, doctor_id, when=None):
    return client.post(
        "/api/appointments",
        headers=patient_headers,
        json={"doctorId": doctor_id, "appointmentTime": when or future_iso(), "symptoms": "cough"},
    )


def test_patient_books_pending_appointment(client, patient, doctor):
    p_headers, _ = patient
    d_headers, _ = doctor

    resp = _book(client, p_headers, _doctor_profile_id(client, d_headers))

    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "PENDING"
    upcoming = client.get("/api/appointments/my-appointments", headers=p_headers).json()
    assert [a["id"] for a in upcoming] == [body["id"]]
    pending = client.get("/api/appointments/pending", headers=d_headers).json()
    assert [a["id"] for a in pending] == [body["id"]]
    assert pending[0]["patientName"] == "Pat Jones"


def test_booking_rejects_past_time_and_unknown_doctor(client, patient, doctor):
    p_headers, _ = patient
    d_headers, _ = doctor
    past = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()

    assert _book(client, p_headers, _doctor_profile_id(client, d_headers), when=past).status_code == 400
    assert _book(client, p_headers, 9999).status_code == 404


def test_only_patients_book(client, doctor):
    d_headers, _ = doctor

    assert _book(client, d_headers, _doctor_profile_id(client, d_headers)).status_code == 403


def test_transition_table(client, patient, doctor):
    p_headers, _ = patient
    d_headers, _ = doctor
    appt_id = _book(client, p_headers, _doctor_profile_id(client, d_headers)).json()["id"]

    # PENDING -> COMPLETED is not allowed
    assert client.put(f"/api/appointments/{appt_id}/complete", headers=d_headers).status_code == 409

    assert client.put(f"/api/appointments/{appt_id}/approve", headers=d_headers).json()["status"] == "CONFIRMED"
    assert client.put(f"/api/appointments/{appt_id}/approve", headers=d_headers).status_code == 409
    assert client.put(f"/api/appointments/{appt_id}/complete", headers=d_headers).json()["status"] == "COMPLETED"
    assert client.put(f"/api/appointments/{appt_id}/reject", headers=d_headers).status_code == 409


def test_reject_records_note(client, patient, doctor):
    p_headers, _ = patient
    d_headers, _ = doctor
    appt_id = _book(client, p_headers, _doctor_profile_id(client, d_headers)).json()["id"]

    body = client.put(f"/api/appointments/{appt_id}/reject", headers=d_headers).json()

    assert body["status"] == "CANCELLED"
    assert body["consultationNotes"] == "Rejected by doctor"


def test_other_doctor_gets_404(client, patient, doctor, register):
    p_headers, _ = patient
    d_headers, _ = doctor
    other_headers, _ = register("doc2@example.com", "DOCTOR", firstName="Other", lastName="Doc")
    appt_id = _book(client, p_headers, _doctor_profile_id(client, d_headers)).json()["id"]

    assert client.put(f"/api/appointments/{appt_id}/approve", headers=other_headers).status_code == 404
    assert client.put("/api/appointments/9999/approve", headers=d_headers).status_code == 404
    assert client.get(f"/api/appointments/{appt_id}", headers=other_headers).status_code == 404
    assert client.get(f"/api/appointments/{appt_id}", headers=d_headers).status_code == 200
    assert client.get(f"/api/appointments/{appt_id}", headers=p_headers).status_code == 200


def test_doctor_availability(client, doctor, patient):
    d_headers, _ = doctor
    p_headers, _ = patient

    assert len(client.get("/api/doctors", headers=p_headers).json()) == 1

    resp = client.put("/api/doctors/me/status", headers=d_headers, json={"isAvailable": False})
    assert resp.status_code == 200
    assert resp.json()["isAvailable"] is False
    assert client.get("/api/doctors", headers=p_headers).json() == []

    assert client.put("/api/doctors/me/status", headers=d_headers, json={"isAvailable": "no"}).status_code == 400
