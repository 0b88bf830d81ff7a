"""
Public pharmacy directory.

Scenario C: pharmacies at (34.0522, -118.2437) and (34.0622, -118.2537), a
patient at the first one with radius=10 gets both, zero-distance first.
"""
from datetime import date, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from telemed.models.pharmacy import Medicine, Pharmacy, PharmacyStock
from telemed.services import directory_service


@pytest.fixture
def located(db):
    rows = [
        Pharmacy(name="Health Plus Pharmacy", address="456 Oak Ave", latitude=34.0622, longitude=-118.2537),
        Pharmacy(name="City Center Pharmacy", address="123 Main St", latitude=34.0522, longitude=-118.2437),
        Pharmacy(name="Unset Pharmacy", address="N/A", latitude=0, longitude=0),
    ]
    db.add_all(rows)
    db.commit()
    return {p.name: p.id for p in rows}


def test_scenario_c_nearest_first(client, located):
    resp = client.get("/api/pharmacies/for-patients", params={"latitude": 34.0522, "longitude": -118.2437, "radius": 10})

    assert resp.status_code == 200
    assert resp.headers["X-Data-Source"] == "database"
    rows = resp.json()
    assert [r["name"] for r in rows] == ["City Center Pharmacy", "Health Plus Pharmacy"]
    assert rows[0]["distance"] == 0
    assert rows[0]["operatingHours"] == {}
    assert rows[0]["services"] == []
    assert all(r["source"] == "database" for r in rows)


def test_sentinel_excluded_without_location(client, located):
    rows = client.get("/api/pharmacies/for-patients").json()

    assert "Unset Pharmacy" not in [r["name"] for r in rows]
    assert all("distance" not in r for r in rows)


def test_small_radius_filters(client, located):
    rows = client.get(
        "/api/pharmacies/for-patients", params={"latitude": 34.0522, "longitude": -118.2437, "radius": 1}
    ).json()

    assert [r["name"] for r in rows] == ["City Center Pharmacy"]


def test_pharmacist_name_comes_from_linked_user(client, pharmacist):
    headers, _ = pharmacist
    client.put("/api/pharmacy/location", headers=headers, json={"latitude": 34.05, "longitude": -118.24})

    rows = client.get("/api/pharmacies/for-patients").json()

    assert rows[0]["pharmacistName"] == "Jane Doe"
    assert rows[0]["email"] == "pharm@example.com"


def test_database_failure_serves_flagged_fallback(client, monkeypatch):
    def broken(db):
        raise OperationalError("SELECT 1", {}, Exception("database is down"))

    monkeypatch.setattr(directory_service, "_load_pharmacies", broken)

    resp = client.get("/api/pharmacies/for-patients", params={"latitude": 34.0522, "longitude": -118.2437})

    assert resp.status_code == 200
    assert resp.headers["X-Data-Source"] == "fallback"
    rows = resp.json()
    assert rows[0]["name"] == "City Center Pharmacy"
    assert all(r["source"] == "fallback" for r in rows)


def test_medicine_search(client, pharmacist, db):
    headers, _ = pharmacist
    med = Medicine(name="Paracetamol", generic_name="Acetaminophen")
    db.add(med)
    db.commit()
    client.post(
        "/api/pharmacy/batches",
        headers=headers,
        json={"medicineId": med.id, "batchNumber": "P-1", "quantity": 40,
              "expiryDate": (date.today() + timedelta(days=200)).isoformat()},
    )

    hits = client.get("/api/pharmacies/search", params={"medicineName": "acetaminophen"}).json()
    assert [(h["pharmacyName"], h["stockStatus"]) for h in hits] == [("Jane Doe Pharmacy", "IN_STOCK")]

    stock = db.query(PharmacyStock).one()
    stock.stock_status = "LOW_STOCK"
    db.commit()
    assert client.get("/api/pharmacies/search", params={"medicineName": "paracetamol"}).json() == []

    assert client.get("/api/pharmacies/search").status_code == 400


def test_medicine_catalog_is_public(client, db):
    db.add_all([Medicine(name="Ibuprofen", generic_name="Ibuprofen"), Medicine(name="Aspirin", generic_name="ASA")])
    db.commit()

    names = [m["name"] for m in client.get("/api/medicines").json()]

    assert names == ["Aspirin", "Ibuprofen"]


def test_inactive_pharmacies_are_still_listed(client, db):
    db.add_all([
        Pharmacy(name="Active", address="1 Main St", latitude=34.0522, longitude=-118.2437),
        Pharmacy(name="Inactive", address="2 Main St", latitude=34.0530, longitude=-118.2440, is_active=False),
    ])
    db.commit()

    nearby = client.get(
        "/api/pharmacies/for-patients", params={"latitude": 34.0522, "longitude": -118.2437, "radius": 10}
    ).json()
    listed = client.get("/api/pharmacies").json()

    assert [r["name"] for r in nearby] == ["Active", "Inactive"]
    assert {r["name"] for r in listed} == {"Active", "Inactive"}


def test_search_wildcards_match_literally(client, pharmacist, db):
    headers, _ = pharmacist
    meds = [Medicine(name="Paracetamol", generic_name="Acetaminophen"), Medicine(name="Vit_C 100%", generic_name="Ascorbic acid")]
    db.add_all(meds)
    db.commit()
    for i, med in enumerate(meds):
        client.post(
            "/api/pharmacy/batches",
            headers=headers,
            json={"medicineId": med.id, "batchNumber": f"B-{i}", "quantity": 40,
                  "expiryDate": (date.today() + timedelta(days=200)).isoformat()},
        )

    percent = client.get("/api/pharmacies/search", params={"medicineName": "%"}).json()
    underscore = client.get("/api/pharmacies/search", params={"medicineName": "_"}).json()
    none = client.get("/api/pharmacies/search", params={"medicineName": "Para%"}).json()

    assert [h["medicine"]["name"] for h in percent] == ["Vit_C 100%"]
    assert [h["medicine"]["name"] for h in underscore] == ["Vit_C 100%"]
    assert none == []

    stock = client.get("/api/pharmacy/stock", headers=headers, params={"medicineName": "%"}).json()
    assert len(stock) == 1
    inventory = client.get("/api/pharmacy/inventory", headers=headers, params={"search": "t_c"}).json()
    assert [i["name"] for i in inventory] == ["Vit_C 100%"]
    assert [m["name"] for m in client.get("/api/medicines", params={"search": "%"}).json()] == ["Vit_C 100%"]
