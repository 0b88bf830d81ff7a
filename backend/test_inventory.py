"""
Batches, stock status and the aggregated inventory view.

Stock flag thresholds: >10 IN_STOCK, 1..10 LOW_STOCK, 0 OUT_OF_STOCK.
"""
from datetime import date, timedelta

import pytest

from telemed.models.enums import StockStatus
from telemed.models.pharmacy import Medicine, MedicineBatch, PharmacyStock
from telemed.services.pharmacy_service import derive_stock_status


@pytest.fixture
def medicines(db):
    rows = [
        Medicine(name="Paracetamol", generic_name="Acetaminophen"),
        Medicine(name="Ibuprofen", generic_name="Ibuprofen"),
    ]
    db.add_all(rows)
    db.commit()
    return {m.name: m.id for m in rows}


def _batch(client, headers, medicine_id, number, quantity, expiry):
    return client.post(
        "/api/pharmacy/batches",
        headers=headers,
        json={
            "medicineId": medicine_id,
            "batchNumber": number,
            "quantity": quantity,
            "expiryDate": expiry.isoformat(),
        },
    )


@pytest.mark.parametrize(
    "total,expected",
    [(0, StockStatus.OUT_OF_STOCK), (1, StockStatus.LOW_STOCK), (10, StockStatus.LOW_STOCK), (11, StockStatus.IN_STOCK)],
)
def test_derive_stock_status_thresholds(total, expected):
    assert derive_stock_status(total) == expected


def test_zero_quantity_batch_rejected_and_not_persisted(client, pharmacist, medicines, db):
    headers, _ = pharmacist

    resp = _batch(client, headers, medicines["Paracetamol"], "B-0", 0, date.today() + timedelta(days=100))

    assert resp.status_code == 400
    assert db.query(MedicineBatch).count() == 0
    assert db.query(PharmacyStock).count() == 0


def test_missing_expiry_rejected_and_not_persisted(client, pharmacist, medicines, db):
    headers, _ = pharmacist

    resp = client.post(
        "/api/pharmacy/batches",
        headers=headers,
        json={"medicineId": medicines["Paracetamol"], "batchNumber": "B-1", "quantity": 5},
    )

    assert resp.status_code == 400
    assert any(e["field"] == "expiryDate" for e in resp.json()["errors"])
    assert db.query(MedicineBatch).count() == 0


def test_unknown_medicine_is_404(client, pharmacist, medicines, db):
    headers, _ = pharmacist

    resp = _batch(client, headers, 9999, "B-2", 5, date.today() + timedelta(days=100))

    assert resp.status_code == 404
    assert db.query(MedicineBatch).count() == 0


def test_batches_recompute_stock_status(client, pharmacist, medicines):
    headers, _ = pharmacist
    med = medicines["Paracetamol"]

    assert _batch(client, headers, med, "B-1", 5, date.today() + timedelta(days=200)).status_code == 201
    stock = client.get("/api/pharmacy/stock", headers=headers).json()
    assert [(s["medicineId"], s["stockStatus"]) for s in stock] == [(med, "LOW_STOCK")]

    assert _batch(client, headers, med, "B-2", 10, date.today() + timedelta(days=100)).status_code == 201
    stock = client.get("/api/pharmacy/stock", headers=headers).json()
    assert stock[0]["stockStatus"] == "IN_STOCK"


def test_inventory_sums_batches_and_reports_soonest_expiry(client, pharmacist, medicines):
    headers, _ = pharmacist
    para, ibu = medicines["Paracetamol"], medicines["Ibuprofen"]
    soon = date.today() + timedelta(days=40)
    later = date.today() + timedelta(days=400)

    _batch(client, headers, para, "P-1", 7, later)
    _batch(client, headers, para, "P-2", 8, soon)
    _batch(client, headers, ibu, "I-1", 3, later)

    items = {i["name"]: i for i in client.get("/api/pharmacy/inventory", headers=headers).json()}

    assert items["Paracetamol"]["totalQuantity"] == 15
    assert items["Paracetamol"]["soonestExpiry"] == soon.isoformat()
    assert items["Paracetamol"]["status"] == "IN_STOCK"
    assert items["Ibuprofen"]["totalQuantity"] == 3
    assert items["Ibuprofen"]["status"] == "LOW_STOCK"


def test_inventory_without_batches_has_null_expiry(client, pharmacist, medicines, db):
    headers, _ = pharmacist
    pharmacy_id = client.get("/api/pharmacy/location", headers=headers).json()["id"]
    db.add(PharmacyStock(pharmacy_id=pharmacy_id, medicine_id=medicines["Ibuprofen"], stock_status="OUT_OF_STOCK"))
    db.commit()

    items = client.get("/api/pharmacy/inventory", headers=headers).json()

    assert items == [{
        "stockId": items[0]["stockId"],
        "medicineId": medicines["Ibuprofen"],
        "name": "Ibuprofen",
        "genericName": "Ibuprofen",
        "status": "OUT_OF_STOCK",
        "totalQuantity": 0,
        "soonestExpiry": None,
    }]


def test_inventory_filters(client, pharmacist, medicines):
    headers, _ = pharmacist
    _batch(client, headers, medicines["Paracetamol"], "P-1", 50, date.today() + timedelta(days=5))
    _batch(client, headers, medicines["Paracetamol"], "P-2", 50, date.today() + timedelta(days=300))
    _batch(client, headers, medicines["Ibuprofen"], "I-1", 2, date.today() + timedelta(days=300))

    by_generic = client.get("/api/pharmacy/inventory", headers=headers, params={"search": "acetamin"}).json()
    assert [i["name"] for i in by_generic] == ["Paracetamol"]

    low = client.get("/api/pharmacy/inventory", headers=headers, params={"status": "LOW_STOCK"}).json()
    assert [i["name"] for i in low] == ["Ibuprofen"]

    expiring = client.get("/api/pharmacy/inventory", headers=headers, params={"expiringInDays": 30}).json()
    para = next(i for i in expiring if i["name"] == "Paracetamol")
    assert para["totalQuantity"] == 50

    bad = client.get("/api/pharmacy/inventory", headers=headers, params={"status": "PLENTY"})
    assert bad.status_code == 400


def test_manual_stock_override_and_scoping(client, pharmacist, register, medicines):
    headers, _ = pharmacist
    _batch(client, headers, medicines["Paracetamol"], "P-1", 50, date.today() + timedelta(days=300))
    stock_id = client.get("/api/pharmacy/stock", headers=headers).json()[0]["id"]

    resp = client.put(f"/api/pharmacy/stock/{stock_id}", headers=headers, json={"stockStatus": "OUT_OF_STOCK"})
    assert resp.status_code == 200
    assert resp.json()["stockStatus"] == "OUT_OF_STOCK"

    invalid = client.put(f"/api/pharmacy/stock/{stock_id}", headers=headers, json={"stockStatus": "PLENTY"})
    assert invalid.status_code == 400

    other_headers, _ = register("other@example.com", "PHARMACIST", firstName="Other", lastName="One")
    foreign = client.put(f"/api/pharmacy/stock/{stock_id}", headers=other_headers, json={"stockStatus": "IN_STOCK"})
    assert foreign.status_code == 404


def test_alerts_include_low_stock_and_expiring_batches(client, pharmacist, medicines):
    headers, _ = pharmacist
    today = date.today()
    _batch(client, headers, medicines["Paracetamol"], "OLD", 20, today - timedelta(days=2))
    _batch(client, headers, medicines["Paracetamol"], "SOON", 20, today + timedelta(days=10))
    _batch(client, headers, medicines["Paracetamol"], "LATER", 20, today + timedelta(days=90))
    _batch(client, headers, medicines["Ibuprofen"], "LOW", 4, today + timedelta(days=90))

    alerts = client.get("/api/pharmacy/alerts/low-stock", headers=headers).json()

    assert [s["medicineId"] for s in alerts["lowStock"]] == [medicines["Ibuprofen"]]
    assert [b["batchNumber"] for b in alerts["expiringSoon"]] == ["OLD", "SOON"]
