"""
Pharmacy auto-provisioning.

1. A pharmacist registers -> exactly one default pharmacy at (0, 0)
2. Resolving again returns the same pharmacy
3. PHARMACIST users without a profile get one on first access
4. Anyone else -> PHARMACIST_PROFILE_NOT_FOUND
5. Two first calls racing -> one pharmacy, the loser reads the winner's row
"""
import pytest
from sqlalchemy import event
from sqlalchemy.orm import sessionmaker

from telemed.core.security import get_password_hash
from telemed.db.base import Base
from telemed.db.session import build_engine
from telemed.models.pharmacy import Pharmacy
from telemed.models.profiles import PharmacistProfile
from telemed.models.user import User
from telemed.services.pharmacy_service import (
    PharmacistProfileNotFound,
    default_pharmacy_name,
    get_pharmacist_pharmacy,
    resolve_pharmacy_id,
)


def _user(db, email, role, first=None, last=None):
    user = User(email=email, hashed_password=get_password_hash("x1234567"), role=role, first_name=first, last_name=last)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def test_register_pharmacist_creates_one_default_pharmacy(client, pharmacist, db):
    headers, _ = pharmacist

    resp = client.get("/api/pharmacy/inventory", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == []

    pharmacies = db.query(Pharmacy).all()
    assert len(pharmacies) == 1
    assert pharmacies[0].name == "Jane Doe Pharmacy"
    assert pharmacies[0].address == "N/A"
    assert (pharmacies[0].latitude, pharmacies[0].longitude) == (0, 0)
    assert pharmacies[0].has_location is False


def test_pharmacy_endpoints_keep_resolving_same_pharmacy(client, pharmacist, db):
    headers, _ = pharmacist

    first = client.get("/api/pharmacy/location", headers=headers).json()
    client.get("/api/pharmacy/alerts/low-stock", headers=headers)
    second = client.get("/api/pharmacy/location", headers=headers).json()

    assert first["id"] == second["id"]
    assert db.query(Pharmacy).count() == 1


def test_profileless_pharmacist_is_provisioned_once(db):
    user = _user(db, "solo@example.com", "PHARMACIST", "Ada", "Lovelace")

    first = resolve_pharmacy_id(db, user.id)
    second = resolve_pharmacy_id(db, user.id)

    assert first == second
    assert db.query(PharmacistProfile).filter_by(user_id=user.id).count() == 1
    pharmacy = db.get(Pharmacy, first)
    assert pharmacy.name == "Ada Lovelace Pharmacy"
    assert db.query(PharmacistProfile).filter_by(user_id=user.id).one().pharmacy_id == first


def test_non_pharmacist_without_profile_is_rejected(db):
    user = _user(db, "doc2@example.com", "DOCTOR")

    with pytest.raises(PharmacistProfileNotFound) as exc:
        resolve_pharmacy_id(db, user.id)
    assert str(exc.value) == "PHARMACIST_PROFILE_NOT_FOUND"
    assert db.query(Pharmacy).count() == 0


def test_default_name_without_names(db):
    user = _user(db, "anon@example.com", "PHARMACIST")

    assert default_pharmacy_name(user) == "New Pharmacist Pharmacy"
    assert db.get(Pharmacy, resolve_pharmacy_id(db, user.id)).name == "New Pharmacist Pharmacy"


def test_location_update_validates_coordinates(client, pharmacist):
    headers, _ = pharmacist

    bad = client.put("/api/pharmacy/location", headers=headers, json={"latitude": 91, "longitude": 0})
    assert bad.status_code == 400

    ok = client.put(
        "/api/pharmacy/location",
        headers=headers,
        json={
            "address": "123 Main St",
            "latitude": 34.0522,
            "longitude": -118.2437,
            "services": ["Home Delivery"],
            "operatingHours": {"monday": {"open": "09:00", "close": "21:00", "isOpen": True}},
        },
    )
    assert ok.status_code == 200
    body = ok.json()
    assert body["address"] == "123 Main St"
    assert body["hasLocation"] is True
    assert body["services"] == ["Home Delivery"]


def test_concurrent_first_access_keeps_one_pharmacy(tmp_path):
    # Two engines on one database file stand in for two workers
    url = f"sqlite:///{tmp_path / 'race.db'}"
    ours_engine, theirs_engine = build_engine(url), build_engine(url)
    Base.metadata.create_all(bind=ours_engine)
    ours = sessionmaker(autoflush=False, bind=ours_engine)()
    theirs = sessionmaker(autoflush=False, bind=theirs_engine)()
    try:
        user = User(email="race@example.com", hashed_password=get_password_hash("x1234567"), role="PHARMACIST")
        theirs.add(user)
        theirs.flush()
        profile = PharmacistProfile(user_id=user.id)
        theirs.add(profile)
        theirs.commit()
        user_id, profile_id = user.id, profile.id

        raced = []

        @event.listens_for(ours, "before_flush")
        def commit_competitor(session, flush_context, instances):
            if raced or not any(isinstance(obj, Pharmacy) for obj in session.new):
                return
            raced.append(True)
            theirs.add(Pharmacy(name="Winner", address="N/A", latitude=0, longitude=0, pharmacist_id=profile_id))
            theirs.commit()

        pharmacy = get_pharmacist_pharmacy(ours, user_id)

        assert raced == [True]
        assert pharmacy.name == "Winner"
        assert ours.query(Pharmacy).count() == 1
        assert ours.query(PharmacistProfile).filter_by(user_id=user_id).one().pharmacy_id == pharmacy.id
    finally:
        ours.close()
        theirs.close()
        ours_engine.dispose()
        theirs_engine.dispose()
