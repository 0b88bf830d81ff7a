"""
Great-circle distance and pharmacy proximity filtering.
"""
import math
from typing import Any, Dict, List, Optional

EARTH_RADIUS_KM = 6371
DEFAULT_RADIUS_KM = 10.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in kilometres, rounded to 2 decimals."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(EARTH_RADIUS_KM * c, 2)


def is_unset_location(latitude: Optional[float], longitude: Optional[float]) -> bool:
    return not latitude and not longitude


def filter_by_distance(
    rows: List[Dict[str, Any]],
    latitude: Optional[float],
    longitude: Optional[float],
    radius_km: Optional[float] = None,
) -> List[Dict[str, Any]]:
    """
    Drop rows at the (0, 0) sentinel. With a location, attach ``distance``,
    keep rows within ``radius_km`` and sort nearest first (stable on ties).
    """
    rows = [r for r in rows if not is_unset_location(r.get("latitude"), r.get("longitude"))]
    if latitude is None or longitude is None:
        return rows

    radius = DEFAULT_RADIUS_KM if radius_km is None else radius_km
    nearby = []
    for row in rows:
        distance = haversine_km(latitude, longitude, row["latitude"], row["longitude"])
        if distance <= radius:
            nearby.append({**row, "distance": distance})
    nearby.sort(key=lambda r: r["distance"])
    return nearby


# Served only when the database cannot be reached; every row is marked as such.
FALLBACK_PHARMACIES: List[Dict[str, Any]] = [
    {
        "id": 1,
        "name": "City Center Pharmacy",
        "address": "123 Main St, Los Angeles, CA 90210",
        "latitude": 34.0522,
        "longitude": -118.2437,
    },
    {
        "id": 2,
        "name": "Health Plus Pharmacy",
        "address": "456 Oak Ave, Los Angeles, CA 90211",
        "latitude": 34.0622,
        "longitude": -118.2537,
    },
    {
        "id": 3,
        "name": "MediCare Pharmacy",
        "address": "789 Pine St, Los Angeles, CA 90212",
        "latitude": 34.0422,
        "longitude": -118.2337,
    },
    {
        "id": 4,
        "name": "Quick Relief Pharmacy",
        "address": "321 Elm St, Los Angeles, CA 90213",
        "latitude": 34.0722,
        "longitude": -118.2637,
    },
]

# medicine keyword -> (medicine, pharmacy ids carrying it)
FALLBACK_STOCK = {
    "paracetamol": ({"id": 1, "name": "Paracetamol", "genericName": "Acetaminophen"}, (1, 2, 4)),
    "acetaminophen": ({"id": 1, "name": "Paracetamol", "genericName": "Acetaminophen"}, (1, 2, 4)),
    "ibuprofen": ({"id": 2, "name": "Ibuprofen", "genericName": "Ibuprofen"}, (1, 4)),
    "aspirin": ({"id": 3, "name": "Aspirin", "genericName": "Acetylsalicylic acid"}, (4,)),
}


def fallback_pharmacies() -> List[Dict[str, Any]]:
    return [
        {
            **p,
            "city": None,
            "state": None,
            "pincode": None,
            "phone": None,
            "email": None,
            "pharmacistName": None,
            "operatingHours": {},
            "services": [],
            "source": "fallback",
        }
        for p in FALLBACK_PHARMACIES
    ]


def fallback_medicine_search(medicine_name: str) -> List[Dict[str, Any]]:
    term = medicine_name.strip().lower()
    by_id = {p["id"]: p for p in FALLBACK_PHARMACIES}
    seen = set()
    results = []
    for keyword, (medicine, pharmacy_ids) in FALLBACK_STOCK.items():
        if keyword not in term:
            continue
        for pid in pharmacy_ids:
            if (pid, medicine["id"]) in seen:
                continue
            seen.add((pid, medicine["id"]))
            p = by_id[pid]
            results.append({
                "pharmacyId": p["id"],
                "pharmacyName": p["name"],
                "pharmacyAddress": p["address"],
                "latitude": p["latitude"],
                "longitude": p["longitude"],
                "medicine": dict(medicine),
                "stockStatus": "IN_STOCK",
                "source": "fallback",
            })
    return results
