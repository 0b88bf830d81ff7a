"""Haversine distance and the patient-facing proximity filter."""
import pytest

from telemed.services.geo import filter_by_distance, haversine_km

CITY_CENTER = (34.0522, -118.2437)
HEALTH_PLUS = (34.0622, -118.2537)

POINTS = [
    CITY_CENTER,
    HEALTH_PLUS,
    (51.5074, -0.1278),
    (-33.8688, 151.2093),
    (0.0, 179.9),
]


@pytest.mark.parametrize("a", POINTS)
@pytest.mark.parametrize("b", POINTS)
def test_haversine_symmetric_and_non_negative(a, b):
    d = haversine_km(*a, *b)
    assert d >= 0
    assert d == haversine_km(*b, *a)


@pytest.mark.parametrize("p", POINTS)
def test_haversine_zero_for_same_point(p):
    assert haversine_km(*p, *p) == 0


def test_haversine_known_distance_rounded():
    d = haversine_km(*CITY_CENTER, *HEALTH_PLUS)
    assert 1.4 < d < 1.5
    assert d == round(d, 2)


def _row(pid, lat, lon):
    return {"id": pid, "latitude": lat, "longitude": lon}


def test_sentinel_location_always_excluded():
    rows = [_row(1, 0, 0), _row(2, *CITY_CENTER)]

    assert [r["id"] for r in filter_by_distance(rows, None, None)] == [2]
    assert [r["id"] for r in filter_by_distance(rows, 0.0, 0.0, radius_km=20000)] == [2]


def test_radius_filter_and_nearest_first():
    rows = [_row(1, *HEALTH_PLUS), _row(2, 51.5074, -0.1278), _row(3, *CITY_CENTER)]

    result = filter_by_distance(rows, *CITY_CENTER, radius_km=10)

    assert [r["id"] for r in result] == [3, 1]
    assert result[0]["distance"] == 0
    assert all(r["distance"] <= 10 for r in result)


def test_default_radius_is_ten_km():
    rows = [_row(1, *CITY_CENTER), _row(2, 34.2, -118.2437)]  # second one ~16 km north

    assert [r["id"] for r in filter_by_distance(rows, *CITY_CENTER)] == [1]


def test_ties_keep_input_order():
    rows = [_row(7, *HEALTH_PLUS), _row(3, *HEALTH_PLUS), _row(5, *HEALTH_PLUS)]

    first = filter_by_distance(rows, *CITY_CENTER, radius_km=10)
    second = filter_by_distance(rows, *CITY_CENTER, radius_km=10)

    assert [r["id"] for r in first] == [7, 3, 5]
    assert first == second
