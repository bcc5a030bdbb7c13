from datetime import date, datetime

import pytest

from locavoiture.features.reports.aggregations import (
    ACTIVE,
    COMPLETED,
    PENDING,
    count_by_status,
    count_where,
    duration_days,
    estimated_return_date,
    group_by_category,
    is_cancelled,
    iso_timestamp,
    monthly_histogram,
    most_popular_vehicle,
    normalize_category,
    normalize_status,
    parse_date_like,
    reservation_summary,
    sort_by_pickup,
    sum_revenue,
    to_number,
    total_price,
    upcoming_reservations,
)
from locavoiture.features.reports.services import build_report


# ---------- Statuts ----------

def test_status_counts_french_labels():
    records = [{"status": "Confirmée"}, {"status": "foo"}, {"status": "Terminée"}]
    assert count_by_status(records) == {PENDING: 1, ACTIVE: 1, COMPLETED: 1}


@pytest.mark.parametrize("value", ["Active", "actif", "EN COURS", "approuvée", "Approved", "in progress", "ongoing"])
def test_active_markers(value):
    assert normalize_status(value) == ACTIVE


@pytest.mark.parametrize("value", ["Completed", "Complet", "terminée", "Clôturée", "cloturee", "finished"])
def test_completed_markers(value):
    assert normalize_status(value) == COMPLETED


@pytest.mark.parametrize("value", ["", "foo", "Pending", "en attente", None, 42, {"status": "active"}, ["active"]])
def test_unknown_status_defaults_to_pending(value):
    assert normalize_status(value) == PENDING


def test_completed_markers_win_over_active():
    # "complet" et "actif" dans la même chaîne : Completed prioritaire
    assert normalize_status("actif puis complet") == COMPLETED


def test_is_cancelled():
    assert is_cancelled("Annulée")
    assert is_cancelled("cancelled")
    assert not is_cancelled("Active")
    assert not is_cancelled(None)


def test_count_where():
    cars = [{"available": True}, {"available": False}, {}]
    assert count_where(cars, lambda car: bool(car.get("available"))) == 1


# ---------- Montants ----------

def test_revenue_with_mixed_values():
    records = [{"dailyPrice": 50}, {"dailyPrice": 0}, {"dailyPrice": None}, {"dailyPrice": "30"}]
    assert sum_revenue(records, "dailyPrice") == 80


def test_revenue_matches_known_total():
    prices = [12.5, 7, 100, 0.5, 30]
    records = [{"totalPrice": p} for p in prices]
    assert sum_revenue(records) == pytest.approx(sum(prices))


@pytest.mark.parametrize("value, expected", [
    (10, 10), (2.5, 2.5), (" 42 ", 42), ("abc", 0), (None, 0), ([], 0), (float("nan"), 0),
])
def test_to_number(value, expected):
    assert to_number(value) == expected


# ---------- Véhicule le plus demandé ----------

def test_most_popular_vehicle_by_id_then_model():
    records = [
        {"vehicleId": "a", "vehicleModel": "Clio"},
        {"vehicleId": "b", "vehicleModel": "208"},
        {"vehicleId": "a", "vehicleModel": "Clio"},
        {"vehicleModel": "Golf"},
        {"notes": "sans véhicule"},
    ]
    popular = most_popular_vehicle(records)
    assert popular is not None
    assert (popular.key, popular.label, popular.count) == ("a", "Clio", 2)


def test_most_popular_vehicle_tie_keeps_first_seen():
    records = [{"vehicleModel": "Golf"}, {"vehicleModel": "Clio"}]
    assert most_popular_vehicle(records).key == "Golf"


# ---------- Dates & histogramme ----------

@pytest.mark.parametrize("value, expected", [
    ("2024-03-05", datetime(2024, 3, 5)),
    ("05/03/2024", datetime(2024, 3, 5)),
    ("05-03-2024", datetime(2024, 3, 5)),
    (date(2024, 3, 5), datetime(2024, 3, 5)),
    ({"seconds": 0}, datetime(1970, 1, 1)),
])
def test_parse_date_like(value, expected):
    assert parse_date_like(value) == expected


def test_parse_date_like_with_time():
    assert parse_date_like("2024-03-05", "14:30") == datetime(2024, 3, 5, 14, 30)


@pytest.mark.parametrize("value", [None, "", "demain", "2024-13-45", 12345, {"seconds": "x"}])
def test_parse_date_like_garbage(value):
    assert parse_date_like(value) is None


def test_histogram_counts_parseable_dates_only():
    records = [
        {"createdAt": "2024-01-15T10:00:00.000Z"},
        {"createdAt": "2024-01-20"},
        {"createdAt": "03/02/2024"},
        {"createdAt": {"seconds": 1704067200}},  # 2024-01-01
        {"createdAt": "pas une date"},
        {},
    ]
    buckets = monthly_histogram(records)
    assert [(b.label, b.count) for b in buckets] == [("2024-01", 3), ("2024-02", 1)]
    assert sum(b.count for b in buckets) == 4


# ---------- Catégories ----------

def test_categories_default_to_standard():
    assert normalize_category(None) == "standard"
    assert normalize_category("  SUV ") == "suv"
    groups = group_by_category([{"category": "suv"}, {}, {"category": "Luxe"}, {"category": ""}])
    assert {k: len(v) for k, v in groups.items()} == {"suv": 1, "standard": 2, "luxe": 1}


# ---------- Réservations ----------

NOW = datetime(2024, 6, 1, 12, 0)


def _reservations():
    return [
        {"id": "r1", "pickupDate": "2024-06-10", "pickupTime": "09:00", "status": "Pending", "totalPrice": 100},
        {"id": "r2", "pickupDate": "2024-05-01", "status": "Terminée", "totalPrice": "50"},
        {"id": "r3", "pickupDate": "2024-06-05", "status": "Annulée", "totalPrice": 20},
        {"id": "r4", "pickupDate": "2024-06-03", "status": "Active", "totalPrice": None},
        {"id": "r5", "pickupDate": "n'importe quoi", "status": "Pending"},
    ]


def test_reservation_summary():
    summary = reservation_summary(_reservations(), NOW)
    assert summary.total == 5
    assert summary.upcoming == 2
    assert summary.completed == 1
    assert summary.cancelled == 1
    assert summary.total_spent == 170
    assert summary.next_reservation == datetime(2024, 6, 3)


def test_sort_and_upcoming():
    ordered = [r["id"] for r in sort_by_pickup(_reservations())]
    assert ordered == ["r1", "r3", "r4", "r2", "r5"]
    assert [r["id"] for r in upcoming_reservations(_reservations(), NOW, limit=3)] == ["r4", "r1"]


def test_form_helpers():
    assert duration_days("2024-06-01", "2024-06-04") == 3
    assert duration_days("2024-06-04", "2024-06-01") == 1
    assert duration_days("2024-06-01", None) == 1
    assert total_price(39.99, 3) == 119.97
    assert estimated_return_date("2024-06-01", 2, "10:15") == datetime(2024, 6, 3, 10, 15)


def test_iso_timestamp_format():
    assert iso_timestamp(datetime(2024, 1, 2, 3, 4, 5, 678000)) == "2024-01-02T03:04:05.678Z"


# ---------- Rapport ----------

def test_empty_snapshots_give_zero_report():
    report = build_report([], [], [])
    assert report.total_cars == 0
    assert report.available_cars == 0
    assert report.total_reservations == 0
    assert report.reservations_by_status == {PENDING: 0, ACTIVE: 0, COMPLETED: 0}
    assert report.revenue == 0
    assert report.popular_vehicle is None
    assert report.monthly_reservations == []


def test_report_is_stable_for_identical_snapshots():
    cars = [{"id": "c1", "available": True}, {"id": "c2", "available": False}]
    reservations = _reservations()
    assert build_report(cars, reservations, []) == build_report(list(cars), list(reservations), [])
