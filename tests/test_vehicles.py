import asyncio
from datetime import datetime

import pytest

from locavoiture.features.vehicles.schemas import VehicleFormIn
from locavoiture.features.vehicles.services import VehicleService, parse_leading_float, parse_leading_int


@pytest.fixture
def vehicles(backend, gateway):
    return VehicleService(backend, gateway)


def run(coro):
    return asyncio.run(coro)


@pytest.mark.parametrize("form", [
    VehicleFormIn(model="", price="40"),
    VehicleFormIn(model="Clio", price="  "),
    VehicleFormIn(model="Clio"),
])
def test_model_and_price_are_required(vehicles, form):
    with pytest.raises(ValueError, match="Le modèle et le prix sont obligatoires."):
        run(vehicles.save(form))


def test_create_stamps_both_dates(vehicles, backend):
    car_id = run(vehicles.save(VehicleFormIn(model=" Clio ", category="citadine", year="2022", price="39.5")))

    car = backend.documents.get("cars", car_id).data
    assert car["model"] == "Clio"
    assert car["year"] == 2022
    assert car["dailyPrice"] == 39.5
    assert car["available"] is True
    assert car["createdAt"].endswith("Z")
    assert car["updatedAt"] <= car["createdAt"]


def test_unreadable_year_and_price_fall_back(vehicles, backend):
    car_id = run(vehicles.save(VehicleFormIn(model="Golf", year="bientôt", price="gratuit")))
    car = backend.documents.get("cars", car_id).data
    assert car["year"] == datetime.now().year
    assert car["dailyPrice"] == 0
    assert car["category"] == "standard"


def test_edit_keeps_created_at(vehicles, backend):
    car_id = run(vehicles.save(VehicleFormIn(model="Golf", price="50")))
    created = backend.documents.get("cars", car_id).data["createdAt"]

    same_id = run(vehicles.save(VehicleFormIn(model="Golf 8", price="55", available=False), editing_id=car_id))

    car = backend.documents.get("cars", car_id).data
    assert same_id == car_id
    assert car["createdAt"] == created
    assert car["model"] == "Golf 8"
    assert car["available"] is False


def test_edit_of_missing_car_propagates(vehicles):
    with pytest.raises(LookupError):
        run(vehicles.save(VehicleFormIn(model="Golf", price="50"), editing_id="nope"))


def test_catalog_filters_by_category(vehicles):
    for model, category in [("Clio", "citadine"), ("3008", "suv"), ("Sandero", None), ("208", "Citadine")]:
        run(vehicles.save(VehicleFormIn(model=model, category=category or "", price="30")))

    everything = run(vehicles.catalog("all"))
    city = run(vehicles.catalog("citadine"))
    standard = run(vehicles.catalog("standard"))

    assert len(everything.items) == 4
    assert sorted(car["model"] for car in city.items) == ["208", "Clio"]
    assert [car["model"] for car in standard.items] == ["Sandero"]
    assert everything.counts == {"citadine": 2, "suv": 1, "standard": 1}
    assert run(vehicles.catalog("luxe")).items == []


def test_delete(vehicles, backend):
    car_id = run(vehicles.save(VehicleFormIn(model="Clio", price="30")))
    run(vehicles.delete(car_id))
    assert backend.documents.get("cars", car_id) is None
    with pytest.raises(LookupError):
        run(vehicles.get(car_id))


@pytest.mark.parametrize("value, expected", [("2021", 2021), ("2021 restylée", 2021), ("abc", None), (None, None)])
def test_parse_leading_int(value, expected):
    assert parse_leading_int(value) == expected


@pytest.mark.parametrize("value, expected", [("39.5", 39.5), ("45€", 45.0), (".5", 0.5), ("€45", None)])
def test_parse_leading_float(value, expected):
    assert parse_leading_float(value) == expected
