import asyncio
from datetime import datetime

import pytest

from locavoiture.features.errors import AccessDenied
from locavoiture.features.reservations.schemas import ReservationFormIn
from locavoiture.features.reservations.services import ReservationService
from locavoiture.features.sessions.actors import BackendAuthenticatedActor, LocalUnverifiedActor

LEA = LocalUnverifiedActor(id="cust-1", display_name_or_email="léa", claimed_role="utilisateur")
CAR = {"id": "car-clio", "model": "Renault Clio V", "dailyPrice": 39.5}


@pytest.fixture
def reservations(backend, gateway):
    return ReservationService(backend, gateway)


def run(coro):
    return asyncio.run(coro)


def _form(**overrides):
    values = dict(
        firstName="Léa",
        lastName="Martin",
        phone="0600000000",
        pickupDate="2024-07-01",
        pickupTime="09:30",
        returnDate="2024-07-04",
    )
    values.update(overrides)
    return ReservationFormIn(**values)


@pytest.mark.parametrize("overrides, message", [
    ({"firstName": " "}, "Veuillez renseigner prénom."),
    ({"lastName": ""}, "Veuillez renseigner nom."),
    ({"phone": ""}, "Veuillez renseigner téléphone."),
    ({"pickupTime": ""}, "Veuillez renseigner heure de prise."),
    ({"pickupDate": None}, "Veuillez sélectionner une date de prise."),
    ({"pickupDate": "un jour"}, "Veuillez sélectionner une date de prise."),
])
def test_required_fields(reservations, overrides, message):
    with pytest.raises(ValueError, match=message):
        run(reservations.create(LEA, _form(**overrides), CAR))


def test_vehicle_is_required(reservations):
    with pytest.raises(ValueError, match="véhicule"):
        run(reservations.create(LEA, _form(), None))


def test_anonymous_visitor_is_refused(reservations):
    with pytest.raises(AccessDenied):
        run(reservations.create(None, _form(), CAR))


def test_create_computes_price_and_stores_pending(reservations, backend):
    created = run(reservations.create(LEA, _form(notes="  siège bébé "), CAR))

    assert (created.days, created.dailyPrice, created.totalPrice) == (3, 39.5, 118.5)
    stored = backend.documents.get("reservations", created.id).data
    assert stored["status"] == "Pending"
    assert stored["userId"] == "cust-1"
    assert stored["userEmail"] == "léa"
    assert stored["vehicleId"] == "car-clio"
    assert stored["vehicleModel"] == "Renault Clio V"
    assert stored["pickupDate"] == "2024-07-01"
    assert stored["returnDate"] == "2024-07-04"
    assert stored["returnTime"] == "09:30"
    assert stored["notes"] == "siège bébé"


def test_create_without_return_date_estimates_one_day(reservations, backend):
    backend.documents.set("cars", "car-208", {"model": "Peugeot 208", "dailyPrice": "42"})
    actor = BackendAuthenticatedActor(id="emp-1", display_name_or_email="sophie", email="sophie@locavoiture.fr")

    created = run(reservations.create(actor, _form(returnDate=None, pickupDate="01/07/2024", vehicleId="car-208")))

    stored = backend.documents.get("reservations", created.id).data
    assert created.days == 1
    assert created.totalPrice == 42
    assert stored["returnDate"] == "2024-07-02"
    assert stored["vehicleModel"] == "Peugeot 208"
    assert stored["userEmail"] == "sophie@locavoiture.fr"


def test_admin_transitions(reservations, backend):
    first = run(reservations.create(LEA, _form(), CAR)).id
    second = run(reservations.create(LEA, _form(), CAR)).id

    run(reservations.approve(first))
    assert backend.documents.get("reservations", first).data["status"] == "Active"
    assert "approvedAt" in backend.documents.get("reservations", first).data

    run(reservations.complete(first))
    done = backend.documents.get("reservations", first).data
    assert done["status"] == "Completed"
    assert "completedAt" in done

    run(reservations.deny(second))
    assert backend.documents.get("reservations", second) is None


def test_approving_a_missing_reservation_propagates(reservations):
    with pytest.raises(LookupError):
        run(reservations.approve("nope"))


def test_history_and_summary(reservations, backend):
    run(reservations.create(LEA, _form(pickupDate="2024-05-01", returnDate="2024-05-03"), CAR))
    run(reservations.create(LEA, _form(pickupDate="2024-08-01", returnDate="2024-08-02"), CAR))
    other = LocalUnverifiedActor(id="cust-2", display_name_or_email="tom")
    run(reservations.create(other, _form(), CAR))

    history = run(reservations.history("cust-1"))
    assert [r["pickupDate"] for r in history] == ["2024-08-01", "2024-05-01"]
    assert len(run(reservations.history())) == 3

    summary = run(reservations.summary("cust-1", now=datetime(2024, 6, 1)))
    assert summary.total == 2
    assert summary.upcoming == 1
    assert summary.total_spent == 79 + 39.5
    assert summary.next_reservation == datetime(2024, 8, 1, 9, 30)
