import asyncio

import pytest

from locavoiture.backend.client import BackendClient
from locavoiture.backend.interfaces import BackendNotInitialized, PermissionDenied
from locavoiture.live.subscriptions import fetch_collection, fetch_document, subscribe

from tests.helpers import drain


def test_initial_snapshot_is_delivered_with_ids(backend):
    doc_id = backend.documents.add("cars", {"model": "Clio"})
    received = []

    unsubscribe = subscribe(backend, "cars", received.append)

    assert received == [[{"id": doc_id, "model": "Clio"}]]
    unsubscribe()


def test_every_change_delivers_the_full_collection(backend):
    received = []
    unsubscribe = subscribe(backend, "cars", received.append)

    first = backend.documents.add("cars", {"model": "Clio"})
    backend.documents.add("cars", {"model": "208"})
    backend.documents.update("cars", first, {"available": False})

    assert [len(snapshot) for snapshot in received] == [0, 1, 2, 2]
    latest = {record["id"]: record for record in received[-1]}
    assert latest[first] == {"id": first, "model": "Clio", "available": False}
    unsubscribe()


def test_no_callback_after_unsubscribe(backend):
    received = []
    unsubscribe = subscribe(backend, "cars", received.append)
    unsubscribe()

    backend.documents.add("cars", {"model": "Clio"})

    assert received == [[]]
    assert backend.documents.listener_count("cars") == 0


def test_unsubscribe_is_idempotent(backend):
    unsubscribe = subscribe(backend, "cars", lambda records: None)
    unsubscribe()
    unsubscribe()
    assert backend.documents.listener_count() == 0


def test_other_collections_do_not_trigger(backend):
    received = []
    unsubscribe = subscribe(backend, "cars", received.append)
    backend.documents.add("reservations", {"status": "Pending"})
    assert len(received) == 1
    unsubscribe()


def test_ordering_excludes_documents_without_the_field(backend):
    backend.documents.set("cars", "a", {"model": "A", "year": 2020})
    backend.documents.set("cars", "b", {"model": "B"})
    backend.documents.set("cars", "c", {"model": "C", "year": 2023})
    received = []

    unsubscribe = subscribe(backend, "cars", received.append, order_by_field="year", order_direction="desc")

    assert [record["id"] for record in received[-1]] == ["c", "a"]
    unsubscribe()


def test_invalid_direction_is_rejected(backend):
    with pytest.raises(ValueError):
        subscribe(backend, "cars", lambda records: None, order_direction="sideways")


def test_backend_error_is_delivered_once_and_detaches(jwt_config):
    client = BackendClient(
        database_url="sqlite://",
        jwt_settings=jwt_config,
        read_rule=lambda collection: collection != "employees",
    )
    with client:
        data, errors = [], []
        subscribe(client, "employees", data.append, errors.append)
        client.documents.add("employees", {"username": "sophie"})

        assert data == []
        assert len(errors) == 1
        assert isinstance(errors[0], PermissionDenied)
        assert client.documents.listener_count("employees") == 0


def test_default_error_handler_prints(jwt_config, capsys):
    client = BackendClient(database_url="sqlite://", jwt_settings=jwt_config, read_rule=lambda c: False)
    with client:
        subscribe(client, "cars", lambda records: None)
    assert "[subscriptions] cars" in capsys.readouterr().out


def test_loop_bound_listener_receives_writes_from_worker_threads(backend, gateway):
    async def scenario():
        received = []
        unsubscribe = subscribe(backend, "cars", received.append)
        await drain()
        await gateway.create("cars", {"model": "Clio"})
        await drain()
        unsubscribe()
        await gateway.create("cars", {"model": "208"})
        await drain()
        return received

    received = asyncio.run(scenario())
    assert [len(snapshot) for snapshot in received] == [0, 1]


def test_scheduled_delivery_is_dropped_after_unsubscribe(backend):
    async def scenario():
        received = []
        unsubscribe = subscribe(backend, "cars", received.append)
        # la livraison initiale est planifiée, pas encore exécutée
        unsubscribe()
        await drain()
        return received

    assert asyncio.run(scenario()) == []


def test_one_shot_reads(backend):
    backend.documents.set("reservations", "r1", {"userId": "u1", "status": "Pending"})
    backend.documents.set("reservations", "r2", {"userId": "u2", "status": "Active"})

    async def scenario():
        mine = await fetch_collection(backend, "reservations", where=[("userId", "u1")])
        one = await fetch_document(backend, "reservations", "r2")
        missing = await fetch_document(backend, "reservations", "nope")
        return mine, one, missing

    mine, one, missing = asyncio.run(scenario())
    assert mine == [{"id": "r1", "userId": "u1", "status": "Pending"}]
    assert one == {"id": "r2", "userId": "u2", "status": "Active"}
    assert missing is None


def test_client_must_be_initialized(jwt_config):
    client = BackendClient(database_url="sqlite://", jwt_settings=jwt_config)
    with pytest.raises(BackendNotInitialized):
        subscribe(client, "cars", lambda records: None)


def test_failing_listener_does_not_break_the_write_or_other_listeners(backend, capsys):
    def fragile(records):
        if records:
            raise RuntimeError("écran démonté")

    healthy = []
    unsubscribe_fragile = subscribe(backend, "cars", fragile)
    unsubscribe_healthy = subscribe(backend, "cars", healthy.append)

    car_id = backend.documents.add("cars", {"model": "Clio"})

    assert backend.documents.get("cars", car_id).data == {"model": "Clio"}
    assert [len(snapshot) for snapshot in healthy] == [0, 1]
    assert "❌ [documents] écouteur 'cars'" in capsys.readouterr().out
    unsubscribe_fragile()
    unsubscribe_healthy()


def test_listener_failing_on_first_snapshot_still_returns_unsubscribe(backend):
    backend.documents.add("cars", {"model": "Clio"})

    def fragile(records):
        raise RuntimeError("boom")

    unsubscribe = subscribe(backend, "cars", fragile)
    assert backend.documents.listener_count("cars") == 1
    unsubscribe()
    assert backend.documents.listener_count("cars") == 0
