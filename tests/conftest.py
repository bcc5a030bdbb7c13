from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from locavoiture.backend.client import BackendClient
from locavoiture.live.mutations import MutationGateway
from locavoiture.security.tokens import JWTSettings


@pytest.fixture
def jwt_config():
    return JWTSettings(secret="test-secret", access_ttl=timedelta(minutes=5))


@pytest.fixture
def backend(jwt_config, tmp_path):
    client = BackendClient(
        database_url="sqlite://",
        jwt_settings=jwt_config,
        local_storage_path=str(tmp_path / "local_storage.json"),
    )
    client.init()
    yield client
    client.dispose()


@pytest.fixture
def gateway(backend):
    return MutationGateway(backend)


@pytest.fixture
def api(jwt_config):
    from locavoiture.main import app

    app.state.backend_client = BackendClient(database_url="sqlite://", jwt_settings=jwt_config)
    with TestClient(app) as test_client:
        yield test_client
