import asyncio

import pytest

from locavoiture.features.accounts.services import AccountService
from locavoiture.features.errors import AccessDenied, ConflictError, InvalidCredentials
from locavoiture.security.password import digest_password


@pytest.fixture
def accounts(backend, gateway):
    return AccountService(backend, gateway)


def run(coro):
    return asyncio.run(coro)


@pytest.mark.parametrize("username, password, confirm, message", [
    ("", "secret", "secret", "Veuillez remplir tous les champs."),
    ("sophie", "   ", "secret", "Veuillez remplir tous les champs."),
    ("sophie", "abc", "abc", "Le mot de passe doit contenir au moins 4 caractères."),
    ("sophie", "secret", "secreT", "Les mots de passe ne correspondent pas."),
])
def test_register_validation(accounts, username, password, confirm, message):
    with pytest.raises(ValueError, match=message):
        run(accounts.register(username, password, confirm))


def test_register_employee(accounts, backend):
    account = run(accounts.register("  sophie ", "secret", "secret"))

    stored = backend.documents.get("employees", account.id).data
    assert stored["username"] == "sophie"
    assert stored["password"] == digest_password("secret")
    assert stored["role"] == "staff"
    assert stored["status"] == "Active"
    assert account.role == "staff"


def test_register_customer(accounts, backend):
    account = run(accounts.register("léa", "1234", "1234", kind="customer"))
    stored = backend.documents.get("utilisateurs", account.id).data
    assert stored["role"] == "utilisateur"
    assert "status" not in stored


def test_register_duplicate_username(accounts):
    run(accounts.register("sophie", "secret", "secret"))
    with pytest.raises(ConflictError, match="déjà utilisé"):
        run(accounts.register("sophie", "autre1", "autre1"))


def test_login_reports_which_field_is_wrong(accounts):
    run(accounts.register("sophie", "secret", "secret"))

    with pytest.raises(InvalidCredentials, match="Nom d'utilisateur incorrect."):
        run(accounts.login("sofie", "secret", role="admin"))
    with pytest.raises(InvalidCredentials, match="Mot de passe incorrect."):
        run(accounts.login("sophie", "wrong", role="admin"))
    with pytest.raises(ValueError):
        run(accounts.login("", "secret"))


def test_employee_login_signs_into_backend_auth(accounts, backend):
    account = run(accounts.register("sophie", "secret", "secret"))

    result = run(accounts.login("sophie", "secret", role="admin"))

    assert result.access_token
    assert result.token_type == "bearer"
    assert result.session is None
    assert accounts.auth.current_user().uid == account.id
    assert backend.local_storage.get_item("localUser") is None


def test_customer_login_saves_local_session(accounts, backend):
    account = run(accounts.register("léa", "1234", "1234", kind="customer"))

    result = run(accounts.login("léa", "1234", role="utilisateur"))

    assert result.access_token is None
    assert result.session.id == account.id
    assert accounts.sessions.load() == {"id": account.id, "username": "léa", "role": "utilisateur"}
    assert accounts.auth.current_user() is None


def test_customer_cannot_log_in_as_employee(accounts):
    run(accounts.register("léa", "1234", "1234", kind="customer"))
    with pytest.raises(InvalidCredentials, match="Nom d'utilisateur incorrect."):
        run(accounts.login("léa", "1234", role="admin"))


def test_logout_clears_both_sessions(accounts):
    run(accounts.register("sophie", "secret", "secret"))
    run(accounts.login("sophie", "secret"))
    accounts.sessions.save(id="x", username="léa")

    accounts.logout()

    assert accounts.auth.current_user() is None
    assert accounts.sessions.load() is None


def test_seed_admin_is_idempotent(accounts, backend):
    assert run(accounts.seed_admin()) is True
    assert run(accounts.seed_admin()) is False

    employees = run(accounts.list_employees())
    assert [(e.username, e.role) for e in employees] == [("admin", "admin")]
    assert run(accounts.login("admin", "admin")).role == "admin"


def test_admin_account_cannot_be_deleted(accounts):
    run(accounts.seed_admin())
    staff = run(accounts.register("sophie", "secret", "secret"))
    admin = next(e for e in run(accounts.list_employees()) if e.username == "admin")

    with pytest.raises(AccessDenied):
        run(accounts.delete_employee(admin.id))
    run(accounts.delete_employee(staff.id))

    assert [e.username for e in run(accounts.list_employees())] == ["admin"]
    with pytest.raises(LookupError):
        run(accounts.delete_employee("missing"))
