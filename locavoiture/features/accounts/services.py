"""
➡️ But : Comptes employés (console admin) et clients (espace utilisateur).

- register() : création d'un compte employé (rôle "staff") ou client ("utilisateurs").
- login()    : rôle "admin" -> collection employees, connexion au backend d'auth (token) ;
               rôle "utilisateur" -> collection utilisateurs, session locale non vérifiée.
- logout()   : ferme les deux (token + session locale).
- seed_admin(), list_employees(), delete_employee().

⚠️ Les messages de login distinguent "nom d'utilisateur" et "mot de passe" incorrects :
comportement historique de l'écran de connexion, conservé.
"""

from typing import Any, Dict, List, Optional

from locavoiture.backend.client import BackendClient
from locavoiture.backend.interfaces import AuthBackend
from locavoiture.core import collections
from locavoiture.features.accounts.schemas import AccountOut, LocalSessionOut, LoginOut
from locavoiture.features.errors import AccessDenied, ConflictError, InvalidCredentials
from locavoiture.features.reports.aggregations import ACTIVE, iso_timestamp
from locavoiture.features.sessions.actors import LocalSessionStore
from locavoiture.live.mutations import MutationGateway
from locavoiture.live.subscriptions import fetch_collection, fetch_document
from locavoiture.security.password import digest_password, verify_password

ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"
ROLE_CUSTOMER = "utilisateur"

KIND_EMPLOYEE = "employee"
KIND_CUSTOMER = "customer"


class AccountService:
    def __init__(
        self,
        client: BackendClient,
        gateway: MutationGateway,
        *,
        auth: Optional[AuthBackend] = None,
        sessions: Optional[LocalSessionStore] = None,
        min_password_length: int = 4,
        protected_username: str = "admin",
    ):
        self.client = client
        self.gateway = gateway
        self.auth = auth or client.auth
        self.sessions = sessions or LocalSessionStore(client.local_storage, client.local_session_key)
        self.min_password_length = min_password_length
        self.protected_username = protected_username

    # ---------- Helpers ----------
    async def _find_by_username(self, collection: str, username: str) -> Optional[Dict[str, Any]]:
        matches = await fetch_collection(self.client, collection, where=[("username", username)])
        return matches[0] if matches else None

    # ---------- Register ----------
    async def register(
        self,
        username: str,
        password: str,
        password_confirm: str,
        kind: str = KIND_EMPLOYEE,
    ) -> AccountOut:
        u = (username or "").strip()
        p = (password or "").strip()
        pc = (password_confirm or "").strip()

        if not u or not p or not pc:
            raise ValueError("Veuillez remplir tous les champs.")
        if len(p) < self.min_password_length:
            raise ValueError(f"Le mot de passe doit contenir au moins {self.min_password_length} caractères.")
        if p != pc:
            raise ValueError("Les mots de passe ne correspondent pas.")
        if kind not in (KIND_EMPLOYEE, KIND_CUSTOMER):
            raise ValueError(f"Type de compte inconnu: {kind}")

        collection = collections.EMPLOYEES if kind == KIND_EMPLOYEE else collections.CUSTOMERS
        if await self._find_by_username(collection, u):
            raise ConflictError("Ce nom d'utilisateur est déjà utilisé.")

        data: Dict[str, Any] = {
            "username": u,
            "password": digest_password(p),
            "role": ROLE_STAFF if kind == KIND_EMPLOYEE else ROLE_CUSTOMER,
            "createdAt": iso_timestamp(),
        }
        if kind == KIND_EMPLOYEE:
            data["status"] = ACTIVE

        account_id = await self.gateway.create(collection, data)
        print(f"👤 [accounts] compte {kind} '{u}' créé ({account_id})", flush=True)
        return AccountOut(id=account_id, **data)

    # ---------- Login ----------
    async def login(self, username: str, password: str, role: str = ROLE_ADMIN) -> LoginOut:
        u = (username or "").strip()
        p = (password or "").strip()
        if not u or not p:
            raise ValueError("Veuillez remplir tous les champs.")

        collection = collections.EMPLOYEES if role == ROLE_ADMIN else collections.CUSTOMERS
        account = await self._find_by_username(collection, u)
        if account is None:
            raise InvalidCredentials("Nom d'utilisateur incorrect.")
        if not verify_password(p, account.get("password")):
            raise InvalidCredentials("Mot de passe incorrect.")

        if role == ROLE_ADMIN:
            pair = self.auth.sign_in(uid=account["id"], email=account.get("email"), display_name=u)
            return LoginOut(
                id=account["id"],
                username=u,
                role=account.get("role") or ROLE_STAFF,
                access_token=pair["access_token"],
                token_type=pair["token_type"],
                expires_in=pair["expires_in"],
            )

        session = self.sessions.save(id=account["id"], username=u, role=ROLE_CUSTOMER)
        return LoginOut(id=account["id"], username=u, role=ROLE_CUSTOMER, session=LocalSessionOut(**session))

    # ---------- Logout ----------
    def logout(self) -> None:
        self.auth.sign_out()
        self.sessions.clear()

    # ---------- Employés ----------
    async def seed_admin(self) -> bool:
        """Crée admin/admin dans employees s'il n'existe pas. Renvoie True si créé."""
        if await self._find_by_username(collections.EMPLOYEES, self.protected_username):
            print("ℹ️ [accounts] l'utilisateur admin existe déjà dans employees", flush=True)
            return False
        await self.gateway.create(collections.EMPLOYEES, {
            "username": self.protected_username,
            "password": digest_password("admin"),
            "role": ROLE_ADMIN,
            "status": ACTIVE,
            "createdAt": iso_timestamp(),
        })
        print("✅ [accounts] utilisateur admin créé dans employees", flush=True)
        return True

    async def list_employees(self) -> List[AccountOut]:
        records = await fetch_collection(self.client, collections.EMPLOYEES)
        return [AccountOut(**record) for record in records if record.get("username")]

    async def delete_employee(self, employee_id: str) -> None:
        employee = await fetch_document(self.client, collections.EMPLOYEES, employee_id)
        if employee is None:
            raise LookupError("Employé introuvable.")
        if employee.get("username") == self.protected_username:
            raise AccessDenied("Le compte administrateur principal ne peut pas être supprimé.")
        await self.gateway.remove(collections.EMPLOYEES, employee_id)
