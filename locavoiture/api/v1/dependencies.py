"""
➡️ But : Centraliser les dépendances réutilisables des routes.

Exemples :

get_backend_client() : le BackendClient créé au démarrage (app.state).

get_current_actor() : "qui appelle ?" pour CETTE requête :
    - Authorization: Bearer <token>  -> acteur vérifié (backend d'auth)
    - X-Local-Session: {"id", "username", "role"} -> acteur local NON vérifié

require_privileged() : acteur vérifié + profil admin/staff, sinon 401 / 403.

🔹 Avantages :

Routes plus propres (pas de code dupliqué).

Facile à injecter dans plusieurs endpoints (Depends()).
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from locavoiture.backend.auth import TokenAuthBackend
from locavoiture.backend.client import BackendClient
from locavoiture.backend.interfaces import KeyValueStore
from locavoiture.backend.local_storage import MemoryKeyValueStore
from locavoiture.core.config import settings
from locavoiture.features.accounts.services import AccountService
from locavoiture.features.reports.services import ReportService
from locavoiture.features.reservations.services import ReservationService
from locavoiture.features.sessions.actors import (
    Actor,
    BackendActorSource,
    LocalSessionActorSource,
    LocalSessionStore,
)
from locavoiture.features.sessions.resolver import SessionResolver, is_privileged
from locavoiture.features.vehicles.services import VehicleService
from locavoiture.live.mutations import MutationGateway


# -----------------------------
# Backend
# -----------------------------
def get_backend_client(request: Request) -> BackendClient:
    return request.app.state.backend_client


def get_gateway(client: BackendClient = Depends(get_backend_client)) -> MutationGateway:
    return MutationGateway(client)


# -----------------------------
# Authentication data
# -----------------------------
bearer_scheme = HTTPBearer(auto_error=False)

def get_access_token_from_bearer(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Optional[str]:
    if not credentials:
        return None
    if credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth scheme")
    return credentials.credentials


def get_request_auth(
    access_token: Optional[str] = Depends(get_access_token_from_bearer),
    client: BackendClient = Depends(get_backend_client),
) -> TokenAuthBackend:
    return TokenAuthBackend.from_access_token(client.jwt_settings, access_token)


def get_request_local_storage(
    x_local_session: Optional[str] = Header(default=None, alias="X-Local-Session"),
    client: BackendClient = Depends(get_backend_client),
) -> KeyValueStore:
    """Stockage local "de l'appareil" reconstitué depuis l'en-tête (une requête = un appareil)."""
    initial = {client.local_session_key: x_local_session} if x_local_session else {}
    return MemoryKeyValueStore(initial)


def get_session_resolver(
    client: BackendClient = Depends(get_backend_client),
    auth: TokenAuthBackend = Depends(get_request_auth),
    storage: KeyValueStore = Depends(get_request_local_storage),
) -> SessionResolver:
    return SessionResolver(
        [BackendActorSource(auth), LocalSessionActorSource(storage, client.local_session_key)],
        client.documents,
    )


def get_current_actor(resolver: SessionResolver = Depends(get_session_resolver)) -> Optional[Actor]:
    return resolver.resolve()


def require_actor(actor: Optional[Actor] = Depends(get_current_actor)) -> Actor:
    if actor is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return actor


def require_privileged(
    actor: Actor = Depends(require_actor),
    resolver: SessionResolver = Depends(get_session_resolver),
) -> Actor:
    profile = resolver.lookup_profile(actor)
    if not is_privileged(actor, profile):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return actor


# -----------------------------
# Services
# -----------------------------
def get_vehicle_service(
    client: BackendClient = Depends(get_backend_client),
    gateway: MutationGateway = Depends(get_gateway),
) -> VehicleService:
    return VehicleService(client, gateway)


def get_reservation_service(
    client: BackendClient = Depends(get_backend_client),
    gateway: MutationGateway = Depends(get_gateway),
) -> ReservationService:
    return ReservationService(client, gateway)


def get_account_service(
    client: BackendClient = Depends(get_backend_client),
    gateway: MutationGateway = Depends(get_gateway),
    auth: TokenAuthBackend = Depends(get_request_auth),
    storage: KeyValueStore = Depends(get_request_local_storage),
) -> AccountService:
    return AccountService(
        client,
        gateway,
        auth=auth,
        sessions=LocalSessionStore(storage, client.local_session_key),
        min_password_length=settings.MIN_PASSWORD_LENGTH,
        protected_username=settings.PROTECTED_USERNAME,
    )


def get_report_service(client: BackendClient = Depends(get_backend_client)) -> ReportService:
    return ReportService(client)
