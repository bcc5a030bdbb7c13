"""
➡️ But : Représenter "qui agit" sans mélanger identité vérifiée et revendication locale.

BackendAuthenticatedActor : identité vérifiée par le backend d'authentification (token signé).

LocalUnverifiedActor : session "utilisateur" stockée sur l'appareil ({id, username, role}),
sans token, sans expiration, sans validation serveur. Son `claimed_role` n'est qu'une
revendication : ne jamais s'en servir pour autoriser une opération privilégiée.

ActorSource : une source d'acteur (backend auth, session locale) ; le SessionResolver
les interroge dans l'ordre.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from locavoiture.backend.interfaces import AuthBackend, KeyValueStore


@dataclass(frozen=True)
class Actor:
    id: str
    display_name_or_email: Optional[str]

    @property
    def is_local_session(self) -> bool:
        raise NotImplementedError

    @property
    def verified(self) -> bool:
        return not self.is_local_session

    def descriptor(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "displayNameOrEmail": self.display_name_or_email,
            "isLocalSession": self.is_local_session,
        }


@dataclass(frozen=True)
class BackendAuthenticatedActor(Actor):
    email: Optional[str] = None

    @property
    def is_local_session(self) -> bool:
        return False


@dataclass(frozen=True)
class LocalUnverifiedActor(Actor):
    claimed_role: Optional[str] = None

    @property
    def is_local_session(self) -> bool:
        return True


class ActorSource(ABC):
    @abstractmethod
    def current(self) -> Optional[Actor]:
        """Acteur courant pour cette source, ou None."""


class BackendActorSource(ActorSource):
    def __init__(self, auth: AuthBackend):
        self.auth = auth

    def current(self) -> Optional[Actor]:
        user = self.auth.current_user()
        if user is None:
            return None
        return BackendAuthenticatedActor(
            id=user.uid,
            display_name_or_email=user.display_name or user.email,
            email=user.email,
        )


class LocalSessionStore:
    """Lecture / écriture du blob de session locale (clé "localUser" par défaut)."""

    def __init__(self, storage: KeyValueStore, key: str = "localUser"):
        self.storage = storage
        self.key = key

    def save(self, *, id: str, username: str, role: str = "utilisateur") -> Dict[str, str]:
        session = {"id": id, "username": username, "role": role}
        self.storage.set_item(self.key, json.dumps(session, ensure_ascii=False))
        return session

    def load(self) -> Optional[Dict[str, Any]]:
        raw = self.storage.get_item(self.key)
        if not raw:
            return None
        try:
            session = json.loads(raw)
        except json.JSONDecodeError:
            print(f"⚠️ [sessions] blob '{self.key}' illisible, ignoré", flush=True)
            return None
        return session if isinstance(session, dict) else None

    def clear(self) -> None:
        self.storage.remove_item(self.key)


class LocalSessionActorSource(ActorSource):
    def __init__(self, storage: KeyValueStore, key: str = "localUser"):
        self.sessions = LocalSessionStore(storage, key)

    def current(self) -> Optional[Actor]:
        session = self.sessions.load()
        if not session or not session.get("id"):
            return None
        username = session.get("username")
        role = session.get("role")
        return LocalUnverifiedActor(
            id=str(session["id"]),
            display_name_or_email=str(username) if username else None,
            claimed_role=str(role) if role else None,
        )
