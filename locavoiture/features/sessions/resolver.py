"""
➡️ But : Répondre à "qui est connecté ?" en combinant les sources d'acteur.

Ordre : auth backend d'abord (identité vérifiée), puis session locale (non vérifiée).
Le profil (nom, rôle) est cherché au mieux dans utilisateurs / users / employees ;
un échec de lecture est affiché puis ignoré.

Seul un acteur vérifié dont le profil a le rôle admin ou staff est privilégié.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from locavoiture.backend.interfaces import BackendError, DocumentStore
from locavoiture.core.collections import PROFILE_COLLECTIONS
from locavoiture.features.sessions.actors import Actor, ActorSource, BackendAuthenticatedActor

PRIVILEGED_ROLES = ("admin", "staff")


@dataclass(frozen=True)
class Profile:
    name: str
    role: Optional[str] = None
    collection: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)


class SessionResolver:
    def __init__(self, sources: Sequence[ActorSource], store: DocumentStore):
        self.sources = list(sources)
        self.store = store

    def resolve(self) -> Optional[Actor]:
        for source in self.sources:
            actor = source.current()
            if actor is not None:
                return actor
        return None

    def descriptor(self) -> Optional[Dict[str, Any]]:
        actor = self.resolve()
        return actor.descriptor() if actor else None

    def lookup_profile(self, actor: Actor) -> Profile:
        for name in PROFILE_COLLECTIONS:
            try:
                snapshot = self.store.get(name, actor.id)
            except BackendError as e:
                print(f"⚠️ [sessions] lecture profil {name}/{actor.id} impossible: {e}", flush=True)
                continue
            if snapshot is None:
                continue
            data = snapshot.data
            display = data.get("username") or data.get("name") or data.get("displayName") or data.get("email")
            return Profile(
                name=str(display or actor.display_name_or_email or actor.id),
                role=data.get("role"),
                collection=name,
                data=dict(data),
            )
        return Profile(name=actor.display_name_or_email or actor.id)


def is_privileged(actor: Optional[Actor], profile: Optional[Profile]) -> bool:
    if not isinstance(actor, BackendAuthenticatedActor) or profile is None:
        return False
    return profile.role in PRIVILEGED_ROLES
