"""
➡️ But : Définir la frontière avec le backend managé (sans le réimplémenter).

- DocumentStore : collections nommées de documents sans schéma, écritures par id,
  requêtes ponctuelles et écoute temps réel (snapshots complets + canal d'erreur séparé).
- AuthBackend : "utilisateur authentifié courant" (uid + nom/email optionnels), ou aucun.
- KeyValueStore : stockage local persistant de chaînes (session "localUser").

Les implémentations concrètes vivent à côté (documents.py, auth.py, local_storage.py).
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple

Where = Sequence[Tuple[str, Any]]  # filtres d'égalité (champ, valeur)
Unsubscribe = Callable[[], None]


class BackendError(Exception):
    """Erreur renvoyée par le backend (permission, réseau, écriture refusée...)."""


class PermissionDenied(BackendError):
    pass


class DocumentNotFound(BackendError, LookupError):
    pass


class StorageError(BackendError):
    """Échec de la base SQL sous-jacente (table absente, connexion perdue...)."""


class BackendNotInitialized(RuntimeError):
    pass


@dataclass(frozen=True)
class DocumentSnapshot:
    id: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_record(self) -> Dict[str, Any]:
        """Enregistrement "à plat" : les champs du document + son id."""
        return {"id": self.id, **self.data}


@dataclass(frozen=True)
class AuthUser:
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None


class DocumentStore(Protocol):
    def add(self, collection: str, data: Dict[str, Any]) -> str: ...

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], *, merge: bool = False) -> None: ...

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None: ...

    def delete(self, collection: str, doc_id: str) -> None: ...

    def get(self, collection: str, doc_id: str) -> Optional[DocumentSnapshot]: ...

    def query(
        self,
        collection: str,
        *,
        where: Where = (),
        order_by: Optional[str] = None,
        direction: str = "asc",
    ) -> List[DocumentSnapshot]: ...

    def listen(
        self,
        collection: str,
        on_next: Callable[[List[DocumentSnapshot]], None],
        on_error: Callable[[BaseException], None],
        *,
        order_by: Optional[str] = None,
        direction: str = "asc",
    ) -> Unsubscribe: ...


class AuthBackend(Protocol):
    def current_user(self) -> Optional[AuthUser]: ...

    def sign_in(self, *, uid: str, email: Optional[str] = None, display_name: Optional[str] = None) -> Dict[str, Any]: ...

    def sign_out(self) -> None: ...


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...
