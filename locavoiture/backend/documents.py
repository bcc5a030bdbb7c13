"""
➡️ But : Backend documentaire local adossé à SQL (SQLModel), avec écoute temps réel.

SqlDocumentStore implémente le protocole DocumentStore :

add / set / update / delete : écritures par (collection, id), chacune suivie d'une notification.

get / query : lectures ponctuelles (filtres d'égalité, tri sur un champ).

listen : abonnement temps réel ; chaque changement de la collection renvoie le snapshot COMPLET.

Toute erreur SQL remonte sous la forme d'une StorageError (famille BackendError).

🔹 Règles de livraison :

Un écouteur créé dans une boucle asyncio lui est rattaché : sa relecture tourne dans
un thread de travail, puis le résultat est livré sur la boucle. Une lecture lente ne
bloque donc jamais la boucle ; seul le résultat le plus récent est livré.

Un écouteur créé hors boucle est servi de façon synchrone.

Une erreur de lecture est livrée une seule fois, puis l'écouteur est détaché.

Une exception levée par un callback d'écouteur est journalisée : elle ne remonte ni
jusqu'à l'écriture (déjà validée) ni jusqu'aux autres écouteurs.

Un écouteur désabonné ne reçoit plus rien, même une livraison déjà planifiée.
"""

import asyncio
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from locavoiture.backend.interfaces import (
    DocumentNotFound,
    DocumentSnapshot,
    PermissionDenied,
    StorageError,
    Unsubscribe,
    Where,
)
from locavoiture.db.repositories.documents import DocumentRepository

ReadRule = Callable[[str], bool]

DIRECTIONS = ("asc", "desc")


def new_document_id() -> str:
    return uuid.uuid4().hex[:20]


def _sort_key(value: Any) -> Tuple[int, Any]:
    # null < booléen < nombre < chaîne < le reste
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    return (4, str(value))


def _check_direction(direction: str) -> None:
    if direction not in DIRECTIONS:
        raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")


@dataclass(eq=False)
class _Listener:
    collection: str
    on_next: Callable[[List[DocumentSnapshot]], None]
    on_error: Callable[[BaseException], None]
    order_by: Optional[str]
    direction: str
    loop: Optional[asyncio.AbstractEventLoop]
    active: bool = True
    # relectures lancées / dernière relecture livrée (boucle uniquement)
    requested: int = 0
    delivered: int = 0


class SqlDocumentStore:
    def __init__(self, engine: Engine, *, read_rule: Optional[ReadRule] = None):
        self.engine = engine
        self.read_rule = read_rule
        self._listeners: Dict[str, List[_Listener]] = {}
        self._lock = threading.Lock()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with Session(self.engine) as session:
                yield session
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    # ---------- WRITE ----------

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = new_document_id()
        with self._session() as session:
            DocumentRepository(session).create(collection=collection, id=doc_id, data=dict(data))
        self._notify(collection)
        return doc_id

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], *, merge: bool = False) -> None:
        with self._session() as session:
            repo = DocumentRepository(session)
            existing = repo.get_document(collection, doc_id)
            if existing is None:
                repo.create(collection=collection, id=doc_id, data=dict(data))
            elif merge:
                repo.merge_data(existing, data)
            else:
                repo.replace_data(existing, data)
        self._notify(collection)

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        with self._session() as session:
            repo = DocumentRepository(session)
            existing = repo.get_document(collection, doc_id)
            if existing is None:
                raise DocumentNotFound(f"No document to update: {collection}/{doc_id}")
            repo.merge_data(existing, data)
        self._notify(collection)

    def delete(self, collection: str, doc_id: str) -> None:
        with self._session() as session:
            repo = DocumentRepository(session)
            existing = repo.get_document(collection, doc_id)
            if existing is None:
                return
            repo.delete(existing)
        self._notify(collection)

    # ---------- READ ----------

    def _check_read(self, collection: str) -> None:
        if self.read_rule is not None and not self.read_rule(collection):
            raise PermissionDenied(f"Missing or insufficient permissions on '{collection}'")

    def get(self, collection: str, doc_id: str) -> Optional[DocumentSnapshot]:
        self._check_read(collection)
        with self._session() as session:
            doc = DocumentRepository(session).get_document(collection, doc_id)
            if doc is None:
                return None
            return DocumentSnapshot(id=doc.id, data=dict(doc.data or {}))

    def query(
        self,
        collection: str,
        *,
        where: Where = (),
        order_by: Optional[str] = None,
        direction: str = "asc",
    ) -> List[DocumentSnapshot]:
        _check_direction(direction)
        self._check_read(collection)
        with self._session() as session:
            rows = DocumentRepository(session).list_collection(collection)
            snapshots = [DocumentSnapshot(id=row.id, data=dict(row.data or {})) for row in rows]

        for field_name, expected in where:
            snapshots = [s for s in snapshots if field_name in s.data and s.data[field_name] == expected]

        if order_by:
            # un document sans le champ de tri n'apparaît pas dans le résultat
            snapshots = [s for s in snapshots if order_by in s.data]
            snapshots.sort(key=lambda s: _sort_key(s.data[order_by]), reverse=(direction == "desc"))
        return snapshots

    # ---------- LISTEN ----------

    def listen(
        self,
        collection: str,
        on_next: Callable[[List[DocumentSnapshot]], None],
        on_error: Callable[[BaseException], None],
        *,
        order_by: Optional[str] = None,
        direction: str = "asc",
    ) -> Unsubscribe:
        _check_direction(direction)
        try:
            loop: Optional[asyncio.AbstractEventLoop] = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        listener = _Listener(
            collection=collection,
            on_next=on_next,
            on_error=on_error,
            order_by=order_by,
            direction=direction,
            loop=loop,
        )
        with self._lock:
            self._listeners.setdefault(collection, []).append(listener)
        self._schedule(listener)

        def unsubscribe() -> None:
            self._detach(listener)

        return unsubscribe

    def listener_count(self, collection: Optional[str] = None) -> int:
        with self._lock:
            if collection is not None:
                return len(self._listeners.get(collection, ()))
            return sum(len(bucket) for bucket in self._listeners.values())

    def close(self) -> None:
        """Détache tous les écouteurs (fin de vie du client)."""
        with self._lock:
            listeners = [listener for bucket in self._listeners.values() for listener in bucket]
            self._listeners.clear()
        for listener in listeners:
            listener.active = False

    # ---------- Helpers ----------

    def _detach(self, listener: _Listener) -> None:
        listener.active = False
        with self._lock:
            bucket = self._listeners.get(listener.collection)
            if bucket and listener in bucket:
                bucket.remove(listener)

    def _notify(self, collection: str) -> None:
        with self._lock:
            listeners = list(self._listeners.get(collection, ()))
        for listener in listeners:
            self._schedule(listener)

    def _schedule(self, listener: _Listener) -> None:
        loop = listener.loop
        if loop is None:
            self._emit(listener)
            return
        if loop.is_closed():
            self._detach(listener)
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        try:
            if running is loop:
                loop.call_soon(self._refresh, listener)
            else:
                loop.call_soon_threadsafe(self._refresh, listener)
        except RuntimeError:
            # boucle fermée entre-temps
            self._detach(listener)

    def _read(self, listener: _Listener) -> List[DocumentSnapshot]:
        return self.query(listener.collection, order_by=listener.order_by, direction=listener.direction)

    def _emit(self, listener: _Listener) -> None:
        """Livraison synchrone (écouteur créé hors boucle)."""
        if not listener.active:
            return
        try:
            snapshots = self._read(listener)
        except Exception as exc:
            self._fail(listener, exc)
            return
        self._invoke(listener, listener.on_next, snapshots)

    def _refresh(self, listener: _Listener) -> None:
        """Sur la boucle : relit la collection dans un thread de travail."""
        if not listener.active:
            return
        listener.requested += 1
        ticket = listener.requested
        try:
            future = listener.loop.run_in_executor(None, self._read, listener)
        except RuntimeError:
            # exécuteur déjà arrêté (boucle en fin de vie)
            self._detach(listener)
            return
        future.add_done_callback(lambda done: self._deliver(listener, ticket, done))

    def _deliver(self, listener: _Listener, ticket: int, done: "asyncio.Future[List[DocumentSnapshot]]") -> None:
        if not listener.active or done.cancelled() or ticket <= listener.delivered:
            return
        listener.delivered = ticket
        error = done.exception()
        if error is not None:
            self._fail(listener, error)
            return
        self._invoke(listener, listener.on_next, done.result())

    def _fail(self, listener: _Listener, error: BaseException) -> None:
        self._detach(listener)
        self._invoke(listener, listener.on_error, error)

    def _invoke(self, listener: _Listener, callback: Callable[[Any], None], payload: Any) -> None:
        try:
            callback(payload)
        except Exception as exc:
            print(f"❌ [documents] écouteur '{listener.collection}' en échec: {exc!r}", flush=True)
