"""
➡️ But : Passerelle d'écriture (create / patch / remove) vers le backend.

Simple relais : aucune validation, aucune clé d'idempotence, aucune nouvelle tentative.
L'appel s'exécute dans un thread de travail (la boucle reste réactive même si le
backend ne répond jamais) ; l'erreur du backend remonte telle quelle à l'appelant.

La confirmation d'une écriture, c'est le prochain snapshot reçu par les écouteurs
de la collection.
"""

from typing import Any, Dict

from starlette.concurrency import run_in_threadpool

from locavoiture.backend.client import BackendClient


class MutationGateway:
    def __init__(self, client: BackendClient):
        self.client = client

    async def create(self, collection: str, data: Dict[str, Any]) -> str:
        """Ajoute un document, renvoie son identifiant."""
        return await run_in_threadpool(self.client.documents.add, collection, dict(data))

    async def patch(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Met à jour des champs d'un document existant (DocumentNotFound sinon)."""
        await run_in_threadpool(self.client.documents.update, collection, doc_id, dict(data))

    async def remove(self, collection: str, doc_id: str) -> None:
        await run_in_threadpool(self.client.documents.delete, collection, doc_id)

    async def put(self, collection: str, doc_id: str, data: Dict[str, Any], *, merge: bool = True) -> None:
        """Écrit un document à un id connu (fusion par défaut)."""
        await run_in_threadpool(self.client.documents.set, collection, doc_id, dict(data), merge=merge)
