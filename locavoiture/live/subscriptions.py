"""
➡️ But : Adaptateur d'abonnement aux collections du backend.

subscribe() : à chaque changement, livre le résultat COMPLET de la requête sous forme
de liste de dicts "à plat" ({"id": ..., **champs}). Le tri est délégué au backend.
Renvoie la fonction de désabonnement : l'oublier au démontage d'un écran laisse
un écouteur actif.

Les erreurs du backend (permission, réseau) sont livrées une seule fois à on_error,
sans nouvelle tentative.

fetch_collection() / fetch_document() : lectures ponctuelles, exécutées hors de la boucle.
"""

from typing import Any, Callable, Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from locavoiture.backend.client import BackendClient
from locavoiture.backend.interfaces import DocumentSnapshot, Unsubscribe, Where

Record = Dict[str, Any]
OnData = Callable[[List[Record]], None]
OnError = Callable[[BaseException], None]


def map_snapshot(snapshots: List[DocumentSnapshot]) -> List[Record]:
    return [snapshot.to_record() for snapshot in snapshots]


def _print_error(collection_name: str) -> OnError:
    def on_error(error: BaseException) -> None:
        print(f"❌ [subscriptions] {collection_name}: {error}", flush=True)
    return on_error


def subscribe(
    client: BackendClient,
    collection_name: str,
    on_data: OnData,
    on_error: Optional[OnError] = None,
    *,
    order_by_field: Optional[str] = None,
    order_direction: str = "asc",
) -> Unsubscribe:
    detach = client.documents.listen(
        collection_name,
        lambda snapshots: on_data(map_snapshot(snapshots)),
        on_error or _print_error(collection_name),
        order_by=order_by_field,
        direction=order_direction,
    )
    detached = False

    def unsubscribe() -> None:
        nonlocal detached
        if detached:
            return
        detached = True
        detach()

    return unsubscribe


async def fetch_collection(
    client: BackendClient,
    collection_name: str,
    *,
    where: Where = (),
    order_by_field: Optional[str] = None,
    order_direction: str = "asc",
) -> List[Record]:
    snapshots = await run_in_threadpool(
        client.documents.query,
        collection_name,
        where=where,
        order_by=order_by_field,
        direction=order_direction,
    )
    return map_snapshot(snapshots)


async def fetch_document(client: BackendClient, collection_name: str, doc_id: str) -> Optional[Record]:
    snapshot = await run_in_threadpool(client.documents.get, collection_name, doc_id)
    return snapshot.to_record() if snapshot else None
