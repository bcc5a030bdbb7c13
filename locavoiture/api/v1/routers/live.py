"""
➡️ But : Flux temps réel d'une collection publique (WebSocket).

Chaque message est le snapshot COMPLET de la collection :
    {"type": "snapshot", "collection": "cars", "items": [...]}
Une erreur du backend est envoyée une fois ({"type": "error"}) puis la socket est fermée.

Collection non publique : fermeture immédiate, code 4403.
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder

from locavoiture.backend.documents import DIRECTIONS
from locavoiture.core.config import settings
from locavoiture.live.subscriptions import subscribe

CLOSE_FORBIDDEN = 4403
CLOSE_POLICY = 1008
CLOSE_BACKEND_ERROR = 1011

_CLOSED = object()

router = APIRouter(
    prefix="/live",
    tags=["live"],
)


async def _watch_disconnect(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            queue.put_nowait(_CLOSED)
            return


@router.websocket("/{collection}")
async def live_collection(
    websocket: WebSocket,
    collection: str,
    order_by: Optional[str] = None,
    direction: str = "asc",
):
    if collection not in settings.LIVE_PUBLIC_COLLECTIONS:
        await websocket.close(code=CLOSE_FORBIDDEN)
        return
    if direction not in DIRECTIONS:
        await websocket.close(code=CLOSE_POLICY)
        return

    client = websocket.app.state.backend_client
    await websocket.accept()

    queue: asyncio.Queue = asyncio.Queue()
    unsubscribe = subscribe(
        client,
        collection,
        queue.put_nowait,
        queue.put_nowait,
        order_by_field=order_by,
        order_direction=direction,
    )
    watcher = asyncio.ensure_future(_watch_disconnect(websocket, queue))
    print(f"🔌 [live] abonnement '{collection}' ouvert", flush=True)
    try:
        while True:
            item = await queue.get()
            if item is _CLOSED:
                return
            if isinstance(item, BaseException):
                await websocket.send_json({"type": "error", "collection": collection, "detail": str(item)})
                await websocket.close(code=CLOSE_BACKEND_ERROR)
                return
            await websocket.send_json(jsonable_encoder({"type": "snapshot", "collection": collection, "items": item}))
    except WebSocketDisconnect:
        pass
    finally:
        watcher.cancel()
        unsubscribe()
        print(f"🔌 [live] abonnement '{collection}' fermé", flush=True)
