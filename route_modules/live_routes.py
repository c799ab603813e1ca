"""
Live Routes - push full snapshots of a collection over a WebSocket.

Each connection owns one subscription for as long as it is open; the
subscription is released when the client disconnects.
"""
import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from service_modules.base import get_document_store
from service_modules.basic_details_service import BasicDetailsService, COLLECTION as BASIC_DETAILS
from service_modules.document_store import DocumentStore
from service_modules.entities import get_entity
from service_modules.subscriber import LiveCollectionSubscriber
from sockets import manager

logger = logging.getLogger("fitmaker_admin")
router = APIRouter()


def _message(collection: str, records, error) -> dict:
    if error is not None:
        return {"type": "error", "collection": collection, **error.to_dict()}
    return {"type": "snapshot", "collection": collection, "records": records}


async def _serve(websocket: WebSocket, queue: asyncio.Queue):
    async def pump():
        while True:
            await websocket.send_json(await queue.get())

    pump_task = asyncio.create_task(pump())
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        pump_task.cancel()


@router.websocket("/ws/{collection}")
async def live_collection(
    websocket: WebSocket,
    collection: str,
    store: DocumentStore = Depends(get_document_store)
):
    entity = get_entity(collection)
    if entity is None and collection != BASIC_DETAILS:
        await websocket.close(code=4404)
        return

    queue: asyncio.Queue = asyncio.Queue()
    await manager.connect(websocket, collection)
    try:
        if entity is None:
            sub = BasicDetailsService(store).subscribe(
                lambda doc: queue.put_nowait({"type": "snapshot", "collection": collection, "record": doc}),
                lambda error: queue.put_nowait(_message(collection, None, error)),
            )
            try:
                await _serve(websocket, queue)
            finally:
                sub.cancel()
        else:
            subscriber = LiveCollectionSubscriber(
                store,
                entity.collection,
                order=entity.order,
                normalize=entity.normalize,
                fetch_error=entity.messages["fetch_failed"],
            )
            subscriber.add_listener(lambda records, error: queue.put_nowait(_message(collection, records, error)))
            async with subscriber.open():
                await _serve(websocket, queue)
    finally:
        manager.disconnect(websocket, collection)
        logger.info(f"Live socket for {collection} closed")
