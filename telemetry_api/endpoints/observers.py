"""WebSocket channel for live observers.

Protocol (server → client only):
1. On connect: status_update + node_status_update with the cached values
2. Then every live event: mqtt_message, status_update, node_status_update,
   history_cleared

Anything the client sends is ignored; it only keeps the session alive.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from ..core.broadcast.observers import QueueObserver

logger = logging.getLogger(__name__)

router = APIRouter(tags=["observers"])


async def _pump_events(websocket: WebSocket, observer: QueueObserver) -> None:
    while True:
        event = await observer.next_event()
        await websocket.send_json(event.to_dict())


async def _drain_client(websocket: WebSocket) -> None:
    while True:
        await websocket.receive_text()


@router.websocket("/ws")
async def observer_stream(websocket: WebSocket):
    service = getattr(websocket.app.state, "service", None)
    if service is None:
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR, reason="Service not initialized")
        return

    await websocket.accept()

    observer = QueueObserver(
        asyncio.get_running_loop(),
        max_queue_size=service.settings.observer_queue_size,
    )
    service.tracker.attach_observer(observer)

    sender = asyncio.create_task(_pump_events(websocket, observer))
    receiver = asyncio.create_task(_drain_client(websocket))
    try:
        done, pending = await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            error = task.exception()
            if error is not None and not isinstance(error, WebSocketDisconnect):
                logger.warning("[BROADCAST] Observer session ended id=%s err=%s", observer.observer_id, error)
    finally:
        observer.close()
        service.hub.detach(observer)
        logger.info("[BROADCAST] Observer disconnected id=%s", observer.observer_id)
