"""WebSocket temps reel des collections / Real-time collection WebSocket."""

import json
import logging
from collections.abc import Callable

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from fleetops.api.deps import get_store
from fleetops.constants import COLLECTIONS
from fleetops.services.record_store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter()


class CollectionConnectionManager:
    """Gestionnaire de connexions WebSocket par collection / Per-collection WebSocket connection manager."""

    def __init__(self):
        self.active_connections: dict[str, list[WebSocket]] = {}
        self._unsubscribers: dict[str, Callable[[], None]] = {}

    async def connect(self, name: str, websocket: WebSocket, store: RecordStore):
        await websocket.accept()
        self.active_connections.setdefault(name, []).append(websocket)
        if name not in self._unsubscribers:
            self._unsubscribers[name] = store.on_change(
                name, lambda snapshot, n=name: self.broadcast(n, snapshot)
            )

    def disconnect(self, name: str, websocket: WebSocket):
        connections = self.active_connections.get(name, [])
        if websocket in connections:
            connections.remove(websocket)
        if not connections and name in self._unsubscribers:
            self._unsubscribers.pop(name)()

    async def broadcast(self, name: str, snapshot: list[dict]):
        """Envoyer l'instantane a tous les abonnes / Send the snapshot to every subscriber."""
        data = json.dumps({"collection": name, "documents": snapshot}, ensure_ascii=False)
        disconnected = []
        for connection in list(self.active_connections.get(name, [])):
            try:
                await connection.send_text(data)
            except (WebSocketDisconnect, RuntimeError):
                disconnected.append(connection)
        for conn in disconnected:
            self.disconnect(name, conn)

    async def send_personal(self, websocket: WebSocket, message: dict):
        await websocket.send_text(json.dumps(message, ensure_ascii=False))


# Singleton global / Global singleton
manager = CollectionConnectionManager()


@router.websocket("/ws/collections/{name}")
async def websocket_collection(websocket: WebSocket, name: str, store: RecordStore = Depends(get_store)):
    """Instantane initial puis un par changement / Initial snapshot, then one per change."""
    if name not in COLLECTIONS:
        await websocket.close(code=4004, reason="Unknown collection")
        return

    await manager.connect(name, websocket, store)
    await manager.send_personal(
        websocket, {"collection": name, "documents": await store.list_collection(name)}
    )
    try:
        while True:
            # Garder la connexion ouverte, recevoir pings / Keep connection alive
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(name, websocket)
