# uigen/lib/websocket.py
from typing import Dict, List
import asyncio

from fastapi import WebSocket

from uigen.core.logging import log


class ConnectionManager:
    """
    Per-project WebSocket connection manager.

    - Every socket is tracked from connect until disconnect.
    - A socket joins a project's list once it subscribes.
    - You can send to one socket, all sockets for a project, or broadcast to everyone.
    """

    def __init__(self) -> None:
        self.connections: List[WebSocket] = []
        # project_id -> list[WebSocket]
        self.active_connections: Dict[str, List[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self.connections.append(websocket)
        log("WS", f"🔌 Client connected ({len(self.connections)} open)")

    async def subscribe(self, websocket: WebSocket, project_id: str) -> None:
        async with self._lock:
            sockets = self.active_connections.setdefault(project_id, [])
            if websocket not in sockets:
                sockets.append(websocket)

    async def unsubscribe(self, websocket: WebSocket, project_id: str) -> None:
        async with self._lock:
            self._remove(websocket, project_id)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            if websocket in self.connections:
                self.connections.remove(websocket)
            for project_id in list(self.active_connections):
                self._remove(websocket, project_id)
        log("WS", f"👋 Client disconnected ({len(self.connections)} open)")

    def _remove(self, websocket: WebSocket, project_id: str) -> None:
        sockets = self.active_connections.get(project_id, [])
        if websocket in sockets:
            sockets.remove(websocket)
        if not sockets and project_id in self.active_connections:
            del self.active_connections[project_id]

    async def send_json(self, websocket: WebSocket, data: dict) -> None:
        await websocket.send_json(data)

    async def send_to_project(self, project_id: str, message: dict) -> None:
        """
        Send a JSON message to all clients subscribed to a given project_id.
        Sockets that fail to receive are dropped.
        """
        async with self._lock:
            sockets = list(self.active_connections.get(project_id, []))

        disconnected: List[WebSocket] = []
        for ws in sockets:
            try:
                await ws.send_json(message)
            except Exception as e:
                log("WS", f"⚠️ Dropping dead socket: {e}", project_id=project_id)
                disconnected.append(ws)

        for ws in disconnected:
            await self.disconnect(ws)

    async def broadcast_json(self, message: dict) -> None:
        """Broadcast a JSON message to every open socket."""
        async with self._lock:
            sockets = list(self.connections)

        for ws in sockets:
            try:
                await ws.send_json(message)
            except Exception as e:
                log("WS", f"⚠️ Dropping dead socket: {e}")
                await self.disconnect(ws)

    def subscriber_count(self, project_id: str) -> int:
        return len(self.active_connections.get(project_id, []))
