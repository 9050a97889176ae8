from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Sockets grouped by watched table, each with an optional row id filter."""

    def __init__(self) -> None:
        self._connections: dict[str, dict[WebSocket, int | None]] = defaultdict(dict)
        self._socket_to_table: dict[WebSocket, str] = {}
        self._lock = asyncio.Lock()

    async def register(self, websocket: WebSocket, table: str, row_id: int | None = None) -> None:
        await websocket.accept()
        async with self._lock:
            self._connections[table][websocket] = row_id
            self._socket_to_table[websocket] = table
        logger.info("ws_client_connected", extra={"table": table, "row_id": row_id})

    async def unregister(self, websocket: WebSocket) -> None:
        async with self._lock:
            table = self._socket_to_table.pop(websocket, None)
            if table is None:
                return
            sockets = self._connections.get(table)
            if sockets is None:
                return
            sockets.pop(websocket, None)
            if not sockets:
                self._connections.pop(table, None)
        logger.info("ws_client_disconnected", extra={"table": table})

    async def connection_count(self, table: str) -> int:
        async with self._lock:
            return len(self._connections.get(table, {}))

    async def broadcast(self, table: str, row_id: Any, message_json_str: str) -> None:
        async with self._lock:
            targets = [
                websocket
                for websocket, wanted in self._connections.get(table, {}).items()
                if wanted is None or wanted == row_id
            ]

        stale: list[WebSocket] = []
        for websocket in targets:
            try:
                await websocket.send_text(message_json_str)
            except Exception:
                stale.append(websocket)

        for websocket in stale:
            await self.unregister(websocket)
