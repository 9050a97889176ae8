from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from cafeorder.api.ws.manager import ConnectionManager

router = APIRouter()
logger = logging.getLogger(__name__)

WATCHABLE_TABLES = frozenset({"orders"})


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    table = websocket.query_params.get("table", "orders")
    raw_id = websocket.query_params.get("id")
    if table not in WATCHABLE_TABLES:
        await websocket.close(code=1008, reason=f"unknown table: {table}")
        return
    try:
        row_id = int(raw_id) if raw_id else None
    except ValueError:
        await websocket.close(code=1008, reason="id must be an integer")
        return

    manager: ConnectionManager = websocket.app.state.ws_manager
    await manager.register(websocket=websocket, table=table, row_id=row_id)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await manager.unregister(websocket)
    except Exception:
        logger.exception("ws_connection_error", extra={"table": table})
        await manager.unregister(websocket)
