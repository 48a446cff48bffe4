# src/parley/api/v1/endpoints/realtime.py
"""WebSocket transport pushing new messages to connected users."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from parley.api.v1.dependencies import decode_user_id
from parley.services.delivery import ConnectionRegistry

router = APIRouter(tags=["realtime"])

logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def live_updates(websocket: WebSocket, token: str = Query("")) -> None:
    """Hold a live connection for the authenticated user.

    The socket is registered on accept and removed on disconnect. Clients may
    send ``{"type": "ping"}`` frames to keep the connection alive.
    """
    try:
        user_id = decode_user_id(token)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    registry: ConnectionRegistry = websocket.app.state.connections
    await websocket.accept()
    registry.register(user_id, websocket)
    logger.info("User %s connected", user_id)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except ValueError:
                logger.debug("Ignoring malformed frame from %s", user_id)
                continue
            if isinstance(frame, dict) and frame.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        registry.unregister(user_id, websocket)
        logger.info("User %s disconnected", user_id)
