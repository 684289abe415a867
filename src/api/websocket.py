"""WebSocket handler: hardware state broadcast to every connected client."""

import logging
import asyncio
from typing import Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


class ConnectionManager:
    """Track open WebSocket clients and fan state snapshots out to them."""

    def __init__(self):
        self.active_connections: Set[WebSocket] = set()

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.add(websocket)
        logger.info(f"Client connected. Total: {len(self.active_connections)}")

    def disconnect(self, websocket: WebSocket):
        self.active_connections.discard(websocket)
        logger.info(f"Client disconnected. Total: {len(self.active_connections)}")

    async def send(self, message: dict, websocket: WebSocket) -> bool:
        try:
            await websocket.send_json(message)
            return True
        except Exception as e:
            logger.error(f"Send error: {e}")
            return False

    async def broadcast(self, message: dict) -> int:
        """Send to every client, dropping the ones that fail. Returns clients reached."""
        sent = 0
        for websocket in list(self.active_connections):
            if await self.send(message, websocket):
                sent += 1
            else:
                self.disconnect(websocket)
        return sent


def state_message(hardware) -> dict:
    return {"type": "state", "data": hardware.get_status()}


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint: greeting, current state, then the periodic broadcast."""
    manager = websocket.app.state.connections
    hardware = websocket.app.state.hardware
    await manager.connect(websocket)

    await manager.send({
        "type": "connected",
        "message": "WebSocket ready"
    }, websocket)
    await manager.send(state_message(hardware), websocket)

    try:
        while True:
            # Listen for client messages (keep connection alive)
            data = await websocket.receive_text()
            logger.debug(f"Received: {data}")

    except WebSocketDisconnect:
        logger.info("Client disconnected")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        manager.disconnect(websocket)


async def broadcast_state(app, interval: float = 1.0):
    """Broadcast hardware state to all clients while the app is running."""
    manager = app.state.connections
    hardware = app.state.hardware

    while app.state.running:
        try:
            if manager.active_connections:
                await manager.broadcast(state_message(hardware))
            await asyncio.sleep(interval)
        except asyncio.CancelledError:
            break
        except Exception as e:
            logger.error(f"State broadcast error: {e}")
            await asyncio.sleep(1)
