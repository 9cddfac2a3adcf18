"""
WebSocket manager for live RSVP counts
"""

import json
import logging
from typing import Dict, List
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends
from sqlalchemy.orm import Session

from eventrsvp.core.db import get_db
from eventrsvp.services.repositories import EventRepo

logger = logging.getLogger(__name__)

class WebSocketManager:
    """Tracks open event pages by slug"""

    def __init__(self):
        # slug -> list of websockets
        self.active_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, slug: str):
        await websocket.accept()
        self.active_connections.setdefault(slug, []).append(websocket)
        logger.info(f"WebSocket connected to event {slug}. Total connections: {len(self.active_connections[slug])}")

    def disconnect(self, websocket: WebSocket, slug: str):
        connections = self.active_connections.get(slug)
        if not connections or websocket not in connections:
            return
        connections.remove(websocket)
        if not connections:
            del self.active_connections[slug]

    async def broadcast_to_event(self, slug: str, message: dict):
        """Send to every page open on this event; drop sockets that fail"""
        connections = list(self.active_connections.get(slug, []))
        if not connections:
            return

        payload = json.dumps(message)
        disconnected = []
        for websocket in connections:
            try:
                await websocket.send_text(payload)
            except Exception as e:
                logger.warning(f"Dropping websocket for event {slug}: {e}")
                disconnected.append(websocket)

        for websocket in disconnected:
            self.disconnect(websocket, slug)

    def get_connection_count(self, slug: str) -> int:
        return len(self.active_connections.get(slug, []))

# Global WebSocket manager instance
websocket_manager = WebSocketManager()

router = APIRouter()

@router.websocket("/events/{slug}")
async def event_updates(
    websocket: WebSocket,
    slug: str,
    db: Session = Depends(get_db)
):
    """Push RSVP count changes to an open public event page"""
    event = EventRepo.get_by_slug(db, slug)
    if not event or not event.is_published:
        await websocket.close(code=4004, reason="Event not found")
        return

    await websocket_manager.connect(websocket, slug)
    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON received from WebSocket: {data}")
                continue
            if message.get("type") == "ping":
                await websocket.send_text(json.dumps({"type": "pong", "timestamp": message.get("timestamp")}))
    except WebSocketDisconnect:
        pass
    finally:
        websocket_manager.disconnect(websocket, slug)
