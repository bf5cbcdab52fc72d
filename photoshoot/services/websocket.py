import json
import logging
from typing import Dict, Iterable, List

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ScreenConnectionManager:
    """Live connections of display screens, keyed by screen id."""

    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}

    async def connect(self, screen_id: str, websocket: WebSocket):
        await websocket.accept()
        self.active_connections[screen_id] = websocket
        logger.info("Screen registered: %s", screen_id)
        await websocket.send_text(json.dumps({"type": "registered", "screen_id": screen_id}))

    def disconnect(self, screen_id: str, websocket: WebSocket = None):
        current = self.active_connections.get(screen_id)
        if current is not None and (websocket is None or current is websocket):
            del self.active_connections[screen_id]
            logger.info("Screen unregistered: %s", screen_id)

    def connected_screens(self) -> List[str]:
        return list(self.active_connections)

    async def send_to_screens(self, screen_ids: Iterable[str], message: dict) -> List[str]:
        """Send ``message`` to the given screens, or to all of them when none are named."""
        targets = list(screen_ids) or self.connected_screens()
        text = json.dumps(message)
        delivered = []
        for screen_id in targets:
            websocket = self.active_connections.get(screen_id)
            if websocket is None:
                continue
            try:
                await websocket.send_text(text)
            except Exception as e:
                logger.warning("Dropping screen %s after send failure: %s", screen_id, e)
                self.disconnect(screen_id, websocket)
                continue
            delivered.append(screen_id)
        return delivered
