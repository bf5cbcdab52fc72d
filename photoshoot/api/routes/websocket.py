import json

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from photoshoot.api.dependencies import get_ws_screen_manager
from photoshoot.services.websocket import ScreenConnectionManager

router = APIRouter()


@router.websocket("/ws/screens/{screen_id}")
async def screen_endpoint(
    websocket: WebSocket,
    screen_id: str,
    screen_manager: ScreenConnectionManager = Depends(get_ws_screen_manager)
):
    await screen_manager.connect(screen_id, websocket)
    try:
        while True:
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_text(json.dumps({"type": "pong"}))
    except WebSocketDisconnect:
        screen_manager.disconnect(screen_id, websocket)
