from fastapi import Request, WebSocket

from photoshoot.containers import AppContainer
from photoshoot.services.capture import CaptureService
from photoshoot.services.collage import CollageService
from photoshoot.services.discovery import CollageDiscovery
from photoshoot.services.websocket import ScreenConnectionManager


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_capture_service(request: Request) -> CaptureService:
    return get_container(request).capture_service


def get_collage_service(request: Request) -> CollageService:
    return get_container(request).collage_service


def get_discovery(request: Request) -> CollageDiscovery:
    return get_container(request).discovery


def get_screen_manager(request: Request) -> ScreenConnectionManager:
    return get_container(request).screen_manager


def get_ws_screen_manager(websocket: WebSocket) -> ScreenConnectionManager:
    return websocket.app.state.container.screen_manager
