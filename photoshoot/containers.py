"""Dependency container wiring for the application."""

from dataclasses import dataclass
from typing import Optional

from photoshoot.config import Settings
from photoshoot.models.collage import Resolution
from photoshoot.models.session import OrientationType
from photoshoot.services.capture import CaptureService
from photoshoot.services.collage import CollageService
from photoshoot.services.discovery import CollageDiscovery
from photoshoot.services.layout import build_planner
from photoshoot.services.session import SessionStore
from photoshoot.services.storage import LocalImageStore, RemoteStore, build_remote_store
from photoshoot.services.websocket import ScreenConnectionManager


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_store: SessionStore
    image_store: LocalImageStore
    remote_store: Optional[RemoteStore]
    collage_service: CollageService
    discovery: CollageDiscovery
    capture_service: CaptureService
    screen_manager: ScreenConnectionManager


def build_container(settings: Optional[Settings] = None, remote_store: Optional[RemoteStore] = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    if remote_store is None:
        remote_store = build_remote_store(resolved_settings)

    image_store = LocalImageStore(resolved_settings.storage_root)
    session_store = SessionStore(
        timeout_ms=resolved_settings.session_timeout_ms,
        utc_offset_minutes=resolved_settings.session_utc_offset_minutes,
    )
    collage_service = CollageService(
        store=image_store,
        planner=build_planner(resolved_settings.layout_strategy, padding=resolved_settings.grid_padding),
        remote=remote_store,
        canvas_sizes={
            OrientationType.landscape: Resolution(
                resolved_settings.landscape_width, resolved_settings.landscape_height
            ),
            OrientationType.portrait: Resolution(
                resolved_settings.portrait_width, resolved_settings.portrait_height
            ),
        },
        quality=resolved_settings.collage_quality,
        remote_key_prefix=resolved_settings.remote_key_prefix,
        scatter_seed=resolved_settings.scatter_seed,
    )
    capture_service = CaptureService(
        sessions=session_store,
        store=image_store,
        remote=remote_store,
        quality=resolved_settings.capture_quality,
        remote_key_prefix=resolved_settings.remote_key_prefix,
    )

    return AppContainer(
        settings=resolved_settings,
        session_store=session_store,
        image_store=image_store,
        remote_store=remote_store,
        collage_service=collage_service,
        discovery=CollageDiscovery(collage_service),
        capture_service=capture_service,
        screen_manager=ScreenConnectionManager(),
    )
