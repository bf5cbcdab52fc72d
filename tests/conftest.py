"""Shared test fixtures."""

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

import pytest
from PIL import Image

from photoshoot.config import Settings
from photoshoot.containers import build_container
from photoshoot.services.collage import CollageService
from photoshoot.services.layout import GridLayout
from photoshoot.services.storage import LocalImageStore


def make_image_bytes(width: int = 160, height: int = 120, color=(100, 150, 200), fmt: str = "JPEG") -> bytes:
    img = Image.new("RGB", (width, height), color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def write_image(path: Path, width: int = 160, height: int = 120, color=(100, 150, 200)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fmt = "PNG" if path.suffix.lower() == ".png" else "JPEG"
    path.write_bytes(make_image_bytes(width, height, color, fmt))
    return path


@dataclass
class FakeRemoteStore:
    """Remote store that keeps uploads in memory."""

    objects: Dict[str, Tuple[bytes, str]] = field(default_factory=dict)

    def upload(self, data: bytes, key: str, content_type: str) -> str:
        self.objects[key] = (data, content_type)
        return f"https://remote.example/{key}"


@dataclass
class FailingRemoteStore:
    """Remote store that is configured but rejects every upload."""

    attempts: List[str] = field(default_factory=list)

    def upload(self, data: bytes, key: str, content_type: str) -> str:
        self.attempts.append(key)
        raise ConnectionError("bucket unreachable")


@pytest.fixture
def storage_root(tmp_path) -> Path:
    root = tmp_path / "storage"
    root.mkdir()
    return root


@pytest.fixture
def image_store(storage_root) -> LocalImageStore:
    return LocalImageStore(storage_root)


@pytest.fixture
def collage_service(image_store) -> CollageService:
    return CollageService(store=image_store, planner=GridLayout(padding=10))


@pytest.fixture
def settings(storage_root) -> Settings:
    return Settings(
        storage_root=str(storage_root),
        backfill_on_startup=False,
        landscape_width=480,
        landscape_height=290,
        portrait_width=270,
        portrait_height=500,
    )


@pytest.fixture
def remote_store() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def container(settings, remote_store):
    return build_container(settings, remote_store=remote_store)


@pytest.fixture(autouse=True)
def propagate_app_logs():
    """Keep ``photoshoot`` records visible to caplog even after configure_logging ran."""
    logger = logging.getLogger("photoshoot")
    logger.propagate = True
    yield
    logger.handlers.clear()
    logger.propagate = True
