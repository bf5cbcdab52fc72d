import logging
import os
from pathlib import Path
from typing import List, Optional, Protocol

from supabase import create_client

from photoshoot.config import Settings
from photoshoot.errors import InvalidFolderPath

logger = logging.getLogger(__name__)


class RemoteStore(Protocol):
    """Object storage used as a best-effort mirror of local files."""

    def upload(self, data: bytes, key: str, content_type: str) -> str:
        """Store ``data`` under ``key`` and return its public URL."""


class LocalImageStore:
    """Filesystem hierarchy rooted at the storage directory. Always authoritative."""

    def __init__(self, root):
        self.root = Path(root).resolve()

    def ensure_root(self) -> Path:
        if not self.root.exists():
            self.root.mkdir(parents=True, exist_ok=True)
            logger.info("Created base storage directory: %s", self.root)
        return self.root

    def resolve_path(self, relative: str) -> Path:
        """Map a path relative to the root, refusing anything outside it."""
        candidate = (self.root / relative.strip("/")).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            raise InvalidFolderPath(relative)
        return candidate

    def relative_path(self, path) -> str:
        return Path(path).resolve().relative_to(self.root).as_posix()

    def exists(self, path) -> bool:
        return Path(path).exists()

    def write(self, path, data: bytes) -> Path:
        """Write ``data`` to ``path``, replacing whatever was there."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(f".{target.name}.tmp")
        with open(tmp, "wb") as f:
            f.write(data)
        os.replace(tmp, target)
        return target

    def read_all(self, dir_path, recursive: bool = True) -> List[Path]:
        """List files under ``dir_path`` in sorted order."""
        base = Path(dir_path)
        pattern = "**/*" if recursive else "*"
        return sorted((p for p in base.glob(pattern) if p.is_file()), key=lambda p: p.as_posix())

    def save_capture(self, folder: str, device_id: str, timestamp_ms: int, data: bytes) -> Path:
        target = self.resolve_path(f"{folder}/{device_id}") / f"{timestamp_ms}.jpg"
        self.write(target, data)
        logger.info("Image saved locally: %s", self.relative_path(target))
        return target


class SupabaseRemoteStore:
    """Mirror files into a Supabase storage bucket."""

    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket

    def upload(self, data: bytes, key: str, content_type: str) -> str:
        bucket = self.client.storage.from_(self.bucket)
        bucket.upload(
            path=key,
            file=data,
            file_options={"content-type": content_type, "upsert": "true"},
        )
        return bucket.get_public_url(key)


def build_remote_store(settings: Settings) -> Optional[RemoteStore]:
    if not settings.remote_configured:
        logger.warning("Remote storage not configured, collages and captures stay local only")
        return None

    client = create_client(settings.supabase_url, settings.supabase_service_key)
    return SupabaseRemoteStore(client, settings.supabase_bucket)


def remote_key(prefix: str, relative_path: str) -> str:
    prefix = prefix.strip("/")
    if not prefix:
        return relative_path
    return f"{prefix}/{relative_path}"
