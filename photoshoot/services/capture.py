import base64
import binascii
import io
import logging
import re
import time
from datetime import datetime, timezone
from typing import Optional

from PIL import Image

from photoshoot.errors import ImageDecodeFailure
from photoshoot.models.collage import CaptureResult
from photoshoot.services.session import SessionStore
from photoshoot.services.storage import LocalImageStore, RemoteStore, remote_key

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,")


def decode_base64_image(payload: str) -> bytes:
    """Decode a base64 image, accepting an optional ``data:image/...`` prefix."""
    try:
        return base64.b64decode(DATA_URL_PREFIX.sub("", payload.strip()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeFailure("<upload>", "invalid base64 payload") from e


def normalize_to_jpeg(data: bytes, quality: int = 90) -> bytes:
    """Re-encode any supported image as an RGB JPEG."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            rgb = img.convert("RGB")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeFailure("<upload>", str(e)) from e

    buffer = io.BytesIO()
    rgb.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


class CaptureService:
    """Stores captures from camera devices under their session folder."""

    def __init__(
        self,
        sessions: SessionStore,
        store: LocalImageStore,
        remote: Optional[RemoteStore] = None,
        quality: int = 90,
        remote_key_prefix: str = "photos",
    ):
        self.sessions = sessions
        self.store = store
        self.remote = remote
        self.quality = quality
        self.remote_key_prefix = remote_key_prefix

    def ingest(
        self,
        group_id: str,
        device_id: str,
        image_bytes: bytes,
        timestamp_ms: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> CaptureResult:
        # Session membership follows server receive time, not device clocks
        data = normalize_to_jpeg(image_bytes, self.quality)
        session = self.sessions.resolve(group_id, now or datetime.now(timezone.utc))
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)

        path = self.store.save_capture(session.folder_name, device_id, timestamp_ms, data)
        relative = self.store.relative_path(path)
        return CaptureResult(
            session=session,
            relative_path=relative,
            local_path=path,
            remote_url=self._mirror(data, relative),
        )

    def _mirror(self, data: bytes, relative: str) -> Optional[str]:
        if self.remote is None:
            return None
        key = remote_key(self.remote_key_prefix, relative)
        try:
            url = self.remote.upload(data, key, "image/jpeg")
        except Exception as e:
            logger.error("Remote upload failed for %s: %s", key, e)
            return None
        logger.info("Image uploaded to remote storage: %s", key)
        return url
