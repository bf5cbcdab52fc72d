import io
import logging
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from PIL import Image, ImageOps

from photoshoot.errors import (
    ImageDecodeFailure,
    InvalidFolderPath,
    NoSourceImages,
    RemoteUploadFailure,
    SessionFolderNotFound,
)
from photoshoot.models.collage import Canvas, CollageResult, Placement, Resolution
from photoshoot.models.session import OrientationType
from photoshoot.services.layout import LayoutPlanner
from photoshoot.services.locks import KeyedLocks
from photoshoot.services.orientation import classify
from photoshoot.services.storage import LocalImageStore, RemoteStore, remote_key

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")
COLLAGE_PREFIX = "collage_"
COLLAGE_ORIENTATIONS = (OrientationType.landscape, OrientationType.portrait)
COLLAGE_CONTENT_TYPE = "image/jpeg"

BORDER_COLOR = (255, 255, 255)
BORDER_EDGE_COLOR = (200, 200, 200)

DEFAULT_CANVAS_SIZES = {
    OrientationType.landscape: Resolution(1920, 1160),
    OrientationType.portrait: Resolution(1080, 2000),
}


def collage_filename(orientation: OrientationType) -> str:
    return f"{COLLAGE_PREFIX}{OrientationType(orientation).value}.jpg"


def is_source_image(path: Path) -> bool:
    """Image files only; previously rendered collages never count as sources."""
    return path.suffix.lower() in IMAGE_EXTENSIONS and not path.name.startswith(COLLAGE_PREFIX)


def session_folder_of(folder_path: str) -> str:
    """Return the session-level folder for a possibly camera-specific path."""
    parts = [part for part in folder_path.strip("/").split("/") if part]
    if not parts:
        return ""
    return parts[0]


def checked_session_folder(folder_path: str) -> str:
    """Session-level folder for ``folder_path``; dot segments and the bare root are refused."""
    parts = folder_path.strip("/").split("/")
    if any(part in (".", "..") for part in parts) or not session_folder_of(folder_path):
        raise InvalidFolderPath(folder_path)
    return session_folder_of(folder_path)


@dataclass
class SourceImage:
    path: Path
    image: Image.Image
    orientation: OrientationType


class CollageService:
    """Builds the landscape and portrait collages for a session folder.

    Sources are every image below the folder, camera subfolders included.
    Collages always land in the session-level folder so all cameras of one
    shoot share a single pair. Local files are authoritative; the remote store,
    when present, only mirrors them.
    """

    def __init__(
        self,
        store: LocalImageStore,
        planner: LayoutPlanner,
        remote: Optional[RemoteStore] = None,
        canvas_sizes: Optional[Dict[OrientationType, Resolution]] = None,
        quality: int = 90,
        remote_key_prefix: str = "photos",
        scatter_seed: Optional[int] = None,
        classifier: Callable[..., OrientationType] = classify,
    ):
        self.store = store
        self.planner = planner
        self.remote = remote
        self.canvas_sizes = dict(canvas_sizes or DEFAULT_CANVAS_SIZES)
        self.quality = quality
        self.remote_key_prefix = remote_key_prefix
        self.scatter_seed = scatter_seed
        self.classifier = classifier
        self.folder_locks = KeyedLocks()

    def collage_path(self, folder_path: str, orientation: OrientationType) -> Path:
        return self.store.resolve_path(checked_session_folder(folder_path)) / collage_filename(orientation)

    def collage_exists(self, folder_path: str, orientation: Optional[OrientationType] = None) -> bool:
        if orientation is not None:
            return self.store.exists(self.collage_path(folder_path, orientation))
        return any(self.store.exists(self.collage_path(folder_path, o)) for o in COLLAGE_ORIENTATIONS)

    def find_source_images(self, folder_dir: Path) -> List[Path]:
        return [p for p in self.store.read_all(folder_dir, recursive=True) if is_source_image(p)]

    def canvas_for(self, orientation: OrientationType, target: Optional[Resolution] = None) -> Canvas:
        if target is not None:
            size = target.for_orientation(orientation)
        else:
            size = self.canvas_sizes[orientation]
        return Canvas(size.width, size.height, orientation)

    def compose(self, folder_path: str, target_resolution: Optional[Resolution] = None) -> CollageResult:
        """Render and store both collages for ``folder_path``.

        Raises ``SessionFolderNotFound`` for a missing folder and
        ``NoSourceImages`` when nothing decodable is found. Corrupt files and
        remote mirror failures are logged and skipped.
        """
        session_folder = checked_session_folder(folder_path)
        save_dir = self.store.resolve_path(session_folder)
        folder_dir = self.store.resolve_path(folder_path)
        if folder_dir != save_dir and save_dir not in folder_dir.parents:
            raise InvalidFolderPath(folder_path)
        if not folder_dir.is_dir():
            raise SessionFolderNotFound(folder_path)

        with self.folder_locks.hold(session_folder):
            paths = self.find_source_images(folder_dir)
            if not paths:
                raise NoSourceImages(folder_path)
            logger.info("Found %d images for collage in %s", len(paths), folder_path)

            canvases = [self.canvas_for(o, target_resolution) for o in COLLAGE_ORIENTATIONS]
            max_edge = max(max(c.width, c.height) for c in canvases)
            sources = self._load_sources(paths, max_edge)
            if not sources:
                raise NoSourceImages(folder_path)

            seed = self._seed_for(session_folder)
            rendered: Dict[Path, bytes] = {}
            try:
                for canvas in canvases:
                    data = self.render(sources, canvas, seed)
                    path = self.store.write(save_dir / collage_filename(canvas.orientation), data)
                    rendered[path] = data
                    logger.info(
                        "Created %s collage %dx%d from %d images: %s",
                        canvas.orientation.value, canvas.width, canvas.height, len(sources), path,
                    )
            finally:
                for source in sources:
                    source.image.close()

        local_paths = tuple(rendered)
        return CollageResult(
            folder=session_folder,
            local_paths=local_paths,
            remote_urls=self._mirror(rendered),
        )

    def render(self, sources: Sequence[SourceImage], canvas: Canvas, seed: Optional[int] = None) -> bytes:
        placements = self.planner.plan([s.orientation for s in sources], canvas, seed=seed)
        final_img = Image.new("RGB", (canvas.width, canvas.height), "white")

        # Later placements draw over earlier ones
        for placement in placements:
            source = sources[placement.index]
            try:
                self._paste(final_img, source.image, placement)
            except (OSError, ValueError) as e:
                logger.warning("Skipping %s in collage: %s", source.path, e)

        buffer = io.BytesIO()
        final_img.save(buffer, format="JPEG", quality=self.quality)
        return buffer.getvalue()

    def _paste(self, canvas: Image.Image, image: Image.Image, placement: Placement) -> None:
        tile = ImageOps.fit(image, (placement.width, placement.height), Image.Resampling.LANCZOS)
        left, top = placement.x, placement.y

        if placement.border:
            border = max(4, min(placement.width, placement.height) // 25)
            tile = ImageOps.expand(tile, border=border, fill=BORDER_COLOR)
            tile = ImageOps.expand(tile, border=1, fill=BORDER_EDGE_COLOR)
            left -= border + 1
            top -= border + 1

        if not placement.rotation:
            canvas.paste(tile, (left, top))
            return

        rotated = tile.convert("RGBA").rotate(
            placement.rotation, expand=True, resample=Image.Resampling.BICUBIC
        )
        center_x = placement.x + placement.width // 2
        center_y = placement.y + placement.height // 2
        canvas.paste(
            rotated,
            (center_x - rotated.width // 2, center_y - rotated.height // 2),
            rotated,
        )

    def _load_sources(self, paths: Sequence[Path], max_edge: int) -> List[SourceImage]:
        sources = []
        for path in paths:
            try:
                with Image.open(path) as img:
                    img.load()
                    image = img.convert("RGB")
            except (OSError, ValueError, Image.DecompressionBombError) as e:
                logger.warning("%s", ImageDecodeFailure(str(path), str(e)))
                continue

            # Nothing is drawn larger than the canvas
            image.thumbnail((max_edge, max_edge), Image.Resampling.LANCZOS)
            sources.append(SourceImage(path=path, image=image, orientation=self.classifier(path)))
        return sources

    def _seed_for(self, session_folder: str) -> int:
        if self.scatter_seed is not None:
            return self.scatter_seed
        return zlib.crc32(session_folder.encode("utf-8"))

    def _mirror(self, rendered: Dict[Path, bytes]) -> Optional[tuple]:
        if self.remote is None:
            return None

        urls = []
        for path, data in rendered.items():
            key = remote_key(self.remote_key_prefix, self.store.relative_path(path))
            try:
                urls.append(self.remote.upload(data, key, COLLAGE_CONTENT_TYPE))
            except Exception as e:
                logger.error("%s", RemoteUploadFailure(key, str(e)))
                return None
            logger.info("Collage uploaded to remote storage: %s", key)
        return tuple(urls)
