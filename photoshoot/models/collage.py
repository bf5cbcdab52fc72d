"""Value types shared by the session resolver, layout planner and compositor."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from photoshoot.models.session import OrientationType


@dataclass(frozen=True)
class Session:
    group_id: str
    created_at: datetime
    folder_name: str


@dataclass(frozen=True)
class Resolution:
    width: int
    height: int

    @property
    def orientation(self) -> OrientationType:
        if self.width >= self.height:
            return OrientationType.landscape
        return OrientationType.portrait

    def for_orientation(self, orientation: OrientationType) -> "Resolution":
        """Return this resolution, transposed if it does not match ``orientation``."""
        if self.width == self.height or self.orientation == orientation:
            return self
        return Resolution(self.height, self.width)


@dataclass(frozen=True)
class Canvas:
    width: int
    height: int
    orientation: OrientationType


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height

    def intersection_area(self, other: "Rect") -> int:
        dx = min(self.x + self.width, other.x + other.width) - max(self.x, other.x)
        dy = min(self.y + self.height, other.y + other.height) - max(self.y, other.y)
        if dx <= 0 or dy <= 0:
            return 0
        return dx * dy


@dataclass(frozen=True)
class Placement:
    """Where one source image lands on a canvas.

    ``index`` points back into the list of sources handed to the planner.
    ``cell`` is set by the grid strategy; ``fallback`` marks scatter placements
    that gave up on random sampling and took a safe grid slot.
    """

    index: int
    x: int
    y: int
    width: int
    height: int
    rotation: float = 0.0
    border: bool = False
    cell: Optional[Tuple[int, int]] = None
    fallback: bool = False

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class CollageResult:
    folder: str
    local_paths: Tuple[Path, Path]
    remote_urls: Optional[Tuple[str, str]] = None


@dataclass(frozen=True)
class CaptureResult:
    session: Session
    relative_path: str
    local_path: Path
    remote_url: Optional[str] = None

    @property
    def device_folder(self) -> str:
        return Path(self.relative_path).parent.as_posix()


@dataclass
class BackfillReport:
    scanned: int = 0
    generated: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
