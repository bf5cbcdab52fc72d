"""Placement planning for session collages.

Two interchangeable strategies share one output type, ``Placement``:

* ``GridLayout`` tiles the canvas in a rows x cols grid chosen from the image
  count and the canvas orientation. Every cell is filled edge to edge (the
  renderer center-crops), so a grid never letterboxes.
* ``ScatterLayout`` drops photos at random positions, sizes and tilts, keeping
  overlap bounded, for a "photos on a table" look.
"""

import math
import random
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from photoshoot.models.collage import Canvas, Placement, Rect
from photoshoot.models.session import LayoutType, OrientationType

# Grid cells that read as the visual center of a six-image grid
SIX_IMAGE_CENTER_SLOTS: Dict[OrientationType, Tuple[int, int]] = {
    OrientationType.landscape: (1, 4),
    OrientationType.portrait: (2, 3),
}

# Long photo edge as a fraction of the canvas short side
SCATTER_SIZE_CLASSES = (0.30, 0.36, 0.42, 0.48, 0.55)
SCATTER_SIZE_JITTER = 0.2
SCATTER_ROTATIONS = (-25, -20, -15, -10, -8, -5, -3, 0, 0, 0, 3, 5, 8, 10, 15, 20, 25)
SCATTER_BORDER_CHANCE = 0.7
SCATTER_MAX_OVERLAP = 0.3
SCATTER_MAX_ATTEMPTS = 50
SCATTER_FALLBACK_COLUMNS = 3


class LayoutPlanner(Protocol):
    def plan(
        self,
        orientations: Sequence[OrientationType],
        canvas: Canvas,
        seed: Optional[int] = None,
    ) -> List[Placement]:
        """Return one placement per source, in drawing order."""


def grid_dimensions(count: int, orientation: OrientationType) -> Tuple[int, int]:
    """Return ``(rows, cols)`` for ``count`` images on a canvas of ``orientation``."""
    if count < 1:
        raise ValueError("count must be at least 1")

    landscape = orientation == OrientationType.landscape
    if count == 1:
        return 1, 1
    if count == 2:
        return (1, 2) if landscape else (2, 1)
    if count <= 4:
        return 2, 2
    if count <= 6:
        return (2, 3) if landscape else (3, 2)
    if count <= 9:
        return 3, 3
    if count <= 12:
        return (3, 4) if landscape else (4, 3)
    if count <= 16:
        return 4, 4
    if count <= 20:
        return (4, 5) if landscape else (5, 4)

    # Approximate a 16:9 tiling (9:16 for portrait canvases)
    long_side = math.ceil(math.sqrt(count * 1.77))
    short_side = math.ceil(count / long_side)
    if landscape:
        return short_side, long_side
    return long_side, short_side


def center_weighted_order(
    orientations: Sequence[OrientationType], canvas_orientation: OrientationType
) -> List[int]:
    """Assign six sources to grid slots, putting landscape shots in the center.

    Returns the source index for each slot in row-major order. Landscape images
    take the center slots first; the remaining slots get portrait images in
    their original order followed by any landscape images that did not fit.
    """
    landscapes = [i for i, o in enumerate(orientations) if o == OrientationType.landscape]
    portraits = [i for i, o in enumerate(orientations) if o != OrientationType.landscape]
    center_slots = SIX_IMAGE_CENTER_SLOTS[canvas_orientation]

    centered = landscapes[: len(center_slots)]
    rest = portraits + landscapes[len(center_slots):]

    order = []
    for slot in range(len(orientations)):
        if slot in center_slots and centered:
            order.append(centered.pop(0))
        else:
            order.append(rest.pop(0))
    return order


class GridLayout:
    """Deterministic row-major grid with a fixed pixel gap between cells."""

    def __init__(self, padding: int = 10):
        self.padding = padding

    def plan(
        self,
        orientations: Sequence[OrientationType],
        canvas: Canvas,
        seed: Optional[int] = None,
    ) -> List[Placement]:
        count = len(orientations)
        if count == 0:
            return []

        rows, cols = grid_dimensions(count, canvas.orientation)
        # Gaps shrink on small canvases so every cell stays on the canvas
        pad = min(
            self.padding,
            max(0, (canvas.width - cols) // (cols + 1)),
            max(0, (canvas.height - rows) // (rows + 1)),
        )
        cell_width = max(1, (canvas.width - (cols + 1) * pad) // cols)
        cell_height = max(1, (canvas.height - (rows + 1) * pad) // rows)

        if count == 6:
            order = center_weighted_order(orientations, canvas.orientation)
        else:
            order = list(range(count))

        placements = []
        for slot, index in enumerate(order):
            row, col = divmod(slot, cols)
            placements.append(
                Placement(
                    index=index,
                    x=col * cell_width + (col + 1) * pad,
                    y=row * cell_height + (row + 1) * pad,
                    width=cell_width,
                    height=cell_height,
                    cell=(row, col),
                )
            )
        return placements


class ScatterLayout:
    """Randomized, overlap-bounded placement with tilt and borders.

    Each photo gets up to ``max_attempts`` random candidates; a candidate is
    rejected when it covers more than ``max_overlap`` of its own area, or of an
    already placed photo's area, whichever is smaller. Photos that never fit
    take a slot in a three-column grid instead, so nothing is dropped. The
    final list is shuffled so stacking order does not follow submission order.
    """

    def __init__(
        self,
        max_overlap: float = SCATTER_MAX_OVERLAP,
        max_attempts: int = SCATTER_MAX_ATTEMPTS,
        border_chance: float = SCATTER_BORDER_CHANCE,
    ):
        self.max_overlap = max_overlap
        self.max_attempts = max_attempts
        self.border_chance = border_chance

    def plan(
        self,
        orientations: Sequence[OrientationType],
        canvas: Canvas,
        seed: Optional[int] = None,
    ) -> List[Placement]:
        rng = random.Random(seed)
        count = len(orientations)
        margin = self._margin(canvas)
        placed: List[Placement] = []

        for index, orientation in enumerate(orientations):
            rect = self._sample(rng, orientation, canvas, margin, placed)
            fallback = rect is None
            if fallback:
                rect = self._fallback_slot(index, count, canvas, margin)
            placed.append(
                Placement(
                    index=index,
                    x=rect.x,
                    y=rect.y,
                    width=rect.width,
                    height=rect.height,
                    rotation=float(rng.choice(SCATTER_ROTATIONS)),
                    border=rng.random() < self.border_chance,
                    fallback=fallback,
                )
            )

        rng.shuffle(placed)
        return placed

    @staticmethod
    def _margin(canvas: Canvas) -> int:
        return max(10, int(min(canvas.width, canvas.height) * 0.03))

    def _sample(
        self,
        rng: random.Random,
        orientation: OrientationType,
        canvas: Canvas,
        margin: int,
        placed: Sequence[Placement],
    ) -> Optional[Rect]:
        for _ in range(self.max_attempts):
            width, height = self._random_size(rng, orientation, canvas, margin)
            x = rng.randint(margin, max(margin, canvas.width - margin - width))
            y = rng.randint(margin, max(margin, canvas.height - margin - height))
            candidate = Rect(x, y, width, height)
            if not self._overlaps(candidate, placed):
                return candidate
        return None

    def _overlaps(self, candidate: Rect, placed: Sequence[Placement]) -> bool:
        for other in placed:
            rect = other.rect
            shared = candidate.intersection_area(rect)
            if shared > self.max_overlap * min(candidate.area, rect.area):
                return True
        return False

    @staticmethod
    def _random_size(
        rng: random.Random, orientation: OrientationType, canvas: Canvas, margin: int
    ) -> Tuple[int, int]:
        short_side = min(canvas.width, canvas.height)
        jitter = rng.uniform(1 - SCATTER_SIZE_JITTER, 1 + SCATTER_SIZE_JITTER)
        long_edge = short_side * rng.choice(SCATTER_SIZE_CLASSES) * jitter
        if orientation == OrientationType.landscape:
            width, height = long_edge, long_edge * 3 / 4
        else:
            width, height = long_edge * 3 / 4, long_edge

        # Shrink to the usable area, keeping the photo's aspect
        scale = min(
            1.0,
            (canvas.width - 2 * margin) / width,
            (canvas.height - 2 * margin) / height,
        )
        return max(1, int(width * scale)), max(1, int(height * scale))

    @staticmethod
    def _fallback_slot(index: int, count: int, canvas: Canvas, margin: int) -> Rect:
        cols = SCATTER_FALLBACK_COLUMNS
        rows = max(1, math.ceil(count / cols))
        gap = margin // 2
        cell_width = max(1, (canvas.width - 2 * margin - (cols - 1) * gap) // cols)
        cell_height = max(1, (canvas.height - 2 * margin - (rows - 1) * gap) // rows)
        row, col = divmod(index, cols)
        return Rect(
            margin + col * (cell_width + gap),
            margin + row * (cell_height + gap),
            cell_width,
            cell_height,
        )


def build_planner(strategy: LayoutType, padding: int = 10) -> LayoutPlanner:
    if LayoutType(strategy) == LayoutType.scatter:
        return ScatterLayout()
    return GridLayout(padding=padding)
