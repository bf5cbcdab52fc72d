"""Tests for grid and scatter placement planning."""

import itertools

import pytest

from photoshoot.models.collage import Canvas
from photoshoot.models.session import LayoutType, OrientationType
from photoshoot.services.layout import (
    SCATTER_ROTATIONS,
    GridLayout,
    ScatterLayout,
    build_planner,
    center_weighted_order,
    grid_dimensions,
)

L = OrientationType.landscape
P = OrientationType.portrait

LANDSCAPE_CANVAS = Canvas(1920, 1160, L)
PORTRAIT_CANVAS = Canvas(1080, 2000, P)


@pytest.mark.parametrize(
    "count, landscape, portrait",
    [
        (1, (1, 1), (1, 1)),
        (2, (1, 2), (2, 1)),
        (3, (2, 2), (2, 2)),
        (4, (2, 2), (2, 2)),
        (5, (2, 3), (3, 2)),
        (6, (2, 3), (3, 2)),
        (7, (3, 3), (3, 3)),
        (9, (3, 3), (3, 3)),
        (10, (3, 4), (4, 3)),
        (12, (3, 4), (4, 3)),
        (13, (4, 4), (4, 4)),
        (16, (4, 4), (4, 4)),
        (17, (4, 5), (5, 4)),
        (20, (4, 5), (5, 4)),
        (21, (3, 7), (7, 3)),
        (50, (5, 10), (10, 5)),
    ],
)
def test_grid_dimensions_table(count, landscape, portrait) -> None:
    assert grid_dimensions(count, L) == landscape
    assert grid_dimensions(count, P) == portrait


def test_grid_dimensions_rejects_empty() -> None:
    with pytest.raises(ValueError):
        grid_dimensions(0, L)


@pytest.mark.parametrize("canvas", [LANDSCAPE_CANVAS, PORTRAIT_CANVAS])
def test_grid_covers_every_image_inside_canvas(canvas) -> None:
    layout = GridLayout(padding=10)
    for count in range(1, 101):
        placements = layout.plan([P] * count, canvas)

        assert len(placements) == count
        assert sorted(p.index for p in placements) == list(range(count))
        assert len({p.cell for p in placements}) == count
        for p in placements:
            assert p.x >= 0 and p.y >= 0
            assert p.x + p.width <= canvas.width
            assert p.y + p.height <= canvas.height
            assert p.rotation == 0 and not p.border


def test_grid_cells_do_not_overlap() -> None:
    placements = GridLayout(padding=10).plan([L] * 11, LANDSCAPE_CANVAS)

    for a, b in itertools.combinations(placements, 2):
        assert a.rect.intersection_area(b.rect) == 0


def test_two_images_side_by_side_on_landscape_canvas() -> None:
    canvas = Canvas(1920, 1080, L)

    placements = GridLayout(padding=10).plan([L, P], canvas)

    assert [p.index for p in placements] == [0, 1]
    assert [p.cell for p in placements] == [(0, 0), (0, 1)]
    left, right = placements
    assert (left.x, left.y) == (10, 10)
    assert (left.width, left.height) == (945, 1060)
    assert right.x == 965
    assert right.x + right.width == 1910


def test_row_major_order_without_six_image_rule() -> None:
    placements = GridLayout(padding=0).plan([L, P, L, P, L], Canvas(300, 200, L))

    assert [p.index for p in placements] == [0, 1, 2, 3, 4]
    assert [p.cell for p in placements] == [(0, 0), (0, 1), (0, 2), (1, 0), (1, 1)]


@pytest.mark.parametrize(
    "canvas, center_cells",
    [
        (LANDSCAPE_CANVAS, {(0, 1), (1, 1)}),
        (PORTRAIT_CANVAS, {(1, 0), (1, 1)}),
    ],
)
def test_six_images_put_landscapes_in_center(canvas, center_cells) -> None:
    orientations = [P, L, P, P, L, P]

    placements = GridLayout().plan(orientations, canvas)

    landscape_cells = {p.cell for p in placements if orientations[p.index] == L}
    assert landscape_cells == center_cells
    assert len(placements) == 6


def test_six_image_order_keeps_portraits_in_submission_order() -> None:
    order = center_weighted_order([L, P, P, L, P, P], L)

    # slots 1 and 4 take the landscapes, the rest fill in original order
    assert order == [1, 0, 2, 4, 3, 5]


def test_six_image_order_appends_landscape_overflow() -> None:
    order = center_weighted_order([L, L, L, P, L, P], P)

    # slots 2 and 3 take the first two landscapes
    assert order[2:4] == [0, 1]
    assert order == [3, 5, 0, 1, 2, 4]


def test_six_image_order_with_single_landscape() -> None:
    order = center_weighted_order([P, P, P, P, P, L], L)

    assert order[1] == 5
    assert sorted(order) == list(range(6))


def _random_orientations(count, seed):
    return [L if (seed + i) % 3 == 0 else P for i in range(count)]


@pytest.mark.parametrize("canvas", [LANDSCAPE_CANVAS, PORTRAIT_CANVAS])
def test_scatter_overlap_stays_bounded(canvas) -> None:
    layout = ScatterLayout()
    for seed in range(60):
        count = 1 + seed % 12
        placements = layout.plan(_random_orientations(count, seed), canvas, seed=seed)

        assert sorted(p.index for p in placements) == list(range(count))
        sampled = [p for p in placements if not p.fallback]
        for a, b in itertools.combinations(sampled, 2):
            shared = a.rect.intersection_area(b.rect)
            assert shared <= 0.3 * min(a.rect.area, b.rect.area)


def test_scatter_places_inside_margins() -> None:
    placements = ScatterLayout().plan([L, P, P, L, P], LANDSCAPE_CANVAS, seed=7)

    for p in placements:
        assert p.x >= 0 and p.y >= 0
        assert p.x + p.width <= LANDSCAPE_CANVAS.width
        assert p.y + p.height <= LANDSCAPE_CANVAS.height
        assert p.rotation in SCATTER_ROTATIONS


def test_scatter_is_reproducible_for_a_seed() -> None:
    layout = ScatterLayout()
    orientations = [L, P, P, L, P, P, L]

    first = layout.plan(orientations, PORTRAIT_CANVAS, seed=42)
    second = layout.plan(orientations, PORTRAIT_CANVAS, seed=42)

    assert first == second


def test_scatter_falls_back_instead_of_dropping() -> None:
    # Zero tolerance with many photos forces the safe grid path
    layout = ScatterLayout(max_overlap=0.0, max_attempts=1)

    placements = layout.plan([P] * 30, Canvas(400, 300, L), seed=3)

    assert len(placements) == 30
    assert any(p.fallback for p in placements)
    for p in placements:
        assert p.width > 0 and p.height > 0


def test_scatter_shuffles_drawing_order() -> None:
    layout = ScatterLayout()
    orders = {
        tuple(p.index for p in layout.plan([P] * 8, LANDSCAPE_CANVAS, seed=seed))
        for seed in range(10)
    }

    assert len(orders) > 1


def test_scatter_borders_and_tilts_are_mixed() -> None:
    placements = []
    for seed in range(20):
        placements.extend(ScatterLayout().plan([P] * 6, LANDSCAPE_CANVAS, seed=seed))

    bordered = sum(p.border for p in placements)
    assert 0 < bordered < len(placements)
    assert any(p.rotation == 0 for p in placements)
    assert any(p.rotation != 0 for p in placements)


def test_build_planner_selects_strategy() -> None:
    assert isinstance(build_planner(LayoutType.grid), GridLayout)
    assert isinstance(build_planner("scatter"), ScatterLayout)
    assert build_planner("grid", padding=4).padding == 4


@pytest.mark.parametrize("canvas", [Canvas(64, 64, L), Canvas(64, 64, P), Canvas(96, 64, L), Canvas(64, 96, P)])
def test_grid_fits_smallest_canvas(canvas) -> None:
    layout = GridLayout(padding=10)
    for count in range(1, 101):
        placements = layout.plan([L] * count, canvas)

        assert len({p.cell for p in placements}) == count
        for p in placements:
            assert p.width >= 1 and p.height >= 1
            assert p.x + p.width <= canvas.width
            assert p.y + p.height <= canvas.height


def test_grid_keeps_configured_gap_when_it_fits() -> None:
    placements = GridLayout(padding=10).plan([L] * 4, Canvas(400, 300, L))

    assert (placements[0].x, placements[0].y) == (10, 10)
    assert placements[1].x - (placements[0].x + placements[0].width) == 10
