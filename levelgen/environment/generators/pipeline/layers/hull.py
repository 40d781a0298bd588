"""Hull synthesis and extraction.

A station hull starts as a texture synthesized from ``config.HULL_EXEMPLAR``
with the overlapping WFC model. The texture is full of disconnected pockets,
so the extraction steps keep only its largest open area, wrap it in walls and
turn everything outside those walls into space:

    wfc_map -> keep_largest_enclosed_area -> wrap_in_closed_area
            -> strip_walls_from_outside -> surround_by_space

``generate_hull`` runs those steps until the result is dense enough and
fills enough of the requested footprint.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Sequence

import numpy as np

from levelgen import config
from levelgen.environment.generators.base import ShapeRejected, retry_generation
from levelgen.environment.generators.overlapping import OverlappingPatterns
from levelgen.environment.generators.pipeline.context import GenerationContext
from levelgen.environment.generators.pipeline.layer import GenerationLayer
from levelgen.environment.generators.wfc_solver import WFCSolver
from levelgen.environment.tile_types import GENERATION_LEGEND, GenerationCell, HullCell
from levelgen.types import RNG, TileSize
from levelgen.util.grid import Grid, label_regions

logger = logging.getLogger(__name__)


def parse_exemplar(rows: Sequence[str] = config.HULL_EXEMPLAR) -> Grid[GenerationCell]:
    return Grid.from_strings(rows, GENERATION_LEGEND, GenerationCell)


@functools.cache
def _exemplar_patterns(
    rows: tuple[str, ...], pattern_size: int
) -> OverlappingPatterns:
    # Pattern extraction is deterministic, so one copy per exemplar is shared.
    return OverlappingPatterns(parse_exemplar(rows), pattern_size)


def wfc_map(
    exemplar: Sequence[str],
    output_size: TileSize,
    pattern_size: int,
    rng: RNG,
    max_attempts: int = config.WFC_MAX_ATTEMPTS,
) -> Grid[GenerationCell]:
    """Synthesize a periodic texture that locally resembles ``exemplar``.

    Args:
        exemplar: Text rows using the GENERATION_LEGEND glyphs.
        output_size: (width, height) of the result.
        pattern_size: Side length of the overlapping patterns.
        rng: Source of randomness for the solver.
        max_attempts: Solver restarts allowed after a contradiction.

    Raises:
        GenerationFailed: If every solver attempt ran into a contradiction.
    """
    patterns = _exemplar_patterns(tuple(exemplar), pattern_size)
    width, height = output_size
    solver = WFCSolver(width, height, patterns.weights, patterns.compatible, rng)
    result = solver.solve_retrying(max_attempts)
    cells = patterns.top_left_values(result).astype(np.uint8)
    return Grid(np.asfortranarray(cells), GenerationCell)


def keep_largest_enclosed_area(grid: Grid[GenerationCell]) -> Grid[GenerationCell]:
    """Close every open cell outside the largest 4-connected open area.

    Areas are numbered in row-major order of their first cell; when several
    share the largest size, the last of them is kept.

    Raises:
        ShapeRejected: If the grid has no open cell at all.
    """
    labels, count = label_regions(grid.cells == GenerationCell.OPEN)
    if count == 0:
        raise ShapeRejected("Synthesized grid has no open area")

    sizes = np.bincount(labels[labels >= 0], minlength=count)
    largest = count - 1 - int(sizes[::-1].argmax())
    cells = np.where(labels == largest, GenerationCell.OPEN, GenerationCell.CLOSED)
    return Grid(np.asfortranarray(cells.astype(np.uint8)), GenerationCell)


def wrap_in_closed_area(grid: Grid[GenerationCell]) -> Grid[GenerationCell]:
    """Pad the grid with one CLOSED cell on every side."""
    cells = np.pad(grid.cells, 1, constant_values=GenerationCell.CLOSED)
    return Grid(np.asfortranarray(cells), GenerationCell)


def strip_walls_from_outside(grid: Grid[GenerationCell]) -> Grid[HullCell]:
    """Convert to hull cells: open is floor, closed next to open is wall.

    Closed cells with no open 4-neighbour are outside the hull and become
    space.
    """
    open_cells = grid.cells == GenerationCell.OPEN
    padded = np.pad(open_cells, 1, constant_values=False)
    touches_open = (
        padded[:-2, 1:-1] | padded[2:, 1:-1] | padded[1:-1, :-2] | padded[1:-1, 2:]
    )

    cells = np.full(grid.size, HullCell.SPACE, dtype=np.uint8, order="F")
    cells[~open_cells & touches_open] = HullCell.WALL
    cells[open_cells] = HullCell.FLOOR
    return Grid(cells, HullCell)


def surround_by_space(grid: Grid[HullCell], size: TileSize) -> Grid[HullCell]:
    """Re-frame the hull to exactly ``size``, filling the rest with space.

    The hull keeps its top-left corner at (0, 0); anything beyond ``size`` is
    cut off.
    """
    width, height = size
    result = Grid.full(width, height, HullCell.SPACE)
    copy_w = min(width, grid.width)
    copy_h = min(height, grid.height)
    result.cells[:copy_w, :copy_h] = grid.cells[:copy_w, :copy_h]
    return result


def hull_bounding_box(hull: Grid[HullCell]) -> TileSize:
    """Span (max - min) of the non-space cells along each axis."""
    xs, ys = np.nonzero(hull.cells != HullCell.SPACE)
    if len(xs) == 0:
        return (0, 0)
    return (int(xs.max() - xs.min()), int(ys.max() - ys.min()))


def check_hull_shape(
    hull: Grid[HullCell],
    min_floor_fraction: tuple[int, int] = config.HULL_MIN_FLOOR_FRACTION,
    max_margin: int = config.HULL_MAX_MARGIN,
) -> None:
    """Reject hulls that are too sparse or leave too much of the frame empty.

    Raises:
        ShapeRejected: If either check fails.
    """
    width, height = hull.size
    numerator, denominator = min_floor_fraction
    floor_count = hull.count(HullCell.FLOOR)
    min_floor = (width * height * numerator) // denominator
    if floor_count < min_floor:
        raise ShapeRejected(f"Hull has {floor_count} floor cells, need {min_floor}")

    bbox_w, bbox_h = hull_bounding_box(hull)
    margin = (width - bbox_w) + (height - bbox_h)
    if margin > max_margin:
        raise ShapeRejected(f"Hull leaves a margin of {margin}, max {max_margin}")


def extract_hull(grid: Grid[GenerationCell], size: TileSize) -> Grid[HullCell]:
    """Run the extraction steps on a synthesized grid."""
    grid = keep_largest_enclosed_area(grid)
    grid = wrap_in_closed_area(grid)
    return surround_by_space(strip_walls_from_outside(grid), size)


def generate_hull(
    size: TileSize,
    rng: RNG,
    max_attempts: int = config.HULL_MAX_ATTEMPTS,
    exemplar: Sequence[str] = config.HULL_EXEMPLAR,
    pattern_size: int = config.HULL_PATTERN_SIZE,
    wfc_max_attempts: int = config.WFC_MAX_ATTEMPTS,
) -> Grid[HullCell]:
    """Synthesize and extract hulls until one passes ``check_hull_shape``.

    The texture is synthesized two cells smaller than ``size`` in each axis;
    wrapping it in walls brings it back to full size.

    Raises:
        GenerationFailed: If no acceptable hull was produced in
            ``max_attempts`` rounds, or the solver itself gave up.
    """
    width, height = size
    if width < 3 or height < 3:
        raise ValueError(f"Hull size must be at least 3x3, got {size}")

    def attempt() -> Grid[HullCell]:
        synthesized = wfc_map(
            exemplar, (width - 2, height - 2), pattern_size, rng, wfc_max_attempts
        )
        hull = extract_hull(synthesized, size)
        check_hull_shape(hull)
        return hull

    hull = retry_generation("hull", attempt, max_attempts, retry_on=(ShapeRejected,))
    logger.debug(f"Hull {width}x{height}: {hull.count(HullCell.FLOOR)} floor cells")
    return hull


class HullLayer(GenerationLayer):
    """Replaces the level with a freshly synthesized hull."""

    def __init__(
        self,
        max_attempts: int = config.HULL_MAX_ATTEMPTS,
        wfc_max_attempts: int = config.WFC_MAX_ATTEMPTS,
    ) -> None:
        self.max_attempts = max_attempts
        self.wfc_max_attempts = wfc_max_attempts

    def apply(self, ctx: GenerationContext) -> None:
        hull = generate_hull(
            (ctx.width, ctx.height),
            ctx.rng,
            max_attempts=self.max_attempts,
            wfc_max_attempts=self.wfc_max_attempts,
        )
        ctx.set_hull(hull)
