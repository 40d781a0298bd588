"""Window placement.

A window goes into a wall cell that has open cells on both sides along one
axis. Between two rooms that is an internal window; when one side is space
it looks out of the hull and is external. As with doors, cells that line up
are grouped into straight runs and each chosen run gets a window at a random
offset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from levelgen import config
from levelgen.environment.generators.pipeline.context import GenerationContext
from levelgen.environment.generators.pipeline.layer import GenerationLayer
from levelgen.environment.tile_types import LevelCell, window_for_axis
from levelgen.types import RNG, WorldTilePos
from levelgen.util.coordinates import Axis
from levelgen.util.grid import Grid

logger = logging.getLogger(__name__)

_SEE_THROUGH = (LevelCell.FLOOR, LevelCell.SPACE)


@dataclass
class WindowCandidate:
    """A straight run of wall cells that could hold a window.

    Attributes:
        axis: Axis the window looks along. The run extends along the other.
        top_left: First wall cell of the run.
        length: Number of wall cells in the run.
        external: True when the window looks out into space.
    """

    axis: Axis
    top_left: WorldTilePos
    length: int
    external: bool

    def pos_at(self, offset: int) -> WorldTilePos:
        run_axis = self.axis.other()
        return run_axis.new_pos(
            run_axis.get(self.top_left) + offset, self.axis.get(self.top_left)
        )

    def next_pos(self) -> WorldTilePos:
        return self.pos_at(self.length)


def _cell_or_space(tiles: Grid[LevelCell], pos: WorldTilePos) -> LevelCell:
    cell = tiles.get(pos)
    return LevelCell.SPACE if cell is None else cell


def identify_window_candidates_in_axis(
    tiles: Grid[LevelCell], axis: Axis
) -> list[WindowCandidate]:
    other = axis.other()
    candidates: list[WindowCandidate] = []
    size = tiles.size

    for along in range(axis.get(size)):
        for across in range(other.get(size)):
            pos = axis.new_pos(along, across)
            if tiles.get_checked(pos) != LevelCell.WALL:
                continue
            left = _cell_or_space(tiles, axis.new_pos(along - 1, across))
            right = _cell_or_space(tiles, axis.new_pos(along + 1, across))
            if left not in _SEE_THROUGH or right not in _SEE_THROUGH:
                continue
            external = LevelCell.SPACE in (left, right)

            if candidates:
                last = candidates[-1]
                if last.external == external and last.next_pos() == pos:
                    last.length += 1
                    continue

            candidates.append(
                WindowCandidate(axis=axis, top_left=pos, length=1, external=external)
            )

    return candidates


def identify_window_candidates(tiles: Grid[LevelCell]) -> list[WindowCandidate]:
    return identify_window_candidates_in_axis(
        tiles, Axis.X
    ) + identify_window_candidates_in_axis(tiles, Axis.Y)


def add_windows(
    tiles: Grid[LevelCell],
    rng: RNG,
    internal_fraction: tuple[int, int] = config.INTERNAL_WINDOW_FRACTION,
    external_fraction: tuple[int, int] = config.EXTERNAL_WINDOW_FRACTION,
    second_window_chance: float = config.EXTERNAL_SECOND_WINDOW_CHANCE,
) -> list[WorldTilePos]:
    """Place windows in ``tiles`` and return their positions.

    All candidates are found before any window is placed.
    """
    candidates = identify_window_candidates(tiles)
    internal = [c for c in candidates if not c.external]
    external = [c for c in candidates if c.external]
    rng.shuffle(internal)
    rng.shuffle(external)

    windows: list[WorldTilePos] = []

    def place(candidate: WindowCandidate, offset: int) -> None:
        pos = candidate.pos_at(offset)
        if tiles.get_checked(pos) == LevelCell.WALL:
            tiles.set(pos, window_for_axis(candidate.axis))
            windows.append(pos)

    numerator, denominator = internal_fraction
    for candidate in internal[: (len(internal) * numerator) // denominator]:
        place(candidate, rng.randrange(candidate.length))

    numerator, denominator = external_fraction
    for candidate in external[: (len(external) * numerator) // denominator]:
        first = rng.randrange(candidate.length)
        place(candidate, first)
        if rng.random() < second_window_chance and candidate.length > 1:
            # Any offset except the first window's.
            second = rng.randrange(candidate.length - 1)
            place(candidate, second + (second >= first))

    return windows


class WindowLayer(GenerationLayer):
    """Adds internal and external windows to the finished level."""

    def __init__(
        self,
        internal_fraction: tuple[int, int] = config.INTERNAL_WINDOW_FRACTION,
        external_fraction: tuple[int, int] = config.EXTERNAL_WINDOW_FRACTION,
        second_window_chance: float = config.EXTERNAL_SECOND_WINDOW_CHANCE,
    ) -> None:
        self.internal_fraction = internal_fraction
        self.external_fraction = external_fraction
        self.second_window_chance = second_window_chance

    def apply(self, ctx: GenerationContext) -> None:
        windows = add_windows(
            ctx.tiles,
            ctx.rng,
            self.internal_fraction,
            self.external_fraction,
            self.second_window_chance,
        )
        ctx.windows.extend(windows)
        logger.debug(f"Placed {len(windows)} windows")
