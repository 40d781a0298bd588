"""Stairs and player spawn placement."""

from __future__ import annotations

import logging

import numpy as np

from levelgen import config
from levelgen.environment.generators.base import NoValidSpawn, NoValidStairs
from levelgen.environment.generators.pipeline.context import GenerationContext
from levelgen.environment.generators.pipeline.layer import GenerationLayer
from levelgen.environment.tile_types import LevelCell
from levelgen.types import RNG, WorldTilePos
from levelgen.util.coordinates import distance2
from levelgen.util.grid import Grid

from .rooms import classify_floor_cells_into_rooms

logger = logging.getLogger(__name__)


def enclosed_floor_cells(tiles: Grid[LevelCell]) -> list[WorldTilePos]:
    """FLOOR cells whose four cardinal neighbours are FLOOR, row-major."""
    floor = tiles.cells == LevelCell.FLOOR
    padded = np.pad(floor, 1, constant_values=False)
    enclosed = (
        floor
        & padded[:-2, 1:-1]
        & padded[2:, 1:-1]
        & padded[1:-1, :-2]
        & padded[1:-1, 2:]
    )
    ys, xs = np.nonzero(enclosed.T)
    return [(int(x), int(y)) for x, y in zip(xs, ys, strict=True)]


def choose_stairs_pos(tiles: Grid[LevelCell], rng: RNG) -> WorldTilePos | None:
    candidates = enclosed_floor_cells(tiles)
    if not candidates:
        return None
    rng.shuffle(candidates)
    return candidates.pop()


def choose_spawn_pos(
    tiles: Grid[LevelCell],
    room_ids: np.ndarray,
    stairs_pos: WorldTilePos,
    rng: RNG,
    farthest_fraction: tuple[int, int] = config.SPAWN_FARTHEST_FRACTION,
) -> WorldTilePos | None:
    """Pick a spawn point in another room, biased away from the stairs.

    Candidates are sorted by distance from the stairs, farthest first, and
    the spawn is drawn uniformly from the leading ``farthest_fraction`` of
    them (at least one).
    """
    stairs_room = room_ids[stairs_pos]
    candidates = [
        pos for pos in enclosed_floor_cells(tiles) if room_ids[pos] != stairs_room
    ]
    if not candidates:
        return None

    candidates.sort(key=lambda pos: distance2(pos, stairs_pos))
    candidates.reverse()
    numerator, denominator = farthest_fraction
    num_far = max((len(candidates) * numerator) // denominator, 1)
    return rng.choice(candidates[:num_far])


class StairsAndSpawnLayer(GenerationLayer):
    """Places the stairs, then the player spawn in a different room.

    Raises NoValidStairs or NoValidSpawn when the level has no room for them.
    """

    def __init__(
        self, farthest_fraction: tuple[int, int] = config.SPAWN_FARTHEST_FRACTION
    ) -> None:
        self.farthest_fraction = farthest_fraction

    def apply(self, ctx: GenerationContext) -> None:
        if ctx.room_ids is None:
            ctx.room_ids = classify_floor_cells_into_rooms(ctx.tiles)

        stairs = choose_stairs_pos(ctx.tiles, ctx.rng)
        if stairs is None:
            raise NoValidStairs("No enclosed floor cell for the stairs")

        spawn = choose_spawn_pos(
            ctx.tiles, ctx.room_ids, stairs, ctx.rng, self.farthest_fraction
        )
        if spawn is None:
            raise NoValidSpawn(f"No enclosed floor cell outside the room of {stairs}")

        ctx.tiles.set(stairs, LevelCell.STAIRS)
        ctx.tiles.set(spawn, LevelCell.SPAWN)
        ctx.stairs = stairs
        ctx.spawn = spawn
        logger.debug(f"Stairs at {stairs}, spawn at {spawn}")
