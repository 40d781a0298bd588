"""Generation context for the station pipeline.

The GenerationContext is a mutable container that holds all state during
station generation. Each layer in the pipeline receives the same context and
modifies it in place. This avoids copying numpy arrays between layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from levelgen.environment.generators.base import StationLevel
from levelgen.environment.tile_types import HullCell, LevelCell
from levelgen.types import RNG, WorldTilePos
from levelgen.util.grid import Grid

if TYPE_CHECKING:
    from .layers.rooms import Connectivity, DoorCandidate


@dataclass
class GenerationContext:
    """Mutable state container passed through the station pipeline.

    Attributes:
        width: Level width in tiles.
        height: Level height in tiles.
        rng: Random number generator. Every layer draws from this one stream.
        tiles: The level being built. Starts as empty space.
        hull: The hull the level was built from, once HullLayer has run.
        room_ids: Room index of each floor cell, -1 elsewhere. Shape
            (width, height). Filled in by DoorLayer.
        door_candidates: Every wall run that could hold a door.
        connectivity: Which door candidates were chosen and why.
        doors: Door positions placed so far.
        windows: Window positions placed so far.
        stairs: Stairs position, once placed.
        spawn: Player spawn position, once placed.
    """

    width: int
    height: int
    rng: RNG
    tiles: Grid[LevelCell]
    hull: Grid[HullCell] | None = None
    room_ids: np.ndarray | None = None
    door_candidates: list[DoorCandidate] = field(default_factory=list)
    connectivity: Connectivity | None = None
    doors: list[WorldTilePos] = field(default_factory=list)
    windows: list[WorldTilePos] = field(default_factory=list)
    stairs: WorldTilePos | None = None
    spawn: WorldTilePos | None = None

    @classmethod
    def create_empty(cls, width: int, height: int, rng: RNG) -> GenerationContext:
        """Create a context whose level is all empty space."""
        return cls(
            width=width,
            height=height,
            rng=rng,
            tiles=Grid.full(width, height, LevelCell.SPACE),
        )

    def set_hull(self, hull: Grid[HullCell]) -> None:
        """Replace the level with a copy of ``hull``.

        LevelCell shares HullCell's numbering, so the cells copy over as-is.
        """
        self.hull = hull
        self.tiles = Grid(hull.cells.copy(order="F"), LevelCell)

    def to_station_level(self) -> StationLevel:
        """Package the finished context as a StationLevel.

        Raises:
            ValueError: If the pipeline did not place stairs and a spawn.
        """
        if self.stairs is None or self.spawn is None or self.room_ids is None:
            raise ValueError(
                "Pipeline finished without rooms, stairs and spawn; "
                "is it missing DoorLayer or StairsAndSpawnLayer?"
            )
        return StationLevel(
            grid=self.tiles,
            room_ids=self.room_ids,
            stairs=self.stairs,
            spawn=self.spawn,
            doors=list(self.doors),
            windows=list(self.windows),
        )
