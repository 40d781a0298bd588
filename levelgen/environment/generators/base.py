"""Base classes, failure signals and the retry loop shared by map generators.

Generation is speculative: a stage produces a candidate, checks it, and
throws it away if it is unusable. Unusable candidates are reported by raising
a ``StageRejected`` subclass naming the stage to restart from. The caller of
that stage owns a ``retry_generation`` loop that catches the rejection and
runs the stage again, up to a finite number of attempts. When the attempts run
out the loop raises ``GenerationFailed`` chained to the last rejection.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

import numpy as np

if TYPE_CHECKING:
    from levelgen.environment.tile_types import LevelCell
    from levelgen.types import RNG, TileCoord, WorldTilePos
    from levelgen.util.grid import Grid

logger = logging.getLogger(__name__)

T = TypeVar("T")
LevelT = TypeVar("LevelT")


class GenerationError(Exception):
    """Base class for all level generation failures."""


class StageRejected(GenerationError):
    """A generation stage produced an unusable result and must be rerun.

    Subclasses name the stage that has to restart in ``stage``.
    """

    stage: str = "generation"


class ShapeRejected(StageRejected):
    """The synthesized hull is too sparse or does not fill its footprint."""

    stage = "hull"


class DisconnectedRoomGraph(StageRejected):
    """The hull's rooms cannot all be joined by doors."""

    stage = "station"


class NoValidStairs(StageRejected):
    """No floor cell is fully enclosed by floor, so stairs cannot be placed."""

    stage = "station"


class NoValidSpawn(StageRejected):
    """No enclosed floor cell exists outside the stairs room."""

    stage = "station"


class RiverNotStraightEnough(StageRejected):
    """The river path contains a staircase pattern."""

    stage = "terrain"


class TownSiteUnavailable(StageRejected):
    """No point near a settlement target lets the river cross the town cleanly."""

    stage = "terrain"


class DisconnectedAfterSettlement(StageRejected):
    """Settlements split the land into more (or fewer) regions than allowed."""

    stage = "terrain"


class GenerationFailed(GenerationError):
    """A bounded retry loop ran out of attempts."""

    def __init__(self, stage: str, attempts: int) -> None:
        super().__init__(f"{stage} generation failed after {attempts} attempts")
        self.stage = stage
        self.attempts = attempts


def retry_generation(
    stage: str,
    attempt: Callable[[], T],
    max_attempts: int,
    retry_on: tuple[type[Exception], ...] = (StageRejected,),
) -> T:
    """Call ``attempt`` until it returns without raising one of ``retry_on``.

    Args:
        stage: Name used in log messages and in the GenerationFailed error.
        attempt: Zero-argument callable that produces the stage's result. It
            must draw all of its randomness from an RNG it closes over, so
            each retry continues the same random sequence.
        max_attempts: Upper bound on calls to ``attempt``. Must be positive.
        retry_on: Exception types that mean "try again".

    Returns:
        The first successful result.

    Raises:
        GenerationFailed: If every attempt was rejected.
        ValueError: If max_attempts is not positive.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be positive, got {max_attempts}")

    last_error: Exception | None = None
    for attempt_number in range(1, max_attempts + 1):
        try:
            return attempt()
        except retry_on as e:
            last_error = e
            logger.debug(f"{stage}: attempt {attempt_number} rejected: {e!r}")

    raise GenerationFailed(stage, max_attempts) from last_error


@dataclass
class StationLevel:
    """A finished station level.

    Attributes:
        grid: Level cells, indexed [x, y].
        room_ids: Room index of every floor cell, -1 elsewhere. Computed
            before stairs and spawn were placed, so those cells keep the id
            of their room. Doors sit in walls and are -1.
        stairs: Position of the stairs.
        spawn: Position of the player spawn.
        doors: Door positions, in placement order.
        windows: Window positions, in placement order.
    """

    grid: Grid[LevelCell]
    room_ids: np.ndarray
    stairs: WorldTilePos
    spawn: WorldTilePos
    doors: list[WorldTilePos] = field(default_factory=list)
    windows: list[WorldTilePos] = field(default_factory=list)

    @property
    def num_rooms(self) -> int:
        return int(self.room_ids.max()) + 1


class BaseMapGenerator(abc.ABC, Generic[LevelT]):
    """Abstract base class for map generation algorithms.

    Generators are configured once and may be called any number of times.
    They keep no state between calls: everything random about a level comes
    from the RNG passed to ``generate``.
    """

    def __init__(self, map_width: TileCoord, map_height: TileCoord) -> None:
        self.map_width = map_width
        self.map_height = map_height

    @abc.abstractmethod
    def generate(self, rng: RNG) -> LevelT:
        """Generate a level, consuming randomness from ``rng``."""
        raise NotImplementedError
