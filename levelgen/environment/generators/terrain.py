"""Outdoor terrain: a river across noisy land, with two settlements on it.

Generation runs in four steps, and any rejection restarts from the first:

1. ``generate_land``: a positive height field from simplex noise.
2. ``plot_river``: the cheapest left-to-right path across the land, where
   each step costs the square of the height it moves onto. The path must pass
   ``is_river_straight``.
3. ``widen_river`` turns the path into water, then ``place_settlement`` floods
   a square town around a river point at 1/4 and at 4/5 of the river's length.
4. The land must still fall into exactly two regions, one on each bank.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
import tcod.noise

from levelgen import config
from levelgen.environment.generators.base import (
    BaseMapGenerator,
    DisconnectedAfterSettlement,
    RiverNotStraightEnough,
    TownSiteUnavailable,
    retry_generation,
)
from levelgen.environment.tile_types import WorldCell
from levelgen.types import RNG, TileCoord, WorldTilePos
from levelgen.util.coordinates import ALL_OFFSETS, Rect
from levelgen.util.grid import Grid, label_regions

logger = logging.getLogger(__name__)

# Rivers flow east. They may drift north or south but never turn back west.
RIVER_MOVES: tuple[WorldTilePos, ...] = ((1, 0), (1, -1), (1, 1), (0, -1), (0, 1))


# =============================================================================
# LAND
# =============================================================================


@dataclass
class Land:
    """A height field over a rectangular area.

    Attributes:
        heights: float64 array of shape (width, height).
        height_diff: Height added per column, tilting the land from left to
            right.
    """

    heights: np.ndarray
    height_diff: float = 0.0

    @property
    def width(self) -> TileCoord:
        return self.heights.shape[0]

    @property
    def height(self) -> TileCoord:
        return self.heights.shape[1]

    def get_height(self, pos: WorldTilePos) -> float | None:
        """Height at pos, or None outside the land."""
        x, y = pos
        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        return float(self.heights[x, y]) + self.height_diff * x


def generate_land(
    width: TileCoord,
    height: TileCoord,
    rng: RNG,
    height_diff: float = config.LAND_HEIGHT_DIFF,
    frequency: float = config.LAND_NOISE_FREQUENCY,
    height_scale: float = config.LAND_HEIGHT_SCALE,
    height_offset: float = config.LAND_HEIGHT_OFFSET,
) -> Land:
    """Sample single-octave simplex noise into a positive height field.

    Noise values in [-1, 1] are mapped onto
    [height_offset, height_offset + height_scale].
    """
    noise = tcod.noise.Noise(
        dimensions=2,
        algorithm=tcod.noise.Algorithm.SIMPLEX,
        implementation=tcod.noise.Implementation.SIMPLE,
        seed=rng.getrandbits(31),
    )
    samples = noise[
        tcod.noise.grid(
            shape=(width, height), scale=frequency, origin=(0, 0), indexing="ij"
        )
    ]
    heights = height_offset + height_scale * (samples.astype(np.float64) + 1.0) / 2.0
    return Land(np.asfortranarray(heights), height_diff)


# =============================================================================
# RIVER
# =============================================================================


@dataclass
class RiverPlot:
    path: list[WorldTilePos]
    cost: float


def _search_river(
    land: Land,
    start_rows: Sequence[int],
    edge_margin: int,
    edge_penalty: float,
) -> RiverPlot:
    """Best-first search from the left column to the right column.

    Nodes are expanded in order of accumulated cost plus the number of
    columns still to cross. The first node popped in the rightmost column
    ends the search.
    """
    goal_x = land.width - 1
    tie_breaker = itertools.count()
    best_cost: dict[WorldTilePos, float] = {}
    parent: dict[WorldTilePos, WorldTilePos | None] = {}
    heap: list[tuple[float, float, int, WorldTilePos]] = []

    for row in start_rows:
        start = (0, row)
        best_cost[start] = 0.0
        parent[start] = None
        heapq.heappush(heap, (float(goal_x), 0.0, next(tie_breaker), start))

    while heap:
        _, cost, _, pos = heapq.heappop(heap)
        if cost > best_cost[pos]:
            continue

        if pos[0] == goal_x:
            path: list[WorldTilePos] = []
            cursor: WorldTilePos | None = pos
            while cursor is not None:
                path.append(cursor)
                cursor = parent[cursor]
            path.reverse()
            return RiverPlot(path, cost)

        for dx, dy in RIVER_MOVES:
            neighbor = (pos[0] + dx, pos[1] + dy)
            neighbor_height = land.get_height(neighbor)
            if neighbor_height is None:
                continue
            step_cost = neighbor_height * neighbor_height
            if neighbor[1] < edge_margin or neighbor[1] >= land.height - edge_margin:
                step_cost += edge_penalty
            new_cost = cost + step_cost
            if new_cost < best_cost.get(neighbor, math.inf):
                best_cost[neighbor] = new_cost
                parent[neighbor] = pos
                priority = new_cost + (goal_x - neighbor[0])
                heapq.heappush(heap, (priority, new_cost, next(tie_breaker), neighbor))

    raise ValueError(f"No river path from rows {list(start_rows)}")


def plot_river_from_row(
    land: Land,
    row: int,
    edge_margin: int = config.RIVER_EDGE_MARGIN,
    edge_penalty: float = config.RIVER_EDGE_PENALTY,
) -> RiverPlot:
    """Cheapest river starting at (0, row).

    Raises:
        ValueError: If row is outside the land.
    """
    if not 0 <= row < land.height:
        raise ValueError(f"Row {row} outside land of height {land.height}")
    return _search_river(land, [row], edge_margin, edge_penalty)


def plot_river(
    land: Land,
    edge_margin: int = config.RIVER_EDGE_MARGIN,
    edge_penalty: float = config.RIVER_EDGE_PENALTY,
) -> RiverPlot:
    """Cheapest river starting anywhere on the left edge.

    Searches from every row at once, which finds the cheapest of the
    per-row plots without running one search per row.
    """
    return _search_river(land, range(land.height), edge_margin, edge_penalty)


def is_river_straight(
    path: Sequence[WorldTilePos], window: int = config.RIVER_STRAIGHTNESS_WINDOW
) -> bool:
    """False if the path contains a staircase.

    A staircase is a window of ``window`` points whose first half moves in
    one constant step and whose second half moves in a different constant
    step, e.g. a straight run east followed by a straight run north-east.
    """
    half = window // 2

    def steps(points: Sequence[WorldTilePos]) -> set[WorldTilePos]:
        return {(b[0] - a[0], b[1] - a[1]) for a, b in itertools.pairwise(points)}

    for start in range(len(path) - window + 1):
        first = steps(path[start : start + half])
        second = steps(path[start + half : start + window])
        if len(first) == 1 and len(second) == 1 and first != second:
            return False
    return True


def widen_river(
    river: Sequence[WorldTilePos],
    width: TileCoord,
    height: TileCoord,
    rounds: int = config.RIVER_WIDEN_ROUNDS,
) -> Grid[WorldCell]:
    """Rasterize the river and grow it by ``rounds`` of 8-directional dilation."""
    water = np.zeros((width, height), dtype=bool, order="F")
    for pos in river:
        water[pos] = True

    for _ in range(rounds):
        padded = np.pad(water, 1, constant_values=False)
        grown = water.copy()
        for dx, dy in ALL_OFFSETS:
            grown |= padded[1 + dx : 1 + dx + width, 1 + dy : 1 + dy + height]
        water = grown

    cells = np.where(water, WorldCell.WATER, WorldCell.LAND).astype(np.uint8)
    return Grid(np.asfortranarray(cells), WorldCell)


# =============================================================================
# SETTLEMENTS
# =============================================================================


def town_rect(centre: WorldTilePos, town_size: int = config.TOWN_SIZE) -> Rect:
    x, y = centre
    half = town_size // 2
    return Rect(x - half, y - half, town_size, town_size)


def count_water_crossings(world: Grid[WorldCell], rect: Rect) -> int:
    """Number of separate water runs met walking once around the rect's edge."""
    boundary = rect.boundary_walk()
    water = [world.get_checked(pos) == WorldCell.WATER for pos in boundary]
    # water[i - 1] wraps to the last cell for i == 0, closing the loop.
    return sum(1 for i in range(len(water)) if water[i] and not water[i - 1])


def _rect_in_bounds(rect: Rect, world: Grid[WorldCell]) -> bool:
    return (
        rect.x1 >= 0
        and rect.y1 >= 0
        and rect.x2 <= world.width
        and rect.y2 <= world.height
    )


def place_settlement(
    world: Grid[WorldCell],
    river: Sequence[WorldTilePos],
    target_index: int,
    rng: RNG,
    town_size: int = config.TOWN_SIZE,
    search_window: int = config.SETTLEMENT_SEARCH_WINDOW,
) -> Rect:
    """Flood a town-sized square centred on a river point near ``target_index``.

    Only points whose square fits on the map and whose edge the river enters
    and leaves exactly once are considered.

    Raises:
        TownSiteUnavailable: If no point in the search window qualifies.
    """
    first = max(0, target_index - search_window)
    last = min(len(river) - 1, target_index + search_window)

    candidates: list[Rect] = []
    for pos in river[first : last + 1]:
        rect = town_rect(pos, town_size)
        if _rect_in_bounds(rect, world) and count_water_crossings(world, rect) == 2:
            candidates.append(rect)

    if not candidates:
        raise TownSiteUnavailable(
            f"No town site within {search_window} of river index {target_index}"
        )

    rect = rng.choice(candidates)
    world.cells[rect.x1 : rect.x2, rect.y1 : rect.y2] = WorldCell.WATER
    return rect


def count_land_regions(world: Grid[WorldCell]) -> int:
    """Number of 4-connected LAND regions."""
    _, count = label_regions(world.cells == WorldCell.LAND)
    return count


# =============================================================================
# GENERATOR
# =============================================================================


@dataclass
class OutdoorTerrain:
    """A finished outdoor map.

    Attributes:
        land: The height field the river was plotted over.
        river: River path from x = 0 to the right edge.
        world: Land and water, including the widened river and the towns.
        settlements: The flooded town squares, in placement order.
    """

    land: Land
    river: list[WorldTilePos]
    world: Grid[WorldCell]
    settlements: list[Rect] = field(default_factory=list)


def build_terrain(
    land: Land,
    rng: RNG,
    settlement_targets: Sequence[tuple[int, int]] = config.SETTLEMENT_TARGETS,
    town_size: int = config.TOWN_SIZE,
    search_window: int = config.SETTLEMENT_SEARCH_WINDOW,
    land_regions: int = config.OUTDOOR_LAND_REGIONS,
) -> OutdoorTerrain:
    """Plot the river and settlements over an existing land.

    Raises:
        RiverNotStraightEnough: If the cheapest river contains a staircase.
        TownSiteUnavailable: If a settlement has nowhere to go.
        DisconnectedAfterSettlement: If the land does not end up in exactly
            ``land_regions`` regions.
    """
    river = plot_river(land).path
    if not is_river_straight(river):
        raise RiverNotStraightEnough(f"River of {len(river)} cells has a staircase")

    world = widen_river(river, land.width, land.height)
    settlements: list[Rect] = []
    for numerator, denominator in settlement_targets:
        target_index = (len(river) * numerator) // denominator
        settlements.append(
            place_settlement(world, river, target_index, rng, town_size, search_window)
        )

    num_regions = count_land_regions(world)
    if num_regions != land_regions:
        raise DisconnectedAfterSettlement(
            f"Land split into {num_regions} regions, expected {land_regions}"
        )

    return OutdoorTerrain(land=land, river=river, world=world, settlements=settlements)


class OutdoorTerrainGenerator(BaseMapGenerator[OutdoorTerrain]):
    """Generates land, river and settlements, restarting on any rejection."""

    def __init__(
        self,
        map_width: TileCoord = config.OUTDOOR_WIDTH,
        map_height: TileCoord = config.OUTDOOR_HEIGHT,
        height_diff: float = config.LAND_HEIGHT_DIFF,
        max_attempts: int = config.TERRAIN_MAX_ATTEMPTS,
    ) -> None:
        super().__init__(map_width, map_height)
        self.height_diff = height_diff
        self.max_attempts = max_attempts

    def _attempt(self, rng: RNG) -> OutdoorTerrain:
        land = generate_land(
            self.map_width, self.map_height, rng, height_diff=self.height_diff
        )
        return build_terrain(land, rng)

    def generate(self, rng: RNG) -> OutdoorTerrain:
        """Generate outdoor terrain.

        Raises:
            GenerationFailed: If every attempt was rejected.
        """
        terrain = retry_generation(
            "terrain", lambda: self._attempt(rng), self.max_attempts
        )
        logger.info(
            f"Generated {self.map_width}x{self.map_height} terrain: river of "
            f"{len(terrain.river)} cells, {len(terrain.settlements)} settlements"
        )
        return terrain
