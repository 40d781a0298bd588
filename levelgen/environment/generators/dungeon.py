"""Dungeon-style map generation with rooms and corridors."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from levelgen import config
from levelgen.environment.tile_types import RoomsAndCorridorsCell
from levelgen.types import RNG, TileCoord, TileSize, WorldTilePos
from levelgen.util.coordinates import CARDINAL_OFFSETS, Axis, Rect, distance2
from levelgen.util.grid import Grid

from .base import BaseMapGenerator

logger = logging.getLogger(__name__)


@dataclass
class RoomsAndCorridorsLevel:
    """A finished rooms-and-corridors level.

    Attributes:
        map: Floor, wall and door cells.
        player_spawn: Centre of a randomly chosen room.
        destination: Centre of the room farthest from the spawn.
        other_room_centres: Centres of every other room.
    """

    map: Grid[RoomsAndCorridorsCell]
    player_spawn: WorldTilePos
    destination: WorldTilePos
    other_room_centres: list[WorldTilePos] = field(default_factory=list)


def _is_floor(grid: Grid[RoomsAndCorridorsCell], pos: WorldTilePos) -> bool:
    return grid.get(pos) == RoomsAndCorridorsCell.FLOOR


def _is_wall(grid: Grid[RoomsAndCorridorsCell], pos: WorldTilePos) -> bool:
    return grid.get(pos) == RoomsAndCorridorsCell.WALL


def has_floor_neighbour(grid: Grid[RoomsAndCorridorsCell], pos: WorldTilePos) -> bool:
    x, y = pos
    return any(_is_floor(grid, (x + dx, y + dy)) for dx, dy in CARDINAL_OFFSETS)


def is_cell_in_corridor(grid: Grid[RoomsAndCorridorsCell], pos: WorldTilePos) -> bool:
    """True when pos is a one-cell-wide passage.

    That is, floor on both sides along one axis and wall on both sides along
    the other.
    """
    x, y = pos
    for axis in (Axis.X, Axis.Y):
        ax, ay = axis.new_pos(1, 0)
        ox, oy = axis.new_pos(0, 1)
        if (
            _is_floor(grid, (x + ax, y + ay))
            and _is_floor(grid, (x - ax, y - ay))
            and _is_wall(grid, (x + ox, y + oy))
            and _is_wall(grid, (x - ox, y - oy))
        ):
            return True
    return False


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def l_shaped_corridor(
    start: WorldTilePos,
    end: WorldTilePos,
    grid: Grid[RoomsAndCorridorsCell],
    first_axis: Axis,
) -> list[WorldTilePos]:
    """Cells of an L-shaped corridor from start towards end.

    The corridor runs along ``first_axis`` first. The start cell itself is
    left out so several corridors can leave the same room centre, and the
    corridor ends early at the first cell next to existing floor.
    """
    other_axis = first_axis.other()
    cells: list[WorldTilePos] = []

    step = first_axis.new_pos(_sign(first_axis.get(end) - first_axis.get(start)), 0)
    current = (start[0] + step[0], start[1] + step[1])
    while first_axis.get(current) != first_axis.get(end):
        cells.append(current)
        if has_floor_neighbour(grid, current):
            return cells
        current = (current[0] + step[0], current[1] + step[1])

    step = other_axis.new_pos(_sign(other_axis.get(end) - other_axis.get(start)), 0)
    while current != end:
        cells.append(current)
        if has_floor_neighbour(grid, current):
            return cells
        current = (current[0] + step[0], current[1] + step[1])

    return cells


class RoomsAndCorridorsGenerator(BaseMapGenerator[RoomsAndCorridorsLevel]):
    """Generates a map with rooms and connecting corridors.

    Each new room is connected to up to two randomly chosen earlier rooms.
    Where a corridor passes through a room's wall in a one-cell-wide gap it
    may get a door.
    """

    def __init__(
        self,
        map_width: TileCoord,
        map_height: TileCoord,
        num_room_attempts: int = config.DUNGEON_NUM_ROOM_ATTEMPTS,
        min_room_size: TileSize = config.DUNGEON_MIN_ROOM_SIZE,
        max_room_size: TileSize = config.DUNGEON_MAX_ROOM_SIZE,
        door_chance: float = config.DUNGEON_DOOR_CHANCE,
    ) -> None:
        super().__init__(map_width, map_height)
        self.num_room_attempts = num_room_attempts
        self.min_room_size = min_room_size
        self.max_room_size = max_room_size
        self.door_chance = door_chance

    def _overlaps_with_floor(
        self, tiles: Grid[RoomsAndCorridorsCell], room: Rect
    ) -> bool:
        region = tiles.cells[room.x1 : room.x2, room.y1 : room.y2]
        return bool((region == RoomsAndCorridorsCell.FLOOR).any())

    def _carve_room(self, tiles: Grid[RoomsAndCorridorsCell], room: Rect) -> None:
        tiles.cells[room.x1 + 1 : room.x2 - 1, room.y1 + 1 : room.y2 - 1] = (
            RoomsAndCorridorsCell.FLOOR
        )

    def _carve_corridor(
        self,
        tiles: Grid[RoomsAndCorridorsCell],
        corridor: list[WorldTilePos],
        edge_coords: set[WorldTilePos],
        door_candidates: list[WorldTilePos],
    ) -> None:
        for pos in corridor:
            tiles.set(pos, RoomsAndCorridorsCell.FLOOR)

        # One door candidate per consecutive run: its last cell.
        pending: WorldTilePos | None = None
        for pos in corridor:
            if pos in edge_coords and is_cell_in_corridor(tiles, pos):
                pending = pos
            elif pending is not None:
                door_candidates.append(pending)
                pending = None
        if pending is not None:
            door_candidates.append(pending)

    def generate(self, rng: RNG) -> RoomsAndCorridorsLevel:
        tiles = Grid.full(self.map_width, self.map_height, RoomsAndCorridorsCell.WALL)
        bounds = (self.map_width, self.map_height)

        rooms: list[Rect] = []
        edge_coords: set[WorldTilePos] = set()
        door_candidates: list[WorldTilePos] = []

        for _ in range(self.num_room_attempts):
            new_room = Rect.choose(bounds, self.min_room_size, self.max_room_size, rng)
            if self._overlaps_with_floor(tiles, new_room):
                continue

            edge_coords.update(new_room.edge_coords())
            for existing_room in rng.sample(rooms, min(2, len(rooms))):
                first_axis = Axis.X if rng.random() < 0.5 else Axis.Y
                corridor = l_shaped_corridor(
                    new_room.center(), existing_room.center(), tiles, first_axis
                )
                self._carve_corridor(tiles, corridor, edge_coords, door_candidates)

            self._carve_room(tiles, new_room)
            rooms.append(new_room)

        if not rooms:
            raise ValueError("Need to make at least one room.")
        if len(rooms) == 1:
            logger.warning(
                f"Only one room fit in {self.map_width}x{self.map_height}; "
                "spawn and destination coincide"
            )

        num_doors = 0
        for pos in door_candidates:
            if rng.random() < self.door_chance:
                tiles.set(pos, RoomsAndCorridorsCell.DOOR)
                num_doors += 1

        player_spawn = rng.choice(rooms).center()
        # Ties go to the room placed last.
        destination = max(
            reversed(rooms), key=lambda room: distance2(room.center(), player_spawn)
        ).center()
        other_room_centres = [
            room.center()
            for room in rooms
            if room.center() not in (player_spawn, destination)
        ]

        logger.info(
            f"Generated {self.map_width}x{self.map_height} dungeon: "
            f"{len(rooms)} rooms, {num_doors} doors"
        )
        return RoomsAndCorridorsLevel(
            map=tiles,
            player_spawn=player_spawn,
            destination=destination,
            other_room_centres=other_room_centres,
        )
