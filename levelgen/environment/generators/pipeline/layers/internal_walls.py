"""Split the hull into rooms with straight internal walls.

A freshly extracted hull is one big room. ``add_internal_walls`` repeatedly
picks a random room, draws a wall line across it perpendicular to its longer
side, and keeps the line only when the pieces are big enough and every room
can still be reached through some door candidate.
"""

from __future__ import annotations

import logging

import numpy as np

from levelgen import config
from levelgen.environment.generators.pipeline.context import GenerationContext
from levelgen.environment.generators.pipeline.layer import GenerationLayer
from levelgen.environment.tile_types import LevelCell
from levelgen.types import RNG
from levelgen.util.grid import Grid

from .rooms import (
    NO_ROOM,
    RoomGraph,
    classify_floor_cells_into_rooms,
    count_rooms,
    identify_door_candidates,
)

logger = logging.getLogger(__name__)


def _room_split_line(
    room_ids: np.ndarray, room_id: int, min_room_span: int, rng: RNG
) -> tuple[np.ndarray, np.ndarray] | None:
    """Pick the cells of a wall line across one room, or None if it's too small.

    The line runs across the room's shorter side (ties broken randomly) at an
    offset that leaves at least ``min_room_span`` columns or rows of the
    bounding box on each side.
    """
    xs, ys = np.nonzero(room_ids == room_id)
    x_min, x_max = int(xs.min()), int(xs.max())
    y_min, y_max = int(ys.min()), int(ys.max())
    span_x = x_max - x_min + 1
    span_y = y_max - y_min + 1
    min_span = 2 * min_room_span + 1

    can_split_x = span_x >= min_span
    can_split_y = span_y >= min_span
    if not (can_split_x or can_split_y):
        return None

    if can_split_x and can_split_y:
        split_x = span_x > span_y or (span_x == span_y and rng.random() < 0.5)
    else:
        split_x = can_split_x

    if split_x:
        line = rng.randrange(x_min + min_room_span, x_max - min_room_span + 1)
        mask = xs == line
    else:
        line = rng.randrange(y_min + min_room_span, y_max - min_room_span + 1)
        mask = ys == line
    return xs[mask], ys[mask]


def _splittable_rooms(room_ids: np.ndarray, min_room_span: int) -> list[int]:
    min_span = 2 * min_room_span + 1
    rooms: list[int] = []
    for room_id in range(count_rooms(room_ids)):
        xs, ys = np.nonzero(room_ids == room_id)
        if xs.max() - xs.min() + 1 >= min_span or ys.max() - ys.min() + 1 >= min_span:
            rooms.append(room_id)
    return rooms


def _split_is_acceptable(
    tiles: Grid[LevelCell], rooms_before: int, min_room_area: int
) -> bool:
    room_ids = classify_floor_cells_into_rooms(tiles)
    num_rooms = count_rooms(room_ids)
    if num_rooms <= rooms_before:
        return False
    areas = np.bincount(room_ids[room_ids != NO_ROOM].astype(np.intp))
    if int(areas.min()) < min_room_area:
        return False
    graph = RoomGraph(identify_door_candidates(tiles, room_ids), num_rooms=num_rooms)
    return graph.is_connected()


def add_internal_walls(
    tiles: Grid[LevelCell],
    rng: RNG,
    min_room_span: int = config.INTERNAL_WALL_MIN_ROOM_SPAN,
    min_room_area: int = config.INTERNAL_WALL_MIN_ROOM_AREA,
    max_failures: int = config.INTERNAL_WALL_MAX_FAILURES,
) -> int:
    """Add internal walls to ``tiles`` in place.

    Args:
        tiles: Level to divide. Only FLOOR cells are ever changed.
        rng: Source of randomness.
        min_room_span: Minimum floor extent on each side of a new wall.
        min_room_area: Every room must keep at least this many cells.
        max_failures: Consecutive rejected splits before stopping.

    Returns:
        The number of walls added.
    """
    walls_added = 0
    failures = 0

    while failures < max_failures:
        room_ids = classify_floor_cells_into_rooms(tiles)
        candidates = _splittable_rooms(room_ids, min_room_span)
        if not candidates:
            break

        room_id = rng.choice(candidates)
        line = _room_split_line(room_ids, room_id, min_room_span, rng)
        if line is None:
            failures += 1
            continue

        tiles.cells[line] = LevelCell.WALL
        if _split_is_acceptable(tiles, count_rooms(room_ids), min_room_area):
            walls_added += 1
            failures = 0
        else:
            tiles.cells[line] = LevelCell.FLOOR
            failures += 1

    logger.debug(f"Added {walls_added} internal walls")
    return walls_added


class InternalWallLayer(GenerationLayer):
    """Divides the hull into rooms.

    ``small=True`` uses the limits tuned for the small station.
    """

    def __init__(
        self,
        small: bool = False,
        min_room_span: int | None = None,
        min_room_area: int | None = None,
        max_failures: int | None = None,
    ) -> None:
        if small:
            defaults = (
                config.SMALL_INTERNAL_WALL_MIN_ROOM_SPAN,
                config.SMALL_INTERNAL_WALL_MIN_ROOM_AREA,
                config.SMALL_INTERNAL_WALL_MAX_FAILURES,
            )
        else:
            defaults = (
                config.INTERNAL_WALL_MIN_ROOM_SPAN,
                config.INTERNAL_WALL_MIN_ROOM_AREA,
                config.INTERNAL_WALL_MAX_FAILURES,
            )
        self.min_room_span = defaults[0] if min_room_span is None else min_room_span
        self.min_room_area = defaults[1] if min_room_area is None else min_room_area
        self.max_failures = defaults[2] if max_failures is None else max_failures

    def apply(self, ctx: GenerationContext) -> None:
        add_internal_walls(
            ctx.tiles,
            ctx.rng,
            min_room_span=self.min_room_span,
            min_room_area=self.min_room_area,
            max_failures=self.max_failures,
        )
