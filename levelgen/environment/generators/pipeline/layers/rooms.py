"""Rooms, door candidates and the doors that connect them.

Rooms are the 4-connected components of floor cells. A wall cell with floor
of two different rooms on either side along one axis could hold a door
between them; a straight run of such cells separating the same ordered pair
of rooms is one ``DoorCandidate``.

Door placement builds a ``RoomGraph`` with one edge per candidate, picks a
random spanning tree so every room is reachable, adds some of the remaining
candidates back for loops, and cuts one door into each chosen candidate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto

import numpy as np

from levelgen import config
from levelgen.environment.generators.base import DisconnectedRoomGraph
from levelgen.environment.generators.pipeline.context import GenerationContext
from levelgen.environment.generators.pipeline.layer import GenerationLayer
from levelgen.environment.tile_types import LevelCell, door_for_axis
from levelgen.types import RNG, WorldTilePos
from levelgen.util.coordinates import Axis
from levelgen.util.grid import Grid, label_regions

logger = logging.getLogger(__name__)

NO_ROOM = -1


def classify_floor_cells_into_rooms(grid: Grid) -> np.ndarray:
    """Label every 4-connected floor region with a room id.

    Works on any grid whose FLOOR value matches ``LevelCell.FLOOR`` (hull
    grids included). Regions are numbered from 0 in the row-major order of
    their first cell.

    Returns:
        int16 array of shape (width, height); NO_ROOM for non-floor cells.
    """
    room_ids, _ = label_regions(grid.cells == LevelCell.FLOOR)
    return room_ids


@dataclass
class DoorCandidate:
    """A straight run of wall cells that could hold a door between two rooms.

    Attributes:
        axis: Axis along which the door leads from one room to the other. The
            run itself extends along the other axis.
        top_left: First wall cell of the run.
        length: Number of wall cells in the run.
        left_room_id: Room on the low-coordinate side along ``axis``.
        right_room_id: Room on the high-coordinate side along ``axis``.
    """

    axis: Axis
    top_left: WorldTilePos
    length: int
    left_room_id: int
    right_room_id: int

    def _pos_at(self, offset: int) -> WorldTilePos:
        run_axis = self.axis.other()
        return run_axis.new_pos(
            run_axis.get(self.top_left) + offset, self.axis.get(self.top_left)
        )

    def next_pos(self) -> WorldTilePos:
        """The cell just past the end of the run."""
        return self._pos_at(self.length)

    def positions(self) -> list[WorldTilePos]:
        return [self._pos_at(i) for i in range(self.length)]

    def choose_door_pos(self, rng: RNG) -> WorldTilePos:
        return self._pos_at(rng.randrange(self.length))


def identify_door_candidates_in_axis(
    grid: Grid, room_ids: np.ndarray, axis: Axis
) -> list[DoorCandidate]:
    """Find door candidates whose doors lead along ``axis``.

    For Axis.X the scan is x outer, y inner, so each candidate is a vertical
    run; Axis.Y is the transpose.
    """
    other = axis.other()
    candidates: list[DoorCandidate] = []
    size = grid.size

    for along in range(1, axis.get(size) - 1):
        for across in range(other.get(size)):
            pos = axis.new_pos(along, across)
            if grid.cells[pos] != LevelCell.WALL:
                continue
            left_id = int(room_ids[axis.new_pos(along - 1, across)])
            right_id = int(room_ids[axis.new_pos(along + 1, across)])
            if left_id == NO_ROOM or right_id == NO_ROOM or left_id == right_id:
                continue

            if candidates:
                last = candidates[-1]
                if (
                    last.left_room_id == left_id
                    and last.right_room_id == right_id
                    and last.next_pos() == pos
                ):
                    last.length += 1
                    continue

            candidates.append(
                DoorCandidate(
                    axis=axis,
                    top_left=pos,
                    length=1,
                    left_room_id=left_id,
                    right_room_id=right_id,
                )
            )

    return candidates


def identify_door_candidates(grid: Grid, room_ids: np.ndarray) -> list[DoorCandidate]:
    """Door candidates along both axes, X first."""
    return identify_door_candidates_in_axis(
        grid, room_ids, Axis.X
    ) + identify_door_candidates_in_axis(grid, room_ids, Axis.Y)


@dataclass(frozen=True)
class RoomEdge:
    to_room_id: int
    via: int  # Index into RoomGraph.door_candidates


class ConnectivityKind(Enum):
    EMPTY = auto()
    SINGLE_ROOM = auto()
    CONNECTED = auto()


@dataclass
class Connectivity:
    """Which door candidates receive doors.

    Attributes:
        kind: EMPTY when there are no rooms, SINGLE_ROOM when there is one room
            and so nothing to connect, CONNECTED otherwise.
        tree: Candidate indices of the spanning tree, ascending.
        extra: Candidate indices chosen for extra doors, in random order.
    """

    kind: ConnectivityKind
    tree: list[int] = field(default_factory=list)
    extra: list[int] = field(default_factory=list)

    @property
    def chosen(self) -> list[int]:
        return self.tree + self.extra


class RoomGraph:
    """Rooms as nodes, door candidates as edges in both directions.

    Parallel edges (several candidates between the same two rooms) are kept.
    """

    def __init__(
        self, door_candidates: list[DoorCandidate], num_rooms: int | None = None
    ) -> None:
        self.door_candidates = door_candidates
        highest = max(
            (max(c.left_room_id, c.right_room_id) for c in door_candidates),
            default=-1,
        )
        self.num_rooms = max(num_rooms or 0, highest + 1)
        self.nodes: list[list[RoomEdge]] = [[] for _ in range(self.num_rooms)]
        for i, candidate in enumerate(door_candidates):
            self.nodes[candidate.left_room_id].append(
                RoomEdge(candidate.right_room_id, i)
            )
            self.nodes[candidate.right_room_id].append(
                RoomEdge(candidate.left_room_id, i)
            )

    def random_spanning_walk(self, rng: RNG) -> set[int]:
        """Candidate indices of a random spanning tree of the reachable rooms.

        Starts from a random candidate and keeps a frontier of edges out of
        the visited rooms. Each step removes a random frontier edge and keeps
        it when it reaches a room not visited yet.
        """
        if not self.door_candidates:
            return set()

        tree: set[int] = set()
        visited: set[int] = set()
        frontier = [rng.randrange(len(self.door_candidates))]

        while frontier:
            index = rng.randrange(len(frontier))
            frontier[index], frontier[-1] = frontier[-1], frontier[index]
            candidate_index = frontier.pop()
            candidate = self.door_candidates[candidate_index]

            new_rooms = [
                room_id
                for room_id in (candidate.left_room_id, candidate.right_room_id)
                if room_id not in visited
            ]
            if not new_rooms:
                continue

            tree.add(candidate_index)
            for room_id in new_rooms:
                visited.add(room_id)
            for room_id in new_rooms:
                for edge in self.nodes[room_id]:
                    if edge.to_room_id not in visited:
                        frontier.append(edge.via)

        return tree

    def is_connected(self) -> bool:
        """True when every room can reach every other through candidates."""
        if self.num_rooms <= 1:
            return True
        seen = {0}
        stack = [0]
        while stack:
            room_id = stack.pop()
            for edge in self.nodes[room_id]:
                if edge.to_room_id not in seen:
                    seen.add(edge.to_room_id)
                    stack.append(edge.to_room_id)
        return len(seen) == self.num_rooms

    def connect(
        self,
        rng: RNG,
        extra_fraction: tuple[int, int] = config.EXTRA_DOOR_FRACTION,
    ) -> Connectivity:
        """Choose the candidates that get doors.

        Raises:
            DisconnectedRoomGraph: If some room cannot be reached.
        """
        if self.num_rooms == 0:
            return Connectivity(ConnectivityKind.EMPTY)
        if self.num_rooms == 1 and not self.door_candidates:
            return Connectivity(ConnectivityKind.SINGLE_ROOM)

        tree = self.random_spanning_walk(rng)
        reached = {
            room_id
            for i in tree
            for room_id in (
                self.door_candidates[i].left_room_id,
                self.door_candidates[i].right_room_id,
            )
        }
        if len(reached) < self.num_rooms:
            raise DisconnectedRoomGraph(
                f"Spanning walk reached {len(reached)} of {self.num_rooms} rooms"
            )

        extra = [i for i in range(len(self.door_candidates)) if i not in tree]
        rng.shuffle(extra)
        numerator, denominator = extra_fraction
        num_extra = (len(extra) * numerator + denominator - 1) // denominator
        return Connectivity(
            ConnectivityKind.CONNECTED, tree=sorted(tree), extra=extra[:num_extra]
        )


def place_doors(
    tiles: Grid[LevelCell],
    door_candidates: list[DoorCandidate],
    chosen: list[int],
    rng: RNG,
) -> list[WorldTilePos]:
    """Cut one door into each chosen candidate, in order."""
    doors: list[WorldTilePos] = []
    for i in chosen:
        candidate = door_candidates[i]
        pos = candidate.choose_door_pos(rng)
        tiles.set(pos, door_for_axis(candidate.axis))
        doors.append(pos)
    return doors


def count_rooms(room_ids: np.ndarray) -> int:
    return int(room_ids.max()) + 1 if room_ids.size else 0


class DoorLayer(GenerationLayer):
    """Labels rooms and connects them all with doors.

    A level that is a single room gets no doors. A level whose rooms cannot
    all be connected is rejected with DisconnectedRoomGraph.
    """

    def __init__(
        self, extra_door_fraction: tuple[int, int] = config.EXTRA_DOOR_FRACTION
    ) -> None:
        self.extra_door_fraction = extra_door_fraction

    def apply(self, ctx: GenerationContext) -> None:
        room_ids = classify_floor_cells_into_rooms(ctx.tiles)
        candidates = identify_door_candidates(ctx.tiles, room_ids)
        graph = RoomGraph(candidates, num_rooms=count_rooms(room_ids))

        connectivity = graph.connect(ctx.rng, self.extra_door_fraction)
        ctx.room_ids = room_ids
        ctx.door_candidates = candidates
        ctx.connectivity = connectivity

        if connectivity.kind is ConnectivityKind.EMPTY:
            raise DisconnectedRoomGraph("Level has no rooms")
        if connectivity.kind is ConnectivityKind.SINGLE_ROOM:
            logger.debug("Single room level, no doors placed")
            return

        ctx.doors = place_doors(ctx.tiles, candidates, connectivity.chosen, ctx.rng)
        logger.debug(
            f"{graph.num_rooms} rooms, {len(candidates)} door candidates, "
            f"{len(connectivity.tree)} tree doors + {len(connectivity.extra)} extra"
        )
