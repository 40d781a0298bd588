"""Axis and rectangle helpers for tile coordinates."""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

from levelgen.types import RNG, TileCoord, TileSize, WorldTilePos

# 4-directional neighbours, in N, E, S, W order.
CARDINAL_OFFSETS: tuple[WorldTilePos, ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))

# 8-directional neighbours.
ALL_OFFSETS: tuple[WorldTilePos, ...] = (
    (0, -1),
    (1, -1),
    (1, 0),
    (1, 1),
    (0, 1),
    (-1, 1),
    (-1, 0),
    (-1, -1),
)


class Axis(Enum):
    """One of the two grid axes.

    Scans that are written once for both axes use ``new_pos(along, across)``:
    for X the first argument is the x coordinate, for Y it is the y coordinate.
    """

    X = "x"
    Y = "y"

    def other(self) -> Axis:
        return Axis.Y if self is Axis.X else Axis.X

    def new_pos(self, along: TileCoord, across: TileCoord) -> WorldTilePos:
        if self is Axis.X:
            return (along, across)
        return (across, along)

    def get(self, pos: WorldTilePos) -> TileCoord:
        """Return the component of pos (or of a (width, height) size) on this axis."""
        return pos[0] if self is Axis.X else pos[1]


def distance2(a: WorldTilePos, b: WorldTilePos) -> int:
    """Squared euclidean distance between two tiles."""
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


class Rect:
    """Rectangle/bounding box in tile coordinates.

    ``x2`` and ``y2`` are exclusive. When a rectangle describes a room, its
    edge cells are the room's walls and its inner cells are the floor.
    """

    def __init__(self, x: TileCoord, y: TileCoord, w: TileCoord, h: TileCoord) -> None:
        self.x1: TileCoord = x
        self.y1: TileCoord = y
        self.x2: TileCoord = x + w
        self.y2: TileCoord = y + h

    @classmethod
    def choose(
        cls,
        bounds: TileSize,
        min_size: TileSize,
        max_size: TileSize,
        rng: RNG,
    ) -> Rect:
        """Randomly generate a rectangle that fits inside ``bounds``.

        Width and height are drawn from ``[min_size, max_size)`` and the
        top-left corner from ``[0, bounds - size)``, so the rectangle never
        touches the far edges of the bounds.
        """
        width = rng.randrange(min_size[0], max_size[0])
        height = rng.randrange(min_size[1], max_size[1])
        left = rng.randrange(0, bounds[0] - width)
        top = rng.randrange(0, bounds[1] - height)
        return cls(left, top, width, height)

    @property
    def width(self) -> TileCoord:
        return self.x2 - self.x1

    @property
    def height(self) -> TileCoord:
        return self.y2 - self.y1

    def center(self) -> tuple[int, int]:
        return (int((self.x1 + self.x2) / 2), int((self.y1 + self.y2) / 2))

    def contains(self, pos: WorldTilePos) -> bool:
        x, y = pos
        return self.x1 <= x < self.x2 and self.y1 <= y < self.y2

    def is_edge(self, pos: WorldTilePos) -> bool:
        """Return True iff pos lies on the outermost ring of the rectangle."""
        x, y = pos
        return self.contains(pos) and (
            x in (self.x1, self.x2 - 1) or y in (self.y1, self.y2 - 1)
        )

    def coords(self) -> Iterator[WorldTilePos]:
        """Iterate over every cell, row-major."""
        for y in range(self.y1, self.y2):
            for x in range(self.x1, self.x2):
                yield (x, y)

    def edge_coords(self) -> Iterator[WorldTilePos]:
        return (pos for pos in self.coords() if self.is_edge(pos))

    def boundary_walk(self) -> list[WorldTilePos]:
        """Return the edge cells in cyclic (clockwise) order from the top-left."""
        if self.width == 1 or self.height == 1:
            return list(self.coords())
        top = [(x, self.y1) for x in range(self.x1, self.x2)]
        right = [(self.x2 - 1, y) for y in range(self.y1 + 1, self.y2)]
        bottom = [(x, self.y2 - 1) for x in range(self.x2 - 2, self.x1 - 1, -1)]
        left = [(self.x1, y) for y in range(self.y2 - 2, self.y1, -1)]
        return top + right + bottom + left

    def __repr__(self) -> str:
        return f"Rect(x1={self.x1}, y1={self.y1}, x2={self.x2}, y2={self.y2})"
