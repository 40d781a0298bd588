"""Dense 2D grids of enum-valued cells.

A ``Grid`` wraps a numpy array of shape ``(width, height)``, indexed
``cells[x, y]`` like every other tile array in the codebase, and converts
between the raw integers stored in the array and the ``IntEnum`` cell type of
the generation stage that owns it.

Two read accessors exist on purpose:

- ``get(pos)`` returns ``None`` for coordinates outside the grid. Use it for
  untrusted coordinates: neighbours of edge cells, flood-fill frontiers.
- ``get_checked(pos)`` asserts the coordinate is in range. Use it for
  coordinates the caller already knows are valid, e.g. those produced by
  ``enumerate()``.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from enum import IntEnum
from typing import Generic, TypeVar

import numpy as np

from levelgen.types import TileCoord, TileSize, WorldTilePos
from levelgen.util.coordinates import CARDINAL_OFFSETS


CellType = TypeVar("CellType", bound=IntEnum)


class Grid(Generic[CellType]):
    """Fixed-size 2D grid of ``CellType`` values backed by a uint8 array."""

    def __init__(self, cells: np.ndarray, cell_type: type[CellType]) -> None:
        if cells.ndim != 2:
            raise ValueError(f"Grid cells must be 2D, got shape {cells.shape}")
        self.cells = cells
        self.cell_type = cell_type

    @classmethod
    def full(
        cls, width: TileCoord, height: TileCoord, fill: CellType
    ) -> Grid[CellType]:
        """Create a grid with every cell set to ``fill``."""
        cells = np.full((width, height), fill_value=fill, dtype=np.uint8, order="F")
        return cls(cells, type(fill))

    @classmethod
    def from_strings(
        cls,
        rows: Sequence[str],
        legend: Mapping[str, CellType],
        cell_type: type[CellType],
    ) -> Grid[CellType]:
        """Parse a list of equal-length text rows into a grid.

        Args:
            rows: One string per row, top row first.
            legend: Maps each character to the cell it represents.
            cell_type: The enum type of the resulting grid.

        Raises:
            ValueError: On ragged rows or characters missing from the legend.
        """
        height = len(rows)
        width = len(rows[0]) if rows else 0
        cells = np.zeros((width, height), dtype=np.uint8, order="F")
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"Row {y} has length {len(row)}, expected {width}")
            for x, ch in enumerate(row):
                if ch not in legend:
                    raise ValueError(f"Unexpected character {ch!r} at ({x}, {y})")
                cells[x, y] = legend[ch]
        return cls(cells, cell_type)

    @property
    def width(self) -> TileCoord:
        return self.cells.shape[0]

    @property
    def height(self) -> TileCoord:
        return self.cells.shape[1]

    @property
    def size(self) -> TileSize:
        return (self.width, self.height)

    def in_bounds(self, pos: WorldTilePos) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, pos: WorldTilePos) -> CellType | None:
        """Return the cell at pos, or None if pos is outside the grid."""
        if not self.in_bounds(pos):
            return None
        return self.cell_type(int(self.cells[pos]))

    def get_checked(self, pos: WorldTilePos) -> CellType:
        """Return the cell at a coordinate the caller knows is in range."""
        assert self.in_bounds(pos), f"{pos} outside grid of size {self.size}"
        return self.cell_type(int(self.cells[pos]))

    def set(self, pos: WorldTilePos, value: CellType) -> None:
        assert self.in_bounds(pos), f"{pos} outside grid of size {self.size}"
        self.cells[pos] = value

    def enumerate(self) -> Iterator[tuple[WorldTilePos, CellType]]:
        """Yield ``((x, y), cell)`` pairs in row-major order."""
        cell_type = self.cell_type
        for y in range(self.height):
            for x in range(self.width):
                yield (x, y), cell_type(int(self.cells[x, y]))

    def coords_of(self, value: CellType) -> list[WorldTilePos]:
        """Return every coordinate holding ``value``, in row-major order."""
        ys, xs = np.nonzero(self.cells.T == value)
        return [(int(x), int(y)) for x, y in zip(xs, ys, strict=True)]

    def count(self, value: CellType) -> int:
        return int(np.count_nonzero(self.cells == value))

    def copy(self) -> Grid[CellType]:
        return Grid(self.cells.copy(order="F"), self.cell_type)

    def to_strings(self, glyphs: Mapping[CellType, str]) -> list[str]:
        """Render the grid as text rows, top row first."""
        cell_type = self.cell_type
        return [
            "".join(glyphs[cell_type(int(self.cells[x, y]))] for x in range(self.width))
            for y in range(self.height)
        ]

    def __repr__(self) -> str:
        name = self.cell_type.__name__
        return f"Grid[{name}](width={self.width}, height={self.height})"


def label_regions(mask: np.ndarray) -> tuple[np.ndarray, int]:
    """Label the 4-connected regions of True cells in a (width, height) mask.

    Regions are numbered from 0 in the row-major order of their first cell.

    Returns:
        ``(labels, count)``: an int16 array holding each cell's region, -1
        where the mask is False, and the number of regions.
    """
    width, height = mask.shape
    labels = np.full((width, height), -1, dtype=np.int16, order="F")
    count = 0

    for y in range(height):
        for x in range(width):
            if not mask[x, y] or labels[x, y] >= 0:
                continue
            labels[x, y] = count
            stack = [(x, y)]
            while stack:
                cx, cy = stack.pop()
                for dx, dy in CARDINAL_OFFSETS:
                    nx, ny = cx + dx, cy + dy
                    if (
                        0 <= nx < width
                        and 0 <= ny < height
                        and mask[nx, ny]
                        and labels[nx, ny] < 0
                    ):
                        labels[nx, ny] = count
                        stack.append((nx, ny))
            count += 1

    return labels, count
