"""Overlapping-model pattern extraction for Wave Function Collapse.

The overlapping model learns its adjacency rules from an example image rather
than from hand-written tiles. Every N x N window of the exemplar becomes a
pattern; two patterns may be neighbours in a direction when, shifted one cell
apart, the (N-1) x N region where they overlap agrees cell for cell. Solving a
WFC over these patterns and keeping each chosen pattern's top-left cell
produces output whose local N x N neighbourhoods all occur in the exemplar.

The exemplar is treated as periodic (windows wrap around its edges), and with
``all_orientations`` every window is also added in its 4 rotations and their
mirror images, so a vertical corridor in the exemplar teaches horizontal
corridors too.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import IntEnum

import numpy as np

from levelgen.util.grid import Grid

from .wfc_solver import DIRECTIONS


def _orientations(window: np.ndarray) -> Iterator[np.ndarray]:
    """Yield the 8 rotations/reflections of a square window."""
    for k in range(4):
        rotated = np.rot90(window, k)
        yield rotated
        yield rotated[::-1, :]


class OverlappingPatterns:
    """Patterns and adjacency rules extracted from an exemplar grid.

    Attributes:
        pattern_size: Side length N of each pattern.
        windows: Array of shape (num_patterns, N, N), indexed [pattern, dx, dy].
        counts: How often each window occurs in the exemplar.
        weights: ``counts`` as the float array ``WFCSolver`` expects.
        compatible: Per-direction adjacency matrices in the layout
            ``WFCSolver`` expects.
    """

    def __init__(
        self,
        exemplar: Grid[IntEnum],
        pattern_size: int,
        all_orientations: bool = True,
    ) -> None:
        if pattern_size < 1:
            raise ValueError(f"pattern_size must be positive, got {pattern_size}")
        self.pattern_size = pattern_size

        windows, counts = self._extract_windows(
            exemplar.cells, pattern_size, all_orientations
        )
        self.windows = np.stack(windows)
        self.counts = counts
        self.weights = np.array(counts, dtype=np.float64)
        self.compatible = {d: self._compatibility(d) for d in DIRECTIONS}

    @staticmethod
    def _extract_windows(
        cells: np.ndarray, n: int, all_orientations: bool
    ) -> tuple[list[np.ndarray], list[int]]:
        width, height = cells.shape
        offsets = np.arange(n)
        index_of: dict[bytes, int] = {}
        windows: list[np.ndarray] = []
        counts: list[int] = []

        for y in range(height):
            for x in range(width):
                window = cells[np.ix_((x + offsets) % width, (y + offsets) % height)]
                variants = _orientations(window) if all_orientations else [window]
                for variant in variants:
                    variant = np.ascontiguousarray(variant)
                    key = variant.tobytes()
                    if key in index_of:
                        counts[index_of[key]] += 1
                    else:
                        index_of[key] = len(windows)
                        windows.append(variant)
                        counts.append(1)

        return windows, counts

    def _compatibility(self, direction: str) -> np.ndarray:
        """``result[i, j]``: pattern j may sit one step in ``direction`` of i."""
        w = self.windows
        num_patterns = len(w)
        if direction == "E":
            ours, theirs = w[:, 1:, :], w[:, :-1, :]
        elif direction == "W":
            ours, theirs = w[:, :-1, :], w[:, 1:, :]
        elif direction == "S":
            ours, theirs = w[:, :, 1:], w[:, :, :-1]
        else:
            ours, theirs = w[:, :, :-1], w[:, :, 1:]

        ours = ours.reshape(num_patterns, -1)
        theirs = theirs.reshape(num_patterns, -1)
        result = np.zeros((num_patterns, num_patterns), dtype=bool)
        for i in range(num_patterns):
            result[i] = (theirs == ours[i]).all(axis=1)
        return result

    @property
    def num_patterns(self) -> int:
        return len(self.windows)

    def top_left_values(self, pattern_ids: np.ndarray) -> np.ndarray:
        """The exemplar cell at the top-left corner of each given pattern."""
        return self.windows[pattern_ids, 0, 0]
