"""Wave Function Collapse solver over a periodic grid.

The solver does not know what its patterns look like. It takes one weight
per pattern and, for each direction, a boolean adjacency matrix, and fills a
width x height grid with pattern indices so that every pair of neighbours is
allowed. ``OverlappingPatterns`` learns both inputs from an exemplar.

Usage:
    from levelgen.environment.generators.wfc_solver import WFCSolver

    solver = WFCSolver(width, height, weights, compatible, rng)
    result = solver.solve_retrying()  # (width, height) array of pattern indices

Representation:
    The wave is a boolean numpy array of shape (width, height, num_patterns):
    ``wave[x, y, i]`` is True while pattern ``i`` is still possible at (x, y).
    ``compatible[d][i, j]`` is True when pattern j may sit one step in
    direction d of pattern i, so propagating from a cell is a row selection
    and an ``any`` reduction rather than a loop over patterns. This scales to
    the few hundred patterns an overlapping model extracts from a small
    exemplar.

Boundaries:
    The output wraps in both axes: the east neighbour of the last column is
    the first column, and so on.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from levelgen import config
from levelgen.environment.generators.base import retry_generation
from levelgen.types import RNG


class WFCContradiction(Exception):
    """Raised when WFC reaches an unsolvable state.

    This occurs when constraint propagation eliminates all possibilities
    for a cell, meaning no valid solution exists with the current constraints.
    """

    pass


# Direction utilities
DIRECTIONS = ["N", "E", "S", "W"]
DIR_OFFSETS = {"N": (0, -1), "E": (1, 0), "S": (0, 1), "W": (-1, 0)}

# Entropies closer than this are treated as equal when picking a cell.
_ENTROPY_EPSILON = 1e-9


class WFCSolver:
    """Core Wave Function Collapse solver.

    This solver implements the WFC algorithm for constraint propagation:
    1. Initialize all cells with all possible patterns
    2. Find the cell with minimum Shannon entropy (ties broken by the RNG)
    3. Collapse that cell to a single pattern (weighted random choice)
    4. Propagate constraints to neighbors until nothing changes
    5. Repeat until all cells are collapsed or contradiction occurs
    """

    def __init__(
        self,
        width: int,
        height: int,
        weights: Sequence[float] | np.ndarray,
        compatible: dict[str, np.ndarray],
        rng: RNG,
    ):
        """Initialize the WFC solver.

        Args:
            width: Grid width in cells.
            height: Grid height in cells.
            weights: Relative selection weight of each pattern.
            compatible: One (num_patterns, num_patterns) boolean matrix per
                direction in ``DIRECTIONS``.
            rng: Random number generator for deterministic results.
        """
        self.pattern_weights = np.asarray(weights, dtype=np.float64)
        self.num_patterns = len(self.pattern_weights)
        if self.num_patterns == 0:
            raise ValueError("WFCSolver needs at least one pattern")
        if np.any(self.pattern_weights <= 0):
            raise ValueError("Pattern weights must be positive")

        shape = (self.num_patterns, self.num_patterns)
        for direction in DIRECTIONS:
            matrix = compatible.get(direction)
            if matrix is None or matrix.shape != shape:
                raise ValueError(
                    f"Compatibility for {direction} must be a {shape} matrix"
                )

        self.width = width
        self.height = height
        self.compatible = compatible
        self.rng = rng
        self._weight_log_weights = self.pattern_weights * np.log(self.pattern_weights)

        self.wave = np.ones((width, height, self.num_patterns), dtype=bool)

    def _neighbor(self, x: int, y: int, direction: str) -> tuple[int, int]:
        dx, dy = DIR_OFFSETS[direction]
        return (x + dx) % self.width, (y + dy) % self.height

    def _propagate(self, cells: list[tuple[int, int]]) -> None:
        """Propagate constraints outward from the given cells.

        Raises:
            WFCContradiction: If any cell loses its last possible pattern.
        """
        stack = list(cells)
        in_stack = set(cells)

        while stack:
            x, y = stack.pop()
            in_stack.discard((x, y))

            possible = self.wave[x, y]

            for direction in DIRECTIONS:
                neighbor = self._neighbor(x, y, direction)
                allowed = self.compatible[direction][possible].any(axis=0)
                neighbor_mask = self.wave[neighbor]
                new_mask = neighbor_mask & allowed

                if np.array_equal(new_mask, neighbor_mask):
                    continue
                if not new_mask.any():
                    raise WFCContradiction(
                        f"No valid patterns at {neighbor} after propagation"
                    )

                self.wave[neighbor] = new_mask
                if neighbor not in in_stack:
                    stack.append(neighbor)
                    in_stack.add(neighbor)

    def _entropies(self) -> np.ndarray:
        """Shannon entropy of every cell; collapsed cells are +inf."""
        counts = self.wave.sum(axis=2)
        sum_weights = self.wave @ self.pattern_weights
        sum_weight_log_weights = self.wave @ self._weight_log_weights
        with np.errstate(divide="ignore", invalid="ignore"):
            entropy = np.log(sum_weights) - sum_weight_log_weights / sum_weights
        entropy[counts <= 1] = math.inf
        return entropy

    def _observe(self) -> tuple[int, int] | None:
        """Pick the uncollapsed cell with minimum entropy, or None when done."""
        entropy = self._entropies()
        lowest = float(entropy.min())
        if math.isinf(lowest):
            return None
        candidates = np.argwhere(entropy <= lowest + _ENTROPY_EPSILON)
        x, y = candidates[self.rng.randrange(len(candidates))]
        return int(x), int(y)

    def _collapse(self, x: int, y: int) -> None:
        """Collapse a cell to one of its remaining patterns, weighted."""
        possible = np.flatnonzero(self.wave[x, y])
        weights = self.pattern_weights[possible].tolist()
        chosen = self.rng.choices(possible.tolist(), weights=weights)[0]
        self.wave[x, y] = False
        self.wave[x, y, chosen] = True

    def solve(self) -> np.ndarray:
        """Run the WFC algorithm to completion from the current wave.

        Returns:
            Array of shape (width, height) holding the pattern index chosen
            for each cell.

        Raises:
            WFCContradiction: If the wave reaches an unsatisfiable state.
        """
        while (pos := self._observe()) is not None:
            self._collapse(*pos)
            self._propagate([pos])

        return self.wave.argmax(axis=2)

    def solve_retrying(self, max_attempts: int = config.WFC_MAX_ATTEMPTS) -> np.ndarray:
        """Solve, restarting from a fresh wave on contradiction.

        Each restart continues consuming the same RNG, so a contradiction
        costs time but not determinism.

        Raises:
            GenerationFailed: If every attempt ends in a contradiction.
        """

        def attempt() -> np.ndarray:
            self.wave = np.ones(
                (self.width, self.height, self.num_patterns), dtype=bool
            )
            return self.solve()

        return retry_generation(
            "wfc", attempt, max_attempts, retry_on=(WFCContradiction,)
        )
