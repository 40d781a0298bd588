"""Tests for overlapping-model pattern extraction."""

from __future__ import annotations

import random

import numpy as np
import pytest

from levelgen import config
from levelgen.environment.generators.overlapping import OverlappingPatterns
from levelgen.environment.generators.wfc_solver import WFCSolver
from levelgen.environment.tile_types import GENERATION_LEGEND, GenerationCell
from levelgen.util.grid import Grid

# Two-column vertical stripes: closed on the left, open on the right.
STRIPES = ["#.", "#."]


def _grid(rows: list[str]) -> Grid[GenerationCell]:
    return Grid.from_strings(rows, GENERATION_LEGEND, GenerationCell)


class TestPatternExtraction:
    def test_uniform_exemplar_has_one_pattern(self) -> None:
        """Every window, in every orientation, is the same all-open window."""
        patterns = OverlappingPatterns(_grid(["...", "...", "..."]), 2)

        assert patterns.num_patterns == 1
        assert patterns.counts == [72]
        assert all(matrix.all() for matrix in patterns.compatible.values())

    def test_windows_wrap_around_the_exemplar(self) -> None:
        patterns = OverlappingPatterns(_grid(STRIPES), 2, all_orientations=False)

        assert patterns.num_patterns == 2
        assert patterns.counts == [2, 2]
        np.testing.assert_array_equal(patterns.weights, [2.0, 2.0])

        # Pattern 0 is the window at (0, 0), pattern 1 the wrapped one at (1, 0)
        np.testing.assert_array_equal(
            patterns.top_left_values(np.array([0, 1, 1])),
            [GenerationCell.CLOSED, GenerationCell.OPEN, GenerationCell.OPEN],
        )

    def test_orientations_add_rotated_stripes(self) -> None:
        """Rotating vertical stripes yields horizontal ones."""
        patterns = OverlappingPatterns(_grid(STRIPES), 2)
        assert patterns.num_patterns == 4
        assert sum(patterns.counts) == 4 * 8

    def test_windows_are_indexed_x_then_y(self) -> None:
        patterns = OverlappingPatterns(_grid(STRIPES), 2, all_orientations=False)
        expected = np.array(
            [
                [GenerationCell.CLOSED, GenerationCell.CLOSED],
                [GenerationCell.OPEN, GenerationCell.OPEN],
            ]
        )
        np.testing.assert_array_equal(patterns.windows[0], expected)

    def test_invalid_pattern_size(self) -> None:
        with pytest.raises(ValueError, match="pattern_size"):
            OverlappingPatterns(_grid(STRIPES), 0)


class TestCompatibility:
    """Two patterns are neighbours when their overlap agrees."""

    def test_stripes_alternate_east_west(self) -> None:
        patterns = OverlappingPatterns(_grid(STRIPES), 2, all_orientations=False)

        np.testing.assert_array_equal(
            patterns.compatible["E"], [[False, True], [True, False]]
        )
        np.testing.assert_array_equal(
            patterns.compatible["W"], [[False, True], [True, False]]
        )

    def test_stripes_repeat_north_south(self) -> None:
        patterns = OverlappingPatterns(_grid(STRIPES), 2, all_orientations=False)

        np.testing.assert_array_equal(patterns.compatible["S"], np.eye(2, dtype=bool))
        np.testing.assert_array_equal(patterns.compatible["N"], np.eye(2, dtype=bool))

    def test_opposite_directions_are_transposes(self) -> None:
        patterns = OverlappingPatterns(_grid(list(config.HULL_EXEMPLAR)), 3)
        np.testing.assert_array_equal(
            patterns.compatible["E"], patterns.compatible["W"].T
        )
        np.testing.assert_array_equal(
            patterns.compatible["N"], patterns.compatible["S"].T
        )


class TestSynthesis:
    def test_solved_stripes_reproduce_the_exemplar(self, rng: random.Random) -> None:
        """A periodic solve over stripe patterns yields stripes."""
        patterns = OverlappingPatterns(_grid(STRIPES), 2, all_orientations=False)
        solver = WFCSolver(6, 4, patterns.weights, patterns.compatible, rng)
        values = patterns.top_left_values(solver.solve())

        assert values.shape == (6, 4)
        for x in range(6):
            assert len(set(values[x].tolist())) == 1, f"Column {x} is not uniform"
            assert values[x, 0] != values[(x + 1) % 6, 0]
