"""Tests for hull synthesis and the extraction steps."""

from __future__ import annotations

import random

import numpy as np
import pytest

from levelgen import config
from levelgen.environment.generators.base import ShapeRejected
from levelgen.environment.generators.pipeline.context import GenerationContext
from levelgen.environment.generators.pipeline.layers.hull import (
    HullLayer,
    check_hull_shape,
    extract_hull,
    generate_hull,
    hull_bounding_box,
    keep_largest_enclosed_area,
    parse_exemplar,
    strip_walls_from_outside,
    surround_by_space,
    wfc_map,
    wrap_in_closed_area,
)
from levelgen.environment.tile_types import (
    GENERATION_GLYPHS,
    GENERATION_LEGEND,
    HULL_GLYPHS,
    HULL_LEGEND,
    GenerationCell,
    HullCell,
    LevelCell,
)
from levelgen.util.coordinates import CARDINAL_OFFSETS
from levelgen.util.grid import Grid, label_regions


def _generation(rows: list[str]) -> Grid[GenerationCell]:
    return Grid.from_strings(rows, GENERATION_LEGEND, GenerationCell)


def _hull(rows: list[str]) -> Grid[HullCell]:
    return Grid.from_strings(rows, HULL_LEGEND, HullCell)


def _dense_hull(size: int) -> list[str]:
    """A square hull: a wall ring around solid floor."""
    inner = size - 2
    return ["#" * size] + ["#" + "." * inner + "#"] * inner + ["#" * size]


def assert_well_formed_hull(hull: Grid[HullCell]) -> None:
    """One floor region, and every wall touches it."""
    _, regions = label_regions(hull.cells == HullCell.FLOOR)
    assert regions == 1, f"Hull has {regions} floor regions"

    for pos in hull.coords_of(HullCell.WALL):
        x, y = pos
        assert any(
            hull.get((x + dx, y + dy)) == HullCell.FLOOR for dx, dy in CARDINAL_OFFSETS
        ), f"Wall at {pos} has no floor neighbour"

    border = np.concatenate(
        [hull.cells[0, :], hull.cells[-1, :], hull.cells[:, 0], hull.cells[:, -1]]
    )
    assert not (border == HullCell.FLOOR).any(), "Floor touches the frame edge"


# =============================================================================
# Extraction steps
# =============================================================================


class TestExtractionSteps:
    """Each extraction step on hand-drawn grids."""

    def test_keep_largest_enclosed_area(self) -> None:
        grid = _generation(
            [
                "..#...",
                "..#...",
                "###...",
            ]
        )
        result = keep_largest_enclosed_area(grid)
        assert result.to_strings(GENERATION_GLYPHS) == [
            "###...",
            "###...",
            "###...",
        ]

    def test_keep_largest_breaks_ties_towards_the_last_area(self) -> None:
        """Of two equally large areas, the one found later is kept."""
        grid = _generation(
            [
                "..#..#.",
                "..#..##",
            ]
        )
        result = keep_largest_enclosed_area(grid)
        assert result.to_strings(GENERATION_GLYPHS) == [
            "###..##",
            "###..##",
        ]

    def test_keep_largest_rejects_all_closed(self) -> None:
        with pytest.raises(ShapeRejected):
            keep_largest_enclosed_area(_generation(["###", "###"]))

    def test_wrap_in_closed_area(self) -> None:
        result = wrap_in_closed_area(_generation(["..", ".."]))
        assert result.to_strings(GENERATION_GLYPHS) == [
            "####",
            "#..#",
            "#..#",
            "####",
        ]

    def test_strip_walls_from_outside(self) -> None:
        """Closed cells survive as walls only where they touch open cells."""
        grid = _generation(
            [
                "#####",
                "#####",
                "##.##",
                "#####",
                "#####",
            ]
        )
        result = strip_walls_from_outside(grid)
        assert result.cell_type is HullCell
        assert result.to_strings(HULL_GLYPHS) == [
            "     ",
            "  #  ",
            " #.# ",
            "  #  ",
            "     ",
        ]

    def test_surround_by_space_grows(self) -> None:
        result = surround_by_space(_hull(["###", "#.#", "###"]), (5, 4))
        assert result.to_strings(HULL_GLYPHS) == [
            "###  ",
            "#.#  ",
            "###  ",
            "     ",
        ]

    def test_surround_by_space_crops(self) -> None:
        result = surround_by_space(_hull(["###", "#.#", "###"]), (2, 2))
        assert result.to_strings(HULL_GLYPHS) == ["##", "#."]

    def test_extract_hull_pipeline(self) -> None:
        grid = _generation(
            [
                "....#.",
                "....#.",
                "......",
                "##....",
            ]
        )
        hull = extract_hull(grid, (8, 6))
        assert hull.size == (8, 6)
        assert_well_formed_hull(hull)
        assert hull.count(HullCell.FLOOR) == 20


# =============================================================================
# Shape checks
# =============================================================================


class TestHullShape:
    def test_bounding_box(self) -> None:
        hull = _hull(
            [
                "     ",
                "  #  ",
                " #.# ",
                "  #  ",
                "     ",
            ]
        )
        assert hull_bounding_box(hull) == (2, 2)

    def test_bounding_box_of_empty_hull(self) -> None:
        assert hull_bounding_box(Grid.full(4, 4, HullCell.SPACE)) == (0, 0)

    def test_dense_hull_accepted(self) -> None:
        check_hull_shape(_hull(_dense_hull(8)))

    def test_sparse_hull_rejected(self) -> None:
        with pytest.raises(ShapeRejected, match="floor cells"):
            check_hull_shape(_hull(_dense_hull(4)))

    def test_small_footprint_rejected(self) -> None:
        """A dense hull that leaves most of its frame empty is rejected."""
        hull = surround_by_space(_hull(_dense_hull(8)), (12, 12))
        with pytest.raises(ShapeRejected, match="margin"):
            check_hull_shape(hull, min_floor_fraction=(0, 1))


# =============================================================================
# Synthesis
# =============================================================================


class TestHullSynthesis:
    def test_parse_exemplar(self) -> None:
        exemplar = parse_exemplar()
        assert exemplar.size == (16, 15)
        assert exemplar.get((3, 1)) == GenerationCell.CLOSED

    def test_wfc_map_output(self) -> None:
        grid = wfc_map(
            config.HULL_EXEMPLAR, (12, 9), config.HULL_PATTERN_SIZE, random.Random(5)
        )
        assert grid.size == (12, 9)
        assert grid.cell_type is GenerationCell
        assert set(np.unique(grid.cells)) <= {0, 1}

    def test_wfc_map_is_deterministic(self) -> None:
        a = wfc_map(config.HULL_EXEMPLAR, (10, 8), 3, random.Random(11))
        b = wfc_map(config.HULL_EXEMPLAR, (10, 8), 3, random.Random(11))
        np.testing.assert_array_equal(a.cells, b.cells)

    def test_generate_hull(self) -> None:
        hull = generate_hull((20, 14), random.Random(3))

        assert hull.size == (20, 14)
        assert_well_formed_hull(hull)
        assert hull.count(HullCell.FLOOR) >= 20 * 14 // 2
        check_hull_shape(hull)

    def test_generate_hull_too_small(self) -> None:
        with pytest.raises(ValueError, match="3x3"):
            generate_hull((2, 10), random.Random(0))

    def test_hull_layer_sets_level_tiles(self) -> None:
        ctx = GenerationContext.create_empty(16, 12, random.Random(21))
        HullLayer().apply(ctx)

        assert ctx.hull is not None
        assert ctx.tiles.cell_type is LevelCell
        np.testing.assert_array_equal(ctx.tiles.cells, ctx.hull.cells)
        assert ctx.tiles.count(LevelCell.FLOOR) > 0
