"""Tests for axis and rectangle helpers."""

from __future__ import annotations

import random

import pytest

from levelgen.util.coordinates import (
    ALL_OFFSETS,
    CARDINAL_OFFSETS,
    Axis,
    Rect,
    distance2,
)


class TestAxis:
    """Axis-parameterized coordinate construction."""

    def test_new_pos_orders_components(self) -> None:
        assert Axis.X.new_pos(3, 7) == (3, 7)
        assert Axis.Y.new_pos(3, 7) == (7, 3)

    def test_get_reads_matching_component(self) -> None:
        assert Axis.X.get((4, 9)) == 4
        assert Axis.Y.get((4, 9)) == 9

    def test_other(self) -> None:
        assert Axis.X.other() is Axis.Y
        assert Axis.Y.other() is Axis.X

    def test_new_pos_and_get_round_trip(self) -> None:
        """Reading a position back along the same axis yields 'along'."""
        for axis in Axis:
            pos = axis.new_pos(5, 2)
            assert axis.get(pos) == 5
            assert axis.other().get(pos) == 2


class TestOffsetsAndDistance:
    def test_offset_tables(self) -> None:
        assert len(CARDINAL_OFFSETS) == 4
        assert len(ALL_OFFSETS) == 8
        assert set(CARDINAL_OFFSETS) <= set(ALL_OFFSETS)
        assert (0, 0) not in ALL_OFFSETS

    def test_distance2(self) -> None:
        assert distance2((0, 0), (3, 4)) == 25
        assert distance2((2, 2), (2, 2)) == 0


class TestRect:
    """Rectangle geometry."""

    def test_bounds_are_exclusive(self) -> None:
        rect = Rect(2, 3, 4, 5)
        assert (rect.x1, rect.y1, rect.x2, rect.y2) == (2, 3, 6, 8)
        assert rect.width == 4
        assert rect.height == 5
        assert rect.contains((5, 7))
        assert not rect.contains((6, 7))

    def test_center_rounds_towards_zero(self) -> None:
        assert Rect(0, 0, 5, 5).center() == (2, 2)
        assert Rect(1, 1, 4, 4).center() == (3, 3)

    def test_edge_coords_skip_the_inner_cells(self) -> None:
        rect = Rect(0, 0, 4, 3)
        inner = set(rect.coords()) - set(rect.edge_coords())
        assert inner == {(1, 1), (2, 1)}

    def test_boundary_walk_is_cyclic(self) -> None:
        """Every step of the walk, including the wrap, moves one cell."""
        rect = Rect(2, 1, 5, 4)
        walk = rect.boundary_walk()

        assert walk[0] == (2, 1)
        assert len(walk) == len(set(walk))
        assert set(walk) == set(rect.edge_coords())
        for i in range(len(walk)):
            (ax, ay), (bx, by) = walk[i - 1], walk[i]
            assert abs(ax - bx) + abs(ay - by) == 1, f"Jump at {walk[i - 1]}"

    def test_boundary_walk_of_a_line(self) -> None:
        assert Rect(0, 0, 3, 1).boundary_walk() == [(0, 0), (1, 0), (2, 0)]


class TestRectChoose:
    """Random rectangles stay inside the bounds."""

    @pytest.mark.parametrize("bounds", [(50, 50), (80, 43), (12, 10)])
    def test_choose_stays_in_bounds(
        self, bounds: tuple[int, int], rng: random.Random
    ) -> None:
        """1000 draws all fit with sizes in [min, max)."""
        min_size, max_size = (5, 5), (11, 9)
        for _ in range(1000):
            rect = Rect.choose(bounds, min_size, max_size, rng)
            assert min_size[0] <= rect.width < max_size[0]
            assert min_size[1] <= rect.height < max_size[1]
            assert rect.x1 >= 0
            assert rect.y1 >= 0
            assert rect.x2 < bounds[0], f"{rect} touches the right edge"
            assert rect.y2 < bounds[1], f"{rect} touches the bottom edge"

    def test_choose_is_deterministic(self) -> None:
        a = Rect.choose((40, 40), (5, 5), (11, 9), random.Random(3))
        b = Rect.choose((40, 40), (5, 5), (11, 9), random.Random(3))
        assert (a.x1, a.y1, a.x2, a.y2) == (b.x1, b.y1, b.x2, b.y2)
