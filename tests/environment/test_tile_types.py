"""Tests for the generation-stage cell types."""

from __future__ import annotations

from levelgen.environment.tile_types import (
    LEVEL_GLYPHS,
    LEVEL_LEGEND,
    HullCell,
    LevelCell,
    door_for_axis,
    window_for_axis,
)
from levelgen.util.coordinates import Axis


class TestCellNumbering:
    def test_level_cells_extend_hull_cells(self) -> None:
        """A hull grid can be reinterpreted as a level grid without remapping."""
        for cell in HullCell:
            assert LevelCell[cell.name].value == cell.value

    def test_level_cells_fit_in_uint8(self) -> None:
        assert max(LevelCell) < 256


class TestLevelCellHelpers:
    def test_door_and_window_predicates(self) -> None:
        assert LevelCell.DOOR_X.is_door
        assert LevelCell.DOOR_Y.is_door
        assert not LevelCell.WINDOW_X.is_door
        assert LevelCell.WINDOW_Y.is_window
        assert not LevelCell.FLOOR.is_window

    def test_axis_mapping(self) -> None:
        assert door_for_axis(Axis.X) is LevelCell.DOOR_X
        assert door_for_axis(Axis.Y) is LevelCell.DOOR_Y
        assert window_for_axis(Axis.X) is LevelCell.WINDOW_X
        assert window_for_axis(Axis.Y) is LevelCell.WINDOW_Y

    def test_every_level_cell_has_a_glyph(self) -> None:
        assert set(LEVEL_GLYPHS) == set(LevelCell)
        assert len(LEVEL_LEGEND) == len(LevelCell)
