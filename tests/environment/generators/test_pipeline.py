"""Tests for the station pipeline: context, generator and factory."""

from __future__ import annotations

import random

import numpy as np
import pytest

from levelgen.environment.generators.base import (
    GenerationFailed,
    NoValidStairs,
    StationLevel,
)
from levelgen.environment.generators.pipeline import (
    DoorLayer,
    GenerationContext,
    GenerationLayer,
    HullLayer,
    InternalWallLayer,
    PipelineGenerator,
    StairsAndSpawnLayer,
    WindowLayer,
    create_pipeline,
    create_station_pipeline,
)
from levelgen.environment.tile_types import HullCell, LevelCell
from levelgen.util.coordinates import CARDINAL_OFFSETS
from levelgen.util.grid import Grid, label_regions

WALKABLE = [
    LevelCell.FLOOR,
    LevelCell.DOOR_X,
    LevelCell.DOOR_Y,
    LevelCell.STAIRS,
    LevelCell.SPAWN,
]


@pytest.fixture(scope="module")
def station() -> StationLevel:
    return create_station_pipeline(20, 14).generate(random.Random(2024))


class RejectingLayer(GenerationLayer):
    """Always rejects the level."""

    def __init__(self) -> None:
        self.calls = 0

    def apply(self, ctx: GenerationContext) -> None:
        self.calls += 1
        raise NoValidStairs("rejected for testing")


class RecordingLayer(GenerationLayer):
    def __init__(self, log: list[str], name: str) -> None:
        self.log = log
        self.name = name

    def apply(self, ctx: GenerationContext) -> None:
        self.log.append(self.name)


# =============================================================================
# GenerationContext
# =============================================================================


class TestGenerationContext:
    def test_create_empty(self) -> None:
        ctx = GenerationContext.create_empty(6, 4, random.Random(0))
        assert ctx.tiles.size == (6, 4)
        assert ctx.tiles.count(LevelCell.SPACE) == 24
        assert ctx.doors == []
        assert ctx.stairs is None

    def test_set_hull_copies_cells(self) -> None:
        ctx = GenerationContext.create_empty(3, 3, random.Random(0))
        hull = Grid.full(3, 3, HullCell.WALL)
        hull.set((1, 1), HullCell.FLOOR)

        ctx.set_hull(hull)
        ctx.tiles.set((1, 1), LevelCell.STAIRS)

        assert ctx.hull is hull
        assert hull.get((1, 1)) is HullCell.FLOOR
        assert ctx.tiles.get((0, 0)) is LevelCell.WALL

    def test_to_station_level_requires_stairs_and_spawn(self) -> None:
        ctx = GenerationContext.create_empty(3, 3, random.Random(0))
        with pytest.raises(ValueError, match="stairs and spawn"):
            ctx.to_station_level()


# =============================================================================
# PipelineGenerator
# =============================================================================


class TestPipelineGenerator:
    def test_layers_run_in_order(self) -> None:
        log: list[str] = []

        class FinishingLayer(GenerationLayer):
            def apply(self, ctx: GenerationContext) -> None:
                ctx.room_ids = np.zeros((ctx.width, ctx.height), dtype=np.int16)
                ctx.stairs = (0, 0)
                ctx.spawn = (1, 1)

        generator = PipelineGenerator(
            [RecordingLayer(log, "a"), RecordingLayer(log, "b"), FinishingLayer()],
            map_width=4,
            map_height=4,
        )
        level = generator.generate(random.Random(0))

        assert log == ["a", "b"]
        assert level.stairs == (0, 0)
        assert level.spawn == (1, 1)

    def test_rejections_restart_until_exhausted(self) -> None:
        layer = RejectingLayer()
        generator = PipelineGenerator([layer], 4, 4, max_attempts=3)

        with pytest.raises(GenerationFailed) as excinfo:
            generator.generate(random.Random(0))

        assert layer.calls == 3
        assert excinfo.value.stage == "station"
        assert isinstance(excinfo.value.__cause__, NoValidStairs)

    def test_missing_layers_is_a_programming_error(self) -> None:
        """A pipeline that never places stairs fails loudly, not by retrying."""
        generator = PipelineGenerator([HullLayer()], 12, 10)
        with pytest.raises(ValueError):
            generator.generate(random.Random(0))


# =============================================================================
# Generated stations
# =============================================================================


class TestGeneratedStation:
    """Properties every generated station must have."""

    def test_size(self, station: StationLevel) -> None:
        assert station.grid.size == (20, 14)
        assert station.room_ids.shape == (20, 14)

    def test_exactly_one_stairs_and_spawn(self, station: StationLevel) -> None:
        assert station.grid.coords_of(LevelCell.STAIRS) == [station.stairs]
        assert station.grid.coords_of(LevelCell.SPAWN) == [station.spawn]

    def test_stairs_and_spawn_in_different_rooms(self, station: StationLevel) -> None:
        assert station.room_ids[station.stairs] != station.room_ids[station.spawn]

    def test_stairs_and_spawn_surrounded_by_floor(self, station: StationLevel) -> None:
        for pos in (station.stairs, station.spawn):
            for dx, dy in CARDINAL_OFFSETS:
                neighbour = (pos[0] + dx, pos[1] + dy)
                assert station.grid.get(neighbour) is LevelCell.FLOOR, (
                    f"{pos} has {station.grid.get(neighbour)} at {neighbour}"
                )

    def test_has_doors(self, station: StationLevel) -> None:
        assert station.num_rooms >= 2
        assert len(station.doors) >= station.num_rooms - 1
        for pos in station.doors:
            assert station.grid.get_checked(pos).is_door

    def test_every_walkable_cell_is_connected(self, station: StationLevel) -> None:
        walkable = np.isin(station.grid.cells, WALKABLE)
        _, regions = label_regions(walkable)
        assert regions == 1

    def test_windows_replace_walls_only(self, station: StationLevel) -> None:
        assert len(set(station.windows)) == len(station.windows)
        for pos in station.windows:
            assert station.grid.get_checked(pos).is_window
            assert station.room_ids[pos] == -1

    def test_deterministic(self) -> None:
        a = create_station_pipeline(16, 12).generate(random.Random(77))
        b = create_station_pipeline(16, 12).generate(random.Random(77))
        np.testing.assert_array_equal(a.grid.cells, b.grid.cells)
        assert a.doors == b.doors
        assert a.windows == b.windows


# =============================================================================
# Factory
# =============================================================================


class TestFactory:
    def test_station_pipeline_layers(self) -> None:
        generator = create_pipeline("station")
        assert (generator.map_width, generator.map_height) == (20, 14)
        assert [type(layer) for layer in generator.layers] == [
            HullLayer,
            InternalWallLayer,
            DoorLayer,
            StairsAndSpawnLayer,
            WindowLayer,
        ]

    def test_small_station_pipeline(self) -> None:
        generator = create_pipeline("station_small")
        assert (generator.map_width, generator.map_height) == (10, 10)
        walls = generator.layers[1]
        assert isinstance(walls, InternalWallLayer)
        assert walls.max_failures == 10

    def test_size_override(self) -> None:
        generator = create_pipeline("station", width=30, height=18)
        assert (generator.map_width, generator.map_height) == (30, 18)

    def test_unknown_pipeline(self) -> None:
        with pytest.raises(ValueError, match="Unknown pipeline"):
            create_pipeline("castle")

    def test_small_station_generates(self) -> None:
        level = create_pipeline("station_small").generate(random.Random(10))
        assert level.grid.size == (10, 10)
        assert level.room_ids[level.stairs] != level.room_ids[level.spawn]
