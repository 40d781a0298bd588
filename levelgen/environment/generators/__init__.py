"""Level generation algorithms.

This package provides three independent generators:
- PipelineGenerator: Layered station generator (hull, rooms, doors, features)
- OutdoorTerrainGenerator: Land, river and settlements
- RoomsAndCorridorsGenerator: Classic dungeon-style rooms and corridors

Station levels are created by composing layers; see ``create_pipeline``:
- Station: HullLayer + InternalWallLayer + DoorLayer + StairsAndSpawnLayer
  + WindowLayer

And a reusable WFC solver for constraint-based generation:
- WFCSolver: Wave Function Collapse over weights and adjacency matrices
- OverlappingPatterns: Patterns and rules learned from an exemplar grid
"""

from .base import (
    BaseMapGenerator,
    DisconnectedAfterSettlement,
    DisconnectedRoomGraph,
    GenerationError,
    GenerationFailed,
    NoValidSpawn,
    NoValidStairs,
    RiverNotStraightEnough,
    ShapeRejected,
    StageRejected,
    StationLevel,
    TownSiteUnavailable,
    retry_generation,
)
from .dungeon import RoomsAndCorridorsGenerator, RoomsAndCorridorsLevel
from .overlapping import OverlappingPatterns
from .pipeline import (
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
from .terrain import OutdoorTerrain, OutdoorTerrainGenerator
from .wfc_solver import WFCContradiction, WFCSolver

__all__ = [
    "BaseMapGenerator",
    "DisconnectedAfterSettlement",
    "DisconnectedRoomGraph",
    "DoorLayer",
    "GenerationContext",
    "GenerationError",
    "GenerationFailed",
    "GenerationLayer",
    "HullLayer",
    "InternalWallLayer",
    "NoValidSpawn",
    "NoValidStairs",
    "OutdoorTerrain",
    "OutdoorTerrainGenerator",
    "OverlappingPatterns",
    "PipelineGenerator",
    "RiverNotStraightEnough",
    "RoomsAndCorridorsGenerator",
    "RoomsAndCorridorsLevel",
    "ShapeRejected",
    "StageRejected",
    "StairsAndSpawnLayer",
    "StationLevel",
    "TownSiteUnavailable",
    "WFCContradiction",
    "WFCSolver",
    "WindowLayer",
    "create_pipeline",
    "create_station_pipeline",
    "retry_generation",
]
