"""Factory functions for creating pre-configured pipelines.

These functions provide convenient ways to create common pipeline
configurations without needing to manually assemble layers.

Currently implemented:
- "station": Orbital Decay station level (20x14 by default)
- "station_small": The same pipeline with the smaller room limits
  (10x10 by default)
"""

from __future__ import annotations

from levelgen import config

from .layers import (
    DoorLayer,
    HullLayer,
    InternalWallLayer,
    StairsAndSpawnLayer,
    WindowLayer,
)
from .pipeline import PipelineGenerator


def create_pipeline(
    name: str,
    width: int | None = None,
    height: int | None = None,
    max_attempts: int = config.STATION_MAX_ATTEMPTS,
) -> PipelineGenerator:
    """Create a pre-configured pipeline by name.

    Available pipelines:
    - "station": Full-size station level
    - "station_small": Small station level

    Args:
        name: Name of the pipeline configuration to use.
        width: Level width in tiles. Defaults to the configured size for the
            named pipeline.
        height: Level height in tiles. Same default as width.
        max_attempts: Whole-pipeline restarts allowed.

    Returns:
        A configured PipelineGenerator ready to generate levels.

    Raises:
        ValueError: If the pipeline name is not recognized.
    """
    if name == "station":
        return create_station_pipeline(
            config.STATION_WIDTH if width is None else width,
            config.STATION_HEIGHT if height is None else height,
            max_attempts=max_attempts,
        )
    if name == "station_small":
        return create_station_pipeline(
            config.SMALL_STATION_WIDTH if width is None else width,
            config.SMALL_STATION_HEIGHT if height is None else height,
            small=True,
            max_attempts=max_attempts,
        )
    raise ValueError(f"Unknown pipeline name: {name!r}")


def create_station_pipeline(
    width: int = config.STATION_WIDTH,
    height: int = config.STATION_HEIGHT,
    small: bool = False,
    max_attempts: int = config.STATION_MAX_ATTEMPTS,
) -> PipelineGenerator:
    """Create a station pipeline with default configuration.

    The station pipeline generates:
    1. A hull synthesized from the exemplar (HullLayer)
    2. Internal walls dividing it into rooms (InternalWallLayer)
    3. Doors connecting every room (DoorLayer)
    4. Stairs and player spawn in different rooms (StairsAndSpawnLayer)
    5. Internal and external windows (WindowLayer)

    Args:
        width: Level width in tiles.
        height: Level height in tiles.
        small: Use the room limits tuned for the small station.
        max_attempts: Whole-pipeline restarts allowed.

    Returns:
        A configured PipelineGenerator.
    """
    layers = [
        # 1. Hull outline
        HullLayer(),
        # 2. Split into rooms
        InternalWallLayer(small=small),
        # 3. Connect rooms
        DoorLayer(),
        # 4. Stairs and spawn
        StairsAndSpawnLayer(),
        # 5. Windows
        WindowLayer(),
    ]

    return PipelineGenerator(
        layers=layers,
        map_width=width,
        map_height=height,
        max_attempts=max_attempts,
    )
