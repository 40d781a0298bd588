"""Pipeline-based station generation.

This package provides a layered architecture for compositional level
generation. Each layer transforms a shared GenerationContext, and the
pipeline outputs a StationLevel.

Example usage:
    from levelgen.environment.generators.pipeline import create_pipeline

    generator = create_pipeline("station", width=20, height=14)
    level = generator.generate(rng)

The pipeline can also be assembled manually for custom configurations:
    from levelgen.environment.generators.pipeline import (
        PipelineGenerator,
        HullLayer,
        InternalWallLayer,
        DoorLayer,
        StairsAndSpawnLayer,
    )

    generator = PipelineGenerator(
        layers=[
            HullLayer(),
            InternalWallLayer(min_room_area=20),
            DoorLayer(),
            StairsAndSpawnLayer(),
        ],
        map_width=30,
        map_height=20,
    )
"""

from .context import GenerationContext
from .factory import create_pipeline, create_station_pipeline
from .layer import GenerationLayer
from .layers import (
    DoorLayer,
    HullLayer,
    InternalWallLayer,
    StairsAndSpawnLayer,
    WindowLayer,
)
from .pipeline import PipelineGenerator

__all__ = [
    "DoorLayer",
    "GenerationContext",
    "GenerationLayer",
    "HullLayer",
    "InternalWallLayer",
    "PipelineGenerator",
    "StairsAndSpawnLayer",
    "WindowLayer",
    "create_pipeline",
    "create_station_pipeline",
]
