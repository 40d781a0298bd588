"""Pipeline generator that orchestrates layer-based station generation.

The PipelineGenerator runs a sequence of GenerationLayers, each transforming
a shared GenerationContext. This enables compositional generation where each
layer focuses on one aspect of the level.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from levelgen import config
from levelgen.environment.generators.base import (
    BaseMapGenerator,
    StationLevel,
    retry_generation,
)
from levelgen.types import RNG, TileCoord

from .context import GenerationContext

if TYPE_CHECKING:
    from .layer import GenerationLayer

logger = logging.getLogger(__name__)


class PipelineGenerator(BaseMapGenerator[StationLevel]):
    """Station generator that runs layers sequentially on a shared context.

    The pipeline creates an empty GenerationContext and passes it through
    each layer in order. If a layer rejects the level, the whole context is
    discarded and the layers run again on a fresh one, drawing further from
    the same RNG.

    Example:
        generator = PipelineGenerator(
            layers=[
                HullLayer(),
                InternalWallLayer(),
                DoorLayer(),
                StairsAndSpawnLayer(),
                WindowLayer(),
            ],
            map_width=20,
            map_height=14,
        )
        level = generator.generate(rng)

    Attributes:
        layers: List of GenerationLayer instances to apply.
        max_attempts: Restarts allowed before giving up.
    """

    def __init__(
        self,
        layers: list[GenerationLayer],
        map_width: TileCoord,
        map_height: TileCoord,
        max_attempts: int = config.STATION_MAX_ATTEMPTS,
    ) -> None:
        """Initialize the pipeline generator.

        Args:
            layers: List of GenerationLayer instances to apply in order.
            map_width: Width of the level in tiles.
            map_height: Height of the level in tiles.
            max_attempts: Whole-pipeline restarts allowed before
                GenerationFailed is raised.
        """
        super().__init__(map_width, map_height)
        self.layers = layers
        self.max_attempts = max_attempts

    def _run_layers(self, rng: RNG) -> StationLevel:
        ctx = GenerationContext.create_empty(
            width=self.map_width,
            height=self.map_height,
            rng=rng,
        )
        for layer in self.layers:
            layer.apply(ctx)
        return ctx.to_station_level()

    def generate(self, rng: RNG) -> StationLevel:
        """Generate a station level by running all layers in sequence.

        Raises:
            GenerationFailed: If every attempt was rejected by some layer.
        """
        level = retry_generation(
            "station", lambda: self._run_layers(rng), self.max_attempts
        )
        logger.info(
            f"Generated {self.map_width}x{self.map_height} station: "
            f"{level.num_rooms} rooms, {len(level.doors)} doors, "
            f"{len(level.windows)} windows"
        )
        return level
