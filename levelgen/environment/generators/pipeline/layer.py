"""Abstract base class for generation layers.

Each layer in the pipeline implements the GenerationLayer interface and
transforms the GenerationContext in some way - synthesizing the hull,
splitting it into rooms, placing doors, stairs or windows.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import GenerationContext


class GenerationLayer(ABC):
    """Abstract base class for station generation layers.

    Layers are applied sequentially by the PipelineGenerator. Each layer
    receives a GenerationContext and modifies it in place.

    A layer that finds the level unusable raises a ``StageRejected``
    subclass; the pipeline then discards the context and starts over.
    """

    @abstractmethod
    def apply(self, ctx: GenerationContext) -> None:
        """Apply this layer's generation logic to the context.

        This method should modify the context in place. It may:
        - Modify tiles (ctx.tiles)
        - Record rooms, doors and features on the context
        - Use ctx.rng for random decisions

        Args:
            ctx: The generation context to modify.
        """
        raise NotImplementedError
