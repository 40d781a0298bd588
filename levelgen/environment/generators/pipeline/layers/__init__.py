"""Generation layers for the station pipeline.

Each layer transforms the GenerationContext in a specific way:
- HullLayer: Synthesizes the hull outline from the exemplar
- InternalWallLayer: Splits the hull into rooms
- DoorLayer: Connects every room with doors
- StairsAndSpawnLayer: Places the stairs and the player spawn
- WindowLayer: Adds internal and external windows
"""

from .features import StairsAndSpawnLayer
from .hull import HullLayer
from .internal_walls import InternalWallLayer
from .rooms import DoorLayer
from .windows import WindowLayer

__all__ = [
    "DoorLayer",
    "HullLayer",
    "InternalWallLayer",
    "StairsAndSpawnLayer",
    "WindowLayer",
]
