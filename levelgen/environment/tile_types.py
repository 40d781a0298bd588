"""
Cell types produced by the level generators.

Each generation stage has its own ``IntEnum``. Values are stored as uint8 in
``Grid`` arrays, so a stage that only adds cell kinds keeps the numbering of
the stage before it and can promote a grid without remapping:

- `GenerationCell`: raw pattern-synthesis output (open / closed).
- `HullCell`: an extracted ship hull (wall / floor / space).
- `LevelCell`: a finished station level. Extends `HullCell` with doors,
  windows, stairs and the player spawn. The door stage uses every member
  except the windows.
- `WorldCell`: outdoor land / water overlay.
- `RoomsAndCorridorsCell`: the rooms-and-corridors dungeon.

Glyph tables render any grid as text for debugging and test fixtures.
"""

from enum import IntEnum, auto

from levelgen.util.coordinates import Axis


class GenerationCell(IntEnum):
    CLOSED = 0
    OPEN = auto()


class HullCell(IntEnum):
    WALL = 0
    FLOOR = auto()
    SPACE = auto()


class LevelCell(IntEnum):
    # The first three values match HullCell.
    WALL = 0
    FLOOR = auto()
    SPACE = auto()
    DOOR_X = auto()  # Passage runs along the x axis (door in a vertical wall)
    DOOR_Y = auto()  # Passage runs along the y axis (door in a horizontal wall)
    WINDOW_X = auto()
    WINDOW_Y = auto()
    STAIRS = auto()
    SPAWN = auto()

    @property
    def is_door(self) -> bool:
        return self in (LevelCell.DOOR_X, LevelCell.DOOR_Y)

    @property
    def is_window(self) -> bool:
        return self in (LevelCell.WINDOW_X, LevelCell.WINDOW_Y)


def door_for_axis(axis: Axis) -> LevelCell:
    return LevelCell.DOOR_X if axis is Axis.X else LevelCell.DOOR_Y


def window_for_axis(axis: Axis) -> LevelCell:
    return LevelCell.WINDOW_X if axis is Axis.X else LevelCell.WINDOW_Y


class WorldCell(IntEnum):
    LAND = 0
    WATER = auto()


class RoomsAndCorridorsCell(IntEnum):
    FLOOR = 0
    WALL = auto()
    DOOR = auto()


# =============================================================================
# TEXT GLYPHS
# =============================================================================

GENERATION_LEGEND: dict[str, GenerationCell] = {
    ".": GenerationCell.OPEN,
    "#": GenerationCell.CLOSED,
}

GENERATION_GLYPHS: dict[GenerationCell, str] = {
    cell: ch for ch, cell in GENERATION_LEGEND.items()
}

HULL_LEGEND: dict[str, HullCell] = {
    "#": HullCell.WALL,
    ".": HullCell.FLOOR,
    " ": HullCell.SPACE,
}

HULL_GLYPHS: dict[HullCell, str] = {cell: ch for ch, cell in HULL_LEGEND.items()}

LEVEL_LEGEND: dict[str, LevelCell] = {
    "#": LevelCell.WALL,
    ".": LevelCell.FLOOR,
    " ": LevelCell.SPACE,
    "|": LevelCell.DOOR_X,
    "-": LevelCell.DOOR_Y,
    "=": LevelCell.WINDOW_X,
    '"': LevelCell.WINDOW_Y,
    ">": LevelCell.STAIRS,
    "@": LevelCell.SPAWN,
}

LEVEL_GLYPHS: dict[LevelCell, str] = {cell: ch for ch, cell in LEVEL_LEGEND.items()}

WORLD_LEGEND: dict[str, WorldCell] = {
    ".": WorldCell.LAND,
    "~": WorldCell.WATER,
}

WORLD_GLYPHS: dict[WorldCell, str] = {cell: ch for ch, cell in WORLD_LEGEND.items()}

ROOMS_AND_CORRIDORS_LEGEND: dict[str, RoomsAndCorridorsCell] = {
    ".": RoomsAndCorridorsCell.FLOOR,
    "#": RoomsAndCorridorsCell.WALL,
    "+": RoomsAndCorridorsCell.DOOR,
}

ROOMS_AND_CORRIDORS_GLYPHS: dict[RoomsAndCorridorsCell, str] = {
    cell: ch for ch, cell in ROOMS_AND_CORRIDORS_LEGEND.items()
}
