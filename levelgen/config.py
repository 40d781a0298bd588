"""
Configuration constants.

Centralizes all magic numbers and configuration values used by the level
generators. Organized by functional area for easy maintenance. Every generator
takes these as constructor defaults, so tests and callers can override any of
them without touching this module.
"""

# =============================================================================
# RETRY CAPS
# =============================================================================
# Every speculative stage restarts on rejection. The caps are large enough that
# a well-formed exemplar never hits them; they exist so a bad configuration
# fails with GenerationFailed instead of spinning forever.

WFC_MAX_ATTEMPTS = 1000  # Pattern collapse restarts after a contradiction
HULL_MAX_ATTEMPTS = 1000  # Synthesize-and-extract rounds before giving up
STATION_MAX_ATTEMPTS = 200  # Whole hull -> doors -> features restarts
TERRAIN_MAX_ATTEMPTS = 500  # Land -> river -> settlements restarts

# =============================================================================
# STATION HULL (pattern synthesis)
# =============================================================================

# Hand-drawn exemplar of a ship hull. '.' is open space, '#' is closed.
# 16 columns x 15 rows.
# fmt: off
HULL_EXEMPLAR: tuple[str, ...] = (
    "................",
    "...###..........",
    "..##.##.........",
    "..#...#...####..",
    "..#...#...#..#..",
    "..#...#...#..#..",
    "..#...#...#..#..",
    "..#...#...#..#..",
    "..#...#...#..#..",
    "..#...#####..#..",
    "..#..........#..",
    "..#..........#..",
    "..#....####..#..",
    "..######..####..",
    "................",
)
# fmt: on

HULL_PATTERN_SIZE = 4  # Side length of the overlapping N x N patterns

# Hull acceptance: at least this fraction of all cells must be floor...
HULL_MIN_FLOOR_FRACTION = (1, 2)  # numerator, denominator (integer arithmetic)
# ...and the non-space bounding box may leave at most this many cells of
# combined horizontal + vertical margin inside the requested size.
HULL_MAX_MARGIN = 8

# Station sizes used by the game
STATION_WIDTH = 20
STATION_HEIGHT = 14
SMALL_STATION_WIDTH = 10
SMALL_STATION_HEIGHT = 10

# =============================================================================
# INTERNAL WALLS
# =============================================================================

# Floor cells that must remain on each side of a new internal wall line
INTERNAL_WALL_MIN_ROOM_SPAN = 3
# Smallest room (in floor cells) a split may leave behind
INTERNAL_WALL_MIN_ROOM_AREA = 12
# Consecutive rejected splits before the placer stops
INTERNAL_WALL_MAX_FAILURES = 20

SMALL_INTERNAL_WALL_MIN_ROOM_SPAN = 3
SMALL_INTERNAL_WALL_MIN_ROOM_AREA = 9
SMALL_INTERNAL_WALL_MAX_FAILURES = 10

# =============================================================================
# DOORS & WINDOWS
# =============================================================================
# These ratios have no deeper meaning than "looked right in play". They are
# tunables, not invariants.

# Share of non-spanning-tree door candidates promoted to extra doors,
# rounding up: (n * num + den - 1) // den
EXTRA_DOOR_FRACTION = (1, 2)

# Share of wall segments that receive a window (rounding down)
INTERNAL_WINDOW_FRACTION = (1, 4)
EXTERNAL_WINDOW_FRACTION = (2, 3)
# Chance of a second window on a chosen external segment
EXTERNAL_SECOND_WINDOW_CHANCE = 0.5

# Share of the farthest enclosed cells from the stairs considered for spawn
SPAWN_FARTHEST_FRACTION = (1, 4)

# =============================================================================
# OUTDOOR TERRAIN
# =============================================================================

OUTDOOR_WIDTH = 120
OUTDOOR_HEIGHT = 60

LAND_NOISE_FREQUENCY = 0.05  # Sample spacing of the height noise
LAND_HEIGHT_SCALE = 1.0  # Noise [-1, 1] is mapped to [offset, offset + scale]
LAND_HEIGHT_OFFSET = 1.0
LAND_HEIGHT_DIFF = 0.0  # Per-column tilt; currently flat

RIVER_EDGE_MARGIN = 5  # Rows at the top and bottom the river should avoid
RIVER_EDGE_PENALTY = 1000.0  # Extra step cost inside that margin
RIVER_STRAIGHTNESS_WINDOW = 8  # Points per window checked for staircases
RIVER_WIDEN_ROUNDS = 2  # 8-directional dilation rounds

TOWN_SIZE = 20  # Settlements are TOWN_SIZE x TOWN_SIZE squares
# Target positions along the river, as fractions of its length
SETTLEMENT_TARGETS: tuple[tuple[int, int], ...] = ((1, 4), (4, 5))
SETTLEMENT_SEARCH_WINDOW = 10  # +/- river indices searched around each target
OUTDOOR_LAND_REGIONS = 2  # Connected land regions required after settlement

# =============================================================================
# ROOMS AND CORRIDORS
# =============================================================================

DUNGEON_NUM_ROOM_ATTEMPTS = 50
DUNGEON_MIN_ROOM_SIZE = (5, 5)  # Inclusive lower bound, including walls
DUNGEON_MAX_ROOM_SIZE = (11, 9)  # Exclusive upper bound, including walls
DUNGEON_DOOR_CHANCE = 0.5
