from __future__ import annotations

import random

# =============================================================================
# TILE-BASED COORDINATE SYSTEMS (Always integers)
# =============================================================================

TileCoord = int  # Always integer tile position

# Level coordinates - absolute positions on a generated grid
WorldTileCoord = TileCoord  # Example: x=5, y=3
WorldTilePos = tuple[WorldTileCoord, WorldTileCoord]  # Example: (5, 3)

# Width and height of a grid or rectangle, in tiles
TileSize = tuple[TileCoord, TileCoord]  # Example: (20, 14)

# =============================================================================
# GENERATION-RELATED TYPES
# =============================================================================

# Every generator draws from a caller-supplied generator, never a global one,
# so a fixed seed reproduces the same level.
RNG = random.Random
