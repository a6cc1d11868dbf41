from __future__ import annotations

from typing import TypeAlias

# =============================================================================
# TILE-BASED COORDINATE SYSTEMS (Always integers)
# =============================================================================

TileCoord = int  # Always integer tile position

# Game world coordinates - absolute positions on the level map
WorldTileCoord = TileCoord  # Example: x=5, y=3
WorldTilePos = tuple[
    WorldTileCoord, WorldTileCoord
]  # Example: (5, 3) = tile 5,3 on map

# Flat row-major index into a map's tile array (y * width + x)
TileIndex = int

# =============================================================================
# GENERATION-RELATED TYPES
# =============================================================================

# Seeds accepted by the RNG provider. None means "use system entropy".
RandomSeed: TypeAlias = int | str | None

# Ordered tile index -> entity tag mapping produced by level generation.
SpawnList: TypeAlias = dict[TileIndex, str]
