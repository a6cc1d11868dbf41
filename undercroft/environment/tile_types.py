"""
Tile types for generated levels.

This module defines:
- `TileType`: the closed set of tile kinds a level is built from. `GameMap`
  stores a flat NumPy array of these values, one byte per tile.
- Lookup tables indexed by `TileType` value holding each type's intrinsic
  properties (walkable, transparent, debug glyph).
- Helper functions that turn a whole tile array into a property array in one
  vectorized lookup. Generation stages lean on these for flood fills,
  partitioning and culling instead of testing tiles one at a time.
"""

from enum import IntEnum

import numpy as np


class TileType(IntEnum):
    """Kinds of tile a level is made of.

    WALL must stay 0: new maps are zero-filled walls.
    """

    WALL = 0
    FLOOR = 1
    DOWN_STAIRS = 2


# Defines the intrinsic data for a *type* of tile.
TileTypeData = np.dtype(
    [
        ("walkable", bool),
        ("transparent", bool),  # Line of sight
        ("glyph", "U1"),  # Debug/ASCII rendering
        ("display_name", "U32"),
    ]
)

_TILE_TYPE_DATA = np.array(
    [
        (False, False, "#", "Wall"),  # TileType.WALL
        (True, True, ".", "Floor"),  # TileType.FLOOR
        (True, True, ">", "Down Stairs"),  # TileType.DOWN_STAIRS
    ],
    dtype=TileTypeData,
)

# --- Pre-calculated Property Arrays for Efficient Lookups ---

_tile_type_properties_walkable = _TILE_TYPE_DATA["walkable"].copy()
_tile_type_properties_transparent = _TILE_TYPE_DATA["transparent"].copy()
_tile_type_properties_glyph = _TILE_TYPE_DATA["glyph"].copy()


def get_walkable_map(tile_types: np.ndarray) -> np.ndarray:
    """
    Converts an array of TileType values into a boolean array of walkability.
    True means the tile does not block movement.
    """
    return _tile_type_properties_walkable[tile_types]


def get_transparent_map(tile_types: np.ndarray) -> np.ndarray:
    """
    Converts an array of TileType values into a boolean array of transparency.
    True means the tile does not block sight.
    """
    return _tile_type_properties_transparent[tile_types]


def get_glyph_map(tile_types: np.ndarray) -> np.ndarray:
    """Converts an array of TileType values into an array of ASCII glyphs."""
    return _tile_type_properties_glyph[tile_types]


def get_tile_type_name(tile_type: int) -> str:
    """
    Get the human-readable name of a tile type.

    Args:
        tile_type: The TileType value

    Returns:
        The name of the tile type (e.g., "Wall", "Floor")
    """
    if 0 <= tile_type < len(_TILE_TYPE_DATA):
        return str(_TILE_TYPE_DATA["display_name"][tile_type])
    return f"Unknown Tile (ID: {tile_type})"
