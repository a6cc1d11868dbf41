from __future__ import annotations

import numpy as np

from undercroft.environment import tile_types
from undercroft.environment.tile_types import TileType
from undercroft.types import TileCoord, TileIndex, WorldTilePos


class GameMap:
    """A level's tile grid.

    Tiles are stored as one flat, row-major ``uint8`` array so that a tile's
    index is ``y * width + x``. ``revealed`` and ``visible`` are the matching
    fog-of-war arrays; generation allocates them but leaves them to the game.

    The map is a plain value type. Generators and transformers write
    ``tiles`` directly; this class only answers questions about it.
    """

    def __init__(self, depth: int, width: TileCoord, height: TileCoord) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Map dimensions must be positive, got {width}x{height}")

        self._width: TileCoord = width
        self._height: TileCoord = height
        self.depth = depth

        size = width * height
        self.tiles = np.full(size, fill_value=TileType.WALL, dtype=np.uint8)

        # Which tiles have been seen at least once.
        self.revealed = np.zeros(size, dtype=bool)
        # Which tiles are in the player's field of view right now.
        self.visible = np.zeros(size, dtype=bool)

    @property
    def width(self) -> TileCoord:
        return self._width

    @property
    def height(self) -> TileCoord:
        return self._height

    @property
    def size(self) -> int:
        return self._width * self._height

    # -------------------------------------------------------------------------
    # Coordinates
    # -------------------------------------------------------------------------

    def in_bounds(self, x: TileCoord, y: TileCoord) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def coordinate_to_index(self, x: TileCoord, y: TileCoord) -> TileIndex:
        """Map (x, y) to the flat tile index.

        Raises:
            IndexError: If (x, y) lies outside the map. Hot loops should check
                ``in_bounds`` (or clip their ranges) themselves.
        """
        if not self.in_bounds(x, y):
            raise IndexError(
                f"({x}, {y}) is outside a {self._width}x{self._height} map"
            )
        return y * self._width + x

    def index_to_coordinate(self, index: TileIndex) -> WorldTilePos:
        """Inverse of ``coordinate_to_index``."""
        if not 0 <= index < self.size:
            raise IndexError(f"Tile index {index} is outside a map of {self.size}")
        y, x = divmod(index, self._width)
        return (x, y)

    # -------------------------------------------------------------------------
    # Tile classification
    # -------------------------------------------------------------------------

    def is_opaque(self, index: TileIndex) -> bool:
        return not bool(tile_types.get_transparent_map(self.tiles[index]))

    def is_blocking(self, index: TileIndex) -> bool:
        return not bool(tile_types.get_walkable_map(self.tiles[index]))

    @property
    def walkable(self) -> np.ndarray:
        """Flat boolean array, True where the tile does not block movement."""
        return tile_types.get_walkable_map(self.tiles)

    @property
    def transparent(self) -> np.ndarray:
        """Flat boolean array, True where the tile does not block sight."""
        return tile_types.get_transparent_map(self.tiles)

    def grid(self) -> np.ndarray:
        """A (height, width) view of ``tiles``. Writes go through to the map."""
        return self.tiles.reshape(self._height, self._width)

    def count(self, tile_type: TileType) -> int:
        return int(np.count_nonzero(self.tiles == tile_type))

    # -------------------------------------------------------------------------
    # Copies and debugging
    # -------------------------------------------------------------------------

    def copy(self) -> GameMap:
        """Deep copy. The clone shares no arrays with this map."""
        clone = GameMap(self.depth, self._width, self._height)
        clone.tiles[:] = self.tiles
        clone.revealed[:] = self.revealed
        clone.visible[:] = self.visible
        return clone

    def to_ascii(self, overlay: dict[TileIndex, str] | None = None) -> str:
        """Render the map one glyph per tile, rows separated by newlines.

        Args:
            overlay: Optional tile index -> single character drawn on top of
                the tile glyph (e.g. '@' for the start).
        """
        glyphs = tile_types.get_glyph_map(self.tiles).copy()
        if overlay:
            for index, glyph in overlay.items():
                glyphs[index] = glyph
        rows = glyphs.reshape(self._height, self._width)
        return "\n".join("".join(row) for row in rows)

    def __repr__(self) -> str:
        return (
            f"GameMap(depth={self.depth}, width={self._width}, "
            f"height={self._height})"
        )
