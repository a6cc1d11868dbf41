from __future__ import annotations

import random

import numpy as np

from undercroft.environment.distance import distance_field
from undercroft.environment.map import GameMap
from undercroft.environment.tile_types import TileType


class FixedRollRNG(random.Random):
    """A Random whose integer rolls always land on one value.

    ``randint(a, b)`` returns ``value`` clamped into ``[a, b]``, so a fixed
    value of 100 makes every 1d100 roll 100 and every 1d6 roll 6. Every
    other method behaves like a normally seeded Random.
    """

    def __init__(self, value: int, seed: int = 0) -> None:
        super().__init__(seed)
        self.value = value

    def randint(self, a: int, b: int) -> int:
        return max(a, min(b, self.value))


def map_from_ascii(rows: list[str], depth: int = 1) -> GameMap:
    """Build a map from rows of '#' (wall), '.' (floor) and '>' (stairs)."""
    height = len(rows)
    width = len(rows[0])
    game_map = GameMap(depth, width, height)
    lookup = {"#": TileType.WALL, ".": TileType.FLOOR, ">": TileType.DOWN_STAIRS}
    grid = game_map.grid()
    for y, row in enumerate(rows):
        assert len(row) == width, f"row {y} is {len(row)} wide, expected {width}"
        for x, glyph in enumerate(row):
            grid[y, x] = lookup[glyph]
    return game_map


def all_floor_map(width: int, height: int, depth: int = 1) -> GameMap:
    game_map = GameMap(depth, width, height)
    game_map.tiles[:] = TileType.FLOOR
    return game_map


def reachable_from(game_map: GameMap, start_index: int) -> np.ndarray:
    """Boolean flat array of tiles a 4-connected walk from the start reaches."""
    return np.isfinite(distance_field(game_map, [start_index]).ravel())
