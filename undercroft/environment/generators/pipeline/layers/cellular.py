"""Cave generation with random fill and cellular automata smoothing.

Algorithm:
1. Every non-border tile rolls 1d100 and starts as floor on
   ``floor_chance`` or less, otherwise wall. The border stays wall.
2. Each smoothing pass counts the walls in every non-border tile's 8-tile
   Moore neighbourhood. More than ``wall_limit`` walls, or none at all,
   makes the tile a wall; anything else makes it floor. The "none at all"
   rule removes lone floor specks; the "more than" rule erodes thin walls.

Every pass reads the previous grid and writes a new one, so the result does
not depend on scan order.

Tuning guide:
- floor_chance=45, passes=15 -> the classic cave look, large open blobs
- floor_chance=40, passes=5  -> tighter, more broken caverns
- floor_chance=55, passes=15 -> mostly open ground with pillars
"""

from __future__ import annotations

import logging

import numpy as np

from undercroft import config
from undercroft.environment.generators.pipeline.context import BuildContext
from undercroft.environment.generators.pipeline.layer import InitialMapBuilder
from undercroft.environment.tile_types import TileType
from undercroft.util.dice import roll_dice
from undercroft.util.rng import RNG

logger = logging.getLogger(__name__)


class CellularAutomataBuilder(InitialMapBuilder):
    """Builds an organic cave system from noise."""

    def __init__(
        self,
        floor_chance: int = config.CA_FLOOR_CHANCE,
        passes: int = config.CA_SMOOTHING_PASSES,
        wall_limit: int = config.CA_WALL_NEIGHBOUR_LIMIT,
    ) -> None:
        """Initialize the cave builder.

        Args:
            floor_chance: Percent chance (out of 100) a tile starts as floor.
            passes: Number of smoothing passes.
            wall_limit: A tile with more wall neighbours than this turns wall.
        """
        self.floor_chance = floor_chance
        self.passes = passes
        self.wall_limit = wall_limit

    def generate(self, ctx: BuildContext, rng: RNG) -> None:
        """Fill the map with noise, then smooth it into caves.

        Args:
            ctx: The build context to fill in.
            rng: Random source for the initial fill.
        """
        grid = ctx.map.grid()
        self.random_fill(grid, rng)
        ctx.take_snapshot()

        for _ in range(self.passes):
            grid[:, :] = self.smooth(grid)
            ctx.take_snapshot()

        logger.debug(
            f"Cellular automata: {ctx.map.count(TileType.FLOOR)} floor tiles "
            f"after {self.passes} passes"
        )

    def random_fill(self, grid: np.ndarray, rng: RNG) -> None:
        """Roll every non-border tile of a (height, width) grid."""
        height, width = grid.shape
        grid[:, :] = TileType.WALL
        for y in range(1, height - 1):
            for x in range(1, width - 1):
                if roll_dice(rng, 1, 100) <= self.floor_chance:
                    grid[y, x] = TileType.FLOOR

    def smooth(self, grid: np.ndarray) -> np.ndarray:
        """Run one smoothing pass and return the new grid."""
        height, width = grid.shape
        result = grid.copy()
        if height < 3 or width < 3:
            return result

        walls = (grid == TileType.WALL).astype(np.int8)
        neighbours = np.zeros((height - 2, width - 2), dtype=np.int8)
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                neighbours += walls[1 + dy : height - 1 + dy, 1 + dx : width - 1 + dx]

        becomes_wall = (neighbours > self.wall_limit) | (neighbours == 0)
        result[1:-1, 1:-1] = np.where(becomes_wall, TileType.WALL, TileType.FLOOR)
        return result
