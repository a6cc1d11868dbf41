"""Start, reachability and exit stages.

These run after the geometry is final. Each one needs a map with floor on it,
and all but AreaStartingPosition need a starting position from an earlier
stage.
"""

from __future__ import annotations

import logging
from enum import Enum, auto

import numpy as np

from undercroft.environment.distance import (
    cull_unreachable,
    distance_field,
    most_distant_reachable,
)
from undercroft.environment.generators.base import MapBuildError
from undercroft.environment.generators.pipeline.context import BuildContext
from undercroft.environment.generators.pipeline.layer import MetaMapBuilder
from undercroft.environment.tile_types import TileType
from undercroft.util.rng import RNG

logger = logging.getLogger(__name__)


class XStart(Enum):
    LEFT = auto()
    CENTER = auto()
    RIGHT = auto()


class YStart(Enum):
    TOP = auto()
    CENTER = auto()
    BOTTOM = auto()


class AreaStartingPosition(MetaMapBuilder):
    """Starts the player on the floor tile closest to a map anchor.

    The anchor sits one tile in from the chosen edge (or at the centre line).
    Never replaces a start an earlier stage already placed.
    """

    def __init__(self, x: XStart = XStart.CENTER, y: YStart = YStart.CENTER) -> None:
        self.x = x
        self.y = y

    def anchor(self, width: int, height: int) -> tuple[int, int]:
        match self.x:
            case XStart.LEFT:
                seed_x = 1
            case XStart.CENTER:
                seed_x = width // 2
            case XStart.RIGHT:
                seed_x = width - 2
        match self.y:
            case YStart.TOP:
                seed_y = 1
            case YStart.CENTER:
                seed_y = height // 2
            case YStart.BOTTOM:
                seed_y = height - 2
        return (seed_x, seed_y)

    def transform(self, ctx: BuildContext, rng: RNG) -> None:
        if ctx.starting_position is not None:
            logger.debug(f"Start already placed at {ctx.starting_position}")
            return

        floor = np.flatnonzero(ctx.map.tiles == TileType.FLOOR)
        if floor.size == 0:
            raise MapBuildError("AreaStartingPosition requires a map with floor")

        seed_x, seed_y = self.anchor(ctx.map.width, ctx.map.height)
        floor_y, floor_x = np.divmod(floor, ctx.map.width)
        distances = (floor_x - seed_x) ** 2 + (floor_y - seed_y) ** 2
        start_index = int(floor[np.argmin(distances)])

        ctx.set_starting_position(ctx.map.index_to_coordinate(start_index))
        ctx.take_snapshot()


class CullUnreachable(MetaMapBuilder):
    """Walls off every floor pocket the start cannot walk to.

    Spawn entries left standing on a culled tile are dropped.
    """

    def transform(self, ctx: BuildContext, rng: RNG) -> None:
        start_index = ctx.starting_index("CullUnreachable")
        culled = cull_unreachable(ctx.map, start_index)
        if culled:
            walkable = ctx.map.walkable
            ctx.spawn_list = {
                index: tag for index, tag in ctx.spawn_list.items() if walkable[index]
            }
        ctx.take_snapshot()


class DistantExit(MetaMapBuilder):
    """Turns the reachable tile furthest from the start into the down stairs.

    A map that already has down stairs (from a template, say) keeps the ones
    the start can walk to. Stairs sealed off from the start revert to floor,
    and if none are left a new exit is placed.
    """

    def __init__(self, exclude_unreachable: bool = False) -> None:
        self.exclude_unreachable = exclude_unreachable

    def transform(self, ctx: BuildContext, rng: RNG) -> None:
        start_index = ctx.starting_index("DistantExit")
        stairs = np.flatnonzero(ctx.map.tiles == TileType.DOWN_STAIRS)
        if stairs.size:
            field = distance_field(ctx.map, [start_index]).ravel()
            stranded = stairs[np.isinf(field[stairs])]
            if stranded.size:
                logger.debug(f"Clearing {stranded.size} unreachable down stairs")
                ctx.map.tiles[stranded] = TileType.FLOOR
            if stranded.size < stairs.size:
                logger.debug("Map already has a reachable exit, keeping it")
                return

        exit_index = most_distant_reachable(
            ctx.map, start_index, self.exclude_unreachable
        )
        ctx.map.tiles[exit_index] = TileType.DOWN_STAIRS
        ctx.spawn_list.pop(exit_index, None)
        ctx.take_snapshot()
