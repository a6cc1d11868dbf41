"""Room-based layout stages.

Room generation is split across stages: SimpleRoomsBuilder only decides
where rooms go, RoomDrawer rasterizes them, DoglegCorridors joins them and
RoomBasedStartingPosition puts the player in the first one. Later stages
can therefore swap any one of those steps for a different algorithm.
"""

from __future__ import annotations

import logging

import numpy as np

from undercroft import config
from undercroft.environment.generators.pipeline.context import BuildContext
from undercroft.environment.generators.pipeline.layer import (
    InitialMapBuilder,
    MetaMapBuilder,
)
from undercroft.environment.tile_types import TileType
from undercroft.util.coordinates import Rect
from undercroft.util.dice import roll_dice
from undercroft.util.rng import RNG

logger = logging.getLogger(__name__)


class SimpleRoomsBuilder(InitialMapBuilder):
    """Scatters non-overlapping rectangular rooms by rejection sampling.

    Writes no tiles. The rooms land in ``ctx.rooms`` for RoomDrawer.
    """

    def __init__(
        self,
        max_rooms: int = config.ROOMS_MAX_ROOMS,
        min_size: int = config.ROOMS_MIN_SIZE,
        max_size: int = config.ROOMS_MAX_SIZE,
    ) -> None:
        self.max_rooms = max_rooms
        self.min_size = min_size
        self.max_size = max_size

    def generate(self, ctx: BuildContext, rng: RNG) -> None:
        rooms: list[Rect] = []
        width, height = ctx.map.width, ctx.map.height

        for _ in range(self.max_rooms):
            w = rng.randint(self.min_size, self.max_size)
            h = rng.randint(self.min_size, self.max_size)

            # Leave the outermost row and column of the map as wall.
            if width - w - 1 < 1 or height - h - 1 < 1:
                continue
            x = roll_dice(rng, 1, width - w - 1) - 1
            y = roll_dice(rng, 1, height - h - 1) - 1

            new_room = Rect(x, y, w, h)
            if any(new_room.intersects(other) for other in rooms):
                continue
            rooms.append(new_room)

        logger.debug(f"Placed {len(rooms)} of {self.max_rooms} proposed rooms")
        ctx.rooms = rooms


class RoomDrawer(MetaMapBuilder):
    """Writes floor into the interior of every room."""

    def transform(self, ctx: BuildContext, rng: RNG) -> None:
        rooms = ctx.require_rooms("RoomDrawer")
        for room in rooms:
            carve_room(ctx.map.grid(), room)
            ctx.take_snapshot()


class DoglegCorridors(MetaMapBuilder):
    """Joins each room to the previous one with an L-shaped corridor.

    A coin flip decides whether the corridor runs horizontally first or
    vertically first.
    """

    def transform(self, ctx: BuildContext, rng: RNG) -> None:
        rooms = ctx.require_rooms("DoglegCorridors")
        grid = ctx.map.grid()
        for prev_room, new_room in zip(rooms, rooms[1:], strict=False):
            prev_x, prev_y = prev_room.center()
            new_x, new_y = new_room.center()
            if bool(rng.getrandbits(1)):
                carve_h_tunnel(grid, prev_x, new_x, prev_y)
                carve_v_tunnel(grid, prev_y, new_y, new_x)
            else:
                carve_v_tunnel(grid, prev_y, new_y, prev_x)
                carve_h_tunnel(grid, prev_x, new_x, new_y)
            ctx.take_snapshot()


class RoomBasedStartingPosition(MetaMapBuilder):
    """Starts the player in the centre of the first room."""

    def transform(self, ctx: BuildContext, rng: RNG) -> None:
        rooms = ctx.require_rooms("RoomBasedStartingPosition")
        ctx.set_starting_position(rooms[0].center())


# =============================================================================
# Carving helpers. All take a (height, width) grid and clip to its bounds.
# =============================================================================


def carve_room(grid: np.ndarray, room: Rect) -> None:
    height, width = grid.shape
    x_start, x_end = max(room.x1 + 1, 0), min(room.x2, width)
    y_start, y_end = max(room.y1 + 1, 0), min(room.y2, height)
    if x_start < x_end and y_start < y_end:
        grid[y_start:y_end, x_start:x_end] = TileType.FLOOR


def carve_h_tunnel(grid: np.ndarray, x1: int, x2: int, y: int) -> None:
    height, width = grid.shape
    if not 0 <= y < height:
        return
    h_slice = slice(max(min(x1, x2), 0), min(max(x1, x2) + 1, width))
    grid[y, h_slice] = TileType.FLOOR


def carve_v_tunnel(grid: np.ndarray, y1: int, y2: int, x: int) -> None:
    height, width = grid.shape
    if not 0 <= x < width:
        return
    v_slice = slice(max(min(y1, y2), 0), min(max(y1, y2) + 1, height))
    grid[v_slice, x] = TileType.FLOOR
