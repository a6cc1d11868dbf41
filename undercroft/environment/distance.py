"""Graph-distance search over a map's walkable tiles.

The distance field is a Dijkstra map computed by ``tcod.path.dijkstra2d``
with unit step cost, so it matches a breadth-first flood fill: walls are never
entered, and each step to a 4-connected (optionally 8-connected) walkable
neighbour costs 1.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import numpy as np
import tcod.path

from undercroft.environment.map import GameMap
from undercroft.environment.tile_types import TileType
from undercroft.types import TileIndex

logger = logging.getLogger(__name__)

_UNREACHED = np.iinfo(np.int32).max


def distance_field(
    game_map: GameMap,
    starts: Iterable[TileIndex],
    diagonal: bool = False,
) -> np.ndarray:
    """Compute the step distance from the nearest start to every tile.

    Args:
        game_map: The map to search.
        starts: One or more tile indices to seed the search from.
        diagonal: Also step to the 4 diagonal neighbours.

    Returns:
        Float array of shape (height, width). Unreachable tiles are ``inf``.
    """
    cost = game_map.walkable.reshape(game_map.height, game_map.width).astype(
        np.int32
    )
    distance = tcod.path.maxarray((game_map.height, game_map.width), dtype=np.int32)

    seeded = False
    for start in starts:
        x, y = game_map.index_to_coordinate(start)
        distance[y, x] = 0
        seeded = True
    if not seeded:
        raise ValueError("distance_field needs at least one start tile")

    tcod.path.dijkstra2d(
        distance, cost, cardinal=1, diagonal=1 if diagonal else None, out=distance
    )

    field = distance.astype(np.float64)
    field[distance == _UNREACHED] = np.inf
    return field


def cull_unreachable(
    game_map: GameMap, start_index: TileIndex, diagonal: bool = False
) -> int:
    """Turn every walkable tile the start cannot reach into wall.

    Returns:
        How many tiles were culled.
    """
    field = distance_field(game_map, [start_index], diagonal=diagonal).ravel()
    unreachable = np.isinf(field) & game_map.walkable
    culled = int(np.count_nonzero(unreachable))
    game_map.tiles[unreachable] = TileType.WALL
    if culled:
        logger.debug(f"Culled {culled} unreachable tiles")
    return culled


def most_distant_reachable(
    game_map: GameMap,
    start_index: TileIndex,
    exclude_unreachable: bool,
    diagonal: bool = False,
) -> TileIndex:
    """Find the reachable tile furthest (in steps) from the start.

    Args:
        game_map: The map to search.
        start_index: Where the search starts.
        exclude_unreachable: Cull walkable tiles the start cannot reach
            (they become walls) so every remaining floor tile is connected.
        diagonal: Allow 8-directional steps.

    Returns:
        The index of a tile with maximum finite distance. Ties resolve to the
        first such tile in scan order. If nothing but the start is reachable,
        the start itself.
    """
    field = distance_field(game_map, [start_index], diagonal=diagonal).ravel()

    unreachable = np.isinf(field)
    if exclude_unreachable:
        culled = unreachable & game_map.walkable
        game_map.tiles[culled] = TileType.WALL
        if np.any(culled):
            logger.debug(f"Culled {int(np.count_nonzero(culled))} unreachable tiles")

    candidates = np.where(unreachable, -1.0, field)
    best = int(np.argmax(candidates))
    if candidates[best] <= 0:
        return start_index
    return best
