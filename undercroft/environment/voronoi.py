"""Nearest-seed partition of a map's floor tiles.

Spawning uses these regions as buckets so monsters and items spread across
the whole level instead of piling up in one corner.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from undercroft.environment.map import GameMap
from undercroft.environment.tile_types import TileType
from undercroft.types import TileIndex
from undercroft.util.rng import RNG


def voronoi_regions(
    game_map: GameMap,
    seed_count: int,
    rng: RNG,
    seeds: Sequence[TileIndex] | None = None,
) -> dict[int, list[TileIndex]]:
    """Partition the map's floor tiles into regions around random seeds.

    Every FLOOR tile is assigned to the seed with the smallest Chebyshev
    distance; ties go to the seed listed first.

    Args:
        game_map: The map whose floor tiles are partitioned.
        seed_count: How many seeds to scatter. Clamped to the floor tile count.
        rng: Random source used to pick seed tiles.
        seeds: Explicit seed tile indices. When given, ``seed_count`` and
            ``rng`` are not used.

    Returns:
        Region id -> sorted tile indices. Regions that won no tiles are
        omitted, so ids may have gaps.
    """
    floor = np.flatnonzero(game_map.tiles == TileType.FLOOR)
    if floor.size == 0:
        return {}

    if seeds is None:
        count = min(seed_count, int(floor.size))
        if count <= 0:
            return {}
        seed_indices = np.array(rng.sample(floor.tolist(), count), dtype=np.int64)
    else:
        seed_indices = np.asarray(seeds, dtype=np.int64)
        if seed_indices.size == 0:
            return {}

    floor_y, floor_x = np.divmod(floor, game_map.width)
    seed_y, seed_x = np.divmod(seed_indices, game_map.width)

    # (floor tiles, seeds) distance matrix; argmin keeps the first seed on ties.
    distances = np.maximum(
        np.abs(floor_x[:, None] - seed_x[None, :]),
        np.abs(floor_y[:, None] - seed_y[None, :]),
    )
    owner = np.argmin(distances, axis=1)

    regions: dict[int, list[TileIndex]] = {}
    for region_id in range(seed_indices.size):
        members = floor[owner == region_id]
        if members.size:
            regions[region_id] = members.tolist()
    return regions
