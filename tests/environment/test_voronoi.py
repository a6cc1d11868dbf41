"""Tests for the Voronoi floor partition."""

from __future__ import annotations

import random

import numpy as np

from tests.helpers import all_floor_map, map_from_ascii
from undercroft.environment.generators.pipeline.context import BuildContext
from undercroft.environment.generators.pipeline.layers.cellular import (
    CellularAutomataBuilder,
)
from undercroft.environment.map import GameMap
from undercroft.environment.tile_types import TileType
from undercroft.environment.voronoi import voronoi_regions


class TestVoronoiRegions:
    def test_single_centre_seed_claims_whole_open_map(self) -> None:
        """9x9 all-floor map, one seed at the centre: one region of 81 tiles."""
        game_map = all_floor_map(9, 9)
        centre = game_map.coordinate_to_index(4, 4)

        regions = voronoi_regions(game_map, 1, random.Random(0), seeds=[centre])

        assert list(regions) == [0]
        assert sorted(regions[0]) == list(range(81))

    def test_random_single_seed_claims_everything(self) -> None:
        game_map = all_floor_map(9, 9)

        regions = voronoi_regions(game_map, 1, random.Random(5))

        assert len(regions) == 1
        assert len(next(iter(regions.values()))) == 81

    def test_regions_partition_floor_exactly(self) -> None:
        """Union of the regions is the floor set, with no tile in two regions."""
        ctx = BuildContext.create_empty(1, 60, 30, record_history=False)
        CellularAutomataBuilder().generate(ctx, random.Random(11))
        game_map = ctx.map
        game_map.tiles[np.flatnonzero(game_map.tiles == TileType.FLOOR)[:3]] = (
            TileType.DOWN_STAIRS
        )

        regions = voronoi_regions(game_map, 16, random.Random(3))

        all_tiles = [index for members in regions.values() for index in members]
        floor = set(np.flatnonzero(game_map.tiles == TileType.FLOOR).tolist())
        assert len(all_tiles) == len(set(all_tiles))
        assert set(all_tiles) == floor

    def test_tiles_go_to_nearest_seed(self) -> None:
        game_map = map_from_ascii(["........."])
        regions = voronoi_regions(game_map, 2, random.Random(0), seeds=[0, 8])

        assert regions[0] == [0, 1, 2, 3, 4]
        assert regions[1] == [5, 6, 7, 8]

    def test_empty_regions_are_omitted(self) -> None:
        game_map = map_from_ascii(["...."])
        # Seed 1 duplicates seed 0, so it wins no ties and no tiles.
        regions = voronoi_regions(game_map, 2, random.Random(0), seeds=[0, 0])

        assert list(regions) == [0]

    def test_no_floor_gives_no_regions(self) -> None:
        assert voronoi_regions(GameMap(1, 5, 5), 4, random.Random(0)) == {}

    def test_seed_count_clamped_to_floor(self) -> None:
        game_map = map_from_ascii(["#..#"])
        regions = voronoi_regions(game_map, 10, random.Random(0))

        assert sorted(index for members in regions.values() for index in members) == [
            1,
            2,
        ]
