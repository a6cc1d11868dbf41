"""Tests for prefab levels and prefab sections."""

from __future__ import annotations

import logging
import random

import numpy as np
import pytest

from tests.helpers import all_floor_map, reachable_from
from undercroft.environment.generators.base import MapBuildError
from undercroft.environment.generators.pipeline.context import BuildContext
from undercroft.environment.generators.pipeline.layers import (
    HAND_BUILT_LEVEL,
    UNDERGROUND_FORT,
    AreaStartingPosition,
    DistantExit,
    HorizontalPlacement,
    PrefabBuilder,
    PrefabLevel,
    PrefabSection,
    PrefabSectionBuilder,
    VerticalPlacement,
)
from undercroft.environment.generators.pipeline.layers.prefab import read_template
from undercroft.environment.tile_types import TileType


def _ctx(width: int = 80, height: int = 43) -> BuildContext:
    return BuildContext.create_empty(1, width, height, record_history=True)


class TestReadTemplate:
    def test_strips_surrounding_newlines_and_pads(self) -> None:
        rows = read_template("\n# \n#\n", 3, 3)
        assert rows == ["#  ", "#  ", "   "]

    def test_empty_template_is_fatal(self) -> None:
        with pytest.raises(MapBuildError, match="empty"):
            read_template("", 5, 5)
        with pytest.raises(MapBuildError, match="empty"):
            read_template("\n\n", 5, 5)

    def test_row_wider_than_declared_is_fatal(self) -> None:
        with pytest.raises(MapBuildError):
            read_template("#####", 3, 1)

    def test_more_rows_than_declared_is_fatal(self) -> None:
        with pytest.raises(MapBuildError):
            read_template("#\n#\n#", 1, 2)


class TestPrefabBuilder:
    def test_start_and_exit_from_glyphs(self) -> None:
        """One '@' and one '>' give the start and the single down stairs."""
        level = PrefabLevel("\n#######\n#@   >#\n#######\n", 7, 3)
        ctx = _ctx(20, 10)

        PrefabBuilder(level).generate(ctx, random.Random(0))

        assert ctx.starting_position == (1, 1)
        assert ctx.map.count(TileType.DOWN_STAIRS) == 1
        assert ctx.map.tiles[ctx.map.coordinate_to_index(5, 1)] == TileType.DOWN_STAIRS
        assert ctx.map.tiles[ctx.map.coordinate_to_index(1, 1)] == TileType.FLOOR
        assert ctx.map.count(TileType.FLOOR) == 4

    def test_spawn_glyphs(self) -> None:
        level = PrefabLevel("go^%!", 5, 1)
        ctx = _ctx(10, 3)

        PrefabBuilder(level).generate(ctx, random.Random(0))

        assert ctx.spawn_list == {
            0: "Goblin",
            1: "Orc",
            2: "Bear Trap",
            3: "Rations",
            4: "Health Potion",
        }
        assert ctx.map.count(TileType.FLOOR) == 5

    def test_unknown_glyph_is_logged_and_skipped(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        level = PrefabLevel(" X ", 3, 1)
        ctx = _ctx(5, 3)

        with caplog.at_level(logging.WARNING):
            PrefabBuilder(level).generate(ctx, random.Random(0))

        assert "Unknown glyph" in caplog.text
        assert ctx.map.tiles[1] == TileType.WALL
        assert ctx.map.tiles[0] == TileType.FLOOR

    def test_template_larger_than_map_is_fatal(self) -> None:
        with pytest.raises(MapBuildError):
            PrefabBuilder(HAND_BUILT_LEVEL).generate(_ctx(20, 10), random.Random(0))

    def test_unreachable_exit_is_fatal(self) -> None:
        level = PrefabLevel("#######\n#@#  >#\n#######", 7, 3)
        with pytest.raises(MapBuildError, match="not reachable"):
            PrefabBuilder(level).generate(_ctx(10, 5), random.Random(0))

    def test_without_start_leaves_it_unset(self) -> None:
        ctx = _ctx(10, 5)
        PrefabBuilder(PrefabLevel("#   #", 5, 1)).generate(ctx, random.Random(0))
        assert ctx.starting_position is None

    def test_hand_built_level(self) -> None:
        ctx = _ctx()
        PrefabBuilder(HAND_BUILT_LEVEL).generate(ctx, random.Random(0))

        assert ctx.starting_position == (1, 1)
        assert ctx.map.count(TileType.DOWN_STAIRS) == 1
        assert set(ctx.spawn_list.values()) == {
            "Goblin",
            "Orc",
            "Bear Trap",
            "Rations",
            "Health Potion",
        }
        start = ctx.map.coordinate_to_index(1, 1)
        reachable = reachable_from(ctx.map, start)
        assert all(reachable[index] for index in ctx.spawn_list)
        # Nothing outside the template's 40x20 corner.
        assert (ctx.map.grid()[20:, :] == TileType.WALL).all()
        assert (ctx.map.grid()[:, 40:] == TileType.WALL).all()


class TestPrefabSectionBuilder:
    def test_fort_lands_on_right_edge(self) -> None:
        ctx = _ctx()
        inside = ctx.map.coordinate_to_index(70, 10)
        outside = ctx.map.coordinate_to_index(10, 10)
        ctx.spawn_list = {inside: "Orc", outside: "Rations"}

        PrefabSectionBuilder(UNDERGROUND_FORT).transform(ctx, random.Random(0))

        goblin = ctx.map.coordinate_to_index(69, 4)
        assert ctx.spawn_list[goblin] == "Goblin"
        assert ctx.spawn_list[outside] == "Rations"
        assert inside not in ctx.spawn_list
        assert ctx.map.tiles[goblin] == TileType.FLOOR
        # Left of the footprint is untouched.
        assert (ctx.map.grid()[:, :64] == TileType.WALL).all()
        assert (ctx.map.grid()[:, 79] == TileType.WALL).all()

    def test_fort_spawns(self) -> None:
        ctx = _ctx()
        PrefabSectionBuilder(UNDERGROUND_FORT).transform(ctx, random.Random(0))

        tags = sorted(ctx.spawn_list.values())
        assert tags.count("Goblin") == 3
        assert tags.count("Bear Trap") == 4

    def test_origin_for_placements(self) -> None:
        centre = PrefabSection(
            "   ", 3, 3, (HorizontalPlacement.CENTER, VerticalPlacement.CENTER)
        )
        corner = PrefabSection(
            "   ", 3, 3, (HorizontalPlacement.LEFT, VerticalPlacement.BOTTOM)
        )

        assert PrefabSectionBuilder(centre).origin(11, 9) == (4, 3)
        assert PrefabSectionBuilder(corner).origin(11, 9) == (0, 5)

    def test_section_that_does_not_fit_is_fatal(self) -> None:
        with pytest.raises(MapBuildError, match="does not fit"):
            PrefabSectionBuilder(UNDERGROUND_FORT).transform(
                _ctx(80, 40), random.Random(0)
            )

    def test_snapshot_taken(self) -> None:
        ctx = _ctx()
        PrefabSectionBuilder(UNDERGROUND_FORT).transform(ctx, random.Random(0))
        assert len(ctx.history) == 1

    def test_section_start_used_when_none_placed(self) -> None:
        section = PrefabSection(
            "   \n @ \n   ", 3, 3, (HorizontalPlacement.LEFT, VerticalPlacement.TOP)
        )
        ctx = BuildContext(map=all_floor_map(10, 5))

        PrefabSectionBuilder(section).transform(ctx, random.Random(0))

        assert ctx.starting_position == (1, 1)

    def test_existing_start_is_kept(self) -> None:
        section = PrefabSection(
            "   \n @ \n   ", 3, 3, (HorizontalPlacement.LEFT, VerticalPlacement.TOP)
        )
        ctx = BuildContext(map=all_floor_map(10, 5), starting_position=(8, 3))

        PrefabSectionBuilder(section).transform(ctx, random.Random(0))

        assert ctx.starting_position == (8, 3)

    def test_walling_over_the_start_is_fatal(self) -> None:
        section = PrefabSection(
            "###\n###\n###", 3, 3, (HorizontalPlacement.LEFT, VerticalPlacement.TOP)
        )
        ctx = BuildContext(map=all_floor_map(10, 5), starting_position=(1, 1))

        with pytest.raises(MapBuildError, match="walls over the starting position"):
            PrefabSectionBuilder(section).transform(ctx, random.Random(0))


class TestPrefabWithDistantExit:
    def test_sealed_template_exit_is_moved_within_reach(self) -> None:
        level = PrefabLevel("#####\n# # #\n# #>#\n#####", 5, 4)
        ctx = _ctx(5, 4)

        PrefabBuilder(level).generate(ctx, random.Random(0))
        AreaStartingPosition().transform(ctx, random.Random(0))
        DistantExit().transform(ctx, random.Random(0))

        start = ctx.starting_index("test")
        stairs = np.flatnonzero(ctx.map.tiles == TileType.DOWN_STAIRS)
        assert stairs.size == 1
        assert reachable_from(ctx.map, start)[stairs[0]]
