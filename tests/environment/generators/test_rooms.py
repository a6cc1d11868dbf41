"""Tests for the room-based builder stages."""

from __future__ import annotations

import random

import pytest

from tests.helpers import reachable_from
from undercroft.environment.generators.base import MapBuildError
from undercroft.environment.generators.pipeline.context import BuildContext
from undercroft.environment.generators.pipeline.layers import (
    DoglegCorridors,
    RoomBasedStartingPosition,
    RoomDrawer,
    SimpleRoomsBuilder,
)
from undercroft.environment.tile_types import TileType
from undercroft.util.coordinates import Rect


def _ctx(width: int = 80, height: int = 43) -> BuildContext:
    return BuildContext.create_empty(1, width, height, record_history=True)


class TestSimpleRoomsBuilder:
    def test_rooms_do_not_overlap(self) -> None:
        ctx = _ctx()
        SimpleRoomsBuilder().generate(ctx, random.Random(3))

        rooms = ctx.rooms
        assert rooms
        for i, room in enumerate(rooms):
            for other in rooms[i + 1 :]:
                assert not room.intersects(other)

    def test_rooms_stay_inside_the_map(self) -> None:
        ctx = _ctx(50, 30)
        SimpleRoomsBuilder(max_rooms=60).generate(ctx, random.Random(9))

        for room in ctx.rooms or []:
            assert room.x1 >= 0 and room.y1 >= 0
            assert room.x2 <= ctx.map.width - 2
            assert room.y2 <= ctx.map.height - 2
            assert 6 <= room.width <= 10

    def test_writes_no_tiles(self) -> None:
        ctx = _ctx()
        SimpleRoomsBuilder().generate(ctx, random.Random(3))

        assert ctx.map.count(TileType.FLOOR) == 0

    def test_map_too_small_for_any_room(self) -> None:
        ctx = _ctx(6, 6)
        SimpleRoomsBuilder().generate(ctx, random.Random(3))

        assert ctx.rooms == []


class TestRoomDrawer:
    def test_requires_rooms(self) -> None:
        ctx = _ctx()
        with pytest.raises(MapBuildError, match="requires a builder with room"):
            RoomDrawer().transform(ctx, random.Random(0))

    def test_empty_room_list_is_fatal(self) -> None:
        ctx = _ctx()
        ctx.rooms = []
        with pytest.raises(MapBuildError):
            RoomDrawer().transform(ctx, random.Random(0))

    def test_draws_interior_only(self) -> None:
        ctx = _ctx(20, 12)
        ctx.rooms = [Rect(2, 2, 5, 4)]

        RoomDrawer().transform(ctx, random.Random(0))

        grid = ctx.map.grid()
        assert (grid[3:6, 3:7] == TileType.FLOOR).all()
        assert ctx.map.count(TileType.FLOOR) == 12
        # Outer edge untouched.
        assert grid[2, 2] == TileType.WALL
        assert grid[6, 7] == TileType.WALL

    def test_clips_to_map_bounds(self) -> None:
        ctx = _ctx(5, 5)
        ctx.rooms = [Rect(-3, -3, 6, 6)]

        RoomDrawer().transform(ctx, random.Random(0))

        assert ctx.map.count(TileType.FLOOR) == 9

    def test_snapshot_per_room(self) -> None:
        ctx = _ctx(30, 20)
        ctx.rooms = [Rect(1, 1, 5, 5), Rect(10, 10, 5, 5)]

        RoomDrawer().transform(ctx, random.Random(0))

        assert len(ctx.history) == 2


class TestDoglegCorridors:
    def test_requires_rooms(self) -> None:
        with pytest.raises(MapBuildError):
            DoglegCorridors().transform(_ctx(), random.Random(0))

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_every_room_is_connected(self, seed: int) -> None:
        ctx = _ctx()
        rng = random.Random(seed)
        SimpleRoomsBuilder().generate(ctx, rng)
        RoomDrawer().transform(ctx, rng)
        DoglegCorridors().transform(ctx, rng)

        rooms = ctx.rooms or []
        first = ctx.map.coordinate_to_index(*rooms[0].center())
        reachable = reachable_from(ctx.map, first)
        for room in rooms:
            assert reachable[ctx.map.coordinate_to_index(*room.center())]
        assert reachable[ctx.map.walkable].all()


class TestRoomBasedStartingPosition:
    def test_starts_in_first_room(self) -> None:
        ctx = _ctx()
        ctx.rooms = [Rect(10, 10, 6, 6), Rect(30, 5, 8, 8)]

        RoomBasedStartingPosition().transform(ctx, random.Random(0))

        assert ctx.starting_position == (13, 13)

    def test_keeps_existing_start(self) -> None:
        ctx = _ctx()
        ctx.rooms = [Rect(10, 10, 6, 6)]
        ctx.starting_position = (2, 2)

        RoomBasedStartingPosition().transform(ctx, random.Random(0))

        assert ctx.starting_position == (2, 2)

    def test_requires_rooms(self) -> None:
        with pytest.raises(MapBuildError):
            RoomBasedStartingPosition().transform(_ctx(), random.Random(0))
