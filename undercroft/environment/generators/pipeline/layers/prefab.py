"""Hand-authored set pieces.

Templates are plain text, one character per tile:

    ' '  floor              '#'  wall
    '@'  floor + start      '>'  down stairs
    'g'  floor + Goblin     'o'  floor + Orc
    '^'  floor + Bear Trap  '%'  floor + Rations
    '!'  floor + Health Potion

A leading and a trailing newline are ignored so templates can be written as
triple-quoted blocks. Lines shorter than the template width are padded with
floor. Any other character is logged and leaves the map tile as it was.

PrefabBuilder lays a whole level template into the top-left corner of an
empty map. PrefabSectionBuilder stamps a fixed-size section into a map an
earlier stage already built, anchored to one of its edges.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

from undercroft.environment.distance import distance_field
from undercroft.environment.generators.base import MapBuildError
from undercroft.environment.generators.pipeline.context import BuildContext
from undercroft.environment.generators.pipeline.layer import (
    InitialMapBuilder,
    MetaMapBuilder,
)
from undercroft.environment.tile_types import TileType
from undercroft.types import TileIndex, WorldTilePos
from undercroft.util.rng import RNG

logger = logging.getLogger(__name__)

# Glyphs that put an entity on a floor tile.
SPAWN_GLYPHS = {
    "g": "Goblin",
    "o": "Orc",
    "^": "Bear Trap",
    "%": "Rations",
    "!": "Health Potion",
}


class HorizontalPlacement(Enum):
    LEFT = auto()
    CENTER = auto()
    RIGHT = auto()


class VerticalPlacement(Enum):
    TOP = auto()
    CENTER = auto()
    BOTTOM = auto()


@dataclass(frozen=True)
class PrefabLevel:
    """A template covering a whole level."""

    template: str
    width: int
    height: int


@dataclass(frozen=True)
class PrefabSection:
    """A template stamped into part of an existing level."""

    template: str
    width: int
    height: int
    placement: tuple[HorizontalPlacement, VerticalPlacement]


def read_template(template: str, width: int, height: int) -> list[str]:
    """Split a template into exactly ``height`` rows of ``width`` glyphs.

    Raises:
        MapBuildError: If the template is empty or bigger than its declared
            size.
    """
    lines = template.split("\n")
    if lines and lines[0] == "":
        lines = lines[1:]
    if lines and lines[-1] == "":
        lines = lines[:-1]
    lines = [line.rstrip("\r") for line in lines]

    if not lines or not any(lines):
        raise MapBuildError("Prefab template is empty")
    if len(lines) > height:
        raise MapBuildError(
            f"Prefab template has {len(lines)} rows, declared height is {height}"
        )
    for row, line in enumerate(lines):
        if len(line) > width:
            raise MapBuildError(
                f"Prefab template row {row} is {len(line)} wide, "
                f"declared width is {width}"
            )

    lines.extend("" for _ in range(height - len(lines)))
    return [line.ljust(width) for line in lines]


class _TemplateWriter:
    """Applies glyphs to a context, remembering what the template placed."""

    def __init__(self, ctx: BuildContext) -> None:
        self.ctx = ctx
        self.start: WorldTilePos | None = None
        self.exit: TileIndex | None = None

    def write(self, x: int, y: int, glyph: str) -> None:
        game_map = self.ctx.map
        index = game_map.coordinate_to_index(x, y)
        match glyph:
            case " ":
                game_map.tiles[index] = TileType.FLOOR
            case "#":
                game_map.tiles[index] = TileType.WALL
            case "@":
                game_map.tiles[index] = TileType.FLOOR
                self.start = (x, y)
            case ">":
                game_map.tiles[index] = TileType.DOWN_STAIRS
                self.exit = index
            case _ if glyph in SPAWN_GLYPHS:
                game_map.tiles[index] = TileType.FLOOR
                self.ctx.spawn_list[index] = SPAWN_GLYPHS[glyph]
            case _:
                logger.warning(f"Unknown glyph loading map: {glyph!r} at ({x}, {y})")

    def stamp(self, rows: list[str], offset_x: int, offset_y: int) -> None:
        for y, row in enumerate(rows):
            for x, glyph in enumerate(row):
                self.write(offset_x + x, offset_y + y, glyph)


class PrefabBuilder(InitialMapBuilder):
    """Builds a level from a hand-authored template."""

    def __init__(self, level: PrefabLevel) -> None:
        self.level = level

    def generate(self, ctx: BuildContext, rng: RNG) -> None:
        """Lay the template into the map's top-left corner.

        Raises:
            MapBuildError: If the template is malformed, does not fit the map,
                or places a start and an exit that cannot reach each other.
        """
        rows = read_template(self.level.template, self.level.width, self.level.height)
        if self.level.width > ctx.map.width or self.level.height > ctx.map.height:
            raise MapBuildError(
                f"Prefab level is {self.level.width}x{self.level.height}, "
                f"map is {ctx.map.width}x{ctx.map.height}"
            )

        writer = _TemplateWriter(ctx)
        writer.stamp(rows, 0, 0)
        ctx.take_snapshot()

        if writer.start is not None:
            ctx.set_starting_position(writer.start, overwrite=True)
            if writer.exit is not None:
                start_index = ctx.map.coordinate_to_index(*writer.start)
                field = distance_field(ctx.map, [start_index]).ravel()
                if field[writer.exit] == float("inf"):
                    raise MapBuildError(
                        "Prefab level exit is not reachable from its start"
                    )


class PrefabSectionBuilder(MetaMapBuilder):
    """Stamps a prefab section into the map built so far.

    Spawn entries inside the section's footprint are replaced by the
    section's own. The section's '@' only sets the start when no earlier
    stage placed one, and a section that walls over the start is fatal.
    """

    def __init__(self, section: PrefabSection) -> None:
        self.section = section

    def origin(self, map_width: int, map_height: int) -> tuple[int, int]:
        """Top-left map tile of the section for its placement."""
        horizontal, vertical = self.section.placement
        match horizontal:
            case HorizontalPlacement.LEFT:
                x = 0
            case HorizontalPlacement.CENTER:
                x = (map_width // 2) - (self.section.width // 2)
            case HorizontalPlacement.RIGHT:
                x = (map_width - 1) - self.section.width
        match vertical:
            case VerticalPlacement.TOP:
                y = 0
            case VerticalPlacement.CENTER:
                y = (map_height // 2) - (self.section.height // 2)
            case VerticalPlacement.BOTTOM:
                y = (map_height - 1) - self.section.height
        return (x, y)

    def transform(self, ctx: BuildContext, rng: RNG) -> None:
        section = self.section
        rows = read_template(section.template, section.width, section.height)
        x, y = self.origin(ctx.map.width, ctx.map.height)
        if (
            x < 0
            or y < 0
            or x + section.width > ctx.map.width
            or y + section.height > ctx.map.height
        ):
            raise MapBuildError(
                f"Prefab section {section.width}x{section.height} does not fit "
                f"a {ctx.map.width}x{ctx.map.height} map"
            )

        def outside_footprint(index: TileIndex) -> bool:
            tile_x, tile_y = ctx.map.index_to_coordinate(index)
            return not (
                x <= tile_x < x + section.width and y <= tile_y < y + section.height
            )

        ctx.spawn_list = {
            index: tag
            for index, tag in ctx.spawn_list.items()
            if outside_footprint(index)
        }

        writer = _TemplateWriter(ctx)
        writer.stamp(rows, x, y)
        if writer.start is not None:
            ctx.set_starting_position(writer.start)
        if ctx.starting_position is not None and ctx.map.is_blocking(
            ctx.starting_index("PrefabSectionBuilder")
        ):
            raise MapBuildError(
                "Prefab section walls over the starting position "
                f"{ctx.starting_position}"
            )
        ctx.take_snapshot()


# =============================================================================
# Templates
# =============================================================================

LEVEL_TEMPLATE = """
########################################
#@     #           #        o          #
#      #   g       #                   #
#      #           #####  ######       #
#   %  #####   #####            #  !   #
#                               #      #
#      #####   #####  ^         #      #
#      #           #            ####  ##
########           #   g           #  ##
#                  #####  #####    #  ##
#   !      o               ^       #  ##
#                  #####  #####       ##
#####  ######      #           #      ##
#          #       #   %       #  g   ##
#   g      #       #           #      ##
#          ####  ###           ###  ####
#  ^                                  ##
#          #####  ####   ####        >##
#          #                 #        ##
########################################
"""

HAND_BUILT_LEVEL = PrefabLevel(template=LEVEL_TEMPLATE, width=40, height=20)

RIGHT_FORT = """
     #         
  #######      
  #     #      
  #     #######
  #  g        #
  #     #######
  #     #      
  ### ###      
    # #        
    # #        
    # ##       
    ^          
    ^          
    # ##       
    # #        
    # #        
    # #        
    # #        
  ### ###      
  #     #      
  #     #      
  #  g  #      
  #     #      
  #     #      
  ### ###      
    # #        
    # #        
    # #        
    # ##       
    ^          
    ^          
    # ##       
    # #        
    # #        
    # #        
  ### ###      
  #     #      
  #     #######
  #  g        #
  #     #######
  #     #      
  #######      
     #         
"""

UNDERGROUND_FORT = PrefabSection(
    template=RIGHT_FORT,
    width=15,
    height=43,
    placement=(HorizontalPlacement.RIGHT, VerticalPlacement.TOP),
)
