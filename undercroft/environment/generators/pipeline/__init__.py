"""Builder-chain level generation.

A chain runs one initial builder and any number of meta builders against a
shared BuildContext, then resolves spawn regions into a spawn list.

Example usage:
    from undercroft.environment.generators.pipeline import generate_level

    level = generate_level(depth=3, rng=rng.get("map.level"))

Chains can also be assembled by hand:
    from undercroft.environment.generators.pipeline import (
        BuilderChain,
        CellularAutomataBuilder,
        AreaStartingPosition,
        DistantExit,
    )

    chain = BuilderChain(
        initial=CellularAutomataBuilder(),
        layers=[AreaStartingPosition(), DistantExit()],
        depth=1,
    )
    ctx = chain.build(rng.get("map.level"))
"""

from .context import BuildContext
from .factory import PIPELINE_NAMES, create_pipeline, generate_level, level_builder
from .layer import InitialMapBuilder, MetaMapBuilder
from .layers import (
    HAND_BUILT_LEVEL,
    UNDERGROUND_FORT,
    AreaStartingPosition,
    CellularAutomataBuilder,
    CullUnreachable,
    DistantExit,
    DoglegCorridors,
    HorizontalPlacement,
    PrefabBuilder,
    PrefabLevel,
    PrefabSection,
    PrefabSectionBuilder,
    RoomBasedStartingPosition,
    RoomDrawer,
    SimpleRoomsBuilder,
    VerticalPlacement,
    VoronoiSpawning,
    WaveformCollapseBuilder,
    XStart,
    YStart,
)
from .pipeline import BuilderChain, BuildState

__all__ = [
    "HAND_BUILT_LEVEL",
    "PIPELINE_NAMES",
    "UNDERGROUND_FORT",
    "AreaStartingPosition",
    "BuildContext",
    "BuildState",
    "BuilderChain",
    "CellularAutomataBuilder",
    "CullUnreachable",
    "DistantExit",
    "DoglegCorridors",
    "HorizontalPlacement",
    "InitialMapBuilder",
    "MetaMapBuilder",
    "PrefabBuilder",
    "PrefabLevel",
    "PrefabSection",
    "PrefabSectionBuilder",
    "RoomBasedStartingPosition",
    "RoomDrawer",
    "SimpleRoomsBuilder",
    "VerticalPlacement",
    "VoronoiSpawning",
    "WaveformCollapseBuilder",
    "XStart",
    "YStart",
    "create_pipeline",
    "generate_level",
    "level_builder",
]
