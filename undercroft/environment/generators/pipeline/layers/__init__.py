"""Builder stages for the builder chain.

Initial builders produce the first draft of a level:
- CellularAutomataBuilder: noise smoothed into caves
- SimpleRoomsBuilder: rejection-sampled room rectangles
- PrefabBuilder: a hand-authored level template

Meta builders modify an existing draft:
- Room stages: RoomDrawer, DoglegCorridors, RoomBasedStartingPosition
- Placement stages: AreaStartingPosition, CullUnreachable, DistantExit
- Spawning stages: VoronoiSpawning
- Set pieces: PrefabSectionBuilder
- Regeneration: WaveformCollapseBuilder
"""

from .cellular import CellularAutomataBuilder
from .placement import (
    AreaStartingPosition,
    CullUnreachable,
    DistantExit,
    XStart,
    YStart,
)
from .prefab import (
    HAND_BUILT_LEVEL,
    UNDERGROUND_FORT,
    HorizontalPlacement,
    PrefabBuilder,
    PrefabLevel,
    PrefabSection,
    PrefabSectionBuilder,
    VerticalPlacement,
)
from .rooms import (
    DoglegCorridors,
    RoomBasedStartingPosition,
    RoomDrawer,
    SimpleRoomsBuilder,
)
from .spawning import VoronoiSpawning
from .waveform import WaveformCollapseBuilder

__all__ = [
    "HAND_BUILT_LEVEL",
    "UNDERGROUND_FORT",
    "AreaStartingPosition",
    "CellularAutomataBuilder",
    "CullUnreachable",
    "DistantExit",
    "DoglegCorridors",
    "HorizontalPlacement",
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
]
