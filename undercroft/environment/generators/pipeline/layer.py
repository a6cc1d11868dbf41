"""Abstract base classes for builder chain stages.

A chain runs exactly one InitialMapBuilder, then any number of
MetaMapBuilders, all against the same BuildContext.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from undercroft.util.rng import RNG

    from .context import BuildContext


class InitialMapBuilder(ABC):
    """Produces the first draft of a level from nothing.

    Implementations write into ``ctx.map`` (and, for room-based builders,
    ``ctx.rooms``). They may also place a start, an exit or spawns when the
    algorithm knows them.
    """

    @abstractmethod
    def generate(self, ctx: BuildContext, rng: RNG) -> None:
        """Build the initial layout into the context.

        Args:
            ctx: The build context to fill in.
            rng: The chain's random source.
        """
        raise NotImplementedError


class MetaMapBuilder(ABC):
    """Mutates an existing draft in place.

    Each implementation checks the preconditions it needs from earlier
    stages and raises MapBuildError when one is missing.
    """

    @abstractmethod
    def transform(self, ctx: BuildContext, rng: RNG) -> None:
        """Apply this stage to the context.

        Args:
            ctx: The build context to modify.
            rng: The chain's random source.
        """
        raise NotImplementedError
