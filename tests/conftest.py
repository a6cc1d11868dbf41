from __future__ import annotations

import random
from collections.abc import Iterator

import pytest

from undercroft.util import rng


@pytest.fixture
def seeded_rng() -> random.Random:
    """A plain Random with a fixed seed, for stages that take any RNG."""
    return random.Random(1234)


@pytest.fixture(autouse=True)
def restore_global_rng() -> Iterator[None]:
    """Put the module-level RNG provider back the way each test found it."""
    saved_provider = rng._provider
    yield
    rng._provider = saved_provider
