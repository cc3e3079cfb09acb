import itertools

import pytest

from assembly_line.models import Recipe
from assembly_line.registry import ItemRegistry


@pytest.fixture
def reference_registry():
    """A / B / nothing in thirds, P = A + B in 4 steps."""
    registry = ItemRegistry()
    registry.register("A", 50)
    registry.register("B", 50)
    registry.register("NULL", 50, empty=True)
    registry.register("P", 0, Recipe(components=("A", "B"), build_steps=4))
    return registry


@pytest.fixture
def scripted():
    """Factory for a random source that replays the given draws forever."""
    def make(*values):
        it = itertools.cycle(values)
        return lambda: next(it)
    return make
