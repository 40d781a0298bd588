from __future__ import annotations

import random

import pytest


@pytest.fixture
def rng() -> random.Random:
    """A freshly seeded RNG so every test draws the same sequence."""
    return random.Random(42)
