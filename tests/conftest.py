"""Shared fixtures for the tracing test suite.

Random property tests draw from a seeded generator so failures reproduce.
"""

import numpy as np
import pytest


SAMPLES = 1000


@pytest.fixture
def rng():
    """Seeded random generator, fresh for every test."""
    return np.random.default_rng(42)


@pytest.fixture
def random_unit(rng):
    """Factory for random unit vectors of a given dimension."""

    def _random_unit(dim):
        v = rng.normal(size=dim)
        return v / np.linalg.norm(v)

    return _random_unit


@pytest.fixture
def samples():
    return SAMPLES
