"""Shared fixtures for the spinball_sim test suite."""
import pytest

from spinball_sim.config import BodyParameters
from spinball_sim.engine import create_engine


@pytest.fixture
def ball():
    """Regulation golf ball."""
    return BodyParameters(mass=0.04593, radius=0.02135, drag_coefficient=0.25,
                          lift_coefficient=0.15, cross_area=0.00143, spin_decay=0.04)


@pytest.fixture
def engine():
    return create_engine()
