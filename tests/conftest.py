"""Shared fixtures for the polefield test suite."""

import pytest

from polefield.core.compositor import Compositor
from polefield.core.scheduler import ManualScheduler
from polefield.core.types import Pole, Raster


@pytest.fixture
def raster():
    return Raster(200, 200)


@pytest.fixture
def corner_poles():
    """red/green/blue/yellow on a 10x10 square."""
    return [
        Pole(0, 0, (255, 0, 0)),
        Pole(10, 0, (0, 255, 0)),
        Pole(0, 10, (0, 0, 255)),
        Pole(10, 10, (255, 255, 0)),
    ]


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def compositor(raster, scheduler):
    return Compositor(raster, scheduler=scheduler)


@pytest.fixture
def small_compositor(scheduler):
    return Compositor(Raster(48, 32), scheduler=scheduler)
