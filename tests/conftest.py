"""
Pytest fixtures for the SPACETIME test suite.
"""

import pytest

from app import create_app
from spacetime.config import SimulationSettings
from spacetime.types import CurvatureGridConfig, MassSource


@pytest.fixture
def settings():
    """Settings with a small API resolution cap."""
    return SimulationSettings(api_max_resolution=16, use_worker=False)


@pytest.fixture
def app(settings):
    """Create application for testing."""
    app = create_app(settings)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def central_mass():
    """A single mass of 100 at the origin."""
    return MassSource("c", (0.0, 0.0, 0.0), 100.0)


@pytest.fixture
def small_config(central_mass):
    """4^3 grid over [-1, 1]^3 around one central mass."""
    return CurvatureGridConfig(
        resolution=4,
        bounds=(-1.0, -1.0, -1.0, 1.0, 1.0, 1.0),
        time_step=0.016,
        masses=[central_mass],
    )
