"""
Tests for simulation stepping.
"""

import asyncio
import pytest

from spacetime.orbit import create_default_orbital_parameters
from spacetime.simulation import (
    MAX_ORBITAL_TIME_STEP,
    MIN_ORBITAL_TIME_STEP,
    advance_simulation_time,
    clamp_time_scale,
    run_simulation,
)
from spacetime.types import CurvatureGridConfig, MassSource
from spacetime.updater import update_mass_positions
from spacetime.workers import FallbackPhysicsComputer


@pytest.fixture
def orbiting():
    return [
        MassSource("sun", (0.0, 0.0, 0.0), 100.0),
        MassSource("p", (0.0, 0.0, 0.0), 1.0,
                   orbit=create_default_orbital_parameters(radius=2.0),
                   orbits_central_mass_id="sun"),
    ]


class TestClampTimeScale:

    def test_range(self):
        assert clamp_time_scale(-1.0) == 0.0
        assert clamp_time_scale(2.5) == 2.5
        assert clamp_time_scale(20.0) == 10.0


class TestAdvance:

    def test_normal_frame(self, orbiting):
        t, masses = advance_simulation_time(orbiting, 1.0, 0.016)
        assert t == pytest.approx(1.016)
        expected = update_mass_positions(orbiting, t)
        assert masses[1].position == pytest.approx(expected[1].position)

    def test_paused(self, orbiting):
        t, masses = advance_simulation_time(orbiting, 1.0, 0.016, time_scale=0.0)
        assert t == 1.0
        assert masses is orbiting

    def test_non_positive_delta(self, orbiting):
        t, masses = advance_simulation_time(orbiting, 1.0, 0.0)
        assert t == 1.0
        assert masses is orbiting

    def test_long_frame_capped(self, orbiting):
        t, _ = advance_simulation_time(orbiting, 0.0, 5.0)
        assert t == pytest.approx(MAX_ORBITAL_TIME_STEP)

    def test_scaled_step_capped(self, orbiting):
        t, _ = advance_simulation_time(orbiting, 0.0, 0.05, time_scale=10.0)
        assert t == pytest.approx(MAX_ORBITAL_TIME_STEP)

    def test_tiny_step_raised(self, orbiting):
        t, _ = advance_simulation_time(orbiting, 0.0, 1e-6)
        assert t == pytest.approx(MIN_ORBITAL_TIME_STEP)


class TestRunSimulation:

    def test_yields_frames(self, orbiting):
        config = CurvatureGridConfig(4, (-3, -3, -3, 3, 3, 3), 0.016, orbiting)

        async def collect():
            frames = []
            async for frame in run_simulation(config, FallbackPhysicsComputer(), 3):
                frames.append(frame)
            return frames

        frames = asyncio.run(collect())
        assert len(frames) == 3
        times = [t for t, _, _ in frames]
        assert times == pytest.approx([0.016, 0.032, 0.048])
        for t, masses, result in frames:
            assert len(result.samples) == 64
            assert result.max_deviation > 0
            assert masses[1].position == pytest.approx(
                update_mass_positions(orbiting, t)[1].position)

    def test_bodies_move(self, orbiting):
        config = CurvatureGridConfig(2, (-3, -3, -3, 3, 3, 3), 0.016, orbiting)

        async def collect():
            return [m async for _, m, _ in run_simulation(
                config, FallbackPhysicsComputer(), 2, frame_time=0.05)]

        first, second = asyncio.run(collect())
        assert first[1].position != second[1].position
        assert first[0].position == second[0].position
