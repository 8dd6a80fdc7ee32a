"""
Tests for the mass position updater.
"""

import pytest

from spacetime.constants import DEFAULT_CENTRAL_MASS
from spacetime.orbit import compute_orbital_position, create_binary_orbital_parameters
from spacetime.types import MassSource, OrbitalParameters
from spacetime.updater import total_system_mass, update_mass_positions


@pytest.fixture
def binary():
    primary_orbit, secondary_orbit = create_binary_orbital_parameters(separation=3.0)
    return [
        MassSource("a", (0.0, 0.0, 0.0), 60.0, orbit=primary_orbit),
        MassSource("b", (0.0, 0.0, 0.0), 40.0, orbit=secondary_orbit),
    ]


class TestUpdateMassPositions:

    def test_barycentric_uses_total_mass(self, binary):
        updated = update_mass_positions(binary, 1.3)
        for before, after in zip(binary, updated):
            expected = compute_orbital_position(before.orbit, 1.3, 100.0)
            assert after.position == pytest.approx(expected)

    def test_binary_on_opposite_sides(self, binary):
        a, b = update_mass_positions(binary, 0.7)
        assert a.position[0] == pytest.approx(-b.position[0])
        assert a.position[1] == pytest.approx(-b.position[1])

    def test_orbits_named_central_body(self):
        star = MassSource("star", (1.0, 2.0, 0.0), 50.0)
        planet = MassSource("planet", (0.0, 0.0, 0.0), 1.0,
                            orbit=OrbitalParameters(2.0), orbits_central_mass_id="star")
        updated = update_mass_positions([star, planet], 0.9)
        expected = compute_orbital_position(planet.orbit, 0.9, 50.0, (1.0, 2.0, 0.0))
        assert updated[1].position == pytest.approx(expected)

    def test_unresolved_central_id_uses_system(self):
        star = MassSource("star", (1.0, 2.0, 0.0), 50.0)
        planet = MassSource("planet", (0.0, 0.0, 0.0), 1.0,
                            orbit=OrbitalParameters(2.0), orbits_central_mass_id="missing")
        updated = update_mass_positions([star, planet], 0.9)
        expected = compute_orbital_position(planet.orbit, 0.9, 51.0)
        assert updated[1].position == pytest.approx(expected)

    def test_self_reference_uses_system(self):
        body = MassSource("solo", (0.0, 0.0, 0.0), 10.0,
                          orbit=OrbitalParameters(1.0), orbits_central_mass_id="solo")
        updated = update_mass_positions([body], 0.5)
        expected = compute_orbital_position(body.orbit, 0.5, 10.0)
        assert updated[0].position == pytest.approx(expected)

    def test_zero_total_uses_default_central_mass(self):
        body = MassSource("ghost", (0.0, 0.0, 0.0), 0.0, orbit=OrbitalParameters(1.0))
        updated = update_mass_positions([body], 0.5)
        expected = compute_orbital_position(body.orbit, 0.5, DEFAULT_CENTRAL_MASS)
        assert updated[0].position == pytest.approx(expected)

    def test_pure(self, binary):
        before = [m.position for m in binary]
        updated = update_mass_positions(binary, 2.0)
        assert [m.position for m in binary] == before
        assert updated is not binary
        assert all(u is not m for u, m in zip(updated, binary))

    def test_static_masses_pass_through(self):
        static = MassSource("s", (1.0, 1.0, 1.0), 5.0)
        updated = update_mass_positions([static], 3.0)
        assert updated[0] is static

    def test_keeps_identity_fields(self, binary):
        updated = update_mass_positions(binary, 1.0)
        assert [m.id for m in updated] == ["a", "b"]
        assert [m.mass for m in updated] == [60.0, 40.0]
        assert updated[0].orbit == binary[0].orbit

    def test_empty(self):
        assert update_mass_positions([], 1.0) == []


def test_total_system_mass(binary):
    assert total_system_mass(binary) == 100.0
