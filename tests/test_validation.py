"""
Tests for mass-source and grid-configuration validation.

Verifies:
  1. Boundary values of resolution, bounds, extent and time step.
  2. Mass-source field checks (id, position, mass, radius).
  3. Dict payloads are accepted and validated the same way.
"""

import math
import pytest

from spacetime.errors import ValidationError
from spacetime.types import CurvatureGridConfig, MassSource
from spacetime.validation import validate_grid_config, validate_mass_source


def make_config(**overrides):
    values = {
        "resolution": 4,
        "bounds": (-1.0, -1.0, -1.0, 1.0, 1.0, 1.0),
        "time_step": 0.016,
        "masses": [MassSource("a", (0.0, 0.0, 0.0), 10.0)],
    }
    values.update(overrides)
    return CurvatureGridConfig(**values)


class TestResolution:

    @pytest.mark.parametrize("resolution", [2, 256])
    def test_boundaries_accepted(self, resolution):
        validate_grid_config(make_config(resolution=resolution))

    @pytest.mark.parametrize("resolution", [1, 257, 0, -4])
    def test_out_of_range_rejected(self, resolution):
        with pytest.raises(ValidationError, match="between 2 and 256"):
            validate_grid_config(make_config(resolution=resolution))

    @pytest.mark.parametrize("resolution", [4.5, "8", None, True, math.nan])
    def test_non_integer_rejected(self, resolution):
        with pytest.raises(ValidationError, match="integer"):
            validate_grid_config(make_config(resolution=resolution))


class TestBounds:

    def test_wrong_length(self):
        with pytest.raises(ValidationError, match="6 numbers"):
            validate_grid_config(make_config(bounds=(0, 0, 0, 1, 1)))

    def test_non_finite(self):
        with pytest.raises(ValidationError, match=r"Bounds\[4\]"):
            validate_grid_config(make_config(bounds=(0, 0, 0, 1, math.inf, 1)))

    def test_max_not_greater_than_min(self):
        with pytest.raises(ValidationError, match="maxY"):
            validate_grid_config(make_config(bounds=(0, 1, 0, 1, 1, 1)))

    def test_extent_too_small(self):
        with pytest.raises(ValidationError, match="at least"):
            validate_grid_config(make_config(bounds=(0, 0, 0, 1, 1, 0.0005)))

    def test_extent_too_large(self):
        with pytest.raises(ValidationError, match="must not exceed"):
            validate_grid_config(make_config(bounds=(-1e6, 0, 0, 1e6, 1, 1)))

    def test_extent_boundaries_accepted(self):
        validate_grid_config(make_config(bounds=(0, 0, 0, 1e-3, 1e6, 1)))


class TestTimeStep:

    @pytest.mark.parametrize("time_step", [1e-4, 1.0, 0.5])
    def test_in_range(self, time_step):
        validate_grid_config(make_config(time_step=time_step))

    @pytest.mark.parametrize("time_step", [5e-5, 1.5, math.nan, None])
    def test_out_of_range(self, time_step):
        with pytest.raises(ValidationError, match="Time step"):
            validate_grid_config(make_config(time_step=time_step))


class TestMassSource:

    def test_zero_mass_accepted(self):
        validate_mass_source(MassSource("z", (0, 0, 0), 0))

    def test_negative_mass_rejected(self):
        with pytest.raises(ValidationError, match="non-negative"):
            validate_mass_source(MassSource("n", (0, 0, 0), -0.001))

    def test_non_finite_mass_rejected(self):
        with pytest.raises(ValidationError, match="finite"):
            validate_mass_source(MassSource("n", (0, 0, 0), math.inf))

    @pytest.mark.parametrize("mass_id", ["", None, 42])
    def test_bad_id_rejected(self, mass_id):
        with pytest.raises(ValidationError, match="string id"):
            validate_mass_source(MassSource(mass_id, (0, 0, 0), 1.0))

    def test_short_position_rejected(self):
        with pytest.raises(ValidationError, match="length 3"):
            validate_mass_source(MassSource("p", (0, 0), 1.0))

    def test_non_finite_position_rejected(self):
        with pytest.raises(ValidationError, match=r"position\[1\]"):
            validate_mass_source(MassSource("p", (0, math.nan, 0), 1.0))

    def test_negative_radius_rejected(self):
        with pytest.raises(ValidationError, match="radius"):
            validate_mass_source(MassSource("r", (0, 0, 0), 1.0, radius=-1))

    def test_radius_optional(self):
        validate_mass_source(MassSource("r", (0, 0, 0), 1.0, radius=0.5))

    def test_dict_accepted(self):
        validate_mass_source({"id": "d", "position": [1, 2, 3], "mass": 5})

    def test_grid_validates_every_mass(self):
        config = make_config(masses=[
            MassSource("ok", (0, 0, 0), 1.0),
            MassSource("bad", (0, 0, 0), -1.0),
        ])
        with pytest.raises(ValidationError, match='"bad"'):
            validate_grid_config(config)

    def test_masses_must_be_list(self):
        config = make_config()
        config.masses = "not a list"
        with pytest.raises(ValidationError, match="Masses must be an array"):
            validate_grid_config(config)


class TestErrorTypes:

    def test_validation_error_is_value_error(self):
        """Services catch ValueError; validation failures must be included."""
        with pytest.raises(ValueError):
            validate_grid_config(make_config(resolution=1))

    def test_validation_error_code(self):
        assert ValidationError.code == "VALIDATION_ERROR"
