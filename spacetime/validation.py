"""
Input sanity checks for mass sources and grid configurations.

Validation runs before any computation and has no side effects. Every
failure raises spacetime.errors.ValidationError with a message naming
the offending field.
"""

import math
from numbers import Real

from spacetime import constants
from spacetime.errors import ValidationError
from spacetime.types import CurvatureGridConfig, MassSource

AXES = ("X", "Y", "Z")


def is_finite_number(value):
    """True for finite real numbers. Booleans are not numbers here."""
    return (isinstance(value, Real) and not isinstance(value, bool)
            and math.isfinite(value))


def validate_mass_source(mass):
    """
    Validate a single mass source.

    Parameters
    ----------
    mass : MassSource or dict
        The mass to check.

    Raises
    ------
    ValidationError
        If the id is empty or not a string, the position is not three
        finite numbers, the mass is not finite or is negative, or the
        radius (when given) is not a non-negative finite number.
    """
    if isinstance(mass, dict):
        mass = MassSource.from_dict(mass)
    if not isinstance(mass, MassSource):
        raise ValidationError("MassSource must be an object")

    if not mass.id or not isinstance(mass.id, str):
        raise ValidationError("MassSource must have a valid string id")

    position = mass.position
    if not isinstance(position, tuple) or len(position) != 3:
        raise ValidationError(
            'MassSource "{}" must have a position array of length 3'.format(mass.id))
    for i, value in enumerate(position):
        if not is_finite_number(value):
            raise ValidationError(
                'MassSource "{}" position[{}] must be a finite number'.format(mass.id, i))

    if not is_finite_number(mass.mass):
        raise ValidationError(
            'MassSource "{}" mass must be a finite number'.format(mass.id))
    if mass.mass < 0:
        raise ValidationError(
            'MassSource "{}" mass must be non-negative, got {}'.format(mass.id, mass.mass))

    if mass.radius is not None:
        if not is_finite_number(mass.radius) or mass.radius < 0:
            raise ValidationError(
                'MassSource "{}" radius must be a non-negative finite number'.format(mass.id))


def validate_grid_config(config):
    """
    Validate a curvature grid configuration and every mass it carries.

    Parameters
    ----------
    config : CurvatureGridConfig or dict
        The configuration to check.

    Raises
    ------
    ValidationError
        On the first violated constraint.
    """
    if isinstance(config, dict):
        config = CurvatureGridConfig.from_dict(config)
    if not isinstance(config, CurvatureGridConfig):
        raise ValidationError("Grid configuration must be an object")

    resolution = config.resolution
    if isinstance(resolution, bool) or not isinstance(resolution, Real) \
            or not math.isfinite(resolution) or int(resolution) != resolution:
        raise ValidationError("Grid resolution must be an integer")
    if resolution < constants.MIN_RESOLUTION or resolution > constants.MAX_RESOLUTION:
        raise ValidationError(
            "Grid resolution must be between {} and {}, got {}".format(
                constants.MIN_RESOLUTION, constants.MAX_RESOLUTION, resolution))

    bounds = config.bounds
    if not isinstance(bounds, tuple) or len(bounds) != 6:
        raise ValidationError(
            "Bounds must be an array of 6 numbers [minX, minY, minZ, maxX, maxY, maxZ]")
    for i, value in enumerate(bounds):
        if not is_finite_number(value):
            raise ValidationError("Bounds[{}] must be a finite number".format(i))

    for axis in range(3):
        lo, hi = bounds[axis], bounds[axis + 3]
        if hi <= lo:
            raise ValidationError(
                "Bounds max{0} ({1}) must be greater than min{0} ({2})".format(
                    AXES[axis], hi, lo))

    sizes = [bounds[axis + 3] - bounds[axis] for axis in range(3)]
    if any(size < constants.MIN_BOUND_SIZE for size in sizes):
        raise ValidationError(
            "Grid dimensions must be at least {}".format(constants.MIN_BOUND_SIZE))
    if any(size > constants.MAX_BOUND_SIZE for size in sizes):
        raise ValidationError(
            "Grid dimensions must not exceed {}".format(constants.MAX_BOUND_SIZE))

    if not is_finite_number(config.time_step):
        raise ValidationError("Time step must be a finite number")
    if config.time_step < constants.MIN_TIME_STEP or config.time_step > constants.MAX_TIME_STEP:
        raise ValidationError(
            "Time step must be between {} and {}, got {}".format(
                constants.MIN_TIME_STEP, constants.MAX_TIME_STEP, config.time_step))

    if not isinstance(config.masses, list):
        raise ValidationError("Masses must be an array")
    for mass in config.masses:
        validate_mass_source(mass)
