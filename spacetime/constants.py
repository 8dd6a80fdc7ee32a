"""
Numerical constants for the weak-field curvature model.

All quantities are in normalized visualization units (G = c = 1). These
values are part of the public contract: worker processes, the REST API
and the tests all rely on them matching exactly.

IMPORTANT: No unicode characters allowed in this file (Windows charmap constraint).
"""

import math

# Gravitational constant (normalized)
G = 1.0

# Speed of light (normalized)
C_LIGHT = 1.0

# Distances below this are clamped when evaluating 1/r terms.
# Sample points closer than this to a mass read the clamped value.
MIN_DISTANCE = 0.001

# Clamp applied to metric deviation and tidal tensor components.
MAX_METRIC_DEVIATION = 1e6

# Grid configuration limits
MIN_RESOLUTION = 2
MAX_RESOLUTION = 256
MIN_BOUND_SIZE = 1e-3
MAX_BOUND_SIZE = 1e6
MIN_TIME_STEP = 1e-4
MAX_TIME_STEP = 1.0

# Orbital element limits
MIN_SEMI_MAJOR_AXIS = 0.5
MAX_SEMI_MAJOR_AXIS = 10.0
MIN_ECCENTRICITY = 0.0
# Upper clamp used by clamp_orbital_parameters(). Validation accepts
# anything below 1.0; clamping keeps orbits away from the parabolic limit.
MAX_CLAMPED_ECCENTRICITY = 0.95
MIN_INCLINATION = -math.pi / 2
MAX_INCLINATION = math.pi / 2

# Kepler solver
MAX_KEPLER_ITERATIONS = 30
KEPLER_TOLERANCE = 1e-10
KEPLER_DERIVATIVE_FLOOR = 1e-15
KEPLER_BISECTION_STEP = 0.1

# Central mass used when an orbiting system has no positive total mass.
DEFAULT_CENTRAL_MASS = 100.0

# Binary mass-ratio clamp (secondary / primary)
MIN_BINARY_MASS_RATIO = 0.1
MAX_BINARY_MASS_RATIO = 1.0


def grid_constraints():
    """Return the grid limits as a JSON-serializable dict."""
    return {
        "minResolution": MIN_RESOLUTION,
        "maxResolution": MAX_RESOLUTION,
        "minBoundSize": MIN_BOUND_SIZE,
        "maxBoundSize": MAX_BOUND_SIZE,
        "minTimeStep": MIN_TIME_STEP,
        "maxTimeStep": MAX_TIME_STEP,
    }


def orbital_constraints():
    """Return the orbital element limits as a JSON-serializable dict."""
    return {
        "minSemiMajorAxis": MIN_SEMI_MAJOR_AXIS,
        "maxSemiMajorAxis": MAX_SEMI_MAJOR_AXIS,
        "minEccentricity": MIN_ECCENTRICITY,
        "maxEccentricity": MAX_CLAMPED_ECCENTRICITY,
        "minInclination": MIN_INCLINATION,
        "maxInclination": MAX_INCLINATION,
    }
