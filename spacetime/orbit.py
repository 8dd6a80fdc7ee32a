"""
Keplerian orbital mechanics.

State-free routines over OrbitalParameters. The position of a body at
time t is obtained by chaining:

    period     T = 2*pi * sqrt(a^3 / (G*M))
    mean       M(t) = M0 + (2*pi/T) * t   (mod 2*pi)
    eccentric  solve M = E - e*sin(E) for E (Newton-Raphson)
    true       nu = 2*atan2(sqrt(1+e)*sin(E/2), sqrt(1-e)*cos(E/2))
    radius     r = a(1 - e^2) / (1 + e*cos(nu))

and rotating the perifocal position (r cos nu, r sin nu, 0) into 3D by
the longitude of the ascending node, the inclination and the argument
of periapsis.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import logging
import math

from spacetime import constants
from spacetime.constants import G
from spacetime.errors import OrbitalValidationError
from spacetime.types import OrbitalParameters
from spacetime.validation import is_finite_number

log = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi


def _clamp(value, lo, hi):
    return max(lo, min(hi, value))


def _sign(value):
    return (value > 0) - (value < 0)


def validate_orbital_parameters(params):
    """
    Validate orbital elements.

    Parameters
    ----------
    params : OrbitalParameters or dict

    Raises
    ------
    OrbitalValidationError
        If any element is non-finite, the semi-major axis is not
        positive, or the eccentricity is outside [0, 1).
    """
    if isinstance(params, dict):
        params = OrbitalParameters.from_dict(params)

    if not is_finite_number(params.semi_major_axis):
        raise OrbitalValidationError("Semi-major axis must be a finite number")
    if params.semi_major_axis <= 0:
        raise OrbitalValidationError("Semi-major axis must be positive")

    if not is_finite_number(params.eccentricity):
        raise OrbitalValidationError("Eccentricity must be a finite number")
    if params.eccentricity < 0 or params.eccentricity >= 1:
        raise OrbitalValidationError(
            "Eccentricity must be in range [0, 1), got {}".format(params.eccentricity))

    if not is_finite_number(params.inclination):
        raise OrbitalValidationError("Inclination must be a finite number")
    if not is_finite_number(params.longitude_of_ascending_node):
        raise OrbitalValidationError(
            "Longitude of ascending node must be a finite number")
    if not is_finite_number(params.argument_of_periapsis):
        raise OrbitalValidationError("Argument of periapsis must be a finite number")
    if not is_finite_number(params.initial_true_anomaly):
        raise OrbitalValidationError("Initial true anomaly must be a finite number")


def clamp_orbital_parameters(params):
    """
    Clamp orbital elements to their supported ranges.

    The semi-major axis, eccentricity and inclination are clamped; the
    three free angles are passed through.

    Returns
    -------
    OrbitalParameters
        A new, clamped instance.
    """
    return params.replace(
        semi_major_axis=_clamp(params.semi_major_axis,
                               constants.MIN_SEMI_MAJOR_AXIS,
                               constants.MAX_SEMI_MAJOR_AXIS),
        eccentricity=_clamp(params.eccentricity,
                            constants.MIN_ECCENTRICITY,
                            constants.MAX_CLAMPED_ECCENTRICITY),
        inclination=_clamp(params.inclination,
                           constants.MIN_INCLINATION,
                           constants.MAX_INCLINATION),
    )


def compute_orbital_period(semi_major_axis, central_mass):
    """
    Orbital period from Kepler's third law.

    Returns
    -------
    float
        2*pi*sqrt(a^3 / (G*M)), or inf when either input is not
        positive. Callers treat inf as "not orbiting".
    """
    if central_mass <= 0 or semi_major_axis <= 0:
        return math.inf
    return TWO_PI * math.sqrt(semi_major_axis ** 3 / (G * central_mass))


def compute_mean_anomaly(time, period, initial_mean_anomaly):
    """
    Mean anomaly at ``time``: M0 + (2*pi/T)*t, reduced modulo 2*pi.

    The reduction keeps the sign of the unreduced value. A non-finite or
    non-positive period leaves the body at M0.
    """
    if not math.isfinite(period) or period <= 0:
        return initial_mean_anomaly
    mean_motion = TWO_PI / period
    return math.fmod(initial_mean_anomaly + mean_motion * time, TWO_PI)


def true_to_mean_anomaly(true_anomaly, eccentricity):
    """Convert true anomaly to mean anomaly via the eccentric anomaly."""
    e = eccentricity
    ecc_anomaly = math.atan2(
        math.sqrt(1.0 - e * e) * math.sin(true_anomaly),
        e + math.cos(true_anomaly),
    )
    return ecc_anomaly - e * math.sin(ecc_anomaly)


def solve_kepler_equation(mean_anomaly, eccentricity):
    """
    Solve Kepler's equation M = E - e*sin(E) for the eccentric anomaly.

    Newton-Raphson with up to MAX_KEPLER_ITERATIONS steps, stopping once
    the step size drops below KEPLER_TOLERANCE. For e > 0.8 the initial
    guess M + e*sin(M) converges faster than M. Where the derivative
    1 - e*cos(E) vanishes a fixed step of KEPLER_BISECTION_STEP is taken
    toward the residual sign instead.

    Parameters
    ----------
    mean_anomaly : float
        Mean anomaly in radians.
    eccentricity : float
        Orbital eccentricity in [0, 1).

    Returns
    -------
    float
        Eccentric anomaly in radians. If the iteration does not converge
        the best estimate is returned and a warning is logged.
    """
    if eccentricity == 0:
        return mean_anomaly

    e = eccentricity
    ecc_anomaly = mean_anomaly
    if e > 0.8:
        ecc_anomaly = mean_anomaly + e * math.sin(mean_anomaly)

    converged = False
    for _ in range(constants.MAX_KEPLER_ITERATIONS):
        f = ecc_anomaly - e * math.sin(ecc_anomaly) - mean_anomaly
        f_prime = 1.0 - e * math.cos(ecc_anomaly)

        if abs(f_prime) < constants.KEPLER_DERIVATIVE_FLOOR:
            ecc_anomaly += _sign(f) * constants.KEPLER_BISECTION_STEP
            continue

        delta = f / f_prime
        ecc_anomaly -= delta
        if abs(delta) < constants.KEPLER_TOLERANCE:
            converged = True
            break

    if not converged:
        log.warning("Kepler solver did not converge for e=%s, M=%s; using best estimate",
                    eccentricity, mean_anomaly)

    return ecc_anomaly


def eccentric_to_true_anomaly(eccentric_anomaly, eccentricity):
    """Convert eccentric anomaly to true anomaly. Identity for circular orbits."""
    if eccentricity == 0:
        return eccentric_anomaly
    half = eccentric_anomaly / 2.0
    return 2.0 * math.atan2(
        math.sqrt(1.0 + eccentricity) * math.sin(half),
        math.sqrt(1.0 - eccentricity) * math.cos(half),
    )


def compute_orbital_position(params, time, central_mass, center_position=(0.0, 0.0, 0.0)):
    """
    Position of an orbiting body at ``time``.

    Parameters
    ----------
    params : OrbitalParameters
        Orbital elements.
    time : float
        Simulation time.
    central_mass : float
        Mass of the body (or system) being orbited.
    center_position : sequence of float, optional
        Position of the orbited body. Defaults to the origin.

    Returns
    -------
    tuple of float
        (x, y, z) in simulation coordinates.
    """
    a = params.semi_major_axis
    e = params.eccentricity

    period = compute_orbital_period(a, central_mass)
    initial_mean = true_to_mean_anomaly(params.initial_true_anomaly, e)
    mean_anomaly = compute_mean_anomaly(time, period, initial_mean)
    ecc_anomaly = solve_kepler_equation(mean_anomaly, e)
    nu = eccentric_to_true_anomaly(ecc_anomaly, e)

    r = a * (1.0 - e * e) / (1.0 + e * math.cos(nu))

    # Perifocal frame
    x_orb = r * math.cos(nu)
    y_orb = r * math.sin(nu)

    cos_node = math.cos(params.longitude_of_ascending_node)
    sin_node = math.sin(params.longitude_of_ascending_node)
    cos_i = math.cos(params.inclination)
    sin_i = math.sin(params.inclination)
    cos_w = math.cos(params.argument_of_periapsis)
    sin_w = math.sin(params.argument_of_periapsis)

    # R_z(node) * R_x(i) * R_z(w) applied to (x_orb, y_orb, 0)
    x = ((cos_node * cos_w - sin_node * sin_w * cos_i) * x_orb
         + (-cos_node * sin_w - sin_node * cos_w * cos_i) * y_orb)
    y = ((sin_node * cos_w + cos_node * sin_w * cos_i) * x_orb
         + (-sin_node * sin_w + cos_node * cos_w * cos_i) * y_orb)
    z = sin_w * sin_i * x_orb + cos_w * sin_i * y_orb

    return (
        center_position[0] + x,
        center_position[1] + y,
        center_position[2] + z,
    )


def create_default_orbital_parameters(radius=2.0, phase=0.0):
    """Circular, uninclined orbit of the given radius starting at ``phase``."""
    return OrbitalParameters(
        semi_major_axis=_clamp(radius, constants.MIN_SEMI_MAJOR_AXIS,
                               constants.MAX_SEMI_MAJOR_AXIS),
        eccentricity=0.0,
        inclination=0.0,
        longitude_of_ascending_node=0.0,
        argument_of_periapsis=0.0,
        initial_true_anomaly=phase,
    )


def create_binary_orbital_parameters(separation=3.0, mass_ratio=1.0, eccentricity=0.0):
    """
    Orbital elements for two bodies circling their common barycentre.

    Each semi-major axis is inversely proportional to the body's share
    of the total mass (a1 / a2 = m2 / m1), and the bodies start half an
    orbit apart.

    Parameters
    ----------
    separation : float
        Distance between the two bodies.
    mass_ratio : float
        Secondary / primary mass, clamped to [0.1, 1].
    eccentricity : float
        Shared eccentricity, clamped to [0, 0.95].

    Returns
    -------
    tuple of OrbitalParameters
        (primary, secondary).
    """
    q = _clamp(mass_ratio, constants.MIN_BINARY_MASS_RATIO,
               constants.MAX_BINARY_MASS_RATIO)
    total = 1.0 + q
    a1 = separation * q / total
    a2 = separation / total
    e = _clamp(eccentricity, constants.MIN_ECCENTRICITY,
               constants.MAX_CLAMPED_ECCENTRICITY)

    primary = OrbitalParameters(semi_major_axis=a1, eccentricity=e,
                                initial_true_anomaly=0.0)
    secondary = OrbitalParameters(semi_major_axis=a2, eccentricity=e,
                                  initial_true_anomaly=math.pi)
    return primary, secondary
