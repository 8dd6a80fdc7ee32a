"""
Weak-field potential, tidal tensor and metric deviation.

Newtonian point-mass potential summed over all sources:

    Phi(p) = -sum_i G * m_i / max(|p - x_i|, MIN_DISTANCE)

Diagonal of the tidal tensor (second derivatives of Phi):

    T_jj = sum_i G * m_i * (3 * d_j^2 / r^2 - 1) / r^3

Metric deviation from flat spacetime (g_00 ~ -(1 + 2 Phi / c^2)):

    h = 2 * Phi / c^2

Summation follows the order of the masses list; keep that order stable
for bit-reproducible grids. Sources with zero mass are skipped outright.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import math

from spacetime.constants import G, C_LIGHT, MIN_DISTANCE, MAX_METRIC_DEVIATION


def clamp_deviation(value):
    """Clamp to [-MAX_METRIC_DEVIATION, MAX_METRIC_DEVIATION]."""
    return max(-MAX_METRIC_DEVIATION, min(MAX_METRIC_DEVIATION, value))


def distance(p1, p2):
    """Euclidean distance between two 3D points."""
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    dz = p2[2] - p1[2]
    return math.sqrt(dx * dx + dy * dy + dz * dz)


def compute_potential(point, masses):
    """
    Newtonian gravitational potential at ``point``.

    Parameters
    ----------
    point : sequence of float
        Evaluation point (x, y, z).
    masses : list of MassSource
        Sources, summed in list order.

    Returns
    -------
    float
        Potential (negative for attractive gravity).
    """
    potential = 0.0
    for mass in masses:
        if mass.mass == 0:
            continue
        r = max(distance(point, mass.position), MIN_DISTANCE)
        potential -= G * mass.mass / r
    return potential


def compute_tidal_tensor(point, masses):
    """
    Diagonal tidal tensor components at ``point``.

    For a single mass T = G*M/r^3 * (3 r_hat r_hat - I); only the diagonal
    is kept. Each component is clamped after summation.

    Returns
    -------
    tuple of float
        (Txx, Tyy, Tzz).
    """
    txx = 0.0
    tyy = 0.0
    tzz = 0.0

    for mass in masses:
        if mass.mass == 0:
            continue

        dx = point[0] - mass.position[0]
        dy = point[1] - mass.position[1]
        dz = point[2] - mass.position[2]

        r = max(math.sqrt(dx * dx + dy * dy + dz * dz), MIN_DISTANCE)
        r_squared = r * r
        gm_over_r3 = G * mass.mass / (r_squared * r)

        txx += (3.0 * dx * dx / r_squared - 1.0) * gm_over_r3
        tyy += (3.0 * dy * dy / r_squared - 1.0) * gm_over_r3
        tzz += (3.0 * dz * dz / r_squared - 1.0) * gm_over_r3

    return (clamp_deviation(txx), clamp_deviation(tyy), clamp_deviation(tzz))


def compute_metric_deviation(potential):
    """Metric deviation 2*Phi/c^2, clamped. Zero potential gives exactly zero."""
    return clamp_deviation(2.0 * potential / (C_LIGHT * C_LIGHT))
