"""
Mass position updater: moves orbiting masses to their position at time t.
"""

from spacetime.constants import DEFAULT_CENTRAL_MASS
from spacetime.orbit import compute_orbital_position

ORIGIN = (0.0, 0.0, 0.0)


def total_system_mass(masses):
    """Sum of all masses, in list order."""
    total = 0.0
    for mass in masses:
        total += mass.mass
    return total


def update_mass_positions(masses, time):
    """
    Compute the positions of all orbiting masses at ``time``.

    Pure: returns a new list and never mutates the input. Masses without
    orbital elements are passed through unchanged. An orbiting mass whose
    orbits_central_mass_id names another mass in the list orbits that
    body's current position with that body's mass. Otherwise it orbits
    the origin under the total mass of the whole system (barycentric
    approximation), or DEFAULT_CENTRAL_MASS if that total is not positive.

    Parameters
    ----------
    masses : list of MassSource
    time : float
        Simulation time.

    Returns
    -------
    list of MassSource
    """
    by_id = {m.id: m for m in masses}
    system_mass = None
    updated = []

    for mass in masses:
        if mass.orbit is None:
            updated.append(mass)
            continue

        central = by_id.get(mass.orbits_central_mass_id) \
            if mass.orbits_central_mass_id else None

        if central is not None and central is not mass:
            central_mass = central.mass
            center = central.position
        else:
            if system_mass is None:
                system_mass = total_system_mass(masses)
            central_mass = system_mass if system_mass > 0 else DEFAULT_CENTRAL_MASS
            center = ORIGIN

        position = compute_orbital_position(mass.orbit, time, central_mass, center)
        updated.append(mass.with_position(position))

    return updated
