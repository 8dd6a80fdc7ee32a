"""
Value objects for the curvature engine.

Classes:
    OrbitalParameters    - Keplerian orbital elements of one body
    MassSource           - Point mass that curves spacetime
    CurvatureGridConfig  - Grid extent, resolution and the masses to sample
    CurvatureSample      - Field values at one grid cell centre
    CurvatureGridResult  - Complete sampled grid

All classes serialize to plain dicts with camelCase keys (the wire
format used by the worker channel and the REST API) and rebuild from
them. from_dict() checks only nesting (an orbit must be an object);
run the validators in spacetime.validation before computing.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import numpy as np

from spacetime.errors import ValidationError


def _as_tuple(value):
    """Convert list-likes to tuples, leave anything else untouched for validation."""
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return value


class OrbitalParameters:
    """
    Keplerian orbital elements.

    Parameters
    ----------
    semi_major_axis : float
        Orbital size in simulation units.
    eccentricity : float
        Orbital shape, 0 = circular, < 1 = ellipse.
    inclination : float
        Tilt from the XY plane in radians.
    longitude_of_ascending_node : float
        Rotation of the node line in the XY plane, radians.
    argument_of_periapsis : float
        Rotation of periapsis within the orbital plane, radians.
    initial_true_anomaly : float
        True anomaly at t = 0, radians.
    """

    FIELDS = (
        ("semi_major_axis", "semiMajorAxis"),
        ("eccentricity", "eccentricity"),
        ("inclination", "inclination"),
        ("longitude_of_ascending_node", "longitudeOfAscendingNode"),
        ("argument_of_periapsis", "argumentOfPeriapsis"),
        ("initial_true_anomaly", "initialTrueAnomaly"),
    )

    def __init__(self, semi_major_axis, eccentricity=0.0, inclination=0.0,
                 longitude_of_ascending_node=0.0, argument_of_periapsis=0.0,
                 initial_true_anomaly=0.0):
        self.semi_major_axis = semi_major_axis
        self.eccentricity = eccentricity
        self.inclination = inclination
        self.longitude_of_ascending_node = longitude_of_ascending_node
        self.argument_of_periapsis = argument_of_periapsis
        self.initial_true_anomaly = initial_true_anomaly

    def replace(self, **changes):
        """Return a copy with the given fields replaced."""
        values = {attr: getattr(self, attr) for attr, _ in self.FIELDS}
        values.update(changes)
        return OrbitalParameters(**values)

    def to_dict(self):
        return {key: getattr(self, attr) for attr, key in self.FIELDS}

    @classmethod
    def from_dict(cls, data):
        if isinstance(data, OrbitalParameters):
            return data
        values = {}
        for attr, key in cls.FIELDS:
            if key in data:
                values[attr] = data[key]
            elif attr in data:
                values[attr] = data[attr]
        if "semi_major_axis" not in values:
            values["semi_major_axis"] = None
        return cls(**values)

    def __eq__(self, other):
        if not isinstance(other, OrbitalParameters):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return "OrbitalParameters({})".format(", ".join(
            "{}={!r}".format(attr, getattr(self, attr))
            for attr, _ in self.FIELDS))


class MassSource:
    """
    Point mass that curves spacetime.

    Parameters
    ----------
    id : str
        Unique identifier.
    position : tuple of float
        Position (x, y, z).
    mass : float
        Non-negative mass in normalized units.
    radius : float, optional
        Visual radius. Opaque to the engine.
    color : str, optional
        Visual color. Opaque to the engine.
    orbit : OrbitalParameters, optional
        Orbital elements. Bodies with an orbit are moved by
        spacetime.updater.update_mass_positions().
    orbits_central_mass_id : str, optional
        Id of the body this one orbits. A lookup key, not ownership.
    """

    def __init__(self, id, position, mass, radius=None, color=None,
                 orbit=None, orbits_central_mass_id=None):
        self.id = id
        self.position = _as_tuple(position)
        self.mass = mass
        self.radius = radius
        self.color = color
        self.orbit = orbit
        self.orbits_central_mass_id = orbits_central_mass_id

    def with_position(self, position):
        """Return a copy of this mass moved to ``position``."""
        return MassSource(
            id=self.id,
            position=tuple(position),
            mass=self.mass,
            radius=self.radius,
            color=self.color,
            orbit=self.orbit,
            orbits_central_mass_id=self.orbits_central_mass_id,
        )

    def to_dict(self):
        result = {
            "id": self.id,
            "position": list(self.position),
            "mass": self.mass,
        }
        if self.radius is not None:
            result["radius"] = self.radius
        if self.color is not None:
            result["color"] = self.color
        if self.orbit is not None:
            result["orbit"] = self.orbit.to_dict()
        if self.orbits_central_mass_id is not None:
            result["orbitsCentralMassId"] = self.orbits_central_mass_id
        return result

    @classmethod
    def from_dict(cls, data):
        if isinstance(data, MassSource):
            return data
        orbit = data.get("orbit")
        if orbit is not None and not isinstance(orbit, (dict, OrbitalParameters)):
            raise ValidationError(
                'MassSource "{}" orbit must be an object'.format(data.get("id")))
        return cls(
            id=data.get("id"),
            position=data.get("position"),
            mass=data.get("mass"),
            radius=data.get("radius"),
            color=data.get("color"),
            orbit=OrbitalParameters.from_dict(orbit) if orbit is not None else None,
            orbits_central_mass_id=data.get(
                "orbitsCentralMassId", data.get("orbits_central_mass_id")),
        )

    def __eq__(self, other):
        if not isinstance(other, MassSource):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return "MassSource(id={!r}, position={!r}, mass={!r})".format(
            self.id, self.position, self.mass)


class CurvatureGridConfig:
    """
    Configuration for sampling curvature on a 3D grid.

    Parameters
    ----------
    resolution : int
        Grid cells per axis, 2 to 256.
    bounds : tuple of float
        (min_x, min_y, min_z, max_x, max_y, max_z).
    time_step : float
        Simulation time step, 1e-4 to 1.0. Informational only.
    masses : list of MassSource
        Mass sources, in summation order.
    """

    def __init__(self, resolution, bounds, time_step, masses=None):
        self.resolution = resolution
        self.bounds = _as_tuple(bounds)
        self.time_step = time_step
        self.masses = list(masses) if isinstance(masses, (list, tuple)) else masses
        if self.masses is None:
            self.masses = []

    def with_masses(self, masses):
        """Return a copy of this config carrying ``masses``."""
        return CurvatureGridConfig(
            resolution=self.resolution,
            bounds=self.bounds,
            time_step=self.time_step,
            masses=masses,
        )

    def to_dict(self):
        # Malformed fields are passed through as-is so the receiving side
        # can report them as validation errors.
        masses = self.masses
        if isinstance(masses, list):
            masses = [m.to_dict() if isinstance(m, MassSource) else m for m in masses]
        return {
            "resolution": self.resolution,
            "bounds": list(self.bounds) if isinstance(self.bounds, tuple) else self.bounds,
            "timeStep": self.time_step,
            "masses": masses,
        }

    @classmethod
    def from_dict(cls, data):
        if isinstance(data, CurvatureGridConfig):
            return data
        masses = data.get("masses", [])
        if isinstance(masses, (list, tuple)):
            masses = [MassSource.from_dict(m) if isinstance(m, dict) else m
                      for m in masses]
        return cls(
            resolution=data.get("resolution"),
            bounds=data.get("bounds"),
            time_step=data.get("timeStep", data.get("time_step")),
            masses=masses,
        )


class CurvatureSample:
    """
    Field values at one grid cell centre.

    Parameters
    ----------
    position : tuple of float
        Cell centre (x, y, z).
    metric_deviation : float
        2 * Phi / c^2, clamped.
    tidal_tensor : tuple of float
        Diagonal tidal components (Txx, Tyy, Tzz), clamped.
    """

    __slots__ = ("position", "metric_deviation", "tidal_tensor")

    def __init__(self, position, metric_deviation, tidal_tensor):
        self.position = position
        self.metric_deviation = metric_deviation
        self.tidal_tensor = tidal_tensor

    def to_dict(self):
        return {
            "position": list(self.position),
            "metricDeviation": self.metric_deviation,
            "tidalTensor": list(self.tidal_tensor),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            position=tuple(data["position"]),
            metric_deviation=data["metricDeviation"],
            tidal_tensor=tuple(data["tidalTensor"]),
        )

    def __eq__(self, other):
        if not isinstance(other, CurvatureSample):
            return NotImplemented
        return (self.position == other.position
                and self.metric_deviation == other.metric_deviation
                and self.tidal_tensor == other.tidal_tensor)


class CurvatureGridResult:
    """
    Complete sampled curvature grid.

    Parameters
    ----------
    samples : list of CurvatureSample
        resolution^3 samples in z, y, x enumeration order.
    resolution : int
        Grid resolution used.
    bounds : tuple of float
        Grid bounds used.
    max_deviation : float
        Largest absolute metric deviation over all samples.
    """

    def __init__(self, samples, resolution, bounds, max_deviation):
        self.samples = samples
        self.resolution = resolution
        self.bounds = tuple(bounds)
        self.max_deviation = max_deviation

    def to_arrays(self):
        """
        Pack the samples into numpy arrays for renderers.

        Returns
        -------
        tuple of numpy.ndarray
            (positions, deviations, tidal): shapes (N, 3), (N,), (N, 3).
        """
        n = len(self.samples)
        positions = np.empty((n, 3), dtype=float)
        deviations = np.empty(n, dtype=float)
        tidal = np.empty((n, 3), dtype=float)
        for i, sample in enumerate(self.samples):
            positions[i] = sample.position
            deviations[i] = sample.metric_deviation
            tidal[i] = sample.tidal_tensor
        return positions, deviations, tidal

    def normalized_deviations(self):
        """Metric deviations scaled by max_deviation (all zeros for a flat grid)."""
        _, deviations, _ = self.to_arrays()
        if self.max_deviation == 0:
            return np.zeros_like(deviations)
        return deviations / self.max_deviation

    def to_dict(self):
        return {
            "samples": [s.to_dict() for s in self.samples],
            "resolution": self.resolution,
            "bounds": list(self.bounds),
            "maxDeviation": self.max_deviation,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            samples=[CurvatureSample.from_dict(s) for s in data["samples"]],
            resolution=data["resolution"],
            bounds=data["bounds"],
            max_deviation=data["maxDeviation"],
        )
