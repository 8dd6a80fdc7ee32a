"""
Orbit Service for SPACETIME.

Keplerian orbit propagation over JSON payloads.

Endpoints:
    POST /api/orbit/position - position and period of one orbit at time t
    POST /api/orbit/period   - Kepler's third law
    POST /api/orbit/update   - advance every orbiting mass of a system to time t

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import math

from flask import jsonify, request

from spacetime.errors import ValidationError
from spacetime.orbit import (
    compute_orbital_period,
    compute_orbital_position,
    validate_orbital_parameters,
)
from spacetime.services import SpacetimeService, json_object
from spacetime.services.curvature import parse_masses
from spacetime.types import OrbitalParameters
from spacetime.updater import update_mass_positions
from spacetime.validation import is_finite_number


def _finite(data, key, default=None):
    value = data.get(key, default)
    if not is_finite_number(value):
        raise ValidationError("{} must be a finite number".format(key))
    return value


def _period_or_none(period):
    # JSON has no Infinity; a non-orbiting body reports null.
    return period if math.isfinite(period) else None


class OrbitService(SpacetimeService):
    """Keplerian orbital mechanics service."""

    id = "orbit"
    name = "Orbital Mechanics"
    description = "Kepler-equation orbit propagation for mass sources"
    status = "live"

    def validate(self, config):
        """Validate a single-orbit payload."""
        config = json_object(config)
        raw_orbit = config.get("orbit")
        if not isinstance(raw_orbit, dict):
            raise ValidationError("orbit is required")
        orbit = OrbitalParameters.from_dict(raw_orbit)
        validate_orbital_parameters(orbit)

        center = config.get("centerPosition", [0.0, 0.0, 0.0])
        if not isinstance(center, list) or len(center) != 3 \
                or not all(is_finite_number(v) for v in center):
            raise ValidationError("centerPosition must be 3 finite numbers")

        return {
            "orbit": orbit,
            "time": _finite(config, "time", 0.0),
            "central_mass": _finite(config, "centralMass"),
            "center_position": tuple(center),
        }

    def compute(self, config):
        """Position and period for a validated single-orbit config."""
        orbit = config["orbit"]
        position = compute_orbital_position(
            orbit, config["time"], config["central_mass"], config["center_position"])
        period = compute_orbital_period(orbit.semi_major_axis, config["central_mass"])
        return {
            "position": list(position),
            "period": _period_or_none(period),
        }

    def update_system(self, masses, time):
        """Advance all orbiting masses and serialize the result."""
        for mass in masses:
            if mass.orbit is not None:
                validate_orbital_parameters(mass.orbit)
        updated = update_mass_positions(masses, time)
        return {"time": time, "masses": [m.to_dict() for m in updated]}

    def register_routes(self, bp):
        """Mount orbit endpoints."""
        service = self

        @bp.route("/orbit/position", methods=["POST"])
        def orbit_position():
            data = request.get_json(silent=True)
            try:
                config = service.validate(data)
            except ValueError as e:
                return jsonify({"error": str(e)}), 400
            return jsonify(service.compute(config))

        @bp.route("/orbit/period", methods=["POST"])
        def orbit_period():
            try:
                data = json_object(request.get_json(silent=True))
                a = _finite(data, "semiMajorAxis")
                m = _finite(data, "centralMass")
            except ValueError as e:
                return jsonify({"error": str(e)}), 400
            period = compute_orbital_period(a, m)
            return jsonify({
                "period": _period_or_none(period),
                "orbiting": math.isfinite(period),
            })

        @bp.route("/orbit/update", methods=["POST"])
        def orbit_update():
            try:
                data = json_object(request.get_json(silent=True))
                time = _finite(data, "time", 0.0)
                masses = parse_masses(data.get("masses", []))
                return jsonify(service.update_system(masses, time))
            except ValueError as e:
                return jsonify({"error": str(e)}), 400
