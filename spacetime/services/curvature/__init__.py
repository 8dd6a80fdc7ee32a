"""
Curvature Service for SPACETIME.

Computes weak-field curvature grids and point probes synchronously for
the REST API. Grids above the configured api_max_resolution are refused;
interactive clients that need larger grids use spacetime.workers.

Endpoints:
    POST /api/curvature/grid       - sample a full curvature grid
    POST /api/curvature/potential  - potential, metric deviation and tidal tensor at one point

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import time

from flask import jsonify, request

from spacetime.config import SimulationSettings
from spacetime.errors import ValidationError
from spacetime.grid import compute_curvature_grid
from spacetime.potential import (
    compute_metric_deviation,
    compute_potential,
    compute_tidal_tensor,
)
from spacetime.services import SpacetimeService, json_object
from spacetime.types import CurvatureGridConfig, MassSource
from spacetime.validation import is_finite_number, validate_grid_config, validate_mass_source


def parse_masses(raw):
    """Build and validate MassSource objects from a JSON list."""
    if not isinstance(raw, list):
        raise ValidationError("Masses must be an array")
    masses = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("MassSource must be an object")
        mass = MassSource.from_dict(item)
        validate_mass_source(mass)
        masses.append(mass)
    return masses


class CurvatureService(SpacetimeService):
    """
    Weak-field curvature grid service.

    Parameters
    ----------
    settings : SimulationSettings, optional
        Supplies default resolution, bounds and time step for payloads
        that omit them, and the api_max_resolution cap.
    """

    id = "curvature"
    name = "Spacetime Curvature"
    description = "Metric deviation and tidal tensor sampled over a 3D grid"
    status = "live"

    def __init__(self, settings=None):
        self._settings = settings or SimulationSettings()

    def validate(self, config):
        """Validate a grid request payload and return a CurvatureGridConfig."""
        config = json_object(config)

        settings = self._settings
        grid = CurvatureGridConfig(
            resolution=config.get("resolution", settings.grid_resolution),
            bounds=config.get("bounds", settings.bounds),
            time_step=config.get("timeStep", settings.animation_timestep),
            masses=parse_masses(config.get("masses", [])),
        )
        validate_grid_config(grid)

        if grid.resolution > settings.api_max_resolution:
            raise ValueError(
                "Resolution {} exceeds the API limit of {}".format(
                    grid.resolution, settings.api_max_resolution))
        return grid

    def compute(self, config):
        """Compute the grid and return the wire-format result with timing."""
        start = time.perf_counter()
        result = compute_curvature_grid(config)
        response = result.to_dict()
        response["computeTimeMs"] = (time.perf_counter() - start) * 1000.0
        return response

    def probe(self, point, masses):
        """Field values at a single point."""
        potential = compute_potential(point, masses)
        return {
            "point": list(point),
            "potential": potential,
            "metricDeviation": compute_metric_deviation(potential),
            "tidalTensor": list(compute_tidal_tensor(point, masses)),
        }

    def register_routes(self, bp):
        """Mount curvature endpoints."""
        service = self

        @bp.route("/curvature/grid", methods=["POST"])
        def curvature_grid():
            data = request.get_json(silent=True)
            try:
                config = service.validate(data)
            except ValueError as e:
                return jsonify({"error": str(e)}), 400
            return jsonify(service.compute(config))

        @bp.route("/curvature/potential", methods=["POST"])
        def curvature_potential():
            try:
                data = json_object(request.get_json(silent=True))
                point = data.get("point")
                if not isinstance(point, list) or len(point) != 3 \
                        or not all(is_finite_number(v) for v in point):
                    raise ValidationError("point must be 3 finite numbers")
                masses = parse_masses(data.get("masses", []))
            except ValueError as e:
                return jsonify({"error": str(e)}), 400
            return jsonify(service.probe(tuple(point), masses))
