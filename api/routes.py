"""
Flask API blueprint for SPACETIME.

Shared endpoints:
  GET  /api/services     - metadata for every registered service
  GET  /api/constants    - numerical constants and limits of the model
  GET  /api/settings     - active runtime settings

Every live service mounts its own endpoints (e.g. /api/curvature/grid,
/api/orbit/position) through register_routes().
"""

from flask import Blueprint, jsonify

from spacetime import constants


def create_api_blueprint(registry, settings):
    """
    Build the API blueprint for a populated registry.

    Parameters
    ----------
    registry : ServiceRegistry
        Services to expose. Live services mount their own routes.
    settings : SimulationSettings
        Active settings, reported by GET /api/settings.

    Returns
    -------
    flask.Blueprint
    """
    api = Blueprint("api", __name__, url_prefix="/api")

    @api.route("/services", methods=["GET"])
    def list_services():
        """Return metadata for all registered services."""
        return jsonify(registry.list_all())

    @api.route("/constants", methods=["GET"])
    def get_constants():
        """Return the model constants and validation limits."""
        return jsonify({
            "G": constants.G,
            "c": constants.C_LIGHT,
            "minDistance": constants.MIN_DISTANCE,
            "maxMetricDeviation": constants.MAX_METRIC_DEVIATION,
            "grid": constants.grid_constraints(),
            "orbit": constants.orbital_constraints(),
        })

    @api.route("/settings", methods=["GET"])
    def get_settings():
        """Return the active runtime settings."""
        return jsonify(settings.to_dict())

    for service in registry.live():
        service.register_routes(api)

    return api
