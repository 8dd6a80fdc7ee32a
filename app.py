"""
SPACETIME - weak-field curvature and orbital mechanics engine.
Flask application factory.

Serves the REST API for curvature grids and orbit propagation via
registered SpacetimeService instances.

Usage:
    python app.py              # Development server on http://localhost:5000
    flask run                  # Same, via Flask CLI
"""

from flask import Flask

from spacetime import __version__
from spacetime.config import load_settings
from spacetime.logging_config import setup_logging
from spacetime.services import ServiceRegistry
from spacetime.services.curvature import CurvatureService
from spacetime.services.orbit import OrbitService


def create_registry(settings):
    """Build and populate the service registry."""
    registry = ServiceRegistry()
    registry.register(CurvatureService(settings))
    registry.register(OrbitService())
    return registry


def create_app(settings=None):
    """
    Application factory for the SPACETIME Flask app.

    Parameters
    ----------
    settings : SimulationSettings, optional
        Defaults to load_settings() (environment overrides applied).
    """
    settings = settings or load_settings()
    app = Flask(__name__)
    app.config["SPACETIME_SETTINGS"] = settings
    app.config["SPACETIME_VERSION"] = __version__

    registry = create_registry(settings)
    app.extensions["spacetime_registry"] = registry

    from api.routes import create_api_blueprint
    app.register_blueprint(create_api_blueprint(registry, settings))

    return app


if __name__ == "__main__":
    setup_logging()
    app = create_app()
    app.run(debug=True, host="127.0.0.1", port=5000)
