"""
SPACETIME Service Layer: SpacetimeService ABC and ServiceRegistry.

Each computation domain (curvature grids, orbital mechanics) is a
SpacetimeService registered with the ServiceRegistry. The registry
provides lightweight dependency injection: services are looked up by
ID at runtime, and each service owns its own API endpoints, config
validation, and result format.

Classes:
    SpacetimeService - Abstract base class for all services
    ServiceRegistry  - Central lookup container for registered services

json_object() is the shared request-body guard for service routes.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

from abc import ABC, abstractmethod


def json_object(data):
    """
    Return a request payload that must be a non-empty JSON object.

    Raises
    ------
    ValueError
        If the body is missing or is not an object.
    """
    if not data:
        raise ValueError("Request body must be JSON")
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


class SpacetimeService(ABC):
    """
    Abstract base class for a SPACETIME service.

    Class Attributes
    ----------------
    id : str
        Unique service identifier (e.g. "curvature", "orbit").
    name : str
        Human-readable display name.
    description : str
        One-liner for service listings.
    status : str
        "live" or "coming_soon". Only live services mount routes.
    """

    id = ""
    name = ""
    description = ""
    status = "coming_soon"

    @abstractmethod
    def validate(self, config):
        """
        Validate raw input and return a normalized config.

        Parameters
        ----------
        config : dict
            Raw request payload.

        Raises
        ------
        ValueError
            If the config is invalid (ValidationError is a ValueError).
        """

    @abstractmethod
    def compute(self, config):
        """
        Run the service computation on a validated config.

        Returns
        -------
        dict
            JSON-serializable result.
        """

    def register_routes(self, blueprint):
        """
        Mount service-specific API endpoints onto a Flask blueprint.

        Parameters
        ----------
        blueprint : flask.Blueprint
            The API blueprint to mount routes on.
        """

    def metadata(self):
        """Service info for the registry listing."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "status": self.status,
        }


class ServiceRegistry:
    """
    Central lookup container for registered SpacetimeService instances.
    """

    def __init__(self):
        self._services = {}

    def register(self, service):
        """
        Register a service instance.

        Raises
        ------
        ValueError
            If a service with the same id is already registered.
        """
        if service.id in self._services:
            raise ValueError(
                "Service '{}' is already registered".format(service.id)
            )
        self._services[service.id] = service

    def get(self, service_id):
        """Look up a service by id; None if not registered."""
        return self._services.get(service_id)

    def list_all(self):
        """Metadata for all registered services, in registration order."""
        return [s.metadata() for s in self._services.values()]

    def live(self):
        """All services with status 'live'."""
        return [s for s in self._services.values()
                if s.status == "live"]
