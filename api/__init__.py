"""SPACETIME REST API blueprint."""
