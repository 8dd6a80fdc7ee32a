"""
SPACETIME - weak-field curvature and orbital mechanics engine.

Computes the Newtonian potential, metric deviation and tidal tensor of
a set of point masses over a volumetric grid, propagates Keplerian
orbits for the masses that carry orbital elements, and dispatches grid
computations to a worker process so callers stay responsive.
"""

__version__ = "0.1.0"
