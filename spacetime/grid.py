"""
Curvature grid computer.

Samples the weak-field potential, metric deviation and tidal tensor at
the centre of every cell of a regular 3D grid. Cells are enumerated
z-major, then y, then x; the sample list, and therefore every
downstream buffer built from it, has that layout.

Cost is O(resolution^3 * len(masses)). At resolution 64 with a handful
of masses this takes seconds in pure Python, so interactive callers go
through spacetime.workers rather than calling this on their own thread.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import logging

from spacetime.potential import (
    compute_potential,
    compute_metric_deviation,
    compute_tidal_tensor,
)
from spacetime.types import CurvatureGridConfig, CurvatureGridResult, CurvatureSample
from spacetime.validation import validate_grid_config

log = logging.getLogger(__name__)


def cell_centers(lo, hi, resolution):
    """Cell-centre coordinates along one axis: lo + (i + 0.5) * step."""
    step = (hi - lo) / resolution
    return [lo + (i + 0.5) * step for i in range(resolution)]


def compute_curvature_grid(config):
    """
    Compute curvature samples over the configured grid.

    Identical configs (including mass order) always produce identical
    samples and max_deviation.

    Parameters
    ----------
    config : CurvatureGridConfig or dict
        Grid configuration. Dicts use the camelCase wire format.

    Returns
    -------
    CurvatureGridResult
        resolution^3 samples plus the maximum absolute deviation.

    Raises
    ------
    ValidationError
        If the configuration fails validation. Nothing is computed.
    """
    if isinstance(config, dict):
        config = CurvatureGridConfig.from_dict(config)
    validate_grid_config(config)

    resolution = int(config.resolution)
    bounds = tuple(float(b) for b in config.bounds)
    masses = config.masses
    min_x, min_y, min_z, max_x, max_y, max_z = bounds

    xs = cell_centers(min_x, max_x, resolution)
    ys = cell_centers(min_y, max_y, resolution)
    zs = cell_centers(min_z, max_z, resolution)

    samples = []
    max_deviation = 0.0

    for z in zs:
        for y in ys:
            for x in xs:
                position = (x, y, z)
                potential = compute_potential(position, masses)
                deviation = compute_metric_deviation(potential)
                tidal = compute_tidal_tensor(position, masses)

                samples.append(CurvatureSample(position, deviation, tidal))
                max_deviation = max(max_deviation, abs(deviation))

    log.debug("Computed %d samples from %d masses (max deviation %g)",
              len(samples), len(masses), max_deviation)

    return CurvatureGridResult(
        samples=samples,
        resolution=resolution,
        bounds=bounds,
        max_deviation=max_deviation,
    )
