"""
Runtime settings with environment-variable overrides.

Every setting has a safe default. Environment values that are empty or
fail to parse are ignored rather than raising, so a stray variable can
never stop the application from starting.

    SPACETIME_GRID_RESOLUTION      default grid cells per axis (32)
    SPACETIME_ANIMATION_TIMESTEP   default animation step in seconds (0.016)
    SPACETIME_API_MAX_RESOLUTION   largest grid the REST API computes inline (64)
    SPACETIME_INIT_TIMEOUT_MS      worker start-up deadline (5000)
    SPACETIME_COMPUTE_TIMEOUT_MS   per-request worker deadline (30000)
    SPACETIME_USE_WORKER           "0"/"false" forces same-thread computation
"""

import os

DEFAULT_GRID_RESOLUTION = 32
DEFAULT_ANIMATION_TIMESTEP = 0.016  # ~60 fps
DEFAULT_BOUNDS = (-5.0, -5.0, -5.0, 5.0, 5.0, 5.0)
DEFAULT_API_MAX_RESOLUTION = 64
DEFAULT_INIT_TIMEOUT_MS = 5000
DEFAULT_COMPUTE_TIMEOUT_MS = 30000

_FALSE_STRINGS = ("0", "false", "no", "off")


def _parse_int(value, default):
    if value is None or value == "":
        return default
    try:
        return int(value, 10)
    except ValueError:
        return default


def _parse_float(value, default):
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _parse_bool(value, default):
    if value is None or value == "":
        return default
    return value.strip().lower() not in _FALSE_STRINGS


class SimulationSettings:
    """
    Settings shared by the REST API, the compute dispatcher and the CLI.

    Parameters
    ----------
    grid_resolution : int
        Default grid resolution for new configurations.
    animation_timestep : float
        Default per-frame time step.
    bounds : tuple of float
        Default grid bounds.
    api_max_resolution : int
        Largest resolution the synchronous REST endpoint accepts.
    init_timeout_ms : int
        Worker initialization deadline.
    compute_timeout_ms : int
        Per-request compute deadline on the worker path.
    use_worker : bool
        Whether the dispatcher may start a worker process at all.
    """

    def __init__(self, grid_resolution=DEFAULT_GRID_RESOLUTION,
                 animation_timestep=DEFAULT_ANIMATION_TIMESTEP,
                 bounds=DEFAULT_BOUNDS,
                 api_max_resolution=DEFAULT_API_MAX_RESOLUTION,
                 init_timeout_ms=DEFAULT_INIT_TIMEOUT_MS,
                 compute_timeout_ms=DEFAULT_COMPUTE_TIMEOUT_MS,
                 use_worker=True):
        self.grid_resolution = grid_resolution
        self.animation_timestep = animation_timestep
        self.bounds = tuple(bounds)
        self.api_max_resolution = api_max_resolution
        self.init_timeout_ms = init_timeout_ms
        self.compute_timeout_ms = compute_timeout_ms
        self.use_worker = use_worker

    def to_dict(self):
        return {
            "gridResolution": self.grid_resolution,
            "animationTimestep": self.animation_timestep,
            "bounds": list(self.bounds),
            "apiMaxResolution": self.api_max_resolution,
            "initTimeoutMs": self.init_timeout_ms,
            "computeTimeoutMs": self.compute_timeout_ms,
            "useWorker": self.use_worker,
        }


def load_settings(environ=None):
    """
    Build settings from the environment.

    Parameters
    ----------
    environ : mapping, optional
        Source of variables. Defaults to os.environ.

    Returns
    -------
    SimulationSettings
    """
    env = os.environ if environ is None else environ
    return SimulationSettings(
        grid_resolution=_parse_int(
            env.get("SPACETIME_GRID_RESOLUTION"), DEFAULT_GRID_RESOLUTION),
        animation_timestep=_parse_float(
            env.get("SPACETIME_ANIMATION_TIMESTEP"), DEFAULT_ANIMATION_TIMESTEP),
        api_max_resolution=_parse_int(
            env.get("SPACETIME_API_MAX_RESOLUTION"), DEFAULT_API_MAX_RESOLUTION),
        init_timeout_ms=_parse_int(
            env.get("SPACETIME_INIT_TIMEOUT_MS"), DEFAULT_INIT_TIMEOUT_MS),
        compute_timeout_ms=_parse_int(
            env.get("SPACETIME_COMPUTE_TIMEOUT_MS"), DEFAULT_COMPUTE_TIMEOUT_MS),
        use_worker=_parse_bool(env.get("SPACETIME_USE_WORKER"), True),
    )
