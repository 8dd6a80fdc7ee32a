"""
Simulation stepping: advance orbits over time and recompute curvature.

Each tick advances the simulation clock, moves every orbiting mass with
update_mass_positions(), and hands the updated configuration to a
PhysicsComputer. Frame deltas are clamped twice: first to MAX_FRAME_TIME
(so a stalled caller does not make bodies jump), then, after applying
the time scale, to the orbital time-step range.
"""

import logging

from spacetime.updater import update_mass_positions

log = logging.getLogger(__name__)

MIN_ORBITAL_TIME_STEP = 0.001
MAX_ORBITAL_TIME_STEP = 0.1
MAX_FRAME_TIME = 0.1
MIN_TIME_SCALE = 0.0
MAX_TIME_SCALE = 10.0


def clamp_time_scale(scale):
    """Clamp a time scale to [0, 10]; 0 pauses the simulation."""
    return max(MIN_TIME_SCALE, min(MAX_TIME_SCALE, scale))


def advance_simulation_time(masses, simulation_time, delta_time, time_scale=1.0):
    """
    Advance the simulation clock by one frame and move orbiting masses.

    Parameters
    ----------
    masses : list of MassSource
        Masses at ``simulation_time``.
    simulation_time : float
        Current simulation time.
    delta_time : float
        Wall-clock time since the previous frame, in seconds.
    time_scale : float, optional
        Speed multiplier, clamped to [0, 10].

    Returns
    -------
    tuple
        (new_time, new_masses). With a zero time scale or a non-positive
        frame delta the inputs are returned unchanged.
    """
    time_scale = clamp_time_scale(time_scale)
    frame = min(delta_time, MAX_FRAME_TIME)
    if time_scale == 0 or frame <= 0:
        return simulation_time, masses

    step = frame * time_scale
    step = min(max(step, MIN_ORBITAL_TIME_STEP), MAX_ORBITAL_TIME_STEP)
    new_time = simulation_time + step
    return new_time, update_mass_positions(masses, new_time)


async def run_simulation(config, computer, frames, frame_time=0.016, time_scale=1.0,
                         start_time=0.0):
    """
    Step a configuration through ``frames`` ticks, computing a grid per tick.

    Positions are first reset to ``start_time`` so a run is reproducible
    from the orbital elements alone.

    Parameters
    ----------
    config : CurvatureGridConfig
        Grid configuration; its masses are advanced each tick.
    computer : PhysicsComputer
        Runs the grid computations.
    frames : int
        Number of ticks.
    frame_time : float, optional
        Frame delta fed to advance_simulation_time().
    time_scale : float, optional
        Speed multiplier.
    start_time : float, optional
        Initial simulation time.

    Yields
    ------
    tuple
        (time, masses, CurvatureGridResult) for each tick.
    """
    time = start_time
    masses = update_mass_positions(config.masses, time)

    for frame in range(frames):
        time, masses = advance_simulation_time(masses, time, frame_time, time_scale)
        result = await computer.compute(config.with_masses(masses))
        log.debug("Frame %d at t=%.4f: max deviation %g", frame, time, result.max_deviation)
        yield time, masses, result
