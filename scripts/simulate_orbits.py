#!/usr/bin/env python3
"""
simulate_orbits.py
==================
Run a binary system through the orbit + curvature loop.

Two masses orbit their barycentre; every frame advances the orbits,
recomputes the curvature grid through a PhysicsComputerProvider (worker
process when available) and prints the body positions and the peak
metric deviation.

    python scripts/simulate_orbits.py --frames 20 --resolution 16
    python scripts/simulate_orbits.py --no-worker --eccentricity 0.4
"""

import argparse
import asyncio
import logging
import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from spacetime.config import load_settings
from spacetime.logging_config import setup_logging
from spacetime.orbit import create_binary_orbital_parameters
from spacetime.simulation import run_simulation
from spacetime.types import CurvatureGridConfig, MassSource
from spacetime.workers import PhysicsClientOptions, PhysicsComputerProvider


def build_binary_config(args, settings):
    """Grid config with a primary/secondary pair on opposite sides of the barycentre."""
    primary_orbit, secondary_orbit = create_binary_orbital_parameters(
        separation=args.separation,
        mass_ratio=args.mass_ratio,
        eccentricity=args.eccentricity,
    )
    primary_mass = args.mass
    secondary_mass = args.mass * min(max(args.mass_ratio, 0.1), 1.0)
    masses = [
        MassSource("primary", (0.0, 0.0, 0.0), primary_mass, orbit=primary_orbit),
        MassSource("secondary", (0.0, 0.0, 0.0), secondary_mass, orbit=secondary_orbit),
    ]
    return CurvatureGridConfig(
        resolution=args.resolution,
        bounds=settings.bounds,
        time_step=settings.animation_timestep,
        masses=masses,
    )


async def simulate(args):
    settings = load_settings()
    options = PhysicsClientOptions.from_settings(
        settings, use_worker=settings.use_worker and not args.no_worker)
    provider = PhysicsComputerProvider(options)
    config = build_binary_config(args, settings)

    try:
        computer = await provider.get()
        mode = "worker process" if provider.is_using_worker else "same thread"
        print("Computing on: %s" % mode)
        print("  %5s %9s  %-28s %-28s %12s" % (
            "frame", "t", "primary", "secondary", "max |h|"))

        frame = 0
        async for t, masses, result in run_simulation(
                config, computer, args.frames,
                frame_time=args.frame_time, time_scale=args.time_scale):
            p, s = masses[0].position, masses[1].position
            print("  %5d %9.4f  (%7.3f, %7.3f, %7.3f)  (%7.3f, %7.3f, %7.3f) %12.4f" % (
                frame, t, p[0], p[1], p[2], s[0], s[1], s[2], result.max_deviation))
            frame += 1
    finally:
        provider.terminate()
        # Let the worker's shutdown grace period run before the loop closes.
        await asyncio.sleep(0.2)


def main():
    ap = argparse.ArgumentParser(
        description="Advance a binary system and recompute curvature each frame.")
    ap.add_argument("--frames", type=int, default=10,
                    help="Number of frames to simulate (default 10)")
    ap.add_argument("--resolution", type=int, default=16,
                    help="Grid cells per axis (default 16)")
    ap.add_argument("--mass", type=float, default=100.0,
                    help="Primary mass (default 100)")
    ap.add_argument("--mass-ratio", type=float, default=1.0,
                    help="Secondary / primary mass, 0.1 to 1 (default 1)")
    ap.add_argument("--separation", type=float, default=3.0,
                    help="Binary separation (default 3)")
    ap.add_argument("--eccentricity", type=float, default=0.0,
                    help="Orbital eccentricity (default 0)")
    ap.add_argument("--frame-time", type=float, default=0.016,
                    help="Seconds per frame before time scaling (default 0.016)")
    ap.add_argument("--time-scale", type=float, default=1.0,
                    help="Simulation speed multiplier, 0 to 10 (default 1)")
    ap.add_argument("--no-worker", action="store_true",
                    help="Compute on the calling thread")
    ap.add_argument("-v", "--verbose", action="store_true",
                    help="Debug logging")
    args = ap.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)
    asyncio.run(simulate(args))


if __name__ == "__main__":
    main()
