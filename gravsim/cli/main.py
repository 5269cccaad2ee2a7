"""CLI main entry point."""

import argparse
import logging
import sys
from dataclasses import replace

from gravsim.physics.simulator import Simulator
from gravsim.physics.diagnostics import Diagnostics
from gravsim.presets import PRESETS, get_preset
from gravsim.utils.config import Config, load_config
from gravsim.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_config(args) -> Config:
    """Merge a config file (if any) with command-line overrides."""
    config = load_config(args.config) if args.config else Config()

    overrides = {}
    if args.preset is not None:
        overrides['preset'] = args.preset
    if args.bodies is not None:
        overrides['n_bodies'] = args.bodies
    if args.steps is not None:
        overrides['steps'] = args.steps
    if args.dt is not None:
        overrides['dt'] = args.dt
    if args.speed is not None:
        overrides['speed_scale'] = args.speed
    if args.seed is not None:
        overrides['seed'] = args.seed
    if args.bounds is not None:
        overrides['bounded'] = True
        overrides['bounds'] = [0.0, 0.0, args.bounds[0], args.bounds[1]]
    if args.reflect_velocity is not None:
        overrides['reflect_velocity'] = (args.reflect_velocity == 'on')
    if args.trail_threshold is not None:
        overrides['trail_threshold'] = None if args.trail_threshold < 0 else args.trail_threshold
    if args.log_level is not None:
        overrides['log_level'] = args.log_level

    return replace(config, **overrides)


def run_simulation(config: Config, report_every: int = 100):
    """Run a headless simulation and print a diagnostics table."""
    params = dict(config.preset_params)
    if config.preset == 'ring':
        params.setdefault('G', config.gravity)
    preset = get_preset(config.preset, config.n_bodies, config.seed, **params)

    sim = Simulator.from_config(config)
    positions, velocities, masses = preset.generate()
    sim.initialize(positions, velocities, masses)

    diagnostics = Diagnostics.for_galaxy(sim.galaxy)

    print(f"Running simulation: {preset.name} with {config.n_bodies} bodies")
    bounds_desc = config.bounds if sim.bounds is not None else "unbounded"
    print(f"dt: {config.dt}, steps: {config.steps}, bounds: {bounds_desc}")

    header = f"{'Step':<8} {'Time':<10} {'Active':<8} {'Mass':<14} {'Px':<12} {'Py':<12} {'K':<14}"
    print(header)
    print("-" * len(header))

    def report():
        d = diagnostics.summary(sim.galaxy)
        px, py = d['momentum']
        print(f"{sim.step_count:<8} {sim.time:<10.2f} {d['active']:<8} {d['mass']:<14.2f} "
              f"{px:<12.4f} {py:<12.4f} {d['kinetic']:<14.4f}")

    report()
    for _ in range(config.steps):
        sim.step()
        if report_every > 0 and sim.step_count % report_every == 0:
            report()

    print(f"Simulation complete! {sim.galaxy.merge_count} merges, "
          f"{sim.galaxy.active_count} bodies remaining")
    return sim


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="gravsim - 2D N-body gravity sandbox")

    parser.add_argument('--config', type=str, default=None,
                        help='Configuration file (.json or .yaml)')

    # Simulation parameters
    parser.add_argument('--preset', type=str, default=None,
                        choices=sorted(PRESETS.keys()),
                        help='Preset scenario (default: random)')
    parser.add_argument('--bodies', type=int, default=None,
                        help='Number of bodies')
    parser.add_argument('--steps', type=int, default=None,
                        help='Number of simulation steps')
    parser.add_argument('--dt', type=float, default=None,
                        help='Time step')
    parser.add_argument('--speed', type=int, default=None,
                        help='Integrations per frame')
    parser.add_argument('--report-every', type=int, default=100,
                        help='Print diagnostics every N steps (0 disables)')

    # Boundaries and trails
    parser.add_argument('--bounds', type=float, nargs=2, metavar=('WIDTH', 'HEIGHT'), default=None,
                        help='Enable the bounded universe [0, WIDTH) x [0, HEIGHT)')
    parser.add_argument('--reflect-velocity', type=str, choices=['on', 'off'], default=None,
                        help='Flip velocity when a body is reflected (default: on)')
    parser.add_argument('--trail-threshold', type=float, default=None,
                        help='Trail move threshold; negative records every step (default: 2.0)')

    # Reproducibility and logging
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')
    parser.add_argument('--log-level', type=str, default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Log level (default: INFO)')

    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except (OSError, ValueError) as e:
        print(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(config.log_level)

    try:
        run_simulation(config, report_every=args.report_every)
    except ValueError as e:
        logger.error("Simulation failed: %s", e)
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
