"""
Spinball Simulation - CLI

Command-line entry point for running flights, ground rolls, or a full shot
(flight chained into bounce and roll), printing a summary and optionally
writing plots.
"""

import argparse
import logging
import os
import sys
from dataclasses import replace

from . import constants as C
from .config import create_default_config
from .engine import create_engine
from .metrics import bounce_count, roll_distance, summarize_flight, total_distance
from .validation import SimulationError
from .vectors import launch_velocity

logger = logging.getLogger(__name__)

# Regulation golf ball
BALL_MASS = 0.04593
BALL_RADIUS = 0.02135
BALL_AREA = 0.00143


def _add_body_args(parser: argparse.ArgumentParser):
    parser.add_argument("--mass", type=float, default=BALL_MASS, help="Body mass (kg)")
    parser.add_argument("--radius", type=float, default=BALL_RADIUS, help="Body radius (m)")
    parser.add_argument("--spin", type=float, default=280.0, help="Spin rate (rad/s)")
    parser.add_argument("--spin-axis", type=float, nargs=3, default=[0.0, 0.0, 1.0],
                        metavar=("X", "Y", "Z"), help="Spin axis")


def _add_flight_args(parser: argparse.ArgumentParser):
    parser.add_argument("--speed", type=float, default=71.5, help="Launch speed (m/s)")
    parser.add_argument("--launch", type=float, default=10.5, help="Launch angle (deg)")
    parser.add_argument("--side", type=float, default=0.0, help="Side angle (deg)")
    parser.add_argument("--cd", type=float, default=0.25, help="Drag coefficient")
    parser.add_argument("--cl", type=float, default=0.15, help="Lift coefficient")
    parser.add_argument("--area", type=float, default=BALL_AREA, help="Cross-sectional area (m^2)")
    parser.add_argument("--spin-decay", type=float, default=0.04,
                        help="Fractional spin loss per second")
    parser.add_argument("--air-density", type=float, default=C.AIR_DENSITY,
                        help="Air density (kg/m^3)")
    parser.add_argument("--lift-model", choices=C.LIFT_MODELS, default="linear",
                        help="Magnus lift model")


def _add_surface_args(parser: argparse.ArgumentParser):
    parser.add_argument("--rolling-friction", type=float, default=0.1,
                        help="Rolling resistance coefficient")
    parser.add_argument("--restitution", type=float, default=0.4,
                        help="Surface restitution")
    parser.add_argument("--firmness", type=float, default=0.6, help="Surface firmness [0, 1]")
    parser.add_argument("--normal", type=float, nargs=3, default=[0.0, 1.0, 0.0],
                        metavar=("X", "Y", "Z"), help="Surface normal")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="spinball-sim",
        description="Spinning-sphere flight and ground-roll simulation",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--dt", type=float, default=C.DT, help="Timestep (s)")
    parser.add_argument("--method", choices=C.INTEGRATION_METHODS, default="semi_implicit",
                        help="Integration method")
    parser.add_argument("--plot-dir", type=str, default=None,
                        help="Directory to save plots (no plots if omitted)")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress info logging")

    sub = parser.add_subparsers(dest="command", required=True)
    fmt = argparse.ArgumentDefaultsHelpFormatter

    flight = sub.add_parser("flight", help="Simulate flight to ground contact",
                            formatter_class=fmt)
    _add_body_args(flight)
    _add_flight_args(flight)

    roll = sub.add_parser("roll", help="Simulate bounce and roll from a landing state",
                          formatter_class=fmt)
    _add_body_args(roll)
    _add_surface_args(roll)
    roll.add_argument("--velocity", type=float, nargs=3, default=[20.0, -8.0, 0.0],
                      metavar=("VX", "VY", "VZ"), help="Landing velocity (m/s)")
    roll.add_argument("--friction", type=float, default=C.BODY_FRICTION,
                      help="Body contact friction")

    shot = sub.add_parser("shot", help="Simulate flight followed by bounce and roll",
                          formatter_class=fmt)
    _add_body_args(shot)
    _add_flight_args(shot)
    _add_surface_args(shot)
    shot.add_argument("--friction", type=float, default=C.BODY_FRICTION,
                      help="Body contact friction")
    return parser


def _run_flight(engine, args):
    velocity = launch_velocity(args.speed, args.launch, args.side)
    return engine.simulate_flight(
        velocity, mass=args.mass, radius=args.radius,
        drag_coefficient=args.cd, lift_coefficient=args.cl, cross_area=args.area,
        spin_rate=args.spin, spin_axis=args.spin_axis, air_density=args.air_density,
        spin_decay=args.spin_decay,
    )


def _run_roll(engine, args, position, velocity, spin_rate):
    return engine.simulate_roll(
        position, velocity, radius=args.radius, mass=args.mass,
        rolling_friction=args.rolling_friction, surface_restitution=args.restitution,
        firmness=args.firmness, spin_rate=spin_rate, spin_axis=args.spin_axis,
        surface_normal=args.normal, friction=args.friction,
    )


def _print_flight(flight):
    summary = summarize_flight(flight)
    print(f"Carry:          {summary['carry']:.2f} m")
    print(f"Apex:           {summary['apex']:.2f} m")
    print(f"Lateral:        {summary['lateral']:.2f} m")
    print(f"Flight time:    {summary['flight_time']:.2f} s")
    print(f"Landing speed:  {summary['landing_speed']:.2f} m/s")
    print(f"Landing angle:  {summary['landing_angle_deg']:.1f} deg")
    print(f"Flight samples: {flight.count}")


def _print_roll(roll, normal):
    rest = roll[-1]
    print(f"Roll distance:  {roll_distance(roll):.2f} m")
    print(f"Rest time:      {rest.t:.2f} s")
    print(f"Bounces:        {bounce_count(roll, normal)}")
    print(f"Roll samples:   {roll.count}")
    print("Phase timeline:")
    prev_phase = None
    for sample in roll:
        if sample.phase != prev_phase:
            print(f"  t={sample.t:7.3f}s | x={sample.x:8.2f} m | "
                  f"spin={sample.spin:7.1f} rad/s | {sample.phase}")
            prev_phase = sample.phase


def main(argv=None):
    """Main execution flow."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    extra = {}
    if getattr(args, "lift_model", None):
        extra["lift_model"] = args.lift_model
    try:
        config = replace(create_default_config(), dt=args.dt, method=args.method, **extra)
        engine = create_engine(config)

        flight = roll = None
        print("=" * 60)
        print(f"SPINBALL SIMULATION: {args.command.upper()}")
        print("=" * 60)

        if args.command in ("flight", "shot"):
            flight = _run_flight(engine, args)
            _print_flight(flight)

        if args.command == "roll":
            roll = _run_roll(engine, args, (0.0, 0.0, 0.0), args.velocity, args.spin)
            _print_roll(roll, args.normal)
        elif args.command == "shot":
            landing = flight.landing_state
            roll = _run_roll(engine, args, landing.position, landing.velocity,
                             landing.spin_rate)
            _print_roll(roll, args.normal)
            print(f"Total distance: {total_distance(flight, roll):.2f} m")
        print("=" * 60)

        if args.plot_dir:
            from .plotting import generate_all_plots
            plot_dir = os.path.abspath(args.plot_dir)
            logger.info(f"Generating plots in {plot_dir}")
            paths = generate_all_plots(plot_dir, flight=flight, roll=roll)
            print(f"Plots written: {len(paths)} in {plot_dir}")

    except SimulationError as e:
        logger.error(f"Simulation failed: {e}")
        print(f"\n[ERROR] Simulation failed: {e}")
        sys.exit(1)
    return 0


if __name__ == "__main__":
    main()
