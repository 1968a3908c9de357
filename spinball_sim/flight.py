"""
Spinball Simulation - Flight Phase

This module runs the aerodynamic flight of the sphere from launch until it
crosses the ground plane y = ground_y:
- Input validation before any stepping
- Fixed-timestep integration (gravity, drag, Magnus, spin decay)
- Sub-step interpolation of the landing sample onto the ground plane
- Stability checks after every step and a hard time budget
"""

import logging
import time
from typing import Optional

import numpy as np

from . import constants as C
from . import vectors as vec
from .config import BodyParameters, SimulationConfig, create_default_config
from .integrators import integrate
from .sampler import SimulationResult, TrajectorySample, TrajectorySampler
from .state import KinematicState
from .validation import (
    InvalidParameter, NumericalInstability,
    check_direction, check_finite, check_non_negative, check_vector3,
    validate_body, validate_config, validate_state,
)

logger = logging.getLogger(__name__)


def check_flight_termination(state: KinematicState, ground_y: float) -> bool:
    """
    Check whether the flight has reached the ground.

    The launch sample (t == 0) never terminates the flight, so a body
    launched from the ground plane gets at least one step.
    """
    return bool(state.t > 0.0 and state.position[1] <= ground_y)


def interpolate_crossing(prev: KinematicState, new: KinematicState,
                         ground_y: float) -> KinematicState:
    """
    Linearly interpolate the step (prev -> new) to the ground crossing.

    Position, velocity, spin and time are interpolated with the same
    fraction of the step; the height is pinned to ground_y exactly. If prev
    already lies on the plane the full step is kept, so the landing sample
    always advances in time.

    Args:
        prev: State at the start of the step (above ground)
        new: State at the end of the step (at or below ground)
        ground_y: Ground plane height (m)

    Returns:
        Landing state lying on the ground plane
    """
    drop = prev.position[1] - new.position[1]
    # A body launched from the plane lands after a full step
    if prev.position[1] > ground_y and drop > C.ZERO_TOLERANCE:
        frac = (prev.position[1] - ground_y) / drop
    else:
        frac = 1.0
    frac = min(max(frac, 0.0), 1.0)

    position = prev.position + frac * (new.position - prev.position)
    position[1] = ground_y
    return KinematicState(
        position=position,
        velocity=prev.velocity + frac * (new.velocity - prev.velocity),
        spin_rate=prev.spin_rate + frac * (new.spin_rate - prev.spin_rate),
        spin_axis=new.spin_axis.copy(),
        t=prev.t + frac * (new.t - prev.t),
    )


def validate_flight_inputs(state: KinematicState, body: BodyParameters,
                           ground_y: float, config: SimulationConfig) -> KinematicState:
    """
    Validate everything the flight phase consumes.

    Returns:
        A copy of the state with a normalized spin axis

    Raises:
        InvalidParameter: On any rejected input
    """
    validate_config(config)
    validate_body(body, require_aero=True)
    check_finite("ground_y", ground_y)

    position = check_vector3("position", state.position)
    velocity = check_vector3("velocity", state.velocity)
    axis = check_direction("spin_axis", state.spin_axis)
    check_non_negative("spin_rate", state.spin_rate)

    if position[1] < ground_y:
        raise InvalidParameter(
            f"Launch position is below the ground plane: y = {position[1]:.4f} m, "
            f"ground_y = {ground_y:.4f} m"
        )
    speed = vec.norm(velocity)
    if speed > config.speed_ceiling:
        raise InvalidParameter(
            f"Launch speed {speed:.2f} m/s exceeds ceiling {config.speed_ceiling:.2f} m/s"
        )

    return KinematicState(position=position.copy(), velocity=velocity.copy(),
                          spin_rate=state.spin_rate, spin_axis=axis, t=state.t)


def simulate_flight_state(initial_state: KinematicState, body: BodyParameters,
                          ground_y: float = 0.0,
                          config: Optional[SimulationConfig] = None) -> SimulationResult:
    """
    Run the flight phase to ground contact.

    Args:
        initial_state: Launch state (position, velocity, spin)
        body: Body parameters
        ground_y: Ground plane height (m)
        config: SimulationConfig instance. If None a default is created.

    Returns:
        SimulationResult of TrajectorySamples; final_state is the exact
        landing state (position on the plane, velocity and spin at contact).

    Raises:
        InvalidParameter: Before stepping, for rejected inputs
        NumericalInstability: During stepping, on runaway values
        BudgetExceeded: If the body is still airborne after max_flight_time
    """
    if config is None:
        config = create_default_config()

    state = validate_flight_inputs(initial_state, body, ground_y, config)
    dt = config.dt

    logger.info(f"Starting flight: dt={dt}s, speed={state.speed:.2f}m/s, "
                f"spin={state.spin_rate:.1f}rad/s, ground_y={ground_y}m")
    logger.debug(f"Initial state: {state}")

    def step(prev: KinematicState) -> KinematicState:
        new = integrate(prev, body, dt, method=config.method, gravity=config.gravity,
                        lift_model=config.lift_model, spin_floor=config.spin_floor)
        try:
            validate_state(new, config.speed_ceiling)
        except NumericalInstability as e:
            logger.error(f"Flight became unstable at t={new.t:.3f}s: {e}")
            raise
        if new.position[1] <= ground_y:
            new = interpolate_crossing(prev, new, ground_y)
        return new

    sampler = TrajectorySampler(
        initial_state=state,
        step=step,
        record=TrajectorySample.from_state,
        stop=lambda s: check_flight_termination(s, ground_y),
        max_steps=config.max_flight_steps,
        dt=dt,
        reason="landed",
    )

    start_time = time.time()
    result = sampler.collect()
    elapsed = time.time() - start_time

    _log_completion(result, sampler.steps_taken, elapsed)
    return result


def _log_completion(result: SimulationResult, steps: int, elapsed: float):
    """Log summary statistics for a finished flight."""
    landing = result.final_state
    apex = float(np.max(result.positions()[:, 1]))
    logger.info(f"Flight complete: {steps} steps ({result.count} samples) in {elapsed:.3f}s")
    logger.info(f"Landing: t={landing.t:.3f}s, x={landing.position[0]:.2f}m, "
                f"z={landing.position[2]:.2f}m, apex={apex:.2f}m, "
                f"v={landing.speed:.2f}m/s")
