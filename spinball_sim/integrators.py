"""
Spinball Simulation - Numerical Integration

This module advances a KinematicState by one fixed timestep under gravity,
drag and Magnus lift. Semi-implicit Euler is the default scheme (velocity
first, then position with the updated velocity); classic RK4 is available
for comparison. Spin decays once per step in both schemes.
"""

import numpy as np

from . import constants as C
from .config import BodyParameters
from .forces import compute_acceleration
from .state import KinematicState


def decay_spin(spin_rate: float, spin_decay: float, dt: float,
               spin_floor: float = C.SPIN_FLOOR) -> float:
    """
    Exponential spin decay compounded over dt.

        spin(t + dt) = spin(t) * (1 - spin_decay) ** dt

    Spin below spin_floor snaps to zero.
    """
    spin = spin_rate * (1.0 - spin_decay) ** dt
    if spin < spin_floor:
        return 0.0
    return float(spin)


def semi_implicit_euler_step(state: KinematicState, body: BodyParameters, dt: float,
                             gravity: float = C.GRAVITY, lift_model: str = "linear",
                             spin_floor: float = C.SPIN_FLOOR) -> KinematicState:
    """
    Perform a single semi-implicit (symplectic) Euler step.

    v(t+dt) = v(t) + a(t) * dt
    x(t+dt) = x(t) + v(t+dt) * dt

    Forces are evaluated once, with the state at the start of the step.

    Args:
        state: Current state
        body: Body parameters
        dt: Time step (s)
        gravity: Gravitational acceleration magnitude (m/s^2)
        lift_model: Magnus model passed through to the force computation
        spin_floor: Spin below this rate is zeroed (rad/s)

    Returns:
        New state after integration

    Raises:
        ValueError: If dt <= 0
    """
    if dt <= 0:
        raise ValueError(f"Time step dt must be positive, got {dt}")

    accel = compute_acceleration(state, body, gravity, lift_model)
    v_new = state.velocity + accel * dt
    r_new = state.position + v_new * dt

    return KinematicState(
        position=r_new,
        velocity=v_new,
        spin_rate=decay_spin(state.spin_rate, body.spin_decay, dt, spin_floor),
        spin_axis=state.spin_axis.copy(),
        t=state.t + dt,
    )


def rk4_step(state: KinematicState, body: BodyParameters, dt: float,
             gravity: float = C.GRAVITY, lift_model: str = "linear",
             spin_floor: float = C.SPIN_FLOOR) -> KinematicState:
    """
    Perform a single RK4 step on (position, velocity).

    The RK4 method computes:
    k1 = f(t, y)
    k2 = f(t + dt/2, y + dt/2 * k1)
    k3 = f(t + dt/2, y + dt/2 * k2)
    k4 = f(t + dt, y + dt * k3)
    y_new = y + dt/6 * (k1 + 2*k2 + 2*k3 + k4)

    Spin is held at its start-of-step value across the stages and decayed
    once at the end.

    Raises:
        ValueError: If dt <= 0
    """
    if dt <= 0:
        raise ValueError(f"Time step dt must be positive, got {dt}")

    def derivative(r: np.ndarray, v: np.ndarray) -> tuple:
        stage = KinematicState(position=r, velocity=v, spin_rate=state.spin_rate,
                               spin_axis=state.spin_axis, t=state.t)
        return v, compute_acceleration(stage, body, gravity, lift_model)

    r0 = state.position
    v0 = state.velocity

    k1_r, k1_v = derivative(r0, v0)
    k2_r, k2_v = derivative(r0 + 0.5 * dt * k1_r, v0 + 0.5 * dt * k1_v)
    k3_r, k3_v = derivative(r0 + 0.5 * dt * k2_r, v0 + 0.5 * dt * k2_v)
    k4_r, k4_v = derivative(r0 + dt * k3_r, v0 + dt * k3_v)

    r_new = r0 + (dt / 6.0) * (k1_r + 2 * k2_r + 2 * k3_r + k4_r)
    v_new = v0 + (dt / 6.0) * (k1_v + 2 * k2_v + 2 * k3_v + k4_v)

    return KinematicState(
        position=r_new,
        velocity=v_new,
        spin_rate=decay_spin(state.spin_rate, body.spin_decay, dt, spin_floor),
        spin_axis=state.spin_axis.copy(),
        t=state.t + dt,
    )


def integrate(state: KinematicState, body: BodyParameters, dt: float,
              method: str = 'semi_implicit', gravity: float = C.GRAVITY,
              lift_model: str = "linear", spin_floor: float = C.SPIN_FLOOR) -> KinematicState:
    """
    Integrate the state forward by one timestep.

    Args:
        state: Current state
        body: Body parameters
        dt: Time step (s)
        method: Integration method ('semi_implicit' or 'rk4')
        gravity: Gravitational acceleration magnitude (m/s^2)
        lift_model: Magnus model
        spin_floor: Spin below this rate is zeroed (rad/s)

    Returns:
        New state after integration
    """
    if method == 'semi_implicit':
        return semi_implicit_euler_step(state, body, dt, gravity, lift_model, spin_floor)
    elif method == 'rk4':
        return rk4_step(state, body, dt, gravity, lift_model, spin_floor)
    else:
        raise ValueError(f"Unknown integration method: {method}")
