"""
Spinball Simulation - Force Computations

This module implements the forces acting on the sphere in flight:
- Uniform gravity
- Quadratic aerodynamic drag
- Magnus lift from spin
"""

import numpy as np

from . import constants as C
from .config import BodyParameters
from .state import KinematicState
from .types import ForceBreakdown


def compute_gravity_force(mass: float, gravity: float = C.GRAVITY) -> np.ndarray:
    """
    Compute the gravitational force.

    F = m * g, directed along -Y and independent of every other force.

    Args:
        mass: Body mass (kg)
        gravity: Gravitational acceleration magnitude (m/s^2)

    Returns:
        Gravity force vector (N)
    """
    return -mass * gravity * C.UP_AXIS


def compute_drag_force(v: np.ndarray, body: BodyParameters) -> np.ndarray:
    """
    Compute quadratic aerodynamic drag.

    F_drag = -0.5 * rho * A * Cd * |v| * v

    Args:
        v: Air-relative velocity (m/s)
        body: Body parameters (Cd, area, air density)

    Returns:
        Drag force vector (N), opposing v
    """
    speed = np.linalg.norm(v)
    if speed < C.ZERO_TOLERANCE:
        return np.zeros(3)
    k = 0.5 * body.air_density * body.cross_area * body.drag_coefficient
    return -k * speed * v


def compute_lift_coefficient(speed: float, spin_rate: float, body: BodyParameters,
                             lift_model: str = "linear") -> float:
    """
    Effective lift coefficient for the selected lift model.

    "linear" returns the caller's lift coefficient unchanged. "spin_ratio"
    uses the spin parameter S = omega * r / |v|:
        Cl = min(0.54 * S, 0.4)
    """
    if lift_model == "spin_ratio":
        if speed < C.ZERO_TOLERANCE:
            return 0.0
        spin_parameter = spin_rate * body.radius / speed
        return min(C.SPIN_RATIO_LIFT_SLOPE * spin_parameter, C.SPIN_RATIO_LIFT_MAX)
    return body.lift_coefficient


def compute_magnus_force(v: np.ndarray, spin_axis: np.ndarray, spin_rate: float,
                         body: BodyParameters, lift_model: str = "linear") -> np.ndarray:
    """
    Compute Magnus lift on the spinning sphere.

    Linear model:
        F = 0.5 * rho * A * Cl * |v| * (axis x v)
    Spin-ratio model:
        F = 0.5 * rho * A * Cl(S) * |v|^2 * normalize(axis x v)

    The spin rate gates the force (no spin, no lift); in the linear model
    it has no further effect on the magnitude.

    Args:
        v: Air-relative velocity (m/s)
        spin_axis: Unit spin axis
        spin_rate: Spin rate (rad/s)
        body: Body parameters
        lift_model: "linear" or "spin_ratio"

    Returns:
        Magnus force vector (N), perpendicular to v
    """
    speed = np.linalg.norm(v)
    if speed < C.ZERO_TOLERANCE or spin_rate <= 0.0:
        return np.zeros(3)

    direction = np.cross(spin_axis, v)
    cl = compute_lift_coefficient(speed, spin_rate, body, lift_model)
    q_area = 0.5 * body.air_density * body.cross_area

    if lift_model == "spin_ratio":
        dir_len = np.linalg.norm(direction)
        if dir_len < C.ZERO_TOLERANCE:
            return np.zeros(3)
        return q_area * cl * speed * speed * (direction / dir_len)

    return q_area * cl * speed * direction


def compute_total_force(state: KinematicState, body: BodyParameters,
                        gravity: float = C.GRAVITY, lift_model: str = "linear") -> np.ndarray:
    """
    Sum gravity, drag and Magnus forces for the given state.

    Returns:
        Total force vector (N)
    """
    return (
        compute_gravity_force(body.mass, gravity) +
        compute_drag_force(state.velocity, body) +
        compute_magnus_force(state.velocity, state.spin_axis, state.spin_rate,
                             body, lift_model)
    )


def compute_acceleration(state: KinematicState, body: BodyParameters,
                         gravity: float = C.GRAVITY, lift_model: str = "linear") -> np.ndarray:
    """Net acceleration a = F_total / m (m/s^2)."""
    return compute_total_force(state, body, gravity, lift_model) / body.mass


def compute_force_breakdown(state: KinematicState, body: BodyParameters,
                            gravity: float = C.GRAVITY,
                            lift_model: str = "linear") -> ForceBreakdown:
    """
    Compute all forces and return them as a dictionary for logging/analysis.
    """
    F_gravity = compute_gravity_force(body.mass, gravity)
    F_drag = compute_drag_force(state.velocity, body)
    F_magnus = compute_magnus_force(state.velocity, state.spin_axis, state.spin_rate,
                                    body, lift_model)
    return {
        'gravity': F_gravity,
        'drag': F_drag,
        'magnus': F_magnus,
        'total': F_gravity + F_drag + F_magnus,
        'gravity_magnitude': float(np.linalg.norm(F_gravity)),
        'drag_magnitude': float(np.linalg.norm(F_drag)),
        'magnus_magnitude': float(np.linalg.norm(F_magnus)),
    }
