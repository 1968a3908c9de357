"""
Spinball Simulation - Error Taxonomy and Parameter Validation

This module implements the three failure kinds surfaced to callers:
- InvalidParameter: rejected input, raised before any stepping
- NumericalInstability: state blew up during stepping
- BudgetExceeded: the step/time cap was hit before settling

and the check functions that raise them. Checks return True on success so
they can be chained the same way throughout the package.
"""

import math
from typing import Optional

import numpy as np

from . import constants as C


class SimulationError(Exception):
    """Base class for every error raised by the simulation core."""
    pass


class InvalidParameter(SimulationError, ValueError):
    """Raised when an input is non-finite, out of range or mis-shaped."""
    pass


class NumericalInstability(SimulationError):
    """Raised when integration produces non-finite or runaway values."""
    pass


class BudgetExceeded(SimulationError):
    """
    Raised when a phase reaches its time budget without terminating.

    Attributes:
        result: Partial SimulationResult recorded up to the cap
        limit: Budget that was exhausted (s of simulated time)
    """

    def __init__(self, message: str, result=None, limit: Optional[float] = None):
        super().__init__(message)
        self.result = result
        self.limit = limit


def check_finite(name: str, value: float) -> bool:
    """Check that a scalar is a finite real number."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be a real number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidParameter(f"{name} must be finite, got {value}")
    return True


def check_positive(name: str, value: float) -> bool:
    """Check that a scalar is finite and strictly positive."""
    check_finite(name, value)
    if float(value) <= 0.0:
        raise InvalidParameter(f"{name} must be positive, got {value}")
    return True


def check_non_negative(name: str, value: float) -> bool:
    """Check that a scalar is finite and >= 0."""
    check_finite(name, value)
    if float(value) < 0.0:
        raise InvalidParameter(f"{name} must be non-negative, got {value}")
    return True


def check_in_range(name: str, value: float, low: float, high: float) -> bool:
    """Check that a scalar is finite and within [low, high]."""
    check_finite(name, value)
    if not low <= float(value) <= high:
        raise InvalidParameter(f"{name} must be within [{low}, {high}], got {value}")
    return True


def check_vector3(name: str, vec) -> np.ndarray:
    """
    Validate and convert a 3-component vector.

    Args:
        name: Parameter name used in error messages
        vec: Any sequence convertible to a float array

    Returns:
        The vector as a float64 numpy array of shape (3,)
    """
    try:
        arr = np.asarray(vec, dtype=np.float64)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be a 3-component vector, got {vec!r}")
    if arr.shape != (3,):
        raise InvalidParameter(f"{name} must have shape (3,), got {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise InvalidParameter(f"{name} contains non-finite values: {arr}")
    return arr


def check_direction(name: str, vec) -> np.ndarray:
    """Validate a direction vector and return it normalized."""
    arr = check_vector3(name, vec)
    length = np.linalg.norm(arr)
    if length < C.ZERO_TOLERANCE:
        raise InvalidParameter(f"{name} must be non-zero")
    return arr / length


def check_speed_reasonable(v: np.ndarray, ceiling: float = C.SPEED_CEILING) -> bool:
    """
    Check that a velocity stays finite and below the sanity ceiling.

    Raises:
        NumericalInstability: If any component is non-finite or |v| > ceiling
    """
    if not np.all(np.isfinite(v)):
        raise NumericalInstability(f"Velocity became non-finite: {v}")
    speed = float(np.linalg.norm(v))
    if speed > ceiling:
        raise NumericalInstability(
            f"Speed exceeds sanity ceiling: |v| = {speed:.2f} m/s, "
            f"ceiling = {ceiling:.2f} m/s"
        )
    return True


def check_position_finite(r: np.ndarray) -> bool:
    """Raise NumericalInstability if a position component is not finite."""
    if not np.all(np.isfinite(r)):
        raise NumericalInstability(f"Position became non-finite: {r}")
    return True


def validate_body(body, require_aero: bool = True) -> bool:
    """
    Validate a BodyParameters instance.

    Args:
        body: BodyParameters to check
        require_aero: Also check the aerodynamic fields (flight phase)
    """
    check_positive("mass", body.mass)
    check_positive("radius", body.radius)
    check_positive("cross_area", body.cross_area)
    check_in_range("restitution", body.restitution, 0.0, 1.0)
    check_in_range("friction", body.friction, 0.0, 1.0)
    if require_aero:
        check_non_negative("drag_coefficient", body.drag_coefficient)
        check_non_negative("lift_coefficient", body.lift_coefficient)
        check_non_negative("air_density", body.air_density)
        check_in_range("spin_decay", body.spin_decay, 0.0, 1.0)
    return True


def validate_surface(surface) -> bool:
    """Validate a SurfaceParameters instance."""
    check_in_range("rolling_friction", surface.rolling_friction, 0.0, C.MAX_ROLLING_FRICTION)
    check_in_range("surface_restitution", surface.restitution, 0.0, 1.0)
    check_in_range("firmness", surface.firmness, 0.0, 1.0)
    normal = check_direction("surface_normal", surface.normal)
    if float(np.dot(normal, C.UP_AXIS)) <= C.ZERO_TOLERANCE:
        raise InvalidParameter(
            f"surface_normal must point upward (positive y), got {surface.normal}"
        )
    return True


def validate_config(config) -> bool:
    """Validate the numeric fields of a SimulationConfig."""
    check_positive("dt", config.dt)
    check_non_negative("gravity", config.gravity)
    check_positive("max_flight_time", config.max_flight_time)
    check_positive("max_roll_time", config.max_roll_time)
    check_positive("speed_ceiling", config.speed_ceiling)
    check_non_negative("stop_speed", config.stop_speed)
    check_non_negative("min_bounce_speed", config.min_bounce_speed)
    if config.method not in C.INTEGRATION_METHODS:
        raise InvalidParameter(
            f"method must be one of {C.INTEGRATION_METHODS}, got {config.method!r}"
        )
    if config.lift_model not in C.LIFT_MODELS:
        raise InvalidParameter(
            f"lift_model must be one of {C.LIFT_MODELS}, got {config.lift_model!r}"
        )
    return True


def validate_state(state, ceiling: float = C.SPEED_CEILING) -> bool:
    """
    Stability check run after every integration step.

    Raises:
        NumericalInstability: On non-finite values or runaway speed
    """
    check_position_finite(state.position)
    check_speed_reasonable(state.velocity, ceiling)
    if not math.isfinite(state.spin_rate):
        raise NumericalInstability(f"Spin rate became non-finite: {state.spin_rate}")
    return True
