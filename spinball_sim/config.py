"""
Spinball Simulation - Configuration

Immutable parameter objects for one simulation call:
- BodyParameters: the sphere (mass, size, aerodynamic coefficients)
- SurfaceParameters: the ground (friction, restitution, firmness, slope)
- SimulationConfig: integration settings, thresholds and budgets

All are frozen dataclasses; derive variants with dataclasses.replace().
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from . import constants as C


@dataclass(frozen=True)
class BodyParameters:
    """
    Physical description of the spinning sphere.

    Attributes:
        mass: Mass (kg)
        radius: Radius (m)
        drag_coefficient: Cd (dimensionless)
        lift_coefficient: Cl (dimensionless)
        cross_area: Reference area (m^2); None means pi * radius^2
        air_density: Air density (kg/m^3)
        spin_decay: Fractional spin loss per second in flight
        restitution: Body coefficient of restitution
        friction: Impact / sliding friction coefficient at ground contact
    """
    mass: float
    radius: float
    drag_coefficient: float = 0.0
    lift_coefficient: float = 0.0
    cross_area: Optional[float] = None
    air_density: float = C.AIR_DENSITY
    spin_decay: float = 0.0
    restitution: float = C.BODY_RESTITUTION
    friction: float = C.BODY_FRICTION

    def __post_init__(self):
        if self.cross_area is None and isinstance(self.radius, (int, float)) \
                and math.isfinite(self.radius):
            object.__setattr__(self, 'cross_area', math.pi * float(self.radius) ** 2)


@dataclass(frozen=True)
class SurfaceParameters:
    """
    Ground surface description.

    Attributes:
        rolling_friction: Rolling resistance coefficient
        restitution: Fraction of normal speed returned by a bounce
        firmness: 0 = soft/absorptive, 1 = hard/reflective
        normal: Unit surface normal as a tuple (default flat, +Y)
    """
    rolling_friction: float
    restitution: float
    firmness: float
    normal: Tuple[float, float, float] = (0.0, 1.0, 0.0)

    def __post_init__(self):
        n = np.asarray(self.normal, dtype=np.float64).ravel()
        length = float(np.linalg.norm(n)) if n.size == 3 else 0.0
        if length > C.ZERO_TOLERANCE and np.all(np.isfinite(n)):
            n = n / length
        object.__setattr__(self, 'normal', tuple(float(x) for x in n))

    @property
    def normal_vector(self) -> np.ndarray:
        """Surface normal as a numpy array."""
        return np.array(self.normal, dtype=np.float64)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Immutable configuration for the integrators and state machines.

    Section grouping:
      1. Timing and budgets
      2. Environment
      3. Aerodynamic model
      4. Ground-contact thresholds
      5. Tolerances
    """

    # ── 1. Timing and budgets ────────────────────────────────────────────
    dt: float = C.DT
    max_flight_time: float = C.MAX_FLIGHT_TIME
    max_roll_time: float = C.MAX_ROLL_TIME
    method: str = "semi_implicit"

    # ── 2. Environment ───────────────────────────────────────────────────
    gravity: float = C.GRAVITY

    # ── 3. Aerodynamic model ─────────────────────────────────────────────
    # "linear": Magnus force uses the caller's lift coefficient as given.
    # "spin_ratio": lift coefficient derived from omega * r / |v|.
    lift_model: str = "linear"
    spin_floor: float = C.SPIN_FLOOR

    # ── 4. Ground-contact thresholds ─────────────────────────────────────
    min_bounce_speed: float = C.MIN_BOUNCE_SPEED
    stop_speed: float = C.STOP_SPEED
    slip_tolerance: float = C.SLIP_TOLERANCE

    # ── 5. Tolerances ────────────────────────────────────────────────────
    speed_ceiling: float = C.SPEED_CEILING

    @property
    def gravity_vector(self) -> np.ndarray:
        """Gravitational acceleration vector (m/s^2)."""
        return -self.gravity * C.UP_AXIS

    @property
    def max_flight_steps(self) -> int:
        return int(math.ceil(self.max_flight_time / self.dt))

    @property
    def max_roll_steps(self) -> int:
        return int(math.ceil(self.max_roll_time / self.dt))


def create_default_config() -> SimulationConfig:
    """Create a SimulationConfig with default values from constants."""
    return SimulationConfig()


def create_test_config(dt: float = 0.01, max_flight_time: float = 15.0,
                       max_roll_time: float = 30.0, **overrides) -> SimulationConfig:
    """Create a coarser config suitable for fast tests.

    Any keyword arg accepted by SimulationConfig can be passed as an override.
    """
    defaults = dict(dt=dt, max_flight_time=max_flight_time, max_roll_time=max_roll_time)
    defaults.update(overrides)
    return SimulationConfig(**defaults)
