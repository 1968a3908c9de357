"""
Spinball Simulation - Kinematic State

This module defines the single state dataclass advanced by both the flight
integrator and the ground-interaction model. A state is created fresh for
every simulation call and is never shared between calls.
"""

from dataclasses import dataclass, field

import numpy as np

from . import constants as C


@dataclass
class KinematicState:
    """
    Kinematic state of the spinning sphere.

    Attributes:
        position: Position (m) [3]
        velocity: Velocity (m/s) [3]
        spin_rate: Spin magnitude about spin_axis (rad/s), non-negative
        spin_axis: Unit spin axis [3]
        t: Elapsed simulation time (s)
    """

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    spin_rate: float = 0.0
    spin_axis: np.ndarray = field(default_factory=lambda: C.DEFAULT_SPIN_AXIS.copy())
    t: float = 0.0

    def __post_init__(self):
        """Ensure arrays are numpy arrays with correct dtype."""
        for attr in ['position', 'velocity', 'spin_axis']:
            setattr(self, attr, np.asarray(getattr(self, attr), dtype=np.float64))
        self.spin_rate = float(self.spin_rate)
        self.t = float(self.t)

    def copy(self) -> 'KinematicState':
        """Create a deep copy of the state."""
        return KinematicState(
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            spin_rate=self.spin_rate,
            spin_axis=self.spin_axis.copy(),
            t=self.t,
        )

    @property
    def speed(self) -> float:
        """Magnitude of velocity (m/s)."""
        return float(np.linalg.norm(self.velocity))

    @property
    def angular_velocity(self) -> np.ndarray:
        """Spin as a vector (rad/s)."""
        return self.spin_axis * self.spin_rate

    def height_above(self, origin: np.ndarray, normal: np.ndarray) -> float:
        """Signed height above the plane through origin with unit normal."""
        return float(np.dot(self.position - origin, normal))

    def normal_speed(self, normal: np.ndarray) -> float:
        """Signed velocity component along the unit normal (m/s)."""
        return float(np.dot(self.velocity, normal))

    def tangential_velocity(self, normal: np.ndarray) -> np.ndarray:
        """Velocity with the normal component removed (m/s)."""
        return self.velocity - np.dot(self.velocity, normal) * normal

    def __str__(self) -> str:
        """Human-readable state summary."""
        return (
            f"KinematicState(t={self.t:.3f}s, "
            f"pos=({self.position[0]:.2f}, {self.position[1]:.2f}, {self.position[2]:.2f})m, "
            f"v={self.speed:.2f}m/s, "
            f"spin={self.spin_rate:.1f}rad/s)"
        )


def create_initial_state(position, velocity, spin_rate: float = 0.0,
                         spin_axis=None) -> KinematicState:
    """
    Create the t=0 state for a simulation call.

    Args:
        position: Starting position (m)
        velocity: Starting velocity (m/s)
        spin_rate: Spin rate (rad/s)
        spin_axis: Spin axis; normalized here. Defaults to +Z.

    Returns:
        KinematicState owning copies of the inputs.
    """
    if spin_axis is None:
        spin_axis = C.DEFAULT_SPIN_AXIS
    axis = np.array(spin_axis, dtype=np.float64)
    length = np.linalg.norm(axis)
    if length > C.ZERO_TOLERANCE:
        axis = axis / length
    return KinematicState(
        position=np.array(position, dtype=np.float64),
        velocity=np.array(velocity, dtype=np.float64),
        spin_rate=spin_rate,
        spin_axis=axis,
        t=0.0,
    )
