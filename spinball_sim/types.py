"""
Spinball Simulation - Type Definitions

This module provides TypedDict definitions for the plain-dictionary shapes
handed to host layers, improving type safety and IDE support.
"""

from typing import List, TypedDict, Union

import numpy as np
from numpy.typing import NDArray


class TrajectoryPoint(TypedDict):
    """Flight sample as exposed to hosts."""
    x: float  # Downrange position (m)
    y: float  # Height (m)
    z: float  # Lateral position (m)
    t: float  # Elapsed time (s)


class RollingPoint(TypedDict):
    """Ground-phase sample as exposed to hosts."""
    x: float  # Position x (m)
    y: float  # Position y (m)
    z: float  # Position z (m)
    spin: float  # Spin rate (rad/s)
    t: float  # Elapsed time (s)


class SimulationOutput(TypedDict):
    """Return shape of SimulationResult.to_dict()."""
    points: List[Union[TrajectoryPoint, RollingPoint]]
    count: int


class ForceBreakdown(TypedDict):
    """Return type for force computation details."""
    gravity: NDArray[np.float64]  # Gravity force vector (N)
    drag: NDArray[np.float64]  # Drag force vector (N)
    magnus: NDArray[np.float64]  # Magnus lift force vector (N)
    total: NDArray[np.float64]  # Total force vector (N)
    gravity_magnitude: float  # Gravity force magnitude (N)
    drag_magnitude: float  # Drag force magnitude (N)
    magnus_magnitude: float  # Magnus force magnitude (N)


class FlightSummary(TypedDict):
    """Return type for metrics.summarize_flight()."""
    carry: float  # Horizontal distance from launch to landing (m)
    apex: float  # Maximum height above launch height (m)
    lateral: float  # Final z offset (m)
    flight_time: float  # Time of the landing sample (s)
    landing_speed: float  # Speed at landing (m/s)
    landing_angle_deg: float  # Descent angle below horizontal (deg)
