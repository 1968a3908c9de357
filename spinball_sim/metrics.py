"""
Spinball Simulation - Shot Metrics

Summary numbers derived from finished SimulationResults. Distances are
measured in the horizontal (x, z) plane from the first sample.
"""

import math

import numpy as np

from . import constants as C
from .sampler import SimulationResult
from .types import FlightSummary


def _horizontal(positions: np.ndarray) -> np.ndarray:
    return positions[:, [0, 2]]


def carry_distance(flight: SimulationResult) -> float:
    """Horizontal distance from launch to landing (m)."""
    pos = _horizontal(flight.positions())
    return float(np.linalg.norm(pos[-1] - pos[0]))


def max_height(flight: SimulationResult) -> float:
    """Apex height above the launch height (m)."""
    y = flight.positions()[:, 1]
    return float(np.max(y) - y[0])


def lateral_deviation(flight: SimulationResult) -> float:
    """Signed z offset of the landing point from launch (m)."""
    pos = flight.positions()
    return float(pos[-1, 2] - pos[0, 2])


def flight_time(flight: SimulationResult) -> float:
    """Time of the final sample (s)."""
    return float(flight[-1].t)


def roll_distance(roll: SimulationResult) -> float:
    """Straight-line distance from the first to the last ground sample (m)."""
    pos = roll.positions()
    return float(np.linalg.norm(pos[-1] - pos[0]))


def bounce_count(roll: SimulationResult, normal=(0.0, 1.0, 0.0)) -> int:
    """
    Number of surface impacts in a ground result.

    An impact is a bounce-phase sample moving into the surface whose
    successor no longer is, because it rebounded or settled into rolling.
    """
    n = np.asarray(normal, dtype=np.float64)
    v_n = roll.velocities() @ (n / np.linalg.norm(n))
    count = 0
    for i in range(len(roll) - 1):
        if roll[i].phase == "bounce" and v_n[i] < -C.ZERO_TOLERANCE <= v_n[i + 1]:
            count += 1
    return count


def total_distance(flight: SimulationResult, roll: SimulationResult) -> float:
    """Horizontal distance from launch to the resting point (m)."""
    start = _horizontal(flight.positions())[0]
    rest = _horizontal(roll.positions())[-1]
    return float(np.linalg.norm(rest - start))


def summarize_flight(flight: SimulationResult) -> FlightSummary:
    """
    Compute the standard flight summary.

    The landing angle is the descent angle below horizontal at the
    landing sample.
    """
    vx, vy, vz = flight[-1].velocity
    horizontal_speed = math.hypot(vx, vz)
    landing_angle = math.degrees(math.atan2(-vy, horizontal_speed))
    return {
        'carry': carry_distance(flight),
        'apex': max_height(flight),
        'lateral': lateral_deviation(flight),
        'flight_time': flight_time(flight),
        'landing_speed': float(math.sqrt(vx * vx + vy * vy + vz * vz)),
        'landing_angle_deg': landing_angle,
    }
