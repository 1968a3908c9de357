"""
Spinball Simulation - 3D Vector Operations

Small helpers over numpy float64[3] arrays shared by the flight and
ground phases.
"""

import numpy as np

from . import constants as C


def as_vector3(v) -> np.ndarray:
    """Return v as a fresh float64 array of shape (3,)."""
    return np.array(v, dtype=np.float64).reshape(3)


def dot(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.dot(a, b))


def cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.cross(a, b)


def norm(v: np.ndarray) -> float:
    return float(np.linalg.norm(v))


def normalize(v: np.ndarray) -> np.ndarray:
    """
    Normalize a vector.

    Returns the zero vector for inputs shorter than ZERO_TOLERANCE rather
    than dividing by zero.
    """
    length = np.linalg.norm(v)
    if length < C.ZERO_TOLERANCE:
        return np.zeros(3)
    return v / length


def normal_component(v: np.ndarray, n: np.ndarray) -> float:
    """Signed component of v along the unit normal n."""
    return float(np.dot(v, n))


def project_onto_plane(v: np.ndarray, n: np.ndarray) -> np.ndarray:
    """Remove the component of v along the unit normal n."""
    return v - np.dot(v, n) * n


def launch_velocity(speed: float, launch_deg: float, side_deg: float = 0.0) -> np.ndarray:
    """
    Build a launch velocity from speed, elevation and side angle.

    Args:
        speed: Launch speed (m/s)
        launch_deg: Elevation above the horizontal (degrees)
        side_deg: Rotation about +Y away from +X toward +Z (degrees)

    Returns:
        Velocity vector (m/s) with +X downrange and +Y up
    """
    la = np.radians(launch_deg)
    sa = np.radians(side_deg)
    return np.array([
        speed * np.cos(la) * np.cos(sa),
        speed * np.sin(la),
        speed * np.cos(la) * np.sin(sa),
    ])
