"""
Spinball Simulation - Physics Engine

This module is the host-facing entry point. A PhysicsEngine is a plain
value wrapping a SimulationConfig; create as many as needed. Each call
builds its own state, runs one phase and returns a SimulationResult:

    engine = create_engine()
    flight = engine.simulate_flight(velocity, mass=..., radius=..., ...)
    landing = flight.landing_state
    roll = engine.simulate_roll(landing.position, landing.velocity, ...)

Chaining flight into roll is left to the caller.
"""

import dataclasses
import logging
from typing import Optional, Sequence

import numpy as np

from . import constants as C
from .config import BodyParameters, SimulationConfig, SurfaceParameters, create_default_config
from .flight import simulate_flight_state
from .ground import simulate_ground_interaction
from .sampler import SimulationResult
from .state import create_initial_state
from .validation import check_direction, check_finite, check_non_negative, check_vector3

logger = logging.getLogger(__name__)


class PhysicsEngine:
    """
    Stateless simulation facade.

    Args:
        config: SimulationConfig used by every call; per-call dt overrides
            are applied with dataclasses.replace and never mutate it.
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config if config is not None else create_default_config()

    def _config_for(self, dt: Optional[float]) -> SimulationConfig:
        if dt is None:
            return self.config
        check_finite("dt", dt)
        return dataclasses.replace(self.config, dt=float(dt))

    def simulate_flight(self, velocity: Sequence[float], *, mass: float, radius: float,
                        drag_coefficient: float, lift_coefficient: float,
                        cross_area: Optional[float],
                        spin_rate: float = 0.0,
                        spin_axis: Sequence[float] = (0.0, 0.0, 1.0),
                        air_density: float = C.AIR_DENSITY,
                        spin_decay: float = 0.0,
                        position: Sequence[float] = (0.0, 0.0, 0.0),
                        ground_y: float = 0.0,
                        dt: Optional[float] = None) -> SimulationResult:
        """
        Simulate the flight of a spinning sphere until it reaches ground_y.

        Returns:
            SimulationResult of flight samples; to_dict() gives
            {"points": [{x, y, z, t}, ...], "count": n}

        Raises:
            InvalidParameter, NumericalInstability, BudgetExceeded
        """
        config = self._config_for(dt)
        velocity = check_vector3("velocity", velocity)
        position = check_vector3("position", position)
        axis = check_direction("spin_axis", spin_axis)
        check_non_negative("spin_rate", spin_rate)

        body = BodyParameters(
            mass=mass, radius=radius,
            drag_coefficient=drag_coefficient, lift_coefficient=lift_coefficient,
            cross_area=cross_area, air_density=air_density, spin_decay=spin_decay,
        )
        logger.debug(f"simulate_flight: dt={config.dt}s, |v|={np.linalg.norm(velocity):.2f}m/s, "
                     f"spin={spin_rate}rad/s")
        state = create_initial_state(position, velocity, spin_rate, axis)
        return simulate_flight_state(state, body, ground_y=ground_y, config=config)

    def simulate_roll(self, position: Sequence[float], velocity: Sequence[float], *,
                      radius: float, mass: float, rolling_friction: float,
                      surface_restitution: float, firmness: float,
                      spin_rate: float = 0.0,
                      spin_axis: Sequence[float] = (0.0, 0.0, 1.0),
                      surface_normal: Sequence[float] = (0.0, 1.0, 0.0),
                      friction: float = C.BODY_FRICTION,
                      dt: Optional[float] = None) -> SimulationResult:
        """
        Simulate bounce and roll from a landing state until the body rests.

        Returns:
            SimulationResult of rolling samples; to_dict() gives
            {"points": [{x, y, z, spin, t}, ...], "count": n}

        Raises:
            InvalidParameter, NumericalInstability, BudgetExceeded
        """
        config = self._config_for(dt)
        position = check_vector3("position", position)
        velocity = check_vector3("velocity", velocity)
        axis = check_direction("spin_axis", spin_axis)
        normal = check_vector3("surface_normal", surface_normal)
        check_non_negative("spin_rate", spin_rate)

        body = BodyParameters(mass=mass, radius=radius, friction=friction)
        surface = SurfaceParameters(
            rolling_friction=rolling_friction,
            restitution=surface_restitution,
            firmness=firmness,
            normal=tuple(normal),
        )
        logger.debug(f"simulate_roll: dt={config.dt}s, |v|={np.linalg.norm(velocity):.2f}m/s, "
                     f"firmness={firmness}")
        state = create_initial_state(position, velocity, spin_rate, axis)
        return simulate_ground_interaction(state, body, surface, config=config)


def create_engine(config: Optional[SimulationConfig] = None) -> PhysicsEngine:
    """Create an engine; a default SimulationConfig is used if none is given."""
    return PhysicsEngine(config)
