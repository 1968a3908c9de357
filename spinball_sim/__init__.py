"""
Spinball Simulation Package

Trajectory of a spinning sphere launched through air, followed by its
bounce and roll on a planar or sloped surface.

Modules:
    - constants: Physical constants, thresholds and contact-model coefficients
    - vectors: 3D vector helpers
    - validation: Error taxonomy and parameter checks
    - config: Body, surface and simulation configuration
    - state: Kinematic state dataclass
    - forces: Gravity, drag and Magnus forces
    - integrators: Semi-implicit Euler and RK4 stepping
    - sampler: Fixed-timestep sample recording
    - flight: Flight phase to ground contact
    - ground: Bounce/roll state machine
    - engine: Host-facing simulation entry point
    - metrics: Shot summary numbers
    - plotting: Matplotlib trajectory plots
    - cli: Command-line interface
"""

from .config import (
    BodyParameters, SurfaceParameters, SimulationConfig,
    create_default_config, create_test_config,
)
from .state import KinematicState, create_initial_state
from .sampler import RollingSample, SimulationResult, TrajectorySample, TrajectorySampler
from .flight import simulate_flight_state
from .ground import GroundPhase, simulate_ground_interaction
from .engine import PhysicsEngine, create_engine
from .validation import (
    SimulationError, InvalidParameter, NumericalInstability, BudgetExceeded,
)

__version__ = "1.0.0"

__all__ = [
    'BodyParameters',
    'SurfaceParameters',
    'SimulationConfig',
    'create_default_config',
    'create_test_config',
    'KinematicState',
    'create_initial_state',
    'TrajectorySample',
    'RollingSample',
    'SimulationResult',
    'TrajectorySampler',
    'simulate_flight_state',
    'GroundPhase',
    'simulate_ground_interaction',
    'PhysicsEngine',
    'create_engine',
    'SimulationError',
    'InvalidParameter',
    'NumericalInstability',
    'BudgetExceeded',
]
