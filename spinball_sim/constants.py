"""
Spinball Simulation - Physical Constants and Model Parameters

This module defines the physical constants, default integration settings,
termination thresholds and contact-model coefficients used throughout the
simulation. All values are SI (m, s, kg, rad/s).
"""

import numpy as np

# =============================================================================
# ENVIRONMENT
# =============================================================================

# Gravitational acceleration (m/s^2), acts along -Y
GRAVITY = 9.81

# Sea level air density at 15 C (kg/m^3)
AIR_DENSITY = 1.225

# World "up" direction; the ground plane of the flight phase is y = ground_y
UP_AXIS = np.array([0.0, 1.0, 0.0])

# Default spin axis (+Z with +X travel gives backspin lift)
DEFAULT_SPIN_AXIS = np.array([0.0, 0.0, 1.0])

# =============================================================================
# SIMULATION TIMING
# =============================================================================

DT = 0.005                # Fixed timestep (s)
MAX_FLIGHT_TIME = 30.0    # Flight budget (s of simulated time)
MAX_ROLL_TIME = 60.0      # Bounce + roll budget (s of simulated time)

# Flight integration schemes: semi-implicit Euler (default) or classic RK4
INTEGRATION_METHODS = ("semi_implicit", "rk4")

# =============================================================================
# BODY DEFAULTS
# =============================================================================

BODY_RESTITUTION = 0.6    # Body coefficient of restitution
BODY_FRICTION = 0.4       # Impact / sliding friction coefficient

# =============================================================================
# AERODYNAMICS
# =============================================================================

# Lift models: "linear" uses the caller's lift coefficient directly,
# "spin_ratio" derives it from the spin parameter S = omega * r / |v|
LIFT_MODELS = ("linear", "spin_ratio")
SPIN_RATIO_LIFT_SLOPE = 0.54
SPIN_RATIO_LIFT_MAX = 0.4

# Spin below this rate is treated as zero (rad/s)
SPIN_FLOOR = 0.1

# =============================================================================
# GROUND CONTACT
# =============================================================================

# Normal speed needed to keep bouncing (m/s)
MIN_BOUNCE_SPEED = 0.3

# Speed below which a rolling body is considered at rest (m/s)
STOP_SPEED = 0.15

# Contact slip below which the body is treated as rolling without slipping (m/s)
SLIP_TOLERANCE = 1e-3

# Effective restitution = restitution * (BASE + (1 - BASE) * firmness)
FIRMNESS_RESTITUTION_BASE = 0.5

# Impact friction = body friction + SOFTNESS * (1 - firmness)
IMPACT_FRICTION_SOFTNESS = 0.3

# Cap on the fraction of tangential speed removed by one impact
MAX_IMPACT_FRICTION_RATIO = 0.8

# Fraction of the spin-induced contact slip transferred per impact, times firmness
SPIN_TRANSFER_FACTOR = 0.4

# Spin lost per impact = BASE + FIRMNESS * firmness
BOUNCE_SPIN_LOSS_BASE = 0.6
BOUNCE_SPIN_LOSS_FIRMNESS = 0.3

# Solid sphere: I = 2/5 m r^2, so torque from contact friction gives
# d(omega)/dt = (5/2) * a_friction / r
SOLID_SPHERE_SPIN_FACTOR = 2.5

# Allowed range for the rolling friction coefficient
MAX_ROLLING_FRICTION = 1.0

# =============================================================================
# NUMERICAL TOLERANCES
# =============================================================================

ZERO_TOLERANCE = 1e-10     # Near-zero check for divisions/normalizations
SPEED_CEILING = 500.0      # Speeds above this are treated as numerical blow-up (m/s)
