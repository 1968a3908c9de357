"""
Spinball Simulation - Ground Interaction

This module takes the landing state of a flight and runs the bounce/roll
state machine on a planar (optionally sloped) surface until the body comes
to rest:

    BOUNCE --(rebound below threshold)--> ROLL --(stopped)--> REST

Transitions are one-way. Between bounces the body follows the same
free-flight integration as the flight phase. While rolling, translation and
spin are coupled through contact friction until the body rolls without
slipping (spin * radius = speed).
"""

import enum
import logging
import time
from typing import NamedTuple, Optional

import numpy as np

from . import constants as C
from . import vectors as vec
from .config import BodyParameters, SimulationConfig, SurfaceParameters, create_default_config
from .integrators import integrate
from .sampler import RollingSample, SimulationResult, TrajectorySampler
from .state import KinematicState
from .validation import (
    InvalidParameter, NumericalInstability,
    check_direction, check_non_negative, check_vector3,
    validate_body, validate_config, validate_state, validate_surface,
)

logger = logging.getLogger(__name__)


class GroundPhase(enum.Enum):
    BOUNCE = "bounce"
    ROLL = "roll"
    REST = "rest"


class BounceOutcome(NamedTuple):
    """Result of a single surface impact."""
    velocity: np.ndarray
    spin_rate: float
    keep_bouncing: bool


def effective_restitution(surface: SurfaceParameters) -> float:
    """
    Restitution of the normal velocity, modulated by firmness.

        e = restitution * (base + (1 - base) * firmness)

    A fully firm surface returns the nominal restitution; a fully soft one
    returns only `base` of it.
    """
    base = C.FIRMNESS_RESTITUTION_BASE
    return surface.restitution * (base + (1.0 - base) * surface.firmness)


def compute_bounce(velocity: np.ndarray, spin_axis: np.ndarray, spin_rate: float,
                   radius: float, surface: SurfaceParameters,
                   body_friction: float = C.BODY_FRICTION,
                   min_bounce_speed: float = C.MIN_BOUNCE_SPEED,
                   spin_floor: float = C.SPIN_FLOOR) -> BounceOutcome:
    """
    Compute the response of one impact with the surface.

    - Normal component reflected and scaled by the effective restitution.
    - Tangential component reduced by impact friction: harder impacts and
      softer surfaces remove more, capped at MAX_IMPACT_FRICTION_RATIO.
    - Spin-induced contact slip (omega x r_contact) is opposed by friction,
      so backspin checks the body's forward speed.
    - Spin is reduced by a firmness-dependent fraction.
    - Total outgoing speed is capped at e * incoming speed.

    Args:
        velocity: Incoming velocity (m/s)
        spin_axis: Unit spin axis
        spin_rate: Incoming spin rate (rad/s)
        radius: Body radius (m)
        surface: Surface parameters
        body_friction: Body friction coefficient
        min_bounce_speed: Rebound normal speed needed to keep bouncing (m/s)
        spin_floor: Spin below this rate is zeroed (rad/s)

    Returns:
        BounceOutcome(velocity, spin_rate, keep_bouncing)
    """
    n = surface.normal_vector
    firmness = surface.firmness

    # Decompose velocity into normal and tangential components
    v_normal = vec.normal_component(velocity, n)
    v_t = velocity - v_normal * n

    e = effective_restitution(surface)
    v_n_out = -v_normal * e * n

    # Impact friction from the normal impulse
    v_t_speed = vec.norm(v_t)
    if v_t_speed > 0.01:
        mu_impact = body_friction + C.IMPACT_FRICTION_SOFTNESS * (1.0 - firmness)
        ratio = min(mu_impact * abs(v_normal) / v_t_speed, C.MAX_IMPACT_FRICTION_RATIO)
        v_t = v_t * (1.0 - ratio)

    # Contact-point slip from spin, opposed by surface friction
    r_contact = -radius * n
    slip = vec.cross(spin_axis * spin_rate, r_contact)
    slip_t = vec.project_onto_plane(slip, n)
    v_t = v_t - C.SPIN_TRANSFER_FACTOR * firmness * slip_t

    spin_loss = C.BOUNCE_SPIN_LOSS_BASE + C.BOUNCE_SPIN_LOSS_FIRMNESS * firmness
    spin_out = spin_rate * (1.0 - spin_loss)
    if spin_out < spin_floor:
        spin_out = 0.0

    v_out = v_n_out + v_t

    # Energy cap across all components, not just the normal one
    pre_speed = vec.norm(velocity)
    post_speed = vec.norm(v_out)
    max_post_speed = pre_speed * e
    if post_speed > max_post_speed and post_speed > 0.01:
        v_out = v_out * (max_post_speed / post_speed)

    rebound = vec.dot(v_out, n)
    return BounceOutcome(velocity=v_out, spin_rate=float(spin_out),
                         keep_bouncing=rebound > min_bounce_speed)


class GroundInteractionModel:
    """
    Bounce/roll state machine for one ground-interaction run.

    The surface plane passes through `origin` (the landing point) with the
    surface's unit normal. A model instance is created per call and holds
    the current phase; it is driven by a TrajectorySampler through step(),
    record() and is_at_rest().
    """

    def __init__(self, body: BodyParameters, surface: SurfaceParameters,
                 config: SimulationConfig, origin: np.ndarray):
        self.body = body
        self.surface = surface
        self.config = config
        self.origin = vec.as_vector3(origin)
        self.normal = surface.normal_vector
        self.phase = GroundPhase.BOUNCE
        self.bounces = 0

        g_vec = config.gravity_vector
        g_dot_n = vec.dot(g_vec, self.normal)
        # Gravity pressing into the surface and its along-slope remainder
        self.g_normal = -g_dot_n
        self.g_tangent = g_vec - g_dot_n * self.normal
        self.rolling_resistance = surface.rolling_friction * self.g_normal
        self.contact_friction = body.friction * self.g_normal

    # ── State-machine plumbing ───────────────────────────────────────────

    def start(self, state: KinematicState) -> KinematicState:
        """Choose the initial phase from the landing state."""
        v_n = state.normal_speed(self.normal)
        if v_n < -self.config.min_bounce_speed:
            self.phase = GroundPhase.BOUNCE
            return state.copy()
        logger.debug(f"Normal speed {v_n:.3f}m/s below bounce threshold, rolling from contact")
        return self._enter_roll(state)

    def record(self, state: KinematicState) -> RollingSample:
        return RollingSample.from_state(state, self.phase.value)

    def is_at_rest(self, state: KinematicState) -> bool:
        return self.phase is GroundPhase.REST

    def step(self, state: KinematicState) -> KinematicState:
        """Advance one timestep in the current phase."""
        if self.phase is GroundPhase.BOUNCE:
            new = self._bounce_step(state)
        else:
            new = self.roll_step(state)
        try:
            validate_state(new, self.config.speed_ceiling)
        except NumericalInstability as e:
            logger.error(f"Ground interaction became unstable at t={new.t:.3f}s: {e}")
            raise
        return new

    def height(self, state: KinematicState) -> float:
        return state.height_above(self.origin, self.normal)

    def _enter_roll(self, state: KinematicState) -> KinematicState:
        """One-way switch to rolling: drop the normal velocity component."""
        self.phase = GroundPhase.ROLL
        rolled = state.copy()
        rolled.velocity = state.tangential_velocity(self.normal)
        return rolled

    def _project(self, position: np.ndarray) -> np.ndarray:
        """Clamp a position onto the surface plane."""
        h = vec.dot(position - self.origin, self.normal)
        return position - h * self.normal

    # ── Bouncing ─────────────────────────────────────────────────────────

    def _bounce_step(self, state: KinematicState) -> KinematicState:
        in_contact = (self.height(state) <= C.ZERO_TOLERANCE and
                      state.normal_speed(self.normal) < 0.0)
        if in_contact:
            outcome = compute_bounce(
                state.velocity, state.spin_axis, state.spin_rate,
                self.body.radius, self.surface,
                body_friction=self.body.friction,
                min_bounce_speed=self.config.min_bounce_speed,
                spin_floor=self.config.spin_floor,
            )
            self.bounces += 1
            state = state.copy()
            state.velocity = outcome.velocity
            state.spin_rate = outcome.spin_rate
            if not outcome.keep_bouncing:
                logger.debug(f"Bounce {self.bounces} at t={state.t:.3f}s settled, rolling")
                return self.roll_step(self._enter_roll(state))
            logger.debug(f"Bounce {self.bounces} at t={state.t:.3f}s: "
                         f"rebound {outcome.velocity @ self.normal:.3f}m/s")

        new = integrate(state, self.body, self.config.dt, method=self.config.method,
                        gravity=self.config.gravity, lift_model=self.config.lift_model,
                        spin_floor=self.config.spin_floor)
        if self.height(new) <= 0.0:
            new.position = self._project(new.position)
        return new

    # ── Rolling ──────────────────────────────────────────────────────────

    def _rest_state(self, state: KinematicState) -> KinematicState:
        self.phase = GroundPhase.REST
        return KinematicState(position=state.position.copy(), velocity=np.zeros(3),
                              spin_rate=0.0, spin_axis=state.spin_axis.copy(),
                              t=state.t + self.config.dt)

    def contact_slip(self, velocity: np.ndarray, omega: np.ndarray) -> np.ndarray:
        """Velocity of the contact point: v + omega x (-r n)."""
        return velocity + vec.cross(omega, -self.body.radius * self.normal)

    def rolling_omega(self, velocity: np.ndarray) -> np.ndarray:
        """Angular velocity of rolling without slipping, n x v / r."""
        return vec.cross(self.normal, velocity) / self.body.radius

    def _is_sliding(self, velocity: np.ndarray, omega: np.ndarray) -> bool:
        if self.contact_friction <= 0.0:
            return False
        return vec.norm(self.contact_slip(velocity, omega)) > self.config.slip_tolerance

    def _apply_slip_friction(self, velocity: np.ndarray, omega: np.ndarray,
                             dt: float) -> tuple:
        """
        Couple translation and spin through kinetic contact friction.

        Friction of magnitude a = mu * |g.n| opposes the contact slip c:
        velocity changes by -a * dt * c_hat and spin by
        (5/2) * a * dt / r * (n x c_hat), shrinking |c| by (7/2) * a * dt
        along its own direction. Backspin adds to the slip of a forward
        moving body, so it is slowed (and may be pulled back) while its spin
        passes through zero and reverses. If the slip would vanish within
        the step, the state snaps to rolling without slipping.

        Returns:
            (velocity, omega, rolling) after this step's slip friction
        """
        slip = self.contact_slip(velocity, omega)
        slip_speed = vec.norm(slip)
        if slip_speed <= self.config.slip_tolerance:
            return velocity, self.rolling_omega(velocity), True

        a_k = self.contact_friction
        if a_k <= 0.0:
            return velocity, omega, False

        c_hat = slip / slip_speed
        slip_decay = (1.0 + C.SOLID_SPHERE_SPIN_FACTOR) * a_k * dt
        # Fraction of the step spent sliding before the slip vanishes
        frac = min(slip_speed / slip_decay, 1.0)
        velocity = velocity - a_k * frac * dt * c_hat
        omega = omega + (C.SOLID_SPHERE_SPIN_FACTOR * a_k * frac * dt / self.body.radius
                         * vec.cross(self.normal, c_hat))
        if slip_decay >= slip_speed:
            return velocity, self.rolling_omega(velocity), True
        return velocity, omega, False

    def roll_step(self, state: KinematicState) -> KinematicState:
        """
        Advance one rolling step.

        Contact friction first couples spin to velocity, then rolling
        resistance mu_r * |g.n| opposes the velocity and the slope term
        g - (g.n)n pushes downhill. The body stops once it is slower than
        the stop threshold, no longer slipping, and on a slope that can
        hold it. A body with spin but no speed is set moving by its slip.
        """
        dt = self.config.dt
        v = state.tangential_velocity(self.normal)
        omega = state.angular_velocity
        speed = vec.norm(v)
        holds = vec.norm(self.g_tangent) <= self.rolling_resistance + C.ZERO_TOLERANCE

        if speed < self.config.stop_speed and holds and not self._is_sliding(v, omega):
            return self._rest_state(state)

        v_s, omega_s, rolling = self._apply_slip_friction(v, omega, dt)
        direction = vec.normalize(v_s)
        # Resistance slows the body to zero but never reverses it
        resist = min(self.rolling_resistance * dt, vec.norm(v_s))
        v_new = v_s - resist * direction + self.g_tangent * dt
        v_new = vec.project_onto_plane(v_new, self.normal)

        settled = rolling or self.contact_friction <= 0.0
        if holds and settled and vec.norm(v_new) < self.config.stop_speed:
            return self._rest_state(state)

        if rolling:
            omega_s = self.rolling_omega(v_new)
        spin_rate = vec.norm(omega_s)
        if spin_rate > C.ZERO_TOLERANCE:
            spin_axis = omega_s / spin_rate
        else:
            spin_rate, spin_axis = 0.0, state.spin_axis.copy()

        position = self._project(state.position + v_new * dt)
        return KinematicState(position=position, velocity=v_new, spin_rate=spin_rate,
                              spin_axis=spin_axis, t=state.t + dt)


def validate_ground_inputs(state: KinematicState, body: BodyParameters,
                           surface: SurfaceParameters,
                           config: SimulationConfig) -> KinematicState:
    """
    Validate everything the ground phase consumes.

    Returns:
        A copy of the state with a normalized spin axis

    Raises:
        InvalidParameter: On any rejected input
    """
    validate_config(config)
    validate_body(body, require_aero=True)
    validate_surface(surface)

    position = check_vector3("position", state.position)
    velocity = check_vector3("velocity", state.velocity)
    axis = check_direction("spin_axis", state.spin_axis)
    check_non_negative("spin_rate", state.spin_rate)

    speed = vec.norm(velocity)
    if speed > config.speed_ceiling:
        raise InvalidParameter(
            f"Landing speed {speed:.2f} m/s exceeds ceiling {config.speed_ceiling:.2f} m/s"
        )
    return KinematicState(position=position.copy(), velocity=velocity.copy(),
                          spin_rate=state.spin_rate, spin_axis=axis, t=state.t)


def simulate_ground_interaction(landing_state: KinematicState, body: BodyParameters,
                                surface: SurfaceParameters,
                                config: Optional[SimulationConfig] = None) -> SimulationResult:
    """
    Run bounce and roll from a landing state until the body is at rest.

    Args:
        landing_state: State at ground contact; its position anchors the plane
        body: Body parameters (radius, mass, friction; aero used between bounces)
        surface: Surface parameters
        config: SimulationConfig instance. If None a default is created.

    Returns:
        SimulationResult of RollingSamples; final_state is the resting state.

    Raises:
        InvalidParameter: Before stepping, for rejected inputs
        NumericalInstability: During stepping, on runaway values
        BudgetExceeded: If the body is still moving after max_roll_time
    """
    if config is None:
        config = create_default_config()

    state = validate_ground_inputs(landing_state, body, surface, config)
    model = GroundInteractionModel(body, surface, config, origin=state.position)
    state = model.start(state)

    logger.info(f"Starting ground interaction: dt={config.dt}s, phase={model.phase.value}, "
                f"speed={state.speed:.2f}m/s, spin={state.spin_rate:.1f}rad/s")

    sampler = TrajectorySampler(
        initial_state=state,
        step=model.step,
        record=model.record,
        stop=model.is_at_rest,
        max_steps=config.max_roll_steps,
        dt=config.dt,
        reason="at rest",
    )

    start_time = time.time()
    result = sampler.collect()
    elapsed = time.time() - start_time

    rest = result.final_state
    travelled = vec.norm(model._project(rest.position) - model.origin)
    logger.info(f"Ground interaction complete: {sampler.steps_taken} steps, "
                f"{model.bounces} bounces, {result.count} samples in {elapsed:.3f}s")
    logger.info(f"Rest: t={rest.t:.3f}s, distance={travelled:.2f}m")
    return result
