"""Ground-interaction tests: bounce, roll, slip coupling and stopping."""
import logging
import unittest

import pytest
import numpy as np
from spinball_sim import ground
from spinball_sim.config import BodyParameters, SurfaceParameters, create_test_config
from spinball_sim.engine import create_engine
from spinball_sim.metrics import bounce_count, roll_distance
from spinball_sim.state import create_initial_state
from spinball_sim.validation import BudgetExceeded, InvalidParameter

BALL_MASS = 0.04593
BALL_RADIUS = 0.02135

# Spin axes for a body moving along +X on the flat surface
BACKSPIN_AXIS = (0.0, 0.0, 1.0)
TOPSPIN_AXIS = (0.0, 0.0, -1.0)

PHASE_ORDER = {"bounce": 0, "roll": 1, "rest": 2}


def _roll(engine, velocity, position=(0.0, 0.0, 0.0), **overrides):
    kwargs = dict(radius=BALL_RADIUS, mass=BALL_MASS, rolling_friction=0.1,
                  surface_restitution=0.5, firmness=0.6)
    kwargs.update(overrides)
    return engine.simulate_roll(position, velocity, **kwargs)


def _slip(result):
    speeds = np.linalg.norm(result.velocities(), axis=1)
    spins = np.array([s.spin for s in result])
    return np.abs(speeds - spins * BALL_RADIUS)


# ============================================================================
# Bounce response
# ============================================================================

class TestComputeBounce(unittest.TestCase):

    def setUp(self):
        self.firm = SurfaceParameters(rolling_friction=0.1, restitution=0.5, firmness=1.0)
        self.soft = SurfaceParameters(rolling_friction=0.1, restitution=0.5, firmness=0.2)
        self.axis = np.array([0.0, 0.0, 1.0])
        self.v_in = np.array([10.0, -8.0, 0.0])

    def test_effective_restitution(self):
        self.assertAlmostEqual(ground.effective_restitution(self.firm), 0.5)
        self.assertAlmostEqual(ground.effective_restitution(self.soft), 0.3)

    def test_normal_speed_reduced_and_reversed(self):
        out = ground.compute_bounce(self.v_in, self.axis, 0.0, BALL_RADIUS, self.firm)
        self.assertGreater(out.velocity[1], 0.0)
        self.assertLess(out.velocity[1], 8.0)
        self.assertTrue(out.keep_bouncing)

    def test_energy_cap(self):
        for surface in (self.firm, self.soft):
            out = ground.compute_bounce(self.v_in, self.axis, 300.0, BALL_RADIUS, surface)
            e = ground.effective_restitution(surface)
            self.assertLessEqual(np.linalg.norm(out.velocity),
                                 e * np.linalg.norm(self.v_in) + 1e-12)

    def test_firmer_surface_rebounds_higher(self):
        firm = ground.compute_bounce(self.v_in, self.axis, 0.0, BALL_RADIUS, self.firm)
        soft = ground.compute_bounce(self.v_in, self.axis, 0.0, BALL_RADIUS, self.soft)
        self.assertGreater(firm.velocity[1], soft.velocity[1])

    def test_backspin_checks_forward_speed(self):
        plain = ground.compute_bounce(self.v_in, self.axis, 0.0, BALL_RADIUS, self.firm)
        spun = ground.compute_bounce(self.v_in, self.axis, 300.0, BALL_RADIUS, self.firm)
        self.assertLess(spun.velocity[0], plain.velocity[0])

    def test_spin_loss(self):
        out = ground.compute_bounce(self.v_in, self.axis, 300.0, BALL_RADIUS, self.firm)
        self.assertAlmostEqual(out.spin_rate, 300.0 * (1.0 - 0.9))
        out = ground.compute_bounce(self.v_in, self.axis, 0.5, BALL_RADIUS, self.firm)
        self.assertEqual(out.spin_rate, 0.0)

    def test_weak_impact_stops_bouncing(self):
        out = ground.compute_bounce(np.array([2.0, -0.5, 0.0]), self.axis, 0.0,
                                    BALL_RADIUS, self.soft)
        self.assertFalse(out.keep_bouncing)

    def test_dead_surface_absorbs_everything(self):
        dead = SurfaceParameters(rolling_friction=0.1, restitution=0.0, firmness=0.5)
        out = ground.compute_bounce(self.v_in, self.axis, 100.0, BALL_RADIUS, dead)
        np.testing.assert_allclose(out.velocity, 0.0, atol=1e-12)
        self.assertFalse(out.keep_bouncing)


# ============================================================================
# Full ground runs
# ============================================================================

def test_horizontal_landing_on_soft_surface_rolls_immediately(engine):
    result = _roll(engine, [5.0, 0.0, 0.0], firmness=0.0)
    assert result[0].phase == "roll"
    assert all(s.phase != "bounce" for s in result)
    assert result[-1].phase == "rest"


def test_slow_normal_speed_rolls_immediately(engine):
    result = _roll(engine, [4.0, -0.2, 0.0])
    assert result[0].phase == "roll"
    assert result[0].velocity[1] == 0.0


def test_bounce_then_roll_then_rest(engine):
    result = _roll(engine, [10.0, -8.0, 0.0], firmness=0.8)
    phases = [s.phase for s in result]
    assert phases[0] == "bounce"
    assert phases[-1] == "rest"
    assert "roll" in phases
    order = [PHASE_ORDER[p] for p in phases]
    assert order == sorted(order)
    # The body leaves the surface between contacts
    assert result.positions()[:, 1].max() > 0.01


def test_positions_never_below_surface(engine):
    result = _roll(engine, [10.0, -8.0, 0.0], firmness=0.8)
    assert np.all(result.positions()[:, 1] >= -1e-9)
    rolling = np.array([s.phase != "bounce" for s in result])
    np.testing.assert_allclose(result.positions()[rolling, 1], 0.0, atol=1e-12)


def test_timestamps_exact_multiples_of_dt(engine):
    result = _roll(engine, [10.0, -8.0, 0.0], firmness=0.8)
    np.testing.assert_allclose(np.diff(result.times()), 0.005, rtol=1e-9)


def test_final_sample_at_rest(engine):
    result = _roll(engine, [6.0, -3.0, 1.0])
    last = result[-1]
    assert last.velocity == (0.0, 0.0, 0.0)
    assert last.spin == 0.0
    assert result.termination_reason == "at rest"
    assert result.final_state.speed == 0.0


def test_rolls_without_slipping_before_rest(engine):
    result = _roll(engine, [5.0, 0.0, 0.0], firmness=0.0)
    before_rest = result[-2]
    speed = np.linalg.norm(before_rest.velocity)
    assert before_rest.spin * BALL_RADIUS == pytest.approx(speed, rel=1e-9)


def test_slip_converges_monotonically(engine):
    result = _roll(engine, [5.0, 0.0, 0.0], firmness=0.0)
    slip = _slip(result)
    assert slip[0] == pytest.approx(5.0)
    assert np.all(np.diff(slip) <= 1e-9)


def test_excess_topspin_converges_monotonically(engine):
    result = _roll(engine, [3.0, 0.0, 0.0], firmness=0.0, spin_rate=400.0,
                   spin_axis=TOPSPIN_AXIS)
    slip = _slip(result)
    assert np.all(np.diff(slip) <= 1e-9)
    # Spin unwinds into forward speed while sliding
    assert np.linalg.norm(result[10].velocity) > 3.0


def test_spin_axis_sets_roll_length(engine):
    plain = _roll(engine, [3.0, 0.0, 0.0], firmness=0.0)
    checked = _roll(engine, [3.0, 0.0, 0.0], firmness=0.0, spin_rate=400.0,
                    spin_axis=BACKSPIN_AXIS)
    driven = _roll(engine, [3.0, 0.0, 0.0], firmness=0.0, spin_rate=400.0,
                   spin_axis=TOPSPIN_AXIS)
    assert roll_distance(checked) < roll_distance(plain) < roll_distance(driven)
    assert checked[-1].x < plain[-1].x < driven[-1].x


def test_backspin_passes_through_zero_into_forward_roll():
    body = BodyParameters(mass=BALL_MASS, radius=BALL_RADIUS)
    surface = SurfaceParameters(rolling_friction=0.1, restitution=0.5, firmness=0.0)
    model = ground.GroundInteractionModel(body, surface, create_test_config(),
                                          origin=np.zeros(3))
    state = model.start(create_initial_state([0.0, 0.0, 0.0], [3.0, 0.0, 0.0],
                                             spin_rate=100.0, spin_axis=BACKSPIN_AXIS))
    for _ in range(100):
        state = model.roll_step(state)
    assert model.phase is ground.GroundPhase.ROLL
    np.testing.assert_allclose(state.spin_axis, TOPSPIN_AXIS, atol=1e-9)
    assert 0.0 < state.velocity[0] < 3.0
    assert state.spin_rate * BALL_RADIUS == pytest.approx(state.velocity[0], rel=1e-9)


def test_spinning_body_without_speed_is_set_moving(engine):
    result = _roll(engine, [0.0, 0.0, 0.0], firmness=0.0, spin_rate=400.0,
                   spin_axis=BACKSPIN_AXIS)
    assert result.count > 2
    # Contact friction drives a +Z spinner toward -X
    assert result[-1].x < -0.5
    assert result[-1].phase == "rest"


def test_still_body_without_spin_rests_at_once(engine):
    result = _roll(engine, [0.0, 0.0, 0.0], firmness=0.0)
    assert result.count == 2
    assert result[-1].phase == "rest"


def test_bounce_count_matches_impacts(engine, caplog):
    with caplog.at_level(logging.INFO, logger="spinball_sim.ground"):
        result = _roll(engine, [10.0, -8.0, 0.0], firmness=0.8)
    impacts = bounce_count(result)
    assert impacts >= 2
    assert f"{impacts} bounces" in caplog.text
    assert impacts < sum(1 for s in result if s.phase == "bounce")


def test_higher_rolling_friction_rolls_shorter(engine):
    smooth = _roll(engine, [5.0, 0.0, 0.0], firmness=0.0, rolling_friction=0.05)
    rough = _roll(engine, [5.0, 0.0, 0.0], firmness=0.0, rolling_friction=0.3)
    assert roll_distance(rough) < roll_distance(smooth)
    assert rough[-1].t < smooth[-1].t


def test_lateral_roll_keeps_direction(engine):
    result = _roll(engine, [3.0, 0.0, 4.0], firmness=0.0)
    rest = np.array(result[-1].position)
    assert rest[2] / rest[0] == pytest.approx(4.0 / 3.0)


def test_roll_from_landing_origin(engine):
    result = _roll(engine, [5.0, 0.0, 0.0], position=(40.0, 2.0, -1.0), firmness=0.0)
    assert result[0].position == (40.0, 2.0, -1.0)
    np.testing.assert_allclose(result.positions()[:, 1], 2.0)


def test_deterministic(engine):
    a = _roll(engine, [10.0, -8.0, 0.0], spin_rate=200.0)
    b = _roll(create_engine(), [10.0, -8.0, 0.0], spin_rate=200.0)
    assert a.to_dict() == b.to_dict()


def test_to_dict_shape(engine):
    d = _roll(engine, [2.0, 0.0, 0.0]).to_dict()
    assert d['count'] == len(d['points'])
    assert set(d['points'][0]) == {'x', 'y', 'z', 'spin', 't'}


# ============================================================================
# Sloped surfaces
# ============================================================================

def test_uphill_roll_is_shorter(engine):
    normal = (-0.1, 1.0, 0.0)
    flat = _roll(engine, [5.0, 0.0, 0.0], firmness=0.0, rolling_friction=0.2)
    uphill = _roll(engine, [5.0, 0.0, 0.0], firmness=0.0, rolling_friction=0.2,
                   surface_normal=normal)
    assert roll_distance(uphill) < roll_distance(flat)
    assert uphill[-1].phase == "rest"


def test_sloped_positions_on_plane(engine):
    n = np.array([-0.1, 1.0, 0.0])
    n = n / np.linalg.norm(n)
    result = _roll(engine, [5.0, 0.0, 0.0], firmness=0.0, rolling_friction=0.2,
                   surface_normal=tuple(n))
    heights = result.positions() @ n
    np.testing.assert_allclose(heights, 0.0, atol=1e-9)


def test_steep_slope_never_settles():
    engine = create_engine(create_test_config(max_roll_time=3.0))
    with pytest.raises(BudgetExceeded) as excinfo:
        _roll(engine, [0.0, 0.0, 0.0], firmness=0.0, surface_normal=(-0.5, 1.0, 0.0))
    partial = excinfo.value.result
    # Rolling downhill toward -x
    assert partial[-1].x < partial[0].x


# ============================================================================
# Budgets and failures
# ============================================================================

def test_zero_rolling_friction_exceeds_budget():
    config = create_test_config(max_roll_time=2.0)
    engine = create_engine(config)
    with pytest.raises(BudgetExceeded) as excinfo:
        _roll(engine, [5.0, 0.0, 0.0], firmness=0.0, rolling_friction=0.0)
    assert excinfo.value.result.count == config.max_roll_steps + 1
    assert excinfo.value.limit == pytest.approx(2.0)


@pytest.mark.parametrize("overrides", [
    dict(radius=0.0),
    dict(mass=-1.0),
    dict(firmness=1.5),
    dict(surface_restitution=-0.1),
    dict(rolling_friction=2.0),
    dict(rolling_friction=np.nan),
    dict(surface_normal=(0.0, -1.0, 0.0)),
    dict(surface_normal=(0.0, 0.0, 0.0)),
    dict(surface_normal=(0.0, 1.0)),
    dict(spin_rate=-1.0),
    dict(spin_axis=(0.0, 0.0, 0.0)),
    dict(friction=1.5),
    dict(dt=0.0),
])
def test_invalid_parameters(engine, overrides):
    with pytest.raises(InvalidParameter):
        _roll(engine, [5.0, -2.0, 0.0], **overrides)


@pytest.mark.parametrize("velocity", [[5.0, np.nan, 0.0], [5.0, 0.0], [0.0, -600.0, 0.0]])
def test_invalid_velocity(engine, velocity):
    with pytest.raises(InvalidParameter):
        _roll(engine, velocity)


def test_simulate_ground_interaction_direct():
    body = BodyParameters(mass=BALL_MASS, radius=BALL_RADIUS)
    surface = SurfaceParameters(rolling_friction=0.1, restitution=0.5, firmness=0.5)
    state = create_initial_state([0.0, 0.0, 0.0], [8.0, -6.0, 0.0], spin_rate=150.0)
    result = ground.simulate_ground_interaction(state, body, surface,
                                                config=create_test_config())
    assert result[0].phase == ground.GroundPhase.BOUNCE.value
    assert result[-1].phase == ground.GroundPhase.REST.value
