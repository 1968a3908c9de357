"""Tests for config module."""
import dataclasses
import math

import pytest
import numpy as np
from spinball_sim import config
from spinball_sim import constants as C


def test_simulation_config_defaults():
    """Test that default config uses constants values."""
    cfg = config.SimulationConfig()
    assert cfg.dt == C.DT
    assert cfg.max_flight_time == C.MAX_FLIGHT_TIME
    assert cfg.max_roll_time == C.MAX_ROLL_TIME
    assert cfg.gravity == C.GRAVITY
    assert cfg.method == "semi_implicit"
    assert cfg.lift_model == "linear"
    assert cfg.min_bounce_speed == C.MIN_BOUNCE_SPEED
    assert cfg.stop_speed == C.STOP_SPEED


def test_simulation_config_frozen():
    """Test that config is immutable (frozen)."""
    cfg = config.SimulationConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.dt = 0.5


def test_replace_creates_variant():
    cfg = config.create_default_config()
    other = dataclasses.replace(cfg, dt=0.01)
    assert other.dt == 0.01
    assert cfg.dt == C.DT


def test_step_budgets():
    cfg = config.SimulationConfig(dt=0.25, max_flight_time=2.0, max_roll_time=3.1)
    assert cfg.max_flight_steps == 8
    assert cfg.max_roll_steps == 13


def test_gravity_vector():
    cfg = config.SimulationConfig(gravity=9.81)
    np.testing.assert_allclose(cfg.gravity_vector, [0.0, -9.81, 0.0])


def test_create_test_config_overrides():
    cfg = config.create_test_config(gravity=0.0, lift_model="spin_ratio")
    assert cfg.dt == 0.01
    assert cfg.gravity == 0.0
    assert cfg.lift_model == "spin_ratio"


def test_body_default_cross_area():
    body = config.BodyParameters(mass=0.045, radius=0.02)
    assert body.cross_area == pytest.approx(math.pi * 0.02 ** 2)


def test_body_explicit_cross_area_kept():
    body = config.BodyParameters(mass=0.045, radius=0.02, cross_area=0.0015)
    assert body.cross_area == 0.0015


def test_surface_normal_normalized():
    surface = config.SurfaceParameters(rolling_friction=0.1, restitution=0.4,
                                       firmness=0.5, normal=(0.0, 2.0, 0.0))
    assert surface.normal == (0.0, 1.0, 0.0)
    np.testing.assert_allclose(surface.normal_vector, [0.0, 1.0, 0.0])


def test_surface_equality():
    a = config.SurfaceParameters(rolling_friction=0.1, restitution=0.4, firmness=0.5)
    b = config.SurfaceParameters(rolling_friction=0.1, restitution=0.4, firmness=0.5)
    assert a == b
