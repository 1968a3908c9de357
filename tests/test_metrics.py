import math

import pytest
from spinball_sim import metrics
from spinball_sim.sampler import RollingSample, SampleRecorder, TrajectorySample


def _flight():
    recorder = SampleRecorder()
    recorder.append(TrajectorySample((0.0, 1.0, 0.0), (10.0, 10.0, 0.0), 0.0))
    recorder.append(TrajectorySample((30.0, 6.0, 1.0), (10.0, 0.0, 0.0), 1.0))
    recorder.append(TrajectorySample((60.0, 0.0, 2.0), (10.0, -10.0, 0.0), 2.0))
    return recorder.build()


def _roll():
    recorder = SampleRecorder()
    recorder.append(RollingSample((60.0, 0.0, 2.0), (4.0, 0.0, 0.0), 0.0, 0.0))
    recorder.append(RollingSample((63.0, 0.0, 6.0), (0.0, 0.0, 0.0), 0.0, 2.0, "rest"))
    return recorder.build()


def test_carry_distance():
    assert metrics.carry_distance(_flight()) == pytest.approx(math.hypot(60.0, 2.0))


def test_max_height_relative_to_launch():
    assert metrics.max_height(_flight()) == pytest.approx(5.0)


def test_lateral_deviation():
    assert metrics.lateral_deviation(_flight()) == pytest.approx(2.0)


def test_flight_time():
    assert metrics.flight_time(_flight()) == 2.0


def test_roll_distance():
    assert metrics.roll_distance(_roll()) == pytest.approx(5.0)


def test_total_distance():
    assert metrics.total_distance(_flight(), _roll()) == pytest.approx(math.hypot(63.0, 6.0))


def test_summarize_flight():
    summary = metrics.summarize_flight(_flight())
    assert summary['landing_speed'] == pytest.approx(math.sqrt(200.0))
    assert summary['landing_angle_deg'] == pytest.approx(45.0)
    assert summary['apex'] == pytest.approx(5.0)
    assert set(summary) == {'carry', 'apex', 'lateral', 'flight_time',
                            'landing_speed', 'landing_angle_deg'}


def test_bounce_count_counts_impacts_not_samples():
    recorder = SampleRecorder()
    recorder.append(RollingSample((0.0, 0.0, 0.0), (5.0, -4.0, 0.0), 50.0, 0.00, "bounce"))
    recorder.append(RollingSample((0.02, 0.01, 0.0), (4.0, 1.5, 0.0), 40.0, 0.01, "bounce"))
    recorder.append(RollingSample((0.06, 0.02, 0.0), (4.0, -1.0, 0.0), 40.0, 0.02, "bounce"))
    recorder.append(RollingSample((0.10, 0.0, 0.0), (4.0, -1.5, 0.0), 40.0, 0.03, "bounce"))
    recorder.append(RollingSample((0.13, 0.0, 0.0), (3.0, 0.0, 0.0), 140.0, 0.04, "roll"))
    recorder.append(RollingSample((0.13, 0.0, 0.0), (0.0, 0.0, 0.0), 0.0, 0.05, "rest"))
    roll = recorder.build()
    assert metrics.bounce_count(roll) == 2
    assert metrics.bounce_count(_roll()) == 0
