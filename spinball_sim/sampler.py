"""
Spinball Simulation - Trajectory Sampling

This module records fixed-timestep snapshots of a running simulation:
- TrajectorySample / RollingSample: immutable per-step snapshots
- SampleRecorder: append-only buffer used while a phase runs
- SimulationResult: the finished, indexable sample sequence
- TrajectorySampler: drives a step function and records every state
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple, Union

import numpy as np

from .state import KinematicState
from .types import RollingPoint, SimulationOutput, TrajectoryPoint
from .validation import BudgetExceeded

logger = logging.getLogger(__name__)

Vector3 = Tuple[float, float, float]


def _as_tuple(v: np.ndarray) -> Vector3:
    return (float(v[0]), float(v[1]), float(v[2]))


@dataclass(frozen=True)
class TrajectorySample:
    """Flight-phase snapshot."""
    position: Vector3
    velocity: Vector3
    t: float

    @classmethod
    def from_state(cls, state: KinematicState) -> 'TrajectorySample':
        return cls(position=_as_tuple(state.position),
                   velocity=_as_tuple(state.velocity),
                   t=float(state.t))

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]

    @property
    def z(self) -> float:
        return self.position[2]

    def to_point(self) -> TrajectoryPoint:
        return {'x': self.x, 'y': self.y, 'z': self.z, 't': self.t}


@dataclass(frozen=True)
class RollingSample:
    """Ground-phase snapshot; phase is "bounce", "roll" or "rest"."""
    position: Vector3
    velocity: Vector3
    spin: float
    t: float
    phase: str = "roll"

    @classmethod
    def from_state(cls, state: KinematicState, phase: str = "roll") -> 'RollingSample':
        return cls(position=_as_tuple(state.position),
                   velocity=_as_tuple(state.velocity),
                   spin=float(state.spin_rate),
                   t=float(state.t),
                   phase=phase)

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]

    @property
    def z(self) -> float:
        return self.position[2]

    def to_point(self) -> RollingPoint:
        return {'x': self.x, 'y': self.y, 'z': self.z, 'spin': self.spin, 't': self.t}


Sample = Union[TrajectorySample, RollingSample]


class SimulationResult:
    """
    Finished output of one simulation phase.

    Samples are stored in chronological order and never change after
    construction. Supports len(), indexing, slicing and iteration so host
    layers can pull samples one at a time.

    Attributes:
        samples: Tuple of samples
        final_state: State at the last sample (landing / resting state)
        termination_reason: Why the phase ended
    """

    __slots__ = ('_samples', '_final_state', '_reason')

    def __init__(self, samples, final_state: Optional[KinematicState] = None,
                 termination_reason: str = ""):
        self._samples = tuple(samples)
        self._final_state = final_state.copy() if final_state is not None else None
        self._reason = termination_reason

    @property
    def samples(self) -> Tuple[Sample, ...]:
        return self._samples

    @property
    def count(self) -> int:
        """Number of samples."""
        return len(self._samples)

    @property
    def final_state(self) -> Optional[KinematicState]:
        """Copy of the state at the final sample."""
        return self._final_state.copy() if self._final_state is not None else None

    @property
    def landing_state(self) -> Optional[KinematicState]:
        """Alias of final_state for flight results."""
        return self.final_state

    @property
    def termination_reason(self) -> str:
        return self._reason

    def __len__(self) -> int:
        return len(self._samples)

    def __getitem__(self, index):
        return self._samples[index]

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)

    def point(self, index: int) -> Union[TrajectoryPoint, RollingPoint]:
        """Host-facing dict for one sample."""
        return self._samples[index].to_point()

    @property
    def points(self) -> List[Union[TrajectoryPoint, RollingPoint]]:
        return [s.to_point() for s in self._samples]

    def to_dict(self) -> SimulationOutput:
        """Return {"points": [...], "count": n}."""
        return {'points': self.points, 'count': self.count}

    def times(self) -> np.ndarray:
        """Sample times as an array (s)."""
        return np.array([s.t for s in self._samples])

    def positions(self) -> np.ndarray:
        """Sample positions as an (n, 3) array (m)."""
        return np.array([s.position for s in self._samples]).reshape(-1, 3)

    def velocities(self) -> np.ndarray:
        """Sample velocities as an (n, 3) array (m/s)."""
        return np.array([s.velocity for s in self._samples]).reshape(-1, 3)

    def __repr__(self) -> str:
        return (f"SimulationResult(count={self.count}, "
                f"reason={self._reason!r})")


class SampleRecorder:
    """Append-only sample buffer for a running phase."""

    def __init__(self):
        self._samples: List[Sample] = []

    def append(self, sample: Sample):
        """Record one sample."""
        self._samples.append(sample)

    def __len__(self) -> int:
        return len(self._samples)

    def build(self, final_state: Optional[KinematicState] = None,
              termination_reason: str = "") -> SimulationResult:
        """Freeze the recorded samples into a SimulationResult."""
        return SimulationResult(self._samples, final_state, termination_reason)


class TrajectorySampler:
    """
    Drive a state-update function at a fixed timestep and record samples.

    The initial state is always recorded first, so the output is never
    empty. Sampling stops after the first recorded state for which `stop`
    returns True. If max_steps updates pass without stopping, collect()
    raises BudgetExceeded carrying the partial result.

    A sampler runs once: samples() returns a one-shot generator and a second
    call raises RuntimeError.

    Args:
        initial_state: State at t=0
        step: Function advancing a state by one timestep
        record: Function turning a state into a sample
        stop: Predicate marking the terminal state
        max_steps: Maximum number of step() calls
        dt: Timestep the step function uses (s), for budget reporting
        reason: Termination reason reported when stop() fires
    """

    def __init__(self, initial_state: KinematicState,
                 step: Callable[[KinematicState], KinematicState],
                 record: Callable[[KinematicState], Sample],
                 stop: Callable[[KinematicState], bool],
                 max_steps: int, dt: float, reason: str = "stopped"):
        self._state = initial_state.copy()
        self._step = step
        self._record = record
        self._stop = stop
        self.max_steps = int(max_steps)
        self.dt = dt
        self.reason = reason
        self._started = False
        self.stopped = False
        self.steps_taken = 0

    @property
    def state(self) -> KinematicState:
        """Most recently recorded state."""
        return self._state

    def samples(self) -> Iterator[Sample]:
        """Yield samples lazily, starting with the initial state."""
        if self._started:
            raise RuntimeError("TrajectorySampler can only be run once")
        self._started = True
        return self._generate()

    def _generate(self) -> Iterator[Sample]:
        yield self._record(self._state)
        if self._stop(self._state):
            self.stopped = True
            return
        while self.steps_taken < self.max_steps:
            self._state = self._step(self._state)
            self.steps_taken += 1
            yield self._record(self._state)
            if self._stop(self._state):
                self.stopped = True
                return

    def collect(self) -> SimulationResult:
        """
        Run to completion and return the recorded SimulationResult.

        Raises:
            BudgetExceeded: If max_steps passed without reaching stop()
        """
        recorder = SampleRecorder()
        for sample in self.samples():
            recorder.append(sample)

        if not self.stopped:
            limit = self.max_steps * self.dt
            result = recorder.build(self._state, "budget exceeded")
            logger.warning(f"Step budget exhausted after {self.steps_taken} steps "
                           f"({limit:.2f}s simulated)")
            raise BudgetExceeded(
                f"Simulation did not terminate within {limit:.2f}s "
                f"({self.max_steps} steps)",
                result=result, limit=limit,
            )
        return recorder.build(self._state, self.reason)
