from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .errors import ConfigurationError
from .task_core import CueKind, SuccessPredicate, as_tuple3, as_vector3

logger = logging.getLogger(__name__)

AXES: tuple[str, ...] = ("x", "y", "z")


class MovementClass(str, Enum):
    NONE = "none"
    EARLY = "early"
    SUFFICIENT = "sufficient"
    INSUFFICIENT = "insufficient"


@dataclass(frozen=True, slots=True)
class SpatialTarget:
    center: tuple[float, float, float]
    radius: float

    def __post_init__(self) -> None:
        if not self.radius > 0.0:
            raise ConfigurationError("target radius must be > 0")
        as_vector3(self.center)


@dataclass(slots=True)
class MovementRecord:
    reference_position: tuple[float, float, float]
    last_position: tuple[float, float, float]
    lateral_displacement: float


@dataclass(frozen=True, slots=True)
class MovementReading:
    classification: MovementClass
    position: tuple[float, float, float]
    lateral_displacement: float
    distance: float
    speed: float
    effort: float
    in_proximity_band: bool
    reset_to: tuple[float, float, float] | None = None


class RestReference:
    """Rest ("home") position, captured once from a live reading.

    Capture state is tracked explicitly; a zero vector is a legitimate rest
    position and is never read as "not yet captured".
    """

    def __init__(self) -> None:
        self._position: np.ndarray | None = None

    @property
    def captured(self) -> bool:
        return self._position is not None

    @property
    def position(self) -> np.ndarray:
        if self._position is None:
            raise RuntimeError("rest reference has not been captured yet")
        return self._position.copy()

    def capture(self, position: Sequence[float] | np.ndarray) -> bool:
        if self._position is not None:
            return False
        self._position = as_vector3(position).copy()
        logger.debug("Rest position set to %s", self._position.tolist())
        return True

    def clear(self) -> None:
        self._position = None


class SpatialContainment:
    """Success when the actuator is inside the target sphere (outside, for Deactivate)."""

    def __init__(self, *, target: SpatialTarget, proximity_factor: float = 1.5) -> None:
        if proximity_factor < 1.0:
            raise ConfigurationError("proximity_factor must be >= 1")
        self._target = target
        self._center = as_vector3(target.center)
        self._proximity_factor = float(proximity_factor)

    @property
    def target(self) -> SpatialTarget:
        return self._target

    def set_target(self, target: SpatialTarget) -> None:
        self._target = target
        self._center = as_vector3(target.center)

    def distance(self, position: np.ndarray, rest: np.ndarray) -> float:
        _ = rest
        return float(np.linalg.norm(position - self._center))

    def is_satisfied(self, position: np.ndarray, rest: np.ndarray, kind: CueKind) -> bool:
        inside = self.distance(position, rest) < self._target.radius
        if kind is CueKind.DEACTIVATE:
            return not inside
        return inside

    def in_proximity_band(self, distance: float) -> bool:
        r = self._target.radius
        return r <= distance < self._proximity_factor * r

    def is_early(self, displacement: np.ndarray) -> bool:
        _ = displacement
        return False


class DirectionalDisplacement:
    """Success when the signed displacement along ``axis`` reaches ``required_distance``.

    Before the cue, displacement beyond ``movement_threshold`` counts as early
    movement: measured on ``axis`` alone, or as the full vector norm when
    ``early_on_any_axis`` is set.
    """

    def __init__(
        self,
        *,
        required_distance: float,
        movement_threshold: float,
        axis: int = 2,
        early_on_any_axis: bool = False,
    ) -> None:
        if required_distance <= 0.0:
            raise ConfigurationError("required_distance must be > 0")
        if movement_threshold < 0.0:
            raise ConfigurationError("movement_threshold must be >= 0")
        if movement_threshold >= required_distance:
            raise ConfigurationError("movement_threshold must be < required_distance")
        if axis not in (0, 1, 2):
            raise ConfigurationError(f"axis must be 0, 1 or 2, got {axis}")
        self._required = float(required_distance)
        self._threshold = float(movement_threshold)
        self._axis = int(axis)
        self._any_axis = bool(early_on_any_axis)

    def distance(self, position: np.ndarray, rest: np.ndarray) -> float:
        moved = float(position[self._axis] - rest[self._axis])
        return max(0.0, self._required - moved)

    def is_satisfied(self, position: np.ndarray, rest: np.ndarray, kind: CueKind) -> bool:
        _ = kind
        return float(position[self._axis] - rest[self._axis]) >= self._required

    def in_proximity_band(self, distance: float) -> bool:
        _ = distance
        return False

    def is_early(self, displacement: np.ndarray) -> bool:
        if self._any_axis:
            magnitude = float(np.linalg.norm(displacement))
        else:
            magnitude = abs(float(displacement[self._axis]))
        return magnitude > self._threshold


class MovementEvaluator:
    """Classifies each actuator reading against the rest reference and the target.

    - ``persist_reference``: keep the rest reference across episodes (it is
      otherwise re-captured from the first reading of every episode).
    - ``reset_on_success``: request a return to rest on a successful response.
    """

    def __init__(
        self,
        *,
        predicate: SuccessPredicate,
        axis: int = 2,
        effort_scale: float = 0.05,
        persist_reference: bool = False,
        reset_on_success: bool = False,
    ) -> None:
        if effort_scale < 0.0:
            raise ConfigurationError("effort_scale must be >= 0")
        self._predicate = predicate
        self._axis = int(axis)
        self._effort_scale = float(effort_scale)
        self._persist_reference = bool(persist_reference)
        self._reset_on_success = bool(reset_on_success)

        self._rest = RestReference()
        self._last: np.ndarray | None = None
        self._lateral = 0.0
        self._unobserved_s = 0.0
        self._early_detected = False

    @property
    def predicate(self) -> SuccessPredicate:
        return self._predicate

    @property
    def rest(self) -> RestReference:
        return self._rest

    @property
    def early_movement_detected(self) -> bool:
        return self._early_detected

    def record(self) -> MovementRecord | None:
        if not self._rest.captured or self._last is None:
            return None
        return MovementRecord(
            reference_position=as_tuple3(self._rest.position),
            last_position=as_tuple3(self._last),
            lateral_displacement=self._lateral,
        )

    def acquire(self, position: Sequence[float] | np.ndarray) -> bool:
        return self._rest.capture(position)

    def begin_episode(self) -> None:
        if not self._persist_reference:
            self._rest.clear()
        self._last = None
        self._lateral = 0.0
        self._unobserved_s = 0.0
        self._early_detected = False

    def evaluate(
        self,
        position: Sequence[float] | np.ndarray | None,
        *,
        dt: float,
        awaiting_cue: bool,
        expected_kind: CueKind | None,
    ) -> MovementReading | None:
        """Classify one reading; ``None`` when no reading is available this tick.

        ``awaiting_cue`` is true until the episode's first cue fires.
        ``expected_kind`` is the kind of the response window currently
        accepting responses, if any.

        Effort and speed are measured from the last reading actually observed;
        a requested reset only counts once the host reports the new position.
        """

        if position is None:
            logger.warning("No actuator reading this tick; skipping movement evaluation")
            if self._last is not None:
                self._unobserved_s += float(dt)
            return None

        pos = as_vector3(position)
        self._rest.capture(pos)
        rest = self._rest.position
        last = pos if self._last is None else self._last

        step = pos - last
        effort = float(np.linalg.norm(step)) * self._effort_scale
        speed = float(np.linalg.norm(step)) / (float(dt) + self._unobserved_s)
        self._unobserved_s = 0.0

        displacement = pos - rest
        self._lateral = float(displacement[self._axis])
        distance = self._predicate.distance(pos, rest)

        classification = MovementClass.NONE
        reset_to: np.ndarray | None = None

        if awaiting_cue:
            if not self._early_detected and self._predicate.is_early(displacement):
                self._early_detected = True
                classification = MovementClass.EARLY
                logger.debug("Early movement detected: displacement %s", displacement.tolist())
            if self._early_detected:
                reset_to = rest
        elif expected_kind is not None:
            if self._predicate.is_satisfied(pos, rest, expected_kind):
                classification = MovementClass.SUFFICIENT
                if self._reset_on_success:
                    reset_to = rest
            else:
                classification = MovementClass.INSUFFICIENT

        self._last = pos
        if reset_to is not None:
            logger.debug("Requesting actuator reset to rest %s", reset_to.tolist())

        return MovementReading(
            classification=classification,
            position=as_tuple3(pos),
            lateral_displacement=self._lateral,
            distance=distance,
            speed=speed,
            effort=effort,
            in_proximity_band=self._predicate.in_proximity_band(distance),
            reset_to=None if reset_to is None else as_tuple3(reset_to),
        )
