from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

import numpy as np

if TYPE_CHECKING:
    from .response_window import ResponseWindow

logger = logging.getLogger(__name__)


class EpisodePhase(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    FINISHED = "finished"


class CueKind(str, Enum):
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
    GENERIC = "generic"


class EpisodeEventKind(str, Enum):
    CUE = "cue"
    WAIT_SUCCESS = "wait_success"
    RESPONSE_SUCCESS = "response_success"
    MISS = "miss"
    EARLY_MOVEMENT = "early_movement"


@dataclass(frozen=True, slots=True)
class CueEvent:
    timestamp: float
    kind: CueKind = CueKind.GENERIC


@dataclass(frozen=True, slots=True)
class EpisodeState:
    elapsed_s: float
    running: bool
    cue_index: int


@dataclass(frozen=True, slots=True)
class EpisodeEvent:
    kind: EpisodeEventKind
    at_s: float
    cue_kind: CueKind | None = None
    response_time_s: float | None = None


@dataclass(frozen=True, slots=True)
class EpisodeSnapshot:
    """View model for the host (pure data)."""

    phase: EpisodePhase
    state: EpisodeState
    time_feature: float
    cues_scheduled: int
    window: ResponseWindow
    indicator_kind: CueKind | None
    rest_position: tuple[float, float, float] | None
    metrics: dict[str, float | int]


class Scheduler(Protocol):
    """Deterministic producer of an episode's cue schedule."""

    @property
    def min_interval_s(self) -> float:
        """Smallest gap the schedule can leave before or between cues."""
        ...

    def schedule(self, *, episode_length_s: float, rng: SeededRng) -> tuple[CueEvent, ...]:
        ...


class SuccessPredicate(Protocol):
    def distance(self, position: np.ndarray, rest: np.ndarray) -> float:
        """Distance used for shaping; 0.0 when the response is fully satisfied."""
        ...

    def is_satisfied(self, position: np.ndarray, rest: np.ndarray, kind: CueKind) -> bool:
        ...

    def in_proximity_band(self, distance: float) -> bool:
        ...

    def is_early(self, displacement: np.ndarray) -> bool:
        ...


class CuePresenter(Protocol):
    """Fire-and-forget consumer of cue triggers (audio clip, target colour)."""

    def present(self, cue: CueEvent) -> None:
        ...


class SeededRng:
    """Seeded RNG wrapper to keep deterministic streams explicit.

    ``seed=None`` draws the seed from process entropy.
    """

    def __init__(self, seed: int | None) -> None:
        self._seed = None if seed is None else int(seed)
        self._rng = random.Random(self._seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)

    def choice(self, seq: Sequence[CueKind]) -> CueKind:
        return self._rng.choice(seq)


def parse_seed(raw: str | int | None, *, default: int = 0) -> int:
    """Parse a seed from host-supplied text, falling back to ``default``."""

    if raw is None:
        return int(default)
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        logger.warning("Couldn't parse fixed seed from %r, using default %d", raw, default)
        return int(default)


def as_vector3(value: Sequence[float] | np.ndarray) -> np.ndarray:
    vec = np.asarray(value, dtype=np.float64).reshape(-1)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {vec.shape}")
    if not np.all(np.isfinite(vec)):
        raise ValueError(f"vector must be finite, got {vec.tolist()}")
    return vec


def as_tuple3(vec: np.ndarray) -> tuple[float, float, float]:
    return (float(vec[0]), float(vec[1]), float(vec[2]))


def clamp01(x: float) -> float:
    return 0.0 if x <= 0.0 else 1.0 if x >= 1.0 else float(x)
