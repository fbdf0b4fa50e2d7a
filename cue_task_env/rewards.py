from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import ConfigurationError
from .movement import MovementReading

DISTANCE_SHAPING_K = 10.0
PROXIMITY_VELOCITY_SCALE = 0.01


@dataclass(frozen=True, slots=True)
class RewardConfig:
    success_reward: float = 10.0  # per newly completed success (points delta)
    cue_wait_reward: float = 0.0  # once, when the cue fires without early movement
    early_penalty: float = 5.0
    missed_penalty: float = 0.0  # dense mode only

    dense_reward: bool = False
    distance_shaping: bool = True
    proximity_velocity: bool = True
    effort_penalty: bool = False

    distance_k: float = DISTANCE_SHAPING_K
    velocity_scale: float = PROXIMITY_VELOCITY_SCALE


@dataclass(frozen=True, slots=True)
class RewardTerms:
    success: float = 0.0
    cue_wait: float = 0.0
    early: float = 0.0
    missed: float = 0.0
    distance: float = 0.0
    proximity: float = 0.0
    effort: float = 0.0

    @property
    def sparse(self) -> float:
        return self.success + self.cue_wait + self.early

    @property
    def dense(self) -> float:
        return self.missed + self.distance + self.proximity + self.effort

    @property
    def total(self) -> float:
        return self.sparse + self.dense


def distance_shaping(distance: float, k: float = DISTANCE_SHAPING_K) -> float:
    """``(exp(-k*d) - 1) / k``: 0 at the target, tending to ``-1/k`` far away.

    Far from the target the value saturates at exactly ``-1/k`` in float64.
    """

    return (math.exp(-k * float(distance)) - 1.0) / k


class RewardComposer:
    """Sums sparse event rewards and the enabled dense shaping terms for one tick."""

    def __init__(self, *, config: RewardConfig | None = None) -> None:
        cfg = config or RewardConfig()
        if cfg.success_reward < 0.0:
            raise ConfigurationError("success_reward must be >= 0")
        if cfg.cue_wait_reward < 0.0:
            raise ConfigurationError("cue_wait_reward must be >= 0")
        if cfg.early_penalty < 0.0:
            raise ConfigurationError("early_penalty must be >= 0")
        if cfg.missed_penalty < 0.0:
            raise ConfigurationError("missed_penalty must be >= 0")
        if cfg.distance_k <= 0.0:
            raise ConfigurationError("distance_k must be > 0")
        if cfg.velocity_scale < 0.0:
            raise ConfigurationError("velocity_scale must be >= 0")
        self._cfg = cfg

    @property
    def config(self) -> RewardConfig:
        return self._cfg

    def compose(
        self,
        *,
        points_delta: int,
        cue_wait: bool,
        early_movement: bool,
        misses: int,
        reading: MovementReading | None,
        window_open: bool,
    ) -> RewardTerms:
        cfg = self._cfg
        success = float(points_delta) * cfg.success_reward
        wait = cfg.cue_wait_reward if cue_wait else 0.0
        early = -cfg.early_penalty if early_movement else 0.0

        if not cfg.dense_reward:
            return RewardTerms(success=success, cue_wait=wait, early=early)

        missed = -float(misses) * cfg.missed_penalty
        distance = 0.0
        proximity = 0.0
        effort = 0.0
        # Movement terms contribute nothing on ticks without a reading.
        if reading is not None:
            if cfg.distance_shaping:
                distance = distance_shaping(reading.distance, cfg.distance_k)
            if cfg.proximity_velocity and reading.in_proximity_band and not window_open:
                proximity = reading.speed * cfg.velocity_scale
            if cfg.effort_penalty:
                effort = -reading.effort

        return RewardTerms(
            success=success,
            cue_wait=wait,
            early=early,
            missed=missed,
            distance=distance,
            proximity=proximity,
            effort=effort,
        )
