"""Headless scripted run of every task variant.

A tiny proportional "reacher" stands in for the physics simulation and the
trained agent: it holds still until a response window opens and then moves
towards whatever position satisfies the open cue.
"""

from __future__ import annotations

import logging

import numpy as np

from .episode import EpisodeController
from .results import EpisodeResult, episode_result_from_controller
from .task_core import CueEvent, CueKind
from .variants import TaskVariant, build_task

logger = logging.getLogger(__name__)

REST_POSITION: tuple[float, float, float] = (0.0, 1.0, 0.3)
TICK_S = 0.02
MAX_SPEED_M_PER_S = 2.0


class LoggingPresenter:
    """Stands in for the audio/visual presenter: logs each cue it is handed."""

    def __init__(self) -> None:
        self.presented: list[CueEvent] = []

    def present(self, cue: CueEvent) -> None:
        self.presented.append(cue)
        logger.info("Cue presented: %s at %.2fs", cue.kind, cue.timestamp)


class ScriptedReacher:
    def __init__(self, *, rest: tuple[float, float, float], max_speed: float = MAX_SPEED_M_PER_S) -> None:
        self._rest = np.asarray(rest, dtype=np.float64)
        self._pos = self._rest.copy()
        self._max_speed = float(max_speed)

    @property
    def position(self) -> tuple[float, float, float]:
        return (float(self._pos[0]), float(self._pos[1]), float(self._pos[2]))

    def teleport(self, position: tuple[float, float, float]) -> None:
        self._pos = np.asarray(position, dtype=np.float64)

    def step_towards(self, goal: np.ndarray, dt: float) -> None:
        delta = goal - self._pos
        dist = float(np.linalg.norm(delta))
        max_step = self._max_speed * dt
        if dist <= max_step:
            self._pos = goal.copy()
        else:
            self._pos = self._pos + delta * (max_step / dist)


def _goal_for(variant: TaskVariant, controller: EpisodeController, rest: np.ndarray) -> np.ndarray:
    window = controller.window()
    if not window.open:
        return rest
    if variant is TaskVariant.TEMPORAL:
        return rest + np.array([0.0, 0.0, 0.5])
    if window.expected_kind is CueKind.DEACTIVATE:
        return rest
    target = controller.target
    assert target is not None
    return np.asarray(target.center, dtype=np.float64)


def run_episode(variant: TaskVariant | str, *, seed: int, max_ticks: int = 2000) -> EpisodeResult:
    v = TaskVariant(variant)
    presenter = LoggingPresenter()
    controller = build_task(v, seed=seed, presenter=presenter)
    reacher = ScriptedReacher(rest=REST_POSITION)
    rest = np.asarray(REST_POSITION, dtype=np.float64)

    controller.acquire_actuator(reacher.position)
    controller.reset(seed)
    total_reward = 0.0
    for _ in range(max_ticks):
        reacher.step_towards(_goal_for(v, controller, rest), TICK_S)
        result = controller.tick(TICK_S, reacher.position)
        total_reward += result.reward
        if result.reset_actuator_to is not None:
            reacher.teleport(result.reset_actuator_to)
        if result.finished:
            break

    outcome = episode_result_from_controller(controller, variant=v.value)
    logger.info(
        "%s: reward %.2f, points %d/%d, fail rate %.2f, ended by %s at %.2fs",
        v.value,
        total_reward,
        outcome.points,
        outcome.attempts,
        outcome.fail_rate,
        outcome.end_reason,
        outcome.elapsed_s,
    )
    return outcome


def run(*, seed: int = 0, max_ticks: int = 2000) -> int:
    for variant in TaskVariant:
        run_episode(variant, seed=seed, max_ticks=max_ticks)
    return 0
