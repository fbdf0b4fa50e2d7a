from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .clock import Clock, SimClock
from .errors import ConfigurationError
from .metrics import MetricsLedger
from .movement import MovementClass, MovementEvaluator, MovementReading, SpatialContainment, SpatialTarget
from .response_window import CueIndicator, ResponseWindow, ResponseWindowTracker, WindowClosure
from .rewards import RewardComposer, RewardTerms
from .task_core import (
    CueEvent,
    CueKind,
    CuePresenter,
    EpisodeEvent,
    EpisodeEventKind,
    EpisodePhase,
    EpisodeSnapshot,
    EpisodeState,
    Scheduler,
    SeededRng,
    as_tuple3,
    clamp01,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EpisodeConfig:
    episode_length_s: float = 5.0
    terminate_on_success: bool = False
    reward_cue_wait: bool = False  # grant the timing reward when the first cue fires cleanly
    cue_indicator_s: float = 0.5


@dataclass(frozen=True, slots=True)
class TickResult:
    reward: float
    finished: bool
    metrics: dict[str, float | int]
    cue: CueEvent | None = None
    reset_actuator_to: tuple[float, float, float] | None = None
    events: tuple[EpisodeEvent, ...] = ()
    terms: RewardTerms = RewardTerms()


class EpisodeController:
    """Tick-driven episode state machine: NOT_STARTED -> RUNNING -> FINISHED.

    Each ``tick`` advances simulated time, fires due cues, evaluates the
    actuator against the open response window, composes the reward, updates
    the metrics and checks for termination. All timing is simulated elapsed
    time from the injected clock; the controller never reads a wall clock.

    The scheduler's interval floor may equal the response window. A cue due
    exactly on the open window's deadline first closes that window as a miss.
    """

    def __init__(
        self,
        *,
        config: EpisodeConfig,
        scheduler: Scheduler,
        evaluator: MovementEvaluator,
        windows: ResponseWindowTracker,
        rewards: RewardComposer,
        ledger: MetricsLedger,
        seed: int | None = None,
        presenter: CuePresenter | None = None,
        clock: Clock | None = None,
    ) -> None:
        if config.episode_length_s <= 0.0:
            raise ConfigurationError("episode_length_s must be > 0")
        if windows.window_s is not None and scheduler.min_interval_s < windows.window_s:
            raise ConfigurationError(
                "cue interval floor must be at least the response window so windows never overlap"
            )

        self._cfg = config
        self._scheduler = scheduler
        self._evaluator = evaluator
        self._windows = windows
        self._rewards = rewards
        self._ledger = ledger
        self._presenter = presenter

        self._rng = SeededRng(seed)
        self._clock: Clock = clock or SimClock()
        self._indicator = CueIndicator(duration_s=config.cue_indicator_s)

        self._phase = EpisodePhase.NOT_STARTED
        self._cues: tuple[CueEvent, ...] = ()
        self._cue_index = 0
        self._cue_wait_granted = False
        self._end_reason: str | None = None
        self._events: list[EpisodeEvent] = []

    @property
    def phase(self) -> EpisodePhase:
        return self._phase

    @property
    def config(self) -> EpisodeConfig:
        return self._cfg

    @property
    def seed(self) -> int | None:
        return self._rng.seed

    @property
    def cues(self) -> tuple[CueEvent, ...]:
        return self._cues

    @property
    def end_reason(self) -> str | None:
        return self._end_reason

    @property
    def ledger(self) -> MetricsLedger:
        return self._ledger

    @property
    def target(self) -> SpatialTarget | None:
        predicate = self._evaluator.predicate
        return predicate.target if isinstance(predicate, SpatialContainment) else None

    @property
    def early_movement_detected(self) -> bool:
        return self._evaluator.early_movement_detected

    def state(self) -> EpisodeState:
        return EpisodeState(
            elapsed_s=self._clock.now(),
            running=self._phase is EpisodePhase.RUNNING,
            cue_index=self._cue_index,
        )

    def window(self) -> ResponseWindow:
        return self._windows.window

    def time_feature(self) -> float:
        return clamp01(self._clock.now() / self._cfg.episode_length_s)

    def metrics(self) -> dict[str, float | int]:
        return self._ledger.as_dict()

    def events(self) -> list[EpisodeEvent]:
        return list(self._events)

    def acquire_actuator(self, position: Sequence[float] | np.ndarray) -> bool:
        """Capture the rest reference from a live reading; no-op once captured."""
        return self._evaluator.acquire(position)

    def set_target(self, target: SpatialTarget) -> None:
        predicate = self._evaluator.predicate
        if not isinstance(predicate, SpatialContainment):
            raise TypeError("this task has no spatial target")
        predicate.set_target(target)

    def reset(self, seed: int | None = None, *, target: SpatialTarget | None = None) -> EpisodeSnapshot:
        if seed is not None:
            self._rng = SeededRng(seed)
        if target is not None:
            self.set_target(target)

        self._clock.reset()
        self._indicator.reset()
        self._windows.reset()
        self._ledger.reset()
        self._evaluator.begin_episode()

        self._cues = self._scheduler.schedule(
            episode_length_s=self._cfg.episode_length_s,
            rng=self._rng,
        )
        self._cue_index = 0
        self._cue_wait_granted = False
        self._end_reason = None
        self._events = []
        self._phase = EpisodePhase.RUNNING

        logger.info(
            "New episode started - %d cue(s) at %s",
            len(self._cues),
            ", ".join(f"{c.timestamp:.2f}s" for c in self._cues) or "none",
        )
        return self.snapshot()

    def tick(self, dt: float, actuator_position: Sequence[float] | np.ndarray | None) -> TickResult:
        if self._phase is EpisodePhase.NOT_STARTED:
            raise RuntimeError("reset() must be called before tick()")
        if self._phase is EpisodePhase.FINISHED:
            return TickResult(reward=0.0, finished=True, metrics=self._ledger.as_dict())
        if not dt > 0.0:
            raise ValueError("dt must be > 0")

        now = self._clock.advance(dt)
        self._indicator.advance(dt)
        tick_events: list[EpisodeEvent] = []

        misses = self._resolve_timeout(now, tick_events)
        due = self._due_cue(now)
        cue: CueEvent | None = None
        if due is not None:
            misses += self._close_superseded_window(due, now, tick_events)
            cue = self._fire_cue(due, now, tick_events)

        window = self._windows.window
        expected = window.expected_kind if self._windows.accepts(now) else None
        reading = self._evaluator.evaluate(
            actuator_position,
            dt=dt,
            awaiting_cue=self._cue_index == 0,
            expected_kind=expected,
        )

        early = reading is not None and reading.classification is MovementClass.EARLY
        if early:
            self._ledger.record_early_movement()
            self._record_event(tick_events, EpisodeEventKind.EARLY_MOVEMENT, now)

        cue_wait = self._check_cue_wait(reading, now, tick_events)

        points_before = self._ledger.points
        succeeded = reading is not None and reading.classification is MovementClass.SUFFICIENT
        if succeeded:
            closed = self._windows.close(WindowClosure.SUCCESS)
            assert closed.expected_kind is not None
            self._ledger.record_success(closed.expected_kind)
            rt = None if closed.opened_at_s is None else max(0.0, now - closed.opened_at_s)
            self._record_event(
                tick_events,
                EpisodeEventKind.RESPONSE_SUCCESS,
                now,
                cue_kind=closed.expected_kind,
                response_time_s=rt,
            )
            logger.debug("Response completed at %.2fs (%s)", now, closed.expected_kind)

        misses += self._resolve_timeout(now, tick_events)

        if reading is not None:
            self._ledger.add_effort(reading.effort)

        terms = self._rewards.compose(
            points_delta=self._ledger.points - points_before,
            cue_wait=cue_wait,
            early_movement=early,
            misses=misses,
            reading=reading,
            window_open=self._windows.is_open,
        )

        if succeeded and self._cfg.terminate_on_success:
            self._finish(now, reason="success")
        elif now >= self._cfg.episode_length_s:
            self._finish(now, reason="timeout")

        return TickResult(
            reward=terms.total,
            finished=self._phase is EpisodePhase.FINISHED,
            metrics=self._ledger.as_dict(),
            cue=cue,
            reset_actuator_to=None if reading is None else reading.reset_to,
            events=tuple(tick_events),
            terms=terms,
        )

    def snapshot(self) -> EpisodeSnapshot:
        rest = self._evaluator.rest
        return EpisodeSnapshot(
            phase=self._phase,
            state=self.state(),
            time_feature=self.time_feature(),
            cues_scheduled=len(self._cues),
            window=self._windows.window,
            indicator_kind=self._indicator.kind,
            rest_position=as_tuple3(rest.position) if rest.captured else None,
            metrics=self._ledger.as_dict(),
        )

    def _due_cue(self, now: float) -> CueEvent | None:
        if self._cue_index >= len(self._cues):
            return None
        cue = self._cues[self._cue_index]
        return cue if now >= cue.timestamp else None

    def _close_superseded_window(self, cue: CueEvent, now: float, tick_events: list[EpisodeEvent]) -> int:
        # A cue due exactly on the open window's deadline ends that window as a miss.
        if not self._windows.is_open:
            return 0
        assert cue.timestamp >= self._windows.window.deadline, "cue fired inside an open response window"
        closed = self._windows.close(WindowClosure.TIMEOUT)
        assert closed.expected_kind is not None
        self._ledger.record_miss(closed.expected_kind)
        self._record_event(tick_events, EpisodeEventKind.MISS, now, cue_kind=closed.expected_kind)
        logger.debug("Response window for %s superseded by the next cue at %.2fs", closed.expected_kind, now)
        return 1

    def _fire_cue(self, cue: CueEvent, now: float, tick_events: list[EpisodeEvent]) -> CueEvent:
        assert self._phase is EpisodePhase.RUNNING, "cue fired after the episode finished"

        self._cue_index += 1
        self._windows.open(cue)
        self._indicator.show(cue.kind)
        if self._presenter is not None:
            self._presenter.present(cue)
        self._record_event(tick_events, EpisodeEventKind.CUE, now, cue_kind=cue.kind)
        logger.debug("Cue %s fired at %.2fs (scheduled %.2fs)", cue.kind, now, cue.timestamp)
        return cue

    def _resolve_timeout(self, now: float, tick_events: list[EpisodeEvent]) -> int:
        if not self._windows.is_expired(now):
            return 0
        closed = self._windows.close(WindowClosure.TIMEOUT)
        assert closed.expected_kind is not None
        self._ledger.record_miss(closed.expected_kind)
        self._record_event(tick_events, EpisodeEventKind.MISS, now, cue_kind=closed.expected_kind)
        logger.debug("Response window for %s timed out at %.2fs", closed.expected_kind, now)
        return 1

    def _check_cue_wait(
        self,
        reading: MovementReading | None,
        now: float,
        tick_events: list[EpisodeEvent],
    ) -> bool:
        if not self._cfg.reward_cue_wait or self._cue_wait_granted:
            return False
        if self._cue_index == 0 or reading is None:
            return False
        if self._evaluator.early_movement_detected:
            return False
        self._cue_wait_granted = True
        self._record_event(tick_events, EpisodeEventKind.WAIT_SUCCESS, now)
        logger.debug("Waited for the cue: timing reward granted at %.2fs", now)
        return True

    def _finish(self, now: float, *, reason: str) -> None:
        if self._windows.is_open:
            self._windows.close(WindowClosure.EPISODE_END)
        self._phase = EpisodePhase.FINISHED
        self._end_reason = reason
        ledger = self._ledger
        logger.debug(
            "Episode ended (%s) at %.2fs - successful movements: %d/%d (early movements: %d)",
            reason,
            now,
            ledger.points,
            ledger.attempts,
            ledger.early_movements,
        )

    def _record_event(
        self,
        tick_events: list[EpisodeEvent],
        kind: EpisodeEventKind,
        at_s: float,
        *,
        cue_kind: CueKind | None = None,
        response_time_s: float | None = None,
    ) -> None:
        evt = EpisodeEvent(kind=kind, at_s=float(at_s), cue_kind=cue_kind, response_time_s=response_time_s)
        self._events.append(evt)
        tick_events.append(evt)
