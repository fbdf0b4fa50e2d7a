from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .clock import Clock
from .cue_scheduler import MultiCueScheduler, SingleCueScheduler
from .episode import EpisodeConfig, EpisodeController
from .errors import ConfigurationError
from .metrics import MetricsLedger
from .movement import DirectionalDisplacement, MovementEvaluator, SpatialContainment, SpatialTarget
from .response_window import ResponseWindowTracker
from .rewards import RewardComposer, RewardConfig
from .task_core import CueKind, CuePresenter, Scheduler


class TaskVariant(str, Enum):
    TEMPORAL = "temporal"
    SWITCH = "switch"
    REACTION = "reaction"


def _default_target() -> SpatialTarget:
    return SpatialTarget(center=(0.0, 1.2, 0.5), radius=0.05)


@dataclass(frozen=True, slots=True)
class TemporalTaskConfig:
    # Wait for a single cue, then push the hand forward along one axis.
    episode_length_s: float = 5.0
    min_cue_time_s: float = 1.0
    max_cue_time_s: float = 3.0
    required_movement_distance: float = 0.4
    movement_threshold: float = 0.001
    movement_axis: int = 2
    early_on_any_axis: bool = False

    timing_success_reward: float = 10.0
    movement_success_reward: float = 5.0
    early_movement_penalty: float = 5.0

    dense_reward: bool = False
    effort_scale: float = 0.05
    cue_indicator_s: float = 0.5


@dataclass(frozen=True, slots=True)
class SwitchTaskConfig:
    # Activate cues ask for the hand inside the target, Deactivate cues for it outside.
    episode_length_s: float = 10.0
    min_interval_s: float = 1.0
    max_interval_s: float = 3.0
    max_cues: int | None = None
    response_window_s: float = 0.8
    target: SpatialTarget = field(default_factory=_default_target)

    success_reward: float = 10.0
    missed_penalty: float = 0.0

    dense_reward: bool = False
    distance_shaping: bool = True
    proximity_velocity: bool = True
    effort_penalty: bool = False
    effort_scale: float = 0.05
    cue_indicator_s: float = 0.5


@dataclass(frozen=True, slots=True)
class ReactionTaskConfig:
    # Every cue asks for the hand inside the target before the window closes.
    episode_length_s: float = 10.0
    min_interval_s: float = 1.0
    max_interval_s: float = 3.0
    max_cues: int | None = None
    response_window_s: float = 0.8
    target: SpatialTarget = field(default_factory=_default_target)

    success_reward: float = 10.0
    missed_penalty: float = 1.0

    dense_reward: bool = False
    distance_shaping: bool = True
    proximity_velocity: bool = True
    effort_penalty: bool = False
    effort_scale: float = 0.05
    cue_indicator_s: float = 0.5


def build_temporal_task(
    *,
    seed: int | None = None,
    config: TemporalTaskConfig | None = None,
    presenter: CuePresenter | None = None,
    scheduler: Scheduler | None = None,
    clock: Clock | None = None,
) -> EpisodeController:
    cfg = config or TemporalTaskConfig()
    if cfg.max_cue_time_s > cfg.episode_length_s:
        raise ConfigurationError("max_cue_time_s must not exceed episode_length_s")

    predicate = DirectionalDisplacement(
        required_distance=cfg.required_movement_distance,
        movement_threshold=cfg.movement_threshold,
        axis=cfg.movement_axis,
        early_on_any_axis=cfg.early_on_any_axis,
    )
    return EpisodeController(
        config=EpisodeConfig(
            episode_length_s=cfg.episode_length_s,
            terminate_on_success=True,
            reward_cue_wait=True,
            cue_indicator_s=cfg.cue_indicator_s,
        ),
        scheduler=scheduler
        or SingleCueScheduler(min_cue_time_s=cfg.min_cue_time_s, max_cue_time_s=cfg.max_cue_time_s),
        evaluator=MovementEvaluator(
            predicate=predicate,
            axis=cfg.movement_axis,
            effort_scale=cfg.effort_scale,
            persist_reference=True,
            reset_on_success=True,
        ),
        windows=ResponseWindowTracker(window_s=None),
        rewards=RewardComposer(
            config=RewardConfig(
                success_reward=cfg.movement_success_reward,
                cue_wait_reward=cfg.timing_success_reward,
                early_penalty=cfg.early_movement_penalty,
                dense_reward=cfg.dense_reward,
                proximity_velocity=False,
            )
        ),
        ledger=MetricsLedger(report_early=True),
        seed=seed,
        presenter=presenter,
        clock=clock,
    )


def build_switch_task(
    *,
    seed: int | None = None,
    config: SwitchTaskConfig | None = None,
    presenter: CuePresenter | None = None,
    scheduler: Scheduler | None = None,
    clock: Clock | None = None,
) -> EpisodeController:
    cfg = config or SwitchTaskConfig()
    kinds = (CueKind.ACTIVATE, CueKind.DEACTIVATE)
    return _build_spatial_task(
        episode_length_s=cfg.episode_length_s,
        scheduler=scheduler
        or MultiCueScheduler(
            min_interval_s=cfg.min_interval_s,
            max_interval_s=cfg.max_interval_s,
            kinds=kinds,
            count=cfg.max_cues,
        ),
        report_kinds=kinds,
        window_s=cfg.response_window_s,
        target=cfg.target,
        rewards=RewardConfig(
            success_reward=cfg.success_reward,
            missed_penalty=cfg.missed_penalty,
            dense_reward=cfg.dense_reward,
            distance_shaping=cfg.distance_shaping,
            proximity_velocity=cfg.proximity_velocity,
            effort_penalty=cfg.effort_penalty,
        ),
        effort_scale=cfg.effort_scale,
        cue_indicator_s=cfg.cue_indicator_s,
        seed=seed,
        presenter=presenter,
        clock=clock,
    )


def build_reaction_task(
    *,
    seed: int | None = None,
    config: ReactionTaskConfig | None = None,
    presenter: CuePresenter | None = None,
    scheduler: Scheduler | None = None,
    clock: Clock | None = None,
) -> EpisodeController:
    cfg = config or ReactionTaskConfig()
    return _build_spatial_task(
        episode_length_s=cfg.episode_length_s,
        scheduler=scheduler
        or MultiCueScheduler(
            min_interval_s=cfg.min_interval_s,
            max_interval_s=cfg.max_interval_s,
            kinds=(CueKind.GENERIC,),
            count=cfg.max_cues,
        ),
        report_kinds=(CueKind.GENERIC,),
        window_s=cfg.response_window_s,
        target=cfg.target,
        rewards=RewardConfig(
            success_reward=cfg.success_reward,
            missed_penalty=cfg.missed_penalty,
            dense_reward=cfg.dense_reward,
            distance_shaping=cfg.distance_shaping,
            proximity_velocity=cfg.proximity_velocity,
            effort_penalty=cfg.effort_penalty,
        ),
        effort_scale=cfg.effort_scale,
        cue_indicator_s=cfg.cue_indicator_s,
        seed=seed,
        presenter=presenter,
        clock=clock,
    )


def build_task(
    variant: TaskVariant | str,
    *,
    seed: int | None = None,
    presenter: CuePresenter | None = None,
    clock: Clock | None = None,
) -> EpisodeController:
    """Build a variant with its default configuration."""

    v = TaskVariant(variant)
    if v is TaskVariant.TEMPORAL:
        return build_temporal_task(seed=seed, presenter=presenter, clock=clock)
    if v is TaskVariant.SWITCH:
        return build_switch_task(seed=seed, presenter=presenter, clock=clock)
    return build_reaction_task(seed=seed, presenter=presenter, clock=clock)


def _build_spatial_task(
    *,
    episode_length_s: float,
    scheduler: Scheduler,
    report_kinds: tuple[CueKind, ...],
    window_s: float,
    target: SpatialTarget,
    rewards: RewardConfig,
    effort_scale: float,
    cue_indicator_s: float,
    seed: int | None,
    presenter: CuePresenter | None,
    clock: Clock | None,
) -> EpisodeController:
    return EpisodeController(
        config=EpisodeConfig(
            episode_length_s=episode_length_s,
            terminate_on_success=False,
            reward_cue_wait=False,
            cue_indicator_s=cue_indicator_s,
        ),
        scheduler=scheduler,
        evaluator=MovementEvaluator(
            predicate=SpatialContainment(target=target),
            effort_scale=effort_scale,
            persist_reference=False,
        ),
        windows=ResponseWindowTracker(window_s=window_s),
        rewards=RewardComposer(config=rewards),
        ledger=MetricsLedger(report_kinds=report_kinds),
        seed=seed,
        presenter=presenter,
        clock=clock,
    )
