from __future__ import annotations

from dataclasses import dataclass

from .episode import EpisodeController
from .task_core import EpisodeEvent, EpisodeEventKind, EpisodePhase


@dataclass(frozen=True, slots=True)
class EpisodeResult:
    """Summary + event log for a finished episode.

    Generic across task variants so hosts can log or aggregate episodes
    without knowing which variant produced them.
    """

    variant: str
    seed: int | None
    episode_length_s: float
    elapsed_s: float
    end_reason: str

    cues_scheduled: int
    cues_fired: int
    points: int
    attempts: int
    fail_rate: float
    early_movements: int
    effort_cost: float
    mean_rt_ms: float | None
    median_rt_ms: float | None

    metrics: dict[str, float | int]
    events: list[EpisodeEvent]


def episode_result_from_controller(
    controller: EpisodeController,
    *,
    variant: str,
) -> EpisodeResult:
    """Build an EpisodeResult from a finished EpisodeController."""

    if controller.phase is not EpisodePhase.FINISHED:
        raise ValueError("episode has not finished")

    events = controller.events()
    rts_ms = sorted(
        int(round(e.response_time_s * 1000.0))
        for e in events
        if e.kind is EpisodeEventKind.RESPONSE_SUCCESS and e.response_time_s is not None
    )

    mean_ms: float | None
    median_ms: float | None
    if not rts_ms:
        mean_ms = None
        median_ms = None
    else:
        mean_ms = float(sum(rts_ms)) / float(len(rts_ms))
        mid = len(rts_ms) // 2
        if len(rts_ms) % 2 == 1:
            median_ms = float(rts_ms[mid])
        else:
            median_ms = float(rts_ms[mid - 1] + rts_ms[mid]) / 2.0

    snap = controller.ledger.snapshot()
    state = controller.state()
    return EpisodeResult(
        variant=str(variant),
        seed=controller.seed,
        episode_length_s=float(controller.config.episode_length_s),
        elapsed_s=float(state.elapsed_s),
        end_reason=str(controller.end_reason),
        cues_scheduled=len(controller.cues),
        cues_fired=int(state.cue_index),
        points=int(snap.points),
        attempts=int(snap.attempts),
        fail_rate=float(snap.fail_rate),
        early_movements=int(snap.early_movements),
        effort_cost=float(snap.effort_cost),
        mean_rt_ms=mean_ms,
        median_rt_ms=median_ms,
        metrics=snap.as_dict(),
        events=events,
    )
