from __future__ import annotations

import dataclasses

import pytest

from cue_task_env.results import episode_result_from_controller
from cue_task_env.task_core import CueKind, EpisodeEvent, EpisodeEventKind
from cue_task_env.variants import ReactionTaskConfig, build_reaction_task

INSIDE = (0.0, 1.2, 0.5)
OUTSIDE = (0.0, 1.0, 0.3)


def test_result_requires_a_finished_episode() -> None:
    controller = build_reaction_task(seed=1)
    controller.reset()
    with pytest.raises(ValueError):
        episode_result_from_controller(controller, variant="reaction")


def test_result_summarises_an_episode() -> None:
    controller = build_reaction_task(seed=8, config=ReactionTaskConfig(episode_length_s=10.0))
    controller.reset()

    finished = False
    while not finished:
        # Enter the target a quarter second after each cue, hold it half a second.
        pos = OUTSIDE
        for cue in controller.cues[: controller.state().cue_index]:
            if cue.timestamp + 0.25 <= controller.state().elapsed_s + 0.125 < cue.timestamp + 0.75:
                pos = INSIDE
        finished = controller.tick(0.125, pos).finished

    result = episode_result_from_controller(controller, variant="reaction")

    assert result.variant == "reaction"
    assert result.seed == 8
    assert result.end_reason == "timeout"
    assert result.cues_scheduled == len(controller.cues)
    assert result.cues_fired == result.cues_scheduled
    assert result.points == result.attempts
    assert result.fail_rate == 0.0
    assert result.metrics["SuccessfulResponses"] == result.points

    successes = [e for e in result.events if e.kind is EpisodeEventKind.RESPONSE_SUCCESS]
    assert len(successes) == result.points
    assert result.mean_rt_ms is not None
    assert 250.0 <= result.mean_rt_ms <= 400.0
    assert result.median_rt_ms is not None


def test_event_log_records_kind_time_and_response() -> None:
    controller = build_reaction_task(seed=3)
    controller.reset()
    while not controller.tick(0.125, OUTSIDE).finished:
        pass

    fields = {f.name for f in dataclasses.fields(EpisodeEvent)}
    assert fields == {"kind", "at_s", "cue_kind", "response_time_s"}
    misses = [e for e in controller.events() if e.kind is EpisodeEventKind.MISS]
    assert misses
    assert all(e.cue_kind is CueKind.GENERIC and e.response_time_s is None for e in misses)
