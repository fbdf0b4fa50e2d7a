from __future__ import annotations

import pytest

from cue_task_env.cue_scheduler import (
    MultiCueScheduler,
    SingleCueScheduler,
    draw_single_cue,
    generate_cues,
)
from cue_task_env.errors import ConfigurationError
from cue_task_env.task_core import CueEvent, CueKind, SeededRng


def test_generator_determinism_same_seed_same_sequence() -> None:
    scheduler = MultiCueScheduler(
        min_interval_s=1.0,
        max_interval_s=3.0,
        kinds=(CueKind.ACTIVATE, CueKind.DEACTIVATE),
    )
    rng_1 = SeededRng(909)
    rng_2 = SeededRng(909)

    seq1 = [scheduler.schedule(episode_length_s=30.0, rng=rng_1) for _ in range(10)]
    seq2 = [scheduler.schedule(episode_length_s=30.0, rng=rng_2) for _ in range(10)]

    assert seq1 == seq2
    assert all(len(cues) > 0 for cues in seq1)


def test_different_seeds_give_different_schedules() -> None:
    scheduler = MultiCueScheduler(min_interval_s=1.0, max_interval_s=3.0)
    a = scheduler.schedule(episode_length_s=60.0, rng=SeededRng(1))
    b = scheduler.schedule(episode_length_s=60.0, rng=SeededRng(2))
    assert a != b


def test_multi_cue_timestamps_within_bounds_and_strictly_increasing() -> None:
    for seed in range(50):
        cues = generate_cues(
            episode_length_s=10.0,
            min_interval_s=0.9,
            max_interval_s=2.5,
            count=None,
            rng=SeededRng(seed),
        )
        stamps = [c.timestamp for c in cues]
        assert all(0.9 <= t < 10.0 for t in stamps)
        assert all(b > a for a, b in zip(stamps, stamps[1:]))
        assert all(b - a >= 0.9 - 1e-9 for a, b in zip(stamps, stamps[1:]))
        assert stamps[0] >= 1.8 - 1e-9


def test_degenerate_configs_yield_empty_schedule() -> None:
    assert generate_cues(
        episode_length_s=1.0,
        min_interval_s=1.0,
        max_interval_s=2.0,
        count=None,
        rng=SeededRng(0),
    ) == ()
    assert generate_cues(
        episode_length_s=1.0,
        min_interval_s=0.6,
        max_interval_s=0.7,
        count=None,
        rng=SeededRng(0),
    ) == ()
    assert generate_cues(
        episode_length_s=100.0,
        min_interval_s=1.0,
        max_interval_s=2.0,
        count=0,
        rng=SeededRng(0),
    ) == ()


def test_count_caps_the_number_of_cues() -> None:
    cues = generate_cues(
        episode_length_s=100.0,
        min_interval_s=1.0,
        max_interval_s=2.0,
        count=2,
        rng=SeededRng(5),
    )
    assert len(cues) == 2


def test_two_kinds_are_picked_with_roughly_equal_probability() -> None:
    cues = generate_cues(
        episode_length_s=1000.0,
        min_interval_s=1.0,
        max_interval_s=3.0,
        count=None,
        rng=SeededRng(3),
        kinds=(CueKind.ACTIVATE, CueKind.DEACTIVATE),
    )
    activates = sum(1 for c in cues if c.kind is CueKind.ACTIVATE)
    assert len(cues) > 200
    assert 0.35 <= activates / len(cues) <= 0.65
    assert {c.kind for c in cues} == {CueKind.ACTIVATE, CueKind.DEACTIVATE}


def test_single_cue_is_drawn_inside_its_range() -> None:
    scheduler = SingleCueScheduler(min_cue_time_s=1.0, max_cue_time_s=3.0)
    for seed in range(30):
        cues = scheduler.schedule(episode_length_s=5.0, rng=SeededRng(seed))
        assert len(cues) == 1
        assert 1.0 <= cues[0].timestamp <= 3.0
        assert cues[0].kind is CueKind.GENERIC


def test_single_cue_with_fixed_time_and_past_end() -> None:
    assert draw_single_cue(
        episode_length_s=5.0,
        min_cue_time_s=2.0,
        max_cue_time_s=2.0,
        rng=SeededRng(0),
    ) == (CueEvent(timestamp=2.0, kind=CueKind.GENERIC),)
    assert draw_single_cue(
        episode_length_s=5.0,
        min_cue_time_s=5.0,
        max_cue_time_s=5.0,
        rng=SeededRng(0),
    ) == ()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"min_interval_s": 0.0, "max_interval_s": 1.0},
        {"min_interval_s": 2.0, "max_interval_s": 1.0},
        {"min_interval_s": 1.0, "max_interval_s": 2.0, "kinds": ()},
        {"min_interval_s": 1.0, "max_interval_s": 2.0, "count": -1},
    ],
)
def test_multi_cue_scheduler_rejects_malformed_config(kwargs: dict) -> None:
    with pytest.raises(ConfigurationError):
        MultiCueScheduler(**kwargs)


def test_single_cue_scheduler_rejects_malformed_config() -> None:
    with pytest.raises(ConfigurationError):
        SingleCueScheduler(min_cue_time_s=3.0, max_cue_time_s=1.0)
    with pytest.raises(ValueError):
        SingleCueScheduler(min_cue_time_s=-1.0, max_cue_time_s=1.0)
