from __future__ import annotations

import math

import pytest

from cue_task_env.errors import ConfigurationError
from cue_task_env.movement import MovementClass, MovementReading
from cue_task_env.rewards import RewardComposer, RewardConfig, RewardTerms, distance_shaping


def _reading(
    *,
    distance: float = 0.2,
    speed: float = 0.0,
    effort: float = 0.0,
    in_band: bool = False,
) -> MovementReading:
    return MovementReading(
        classification=MovementClass.NONE,
        position=(0.0, 0.0, 0.0),
        lateral_displacement=0.0,
        distance=distance,
        speed=speed,
        effort=effort,
        in_proximity_band=in_band,
    )


def _compose(composer: RewardComposer, **kwargs) -> RewardTerms:
    args = {
        "points_delta": 0,
        "cue_wait": False,
        "early_movement": False,
        "misses": 0,
        "reading": _reading(),
        "window_open": False,
    }
    args.update(kwargs)
    return composer.compose(**args)


def test_distance_shaping_is_bounded_and_decreasing() -> None:
    assert distance_shaping(0.0) == 0.0
    values = [distance_shaping(d) for d in (0.0, 0.01, 0.1, 0.5, 2.0, 3.5)]
    assert all(-0.1 < v <= 0.0 for v in values)
    assert all(b < a for a, b in zip(values, values[1:]))

    far = [distance_shaping(d) for d in (4.0, 10.0, 100.0)]
    assert all(-0.1 <= v <= values[-1] for v in far)
    assert distance_shaping(100.0) == pytest.approx(-0.1)
    assert distance_shaping(0.2) == pytest.approx((math.exp(-2.0) - 1.0) / 10.0)


def test_sparse_mode_is_zero_without_events() -> None:
    composer = RewardComposer(config=RewardConfig(missed_penalty=1.0))
    terms = _compose(composer, reading=_reading(distance=5.0, speed=3.0, effort=1.0, in_band=True))
    assert terms.total == 0.0

    # Misses are a dense-mode term.
    terms = _compose(composer, misses=2)
    assert terms.total == 0.0


def test_sparse_events_are_summed() -> None:
    composer = RewardComposer(
        config=RewardConfig(success_reward=5.0, cue_wait_reward=10.0, early_penalty=5.0)
    )
    assert _compose(composer, points_delta=1).total == 5.0
    assert _compose(composer, points_delta=2).total == 10.0
    assert _compose(composer, cue_wait=True).total == 10.0
    assert _compose(composer, early_movement=True).total == -5.0


def test_dense_mode_adds_shaping_terms() -> None:
    composer = RewardComposer(
        config=RewardConfig(dense_reward=True, missed_penalty=1.0, effort_penalty=True)
    )
    terms = _compose(composer, misses=1, reading=_reading(distance=0.06, speed=0.5, effort=0.02, in_band=True))

    assert terms.missed == -1.0
    assert terms.distance == pytest.approx(distance_shaping(0.06))
    assert terms.proximity == pytest.approx(0.005)
    assert terms.effort == pytest.approx(-0.02)
    assert terms.total == pytest.approx(terms.sparse + terms.dense)


def test_proximity_velocity_only_applies_outside_an_open_window() -> None:
    composer = RewardComposer(config=RewardConfig(dense_reward=True))
    reading = _reading(distance=0.06, speed=1.0, in_band=True)

    assert _compose(composer, reading=reading, window_open=False).proximity == pytest.approx(0.01)
    assert _compose(composer, reading=reading, window_open=True).proximity == 0.0
    assert _compose(composer, reading=_reading(speed=1.0, in_band=False)).proximity == 0.0


def test_dense_terms_can_be_toggled_individually() -> None:
    composer = RewardComposer(
        config=RewardConfig(dense_reward=True, distance_shaping=False, proximity_velocity=False)
    )
    terms = _compose(composer, reading=_reading(distance=0.06, speed=1.0, effort=0.3, in_band=True))
    assert terms.distance == 0.0
    assert terms.proximity == 0.0
    assert terms.effort == 0.0


def test_missing_reading_contributes_no_movement_terms() -> None:
    composer = RewardComposer(config=RewardConfig(dense_reward=True, effort_penalty=True))
    terms = _compose(composer, reading=None)
    assert terms.total == 0.0


@pytest.mark.parametrize(
    "cfg",
    [
        RewardConfig(success_reward=-1.0),
        RewardConfig(early_penalty=-1.0),
        RewardConfig(missed_penalty=-0.5),
        RewardConfig(distance_k=0.0),
    ],
)
def test_malformed_reward_config_is_rejected(cfg: RewardConfig) -> None:
    with pytest.raises(ConfigurationError):
        RewardComposer(config=cfg)
