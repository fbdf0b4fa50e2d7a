from __future__ import annotations

import math

import pytest

from cue_task_env.errors import ConfigurationError
from cue_task_env.response_window import (
    CueIndicator,
    ResponseWindowTracker,
    WindowClosure,
    WindowState,
)
from cue_task_env.task_core import CueEvent, CueKind


def test_window_deadline_counts_from_the_scheduled_cue_time() -> None:
    tracker = ResponseWindowTracker(window_s=0.8)
    window = tracker.open(CueEvent(timestamp=3.0, kind=CueKind.ACTIVATE))

    assert tracker.state is WindowState.OPEN
    assert window.deadline == pytest.approx(3.8)
    assert window.expected_kind is CueKind.ACTIVATE
    assert window.opened_at_s == 3.0

    assert tracker.accepts(3.5)
    assert tracker.accepts(3.79)
    assert not tracker.is_expired(3.79)
    assert not tracker.accepts(3.81)
    assert tracker.is_expired(3.81)


def test_close_returns_the_window_and_goes_idle() -> None:
    tracker = ResponseWindowTracker(window_s=0.8)
    tracker.open(CueEvent(timestamp=1.0, kind=CueKind.DEACTIVATE))

    closed = tracker.close(WindowClosure.SUCCESS)

    assert closed.open
    assert closed.expected_kind is CueKind.DEACTIVATE
    assert tracker.state is WindowState.IDLE
    assert not tracker.is_open
    assert tracker.last_closure is WindowClosure.SUCCESS
    assert not tracker.accepts(1.1)
    assert not tracker.is_expired(100.0)


def test_opening_a_second_window_while_one_is_open_is_an_invariant_violation() -> None:
    tracker = ResponseWindowTracker(window_s=0.8)
    tracker.open(CueEvent(timestamp=1.0))
    with pytest.raises(AssertionError):
        tracker.open(CueEvent(timestamp=1.5))


def test_closing_an_idle_window_is_an_invariant_violation() -> None:
    tracker = ResponseWindowTracker(window_s=0.8)
    with pytest.raises(AssertionError):
        tracker.close(WindowClosure.TIMEOUT)


def test_unbounded_window_stays_open_until_closed() -> None:
    tracker = ResponseWindowTracker(window_s=None)
    window = tracker.open(CueEvent(timestamp=2.0))

    assert math.isinf(window.deadline)
    assert tracker.accepts(1e9)
    assert not tracker.is_expired(1e9)

    tracker.close(WindowClosure.EPISODE_END)
    assert tracker.last_closure is WindowClosure.EPISODE_END

    tracker.reset()
    assert tracker.last_closure is None
    assert not tracker.is_open


def test_non_positive_window_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        ResponseWindowTracker(window_s=0.0)


def test_cue_indicator_reverts_after_its_duration() -> None:
    indicator = CueIndicator(duration_s=0.5)
    assert indicator.kind is None

    indicator.show(CueKind.ACTIVATE)
    assert indicator.kind is CueKind.ACTIVATE

    indicator.advance(0.25)
    assert indicator.kind is CueKind.ACTIVATE
    indicator.advance(0.25)
    assert indicator.kind is None

    indicator.show(CueKind.DEACTIVATE)
    indicator.reset()
    assert indicator.kind is None


def test_zero_length_indicator_never_shows() -> None:
    indicator = CueIndicator(duration_s=0.0)
    indicator.show(CueKind.GENERIC)
    assert indicator.kind is None
