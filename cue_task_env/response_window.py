from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from .errors import ConfigurationError
from .task_core import CueEvent, CueKind


class WindowState(str, Enum):
    IDLE = "idle"
    OPEN = "open"


class WindowClosure(str, Enum):
    SUCCESS = "success"
    TIMEOUT = "timeout"
    EPISODE_END = "episode_end"


@dataclass(frozen=True, slots=True)
class ResponseWindow:
    open: bool
    deadline: float = math.inf  # inf: open until the episode ends
    expected_kind: CueKind | None = None
    opened_at_s: float | None = None


_IDLE = ResponseWindow(open=False)


class ResponseWindowTracker:
    """Owns the single "a response is expected" window.

    The deadline is measured from the cue's scheduled timestamp, so a window
    always spans exactly ``window_s`` of simulated time regardless of the
    host's tick size. ``window_s=None`` keeps the window open until the
    episode ends.
    """

    def __init__(self, *, window_s: float | None) -> None:
        if window_s is not None and window_s <= 0.0:
            raise ConfigurationError("response window must be > 0 seconds")
        self._window_s = None if window_s is None else float(window_s)
        self._current = _IDLE
        self._last_closure: WindowClosure | None = None

    @property
    def window_s(self) -> float | None:
        return self._window_s

    @property
    def state(self) -> WindowState:
        return WindowState.OPEN if self._current.open else WindowState.IDLE

    @property
    def is_open(self) -> bool:
        return self._current.open

    @property
    def window(self) -> ResponseWindow:
        return self._current

    def open(self, cue: CueEvent) -> ResponseWindow:
        assert not self._current.open, (
            f"cue at {cue.timestamp:.3f}s fired while the window opened at "
            f"{self._current.opened_at_s}s is still open"
        )
        deadline = math.inf if self._window_s is None else cue.timestamp + self._window_s
        self._current = ResponseWindow(
            open=True,
            deadline=deadline,
            expected_kind=cue.kind,
            opened_at_s=cue.timestamp,
        )
        return self._current

    def accepts(self, now: float) -> bool:
        """True while a response can still succeed."""
        return self._current.open and now <= self._current.deadline

    def is_expired(self, now: float) -> bool:
        return self._current.open and now > self._current.deadline

    @property
    def last_closure(self) -> WindowClosure | None:
        return self._last_closure

    def close(self, reason: WindowClosure) -> ResponseWindow:
        closed = self._current
        assert closed.open, "no response window is open"
        self._current = _IDLE
        self._last_closure = reason
        return closed

    def reset(self) -> None:
        self._current = _IDLE
        self._last_closure = None


class CueIndicator:
    """Duration counter for the visual side of a cue (e.g. a recoloured target).

    The presenter switches the indicator on when a cue fires; it reverts once
    ``duration_s`` of simulated time has passed.
    """

    def __init__(self, *, duration_s: float) -> None:
        if duration_s < 0.0:
            raise ConfigurationError("cue indicator duration must be >= 0")
        self._duration_s = float(duration_s)
        self._remaining_s = 0.0
        self._kind: CueKind | None = None

    @property
    def kind(self) -> CueKind | None:
        return self._kind if self._remaining_s > 0.0 else None

    def show(self, kind: CueKind) -> None:
        self._kind = kind
        self._remaining_s = self._duration_s

    def advance(self, dt: float) -> None:
        if self._remaining_s <= 0.0:
            return
        self._remaining_s = max(0.0, self._remaining_s - float(dt))
        if self._remaining_s == 0.0:
            self._kind = None

    def reset(self) -> None:
        self._remaining_s = 0.0
        self._kind = None
