from __future__ import annotations

from typing import Protocol


class Clock(Protocol):
    """Simulated clock abstraction.

    Core logic reads time through this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return elapsed simulated seconds."""

    def advance(self, dt: float) -> float:
        """Move time forward by ``dt`` and return the new elapsed time."""

    def reset(self) -> None:
        """Rewind to zero at the start of an episode."""


class SimClock:
    """Clock driven by host ticks: time only moves when ``advance`` is called."""

    def __init__(self) -> None:
        self._elapsed_s = 0.0

    def now(self) -> float:
        return self._elapsed_s

    def advance(self, dt: float) -> float:
        if not dt > 0.0:
            raise ValueError("dt must be > 0")
        self._elapsed_s += float(dt)
        return self._elapsed_s

    def reset(self) -> None:
        self._elapsed_s = 0.0
