from __future__ import annotations

from dataclasses import dataclass

from .task_core import CueKind

POINTS = "Points"
EFFORT_COST = "EffortCost"
FAIL_RATE = "failrateTarget0"
EARLY_MOVEMENTS = "EarlyMovements"

SUCCESS_KEYS: dict[CueKind, str] = {
    CueKind.ACTIVATE: "SuccessfulActivates",
    CueKind.DEACTIVATE: "SuccessfulDeactivates",
    CueKind.GENERIC: "SuccessfulResponses",
}
FAILURE_KEYS: dict[CueKind, str] = {
    CueKind.ACTIVATE: "FailedActivates",
    CueKind.DEACTIVATE: "FailedDeactivates",
    CueKind.GENERIC: "MissedResponses",
}


@dataclass(frozen=True, slots=True)
class MetricsSnapshot:
    points: int
    effort_cost: float
    fail_rate: float
    successes: int
    misses: int
    early_movements: int
    successes_by_kind: tuple[tuple[CueKind, int], ...] = ()
    failures_by_kind: tuple[tuple[CueKind, int], ...] = ()
    report_early: bool = False

    @property
    def attempts(self) -> int:
        return self.successes + self.misses + self.early_movements

    def as_dict(self) -> dict[str, float | int]:
        """Boundary mapping; the key set depends only on the ledger's layout."""

        out: dict[str, float | int] = {
            POINTS: int(self.points),
            EFFORT_COST: float(self.effort_cost),
            FAIL_RATE: float(self.fail_rate),
        }
        if self.report_early:
            out[EARLY_MOVEMENTS] = int(self.early_movements)
        for kind, n in self.successes_by_kind:
            out[SUCCESS_KEYS[kind]] = int(n)
        for kind, n in self.failures_by_kind:
            out[FAILURE_KEYS[kind]] = int(n)
        return out


class MetricsLedger:
    """Running counters for one episode.

    ``failrateTarget0`` is (misses + early movements) / attempts, recomputed
    whenever a counter changes, and 0.0 before the first attempt.
    """

    def __init__(self, *, report_kinds: tuple[CueKind, ...] = (), report_early: bool = False) -> None:
        self._report_kinds = tuple(dict.fromkeys(report_kinds))
        self._report_early = bool(report_early)
        self._successes: dict[CueKind, int] = {}
        self._failures: dict[CueKind, int] = {}
        self._early = 0
        self._effort_cost = 0.0
        self._fail_rate = 0.0

    @property
    def points(self) -> int:
        return sum(self._successes.values())

    @property
    def misses(self) -> int:
        return sum(self._failures.values())

    @property
    def early_movements(self) -> int:
        return self._early

    @property
    def attempts(self) -> int:
        return self.points + self.misses + self._early

    @property
    def fail_rate(self) -> float:
        return self._fail_rate

    @property
    def effort_cost(self) -> float:
        return self._effort_cost

    def record_success(self, kind: CueKind) -> None:
        self._successes[kind] = self._successes.get(kind, 0) + 1
        self._refresh_fail_rate()

    def record_miss(self, kind: CueKind) -> None:
        self._failures[kind] = self._failures.get(kind, 0) + 1
        self._refresh_fail_rate()

    def record_early_movement(self) -> None:
        self._early += 1
        self._refresh_fail_rate()

    def add_effort(self, cost: float) -> None:
        self._effort_cost += float(cost)

    def reset(self) -> None:
        self._successes.clear()
        self._failures.clear()
        self._early = 0
        self._effort_cost = 0.0
        self._fail_rate = 0.0

    def snapshot(self) -> MetricsSnapshot:
        return MetricsSnapshot(
            points=self.points,
            effort_cost=self._effort_cost,
            fail_rate=self._fail_rate,
            successes=self.points,
            misses=self.misses,
            early_movements=self._early,
            successes_by_kind=tuple((k, self._successes.get(k, 0)) for k in self._report_kinds),
            failures_by_kind=tuple((k, self._failures.get(k, 0)) for k in self._report_kinds),
            report_early=self._report_early,
        )

    def as_dict(self) -> dict[str, float | int]:
        return self.snapshot().as_dict()

    def _refresh_fail_rate(self) -> None:
        attempts = self.attempts
        failures = self.misses + self._early
        self._fail_rate = 0.0 if attempts == 0 else failures / attempts
