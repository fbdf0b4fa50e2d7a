from __future__ import annotations

from .errors import ConfigurationError
from .task_core import CueEvent, CueKind, SeededRng


def draw_single_cue(
    *,
    episode_length_s: float,
    min_cue_time_s: float,
    max_cue_time_s: float,
    rng: SeededRng,
    kind: CueKind = CueKind.GENERIC,
) -> tuple[CueEvent, ...]:
    """One cue, uniformly placed in ``[min_cue_time_s, max_cue_time_s]``.

    A draw at or past the end of the episode can never fire, so it yields an
    empty schedule instead.
    """

    t = rng.uniform(min_cue_time_s, max_cue_time_s)
    if t >= episode_length_s:
        return ()
    return (CueEvent(timestamp=float(t), kind=kind),)


def generate_cues(
    *,
    episode_length_s: float,
    min_interval_s: float,
    max_interval_s: float,
    count: int | None,
    rng: SeededRng,
    kinds: tuple[CueKind, ...] = (CueKind.GENERIC,),
) -> tuple[CueEvent, ...]:
    """Cue train with uniform random gaps of ``[min_interval_s, max_interval_s]``.

    Starts from ``min_interval_s`` and stops at the first timestamp that would
    land at or past ``episode_length_s``, or once ``count`` cues exist.
    """

    cues: list[CueEvent] = []
    current = float(min_interval_s)
    while current < episode_length_s:
        if count is not None and len(cues) >= count:
            break
        current += rng.uniform(min_interval_s, max_interval_s)
        if current >= episode_length_s:
            break
        kind = kinds[0] if len(kinds) == 1 else rng.choice(kinds)
        cues.append(CueEvent(timestamp=float(current), kind=kind))
    return tuple(cues)


class SingleCueScheduler:
    """Exactly one cue per episode."""

    def __init__(
        self,
        *,
        min_cue_time_s: float,
        max_cue_time_s: float,
        kind: CueKind = CueKind.GENERIC,
    ) -> None:
        if min_cue_time_s < 0.0:
            raise ConfigurationError("min_cue_time_s must be >= 0")
        if min_cue_time_s > max_cue_time_s:
            raise ConfigurationError("min_cue_time_s must be <= max_cue_time_s")
        self._min_s = float(min_cue_time_s)
        self._max_s = float(max_cue_time_s)
        self._kind = kind

    @property
    def min_interval_s(self) -> float:
        return self._min_s

    def schedule(self, *, episode_length_s: float, rng: SeededRng) -> tuple[CueEvent, ...]:
        return draw_single_cue(
            episode_length_s=episode_length_s,
            min_cue_time_s=self._min_s,
            max_cue_time_s=self._max_s,
            rng=rng,
            kind=self._kind,
        )


class MultiCueScheduler:
    """Repeating cues; each cue picks its kind uniformly from ``kinds``."""

    def __init__(
        self,
        *,
        min_interval_s: float,
        max_interval_s: float,
        kinds: tuple[CueKind, ...] = (CueKind.GENERIC,),
        count: int | None = None,
    ) -> None:
        if min_interval_s <= 0.0:
            raise ConfigurationError("min_interval_s must be > 0")
        if min_interval_s > max_interval_s:
            raise ConfigurationError("min_interval_s must be <= max_interval_s")
        if not kinds:
            raise ConfigurationError("kinds must not be empty")
        if count is not None and count < 0:
            raise ConfigurationError("count must be >= 0")
        self._min_s = float(min_interval_s)
        self._max_s = float(max_interval_s)
        self._kinds = tuple(kinds)
        self._count = count

    @property
    def min_interval_s(self) -> float:
        return self._min_s

    def schedule(self, *, episode_length_s: float, rng: SeededRng) -> tuple[CueEvent, ...]:
        return generate_cues(
            episode_length_s=episode_length_s,
            min_interval_s=self._min_s,
            max_interval_s=self._max_s,
            count=self._count,
            rng=rng,
            kinds=self._kinds,
        )
