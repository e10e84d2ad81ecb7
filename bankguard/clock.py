"""Clock and tiebreaker collaborators used to stamp new transactions.

Transactions are keyed by `date_time * 10**6 + tiebreak`. Both sources
are injected so tests can pin time and ordering.
"""

import random
import time
from typing import Iterable, Iterator, Optional, Protocol

TIEBREAK_SPAN = 1_000_000


class Clock(Protocol):
    def now(self) -> int:
        """Current wall-clock time in whole seconds since the epoch."""
        ...


class Tiebreaker(Protocol):
    def next(self) -> int:
        """A value in [0, TIEBREAK_SPAN)."""
        ...


class SystemClock:
    def now(self) -> int:
        return int(time.time())


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, start: int) -> None:
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> None:
        self._now += seconds

    def set(self, value: int) -> None:
        self._now = value


class RandomTiebreaker:
    """Random sub-second component; seedable for reproducible runs."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def next(self) -> int:
        return self._rng.randrange(TIEBREAK_SPAN)


class SequenceTiebreaker:
    """Hands out values from a fixed sequence, then counts upward from its end."""

    def __init__(self, values: Iterable[int] = ()) -> None:
        self._values: Iterator[int] = iter(values)
        self._last = -1

    def next(self) -> int:
        value = next(self._values, None)
        if value is None:
            value = self._last + 1
        self._last = value
        return value % TIEBREAK_SPAN


def make_time_key(date_time: int, tiebreak: int) -> int:
    if not 0 <= tiebreak < TIEBREAK_SPAN:
        raise ValueError(f"tiebreak must be in [0, {TIEBREAK_SPAN}), got {tiebreak}")
    return date_time * TIEBREAK_SPAN + tiebreak
