from __future__ import annotations

import math
from collections import deque
from collections.abc import Sequence
from enum import Enum
from itertools import islice
from typing import TypeAlias, TypeVar

T = TypeVar("T")


class Drop(Enum):
    """Marker for a tick that received no reply within the timeout."""

    DROP = "drop"

    def __repr__(self) -> str:
        return "DROP"


DROP = Drop.DROP

# A latency in milliseconds, or DROP.
Sample: TypeAlias = float | Drop

# Upper bound used until a real sample arrives so min != max never divides by zero.
INITIAL_MAX_LATENCY_MS = 0.001


class SampleWindow:
    """Append-only buffer of raw samples, trimmed FIFO to ``max_length``."""

    __slots__ = ("_samples", "max_length")

    def __init__(self, max_length: int) -> None:
        if max_length <= 0:
            raise ValueError("max_length must be positive")
        self.max_length = max_length
        self._samples: deque[Sample] = deque()

    def __len__(self) -> int:
        return len(self._samples)

    def append(self, sample: Sample) -> None:
        self._samples.append(sample)
        # one eviction per append, even if max_length shrank since the last call
        if len(self._samples) > self.max_length:
            self._samples.popleft()

    def tail(self, n: int) -> list[Sample]:
        """Return the last ``min(n, len(self))`` samples, oldest first."""

        if n <= 0:
            return []
        newest_first = list(islice(reversed(self._samples), n))
        newest_first.reverse()
        return newest_first


class RangeTracker:
    """Observed minimum/maximum latency; only ever widens."""

    __slots__ = ("minimum", "maximum", "_seen_valid")

    def __init__(self) -> None:
        self.minimum = math.inf
        self.maximum = INITIAL_MAX_LATENCY_MS
        self._seen_valid = False

    def observe(self, sample: Sample) -> bool:
        """Fold ``sample`` into the bounds; return ``True`` when they changed."""

        if sample is DROP:
            return False
        self._seen_valid = True
        changed = False
        if sample < self.minimum:
            self.minimum = sample
            changed = True
        if sample > self.maximum:
            self.maximum = sample
            changed = True
        return changed

    def bounds(self) -> tuple[float, float]:
        return self.minimum, self.maximum

    @property
    def established(self) -> bool:
        """``True`` once a valid sample exists and the bounds are distinct."""

        return self._seen_valid and self.minimum < self.maximum


def tail_view(stream: Sequence[T], width: int) -> list[T]:
    """Right-aligned slice of ``stream`` that fits ``width`` cells; never padded."""

    if width <= 0:
        return []
    return list(stream[max(0, len(stream) - width) :])


__all__ = [
    "DROP",
    "Drop",
    "INITIAL_MAX_LATENCY_MS",
    "RangeTracker",
    "Sample",
    "SampleWindow",
    "tail_view",
]
