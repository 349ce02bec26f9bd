"""Order-statistic downsampling of raw sample chunks."""

from __future__ import annotations

import math
from collections.abc import Sequence

from .samples import DROP, Sample


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero (``round`` uses banker's rounding)."""

    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def statistic_count(chunk_size: int) -> int:
    """Number of order statistics kept for a chunk of ``chunk_size`` samples.

    Grows with ``log2`` of the chunk so large chunks stay compact on screen.
    At least one statistic is kept, which only matters for single-sample chunks.
    """

    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    return max(1, round_half_away(math.log2(chunk_size)))


def summary_length(chunk_size: int) -> int:
    """Statistics plus the trailing drop count."""

    return statistic_count(chunk_size) + 1


def statistic_indices(chunk_size: int) -> list[int]:
    """Evenly spaced positions into a sorted chunk of ``chunk_size`` samples."""

    samples = statistic_count(chunk_size)
    if samples == 1:
        return [round_half_away((chunk_size - 1) / 2)]
    step = (samples - 1) / (chunk_size - 1)
    return [round_half_away(k / step) for k in range(samples)]


def summarize(chunk: Sequence[Sample]) -> tuple[Sample | int, ...]:
    """Reduce ``chunk`` to evenly spaced order statistics followed by its drop count.

    Drops carry no latency, so they are kept out of the sort and occupy the
    lowest positions of the reordered chunk; a statistic landing there is
    ``DROP``. The last element is the exact number of drops.
    """

    if not chunk:
        raise ValueError("cannot summarize an empty chunk")
    valid = sorted(sample for sample in chunk if sample is not DROP)
    lost = len(chunk) - len(valid)

    statistics: list[Sample | int] = []
    for index in statistic_indices(len(chunk)):
        statistics.append(DROP if index < lost else valid[index - lost])
    statistics.append(lost)
    return tuple(statistics)


__all__ = [
    "round_half_away",
    "statistic_count",
    "statistic_indices",
    "summarize",
    "summary_length",
]
