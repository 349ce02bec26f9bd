"""Cascading aggregation levels and the state object that owns them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..contracts.error import BadInputError, InvariantError
from .samples import DROP, RangeTracker, Sample, SampleWindow
from .summary import summarize, summary_length

logger = logging.getLogger(__name__)

DEFAULT_GROUP_SIZE = 32
DEFAULT_LEVELS = 2
DEFAULT_WINDOW_WIDTH = 80
DEFAULT_HISTORY_FACTOR = 65536


@dataclass
class AggregationLevel:
    """Summary rows for one chunk size.

    Rows ``0 .. n-2`` hold the k-th order statistic of every completed chunk,
    the last row holds each chunk's drop count.
    """

    index: int
    chunk_size: int
    rows: list[list[Sample | int]] = field(init=False)

    def __post_init__(self) -> None:
        self.rows = [[] for _ in range(summary_length(self.chunk_size))]

    @property
    def statistic_rows(self) -> list[list[Sample | int]]:
        return self.rows[:-1]

    @property
    def drop_row(self) -> list[Sample | int]:
        return self.rows[-1]

    @property
    def completed_chunks(self) -> int:
        return len(self.rows[0])

    def record(self, summary: tuple[Sample | int, ...]) -> None:
        if len(summary) != len(self.rows):
            raise InvariantError(
                f"level {self.index} expects {len(self.rows)} values per chunk, got {len(summary)}"
            )
        for row, value in zip(self.rows, summary, strict=True):
            row.append(value)


class AggregationPipeline:
    """Level ``i`` summarizes the last ``group_size ** (i + 1)`` raw samples."""

    def __init__(self, group_size: int = DEFAULT_GROUP_SIZE, levels: int = DEFAULT_LEVELS) -> None:
        if group_size < 2:
            raise BadInputError("group size must be >= 2")
        if levels < 1:
            raise BadInputError("number of aggregation levels must be >= 1")
        self.group_size = group_size
        self.levels: list[AggregationLevel] = []
        chunk_size = group_size
        for index in range(levels):
            self.levels.append(AggregationLevel(index=index, chunk_size=chunk_size))
            chunk_size *= group_size

    @property
    def largest_chunk(self) -> int:
        return self.levels[-1].chunk_size

    def ingest(self, window: SampleWindow, counter: int) -> list[int]:
        """Summarize every level whose chunk boundary ``counter`` falls on.

        Returns the indices of the levels that grew.
        """

        triggered: list[int] = []
        if len(window) == 0:
            return triggered
        for level in self.levels:
            if counter % level.chunk_size != 0:
                continue
            level.record(summarize(window.tail(level.chunk_size)))
            triggered.append(level.index)
        if triggered:
            logger.debug("Sample %d completed chunks for levels %s", counter, triggered)
        return triggered


class AggregatorState:
    """Everything ingestion mutates, owned by a single consumer of tick events."""

    def __init__(
        self,
        group_size: int = DEFAULT_GROUP_SIZE,
        levels: int = DEFAULT_LEVELS,
        *,
        window_width: int = DEFAULT_WINDOW_WIDTH,
        history_factor: int = DEFAULT_HISTORY_FACTOR,
    ) -> None:
        if history_factor < 1:
            raise BadInputError("history factor must be >= 1")
        self.pipeline = AggregationPipeline(group_size, levels)
        self.history_factor = history_factor
        self.window_width = max(1, window_width)
        self.window = SampleWindow(self._window_cap(self.window_width))
        self.tracker = RangeTracker()
        self.counter = 0
        self.received_reply = False
        self.range_dirty = True

    @property
    def levels(self) -> list[AggregationLevel]:
        return self.pipeline.levels

    def _window_cap(self, width: int) -> int:
        # every level must always find a full chunk in the window
        return max(width * self.history_factor, self.pipeline.largest_chunk)

    def resize(self, width: int) -> None:
        self.window_width = max(1, width)
        self.window.max_length = self._window_cap(self.window_width)

    def process(self, sample: Sample) -> list[int]:
        """Ingest one tick's sample; return the aggregation levels that grew."""

        self.window.append(sample)
        if self.tracker.observe(sample):
            self.range_dirty = True
            logger.debug("Latency range widened to %.3f..%.3f ms", *self.tracker.bounds())
        if sample is not DROP:
            self.received_reply = True
        self.counter += 1
        return self.pipeline.ingest(self.window, self.counter)


__all__ = [
    "AggregationLevel",
    "AggregationPipeline",
    "AggregatorState",
    "DEFAULT_GROUP_SIZE",
    "DEFAULT_HISTORY_FACTOR",
    "DEFAULT_LEVELS",
    "DEFAULT_WINDOW_WIDTH",
]
