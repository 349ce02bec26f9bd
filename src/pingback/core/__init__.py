from .aggregation import (
    DEFAULT_GROUP_SIZE,
    DEFAULT_HISTORY_FACTOR,
    DEFAULT_LEVELS,
    DEFAULT_WINDOW_WIDTH,
    AggregationLevel,
    AggregationPipeline,
    AggregatorState,
)
from .samples import (
    DROP,
    Drop,
    RangeTracker,
    Sample,
    SampleWindow,
    tail_view,
)
from .summary import statistic_count, summarize, summary_length

__all__ = [
    "AggregationLevel",
    "AggregationPipeline",
    "AggregatorState",
    "DEFAULT_GROUP_SIZE",
    "DEFAULT_HISTORY_FACTOR",
    "DEFAULT_LEVELS",
    "DEFAULT_WINDOW_WIDTH",
    "DROP",
    "Drop",
    "RangeTracker",
    "Sample",
    "SampleWindow",
    "statistic_count",
    "summarize",
    "summary_length",
    "tail_view",
]
