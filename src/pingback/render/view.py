"""Assemble the full screen text from the aggregation state."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from ..core.aggregation import AggregationLevel, AggregatorState
from ..core.samples import tail_view
from .colors import ColorMapper
from .legend import LegendCache
from .streams import render_drop_row, render_stream

WAITING_MESSAGE = "Waiting for first reply"


@dataclass(slots=True)
class ViewModel:
    header: str
    streams: Text
    legend: Text


def format_header(target: str, interval_ms: int) -> str:
    return f"Pinging {target} every {interval_ms} ms"


def render_level(level: AggregationLevel, mapper: ColorMapper, width: int) -> Text:
    lines = [Text(f"Aggregated {level.chunk_size}:")]
    for row in level.statistic_rows:
        lines.append(render_stream(tail_view(row, width), mapper))
    counts = [int(count) for count in tail_view(level.drop_row, width)]
    drop_row = render_drop_row(counts, level.chunk_size, mapper)
    if drop_row is not None:
        lines.append(drop_row)
    return Text("\n").join(lines)


def render_streams(state: AggregatorState, mapper: ColorMapper, width: int) -> Text:
    blocks = [
        Text("Raw Data:"),
        render_stream(state.window.tail(width), mapper),
    ]
    blocks.extend(render_level(level, mapper, width) for level in state.levels)
    return Text("\n").join(blocks)


def build_view(
    state: AggregatorState,
    mapper: ColorMapper,
    legend_cache: LegendCache,
    *,
    target: str,
    interval_ms: int,
    width: int,
) -> ViewModel | None:
    """Render everything, or return ``None`` until the first reply arrived."""

    if not state.received_reply:
        return None
    grid = legend_cache.get(mapper, width, dirty=state.range_dirty)
    state.range_dirty = False
    legend = Text("\n").join([Text("Latency Legend (ms):"), grid.render()])
    return ViewModel(
        header=format_header(target, interval_ms),
        streams=render_streams(state, mapper, width),
        legend=legend,
    )


__all__ = [
    "ViewModel",
    "WAITING_MESSAGE",
    "build_view",
    "format_header",
    "render_level",
    "render_streams",
]
