from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pingback.core.samples import RangeTracker
from pingback.render.colors import ColorMapper
from pingback.render.legend import (
    DEFAULT_LEGEND_STEPS,
    LegendCache,
    build_legend,
    format_latency_label,
    legend_latencies,
)


def _mapper(low: float, high: float) -> ColorMapper:
    tracker = RangeTracker()
    tracker.observe(low)
    tracker.observe(high)
    return ColorMapper(tracker)


def test_labels_switch_precision_at_one_hundred() -> None:
    assert format_latency_label(3.14159) == "3.1"
    assert format_latency_label(99.94) == "99.9"
    assert format_latency_label(100.0) == "100"
    assert format_latency_label(1234.6) == "1235"


def test_legend_latencies_are_log_spaced() -> None:
    values = legend_latencies(_mapper(1.0, 1000.0), 4)
    assert values == pytest.approx([1.0, 10.0, 100.0, 1000.0])
    assert legend_latencies(_mapper(1.0, 1000.0), 1) == pytest.approx([1.0])
    with pytest.raises(ValueError):
        legend_latencies(_mapper(1.0, 1000.0), 0)


def test_entries_are_padded_to_widest() -> None:
    grid = build_legend(_mapper(1.0, 2500.0), available_width=80)
    assert len(grid.entries) == DEFAULT_LEGEND_STEPS
    assert grid.cell_width == max(entry.width for entry in grid.entries)
    assert grid.cell_width == 3 + len("2500")
    for entry in grid.entries:
        assert entry.width == 3 + len(entry.label)
        assert entry.render(grid.cell_width).cell_len == grid.cell_width


def test_grid_is_column_major() -> None:
    grid = build_legend(_mapper(1.0, 50.0), available_width=21, steps=10)
    # labels like "50.0" -> cell width 7 -> 3 columns, 4 rows
    assert grid.cell_width == 7
    assert grid.columns == 3
    assert grid.rows == 4
    columns = grid.grid
    assert [len(column) for column in columns] == [4, 4, 2]
    assert columns[0][0] is grid.entries[0]
    assert columns[0][3] is grid.entries[3]
    assert columns[1][0] is grid.entries[4]
    assert columns[2][1] is grid.entries[9]


def test_render_lines_fit_width() -> None:
    grid = build_legend(_mapper(0.5, 800.0), available_width=60)
    rendered = grid.render()
    lines = rendered.plain.split("\n")
    assert len(lines) == grid.rows
    assert all(len(line) <= 60 for line in lines)
    assert rendered.plain.count("█") == DEFAULT_LEGEND_STEPS


def test_narrow_terminal_falls_back_to_one_column() -> None:
    grid = build_legend(_mapper(1.0, 5000.0), available_width=3, steps=12)
    assert grid.columns == 1
    assert grid.rows == 12


@given(
    st.floats(min_value=0.01, max_value=50.0),
    st.floats(min_value=51.0, max_value=100_000.0),
    st.integers(min_value=10, max_value=400),
    st.integers(min_value=2, max_value=200),
)
def test_grid_never_exceeds_width_and_keeps_every_entry(
    low: float, high: float, width: int, steps: int
) -> None:
    grid = build_legend(_mapper(low, high), available_width=width, steps=steps)
    assert sum(len(column) for column in grid.grid) == steps
    assert grid.used_columns <= grid.columns
    if grid.cell_width <= width:
        assert grid.rendered_width <= width


def test_cache_rebuilds_only_when_dirty_or_resized() -> None:
    tracker = RangeTracker()
    tracker.observe(2.0)
    tracker.observe(40.0)
    mapper = ColorMapper(tracker)
    cache = LegendCache(steps=20)

    first = cache.get(mapper, 80, dirty=True)
    assert cache.rebuilds == 1
    assert cache.get(mapper, 80, dirty=False) is first
    assert cache.rebuilds == 1

    tracker.observe(400.0)
    rebuilt = cache.get(mapper, 80, dirty=True)
    assert rebuilt is not first
    assert rebuilt.entries[-1].label == "400"

    cache.get(mapper, 40, dirty=False)
    assert cache.rebuilds == 3
