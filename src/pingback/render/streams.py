"""Turn windowed sample streams into coloured glyph rows."""

from __future__ import annotations

from collections.abc import Sequence

from rich.style import Style
from rich.text import Text

from ..core.samples import DROP, Sample
from .colors import ColorMapper

SAMPLE_GLYPH = "█"
DROP_GLYPH = "X"
# Counts below this are shown as a digit, larger ones as a letter.
DIGIT_DROP_LIMIT = 10


def _drop_style(mapper: ColorMapper) -> Style:
    return Style(bgcolor=mapper.drop_color.hex)


def glyph_for(sample: Sample, mapper: ColorMapper) -> Text:
    if sample is DROP:
        return Text(DROP_GLYPH, style=_drop_style(mapper))
    return Text(SAMPLE_GLYPH, style=Style(color=mapper.color_for(sample).hex))


def render_stream(samples: Sequence[Sample], mapper: ColorMapper) -> Text:
    row = Text(no_wrap=True)
    for sample in samples:
        row.append_text(glyph_for(sample, mapper))
    return row


def map_to_alphabet(value: float) -> str:
    """Letter ``a``..``z`` for ``value`` clamped into ``[0, 1]``."""

    value = min(1.0, max(0.0, value))
    return chr(ord("a") + int(value * 25))


def drop_count_glyph(drops: int, chunk_size: int) -> str:
    if drops <= 0:
        return " "
    if drops < DIGIT_DROP_LIMIT:
        return str(drops)
    span = chunk_size - DIGIT_DROP_LIMIT
    return map_to_alphabet((drops - DIGIT_DROP_LIMIT) / span if span > 0 else 1.0)


def render_drop_row(counts: Sequence[int], chunk_size: int, mapper: ColorMapper) -> Text | None:
    """Per-chunk drop counts, or ``None`` when none of ``counts`` has a drop."""

    if not any(count > 0 for count in counts):
        return None
    style = _drop_style(mapper)
    row = Text(no_wrap=True)
    for count in counts:
        if count > 0:
            row.append(drop_count_glyph(count, chunk_size), style=style)
        else:
            row.append(" ")
    return row


__all__ = [
    "DROP_GLYPH",
    "SAMPLE_GLYPH",
    "drop_count_glyph",
    "glyph_for",
    "map_to_alphabet",
    "render_drop_row",
    "render_stream",
]
