"""Colour mapping, glyph rows and legend layout."""

from .colors import ColorMapper, gradient_color, lerp_color
from .legend import LegendCache, LegendEntry, LegendGrid, build_legend
from .streams import render_drop_row, render_stream
from .view import ViewModel, build_view

__all__ = [
    "ColorMapper",
    "LegendCache",
    "LegendEntry",
    "LegendGrid",
    "ViewModel",
    "build_legend",
    "build_view",
    "gradient_color",
    "lerp_color",
    "render_drop_row",
    "render_stream",
]
