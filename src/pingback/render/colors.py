"""Latency to colour mapping on a logarithmic scale."""

from __future__ import annotations

import math
from collections.abc import Sequence

from rich.color import Color
from rich.color_triplet import ColorTriplet

from ..core.samples import DROP, RangeTracker, Sample
from ..core.summary import round_half_away

# Turbo-like ramp, dark blue end dropped so the fastest samples stay visible.
GRADIENT_HEXCODES: tuple[str, ...] = (
    "#466be3",
    "#29bbec",
    "#31f199",
    "#a3fd3d",
    "#edd03a",
    "#fb8022",
    "#d23105",
    "#7a0403",
)
DROP_HEX = "#600060"
DEFAULT_HEX = "#00ff00"
# Keeps the logarithm finite when a 0 ms reply sets the lower bound.
LOG_FLOOR_MS = 1e-6


def parse_hex(hexcode: str) -> ColorTriplet:
    return Color.parse(hexcode).get_truecolor()


GRADIENT: tuple[ColorTriplet, ...] = tuple(parse_hex(code) for code in GRADIENT_HEXCODES)
DROP_COLOR = parse_hex(DROP_HEX)
DEFAULT_COLOR = parse_hex(DEFAULT_HEX)


def lerp(a: float, b: float, t: float) -> float:
    return a + t * (b - a)


def lerp_color(color_a: ColorTriplet, color_b: ColorTriplet, t: float) -> ColorTriplet:
    """Blend two colours channel by channel, no gamma correction."""

    return ColorTriplet(
        *(round_half_away(lerp(a, b, t)) for a, b in zip(color_a, color_b, strict=True))
    )


def gradient_color(colors: Sequence[ColorTriplet], ratio: float) -> ColorTriplet:
    """Colour at ``ratio`` along ``colors``; values outside ``[0, 1]`` clamp to the ends."""

    if len(colors) < 2:
        raise ValueError("a gradient needs at least two control colours")
    if ratio <= 0:
        return colors[0]
    if ratio >= 1:
        return colors[-1]
    scaled = ratio * (len(colors) - 1)
    index = int(scaled)
    return lerp_color(colors[index], colors[index + 1], scaled - index)


class ColorMapper:
    """Map latencies onto ``gradient`` using the tracker's current bounds.

    Equal latency ratios give equal steps along the gradient, so doubling the
    latency always shifts the colour by the same amount.
    """

    def __init__(
        self,
        tracker: RangeTracker,
        gradient: Sequence[ColorTriplet] = GRADIENT,
        *,
        drop_color: ColorTriplet = DROP_COLOR,
        default_color: ColorTriplet = DEFAULT_COLOR,
    ) -> None:
        if len(gradient) < 2:
            raise ValueError("a gradient needs at least two control colours")
        self.tracker = tracker
        self.gradient = tuple(gradient)
        self.drop_color = drop_color
        self.default_color = default_color

    def _log_bounds(self) -> tuple[float, float]:
        low, high = self.tracker.bounds()
        return max(low, LOG_FLOOR_MS), high

    def ratio_for(self, latency: float) -> float:
        low, high = self._log_bounds()
        if latency <= low:
            return 0.0
        if latency >= high:
            return 1.0
        return math.log(latency / low) / math.log(high / low)

    def color_for(self, sample: Sample) -> ColorTriplet:
        if sample is DROP:
            return self.drop_color
        if not self.tracker.established:
            return self.default_color
        return gradient_color(self.gradient, self.ratio_for(sample))

    def latency_at(self, ratio: float) -> float:
        """Inverse of :meth:`ratio_for`: the latency sitting at ``ratio`` of the range."""

        if not self.tracker.established:
            low, high = self.tracker.bounds()
            return low if math.isfinite(low) else high
        low, high = self._log_bounds()
        return low * math.exp(ratio * math.log(high / low))


__all__ = [
    "ColorMapper",
    "DEFAULT_COLOR",
    "DROP_COLOR",
    "GRADIENT",
    "GRADIENT_HEXCODES",
    "gradient_color",
    "lerp",
    "lerp_color",
    "parse_hex",
]
