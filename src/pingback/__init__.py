"""Terminal latency heatmap with multi-resolution aggregation."""

from . import contracts, core, render

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "contracts",
    "core",
    "render",
]
