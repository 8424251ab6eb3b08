"""
reqstats: per-endpoint response latency statistics.

Records elapsed times per URI and computes mean, population standard
deviation, and a Freedman-Diaconis normalized histogram, with an optional
fixed-width text chart.
"""

from ._version import __version__
from .chart import HistogramRenderer, TextChartRenderer, render_chart
from .collector import LatencyStatsCollector, LatencySummary, monotonic_ms, wall_clock_ms
from .config import ClockKind, CollectorConfig, load_config
from .errors import ConfigurationError, HistogramWriteError, PreconditionError, ReqStatsError
from .handler import TimedRequestHandler
from .stats import HistogramResult, interquartile_range, percentile

__all__ = [
    "__version__",
    # Collector
    "LatencyStatsCollector",
    "LatencySummary",
    "TimedRequestHandler",
    "monotonic_ms",
    "wall_clock_ms",
    # Statistics
    "HistogramResult",
    "interquartile_range",
    "percentile",
    # Rendering
    "HistogramRenderer",
    "TextChartRenderer",
    "render_chart",
    # Configuration
    "ClockKind",
    "CollectorConfig",
    "load_config",
    # Errors
    "ConfigurationError",
    "HistogramWriteError",
    "PreconditionError",
    "ReqStatsError",
]
