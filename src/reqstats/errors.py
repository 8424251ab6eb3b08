"""
Error types for latency capture, statistics, and histogram rendering.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .stats import HistogramResult


class ReqStatsError(Exception):
    """Base exception for all reqstats errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(ReqStatsError):
    """
    Raised when a collector cannot be built from the given settings.

    Examples:
    - max_bins of 0, -3, 2.5 or "five"
    - Malformed TOML in a config file
    - Unknown clock kind in the [reqstats] table
    """

    pass


class PreconditionError(ReqStatsError):
    """
    Raised when a capture operation is called out of order.

    Examples:
    - finish() without a pending start()
    - finish() called twice for one start()
    """

    pass


class HistogramWriteError(OSError):
    """
    Raised when the histogram chart could not be written.

    The computed histogram is still available on ``histogram`` so callers
    can keep the analytical result.
    """

    def __init__(self, message: str, histogram: HistogramResult, path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.histogram = histogram
        self.path = path
