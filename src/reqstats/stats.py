"""
Descriptive statistics for latency samples.

Provides mean, population standard deviation, linear-interpolation
percentiles, and a normalized histogram whose bin count is chosen with
the Freedman-Diaconis rule. Everything here is a pure function of its
inputs; capture state lives in ``reqstats.collector``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistogramResult:
    """
    Normalized histogram of a sample series.

    ``bin_edges`` has one more entry than ``frequencies``. The first edge is
    the minimum sample and the last edge is the maximum sample. Frequencies
    are fractions of the sample count and sum to 1.0 for a non-empty result.
    """

    frequencies: tuple[float, ...] = field(default_factory=tuple)
    bin_edges: tuple[float, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> HistogramResult:
        """Result used for URIs without samples."""
        return cls()

    @property
    def bin_count(self) -> int:
        return len(self.frequencies)

    @property
    def is_empty(self) -> bool:
        return not self.frequencies

    def __bool__(self) -> bool:
        return not self.is_empty

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the ``frequencies`` / ``binEdges`` keys."""
        if self.is_empty:
            return {}
        return {
            "frequencies": list(self.frequencies),
            "binEdges": list(self.bin_edges),
        }


def mean(samples: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty series."""
    if not samples:
        return 0.0
    return sum(samples) / len(samples)


def population_stddev(samples: Sequence[float]) -> float:
    """
    Population standard deviation (divisor n, not n - 1).

    Returns 0.0 for an empty series.
    """
    if not samples:
        return 0.0
    avg = mean(samples)
    squared = sum((x - avg) ** 2 for x in samples)
    return math.sqrt(squared / len(samples))


def percentile(sorted_data: Sequence[float], p: float) -> float:
    """
    Percentile of ascending data by linear interpolation between ranks.

    Args:
        sorted_data: Non-empty data sorted ascending
        p: Fraction in [0, 1] (0.25 for the lower quartile)

    Returns:
        Interpolated value; ``p=0`` gives the minimum and ``p=1`` the maximum
    """
    if not sorted_data:
        raise ValueError("percentile of empty data")
    if not 0.0 <= p <= 1.0:
        raise ValueError(f"percentile fraction must be in [0, 1], got {p}")

    index = p * (len(sorted_data) - 1)
    lower = math.floor(index)
    fraction = index - lower

    if lower + 1 < len(sorted_data):
        return sorted_data[lower] + fraction * (sorted_data[lower + 1] - sorted_data[lower])
    return sorted_data[lower]


def interquartile_range(samples: Sequence[float]) -> float:
    """Q75 - Q25 of the samples (sorted copy, input untouched)."""
    ordered = sorted(samples)
    return percentile(ordered, 0.75) - percentile(ordered, 0.25)


def freedman_diaconis_bin_count(samples: Sequence[float], max_bins: int) -> int:
    """
    Number of histogram bins for the samples, capped at ``max_bins``.

    Target width is ``2 * IQR / n ** (1/3)``. A zero IQR (identical or
    tightly clustered values) yields a single bin.
    """
    if not samples:
        return 0

    low, high = min(samples), max(samples)
    iqr = interquartile_range(samples)
    target_width = 2 * iqr / len(samples) ** (1 / 3)

    if target_width <= 0 or high == low:
        candidate = 1
    else:
        candidate = math.ceil((high - low) / target_width)

    bins = max(1, min(max_bins, candidate))
    logger.debug(
        "Bin count %d (candidate=%d, iqr=%.6g, n=%d, max_bins=%d)",
        bins,
        candidate,
        iqr,
        len(samples),
        max_bins,
    )
    return bins


def build_histogram(samples: Sequence[float], max_bins: int) -> HistogramResult:
    """
    Build the normalized histogram of a sample series.

    Args:
        samples: Latency samples in milliseconds
        max_bins: Upper bound on the number of bins (positive)

    Returns:
        HistogramResult, empty when there are no samples
    """
    if not samples:
        return HistogramResult.empty()

    low, high = min(samples), max(samples)
    bin_count = freedman_diaconis_bin_count(samples, max_bins)
    bin_width = (high - low) / bin_count

    edges = [low + i * bin_width for i in range(bin_count)]
    edges.append(high)

    counts = [0] * bin_count
    for value in samples:
        if bin_width > 0:
            index = min(bin_count - 1, math.floor((value - low) / bin_width))
        else:
            index = 0
        counts[index] += 1

    total = len(samples)
    return HistogramResult(
        frequencies=tuple(c / total for c in counts),
        bin_edges=tuple(edges),
    )
