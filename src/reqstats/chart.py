"""
Fixed-width text chart for normalized histograms.

The chart has one 17-character column per bin and one row per whole
percentage point, from the tallest bin down to zero. A bin is marked in a
row when its frequency (as a percentage) reaches that row's level. The
final line lists the bin edges.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Protocol

from .stats import HistogramResult

logger = logging.getLogger(__name__)

DEFAULT_CHART_PATH = Path("histogram.txt")

MARKED_CELL = "             *   "
BLANK_CELL = " " * len(MARKED_CELL)


class HistogramRenderer(Protocol):
    """Anything that can publish a computed histogram."""

    def render(self, histogram: HistogramResult) -> None: ...


def format_edge(edge: float) -> str:
    """Format a bin edge with up to 14 significant digits."""
    return format(edge, ".14g")


def render_chart(histogram: HistogramResult) -> str:
    """
    Render the histogram as text.

    Args:
        histogram: Normalized histogram

    Returns:
        Chart text, every line newline-terminated. Empty string for an
        empty histogram.
    """
    if histogram.is_empty:
        return ""

    percentages = [f * 100 for f in histogram.frequencies]
    top = math.floor(max(percentages))

    lines = []
    for level in range(top, -1, -1):
        lines.append("".join(MARKED_CELL if pct >= level else BLANK_CELL for pct in percentages))
    lines.append("".join(f"{format_edge(edge)} " for edge in histogram.bin_edges))
    return "\n".join(lines) + "\n"


class TextChartRenderer:
    """
    Write the text chart to a file, overwriting it on every call.

    Example:
        renderer = TextChartRenderer()  # ./histogram.txt
        renderer.render(histogram)
    """

    def __init__(self, path: Path | str = DEFAULT_CHART_PATH) -> None:
        self.path = Path(path)

    def render(self, histogram: HistogramResult) -> None:
        chart = render_chart(histogram)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(chart)
        logger.info("Wrote %d-bin histogram chart to %s", histogram.bin_count, self.path)
