"""
Per-endpoint latency collector.

Records elapsed times for named endpoints ("URIs") through a start/finish
capture pair and answers mean, standard deviation, and normalized
histogram queries over the recorded samples.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from . import stats
from .chart import HistogramRenderer, TextChartRenderer
from .errors import ConfigurationError, HistogramWriteError, PreconditionError
from .stats import HistogramResult

if TYPE_CHECKING:
    from .config import CollectorConfig

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Monotonic timestamp in milliseconds."""
    return time.perf_counter() * 1000


def wall_clock_ms() -> float:
    """Wall-clock timestamp in milliseconds since the epoch."""
    return time.time() * 1000


@dataclass(frozen=True)
class LatencySummary:
    """Computed latency statistics for one URI."""

    uri: str
    count: int
    mean_ms: float
    stddev_ms: float
    min_ms: float
    max_ms: float

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "uri": self.uri,
            "count": self.count,
            "mean_ms": round(self.mean_ms, 3),
            "stddev_ms": round(self.stddev_ms, 3),
            "min_ms": round(self.min_ms, 3),
            "max_ms": round(self.max_ms, 3),
        }


@dataclass
class _PendingCapture:
    uri: str
    started_ms: float


@dataclass
class LatencyStatsCollector:
    """
    In-memory latency samples keyed by URI.

    At most one capture is in flight: a second ``start`` replaces the
    pending one. The collector does no locking; callers sharing one
    across threads must serialize access themselves.

    Example:
        collector = LatencyStatsCollector(max_bins=5)
        collector.start("/orders")
        handle_orders()
        collector.finish()
        print(collector.mean_response_time("/orders"))
    """

    max_bins: int
    clock: Clock = field(default=monotonic_ms)
    renderer: HistogramRenderer = field(default_factory=TextChartRenderer)
    _samples: dict[str, list[float]] = field(default_factory=dict, init=False, repr=False)
    _pending: _PendingCapture | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if (
            isinstance(self.max_bins, bool)
            or not isinstance(self.max_bins, int)
            or self.max_bins <= 0
        ):
            raise ConfigurationError(
                f"Invalid value for max_bins: {self.max_bins!r}. Must be a positive integer."
            )

    @classmethod
    def from_config(cls, config: CollectorConfig) -> LatencyStatsCollector:
        """Build a collector from a validated configuration."""
        return cls(
            max_bins=config.max_bins,
            clock=config.clock_function(),
            renderer=TextChartRenderer(config.histogram_path),
        )

    # =========================================================================
    # Capture
    # =========================================================================

    def start(self, uri: str) -> None:
        """
        Start timing a request.

        Args:
            uri: The URI of the request endpoint
        """
        if self._pending is not None:
            logger.debug("Discarding unfinished capture for %s", self._pending.uri)
        self._samples.setdefault(uri, [])
        self._pending = _PendingCapture(uri=uri, started_ms=self.clock())
        logger.debug("Started capture for %s", uri)

    def finish(self) -> None:
        """
        Stop timing and store the elapsed time for the pending URI.

        Raises:
            PreconditionError: If start() has not been called
        """
        if self._pending is None:
            raise PreconditionError("Call start() before calling finish().")

        pending, self._pending = self._pending, None
        # Wall clocks can step backwards
        elapsed = max(0.0, self.clock() - pending.started_ms)
        self.record(pending.uri, elapsed)
        logger.debug("Finished capture for %s: %.3f ms", pending.uri, elapsed)

    def record(self, uri: str, latency_ms: float) -> None:
        """
        Record an externally measured latency.

        Args:
            uri: The URI of the request endpoint
            latency_ms: Latency in milliseconds (finite, non-negative)
        """
        if not math.isfinite(latency_ms) or latency_ms < 0:
            raise ValueError(f"Latency must be finite and non-negative, got {latency_ms}")
        self._samples.setdefault(uri, []).append(float(latency_ms))

    @contextmanager
    def timed(self, uri: str) -> Iterator[None]:
        """
        Time the body of a ``with`` block.

        The sample is recorded even when the body raises.
        """
        self.start(uri)
        try:
            yield
        finally:
            self.finish()

    @property
    def pending_uri(self) -> str | None:
        return self._pending.uri if self._pending else None

    def uris(self) -> list[str]:
        """URIs seen so far, in first-seen order."""
        return list(self._samples)

    def samples(self, uri: str) -> tuple[float, ...]:
        return tuple(self._samples.get(uri, ()))

    # =========================================================================
    # Queries
    # =========================================================================

    def mean_response_time(self, uri: str) -> float:
        """Mean response time in milliseconds, 0.0 when there is no data."""
        return stats.mean(self._samples.get(uri, ()))

    def standard_deviation(self, uri: str) -> float:
        """Population standard deviation in milliseconds, 0.0 when there is no data."""
        return stats.population_stddev(self._samples.get(uri, ()))

    def normalized_histogram(self, uri: str, render_to_file: bool = False) -> HistogramResult:
        """
        Get the normalized histogram for a URI.

        Args:
            uri: The URI of the request endpoint
            render_to_file: Also hand the result to the chart renderer

        Returns:
            HistogramResult, empty when the URI has no samples

        Raises:
            HistogramWriteError: If rendering fails; the computed histogram
                is attached to the error
        """
        samples = self._samples.get(uri)
        if not samples:
            return HistogramResult.empty()

        histogram = stats.build_histogram(samples, self.max_bins)

        if render_to_file:
            try:
                self.renderer.render(histogram)
            except OSError as e:
                path = getattr(self.renderer, "path", None)
                raise HistogramWriteError(
                    f"Could not write histogram for {uri}: {e}", histogram, path
                ) from e

        return histogram

    def summary(self, uri: str) -> LatencySummary:
        """Summary statistics for a URI (zeros when there is no data)."""
        samples = self._samples.get(uri, [])
        return LatencySummary(
            uri=uri,
            count=len(samples),
            mean_ms=stats.mean(samples),
            stddev_ms=stats.population_stddev(samples),
            min_ms=min(samples, default=0.0),
            max_ms=max(samples, default=0.0),
        )
