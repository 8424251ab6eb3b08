"""Shared pytest fixtures for reqstats tests."""

import pytest

from reqstats import LatencyStatsCollector


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start_ms: float = 1000.0):
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


class RecordingRenderer:
    """Renderer that keeps every histogram handed to it."""

    def __init__(self):
        self.rendered = []

    def render(self, histogram) -> None:
        self.rendered.append(histogram)


@pytest.fixture
def clock() -> FakeClock:
    """Return a fake clock starting at 1000 ms."""
    return FakeClock()


@pytest.fixture
def renderer() -> RecordingRenderer:
    """Return a renderer that records instead of writing files."""
    return RecordingRenderer()


@pytest.fixture
def collector(clock: FakeClock, renderer: RecordingRenderer) -> LatencyStatsCollector:
    """Return a collector with max_bins=5 on the fake clock."""
    return LatencyStatsCollector(max_bins=5, clock=clock, renderer=renderer)


@pytest.fixture
def capture(collector: LatencyStatsCollector, clock: FakeClock):
    """Return a helper that runs one start/finish pair taking ``elapsed_ms``."""

    def _capture(uri: str, elapsed_ms: float) -> None:
        collector.start(uri)
        clock.advance(elapsed_ms)
        collector.finish()

    return _capture
