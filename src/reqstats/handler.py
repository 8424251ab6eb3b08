"""
Request dispatch with response-time capture.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

from .collector import LatencyStatsCollector

T = TypeVar("T")


class TimedRequestHandler(Generic[T]):
    """
    Dispatch resource requests and record how long each one takes.

    Example:
        handler = TimedRequestHandler(LatencyStatsCollector(5), fetch_resource)
        body = handler.process("/users/42")
        handler.collector.mean_response_time("/users/42")
    """

    def __init__(self, collector: LatencyStatsCollector, dispatch: Callable[[str], T]) -> None:
        self.collector = collector
        self._dispatch = dispatch

    def process(self, uri: str) -> T:
        """Dispatch ``uri`` and return its response; the time is recorded even on failure."""
        self.collector.start(uri)
        try:
            return self._dispatch(uri)
        finally:
            self.collector.finish()
