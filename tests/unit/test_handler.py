"""
Unit tests for TimedRequestHandler.
"""

import pytest

from reqstats import PreconditionError, TimedRequestHandler


class TestTimedRequestHandler:
    """Test request dispatch timing."""

    def test_process_records_dispatch_time(self, collector, clock):
        """Each processed request adds one sample."""

        def dispatch(uri: str) -> str:
            clock.advance(7.0)
            return f"body of {uri}"

        handler = TimedRequestHandler(collector, dispatch)
        assert handler.process("/items") == "body of /items"
        assert handler.process("/items") == "body of /items"

        assert collector.samples("/items") == (7.0, 7.0)
        assert collector.pending_uri is None

    def test_failed_dispatch_is_still_timed(self, collector, clock):
        """Dispatch errors propagate after the time is recorded."""

        def dispatch(uri: str) -> str:
            clock.advance(2.0)
            raise LookupError(uri)

        handler = TimedRequestHandler(collector, dispatch)
        with pytest.raises(LookupError):
            handler.process("/missing")

        assert collector.samples("/missing") == (2.0,)
        with pytest.raises(PreconditionError):
            collector.finish()
