"""Testing fakes – in-memory doubles for export ports."""
from stream_export.testing.fakes.clock import FakeClock
from stream_export.testing.fakes.fetcher import RecordingChunkFetcher
from stream_export.testing.fakes.sink import BufferedSink
from stream_export.kernel.time import FrozenClock

__all__ = ["BufferedSink", "FakeClock", "FrozenClock", "RecordingChunkFetcher"]
