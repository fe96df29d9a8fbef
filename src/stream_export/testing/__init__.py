"""Testing support – in-memory doubles for the export ports.

Use from tests::

    from stream_export.testing import BufferedSink, FakeClock, RecordingChunkFetcher
"""

from stream_export.testing.fakes import BufferedSink, FakeClock, FrozenClock, RecordingChunkFetcher

__all__ = ["BufferedSink", "FakeClock", "FrozenClock", "RecordingChunkFetcher"]
