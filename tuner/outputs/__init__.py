"""
Outputs module for Tuner.

This package contains output sinks (audio device, WAV file, null) that
render decoded PCM chunks, and the factory the engine opens them through.
"""

from tuner.outputs.base_sink import BaseSink
from tuner.outputs.null_sink import NullSink
from tuner.outputs.file_sink import FileSink
from tuner.outputs.ffplay_sink import FFplaySink
from tuner.outputs.factory import SINK_MODES, SinkFactory

__all__ = [
    "BaseSink",
    "NullSink",
    "FileSink",
    "FFplaySink",
    "SINK_MODES",
    "SinkFactory",
]
