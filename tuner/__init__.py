"""
Tuner - background playback engine for streaming radio stations.

A Player façade controls a relay thread and a playback state machine
thread; statuses flow back through a channel and a shared PlaybackState.
"""

__version__ = "0.1.0"
