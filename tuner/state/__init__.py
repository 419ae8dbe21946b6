"""
State module for Tuner.

Status values and the shared, lock-protected playback state record.
"""

from tuner.state.status import Status
from tuner.state.playback_state import PlaybackSnapshot, PlaybackState

__all__ = ["Status", "PlaybackSnapshot", "PlaybackState"]
