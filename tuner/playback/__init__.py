"""
Playback module for Tuner.

This package contains the playback control engine: the Player façade,
the command relay thread, the station/track state machine thread, the
pause gate and the track lookahead queue.
"""

from tuner.playback.commands import Command, Event
from tuner.playback.pause_gate import PauseGate
from tuner.playback.track_loader import LoadedTrack, TrackLoader
from tuner.playback.relay import Relay
from tuner.playback.engine import Engine
from tuner.playback.player import Player

__all__ = [
    "Command",
    "Event",
    "PauseGate",
    "LoadedTrack",
    "TrackLoader",
    "Relay",
    "Engine",
    "Player",
]
