"""
Command and event types for the playback threads.

Commands flow from the Player façade to the Relay. Events flow from the
Relay to the Engine; PAUSE, UNPAUSE and REPORT never become events because
the Relay services them itself.
"""

from dataclasses import dataclass
from typing import Optional

from tuner.catalog.models import Station

PLAY = "PLAY"
STOP = "STOP"
PAUSE = "PAUSE"
UNPAUSE = "UNPAUSE"
SKIP = "SKIP"
REPORT = "REPORT"
EXIT = "EXIT"

COMMAND_KINDS = {PLAY, STOP, PAUSE, UNPAUSE, SKIP, REPORT, EXIT}
EVENT_KINDS = {PLAY, STOP, SKIP, EXIT}


@dataclass(frozen=True)
class Command:
    """A control request sent by the façade. station is set only for PLAY."""
    kind: str
    station: Optional[Station] = None

    def __post_init__(self):
        if self.kind not in COMMAND_KINDS:
            raise ValueError(f"Unknown command kind: {self.kind}")
        if (self.kind == PLAY) != (self.station is not None):
            raise ValueError("PLAY commands (and only PLAY commands) carry a station")

    @classmethod
    def play(cls, station: Station) -> "Command":
        return cls(PLAY, station)


@dataclass(frozen=True)
class Event:
    """A command forwarded to the Engine."""
    kind: str
    station: Optional[Station] = None

    def __post_init__(self):
        if self.kind not in EVENT_KINDS:
            raise ValueError(f"{self.kind} is not an engine event")

    @classmethod
    def from_command(cls, command: Command) -> "Event":
        return cls(command.kind, command.station)
