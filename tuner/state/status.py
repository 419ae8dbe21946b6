"""
Player status values for Tuner.

Exactly one Status is current at any instant. Transitions are made only
by the playback engine; the front end observes them through the status
channel or a PlaybackState snapshot.
"""

from dataclasses import dataclass
from typing import Optional

from tuner.catalog.models import Station, Track
from tuner.errors import ErrorInfo

STATUS_STANDBY = "STANDBY"
STATUS_STARTED = "STARTED"
STATUS_FETCHING = "FETCHING"
STATUS_PLAYING = "PLAYING"
STATUS_PAUSED = "PAUSED"
STATUS_FINISHED = "FINISHED"
STATUS_STOPPED = "STOPPED"
STATUS_ERROR = "ERROR"
STATUS_SHUTDOWN = "SHUTDOWN"

STATION_STATUSES = {STATUS_STARTED, STATUS_FETCHING, STATUS_STOPPED}
TRACK_STATUSES = {STATUS_PLAYING, STATUS_PAUSED, STATUS_FINISHED}

ALLOWED_STATUSES = {
    STATUS_STANDBY,
    STATUS_SHUTDOWN,
    STATUS_ERROR,
} | STATION_STATUSES | TRACK_STATUSES


@dataclass(frozen=True)
class Status:
    """
    Immutable tagged status value.

    Only the payload matching the kind is set: station for
    STARTED/FETCHING/STOPPED, track for PLAYING/PAUSED/FINISHED, error
    for ERROR. Build values with the classmethod constructors.
    """
    kind: str
    station: Optional[Station] = None
    track: Optional[Track] = None
    error: Optional[ErrorInfo] = None

    def __post_init__(self):
        if self.kind not in ALLOWED_STATUSES:
            raise ValueError(f"Unknown status kind: {self.kind}")

    # Constructors

    @classmethod
    def standby(cls) -> "Status":
        return cls(STATUS_STANDBY)

    @classmethod
    def started(cls, station: Station) -> "Status":
        return cls(STATUS_STARTED, station=station)

    @classmethod
    def fetching(cls, station: Station) -> "Status":
        return cls(STATUS_FETCHING, station=station)

    @classmethod
    def playing(cls, track: Track) -> "Status":
        return cls(STATUS_PLAYING, track=track)

    @classmethod
    def paused(cls, track: Track) -> "Status":
        return cls(STATUS_PAUSED, track=track)

    @classmethod
    def finished(cls, track: Track) -> "Status":
        return cls(STATUS_FINISHED, track=track)

    @classmethod
    def stopped(cls, station: Station) -> "Status":
        return cls(STATUS_STOPPED, station=station)

    @classmethod
    def failed(cls, error: ErrorInfo) -> "Status":
        return cls(STATUS_ERROR, error=error)

    @classmethod
    def shutdown(cls) -> "Status":
        return cls(STATUS_SHUTDOWN)

    # Predicates

    def is_standby(self) -> bool:
        return self.kind == STATUS_STANDBY

    def is_started(self) -> bool:
        return self.kind == STATUS_STARTED

    def is_fetching(self) -> bool:
        return self.kind == STATUS_FETCHING

    def is_playing(self) -> bool:
        return self.kind == STATUS_PLAYING

    def is_paused(self) -> bool:
        return self.kind == STATUS_PAUSED

    def is_finished(self) -> bool:
        return self.kind == STATUS_FINISHED

    def is_stopped(self) -> bool:
        return self.kind == STATUS_STOPPED

    def is_error(self) -> bool:
        return self.kind == STATUS_ERROR

    def is_shutdown(self) -> bool:
        return self.kind == STATUS_SHUTDOWN

    def __str__(self) -> str:
        if self.station is not None:
            return f"{self.kind}({self.station})"
        if self.track is not None:
            return f"{self.kind}({self.track})"
        if self.error is not None:
            return f"{self.kind}({self.error})"
        return self.kind
