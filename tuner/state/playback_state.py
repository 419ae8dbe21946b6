"""
Playback State Manager

Mutex-guarded record of {station, track, progress, status}.

The playback engine is the only writer. Any thread may read a consistent
point-in-time snapshot; no interleaving of fields from different updates
is observable.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

from tuner.catalog.models import Station, Track
from tuner.state.status import Status

logger = logging.getLogger(__name__)

_UNCHANGED = object()


@dataclass(frozen=True)
class PlaybackSnapshot:
    """
    Immutable snapshot of PlaybackState.

    progress is (elapsed_seconds, total_seconds) and is only set while the
    status is PLAYING or PAUSED.
    """
    station: Optional[Station]
    track: Optional[Track]
    progress: Optional[Tuple[int, int]]
    status: Status


class PlaybackState:
    """
    Thread-safe playback state.

    Each update takes the lock once and writes the full field set, so
    readers never observe a half-applied transition.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._station: Optional[Station] = None
        self._track: Optional[Track] = None
        self._progress: Optional[Tuple[int, int]] = None
        self._status: Status = Status.shutdown()

    def snapshot(self) -> PlaybackSnapshot:
        with self._lock:
            return PlaybackSnapshot(
                station=self._station,
                track=self._track,
                progress=self._progress,
                status=self._status,
            )

    @property
    def status(self) -> Status:
        with self._lock:
            return self._status

    def update(self, status: Status, station=_UNCHANGED, track=_UNCHANGED) -> None:
        """
        Apply a status transition, optionally replacing station and track.

        Progress is dropped whenever the new status is neither PLAYING nor
        PAUSED.

        Args:
            status: New current status
            station: New station (or None to clear); omitted keeps the current one
            track: New track (or None to clear); omitted keeps the current one
        """
        with self._lock:
            self._status = status
            if station is not _UNCHANGED:
                self._station = station
            if track is not _UNCHANGED:
                self._track = track
            if not (status.is_playing() or status.is_paused()):
                self._progress = None

    def set_progress(self, elapsed: int, total: int) -> None:
        """Record playback progress; ignored unless a track is playing or paused."""
        with self._lock:
            if self._status.is_playing() or self._status.is_paused():
                self._progress = (elapsed, total)

    def clear(self) -> None:
        """Reset station, track, progress and status together."""
        with self._lock:
            self._station = None
            self._track = None
            self._progress = None
            self._status = Status.standby()
        logger.debug("[STATE] Cleared")
