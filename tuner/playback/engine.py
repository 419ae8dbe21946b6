"""
Playback Engine for Tuner.

Worker thread running the station/track finite state machine:

    STANDBY -> STATION -> TRACK -> PLAYING -> TRACK -> ... -> STATION (re-fetch)

The engine exclusively owns every decoder and device handle it opens.
It communicates only through the event channel it reads, the status
channel it writes, the PlaybackState record it mirrors statuses into, and
the PauseGate it parks on.

Suspension points:
- the blocking event receive in STANDBY
- the PauseGate condition variable while paused
- catalog, decoder and device calls (blocking I/O, not cancellable)

Commands issued during a blocking call are observed at the next poll
point: the start of the STATION and TRACK steps and every PLAYING step.
"""

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Optional, Union

from tuner.catalog.client import CatalogClient
from tuner.catalog.models import Station, Track
from tuner.decoding.audio_source import AudioSource, Source
from tuner.errors import ApiError, DecodeError, DeviceError, ErrorInfo
from tuner.outputs.base_sink import BaseSink
from tuner.outputs.factory import SinkFactory
from tuner.playback.commands import EXIT, PLAY, SKIP, STOP, Event
from tuner.playback.pause_gate import PauseGate
from tuner.playback.track_loader import TrackLoader
from tuner.state.playback_state import PlaybackState
from tuner.state.status import Status

logger = logging.getLogger(__name__)


# ----------------
# FSM states
# ----------------

@dataclass
class _Standby:
    name = "STANDBY"


@dataclass
class _Shutdown:
    name = "SHUTDOWN"


@dataclass
class _Station:
    station: Station
    name = "STATION"


@dataclass
class _Track:
    station: Station
    loader: TrackLoader
    name = "TRACK"


@dataclass
class _Playing:
    station: Station
    loader: TrackLoader
    track: Track
    source: Source
    sink: BaseSink
    total: int
    chunks: int = field(default=0)
    name = "PLAYING"

    def release(self) -> None:
        """Close the track's decoder and device."""
        try:
            self.source.close()
        finally:
            self.sink.close()


FSMState = Union[_Standby, _Shutdown, _Station, _Track, _Playing]


class Engine:
    """
    Playback state machine thread.

    Every status change is written into PlaybackState (one lock
    acquisition) and then put on the status channel, in that order.
    """

    def __init__(
        self,
        catalog: CatalogClient,
        audio_source: AudioSource,
        sink_factory: SinkFactory,
        state: PlaybackState,
        gate: PauseGate,
        events: "queue.Queue[Event]",
        statuses: "queue.Queue[Status]",
        quality: str = "high",
        prefetch: bool = True,
        skip_ads: bool = True,
    ):
        """
        Initialize the playback engine.

        Args:
            catalog: Track list supplier (only list() is used)
            audio_source: Opener for track locators
            sink_factory: Output driver; probed once at startup, opened per track
            state: Shared playback state (the engine is its only writer)
            gate: Pause gate checked before rendering each chunk
            events: Inbound events forwarded by the relay
            statuses: Outbound status channel
            quality: Preferred audio quality for track locators
            prefetch: Open the next track in the background while playing
            skip_ads: Drop advertisement entries from tracklists
        """
        self._catalog = catalog
        self._audio_source = audio_source
        self._sink_factory = sink_factory
        self._state = state
        self._gate = gate
        self._events = events
        self._statuses = statuses
        self._quality = quality
        self._prefetch = prefetch
        self._skip_ads = skip_ads
        self._thread: Optional[threading.Thread] = None

    # ----------------
    # Thread lifecycle
    # ----------------

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="player", daemon=True)
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        # No output driver at all is fatal; per-track device errors are not.
        try:
            self._sink_factory.probe()
        except DeviceError as e:
            logger.error(f"[ENGINE] Output driver unavailable, shutting down: {e}")
            self._emit(Status.failed(ErrorInfo.from_exception(e)))
            self._emit(Status.shutdown())
            return

        logger.info("[ENGINE] Started")
        fsm: FSMState = _Standby()
        self._emit(Status.standby())
        while not isinstance(fsm, _Shutdown):
            fsm = self.step(fsm)
        logger.info("[ENGINE] Stopped")

    # ----------------
    # Channel helpers
    # ----------------

    def _emit(self, status: Status, **changes) -> None:
        """Mirror a status into PlaybackState, then publish it."""
        self._state.update(status, **changes)
        self._statuses.put(status)
        logger.debug(f"[ENGINE] Status: {status}")

    def _report_error(self, exc: Exception) -> None:
        self._emit(Status.failed(ErrorInfo.from_exception(exc)))

    def _poll(self) -> Optional[Event]:
        try:
            return self._events.get_nowait()
        except queue.Empty:
            return None

    # ----------------
    # Updating
    # ----------------

    def step(self, fsm: FSMState) -> FSMState:
        """Run one FSM step and return the next state."""
        try:
            if isinstance(fsm, _Standby):
                return self._update_standby()
            if isinstance(fsm, _Station):
                return self._update_station(fsm)
            if isinstance(fsm, _Track):
                return self._update_track(fsm)
            if isinstance(fsm, _Playing):
                return self._update_playing(fsm)
            return fsm
        except Exception as e:
            logger.error(f"[ENGINE] Unexpected error in {fsm.name} state: {e}", exc_info=True)
            self._abandon(fsm)
            self._state.clear()
            self._report_error(e)
            self._emit(Status.standby())
            return _Standby()

    def _abandon(self, fsm: FSMState) -> None:
        if isinstance(fsm, _Playing):
            fsm.release()
        if isinstance(fsm, (_Track, _Playing)):
            fsm.loader.close()

    def _leave_station(self, event: Event, station: Station, track: Optional[Track] = None) -> FSMState:
        """
        Handle PLAY/STOP/EXIT while a station is active.

        The first status clears station, track and progress in the same
        update; FINISHED is emitted only when a track was in flight.
        """
        cleared = {"station": None, "track": None}
        if track is not None:
            self._emit(Status.finished(track), **cleared)
            cleared = {}
        self._emit(Status.stopped(station), **cleared)

        if event.kind == PLAY:
            logger.info(f"[ENGINE] Switching station: {station} -> {event.station}")
            self._emit(Status.started(event.station), station=event.station)
            return _Station(event.station)
        if event.kind == STOP:
            logger.info(f"[ENGINE] Stopped station {station}")
            self._emit(Status.standby())
            return _Standby()

        logger.info(f"[ENGINE] Exit requested while playing {station}")
        self._emit(Status.shutdown())
        return _Shutdown()

    def _update_standby(self) -> FSMState:
        event = self._events.get()

        if event.kind == PLAY:
            logger.info(f"[ENGINE] Starting station {event.station}")
            self._emit(Status.started(event.station), station=event.station)
            return _Station(event.station)

        if event.kind == EXIT:
            self._emit(Status.shutdown())
            return _Shutdown()

        logger.debug(f"[ENGINE] Ignoring {event.kind} in STANDBY")
        return _Standby()

    def _update_station(self, fsm: _Station) -> FSMState:
        event = self._poll()
        if event is not None and event.kind != SKIP:
            return self._leave_station(event, fsm.station)

        self._emit(Status.fetching(fsm.station))
        try:
            tracks = self._catalog.list(fsm.station)
        except ApiError as e:
            # Retried immediately by re-entering STATION; there is no backoff.
            logger.warning(f"[ENGINE] Fetching tracks for {fsm.station} failed: {e}")
            self._report_error(e)
            return fsm

        logger.info(f"[ENGINE] Fetched {len(tracks)} track(s) for {fsm.station}")
        loader = TrackLoader(
            tracks,
            self._audio_source,
            quality=self._quality,
            prefetch=self._prefetch,
            skip_ads=self._skip_ads,
        )
        return _Track(fsm.station, loader)

    def _update_track(self, fsm: _Track) -> FSMState:
        event = self._poll()
        if event is not None and event.kind != SKIP:
            fsm.loader.close()
            return self._leave_station(event, fsm.station)

        loaded = fsm.loader.next()
        if loaded is None:
            fsm.loader.close()
            return _Station(fsm.station)

        track = loaded.track
        if loaded.error is not None:
            self._report_error(loaded.error)
            self._emit(Status.finished(track), track=None)
            return fsm

        source = loaded.source
        try:
            sink = self._sink_factory.open(source.format)
        except DeviceError as e:
            logger.warning(f"[ENGINE] Cannot open output device for {track}: {e}")
            source.close()
            self._report_error(e)
            self._emit(Status.finished(track), track=None)
            return fsm

        logger.info(f"[ENGINE] Playing {track} ({len(fsm.loader)} queued)")
        self._emit(Status.playing(track), track=track)
        return _Playing(
            station=fsm.station,
            loader=fsm.loader,
            track=track,
            source=source,
            sink=sink,
            total=int(source.duration),
        )

    def _update_playing(self, fsm: _Playing) -> FSMState:
        track = fsm.track

        # Pauses.
        self._gate.wait_while_paused(
            on_pause=lambda: self._emit(Status.paused(track)),
            on_resume=lambda: self._emit(Status.playing(track)),
        )

        # Events.
        event = self._poll()
        if event is not None:
            fsm.release()
            if event.kind == SKIP:
                logger.info(f"[ENGINE] Skipped {track}")
                self._emit(Status.finished(track), track=None)
                return _Track(fsm.station, fsm.loader)
            fsm.loader.close()
            return self._leave_station(event, fsm.station, track)

        # Playback.
        try:
            chunk = fsm.source.next_chunk()
            if chunk is not None:
                self._state.set_progress(int(chunk.timestamp), fsm.total)
                fsm.sink.write(chunk.data)
                fsm.chunks += 1
                return fsm
        except (DecodeError, DeviceError) as e:
            logger.warning(f"[ENGINE] Playback of {track} failed after {fsm.chunks} chunk(s): {e}")
            fsm.release()
            self._report_error(e)
            self._emit(Status.finished(track), track=None)
            return _Track(fsm.station, fsm.loader)

        logger.debug(f"[ENGINE] Finished {track} ({fsm.chunks} chunks)")
        fsm.release()
        self._emit(Status.finished(track), track=None)
        return _Track(fsm.station, fsm.loader)
