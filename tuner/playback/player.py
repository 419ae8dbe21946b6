"""
Player façade for Tuner.

Public handle on the playback threads. Owns the command and status
channels plus the shared PlaybackState and PauseGate, exposes a small
command API and guarantees orderly shutdown on close.

Usage:
    with Player(catalog) as player:
        player.play(station)
        status = player.next_status()
"""

import logging
import queue
import threading
from typing import List, Optional

from tuner.catalog.client import CatalogClient
from tuner.catalog.models import Station
from tuner.config import TunerConfig
from tuner.decoding.audio_source import AudioFormat, AudioSource
from tuner.decoding.ffmpeg_decoder import FFmpegAudioSource
from tuner.outputs.factory import SinkFactory
from tuner.playback.commands import EXIT, PAUSE, REPORT, SKIP, STOP, UNPAUSE, Command, Event
from tuner.playback.engine import Engine
from tuner.playback.pause_gate import PauseGate
from tuner.playback.relay import Relay
from tuner.state.playback_state import PlaybackSnapshot, PlaybackState
from tuner.state.status import Status

logger = logging.getLogger(__name__)


class Player:
    """
    Plays stations on background threads, controlled through a command channel.

    All control methods are asynchronous sends and return immediately;
    none of them blocks on device or network I/O. Only close() blocks,
    while it joins the playback threads.
    """

    def __init__(
        self,
        catalog: CatalogClient,
        audio_source: Optional[AudioSource] = None,
        sink_factory: Optional[SinkFactory] = None,
        config: Optional[TunerConfig] = None,
    ):
        """
        Create the player and start its relay and engine threads.

        Args:
            catalog: Station/track catalog
            audio_source: Decoder opener (default: ffmpeg with the configured format)
            sink_factory: Output device opener (default: configured sink mode)
            config: Configuration (default: TunerConfig defaults)
        """
        self.config = config or TunerConfig()

        if audio_source is None:
            audio_source = FFmpegAudioSource(
                AudioFormat(sample_rate=self.config.sample_rate, channels=self.config.channels),
                frame_size=self.config.frame_size,
            )
        if sink_factory is None:
            sink_factory = SinkFactory(self.config.output_sink_mode, self.config.output_wav_path)

        self._state = PlaybackState()
        self._gate = PauseGate()
        self._commands: "queue.Queue[Command]" = queue.Queue()
        self._statuses: "queue.Queue[Status]" = queue.Queue()
        events: "queue.Queue[Event]" = queue.Queue()

        # Guards the requested pause flag and command ordering across caller threads.
        # Reentrant so a signal handler on the main thread can close() mid-command.
        self._lock = threading.RLock()
        self._pause_requested = False
        self._closed = False

        self._relay = Relay(self._commands, events, self._statuses, self._state, self._gate)
        self._engine = Engine(
            catalog,
            audio_source,
            sink_factory,
            self._state,
            self._gate,
            events,
            self._statuses,
            quality=self.config.audio_quality,
            prefetch=self.config.prefetch,
            skip_ads=self.config.skip_ads,
        )
        self._relay.start()
        self._engine.start()
        logger.debug("[PLAYER] Threads started")

    def __enter__(self) -> "Player":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _send(self, command: Command) -> None:
        # Caller holds self._lock
        if self._closed:
            logger.warning(f"[PLAYER] Ignoring {command.kind}: player is closed")
            return
        self._commands.put(command)

    #
    # Player control functions
    #

    def play(self, station: Station) -> None:
        """Starts playing the given station, replacing the current one."""
        with self._lock:
            self._send(Command.play(station))

    def stop(self) -> None:
        """Stops the current station."""
        with self._lock:
            self._send(Command(STOP))

    def pause(self) -> None:
        with self._lock:
            self._pause_requested = True
            self._send(Command(PAUSE))

    def unpause(self) -> None:
        with self._lock:
            self._pause_requested = False
            self._send(Command(UNPAUSE))

    def toggle_pause(self) -> None:
        """
        Toggles pause / unpause.

        Decided from the last requested pause state rather than the
        reported status, so consecutive toggles alternate even before the
        relay has applied the previous one.
        """
        with self._lock:
            self._pause_requested = not self._pause_requested
            self._send(Command(PAUSE if self._pause_requested else UNPAUSE))

    def skip(self) -> None:
        """Skips the current track (if any is playing). A paused player is resumed first."""
        with self._lock:
            self._pause_requested = False
            self._send(Command(UNPAUSE))
            self._send(Command(SKIP))

    def report(self) -> None:
        """Requests the current status to be re-sent on the status channel."""
        with self._lock:
            self._send(Command(REPORT))

    #
    # Player state functions
    #

    def state(self) -> PlaybackSnapshot:
        """Returns a consistent snapshot of the playback state."""
        return self._state.snapshot()

    def next_status(self) -> Optional[Status]:
        """
        Returns the oldest unread status without blocking.

        Returns:
            Status, or None when no status is pending
        """
        try:
            return self._statuses.get_nowait()
        except queue.Empty:
            return None

    def drain_statuses(self) -> List[Status]:
        """Returns every pending status, oldest first."""
        statuses = []
        while True:
            status = self.next_status()
            if status is None:
                return statuses
            statuses.append(status)

    def is_started(self) -> bool:
        return self._state.status.is_started()

    def is_fetching(self) -> bool:
        return self._state.status.is_fetching()

    def is_playing(self) -> bool:
        return self._state.status.is_playing()

    def is_paused(self) -> bool:
        return self._state.status.is_paused()

    def is_finished(self) -> bool:
        return self._state.status.is_finished()

    def is_stopped(self) -> bool:
        return self._state.status.is_stopped()

    def is_shutdown(self) -> bool:
        return self._state.status.is_shutdown()

    @property
    def closed(self) -> bool:
        return self._closed

    #
    # Shutdown
    #

    def close(self) -> None:
        """
        Shut the playback threads down and wait for them.

        The engine must be able to reach its event check to see EXIT, so
        the gate is forced open and UNPAUSE is queued ahead of EXIT; the
        channel is FIFO, so a PAUSE still queued is undone before EXIT.
        Idempotent.
        """
        with self._lock:
            if self._closed:
                return
            self._pause_requested = False
            self._gate.unpause()
            self._commands.put(Command(UNPAUSE))
            self._commands.put(Command(EXIT))
            self._closed = True

        timeout = self.config.shutdown_timeout_sec
        self._engine.join(timeout=timeout)
        if self._engine.is_alive():
            logger.warning(f"[PLAYER] Engine thread still busy after {timeout}s; leaving it to exit on its own")
        self._relay.join(timeout=timeout)
        if self._relay.is_alive():
            logger.warning(f"[PLAYER] Relay thread did not stop within {timeout}s")
        logger.debug("[PLAYER] Closed")
