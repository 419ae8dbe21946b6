"""
Command relay thread for Tuner.

Owns the inbound command channel. Commands that must be serviced promptly
(pause, unpause, report, exit) are handled here so their latency never
depends on what the engine is doing; commands whose effect depends on the
engine's state (play, stop, skip) are forwarded to it unchanged.
"""

import logging
import queue
import threading
from typing import Optional

from tuner.playback.commands import EXIT, PAUSE, REPORT, UNPAUSE, Command, Event
from tuner.playback.pause_gate import PauseGate
from tuner.state.playback_state import PlaybackState
from tuner.state.status import Status

logger = logging.getLogger(__name__)


class Relay:
    """
    Thread between the façade's command channel and the engine's event channel.

    Blocks only on its inbound receive. Terminates after forwarding EXIT.
    """

    def __init__(
        self,
        commands: "queue.Queue[Command]",
        events: "queue.Queue[Event]",
        statuses: "queue.Queue[Status]",
        state: PlaybackState,
        gate: PauseGate,
    ):
        """
        Initialize relay.

        Args:
            commands: Inbound channel from the façade
            events: Outbound channel to the engine
            statuses: Status channel back to the façade (REPORT answers)
            state: Shared playback state (read-only here)
            gate: Pause gate shared with the engine
        """
        self._commands = commands
        self._events = events
        self._statuses = statuses
        self._state = state
        self._gate = gate
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="relay", daemon=True)
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def handle(self, command: Command) -> bool:
        """
        Service one command.

        Returns:
            False once EXIT has been forwarded, True otherwise
        """
        if command.kind == PAUSE:
            self._gate.pause()
            logger.debug("[RELAY] Paused")
            return True

        if command.kind == UNPAUSE:
            self._gate.unpause()
            logger.debug("[RELAY] Unpaused")
            return True

        if command.kind == REPORT:
            self._statuses.put(self._state.status)
            return True

        if command.kind == EXIT:
            # The engine must be able to reach its event check to see EXIT.
            self._gate.unpause()
            self._events.put(Event.from_command(command))
            logger.debug("[RELAY] Forwarded EXIT, relay stopping")
            return False

        self._events.put(Event.from_command(command))
        return True

    def _run(self) -> None:
        logger.debug("[RELAY] Started")
        while True:
            command = self._commands.get()
            if not self.handle(command):
                break
        logger.debug("[RELAY] Stopped")
