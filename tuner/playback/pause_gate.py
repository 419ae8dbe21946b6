import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PauseGate:
    """
    Boolean pause flag guarded by a condition variable.

    While the flag is set the engine must not render audio. Clearing the
    flag wakes every thread blocked in wait_while_paused(), so the engine
    never busy-waits.
    """

    def __init__(self):
        self._condition = threading.Condition(threading.Lock())
        self._paused = False

    def pause(self) -> None:
        with self._condition:
            self._paused = True

    def unpause(self) -> None:
        with self._condition:
            self._paused = False
            self._condition.notify_all()

    def is_paused(self) -> bool:
        with self._condition:
            return self._paused

    def wait_while_paused(
        self,
        on_pause: Optional[Callable[[], None]] = None,
        on_resume: Optional[Callable[[], None]] = None,
    ) -> bool:
        """
        Block the calling thread while the gate is closed.

        on_pause runs once before parking and on_resume once after the
        gate reopens, both with the gate lock held. They must not call back
        into the gate.

        Returns:
            True if the caller was parked
        """
        with self._condition:
            if not self._paused:
                return False
            if on_pause:
                on_pause()
            while self._paused:
                self._condition.wait()
            if on_resume:
                on_resume()
        return True
