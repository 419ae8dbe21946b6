import logging
import subprocess
from typing import Optional

import numpy as np

from tuner.decoding.audio_source import AudioFormat
from tuner.errors import DeviceError
from tuner.outputs.base_sink import BaseSink

logger = logging.getLogger(__name__)

_CHANNEL_LAYOUTS = {1: "mono", 2: "stereo"}


class FFplaySink(BaseSink):
    """
    Audio device sink backed by an ffplay subprocess.

    Raw PCM is piped to ffplay's stdin; ffplay renders it on the default
    audio device. Writes block once the pipe is full, which paces playback
    at the device rate.
    """

    def __init__(self, audio_format: AudioFormat):
        """
        Start ffplay for the given format.

        Raises:
            DeviceError: If ffplay cannot be started
        """
        super().__init__(audio_format)
        layout = _CHANNEL_LAYOUTS.get(audio_format.channels, f"{audio_format.channels}c")
        try:
            self.proc: Optional[subprocess.Popen] = subprocess.Popen(
                [
                    "ffplay",
                    "-nodisp",
                    "-autoexit",
                    "-loglevel", "error",
                    "-f", f"s{audio_format.bits}le",
                    "-ar", str(audio_format.sample_rate),
                    "-ch_layout", layout,
                    "-i", "-",
                ],
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise DeviceError(f"Cannot start ffplay: {e}") from e
        logger.debug(f"[SINK] ffplay started (pid={self.proc.pid}, format={audio_format})")

    def write(self, frame: np.ndarray) -> None:
        """Write PCM chunk to ffplay stdin."""
        if self.proc is None or self.proc.stdin is None:
            raise DeviceError("ffplay sink is closed")
        try:
            self.proc.stdin.write(frame.tobytes())
        except (BrokenPipeError, ValueError) as e:
            raise DeviceError(f"ffplay stopped accepting audio: {e}") from e

    def close(self) -> None:
        """Close ffplay subprocess."""
        if self.proc is None:
            return
        if self.proc.stdin:
            try:
                self.proc.stdin.close()
            except OSError:
                pass
        if self.proc.poll() is None:
            self.proc.terminate()
            try:
                self.proc.wait(timeout=2)
            except subprocess.TimeoutExpired:
                self.proc.kill()
        self.proc = None
