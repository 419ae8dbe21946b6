import wave

import numpy as np

from tuner.decoding.audio_source import AudioFormat
from tuner.errors import DeviceError
from tuner.outputs.base_sink import BaseSink


class FileSink(BaseSink):
    """
    Simple WAV writer sink for PCM chunks.

    Debug-only sink for inspecting rendered audio. Each track overwrites
    the file.
    """

    def __init__(self, path: str, audio_format: AudioFormat):
        super().__init__(audio_format)
        self.path = path
        try:
            self._wave = wave.open(path, "wb")
        except OSError as e:
            raise DeviceError(f"Cannot open WAV output {path}: {e}") from e
        self._wave.setnchannels(audio_format.channels)
        self._wave.setsampwidth(audio_format.bits // 8)
        self._wave.setframerate(audio_format.sample_rate)

    def write(self, frame: np.ndarray) -> None:
        try:
            self._wave.writeframes(frame.tobytes())
        except OSError as e:
            raise DeviceError(f"Cannot write WAV output {self.path}: {e}") from e

    def close(self) -> None:
        self._wave.close()
