from abc import ABC, abstractmethod

import numpy as np

from tuner.decoding.audio_source import AudioFormat


class BaseSink(ABC):
    """
    Abstract base class for all output sinks.

    A sink is opened for one AudioFormat and renders PCM chunks of that
    format. All sinks must implement write() and close() methods.
    """

    def __init__(self, audio_format: AudioFormat):
        self.audio_format = audio_format

    @abstractmethod
    def write(self, frame: np.ndarray) -> None:
        """
        Render a PCM chunk. May block while the device drains.

        Args:
            frame: numpy int16 array shaped (samples, channels)

        Raises:
            DeviceError: If the device went away
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """
        Close the output sink and release resources.
        """
        ...
