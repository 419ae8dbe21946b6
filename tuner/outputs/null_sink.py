import numpy as np

from tuner.outputs.base_sink import BaseSink


class NullSink(BaseSink):
    """A sink that discards all audio. Useful for headless runs and tests."""

    def write(self, frame: np.ndarray) -> None:
        return

    def close(self) -> None:
        return
