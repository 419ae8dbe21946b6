import logging
import shutil

from tuner.decoding.audio_source import AudioFormat
from tuner.errors import DeviceError
from tuner.outputs.base_sink import BaseSink
from tuner.outputs.ffplay_sink import FFplaySink
from tuner.outputs.file_sink import FileSink
from tuner.outputs.null_sink import NullSink

logger = logging.getLogger(__name__)

SINK_MODES = ("ffplay", "wav", "null")


class SinkFactory:
    """
    AudioSink opener selected by output mode.

    Modes:
        "ffplay": render on the default audio device through ffplay
        "wav": write PCM to a WAV file (debug)
        "null": discard audio, playback logic still runs
    """

    def __init__(self, mode: str = "ffplay", wav_path: str = "/tmp/tuner_output.wav"):
        if mode not in SINK_MODES:
            raise ValueError(f"Unknown output sink mode: {mode!r} (expected one of {', '.join(SINK_MODES)})")
        self.mode = mode
        self.wav_path = wav_path

    def probe(self) -> None:
        """
        Check that the output driver is available at all.

        Raises:
            DeviceError: If no driver is available (fatal at engine startup)
        """
        if self.mode == "ffplay" and shutil.which("ffplay") is None:
            raise DeviceError("No audio output driver: ffplay is not installed")
        logger.debug(f"[SINK] Output driver available (mode={self.mode})")

    def open(self, audio_format: AudioFormat) -> BaseSink:
        """
        Open a sink for one track.

        Raises:
            DeviceError: If the device cannot be opened
        """
        if self.mode == "wav":
            return FileSink(self.wav_path, audio_format)
        if self.mode == "ffplay":
            return FFplaySink(audio_format)
        return NullSink(audio_format)
