"""
FFmpeg-backed audio source for Tuner.

Decodes any locator ffmpeg understands (local path or HTTP URL) into
16-bit signed little-endian PCM. Duration is detected with ffprobe when
the source is opened.
"""

import json
import logging
import os
import subprocess
from typing import Optional

import numpy as np

from tuner.decoding.audio_source import AudioChunk, AudioFormat, Source
from tuner.errors import DecodeError

logger = logging.getLogger(__name__)


def probe_duration(locator: str, timeout: float = 10.0) -> float:
    """
    Get the duration of an audio stream in seconds using ffprobe.

    Returns 0.0 when the container does not report a duration.

    Raises:
        DecodeError: If ffprobe is missing, times out, or cannot open the locator
    """
    cmd = [
        "ffprobe",
        "-v", "error",
        "-show_entries", "format=duration",
        "-of", "json",
        locator,
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError as e:
        raise DecodeError("ffprobe is not installed") from e
    except subprocess.TimeoutExpired as e:
        raise DecodeError(f"ffprobe timed out on {locator}") from e

    if result.returncode != 0:
        message = result.stderr.strip().splitlines()[-1] if result.stderr.strip() else "unknown error"
        raise DecodeError(f"Cannot open {locator}: {message}")

    try:
        data = json.loads(result.stdout or "{}")
        duration = data.get("format", {}).get("duration")
        return float(duration) if duration not in (None, "N/A") else 0.0
    except (json.JSONDecodeError, ValueError, TypeError):
        return 0.0


class FFmpegSource(Source):
    """
    Locator → PCM decoder using an ffmpeg subprocess.
    - Outputs s16le at the configured rate and channel count
    - Chunks are numpy int16 arrays of shape (frame_size, channels); the
      final chunk may be shorter

    This decoder has no timing responsibility: it produces chunks at natural
    decoder pacing. The sink's blocking writes pace playback.
    """

    def __init__(self, locator: str, audio_format: AudioFormat, frame_size: int = 1024):
        """
        Probe and start decoding a locator.

        Args:
            locator: Path or URL of the audio stream
            audio_format: Output PCM format
            frame_size: Number of samples per chunk (default: 1024)

        Raises:
            DecodeError: If the locator cannot be probed or ffmpeg cannot start
        """
        self.locator = locator
        self.frame_size = frame_size
        self._format = audio_format
        self._duration = probe_duration(locator)
        self._samples_read = 0
        self._buffer = bytearray()

        # Use start_new_session to isolate FFmpeg from Ctrl-C (SIGINT) sent to parent
        try:
            self.proc: Optional[subprocess.Popen] = subprocess.Popen(
                [
                    "ffmpeg",
                    "-v", "error",
                    "-i", locator,
                    "-f", "s16le",
                    "-ac", str(audio_format.channels),
                    "-ar", str(audio_format.sample_rate),
                    "-",
                ],
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
                bufsize=self.frame_size * audio_format.bytes_per_frame,
                start_new_session=True,
            )
        except OSError as e:
            raise DecodeError(f"Cannot start ffmpeg for {locator}: {e}") from e

        logger.debug(f"[DECODER] Opened {locator} (duration={self._duration:.1f}s, pid={self.proc.pid})")

    @property
    def format(self) -> AudioFormat:
        return self._format

    @property
    def duration(self) -> float:
        return self._duration

    def _read_chunk_bytes(self) -> bytes:
        bytes_per_chunk = self.frame_size * self._format.bytes_per_frame
        assert self.proc is not None and self.proc.stdout is not None

        while len(self._buffer) < bytes_per_chunk:
            data = self.proc.stdout.read(bytes_per_chunk - len(self._buffer))
            if not data:
                break
            self._buffer.extend(data)

        # Only whole sample frames are usable
        usable = min(len(self._buffer), bytes_per_chunk)
        usable -= usable % self._format.bytes_per_frame
        chunk = bytes(self._buffer[:usable])
        del self._buffer[:usable]
        return chunk

    def next_chunk(self) -> Optional[AudioChunk]:
        if self.proc is None:
            return None

        try:
            chunk_bytes = self._read_chunk_bytes()
        except (OSError, ValueError) as e:
            self.close()
            raise DecodeError(f"Decoding {self.locator} failed: {e}") from e

        if not chunk_bytes:
            returncode = self.proc.wait()
            if returncode != 0 and self._samples_read == 0:
                self.close()
                raise DecodeError(f"ffmpeg could not decode {self.locator} (exit code {returncode})")
            if returncode != 0:
                logger.warning(f"[DECODER] ffmpeg exited with code {returncode} mid-stream: {self.locator}")
            self.close()
            return None

        frame = np.frombuffer(chunk_bytes, dtype=np.int16).reshape(-1, self._format.channels)
        timestamp = self._samples_read / self._format.sample_rate
        self._samples_read += frame.shape[0]
        return AudioChunk(data=frame, timestamp=timestamp)

    def close(self) -> None:
        """
        Clean up the ffmpeg process.

        Closes stdout and terminates/kills the process if still running.
        Safe to call multiple times.
        """
        if self.proc is None:
            return

        try:
            if self.proc.stdout:
                self.proc.stdout.close()
        except OSError:
            pass

        if self.proc.poll() is None:
            try:
                self.proc.terminate()
                self.proc.wait(timeout=2)
            except subprocess.TimeoutExpired:
                logger.warning(f"[DECODER] FFmpeg process didn't terminate, killing: {self.locator}")
                self.proc.kill()
                try:
                    self.proc.wait(timeout=1)
                except subprocess.TimeoutExpired:
                    logger.error(f"[DECODER] FFmpeg process did not exit after SIGKILL (pid={self.proc.pid})")

        self.proc = None


class FFmpegAudioSource:
    """AudioSource that opens FFmpegSources with a fixed output format."""

    def __init__(self, audio_format: Optional[AudioFormat] = None, frame_size: int = 1024):
        self.audio_format = audio_format or AudioFormat()
        self.frame_size = frame_size

    def open(self, locator: str) -> FFmpegSource:
        if not locator:
            raise DecodeError("Empty audio locator")
        if "://" not in locator and not os.path.exists(locator):
            raise DecodeError(f"No such file: {locator}")
        return FFmpegSource(locator, self.audio_format, self.frame_size)
