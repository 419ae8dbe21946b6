"""
Contract tests for the ffmpeg-backed audio source.

ffmpeg/ffprobe are replaced with mocks; no subprocess is started.
- Duration comes from ffprobe and is fixed at open time
- Chunks are int16 (samples, channels) arrays with increasing timestamps
- Open and decode failures are DecodeError
"""

import io
import subprocess
from unittest.mock import Mock

import numpy as np
import pytest

from tuner.decoding.audio_source import AudioFormat
from tuner.decoding.ffmpeg_decoder import FFmpegAudioSource, FFmpegSource, probe_duration
from tuner.errors import DecodeError

FORMAT = AudioFormat(sample_rate=1000, channels=2)


def probe_result(stdout='{"format": {"duration": "3.5"}}', returncode=0, stderr=""):
    return subprocess.CompletedProcess(args=["ffprobe"], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def fake_ffmpeg(monkeypatch):
    """Patch ffprobe (run) and ffmpeg (Popen); returns a setter for the decoded bytes and exit code."""
    state = {"pcm": b"", "returncode": 0}

    def fake_popen(cmd, **kwargs):
        proc = Mock()
        proc.pid = 99
        proc.stdout = io.BytesIO(state["pcm"])
        proc.wait.return_value = state["returncode"]
        proc.poll.return_value = state["returncode"]
        return proc

    monkeypatch.setattr("tuner.decoding.ffmpeg_decoder.subprocess.run", lambda *a, **kw: probe_result())
    monkeypatch.setattr("tuner.decoding.ffmpeg_decoder.subprocess.Popen", fake_popen)
    return state


class TestProbeDuration:

    def test_reads_duration(self, monkeypatch):
        monkeypatch.setattr("tuner.decoding.ffmpeg_decoder.subprocess.run", lambda *a, **kw: probe_result())
        assert probe_duration("song.mp3") == 3.5

    def test_missing_duration_is_zero(self, monkeypatch):
        monkeypatch.setattr(
            "tuner.decoding.ffmpeg_decoder.subprocess.run",
            lambda *a, **kw: probe_result(stdout='{"format": {"duration": "N/A"}}'),
        )
        assert probe_duration("http://stream") == 0.0

    def test_unreadable_input_is_decode_error(self, monkeypatch):
        monkeypatch.setattr(
            "tuner.decoding.ffmpeg_decoder.subprocess.run",
            lambda *a, **kw: probe_result(stdout="", returncode=1, stderr="song.mp3: Invalid data found\n"),
        )
        with pytest.raises(DecodeError, match="Invalid data found"):
            probe_duration("song.mp3")

    def test_missing_ffprobe_is_decode_error(self, monkeypatch):
        def missing(*args, **kwargs):
            raise FileNotFoundError("ffprobe")

        monkeypatch.setattr("tuner.decoding.ffmpeg_decoder.subprocess.run", missing)
        with pytest.raises(DecodeError):
            probe_duration("song.mp3")


class TestFFmpegSource:

    def test_chunks_and_timestamps(self, fake_ffmpeg):
        samples = np.arange(250 * 2, dtype=np.int16).reshape(-1, 2)
        fake_ffmpeg["pcm"] = samples.tobytes()

        source = FFmpegSource("song.mp3", FORMAT, frame_size=100)
        assert source.duration == 3.5

        chunks = []
        while True:
            chunk = source.next_chunk()
            if chunk is None:
                break
            chunks.append(chunk)

        assert [c.data.shape for c in chunks] == [(100, 2), (100, 2), (50, 2)]
        assert [c.timestamp for c in chunks] == [0.0, 0.1, 0.2]
        assert chunks[0].data.dtype == np.int16
        np.testing.assert_array_equal(np.concatenate([c.data for c in chunks]), samples)
        assert source.next_chunk() is None, "An exhausted source stays exhausted"

    def test_failure_before_any_audio_is_decode_error(self, fake_ffmpeg):
        fake_ffmpeg["returncode"] = 1
        source = FFmpegSource("song.mp3", FORMAT)
        with pytest.raises(DecodeError):
            source.next_chunk()

    def test_failure_after_audio_ends_track(self, fake_ffmpeg):
        fake_ffmpeg["pcm"] = np.zeros((10, 2), dtype=np.int16).tobytes()
        fake_ffmpeg["returncode"] = 1
        source = FFmpegSource("song.mp3", FORMAT, frame_size=100)
        assert source.next_chunk().data.shape == (10, 2)
        assert source.next_chunk() is None

    def test_close_is_idempotent(self, fake_ffmpeg):
        source = FFmpegSource("song.mp3", FORMAT)
        source.close()
        source.close()
        assert source.next_chunk() is None


class TestFFmpegAudioSource:

    def test_empty_locator_is_decode_error(self):
        with pytest.raises(DecodeError):
            FFmpegAudioSource(FORMAT).open("")

    def test_missing_file_is_decode_error(self, tmp_path):
        with pytest.raises(DecodeError):
            FFmpegAudioSource(FORMAT).open(str(tmp_path / "missing.mp3"))

    def test_opens_existing_file(self, fake_ffmpeg, tmp_path):
        path = tmp_path / "song.mp3"
        path.write_bytes(b"")
        source = FFmpegAudioSource(FORMAT, frame_size=64).open(str(path))
        assert isinstance(source, FFmpegSource)
        assert source.format == FORMAT
        assert source.frame_size == 64
        source.close()
