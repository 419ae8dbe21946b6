"""
Decoding module for Tuner.

This package turns track locators into timestamped PCM chunks.
"""

from tuner.decoding.audio_source import AudioChunk, AudioFormat, AudioSource, Source
from tuner.decoding.ffmpeg_decoder import FFmpegAudioSource, FFmpegSource, probe_duration

__all__ = [
    "AudioChunk",
    "AudioFormat",
    "AudioSource",
    "Source",
    "FFmpegAudioSource",
    "FFmpegSource",
    "probe_duration",
]
