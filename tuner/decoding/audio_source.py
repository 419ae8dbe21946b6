"""
Audio source interface for Tuner.

An AudioSource turns a track locator into a Source: a stream of
timestamped PCM chunks with a fixed total duration.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Protocol

import numpy as np


@dataclass(frozen=True)
class AudioFormat:
    """PCM sample format: signed little-endian integers, interleaved."""
    sample_rate: int = 44100
    channels: int = 2
    bits: int = 16

    @property
    def bytes_per_frame(self) -> int:
        """Bytes per sample frame (one sample for every channel)."""
        return self.channels * self.bits // 8


@dataclass
class AudioChunk:
    """
    A unit of decoded PCM audio.

    Attributes:
        data: numpy int16 array shaped (samples, channels)
        timestamp: Position of the first sample, in seconds from track start
    """
    data: np.ndarray
    timestamp: float


class Source(ABC):
    """An opened, decodable audio stream. Owned by a single thread."""

    @property
    @abstractmethod
    def format(self) -> AudioFormat:
        ...

    @property
    @abstractmethod
    def duration(self) -> float:
        """Total track duration in seconds, fixed at open time."""
        ...

    @abstractmethod
    def next_chunk(self) -> Optional[AudioChunk]:
        """
        Decode the next chunk.

        Returns:
            AudioChunk, or None when the stream is exhausted

        Raises:
            DecodeError: If decoding fails mid-stream
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Release decoder resources. Safe to call multiple times."""
        ...


class AudioSource(Protocol):
    """Opener for Sources."""

    def open(self, locator: str) -> Source:
        """Open a locator (URL or path). Raises DecodeError."""
        ...
