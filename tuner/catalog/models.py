"""
Catalog value types for Tuner.

Station and Track are immutable once received from a CatalogClient. Most
Track fields are optional since a tracklist can include advertisements.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

AUDIO_QUALITIES = ("high", "medium", "low")


@dataclass(frozen=True)
class Station:
    """A station handle as returned by the catalog."""
    station_id: str
    station_name: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Station":
        return cls(station_id=str(data["stationId"]), station_name=data.get("stationName", ""))

    def __str__(self) -> str:
        return self.station_name or self.station_id


@dataclass(frozen=True)
class AudioUrl:
    """Audio information for one quality level of a track."""
    audio_url: str
    bitrate: Optional[str] = None
    encoding: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "AudioUrl":
        return cls(
            audio_url=data["audioUrl"],
            bitrate=data.get("bitrate"),
            encoding=data.get("encoding"),
        )


@dataclass(frozen=True)
class TrackAudio:
    """Audio locators for a track, keyed by quality."""
    low: Optional[AudioUrl] = None
    medium: Optional[AudioUrl] = None
    high: Optional[AudioUrl] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "TrackAudio":
        def parse(key: str) -> Optional[AudioUrl]:
            entry = data.get(key)
            return AudioUrl.from_json(entry) if entry else None

        return cls(
            low=parse("lowQuality"),
            medium=parse("mediumQuality"),
            high=parse("highQuality"),
        )

    def best(self, quality: str = "high") -> Optional[AudioUrl]:
        """
        Return the AudioUrl for the requested quality.

        Falls back to the other qualities (highest first) when the requested
        one is missing.
        """
        preferred = getattr(self, quality, None)
        if preferred is not None:
            return preferred
        for name in AUDIO_QUALITIES:
            candidate = getattr(self, name)
            if candidate is not None:
                return candidate
        return None


@dataclass(frozen=True)
class Track:
    """
    Track information as supplied by the catalog.

    Attributes:
        track_token: Catalog token used for rating
        artist_name / album_name / song_name: Display metadata
        song_rating: Optional rating (catalog-defined scale, 1 = thumbs up)
        track_audio: Optional set of audio locators
        ad_token: Set when this entry is an advertisement
    """
    track_token: Optional[str] = None
    artist_name: Optional[str] = None
    album_name: Optional[str] = None
    song_name: Optional[str] = None
    song_rating: Optional[int] = None
    track_audio: Optional[TrackAudio] = None
    ad_token: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Track":
        audio = data.get("audioUrlMap")
        return cls(
            track_token=data.get("trackToken"),
            artist_name=data.get("artistName"),
            album_name=data.get("albumName"),
            song_name=data.get("songName"),
            song_rating=data.get("songRating"),
            track_audio=TrackAudio.from_json(audio) if audio else None,
            ad_token=data.get("adToken"),
        )

    @property
    def is_ad(self) -> bool:
        return self.ad_token is not None

    def locator(self, quality: str = "high") -> Optional[str]:
        """Audio URL for the given quality, or None if the track carries no audio."""
        if self.track_audio is None:
            return None
        audio = self.track_audio.best(quality)
        return audio.audio_url if audio else None

    def __str__(self) -> str:
        if self.is_ad:
            return "Advertisement"
        return f"{self.song_name or '?'} - {self.artist_name or '?'}"
