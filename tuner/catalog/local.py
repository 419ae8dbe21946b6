"""
Filesystem-backed catalog for Tuner.

Each sub-directory of the music root is a station; the audio files found
(recursively) beneath it are its tracks. Ratings are persisted to a JSON
file with atomic writes.
"""

import glob
import json
import logging
import os
import random
import shutil
from typing import Dict, List, Optional

from tuner.catalog.models import AudioUrl, Station, Track, TrackAudio
from tuner.errors import ApiError

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = (".mp3", ".ogg", ".flac", ".m4a", ".aac", ".wav", ".opus")
RATINGS_FILE = ".tuner_ratings.json"


class LocalCatalogClient:
    """
    Directory-backed CatalogClient.

    list() returns a random batch of up to playlist_size tracks per call,
    the way a radio catalog hands out short playlists. An empty station
    directory raises ApiError, which the engine treats as a fetch failure.
    """

    def __init__(self, root: str, playlist_size: int = 4, rng: Optional[random.Random] = None):
        """
        Initialize local catalog.

        Args:
            root: Music root directory (one sub-directory per station)
            playlist_size: Number of tracks returned per list() call
            rng: Optional random generator (tests pass a seeded one)
        """
        if not os.path.isdir(root):
            raise ApiError(f"Music root is missing or not a directory: {root!r}")
        self.root = root
        self.playlist_size = playlist_size
        self._rng = rng or random.Random()
        self._ratings_path = os.path.join(root, RATINGS_FILE)
        logger.info(f"[CATALOG] LocalCatalogClient initialized (root={root})")

    def _station_dir(self, station: Station) -> str:
        path = os.path.join(self.root, station.station_id)
        if not os.path.isdir(path):
            raise ApiError(f"Unknown station: {station.station_id}")
        return path

    def _discover(self, station_dir: str) -> List[str]:
        files = []
        for ext in AUDIO_EXTENSIONS:
            files.extend(glob.glob(os.path.join(station_dir, "**", f"*{ext}"), recursive=True))
        return sorted(files)

    def _track_for(self, path: str) -> Track:
        stem = os.path.splitext(os.path.basename(path))[0]
        # "Artist - Title" file names carry both fields
        if " - " in stem:
            artist, song = stem.split(" - ", 1)
        else:
            artist, song = None, stem
        album = os.path.basename(os.path.dirname(path)) or None
        token = os.path.relpath(path, self.root)
        return Track(
            track_token=token,
            artist_name=artist,
            album_name=album,
            song_name=song,
            song_rating=self._load_ratings().get(token),
            track_audio=TrackAudio(high=AudioUrl(audio_url=path)),
        )

    def stations(self) -> List[Station]:
        names = sorted(
            entry for entry in os.listdir(self.root)
            if os.path.isdir(os.path.join(self.root, entry)) and not entry.startswith(".")
        )
        return [Station(station_id=name, station_name=name) for name in names]

    def list(self, station: Station) -> List[Track]:
        files = self._discover(self._station_dir(station))
        if not files:
            raise ApiError(f"Station {station.station_id} has no tracks")
        batch = self._rng.sample(files, min(self.playlist_size, len(files)))
        logger.debug(f"[CATALOG] Selected {len(batch)} track(s) for station {station.station_id}")
        return [self._track_for(path) for path in batch]

    def rate(self, station: Station, track: Track, positive: bool) -> None:
        if not track.track_token:
            raise ApiError("Track cannot be rated")
        ratings = self._load_ratings()
        ratings[track.track_token] = 1 if positive else -1
        self._save_ratings(ratings)

    def create(self, name: str) -> Station:
        path = os.path.join(self.root, name)
        try:
            os.mkdir(path)
        except OSError as e:
            raise ApiError(f"Cannot create station {name!r}: {e}") from e
        return Station(station_id=name, station_name=name)

    def rename(self, station: Station, name: str) -> Station:
        src = self._station_dir(station)
        dst = os.path.join(self.root, name)
        if os.path.exists(dst):
            raise ApiError(f"Station {name!r} already exists")
        try:
            shutil.move(src, dst)
        except OSError as e:
            raise ApiError(f"Cannot rename station {station.station_id!r}: {e}") from e
        return Station(station_id=name, station_name=name)

    def delete(self, station: Station) -> None:
        # Only empty stations are removed; music files are never deleted.
        try:
            os.rmdir(self._station_dir(station))
        except OSError as e:
            raise ApiError(f"Cannot delete station {station.station_id!r}: {e}") from e

    def _load_ratings(self) -> Dict[str, int]:
        if not os.path.exists(self._ratings_path):
            return {}
        try:
            with open(self._ratings_path, "r") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"[CATALOG] Failed to load ratings: {e}")
            return {}

    def _save_ratings(self, ratings: Dict[str, int]) -> None:
        tmp = self._ratings_path + ".tmp"
        try:
            with open(tmp, "w") as f:
                json.dump(ratings, f, indent=2)
            os.replace(tmp, self._ratings_path)
        except OSError as e:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise ApiError(f"Failed to save ratings: {e}") from e
