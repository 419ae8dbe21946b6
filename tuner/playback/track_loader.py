"""
Track queue with single-track lookahead.

Holds the not-yet-played tracks of the current station in catalog order
and, when prefetching is enabled, opens the next track's AudioSource on a
background thread while the current one plays. Owned by the engine
thread; the background thread only ever touches its own _Prefetch slot.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Iterable, Optional

from tuner.catalog.models import Track
from tuner.decoding.audio_source import AudioSource, Source
from tuner.errors import DecodeError

logger = logging.getLogger(__name__)


@dataclass
class LoadedTrack:
    """
    A track popped from the queue together with its opened source.

    Exactly one of source / error is set.
    """
    track: Track
    source: Optional[Source] = None
    error: Optional[Exception] = None


class _Prefetch:
    def __init__(self, track: Track):
        self.track = track
        self.result: Optional[LoadedTrack] = None
        self.thread: Optional[threading.Thread] = None


class TrackLoader:
    """
    FIFO track queue for one station.

    next() always returns tracks in the order the catalog supplied them;
    skipping the in-flight track never reorders the remainder.
    """

    def __init__(
        self,
        tracks: Iterable[Track],
        audio_source: AudioSource,
        quality: str = "high",
        prefetch: bool = True,
        skip_ads: bool = True,
    ):
        """
        Initialize track loader.

        Args:
            tracks: Tracklist as returned by the catalog
            audio_source: Opener used for each track's locator
            quality: Preferred audio quality ("low", "medium", "high")
            prefetch: Open the next source in the background
            skip_ads: Drop advertisement entries
        """
        self._audio_source = audio_source
        self._quality = quality
        self._prefetch_enabled = prefetch
        self._tracks: deque[Track] = deque()
        self._pending: Optional[_Prefetch] = None
        self._closed = False

        skipped = 0
        for track in tracks:
            if skip_ads and track.is_ad:
                skipped += 1
                continue
            self._tracks.append(track)
        if skipped:
            logger.info(f"[TRACK_LOADER] Skipped {skipped} advertisement(s)")

        self._start_prefetch()

    def __len__(self) -> int:
        """Number of tracks not yet handed out (including a prefetched one)."""
        return len(self._tracks) + (1 if self._pending is not None else 0)

    def _load(self, track: Track) -> LoadedTrack:
        locator = track.locator(self._quality)
        try:
            if locator is None:
                raise DecodeError(f"Track has no audio: {track}")
            return LoadedTrack(track=track, source=self._audio_source.open(locator))
        except DecodeError as e:
            logger.warning(f"[TRACK_LOADER] Cannot open {track}: {e}")
            return LoadedTrack(track=track, error=e)
        except Exception as e:
            logger.error(f"[TRACK_LOADER] Unexpected error opening {track}: {e}", exc_info=True)
            return LoadedTrack(track=track, error=e)

    def _run_prefetch(self, pending: _Prefetch) -> None:
        pending.result = self._load(pending.track)
        logger.debug(f"[TRACK_LOADER] Prefetched {pending.track}")

    def _start_prefetch(self) -> None:
        if not self._prefetch_enabled or self._closed or self._pending is not None or not self._tracks:
            return
        pending = _Prefetch(self._tracks.popleft())
        pending.thread = threading.Thread(
            target=self._run_prefetch,
            args=(pending,),
            name="track-prefetch",
            daemon=True,
        )
        self._pending = pending
        pending.thread.start()

    def _take_pending(self) -> Optional[LoadedTrack]:
        pending = self._pending
        if pending is None:
            return None
        self._pending = None
        pending.thread.join()
        return pending.result

    def next(self) -> Optional[LoadedTrack]:
        """
        Pop the next track and its source.

        Blocks until a prefetch in flight completes.

        Returns:
            LoadedTrack, or None when the queue is exhausted
        """
        if self._closed:
            return None

        loaded = self._take_pending()
        if loaded is None:
            if not self._tracks:
                return None
            loaded = self._load(self._tracks.popleft())

        self._start_prefetch()
        return loaded

    def close(self) -> None:
        """Discard remaining tracks and close a prefetched source that was never played."""
        self._closed = True
        self._tracks.clear()
        loaded = self._take_pending()
        if loaded is not None and loaded.source is not None:
            loaded.source.close()
            logger.debug(f"[TRACK_LOADER] Discarded prefetched {loaded.track}")
