"""
Contract tests for TrackLoader (track queue with lookahead).

- Tracks come out in catalog order, with or without prefetching
- Advertisements are dropped when skip_ads is set
- A track that cannot be opened is returned with its error, not raised
- close() discards the queue and closes a prefetched, unplayed source
"""

import pytest

from tuner.errors import DecodeError
from tuner.catalog.models import Track
from tuner.playback.track_loader import TrackLoader
from tuner.tests.contracts.test_doubles import FakeAudioSourceOpener, SourceSpec, make_track


def drain(loader):
    loaded = []
    while True:
        item = loader.next()
        if item is None:
            return loaded
        loaded.append(item)


class TestTrackLoaderOrder:

    @pytest.mark.parametrize("prefetch", [True, False])
    def test_fifo_order(self, prefetch):
        tracks = [make_track(name) for name in ("A", "B", "C")]
        loader = TrackLoader(tracks, FakeAudioSourceOpener(), prefetch=prefetch)

        loaded = drain(loader)
        assert [item.track for item in loaded] == tracks
        assert all(item.source is not None and item.error is None for item in loaded)

    def test_len_counts_pending_prefetch(self):
        loader = TrackLoader([make_track("A"), make_track("B")], FakeAudioSourceOpener())
        assert len(loader) == 2
        loader.next()
        assert len(loader) == 1
        loader.next()
        assert len(loader) == 0
        assert loader.next() is None

    def test_prefetch_opens_next_track_early(self):
        opener = FakeAudioSourceOpener()
        loader = TrackLoader([make_track("A"), make_track("B")], opener, prefetch=True)
        first = loader.next()
        assert first.track.song_name == "A"
        loader.close()
        assert "fake://B" in opener.opened, "Next track must be opened while the current one plays"

    def test_without_prefetch_opens_on_demand(self):
        opener = FakeAudioSourceOpener()
        loader = TrackLoader([make_track("A"), make_track("B")], opener, prefetch=False)
        assert opener.opened == []
        loader.next()
        assert opener.opened == ["fake://A"]


class TestTrackLoaderFiltering:

    def test_ads_skipped(self):
        tracks = [make_track("A"), make_track("ad1", ad=True), make_track("B")]
        loader = TrackLoader(tracks, FakeAudioSourceOpener(), skip_ads=True)
        assert [item.track.song_name for item in drain(loader)] == ["A", "B"]

    def test_ads_kept_when_not_skipping(self):
        tracks = [make_track("A"), make_track("ad1", ad=True)]
        loader = TrackLoader(tracks, FakeAudioSourceOpener(), skip_ads=False)
        loaded = drain(loader)
        assert len(loaded) == 2
        assert loaded[1].track.is_ad


class TestTrackLoaderFailures:

    def test_open_failure_returned_not_raised(self):
        opener = FakeAudioSourceOpener({"fake://B": SourceSpec(fail_open=True)})
        loader = TrackLoader([make_track("A"), make_track("B"), make_track("C")], opener)

        loaded = drain(loader)
        assert [item.track.song_name for item in loaded] == ["A", "B", "C"]
        assert isinstance(loaded[1].error, DecodeError)
        assert loaded[1].source is None
        assert loaded[2].error is None, "A failed track must not affect the next one"

    def test_track_without_audio_is_decode_error(self):
        loader = TrackLoader([Track(track_token="t", song_name="silent")], FakeAudioSourceOpener())
        loaded = loader.next()
        assert isinstance(loaded.error, DecodeError)

    def test_unexpected_open_exception_is_captured(self):
        def explode(locator):
            raise RuntimeError("boom")

        loader = TrackLoader([make_track("A")], FakeAudioSourceOpener(factory=explode))
        loaded = loader.next()
        assert isinstance(loaded.error, RuntimeError)


class TestTrackLoaderClose:

    def test_close_discards_and_closes_prefetched_source(self):
        opener = FakeAudioSourceOpener()
        loader = TrackLoader([make_track("A"), make_track("B"), make_track("C")], opener, prefetch=True)
        loader.next()
        loader.close()

        prefetched = opener.source_for("fake://B")
        assert prefetched is not None and prefetched.closed, "Unplayed prefetched source must be closed"
        assert loader.next() is None
        assert len(loader) == 0
        assert "fake://C" not in opener.opened

    def test_close_is_idempotent(self):
        loader = TrackLoader([make_track("A")], FakeAudioSourceOpener())
        loader.close()
        loader.close()
        assert loader.next() is None
