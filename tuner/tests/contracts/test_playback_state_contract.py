"""
Contract tests for PlaybackState.

- Initial status is SHUTDOWN until the engine announces STANDBY
- Progress exists only while a track is PLAYING or PAUSED
- clear() resets every field together
- Readers never observe a half-applied update
"""

import threading

from tuner.errors import ErrorInfo
from tuner.state.playback_state import PlaybackState
from tuner.state.status import Status
from tuner.tests.contracts.test_doubles import make_station, make_track


class TestPlaybackStateUpdates:

    def test_initial_state(self):
        state = PlaybackState()
        snapshot = state.snapshot()
        assert snapshot.status.is_shutdown(), "Status must be SHUTDOWN before the engine starts"
        assert snapshot.station is None
        assert snapshot.track is None
        assert snapshot.progress is None

    def test_update_keeps_omitted_fields(self):
        state = PlaybackState()
        station = make_station()
        track = make_track("A")
        state.update(Status.started(station), station=station)
        state.update(Status.playing(track), track=track)
        state.update(Status.paused(track))

        snapshot = state.snapshot()
        assert snapshot.station == station
        assert snapshot.track == track
        assert snapshot.status == Status.paused(track)

    def test_update_can_clear_fields(self):
        state = PlaybackState()
        station = make_station()
        track = make_track("A")
        state.update(Status.playing(track), station=station, track=track)
        state.update(Status.finished(track), track=None)

        snapshot = state.snapshot()
        assert snapshot.track is None
        assert snapshot.station == station

    def test_progress_only_while_playing_or_paused(self):
        state = PlaybackState()
        track = make_track("A")

        state.update(Status.fetching(make_station()))
        state.set_progress(3, 10)
        assert state.snapshot().progress is None, "Progress must be ignored outside PLAYING/PAUSED"

        state.update(Status.playing(track), track=track)
        state.set_progress(3, 10)
        assert state.snapshot().progress == (3, 10)

        state.update(Status.paused(track))
        assert state.snapshot().progress == (3, 10), "Pausing keeps progress"

        state.update(Status.finished(track), track=None)
        assert state.snapshot().progress is None, "Leaving a track drops progress"

    def test_error_status_drops_progress(self):
        state = PlaybackState()
        track = make_track("A")
        state.update(Status.playing(track), track=track)
        state.set_progress(1, 5)
        state.update(Status.failed(ErrorInfo("decode", "bad")))
        assert state.snapshot().progress is None

    def test_clear_resets_everything(self):
        state = PlaybackState()
        track = make_track("A")
        state.update(Status.playing(track), station=make_station(), track=track)
        state.set_progress(2, 4)

        state.clear()
        snapshot = state.snapshot()
        assert snapshot.station is None
        assert snapshot.track is None
        assert snapshot.progress is None
        assert snapshot.status.is_standby()


class TestPlaybackStateConsistency:

    def test_snapshot_never_mixes_updates(self):
        """A concurrent reader must see track and status from the same update."""
        state = PlaybackState()
        station = make_station()
        tracks = [make_track(name) for name in ("A", "B", "C")]
        stop = threading.Event()
        violations = []

        def writer():
            while not stop.is_set():
                for track in tracks:
                    state.update(Status.playing(track), station=station, track=track)
                    state.set_progress(1, 2)
                    state.update(Status.finished(track), track=None)

        def reader():
            for _ in range(5000):
                snapshot = state.snapshot()
                if snapshot.status.is_playing() and snapshot.status.track != snapshot.track:
                    violations.append(snapshot)
                if snapshot.progress is not None and not snapshot.status.is_playing():
                    violations.append(snapshot)

        writer_thread = threading.Thread(target=writer)
        writer_thread.start()
        try:
            reader()
        finally:
            stop.set()
            writer_thread.join(timeout=2.0)

        assert not violations, f"Inconsistent snapshots observed: {violations[:3]}"
