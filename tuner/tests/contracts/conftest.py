"""
Shared pytest fixtures for Tuner contract tests.

Contract tests use test doubles (fakes, stubs, recorders) to avoid real
dependencies. No ffmpeg, audio device or network is used.
"""

import threading

import pytest

from tuner.config import TunerConfig
from tuner.playback.player import Player
from tuner.tests.contracts.test_doubles import (
    LONG_TRACK,
    FakeAudioSourceOpener,
    FakeCatalogClient,
    RecordingSinkFactory,
    SourceSpec,
    make_station,
    make_track,
)


@pytest.fixture
def station():
    return make_station("st1")


@pytest.fixture
def other_station():
    return make_station("st2")


@pytest.fixture
def tracks():
    """Three regular tracks A, B, C."""
    return [make_track("A"), make_track("B"), make_track("C")]


@pytest.fixture
def fake_catalog(station, other_station, tracks):
    return FakeCatalogClient({
        station.station_id: tracks,
        other_station.station_id: [make_track("X"), make_track("Y")],
    })


@pytest.fixture
def long_opener():
    """Opener whose tracks play for several seconds unless interrupted."""
    return FakeAudioSourceOpener(default=LONG_TRACK)


@pytest.fixture
def short_opener():
    """Opener whose tracks finish almost immediately."""
    return FakeAudioSourceOpener(default=SourceSpec(chunks=3))


@pytest.fixture
def sink_factory():
    return RecordingSinkFactory()


@pytest.fixture
def test_config():
    return TunerConfig(shutdown_timeout_sec=2.0, output_sink_mode="null")


@pytest.fixture
def make_player(fake_catalog, long_opener, sink_factory, test_config):
    """
    Factory for Players wired to test doubles.

    Every player created is closed at teardown.
    """
    players = []

    def _make(catalog=None, audio_source=None, factory=None, config=None):
        player = Player(
            catalog or fake_catalog,
            audio_source=audio_source or long_opener,
            sink_factory=factory or sink_factory,
            config=config or test_config,
        )
        players.append(player)
        return player

    yield _make
    for player in players:
        player.close()


@pytest.fixture(autouse=False)
def thread_leak_guard():
    """
    Optional fixture to detect thread leaks between tests.

    Ensures shutdown contracts are actually respected across tests.
    Request it explicitly in tests that must not leave threads behind.
    """
    before = set(t.ident for t in threading.enumerate())
    yield
    after = set(t.ident for t in threading.enumerate() if t.is_alive())
    leaked = after - before
    if leaked:
        leaked_threads = [t for t in threading.enumerate() if t.ident in leaked]
        thread_info = '\n'.join(f"  - {t.name} (daemon={t.daemon})" for t in leaked_threads)
        assert False, f"Thread leak detected, shutdown incomplete.\nLeaked threads:\n{thread_info}"
