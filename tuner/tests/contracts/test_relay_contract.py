"""
Contract tests for the command Relay.

- PAUSE/UNPAUSE act on the gate directly, never reaching the engine
- REPORT answers with the current status on the status channel
- PLAY/STOP/SKIP are forwarded unchanged and in order
- EXIT reopens the gate, is forwarded, and ends the relay thread
"""

import queue

import pytest

from tuner.playback.commands import EXIT, PAUSE, PLAY, REPORT, SKIP, STOP, UNPAUSE, Command
from tuner.playback.pause_gate import PauseGate
from tuner.playback.relay import Relay
from tuner.state.playback_state import PlaybackState
from tuner.state.status import Status
from tuner.tests.contracts.test_doubles import make_station, make_track


@pytest.fixture
def channels():
    return queue.Queue(), queue.Queue(), queue.Queue()


@pytest.fixture
def relay_parts(channels):
    commands, events, statuses = channels
    state = PlaybackState()
    gate = PauseGate()
    relay = Relay(commands, events, statuses, state, gate)
    return relay, commands, events, statuses, state, gate


class TestRelayHandling:

    def test_pause_and_unpause_toggle_gate(self, relay_parts):
        relay, _, events, _, _, gate = relay_parts
        assert relay.handle(Command(PAUSE)) is True
        assert gate.is_paused()
        assert relay.handle(Command(UNPAUSE)) is True
        assert not gate.is_paused()
        assert events.empty(), "PAUSE/UNPAUSE must not be forwarded to the engine"

    def test_report_sends_current_status(self, relay_parts):
        relay, _, events, statuses, state, _ = relay_parts
        track = make_track("A")
        state.update(Status.playing(track), track=track)

        relay.handle(Command(REPORT))
        assert statuses.get_nowait() == Status.playing(track)
        assert events.empty()

    def test_engine_commands_forwarded_in_order(self, relay_parts):
        relay, _, events, _, _, _ = relay_parts
        station = make_station()
        for command in (Command.play(station), Command(SKIP), Command(STOP)):
            relay.handle(command)

        forwarded = [events.get_nowait() for _ in range(3)]
        assert [e.kind for e in forwarded] == [PLAY, SKIP, STOP]
        assert forwarded[0].station == station

    def test_exit_reopens_gate_and_stops(self, relay_parts):
        relay, _, events, _, _, gate = relay_parts
        gate.pause()
        assert relay.handle(Command(EXIT)) is False
        assert not gate.is_paused(), "EXIT must reopen the gate so the engine can observe it"
        assert events.get_nowait().kind == EXIT


class TestRelayThread:

    def test_thread_terminates_after_exit(self, relay_parts, thread_leak_guard):
        relay, commands, events, _, _, _ = relay_parts
        relay.start()
        commands.put(Command(SKIP))
        commands.put(Command(EXIT))
        relay.join(timeout=1.0)
        assert not relay.is_alive()
        assert [events.get_nowait().kind for _ in range(2)] == [SKIP, EXIT]
