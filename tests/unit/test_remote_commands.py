"""
Unit tests for remote control of the engine.

Part of AMA-271: Workout Simulation Mode

Covers:
- WorkoutEngine.handle_remote_command (acks, idempotency, unknown tokens)
- RemoteCommandChannel (decode, serialized dispatch, link fan-out)
- RemoteStateMirror (stale snapshots, pending commands, disconnected state)
- Primary <-> companion loopback
"""

import json
import logging

import pytest

from application.remote import RemoteCommandChannel, RemoteStateMirror
from application.engine import WorkoutEngine
from domain.models.engine_state import (
    CommandAck,
    CommandStatus,
    EndReason,
    RemoteCommand,
    WorkoutPhase,
    WorkoutState,
)
from infrastructure.storage import InMemoryProgressStore
from tests.fakes import (
    FakeCueProvider,
    FakeRemoteLink,
    FakeStateBroadcaster,
    ManualClock,
    create_simple_workout,
    make_workout,
)

pytestmark = pytest.mark.unit


class _BrokenAnnouncer(FakeCueProvider):
    def announce_step(self, step):
        raise RuntimeError("speaker unavailable")


class _FailingProgressStore(InMemoryProgressStore):
    fail = False

    def save(self, progress):
        if self.fail:
            raise OSError("disk full")
        super().save(progress)


class _LoopbackLink:
    """Delivers every message straight into ``target``."""

    def __init__(self, name, target):
        self.name = name
        self._target = target
        self.sent = []

    def send(self, message):
        self.sent.append(message)
        self._target(message)


def _state(version: int, phase: WorkoutPhase = WorkoutPhase.RUNNING, ack=None) -> WorkoutState:
    return WorkoutState(stateVersion=version, workoutId="w", phase=phase, lastCommandAck=ack)


# =============================================================================
# Engine command handling
# =============================================================================


class TestHandleRemoteCommand:
    """Command dispatch, acks and idempotency on the engine."""

    def test_pause_command(self, engine, simple_workout):
        engine.start(simple_workout)
        ack = engine.handle_remote_command("PAUSE", "cmd-1")

        assert ack == CommandAck(commandId="cmd-1", status=CommandStatus.SUCCESS)
        assert engine.phase == WorkoutPhase.PAUSED
        assert engine.snapshot().lastCommandAck.commandId == "cmd-1"

    @pytest.mark.parametrize(
        "token,expected_index,expected_phase",
        [
            ("NEXT_STEP", 0, WorkoutPhase.RESTING),
            ("END", 0, WorkoutPhase.ENDED),
            ("PREV_STEP", 0, WorkoutPhase.RUNNING),
        ],
    )
    def test_command_tokens(self, engine, simple_workout, token, expected_index, expected_phase):
        engine.start(simple_workout)
        engine.handle_remote_command(token, "cmd-1")

        assert engine.current_step_index == expected_index
        assert engine.phase == expected_phase

    def test_skip_rest_and_resume_commands(self, engine, simple_workout):
        engine.start(simple_workout)
        engine.handle_remote_command(RemoteCommand.NEXT_STEP, "a")
        engine.handle_remote_command(RemoteCommand.SKIP_REST, "b")
        engine.handle_remote_command(RemoteCommand.PAUSE, "c")
        engine.handle_remote_command(RemoteCommand.RESUME, "d")

        assert engine.current_step_index == 1
        assert engine.phase == WorkoutPhase.RUNNING

    def test_end_command_reports_user_ended(self, engine, sink, simple_workout):
        engine.start(simple_workout)
        engine.handle_remote_command("END", "cmd-end")

        assert sink.last.end_reason == EndReason.USER_ENDED

    def test_duplicate_command_id_applied_once(self, engine, broadcaster, simple_workout):
        engine.start(simple_workout)
        first = engine.handle_remote_command("NEXT_STEP", "cmd-1")
        engine.skip_rest()
        version = engine.state_version
        second = engine.handle_remote_command("NEXT_STEP", "cmd-1")

        assert second == first
        assert engine.state_version == version
        assert engine.current_step_index == 1
        assert engine.has_handled("cmd-1")
        assert [a.commandId for a in broadcaster.acks] == ["cmd-1", "cmd-1"]

    def test_unknown_command_ignored(self, engine, broadcaster, simple_workout):
        engine.start(simple_workout)
        version = engine.state_version
        ack = engine.handle_remote_command("JUMP", "cmd-x")

        assert ack is None
        assert engine.state_version == version
        assert broadcaster.acks == []
        assert not engine.has_handled("cmd-x")

    def test_inapplicable_command_acked_without_mutation(self, engine, simple_workout):
        engine.start(simple_workout)
        version = engine.state_version
        ack = engine.handle_remote_command("RESUME", "cmd-2")

        assert ack.status == CommandStatus.SUCCESS
        assert engine.state_version == version
        assert engine.phase == WorkoutPhase.RUNNING

    def test_command_while_idle_is_inapplicable(self, engine):
        ack = engine.handle_remote_command("PAUSE", "cmd-idle")

        assert ack.status == CommandStatus.SUCCESS
        assert engine.phase == WorkoutPhase.IDLE
        assert engine.state_version == 0

    def test_failing_dispatch_produces_error_ack(self, engine, simple_workout, monkeypatch, caplog):
        engine.start(simple_workout)

        def boom():
            raise RuntimeError("display crashed")

        monkeypatch.setattr(engine, "pause", boom)
        with caplog.at_level(logging.ERROR):
            ack = engine.handle_remote_command("PAUSE", "cmd-err")

        assert ack.status == CommandStatus.ERROR
        assert ack.errorCode == "internal_error"
        assert engine.phase == WorkoutPhase.RUNNING
        assert "cmd-err" in caplog.text

    def test_failing_cue_does_not_break_command(self, clock, simple_workout, caplog):
        broadcaster = FakeStateBroadcaster()
        engine = WorkoutEngine(clock, broadcaster=broadcaster, cue_provider=_BrokenAnnouncer())
        engine.start(simple_workout)
        engine.next_step()
        version = engine.state_version

        with caplog.at_level(logging.ERROR):
            ack = engine.handle_remote_command("SKIP_REST", "cmd-1")
            engine.handle_remote_command("PREV_STEP", "cmd-2")

        assert ack.status == CommandStatus.SUCCESS
        assert engine.current_step_index == 0
        assert engine.state_version == version + 2
        assert broadcaster.last_state.stateVersion == engine.state_version
        assert clock.active_timer is not None
        assert engine.remaining_seconds == 30
        assert "Cue announce_step failed" in caplog.text

    def test_command_failing_after_mutation_still_publishes(self, clock, simple_workout):
        broadcaster = FakeStateBroadcaster()
        store = _FailingProgressStore()
        engine = WorkoutEngine(clock, broadcaster=broadcaster, progress_store=store)
        engine.start(simple_workout)
        engine.next_step()
        engine.skip_rest()
        version = engine.state_version
        store.fail = True

        ack = engine.handle_remote_command("PREV_STEP", "cmd-3")

        assert ack.status == CommandStatus.ERROR
        assert engine.current_step_index == 0
        assert engine.state_version == version + 1
        published = broadcaster.last_state
        assert published.stateVersion == engine.state_version
        assert published.stepIndex == 0
        assert published.lastCommandAck == ack
        assert clock.active_timer is not None

    def test_tick_failing_after_mutation_still_bumps_version(self, clock):
        broadcaster = FakeStateBroadcaster()
        store = _FailingProgressStore()
        engine = WorkoutEngine(clock, broadcaster=broadcaster, progress_store=store)
        engine.start(make_workout([{"kind": "time", "seconds": 2}, {"kind": "rest", "seconds": 5}]))
        store.fail = True
        version = engine.state_version

        with pytest.raises(OSError):
            clock.tick(2)

        assert engine.current_step_index == 1
        assert engine.state_version == version + 2
        assert broadcaster.last_state.stepIndex == 1

    def test_ack_cache_is_bounded(self, clock, simple_workout):
        engine = WorkoutEngine(clock, ack_cache_size=2)
        engine.start(simple_workout)
        for i in range(3):
            engine.handle_remote_command("RESUME", f"cmd-{i}")

        assert not engine.has_handled("cmd-0")
        assert engine.has_handled("cmd-2")


# =============================================================================
# RemoteCommandChannel
# =============================================================================


@pytest.fixture
def channel(engine):
    channel = RemoteCommandChannel()
    channel.attach(engine)
    return channel


@pytest.fixture
def wired(clock):
    """Engine whose broadcaster is a channel with one fake link."""
    link = FakeRemoteLink("watch")
    channel = RemoteCommandChannel(links=[link])
    engine = WorkoutEngine(clock, broadcaster=channel)
    channel.attach(engine)
    return engine, channel, link


class TestRemoteCommandChannel:
    """Inbound decoding and outbound fan-out."""

    def test_submit_command_message(self, engine, channel, simple_workout):
        engine.start(simple_workout)
        ack = channel.submit({"action": "command", "command": "PAUSE", "commandId": "c1"})

        assert ack.commandId == "c1"
        assert engine.phase == WorkoutPhase.PAUSED

    def test_submit_json_text(self, engine, channel, simple_workout):
        engine.start(simple_workout)
        channel.submit(json.dumps({"action": "command", "command": "NEXT_STEP", "commandId": "c1"}))

        assert engine.phase == WorkoutPhase.RESTING

    @pytest.mark.parametrize(
        "message",
        [
            {"action": "command", "command": "PAUSE"},
            {"action": "dance"},
            {"command": "PAUSE", "commandId": "c1"},
            "{not json",
            42,
        ],
    )
    def test_malformed_messages_dropped(self, engine, channel, simple_workout, message):
        engine.start(simple_workout)
        version = engine.state_version

        assert channel.submit(message) is None
        assert engine.state_version == version

    def test_request_state_answers_with_snapshot(self, wired, simple_workout):
        engine, channel, link = wired
        engine.start(simple_workout)
        link.sent.clear()

        assert channel.submit({"action": "requestState"}) is None
        updates = link.messages("stateUpdate")
        assert len(updates) == 1
        assert updates[0]["state"]["stateVersion"] == engine.state_version

    def test_broadcasts_state_and_ack_to_links(self, wired, simple_workout):
        engine, channel, link = wired
        engine.start(simple_workout)
        channel.submit_command("PAUSE", "c1")

        assert link.messages("stateUpdate")[-1]["state"]["phase"] == "paused"
        assert link.messages("commandAck")[-1] == {
            "action": "commandAck",
            "commandId": "c1",
            "status": "success",
            "errorCode": None,
        }

    def test_commands_submitted_mid_transition_are_queued(self, wired, simple_workout):
        engine, channel, link = wired
        results = []

        class ReentrantLink(FakeRemoteLink):
            def send(self, message):
                super().send(message)
                if message.get("action") == "commandAck" and message["commandId"] == "c1":
                    results.append(channel.submit_command("RESUME", "c2"))

        reentrant = ReentrantLink("phone")
        channel.add_link(reentrant)
        engine.start(simple_workout)
        channel.submit_command("PAUSE", "c1")

        assert results == [None]
        assert channel.pending_count == 0
        assert engine.phase == WorkoutPhase.RUNNING
        assert [m["commandId"] for m in reentrant.messages("commandAck")] == ["c1", "c2"]

    def test_unreachable_link_does_not_affect_engine(self, wired, simple_workout):
        engine, channel, link = wired
        other = FakeRemoteLink("phone")
        channel.add_link(other)
        link.reachable = False

        engine.start(simple_workout)
        channel.submit_command("PAUSE", "c1")

        assert engine.phase == WorkoutPhase.PAUSED
        assert channel.is_reachable("watch") is False
        assert channel.is_reachable("phone") is True
        assert other.messages("stateUpdate")

    def test_link_recovers(self, wired, simple_workout):
        engine, channel, link = wired
        link.reachable = False
        engine.start(simple_workout)
        link.reachable = True
        engine.pause()

        assert channel.is_reachable("watch") is True

    def test_remove_link(self, wired, simple_workout):
        engine, channel, link = wired
        channel.remove_link("watch")
        engine.start(simple_workout)

        assert link.sent == []
        assert channel.link_names == []

    def test_no_engine_attached(self):
        channel = RemoteCommandChannel()

        assert channel.submit_command("PAUSE", "c1") is None


# =============================================================================
# RemoteStateMirror
# =============================================================================


class TestRemoteStateMirror:
    """Companion-side view of the session."""

    def test_applies_newer_snapshot(self):
        mirror = RemoteStateMirror(FakeRemoteLink())

        assert mirror.apply_state(_state(3)) is True
        assert mirror.last_applied_version == 3
        assert mirror.display_status == "running"

    def test_discards_stale_and_duplicate_snapshots(self):
        mirror = RemoteStateMirror(FakeRemoteLink())
        mirror.apply_state(_state(5, WorkoutPhase.PAUSED))

        assert mirror.apply_state(_state(4)) is False
        assert mirror.apply_state(_state(5)) is False
        assert mirror.state.phase == WorkoutPhase.PAUSED

    def test_receive_state_update_message(self):
        mirror = RemoteStateMirror(FakeRemoteLink())
        changed = mirror.receive({"action": "stateUpdate", "state": _state(1).to_wire()})

        assert changed is True
        assert mirror.state.stateVersion == 1

    def test_receive_malformed_message(self):
        mirror = RemoteStateMirror(FakeRemoteLink())

        assert mirror.receive({"action": "stateUpdate"}) is False
        assert mirror.state is None

    def test_send_command_tracks_pending_until_ack(self):
        link = FakeRemoteLink()
        mirror = RemoteStateMirror(link)
        command_id = mirror.send_command(RemoteCommand.PAUSE, "c1")

        assert command_id == "c1"
        assert mirror.pending_command == RemoteCommand.PAUSE
        assert link.sent[-1] == {"action": "command", "command": "PAUSE", "commandId": "c1"}

        mirror.receive({"action": "commandAck", "commandId": "c1", "status": "success"})
        assert mirror.pending_command_ids == []
        assert mirror.last_ack.commandId == "c1"

    def test_ack_inside_snapshot_clears_pending(self):
        mirror = RemoteStateMirror(FakeRemoteLink())
        mirror.send_command(RemoteCommand.NEXT_STEP, "c1")
        mirror.apply_state(_state(2, ack=CommandAck(commandId="c1", status=CommandStatus.SUCCESS)))

        assert mirror.pending_command is None

    def test_unknown_ack_ignored(self):
        mirror = RemoteStateMirror(FakeRemoteLink())

        assert mirror.apply_ack(CommandAck(commandId="nope", status=CommandStatus.SUCCESS)) is False

    def test_generates_command_ids(self):
        mirror = RemoteStateMirror(FakeRemoteLink())

        first = mirror.send_command(RemoteCommand.PAUSE)
        second = mirror.send_command(RemoteCommand.RESUME)
        assert first and second and first != second

    def test_unreachable_primary_shows_disconnected(self):
        link = FakeRemoteLink(reachable=False)
        mirror = RemoteStateMirror(link)
        mirror.apply_state(_state(1))

        assert mirror.send_command(RemoteCommand.PAUSE) is None
        assert mirror.display_status == "disconnected"
        assert mirror.pending_command_ids == []

        link.reachable = True
        assert mirror.request_state() is True
        assert mirror.display_status == "running"

    def test_reset_accepts_restarted_versions(self):
        mirror = RemoteStateMirror(FakeRemoteLink())
        mirror.apply_state(_state(10))
        mirror.reset()

        assert mirror.apply_state(_state(1)) is True


# =============================================================================
# Loopback: companion <-> primary
# =============================================================================


class TestLoopback:
    """Mirror and channel wired back to back."""

    def _wire(self):
        clock = ManualClock()
        channel = RemoteCommandChannel()
        engine = WorkoutEngine(clock, broadcaster=channel)
        channel.attach(engine)
        mirror = RemoteStateMirror(_LoopbackLink("to-primary", channel.submit))
        channel.add_link(_LoopbackLink("to-companion", mirror.receive))
        return clock, engine, mirror

    def test_command_round_trip(self):
        clock, engine, mirror = self._wire()
        engine.start(create_simple_workout())
        mirror.send_command(RemoteCommand.PAUSE, "c1")

        assert engine.phase == WorkoutPhase.PAUSED
        assert mirror.state.phase == WorkoutPhase.PAUSED
        assert mirror.state.stateVersion == engine.state_version
        assert mirror.pending_command_ids == []

    def test_resent_command_not_reapplied(self):
        clock, engine, mirror = self._wire()
        engine.start(create_simple_workout())
        mirror.send_command(RemoteCommand.NEXT_STEP, "c1")
        engine.skip_rest()
        mirror.send_command(RemoteCommand.NEXT_STEP, "c1")

        assert engine.current_step_index == 1
        assert engine.phase == WorkoutPhase.RUNNING

    def test_request_state_syncs_mirror(self):
        clock, engine, mirror = self._wire()
        engine.start(create_simple_workout())
        clock.tick(3)  # throttled, not broadcast
        assert mirror.state.stateVersion == 1

        mirror.request_state()
        assert mirror.state.stateVersion == engine.state_version
        assert mirror.state.remainingMs == 27_000
