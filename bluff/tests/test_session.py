"""
Tests for sessions, boundary guards and scripted-turn driving.

Tests:
- Session lifecycle via SessionManager
- Guards return notices instead of raising
- Listener notification
- Synchronous scripted runs
- The asyncio turn scheduler
"""

import asyncio

import pytest

from ..engine_core.cards import Rank
from ..engine_core.rules import check_integrity
from ..engine_core.state import MatchPhase
from ..errors import SchedulerError, SessionNotFoundError
from ..session import (
    LoopState,
    TurnScheduler,
    loop_state_for,
    next_scripted_actor,
    run_scripted_turns,
)


def _human_vs_computers(session, computers=2):
    session.add_participant("Alice")
    for _ in range(computers):
        session.add_scripted_participant()


class TestSessionManager:
    """Tests for session bookkeeping."""

    def test_create_and_get(self, manager):
        session = manager.create_session(seed=1)
        assert manager.get_session(session.session_id) is session
        assert session.session_id in manager.list_sessions()
        assert session.state.phase is MatchPhase.LOBBY

    def test_require_unknown_raises(self, manager):
        with pytest.raises(SessionNotFoundError):
            manager.require_session("nope")

    def test_end_session(self, manager):
        session = manager.create_session()
        assert manager.end_session(session.session_id)
        assert not manager.end_session(session.session_id)
        assert manager.get_session(session.session_id) is None

    def test_cleanup_only_drops_finished_sessions(self, manager):
        active = manager.create_session(seed=3)
        finished = manager.create_session(seed=4)
        for _ in range(2):
            finished.add_scripted_participant()
        finished.start_game()
        run_scripted_turns(finished)
        assert finished.state.ended

        active.created_at -= 7200
        finished.created_at -= 7200
        assert manager.cleanup_stale_sessions(max_age_seconds=3600) == 1
        assert manager.list_sessions() == [active.session_id]
        assert manager.list_active_sessions() == [active.session_id]

    def test_same_seed_same_match(self, manager):
        a = manager.create_session(seed=9)
        b = manager.create_session(seed=9)
        for s in (a, b):
            _human_vs_computers(s)
            s.start_game()
        assert a.state == b.state


class TestGuards:
    """Boundary guards turn bad intents into notices."""

    def test_add_after_start(self, session):
        _human_vs_computers(session, computers=1)
        session.start_game()

        notice = session.add_participant("Bob")
        assert notice.code == "GAME_STARTED"
        assert notice.title == "Game already started"
        assert session.state.num_players == 2

    def test_blank_name(self, session):
        notice = session.add_participant("  ")
        assert notice.code == "INVALID_NAME"
        assert session.state.players == ()

    def test_not_enough_players(self, session):
        session.add_participant("Alice")
        notice = session.start_game()
        assert notice.code == "NOT_ENOUGH_PLAYERS"
        assert "at least 2" in notice.description

    def test_play_in_lobby(self, session):
        session.add_participant("Alice")
        notice = session.play_cards([], Rank.ACE, "player-1")
        assert notice.title == "Game not in progress"

    def test_play_without_cards(self, session):
        _human_vs_computers(session, computers=1)
        session.start_game()
        notice = session.play_cards([], Rank.ACE, "player-1")
        assert notice.code == "INVALID_CARDS"

    def test_play_without_rank(self, session):
        _human_vs_computers(session, computers=1)
        session.start_game()
        alice = session.state.players[0]
        notice = session.play_cards(alice.hand[:1], None, alice.player_id)
        assert notice.code == "INVALID_RANK"

    def test_cannot_pass_or_challenge_own_claim(self, session):
        _human_vs_computers(session, computers=1)
        session.start_game()
        alice = session.state.players[0]
        assert session.play_cards(alice.hand[:2], "Q", alice.player_id) is None

        assert session.pass_turn(alice.player_id).title == "Cannot pass your turn"
        assert session.challenge_claim(alice.player_id).title == "Cannot challenge yourself"

    def test_reducer_rejection_becomes_notice(self, session):
        _human_vs_computers(session, computers=1)
        session.start_game()
        computer = session.state.players[1]
        before = session.state

        notice = session.play_cards(computer.hand[:1], Rank.TWO, computer.player_id)
        assert notice.title == "Action not allowed"
        assert notice.code == "NOT_YOUR_TURN"
        assert session.state is before

    def test_game_over_guard(self, session):
        for _ in range(2):
            session.add_scripted_participant()
        session.start_game()
        run_scripted_turns(session)

        notice = session.pass_turn("computer-1")
        assert notice.code == "GAME_OVER"

    def test_notices_are_drained(self, session):
        session.start_game()
        session.add_participant("")
        notices = session.get_notices()
        assert [n.code for n in notices] == ["NOT_ENOUGH_PLAYERS", "INVALID_NAME"]
        assert session.get_notices() == []


class TestSnapshots:
    """Tests for versioning and listeners."""

    def test_version_counts_applied_actions(self, session):
        session.add_participant("Alice")
        session.add_participant("   ")
        session.add_scripted_participant()
        assert session.version == 2

    def test_listeners_see_every_snapshot(self, session):
        seen = []
        unsubscribe = session.subscribe(seen.append)

        session.add_participant("Alice")
        session.add_participant("Bob")
        unsubscribe()
        session.add_participant("Carol")

        assert [s.num_players for s in seen] == [1, 2]

    def test_failing_listener_does_not_break_dispatch(self, session):
        def broken(state):
            raise RuntimeError("boom")

        session.subscribe(broken)
        assert session.add_participant("Alice") is None
        assert session.state.num_players == 1

    def test_scripted_participants_get_a_policy(self, session):
        session.add_scripted_participant()
        assert "computer-1" in session.bots


class TestNextScriptedActor:
    """Tests for choosing who acts next."""

    def test_nobody_in_lobby(self, session):
        session.add_scripted_participant()
        assert next_scripted_actor(session.state) is None

    def test_human_turn_waits(self, session):
        _human_vs_computers(session)
        session.start_game()
        assert next_scripted_actor(session.state) is None
        assert loop_state_for(session.state) is LoopState.WAITING_HUMAN_ACTION

    def test_responders_after_human_claim(self, session):
        _human_vs_computers(session)
        session.start_game()
        alice = session.state.players[0]
        session.play_cards(alice.hand[:1], "A", alice.player_id)

        # Turn moved to computer-2, who answers first
        assert next_scripted_actor(session.state) == "computer-2"
        session.pass_turn("computer-2")
        assert next_scripted_actor(session.state) == "computer-3"


class TestRunScriptedTurns:
    """Tests for the synchronous driver."""

    def test_all_computer_match_finishes(self, session):
        for _ in range(3):
            session.add_scripted_participant()
        session.start_game()

        result = run_scripted_turns(session)

        assert result.success
        assert result.loop_state is LoopState.GAME_OVER
        assert result.winner == session.state.winner_id is not None
        assert result.steps == len(session.state.action_history)
        assert check_integrity(session.state) == []

    def test_stops_for_human(self, session):
        _human_vs_computers(session)
        session.start_game()
        alice = session.state.players[0]
        session.play_cards(alice.hand[:1], "A", alice.player_id)

        result = run_scripted_turns(session)

        assert result.success
        assert result.loop_state in (LoopState.WAITING_HUMAN_ACTION, LoopState.GAME_OVER)
        assert result.steps >= 1
        assert result.scripted_actions

    def test_step_limit(self, session):
        for _ in range(2):
            session.add_scripted_participant()
        session.start_game()

        result = run_scripted_turns(session, max_steps=3)
        assert result.steps == 3
        assert result.loop_state is LoopState.RUNNING_SCRIPTED


class TestTurnScheduler:
    """Tests for the asyncio scheduler."""

    def test_needs_running_loop(self, session):
        with pytest.raises(SchedulerError):
            TurnScheduler(session, delay=0).start()

    def test_plays_computer_match_to_the_end(self, session):
        for _ in range(3):
            session.add_scripted_participant()

        async def scenario():
            scheduler = TurnScheduler(session, delay=0)
            scheduler.start()
            session.start_game()
            await scheduler.wait_idle(timeout=10)
            scheduler.stop()

        asyncio.run(scenario())
        assert session.state.ended
        assert check_integrity(session.state) == []

    def test_idle_on_human_turn(self, session):
        _human_vs_computers(session)

        async def scenario():
            scheduler = TurnScheduler(session, delay=0)
            scheduler.start()
            session.start_game()
            await scheduler.wait_idle(timeout=1)
            assert scheduler.pending_actor is None

            alice = session.state.players[0]
            session.play_cards(alice.hand[:1], "A", alice.player_id)
            assert scheduler.pending_actor == "computer-2"
            await scheduler.wait_idle(timeout=10)
            scheduler.stop()

        asyncio.run(scenario())
        assert loop_state_for(session.state) in (
            LoopState.WAITING_HUMAN_ACTION,
            LoopState.GAME_OVER,
        )

    def test_state_change_cancels_pending_action(self, session):
        _human_vs_computers(session)

        async def scenario():
            scheduler = TurnScheduler(session, delay=60)
            scheduler.start()
            session.start_game()
            alice = session.state.players[0]
            session.play_cards(alice.hand[:1], "A", alice.player_id)
            assert scheduler.pending_actor == "computer-2"

            # A reset invalidates the pending turn
            session.reset_game()
            assert scheduler.pending_actor is None
            scheduler.stop()

        asyncio.run(scenario())
        assert session.state.phase is MatchPhase.LOBBY

    def test_stale_timer_is_dropped(self, session):
        _human_vs_computers(session)

        async def scenario():
            scheduler = TurnScheduler(session, delay=60)
            scheduler.start()
            session.start_game()
            alice = session.state.players[0]
            session.play_cards(alice.hand[:1], "A", alice.player_id)
            stale_version = session.version
            session.pass_turn("computer-2")
            version = session.version

            scheduler._fire("computer-3", stale_version)
            assert session.version == version
            scheduler.stop()

        asyncio.run(scenario())
