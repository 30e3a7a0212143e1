"""
Tests for sessions and the key-driven game loop.

Tests:
- Session lifecycle
- Key handling (moves and Backspace)
- Estimates through the loop
"""

import time

from ..games import get_game
from ..session import (
    GameLoop,
    LoopState,
    SessionState,
    TurnAction,
    UNDO_KEY,
    WinnerEstimate,
    OptionEstimate,
)
from ..session.game_loop import token_sort_key
from ..engine_core import NO_PLAYER


class TestSessionManager:
    """Tests for SessionManager."""

    def test_create_session(self, session_manager):
        session = session_manager.create_session(get_game("modulo"))

        assert session.state == SessionState.ACTIVE
        assert session.is_active()
        assert session.transcript.lines == list(get_game("modulo").intro)
        assert session_manager.get_session(session.session_id) is session

    def test_sessions_are_independent(self, session_manager):
        """Each session owns its engine; moves in one do not leak into another."""
        first = session_manager.create_session(get_game("modulo"))
        second = session_manager.create_session(get_game("modulo"))

        first.engine.submit_input("2")

        assert first.engine is not second.engine
        assert second.engine.active_player() == NO_PLAYER
        assert len(second.transcript) == 2

    def test_list_sessions(self, session_manager):
        first = session_manager.create_session(get_game("modulo"))
        second = session_manager.create_session(get_game("tictactoe"))
        second.engine.submit_input("0")

        assert set(session_manager.list_sessions()) == {first.session_id, second.session_id}
        assert set(session_manager.list_active_sessions()) == {first.session_id, second.session_id}

    def test_finished_game_not_active(self, session_manager):
        session = session_manager.create_session(get_game("modulo"))
        for token in ["1", "3"]:
            session.engine.submit_input(token)
        session.sync_state()

        assert session.state == SessionState.GAME_OVER
        assert session.is_ended()
        assert session_manager.list_active_sessions() == []
        assert session_manager.list_sessions() == [session.session_id]

    def test_end_session(self, session_manager):
        session = session_manager.create_session(get_game("modulo"))

        assert session_manager.end_session(session.session_id, reason="user_ended")
        assert session.state == SessionState.ABANDONED
        assert session.transcript.lines == []
        assert session_manager.get_session(session.session_id) is None
        assert not session_manager.end_session(session.session_id)

    def test_end_completed_session(self, session_manager):
        session = session_manager.create_session(get_game("modulo"))
        for token in ["1", "3"]:
            session.engine.submit_input(token)

        session_manager.end_session(session.session_id)

        assert session.state == SessionState.GAME_OVER

    def test_cleanup_stale_sessions(self, session_manager):
        stale = session_manager.create_session(get_game("modulo"))
        fresh = session_manager.create_session(get_game("modulo"))
        stale.last_activity = time.time() - 7200

        removed = session_manager.cleanup_stale_sessions(max_idle_seconds=3600)

        assert removed == 1
        assert session_manager.list_sessions() == [fresh.session_id]


class TestGameLoopKeys:
    """Tests for key handling."""

    def test_move_key(self, modulo_loop):
        result = modulo_loop.handle_key("2")

        assert result.applied
        assert result.action == TurnAction.INPUT
        assert result.loop_state == LoopState.WAITING_INPUT
        assert result.active_player == 1
        assert result.options == [str(i) for i in range(10)]
        assert result.lines[-1] == "Player 1, enter a number (0-9):"

    def test_unknown_key_ignored(self, modulo_loop):
        before = modulo_loop.snapshot()

        result = modulo_loop.handle_key("Enter")

        assert not result.applied
        assert result.action == TurnAction.IGNORED
        assert result.lines == before.lines

    def test_backspace_undoes(self, modulo_loop):
        modulo_loop.handle_key("2")
        modulo_loop.handle_key("3")

        result = modulo_loop.handle_key(UNDO_KEY)

        assert result.applied
        assert result.action == TurnAction.UNDO
        assert result.active_player == 1
        assert "> 3" not in result.lines

    def test_backspace_at_root_ignored(self, modulo_loop):
        result = modulo_loop.handle_key(UNDO_KEY)

        assert not result.applied
        assert result.action == TurnAction.IGNORED

    def test_full_game(self, modulo_loop):
        for key in ["2", "3"]:
            modulo_loop.handle_key(key)

        result = modulo_loop.handle_key("4")

        assert result.loop_state == LoopState.GAME_OVER
        assert result.winner == 2
        assert result.options == []
        assert modulo_loop.session.state == SessionState.GAME_OVER

    def test_undo_reopens_finished_game(self, modulo_loop):
        for key in ["2", "3", "4"]:
            modulo_loop.handle_key(key)

        result = modulo_loop.handle_key(UNDO_KEY)

        assert result.loop_state == LoopState.WAITING_INPUT
        assert result.winner is None
        assert modulo_loop.session.state == SessionState.ACTIVE

    def test_draw_has_no_winner(self, ttt_loop):
        for key in ["0", "1", "2", "4", "3", "5", "7", "6"]:
            ttt_loop.handle_key(key)

        result = ttt_loop.handle_key("8")

        assert result.loop_state == LoopState.GAME_OVER
        assert result.winner is None

    def test_abandoned_session_ignores_keys(self, session_manager, modulo_loop):
        session_manager.end_session(modulo_loop.session.session_id, reason="user_ended")

        assert not modulo_loop.handle_key("2").applied
        assert not modulo_loop.handle_key(UNDO_KEY).applied


class TestGameLoopEstimates:
    """Tests for estimates through the loop."""

    def test_winner_estimate(self, ttt_loop):
        ttt_loop.handle_key("4")

        estimate = ttt_loop.estimate_winner(50)

        assert estimate.iterations == 50
        assert sum(estimate.wins.values()) <= 50
        players = [player for player, _, _ in estimate.ranked()]
        assert players == sorted(players)

    def test_winner_estimate_after_game_over(self, modulo_loop):
        for key in ["1", "3"]:
            modulo_loop.handle_key(key)

        assert modulo_loop.estimate_winner(10) is None

    def test_option_estimate_during_setup(self, modulo_loop):
        assert modulo_loop.estimate_options(10) is None

    def test_option_estimate_ranked(self, modulo_loop):
        for key in ["2", "3"]:
            modulo_loop.handle_key(key)

        estimate = modulo_loop.estimate_options(10)

        assert estimate.player == 2
        ranked = [option for option, _, _ in estimate.ranked()]
        assert ranked[:5] == ["0", "2", "4", "6", "8"]
        assert estimate.probability("4") == 1.0
        assert estimate.probability("5") == 0.0

    def test_estimates_leave_transcript(self, modulo_loop):
        modulo_loop.handle_key("3")
        before = modulo_loop.snapshot()

        modulo_loop.estimate_winner(20)
        modulo_loop.estimate_options(5)

        assert modulo_loop.snapshot() == before


class TestEstimateModels:
    """Tests for the estimate result helpers."""

    def test_probability_with_zero_iterations(self):
        assert WinnerEstimate(iterations=0).probability(1) == 0.0
        assert OptionEstimate(player=1, iterations_per_option=0).probability("a") == 0.0

    def test_option_ties_sorted_numerically(self):
        estimate = OptionEstimate(
            player=1,
            iterations_per_option=4,
            wins={"10": 2, "9": 2, "b": 3, "a": 2},
        )

        assert [option for option, _, _ in estimate.ranked()] == ["b", "9", "10", "a"]

    def test_token_sort_key(self):
        assert sorted(["10", "2", "x", "1"], key=token_sort_key) == ["1", "2", "10", "x"]
