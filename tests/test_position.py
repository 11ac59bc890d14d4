"""
Unit Tests for Position / Game State

Tests for the two positioning modes:
    - ALGEBRAIC: start position plus the full move list, resent every time
    - FEN: absolute positions replacing each other
"""

import chess
import pytest

from uci_driver.errors import PositionStateError
from uci_driver.protocol.position import PositionMode, PositionState, Side, starting_fen


class TestStartingFen:

    def test_white_to_move(self):
        assert starting_fen(Side.WHITE) == chess.STARTING_FEN

    def test_black_to_move(self):
        assert starting_fen(Side.BLACK) == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR b KQkq - 0 1"


class TestAlgebraicMode:
    """Start position plus accumulated moves."""

    @pytest.fixture
    def state(self):
        state = PositionState()
        state.start(PositionMode.ALGEBRAIC, Side.WHITE)
        return state

    def test_new_game_has_empty_history(self, state):
        assert state.started
        assert state.move_history == ()
        assert state.command() == "position startpos"

    def test_full_history_is_resent(self, state):
        """Each advance resends every move, not just the new one."""
        assert state.advance("e2e4") == "position startpos moves e2e4"
        assert state.advance("d7d6") == "position startpos moves e2e4 d7d6"
        assert state.move_history == ("e2e4", "d7d6")

    def test_accepts_chess_move(self, state):
        state.advance(chess.Move.from_uci("g1f3"))

        assert state.move_history == ("g1f3",)

    def test_new_game_resets_history(self, state):
        state.advance("e2e4")

        command = state.start(PositionMode.ALGEBRAIC, Side.WHITE)

        assert command == "position startpos"
        assert state.move_history == ()


class TestFenMode:
    """Absolute positions."""

    @pytest.fixture
    def state(self):
        state = PositionState()
        state.start(PositionMode.FEN, Side.BLACK)
        return state

    def test_start_sends_side_specific_fen(self, state):
        assert state.command() == f"position fen {starting_fen(Side.BLACK)}"

    def test_white_start(self):
        state = PositionState()

        command = state.start(PositionMode.FEN, Side.WHITE)

        assert command == f"position fen {chess.STARTING_FEN}"

    def test_advance_replaces_position(self, state):
        fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"

        assert state.advance(fen) == f"position fen {fen}"
        assert state.fen == fen
        assert state.move_history == ()

    def test_accepts_chess_board(self, state):
        board = chess.Board()
        board.push_san("d4")

        assert state.advance(board) == f"position fen {board.fen()}"


class TestStateMachine:

    def test_advance_before_new_game(self):
        with pytest.raises(PositionStateError):
            PositionState().advance("e2e4")

    def test_reset_returns_to_uninitialized(self):
        state = PositionState()
        state.start(PositionMode.FEN, Side.BLACK)

        state.reset()

        assert not state.started
        assert state.fen is None
        assert state.mode is PositionMode.ALGEBRAIC
        with pytest.raises(PositionStateError):
            state.advance("e2e4")

    def test_mode_switch_on_new_game(self):
        state = PositionState()
        state.start(PositionMode.FEN, Side.WHITE)

        state.start(PositionMode.ALGEBRAIC, Side.WHITE)

        assert state.fen is None
        assert state.advance("e2e4") == "position startpos moves e2e4"
