"""
Unit Tests for EngineSession

Tests the session against a ScriptedChannel:
    - Handshake at construction
    - set_option: exact lookup, one write or none
    - is_ready, new_game, advance_position, search
    - quit and post-termination behaviour
    - Timeouts and context-manager use
"""

import pytest
from unittest.mock import patch

from uci_driver.errors import (
    EngineTimeoutError,
    PositionStateError,
    ProtocolError,
    SessionTerminatedError,
)
from uci_driver.protocol.position import PositionMode, Side, starting_fen
from uci_driver.protocol.search import SearchOptions, SearchResult
from uci_driver.session.engine import EngineSession
from uci_driver.utils.testing import HANDSHAKE_LINES, ScriptedChannel


@pytest.fixture
def channel():
    return ScriptedChannel()


@pytest.fixture
def session(channel):
    return EngineSession(channel)


class TestConstruction:

    def test_handshake_runs_once(self, channel, session):
        assert channel.written == ["uci"]
        assert session.metadata.name == "Scripted Engine"
        assert session.metadata.author == "uci_driver"
        assert not session.terminated

    def test_repr(self, session):
        assert repr(session) == "EngineSession(engine='Scripted Engine', live)"


class TestSetOption:
    """Option configuration."""

    def test_unknown_option_sends_nothing(self, channel, session):
        assert session.set_option("NoSuchOption", 1) is False
        assert channel.written == ["uci"]

    def test_name_match_is_exact(self, channel, session):
        assert session.set_option("threads", 4) is False
        assert channel.written == ["uci"]

    def test_spin_value(self, channel, session):
        assert session.set_option("Threads", 4) is True
        assert channel.written[1:] == ["setoption name Threads value 4"]

    def test_check_value(self, channel, session):
        session.set_option("Ponder", False)

        assert channel.written[-1] == "setoption name Ponder value false"

    def test_string_value_with_spaced_name(self, channel, session):
        session.set_option("Analysis Contempt", "Off")

        assert channel.written[-1] == "setoption name Analysis Contempt value Off"

    def test_button(self, channel, session):
        session.set_option("Clear Hash")

        assert channel.written[-1] == "setoption name Clear Hash"

    def test_out_of_range_is_still_sent(self, channel, session):
        with patch("uci_driver.session.engine.logger") as mock_logger:
            assert session.set_option("Threads", 10000) is True

        mock_logger.warning.assert_called_once()
        assert channel.written[-1] == "setoption name Threads value 10000"

    def test_unbounded_spin_is_not_flagged(self):
        channel = ScriptedChannel({
            "uci": ["option name MultiPV type spin default 1", "uciok"],
        })
        session = EngineSession(channel)

        with patch("uci_driver.session.engine.logger") as mock_logger:
            assert session.set_option("MultiPV", 3) is True

        mock_logger.warning.assert_not_called()
        assert channel.written[-1] == "setoption name MultiPV value 3"

    def test_unsupported_value_type(self, channel, session):
        with pytest.raises(TypeError):
            session.set_option("Threads", 2.5)
        assert channel.written == ["uci"]


class TestIsReady:

    def test_ready(self, channel, session):
        assert session.is_ready() is True
        assert channel.written[-1] == "isready"

    def test_engine_gone(self):
        channel = ScriptedChannel({"uci": HANDSHAKE_LINES})
        session = EngineSession(channel)

        assert session.is_ready() is False

    def test_timeout(self):
        channel = ScriptedChannel({"uci": HANDSHAKE_LINES}, stall=True)
        session = EngineSession(channel)

        with pytest.raises(EngineTimeoutError):
            session.is_ready(timeout=0.01)

    def test_session_default_timeout(self):
        channel = ScriptedChannel({"uci": HANDSHAKE_LINES}, stall=True)
        session = EngineSession(channel, read_timeout=0.01)

        with pytest.raises(EngineTimeoutError):
            session.is_ready()

    def test_ready_line_must_match_exactly(self):
        channel = ScriptedChannel({"uci": HANDSHAKE_LINES, "isready": ["readyok "]})
        session = EngineSession(channel)

        assert session.is_ready() is False

    def test_late_readyok_is_discarded(self):
        channel = ScriptedChannel({"uci": HANDSHAKE_LINES}, stall=True)
        session = EngineSession(channel)
        with pytest.raises(EngineTimeoutError):
            session.is_ready(timeout=0.01)

        channel.feed("readyok")
        channel.script["isready"] = ["readyok"]

        assert session.is_ready(timeout=1.0) is True
        assert channel.commands("isready") == ["isready", "isready"]
        # Both readyok lines were consumed
        with pytest.raises(EngineTimeoutError):
            channel.read_line(timeout=0.01)


class TestGame:
    """new_game and advance_position."""

    def test_algebraic_game(self, channel, session):
        session.new_game(PositionMode.ALGEBRAIC, Side.WHITE)
        assert session.position.move_history == ()

        session.advance_position("e2e4")
        session.advance_position("d7d6")

        assert channel.written[1:] == [
            "ucinewgame",
            "position startpos",
            "position startpos moves e2e4",
            "position startpos moves e2e4 d7d6",
        ]

    def test_default_new_game_is_algebraic(self, session):
        session.new_game()

        assert session.position.mode is PositionMode.ALGEBRAIC

    def test_fen_game(self, channel, session):
        fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"

        session.new_game(PositionMode.FEN, Side.BLACK)
        session.advance_position(fen)

        assert channel.written[-2:] == [
            f"position fen {starting_fen(Side.BLACK)}",
            f"position fen {fen}",
        ]
        assert session.position.move_history == ()

    def test_advance_before_new_game(self, channel, session):
        with pytest.raises(PositionStateError):
            session.advance_position("e2e4")
        assert channel.written == ["uci"]


class TestSearch:
    """The go / bestmove exchange."""

    def test_movetime(self, channel, session):
        result = session.search(movetime=100)

        assert channel.written[-1] == "go movetime 100"
        assert result == SearchResult(best_move="e2e4", ponder_move="e7e5")

    def test_options_object(self, channel, session):
        session.search(SearchOptions(depth=12, nodes=0))

        assert channel.written[-1] == "go depth 12"

    def test_keywords_override_options(self, channel, session):
        session.search(SearchOptions(depth=12), depth=3)

        assert channel.written[-1] == "go depth 3"

    def test_unknown_keyword(self, channel, session):
        with pytest.raises(TypeError):
            session.search(movetim=100)
        assert channel.written == ["uci"]

    def test_without_ponder(self):
        channel = ScriptedChannel({"uci": HANDSHAKE_LINES, "go": ["bestmove e2e4"]})
        session = EngineSession(channel)

        assert session.search(depth=1) == SearchResult(best_move="e2e4", ponder_move="")

    def test_truncated_bestmove(self):
        channel = ScriptedChannel({"uci": HANDSHAKE_LINES, "go": ["bestmove"]})
        session = EngineSession(channel)

        with pytest.raises(ProtocolError):
            session.search(depth=1)

    def test_engine_exits_during_search(self):
        channel = ScriptedChannel({"uci": HANDSHAKE_LINES, "go": ["info depth 1"]})
        session = EngineSession(channel)

        with pytest.raises(ProtocolError):
            session.search(depth=1)

    def test_no_output_during_search(self):
        channel = ScriptedChannel({"uci": HANDSHAKE_LINES})
        session = EngineSession(channel)

        with pytest.raises(ProtocolError):
            session.search(depth=1)

    def test_late_bestmove_is_not_taken_as_next_answer(self):
        channel = ScriptedChannel({"uci": HANDSHAKE_LINES}, stall=True)
        session = EngineSession(channel)
        with pytest.raises(EngineTimeoutError):
            session.search(depth=20, timeout=0.01)

        channel.feed("info depth 20 score cp 15 pv a2a3", "bestmove a2a3")
        channel.script["go"] = ["bestmove e2e4"]

        assert session.search(depth=1, timeout=1.0).best_move == "e2e4"
        assert channel.commands("go") == ["go depth 20", "go depth 1"]

    def test_command_withheld_while_late_reply_is_missing(self):
        channel = ScriptedChannel({"uci": HANDSHAKE_LINES, "go": []}, stall=True)
        session = EngineSession(channel)
        with pytest.raises(EngineTimeoutError):
            session.search(depth=20, timeout=0.01)

        with pytest.raises(EngineTimeoutError) as excinfo:
            session.search(depth=1, timeout=0.01)

        assert excinfo.value.marker == "bestmove"
        assert channel.commands("go") == ["go depth 20"]

        channel.feed("bestmove a2a3")
        channel.script["go"] = ["bestmove e2e4"]
        assert session.search(depth=1, timeout=1.0).best_move == "e2e4"

    def test_quit_skips_late_reply(self):
        channel = ScriptedChannel({"uci": HANDSHAKE_LINES}, stall=True)
        session = EngineSession(channel)
        with pytest.raises(EngineTimeoutError):
            session.search(depth=20, timeout=0.01)

        session.quit()

        assert channel.written[-1] == "quit"
        assert channel.closed


class TestQuit:
    """Termination and use after it."""

    def test_quit(self, channel, session):
        session.new_game()
        session.advance_position("e2e4")

        session.quit()

        assert channel.written[-1] == "quit"
        assert channel.closed
        assert session.terminated
        assert session.metadata.options == []
        assert session.metadata.name == ""
        assert not session.position.started

    @pytest.mark.parametrize(
        "operation, args",
        [
            ("set_option", ("Threads", 2)),
            ("is_ready", ()),
            ("new_game", ()),
            ("advance_position", ("e2e4",)),
            ("search", ()),
            ("quit", ()),
        ],
    )
    def test_operations_after_quit(self, channel, session, operation, args):
        session.quit()
        written = list(channel.written)
        reads = channel.reads

        with pytest.raises(SessionTerminatedError) as exc_info:
            getattr(session, operation)(*args)

        assert exc_info.value.operation == operation
        assert channel.written == written
        assert channel.reads == reads

    def test_context_manager_quits(self, channel):
        with EngineSession(channel) as session:
            session.is_ready()

        assert session.terminated
        assert channel.written[-1] == "quit"

    def test_context_manager_after_explicit_quit(self, channel):
        with EngineSession(channel) as session:
            session.quit()

        assert channel.commands("quit") == ["quit"]
