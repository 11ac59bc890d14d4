"""
UCI Engine Session

EngineSession drives one engine process through the UCI protocol. Every
public call performs one write and, where the protocol answers, one
blocking read up to a terminal line. Calls are never interleaved, so no
request identifiers are needed.

Session Flow:
    session = EngineSession.launch("/usr/bin/stockfish")  # uci ... uciok
    session.set_option("Threads", 2)                      # setoption ...
    session.is_ready()                                    # isready / readyok
    session.new_game()                                    # ucinewgame, position startpos
    session.advance_position("e2e4")                      # position startpos moves e2e4
    session.search(movetime=100)                          # go movetime 100 / bestmove ...
    session.quit()                                        # quit

Timeouts:
    Reads block forever unless a timeout is given, either per call or as
    the session default (read_timeout). An elapsed timeout raises
    EngineTimeoutError and remembers the terminal line still owed by the
    engine. The next command first reads and discards output up to that
    line, so a late reply is never taken as the answer to a new command.
    If that catch-up read times out too, the command is not sent.
"""

import functools
import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import chess

from uci_driver.errors import EngineTimeoutError, ProtocolError, SessionTerminatedError
from uci_driver.protocol.channel import LineChannel, ResponseReader, SubprocessChannel
from uci_driver.protocol.metadata import Metadata, discover
from uci_driver.protocol.options import OptionKind, OptionValue, format_option_value
from uci_driver.protocol.position import PositionMode, PositionState, Side
from uci_driver.protocol.search import (
    SEARCH_DONE,
    SearchOptions,
    SearchResult,
    build_go_command,
    parse_best_move,
)
from uci_driver.session.config import SessionConfig

logger = logging.getLogger(__name__)

READY_COMMAND = "isready"
READY_DONE = "readyok"
NEW_GAME_COMMAND = "ucinewgame"
QUIT_COMMAND = "quit"

_UNSET = object()


def _requires_live_session(method):
    """Raise SessionTerminatedError instead of calling method after quit()."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if self._terminated:
            raise SessionTerminatedError(method.__name__)
        return method(self, *args, **kwargs)

    return wrapper


class EngineSession:
    """
    Typed client session for one UCI engine.

    Attributes:
        metadata: Engine identity and options found during the handshake
        position: Current game state
        read_timeout: Default deadline for blocking reads (None = forever)

    Methods:
        set_option: Configure an engine option
        is_ready: Synchronisation probe
        new_game: Start a game in ALGEBRAIC or FEN mode
        advance_position: Play a move or set a new position
        search: Run "go" and return the best move
        quit: Stop the engine and invalidate the session
    """

    def __init__(self, channel: LineChannel, read_timeout: Optional[float] = None):
        """
        Take ownership of channel and run the UCI handshake.

        Args:
            channel: Line channel to an engine; the session becomes its only user
            read_timeout: Default deadline for blocking reads

        Raises:
            EngineTimeoutError: If read_timeout elapses during the handshake
        """
        self._channel = channel
        self._reader = ResponseReader(channel)
        self._terminated = False
        self._owed_marker: Optional[str] = None
        self.read_timeout = read_timeout
        self.position = PositionState()
        self.metadata: Metadata = discover(channel, self._reader, timeout=read_timeout)

    @classmethod
    def launch(
        cls,
        engine_path: Union[str, Path],
        args: Sequence[str] = (),
        read_timeout: Optional[float] = None,
    ) -> "EngineSession":
        """
        Start an engine process and open a session on it.

        Raises:
            EngineLaunchError: If the process cannot be started
        """
        channel = SubprocessChannel([str(engine_path), *args])
        try:
            return cls(channel, read_timeout=read_timeout)
        except BaseException:
            channel.close()
            raise

    @classmethod
    def from_config(cls, config: SessionConfig) -> "EngineSession":
        """
        Start a session as described by config and apply its options.

        Raises:
            EngineLaunchError: If the process cannot be started
        """
        channel = SubprocessChannel(config.command, wait_timeout=config.quit_timeout)
        try:
            session = cls(channel, read_timeout=config.read_timeout)

            for name, value in config.options.items():
                if not session.set_option(name, value):
                    logger.warning(f"Engine has no option named '{name}', skipped")
        except BaseException:
            channel.close()
            raise

        return session

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self._terminated:
            self.quit()

    def __repr__(self) -> str:
        state = "terminated" if self._terminated else "live"
        return f"EngineSession(engine={self.metadata.name!r}, {state})"

    @property
    def terminated(self) -> bool:
        return self._terminated

    def _send(self, command: str, timeout=_UNSET):
        self._catch_up(timeout)
        logger.debug(f">>> {command}")
        self._channel.write_line(command)

    def _catch_up(self, timeout):
        """Discard the late reply to a timed-out command."""
        if self._owed_marker is None:
            return
        if timeout is _UNSET:
            timeout = self.read_timeout

        marker = self._owed_marker
        lines = self._reader.read_until(marker, timeout=timeout)
        self._owed_marker = None
        logger.info(f"Discarded {len(lines)} late lines up to '{marker}'")

    def _receive(self, marker: str, timeout):
        if timeout is _UNSET:
            timeout = self.read_timeout
        try:
            return self._reader.read_until(marker, timeout=timeout)
        except EngineTimeoutError:
            self._owed_marker = marker
            raise

    @_requires_live_session
    def set_option(self, name: str, value: Optional[OptionValue] = None) -> bool:
        """
        Set an engine option.

        Args:
            name: Exact option name as declared by the engine
            value: bool, int or str; None for button options

        Returns:
            False if the engine declared no such option (nothing is sent),
            True once the command is written. UCI does not acknowledge it.

        Raises:
            TypeError: If value is not bool, int, str or None
        """
        option = self.metadata.get_option(name)
        if option is None:
            logger.debug(f"Unknown option '{name}', not sent")
            return False

        if value is None or option.kind is OptionKind.BUTTON:
            self._send(f"setoption name {name}")
            return True

        text = format_option_value(value)
        if not option.accepts(value):
            logger.warning(
                f"Value {text!r} is outside the declared range of option '{name}'"
            )

        self._send(f"setoption name {name} value {text}")
        return True

    @_requires_live_session
    def is_ready(self, timeout=_UNSET) -> bool:
        """
        Ask the engine whether it is ready for more commands.

        Args:
            timeout: Deadline in seconds (default: session read_timeout)

        Returns:
            True iff the engine answered "readyok"
        """
        self._send(READY_COMMAND, timeout)
        lines = self._receive(READY_DONE, timeout)
        return bool(lines) and lines[-1] == READY_DONE

    @_requires_live_session
    def new_game(self, mode: PositionMode = PositionMode.ALGEBRAIC, side: Side = Side.WHITE):
        """
        Start a new game from the standard starting position.

        Args:
            mode: ALGEBRAIC to send move lists, FEN to send full positions
            side: Side to move first (FEN mode only)
        """
        logger.info(f"New game: mode={mode.name}, side={side.name}")
        self._send(NEW_GAME_COMMAND)
        self._send(self.position.start(mode, side))

    @_requires_live_session
    def advance_position(self, token: Union[str, chess.Move, chess.Board]):
        """
        Advance the game.

        Args:
            token: ALGEBRAIC mode: one move, e.g. "e2e4". FEN mode: the full
                new position as a FEN string or chess.Board.

        Raises:
            PositionStateError: If new_game() has not been called
        """
        self._send(self.position.advance(token))

    @_requires_live_session
    def search(
        self,
        options: Optional[SearchOptions] = None,
        timeout=_UNSET,
        **limits,
    ) -> SearchResult:
        """
        Search the current position.

        Args:
            options: Search parameters
            timeout: Deadline in seconds (default: session read_timeout)
            **limits: SearchOptions fields, e.g. movetime=100, depth=12;
                override the matching fields of options

        Returns:
            SearchResult with the best move and the ponder move ("" if none)

        Raises:
            ProtocolError: If the engine's answer is not a valid bestmove line
        """
        if options is None:
            options = SearchOptions()
        if limits:
            unknown = set(limits) - set(SearchOptions.field_names())
            if unknown:
                raise TypeError(f"Unknown search parameters: {', '.join(sorted(unknown))}")
            options = SearchOptions(**{**vars(options), **limits})

        self._send(build_go_command(options), timeout)
        lines = self._receive(SEARCH_DONE, timeout)
        if not lines:
            raise ProtocolError("Engine output ended before bestmove")

        result = parse_best_move(lines[-1])
        logger.info(f"Search result: bestmove={result.best_move} ponder={result.ponder_move or '-'}")
        return result

    @_requires_live_session
    def quit(self):
        """
        Stop the engine and invalidate the session.

        Every later call raises SessionTerminatedError without touching the
        engine.
        """
        logger.info(f"Quitting engine '{self.metadata.name}'")
        self._owed_marker = None
        self._send(QUIT_COMMAND)
        self._channel.close()

        self.metadata.clear()
        self.position.reset()
        self._terminated = True
