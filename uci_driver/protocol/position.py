"""
Position / Game State

UCI position commands are stateless from the engine's point of view: every
"position" command fully describes the board. The client therefore keeps
the game and rebuilds the command each time.

Two exclusive modes:

    ALGEBRAIC  start position plus the full move list
               position startpos moves e2e4 e7e5 g1f3
    FEN        one absolute board description, replaced on each advance
               position fen rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1

In ALGEBRAIC mode the whole history is resent on every move, which is
quadratic in game length overall.
"""

from enum import Enum
from typing import Optional, Tuple, Union

import chess

from uci_driver.errors import PositionStateError


class PositionMode(Enum):
    """How positions are communicated to the engine."""
    ALGEBRAIC = 0
    FEN = 1


class Side(Enum):
    """Side to move at the start of a FEN game."""
    WHITE = chess.WHITE
    BLACK = chess.BLACK


def starting_fen(side: Side) -> str:
    """
    Standard starting position with the given side to move.

    Example:
        >>> starting_fen(Side.BLACK)
        'rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR b KQkq - 0 1'
    """
    board = chess.Board()
    board.turn = side.value
    return board.fen()


def _render_token(token: Union[str, chess.Move, chess.Board]) -> str:
    if isinstance(token, chess.Board):
        return token.fen()
    if isinstance(token, chess.Move):
        return token.uci()
    return token.strip()


class PositionState:
    """
    Tracks the current game and renders position commands.

    Attributes:
        mode: Active positioning mode
        side: Side to move at game start (meaningful in FEN mode)
        fen: Last absolute position sent (FEN mode only)
    """

    def __init__(self):
        self.mode = PositionMode.ALGEBRAIC
        self.side = Side.WHITE
        self.fen: Optional[str] = None
        self._moves: list = []
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    @property
    def move_history(self) -> Tuple[str, ...]:
        return tuple(self._moves)

    def reset(self):
        """Return to the uninitialized state."""
        self.mode = PositionMode.ALGEBRAIC
        self.side = Side.WHITE
        self.fen = None
        self._moves = []
        self._started = False

    def start(self, mode: PositionMode = PositionMode.ALGEBRAIC, side: Side = Side.WHITE) -> str:
        """
        Begin a new game.

        Args:
            mode: Positioning mode for the whole game
            side: Side to move first (FEN mode only)

        Returns:
            The position command announcing the starting position
        """
        self.reset()
        self.mode = mode
        self.side = side
        self._started = True

        if mode is PositionMode.FEN:
            self.fen = starting_fen(side)
        return self.command()

    def advance(self, token: Union[str, chess.Move, chess.Board]) -> str:
        """
        Move the game forward.

        Args:
            token: In ALGEBRAIC mode one move ("e2e4" or chess.Move); in
                FEN mode a full position (FEN string or chess.Board)

        Returns:
            The position command describing the new position

        Raises:
            PositionStateError: If no game has been started
        """
        if not self._started:
            raise PositionStateError("Call new_game() before advancing the position")

        text = _render_token(token)
        if self.mode is PositionMode.FEN:
            self.fen = text
        else:
            self._moves.append(text)
        return self.command()

    def command(self) -> str:
        """Render the position command for the current state."""
        if self.mode is PositionMode.FEN:
            return f"position fen {self.fen}"
        if self._moves:
            return "position startpos moves " + " ".join(self._moves)
        return "position startpos"
