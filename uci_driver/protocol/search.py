"""
Search command builder and best-move parser.

    client → "go wtime 300000 btime 300000 winc 2000 binc 2000"
    engine → "info depth 20 score cp 31 ..."   (skipped)
    engine → "bestmove e2e4 ponder e7e5"

Numeric limits that are absent or not positive are left out of the command.
A zero bound has no useful meaning in UCI, so it is read as "unset".
"""

from dataclasses import dataclass, field, fields
from typing import List, Optional

import chess

from uci_driver.errors import ProtocolError

SEARCH_DONE = "bestmove"
PONDER_KEYWORD = "ponder"

# Keyword order of the numeric limits in the go command
LIMIT_KEYWORDS = (
    "wtime",
    "btime",
    "winc",
    "binc",
    "movestogo",
    "depth",
    "nodes",
    "mate",
    "movetime",
)

# Engines answer "bestmove (none)" or "bestmove 0000" when there is no legal move
NULL_MOVES = ("(none)", "0000")


@dataclass
class SearchOptions:
    """
    Parameters of one "go" command. Times are in milliseconds.

    Attributes:
        ponder: Search in pondering mode
        wtime: White's remaining clock
        btime: Black's remaining clock
        winc: White's increment per move
        binc: Black's increment per move
        movestogo: Moves until the next time control
        depth: Maximum depth in plies
        nodes: Maximum nodes to search
        mate: Search for a mate in this many moves
        movetime: Search exactly this long
        search_moves: Restrict the search to these moves
    """

    ponder: bool = False
    wtime: Optional[int] = None
    btime: Optional[int] = None
    winc: Optional[int] = None
    binc: Optional[int] = None
    movestogo: Optional[int] = None
    depth: Optional[int] = None
    nodes: Optional[int] = None
    mate: Optional[int] = None
    movetime: Optional[int] = None
    search_moves: List[str] = field(default_factory=list)

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]


@dataclass(frozen=True)
class SearchResult:
    """Engine answer to a "go" command."""

    best_move: str
    ponder_move: str = ""

    @property
    def move(self) -> Optional[chess.Move]:
        """Best move as a chess.Move, None for a null move."""
        return _to_move(self.best_move)

    @property
    def ponder(self) -> Optional[chess.Move]:
        """Expected reply as a chess.Move, None if the engine gave none."""
        return _to_move(self.ponder_move)


def _to_move(text: str) -> Optional[chess.Move]:
    if not text or text in NULL_MOVES:
        return None
    return chess.Move.from_uci(text)


def build_go_command(options: Optional[SearchOptions] = None) -> str:
    """
    Render a "go" command.

    Example:
        >>> build_go_command(SearchOptions(movetime=100))
        'go movetime 100'
    """
    if options is None:
        options = SearchOptions()

    tokens = ["go"]
    if options.ponder:
        tokens.append(PONDER_KEYWORD)

    for keyword in LIMIT_KEYWORDS:
        value = getattr(options, keyword)
        if value is not None and value > 0:
            tokens.append(f"{keyword} {int(value)}")

    if options.search_moves:
        tokens.append("searchmoves " + " ".join(str(m) for m in options.search_moves))

    return " ".join(tokens)


def parse_best_move(line: str) -> SearchResult:
    """
    Parse the terminal line of a search.

    Args:
        line: e.g. "bestmove e2e4 ponder e7e5" or "bestmove e2e4"

    Returns:
        SearchResult; ponder_move is "" when the engine gave no ponder move

    Raises:
        ProtocolError: If the line is not a complete bestmove line
    """
    words = line.split()
    if not words or words[0] != SEARCH_DONE:
        raise ProtocolError(f"Expected a bestmove line, got: {line!r}")

    try:
        best_move = words[1]
        ponder_move = ""
        if PONDER_KEYWORD in words[2:]:
            ponder_move = words[words.index(PONDER_KEYWORD, 2) + 1]
    except IndexError:
        raise ProtocolError(f"Truncated bestmove line: {line!r}") from None

    return SearchResult(best_move=best_move, ponder_move=ponder_move)
