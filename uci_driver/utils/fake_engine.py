"""
Minimal UCI engine used for end-to-end tests.

Speaks enough of the engine side of UCI to exercise a real subprocess
session: identification and options, readiness, positions (startpos or
FEN plus moves), and "go", which answers with the first legal move in
UCI order and, when one exists, the first legal reply as ponder move.

Usage:
    python -m uci_driver.utils.fake_engine
"""

import sys
from typing import List, Optional

import chess

ENGINE_NAME = "FakeFish 1.0"
ENGINE_AUTHOR = "uci_driver"

OPTIONS = [
    "option name Threads type spin default 1 min 1 max 64",
    "option name Hash type spin default 16 min 1 max 1024",
    "option name Ponder type check default false",
    "option name Skill Level type spin default 20 min 0 max 20",
    "option name Clear Hash type button",
]


def _first_legal(board: chess.Board) -> Optional[chess.Move]:
    moves = sorted(board.legal_moves, key=lambda m: m.uci())
    return moves[0] if moves else None


class FakeEngine:
    """
    Stdin/stdout UCI engine with a trivial move choice.

    Attributes:
        board: Current position
        options: Values received through "setoption"
        received: Every command line read, in order
    """

    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.board = chess.Board()
        self.options = {}
        self.received: List[str] = []

    def _emit(self, *lines: str):
        for line in lines:
            self.stdout.write(line + "\n")
        self.stdout.flush()

    def run(self):
        """Serve commands until "quit" or end of input."""
        for raw in self.stdin:
            command = raw.strip()
            if not command:
                continue

            self.received.append(command)
            tokens = command.split()
            cmd = tokens[0]

            if cmd == "uci":
                self._emit(f"id name {ENGINE_NAME}", f"id author {ENGINE_AUTHOR}", *OPTIONS, "uciok")
            elif cmd == "isready":
                self._emit("readyok")
            elif cmd == "setoption":
                self.handle_setoption(tokens)
            elif cmd == "ucinewgame":
                self.board = chess.Board()
            elif cmd == "position":
                self.handle_position(tokens)
            elif cmd == "go":
                self.handle_go()
            elif cmd == "quit":
                break
            # Unknown commands are ignored, as UCI requires

    def handle_setoption(self, tokens: List[str]):
        """Record "setoption name <N> [value <V>]"."""
        if "name" not in tokens:
            return
        start = tokens.index("name") + 1
        if "value" in tokens[start:]:
            split = tokens.index("value", start)
            self.options[" ".join(tokens[start:split])] = " ".join(tokens[split + 1:])
        else:
            self.options[" ".join(tokens[start:])] = None

    def handle_position(self, tokens: List[str]):
        """
        Handle "position startpos|fen <FEN> [moves ...]".

        Malformed positions leave the board unchanged.
        """
        if len(tokens) < 2:
            return

        moves_index = tokens.index("moves") if "moves" in tokens else len(tokens)

        if tokens[1] == "startpos":
            board = chess.Board()
        elif tokens[1] == "fen":
            try:
                board = chess.Board(" ".join(tokens[2:moves_index]))
            except ValueError:
                return
        else:
            return

        for move_str in tokens[moves_index + 1:]:
            try:
                board.push_uci(move_str)
            except ValueError:
                break

        self.board = board

    def handle_go(self):
        """Answer with the first legal move and the first legal reply."""
        best = _first_legal(self.board)
        if best is None:
            self._emit("bestmove (none)")
            return

        self.board.push(best)
        reply = _first_legal(self.board)
        self.board.pop()

        self._emit(f"info depth 1 score cp 0 nodes 1 pv {best.uci()}")
        if reply is None:
            self._emit(f"bestmove {best.uci()}")
        else:
            self._emit(f"bestmove {best.uci()} ponder {reply.uci()}")


if __name__ == "__main__":
    FakeEngine().run()
