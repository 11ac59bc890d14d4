"""
Test doubles for uci_driver.

ScriptedChannel stands in for an engine process: it records every line the
session writes and answers commands from a script of canned responses.

Example:
    >>> channel = ScriptedChannel()
    >>> session = EngineSession(channel)
    >>> session.metadata.name
    'Scripted Engine'
    >>> channel.written
    ['uci']
"""

import collections
from typing import Deque, Dict, List, Optional

from uci_driver.errors import EngineTimeoutError
from uci_driver.protocol.channel import LineChannel

HANDSHAKE_LINES = [
    "id name Scripted Engine",
    "id author uci_driver",
    "option name Threads type spin default 1 min 1 max 512",
    "option name Hash type spin default 16 min 1 max 33554432",
    "option name Ponder type check default false",
    "option name Analysis Contempt type combo default Both var Off var White var Black var Both",
    "option name Clear Hash type button",
    "option name SyzygyPath type string default <empty>",
    "uciok",
]

DEFAULT_SCRIPT = {
    "uci": HANDSHAKE_LINES,
    "isready": ["readyok"],
    "go": [
        "info depth 1 seldepth 1 score cp 20 nodes 20 pv e2e4",
        "bestmove e2e4 ponder e7e5",
    ],
}


class ScriptedChannel(LineChannel):
    """
    In-memory LineChannel driven by a response script.

    Responses are looked up by the first word of each written command
    ("go movetime 100" answers with script["go"]). Commands with no
    entry produce no output, like "setoption" or "position".

    Attributes:
        script: Command word -> lines to emit
        written: Every line the client wrote, in order
        reads: Number of read_line() calls
        closed: True after close()
    """

    def __init__(self, script: Optional[Dict[str, List[str]]] = None, stall: bool = False):
        """
        Args:
            script: Responses keyed by command word (default: DEFAULT_SCRIPT)
            stall: If True, an empty output buffer behaves like an engine that
                never answers instead of one that exited
        """
        self.script = dict(DEFAULT_SCRIPT if script is None else script)
        self.stall = stall
        self.written: List[str] = []
        self.reads = 0
        self.closed = False
        self._pending: Deque[str] = collections.deque()

    def write_line(self, line: str) -> None:
        self.written.append(line)
        words = line.split()
        if words:
            self._pending.extend(self.script.get(words[0], []))

    def read_line(self, timeout: Optional[float] = None) -> Optional[str]:
        self.reads += 1
        if self._pending:
            return self._pending.popleft()
        if not self.stall:
            return None
        if timeout is None:
            raise AssertionError("read would block forever on a stalled engine")
        raise EngineTimeoutError("<next line>", timeout)

    def close(self) -> None:
        self.closed = True

    def feed(self, *lines: str):
        """Queue unsolicited engine output."""
        self._pending.extend(lines)

    def commands(self, word: str) -> List[str]:
        """Written lines whose first word is word."""
        return [line for line in self.written if line.split()[:1] == [word]]
