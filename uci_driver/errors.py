"""
Exception types raised by the UCI session.

Hierarchy:
    UCIError
    ├── EngineLaunchError       engine process could not be started
    ├── ProtocolError           engine answered with something unparseable
    ├── SessionTerminatedError  session used after quit()
    ├── PositionStateError      position advanced before a game was started
    └── EngineTimeoutError      caller-supplied deadline elapsed

Malformed option or identity lines are NOT errors: they degrade to zero
values and are counted on the Metadata object instead.
"""

from typing import List, Optional


class UCIError(Exception):
    """Base class for every error raised by uci_driver."""


class EngineLaunchError(UCIError):
    """The engine process or its standard streams could not be set up."""


class ProtocolError(UCIError):
    """The engine sent a response that violates the UCI protocol."""


class SessionTerminatedError(UCIError):
    """An operation was attempted on a session after quit()."""

    def __init__(self, operation: str):
        super().__init__(f"Cannot call {operation}() on a terminated session")
        self.operation = operation


class PositionStateError(UCIError):
    """The position was advanced before new_game() was called."""


class EngineTimeoutError(UCIError, TimeoutError):
    """
    A read did not see its terminal line before the deadline.

    Attributes:
        marker: Line prefix that was being waited for
        lines: Lines received before the deadline elapsed
    """

    def __init__(self, marker: str, timeout: float, lines: Optional[List[str]] = None):
        super().__init__(f"Timed out after {timeout:.2f}s waiting for '{marker}'")
        self.marker = marker
        self.timeout = timeout
        self.lines = list(lines) if lines else []
