"""
uci_driver

A client for the Universal Chess Interface (UCI): drives an external chess
engine process (Stockfish, Leela, ...) over its standard streams and
exposes a typed session instead of raw text.

## Architecture

1. **protocol**: The UCI exchange, independent of any process
   - LineChannel / ResponseReader: line I/O and read-until-marker
   - Option parsing and the "uci" handshake (Metadata)
   - PositionState: ALGEBRAIC (startpos + moves) or FEN positioning
   - "go" command builder and "bestmove" parser

2. **session**: EngineSession, the orchestrator
   - Owns the channel, runs the handshake once at construction
   - set_option, is_ready, new_game, advance_position, search, quit

3. **utils**: Logging setup and test doubles
   - ScriptedChannel: in-memory engine for unit tests
   - fake_engine: a tiny real UCI engine for subprocess tests

## Quick Start

```python
from uci_driver import EngineSession

with EngineSession.launch("/usr/bin/stockfish") as session:
    session.set_option("Threads", 2)
    if session.is_ready():
        session.new_game()
        session.advance_position("e2e4")
        result = session.search(movetime=100)
        print(result.best_move)
```

## Version

0.1.0
"""

__version__ = "0.1.0"
__license__ = "MIT"

from uci_driver.errors import (
    EngineLaunchError,
    EngineTimeoutError,
    PositionStateError,
    ProtocolError,
    SessionTerminatedError,
    UCIError,
)
from uci_driver.protocol import (
    Metadata,
    Option,
    OptionKind,
    PositionMode,
    SearchOptions,
    SearchResult,
    Side,
)
from uci_driver.session import EngineSession, SessionConfig

__all__ = [
    'EngineSession',
    'SessionConfig',
    'Metadata',
    'Option',
    'OptionKind',
    'PositionMode',
    'Side',
    'SearchOptions',
    'SearchResult',
    'UCIError',
    'EngineLaunchError',
    'ProtocolError',
    'SessionTerminatedError',
    'PositionStateError',
    'EngineTimeoutError',
]
