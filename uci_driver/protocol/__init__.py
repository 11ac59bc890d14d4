"""
UCI Protocol Components

Building blocks of the client side of the Universal Chess Interface.
Each component is independent of the engine process and can be fed
canned lines in tests.

Key Components:
    - LineChannel / SubprocessChannel: line-oriented engine stream
    - ResponseReader: read until a terminal marker
    - Option / parse_option: option declarations
    - Metadata / discover: the "uci" handshake
    - PositionState: game state and position commands
    - SearchOptions / build_go_command / parse_best_move: the "go" exchange

Reference:
    UCI Protocol: https://www.chessprogramming.org/UCI
"""

from uci_driver.protocol.channel import LineChannel, ResponseReader, SubprocessChannel
from uci_driver.protocol.metadata import Metadata, discover, parse_handshake
from uci_driver.protocol.options import (
    Option,
    OptionKind,
    OptionValue,
    format_option_value,
    parse_option,
)
from uci_driver.protocol.position import PositionMode, PositionState, Side, starting_fen
from uci_driver.protocol.search import (
    SearchOptions,
    SearchResult,
    build_go_command,
    parse_best_move,
)

__all__ = [
    'LineChannel',
    'ResponseReader',
    'SubprocessChannel',
    'Metadata',
    'discover',
    'parse_handshake',
    'Option',
    'OptionKind',
    'OptionValue',
    'format_option_value',
    'parse_option',
    'PositionMode',
    'PositionState',
    'Side',
    'starting_fen',
    'SearchOptions',
    'SearchResult',
    'build_go_command',
    'parse_best_move',
]
