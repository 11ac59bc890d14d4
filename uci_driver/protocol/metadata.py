"""
Engine metadata discovered during the UCI handshake.

Protocol Flow:
    client → "uci"
    engine → "id name Stockfish 16"
    engine → "id author the Stockfish developers"
    engine → "option name Threads type spin default 1 min 1 max 1024"
    engine → ...
    engine → "uciok"
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from uci_driver.protocol.channel import LineChannel, ResponseReader
from uci_driver.protocol.options import Option, parse_option

logger = logging.getLogger(__name__)

HANDSHAKE_COMMAND = "uci"
HANDSHAKE_DONE = "uciok"

NAME_PREFIX = "id name "
AUTHOR_PREFIX = "id author "
OPTION_PREFIX = "option "


@dataclass
class Metadata:
    """
    Engine identity and declared options.

    Attributes:
        name: Engine name from "id name" (first occurrence wins)
        author: Engine author from "id author" (first occurrence wins)
        options: Declared options in discovery order
        unrecognized_lines: Handshake lines that matched no known prefix
        malformed_options: Option lines that parsed with degraded fields
    """

    name: str = ""
    author: str = ""
    options: List[Option] = field(default_factory=list)
    unrecognized_lines: int = 0
    malformed_options: int = 0
    _name_seen: bool = field(default=False, repr=False, compare=False)
    _author_seen: bool = field(default=False, repr=False, compare=False)

    def get_option(self, name: str) -> Optional[Option]:
        """Return the option declared with exactly this name, if any."""
        for option in self.options:
            if option.name == name:
                return option
        return None

    def option_names(self) -> List[str]:
        return [option.name for option in self.options]

    def clear(self):
        """Forget everything learned from the handshake."""
        self.name = ""
        self.author = ""
        self.options = []
        self.unrecognized_lines = 0
        self.malformed_options = 0
        self._name_seen = False
        self._author_seen = False

    def add_line(self, line: str):
        """Dispatch one handshake line onto the metadata."""
        if line.startswith(NAME_PREFIX):
            if not self._name_seen:
                self._name_seen = True
                self.name = line[len(NAME_PREFIX):].strip()
        elif line.startswith(AUTHOR_PREFIX):
            if not self._author_seen:
                self._author_seen = True
                self.author = line[len(AUTHOR_PREFIX):].strip()
        elif line.startswith(OPTION_PREFIX):
            option = parse_option(line[len(OPTION_PREFIX):])
            if option.malformed:
                self.malformed_options += 1
            self.options.append(option)
        elif not line.startswith(HANDSHAKE_DONE):
            # Unknown lines are tolerated for forward compatibility
            self.unrecognized_lines += 1
            logger.debug(f"Ignoring handshake line: {line}")


def parse_handshake(lines: List[str]) -> Metadata:
    """
    Build Metadata from the lines of a handshake response.

    Args:
        lines: Engine output up to and including "uciok"

    Returns:
        Populated Metadata
    """
    meta = Metadata()
    for line in lines:
        meta.add_line(line)
    return meta


def discover(
    channel: LineChannel,
    reader: Optional[ResponseReader] = None,
    timeout: Optional[float] = None,
) -> Metadata:
    """
    Run the UCI handshake and collect engine metadata.

    Args:
        channel: Channel to the engine
        reader: Reader over the same channel (created if None)
        timeout: Deadline for the whole handshake; None waits forever

    Returns:
        Metadata describing the engine

    Raises:
        EngineTimeoutError: If timeout elapses before "uciok"
    """
    if reader is None:
        reader = ResponseReader(channel)

    logger.debug(f">>> {HANDSHAKE_COMMAND}")
    channel.write_line(HANDSHAKE_COMMAND)
    lines = reader.read_until(HANDSHAKE_DONE, timeout=timeout)

    meta = parse_handshake(lines)

    logger.info(
        f"Discovered engine '{meta.name}' by '{meta.author}' "
        f"with {len(meta.options)} options"
    )
    if meta.malformed_options or meta.unrecognized_lines:
        logger.info(
            f"Handshake leniency: {meta.malformed_options} malformed options, "
            f"{meta.unrecognized_lines} unrecognized lines"
        )

    return meta
