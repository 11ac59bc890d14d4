"""
Session configuration.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from uci_driver.protocol.options import OptionValue

logger = logging.getLogger(__name__)

# Places Stockfish usually lands when installed from a package manager
ENGINE_CANDIDATES = [
    "stockfish",
    "/usr/local/bin/stockfish",
    "/usr/bin/stockfish",
    "/usr/games/stockfish",
    "/opt/homebrew/bin/stockfish",
]


def find_engine(candidates: Optional[List[str]] = None) -> Path:
    """
    Auto-detect a UCI engine binary.

    Args:
        candidates: Names or paths to try, in order (default: Stockfish locations)

    Returns:
        Path to the first candidate found

    Raises:
        FileNotFoundError: If no candidate exists
    """
    for candidate in candidates or ENGINE_CANDIDATES:
        path = shutil.which(candidate)
        if path:
            logger.debug(f"Found engine: {path}")
            return Path(path)

    raise FileNotFoundError(
        "No UCI engine found. Install one with: brew install stockfish (macOS) "
        "or apt install stockfish (Linux)"
    )


@dataclass
class SessionConfig:
    """Configuration for launching an engine session."""

    # Engine process
    engine_path: Optional[Path] = None
    """Engine binary (None = auto-detect Stockfish)"""

    engine_args: List[str] = field(default_factory=list)
    """Extra command-line arguments for the engine"""

    # Timeouts
    read_timeout: Optional[float] = None
    """Deadline in seconds for each blocking read (None = wait forever)"""

    quit_timeout: float = 1.0
    """Seconds to wait for the engine to exit after quit before killing it"""

    # Options
    options: Dict[str, OptionValue] = field(default_factory=dict)
    """Engine options applied right after the handshake"""

    # Logging
    debug: bool = False
    """Log every line exchanged with the engine"""

    log_file: Optional[Path] = None
    """Write the log to this file instead of stderr"""

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.engine_path is None:
            self.engine_path = find_engine()
        self.engine_path = Path(self.engine_path)

        if not self.engine_path.exists():
            raise FileNotFoundError(f"Engine binary not found at: {self.engine_path}")

        if self.log_file is not None:
            self.log_file = Path(self.log_file)

        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ValueError(f"read_timeout must be positive, got {self.read_timeout}")

        if self.quit_timeout <= 0:
            raise ValueError(f"quit_timeout must be positive, got {self.quit_timeout}")

    @property
    def command(self) -> List[str]:
        """Full argv used to start the engine."""
        return [str(self.engine_path), *self.engine_args]
