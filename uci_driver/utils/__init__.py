"""
Utilities: logging setup and test doubles.
"""

from uci_driver.utils.logs import setup_logger
from uci_driver.utils.testing import ScriptedChannel, HANDSHAKE_LINES

__all__ = ['setup_logger', 'ScriptedChannel', 'HANDSHAKE_LINES']
