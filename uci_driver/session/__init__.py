"""
Engine Session

The orchestrating layer on top of uci_driver.protocol: owns the channel,
runs the handshake once, and exposes typed operations.
"""

from uci_driver.session.config import SessionConfig, find_engine
from uci_driver.session.engine import EngineSession

__all__ = ['EngineSession', 'SessionConfig', 'find_engine']
