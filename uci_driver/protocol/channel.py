"""
Line Channel and Response Reader

The engine process speaks UCI over its standard streams, one command or
response per line. This module provides:

    - LineChannel: abstract "write one line / read next line" interface
    - SubprocessChannel: LineChannel backed by a child process
    - ResponseReader: collects lines until a terminal marker is seen

The session only ever talks to a LineChannel, so tests can swap the
process for a scripted fake (see uci_driver.utils.testing).

Reading model:
    A daemon thread pumps the engine's stdout into a queue. The caller
    thread blocks on the queue, which lets a read honour an optional
    deadline without touching the pipe from two threads.
"""

import logging
import queue
import subprocess
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Union

from uci_driver.errors import EngineLaunchError, EngineTimeoutError

logger = logging.getLogger(__name__)

# Queued by the pump thread once the engine closes stdout
_EOF = None


class LineChannel(ABC):
    """
    Duplex, line-oriented text stream to a UCI engine.

    Implementations must strip the trailing newline from lines they return
    and return None once the stream is exhausted.
    """

    @abstractmethod
    def write_line(self, line: str) -> None:
        """Send one line (without trailing newline) to the engine."""
        pass

    @abstractmethod
    def read_line(self, timeout: Optional[float] = None) -> Optional[str]:
        """
        Read the next line from the engine.

        Args:
            timeout: Seconds to wait; None blocks until a line arrives

        Returns:
            The line without its newline, or None at end of stream

        Raises:
            EngineTimeoutError: If timeout elapses before a line arrives
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the underlying stream."""
        pass


class SubprocessChannel(LineChannel):
    """
    LineChannel over the stdin/stdout of a child process.

    Attributes:
        command: argv used to start the engine
        process: The running subprocess.Popen instance
    """

    def __init__(
        self,
        command: Union[str, Path, Sequence[Union[str, Path]]],
        cwd: Optional[Path] = None,
        wait_timeout: float = 1.0,
    ):
        """
        Start the engine process.

        Args:
            command: Engine path, or full argv list
            cwd: Working directory for the engine (default: inherit)
            wait_timeout: Seconds close() waits for a clean exit

        Raises:
            EngineLaunchError: If the process cannot be started
        """
        if isinstance(command, (str, Path)):
            command = [command]
        self.command = [str(part) for part in command]
        self.wait_timeout = wait_timeout

        try:
            self.process = subprocess.Popen(
                self.command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                cwd=cwd,
                text=True,
                bufsize=1,
            )
        except OSError as e:
            raise EngineLaunchError(f"Failed to start engine {self.command[0]}: {e}") from e

        self._lines: "queue.Queue[Optional[str]]" = queue.Queue()
        self._eof = False
        self._pump = threading.Thread(
            target=self._pump_stdout,
            name=f"uci-stdout-{self.process.pid}",
            daemon=True,
        )
        self._pump.start()

        logger.info(f"Started engine: {' '.join(self.command)} (pid={self.process.pid})")

    def _pump_stdout(self):
        """Forward stdout lines into the queue until the stream closes."""
        try:
            for line in self.process.stdout:
                self._lines.put(line.rstrip("\r\n"))
        except (OSError, ValueError) as e:
            logger.warning(f"Engine stdout closed with error: {e}")
        finally:
            self._lines.put(_EOF)

    def write_line(self, line: str) -> None:
        stdin = self.process.stdin
        if stdin is None or stdin.closed:
            logger.warning(f"Dropped write to closed engine stdin: {line}")
            return
        try:
            stdin.write(line + "\n")
            stdin.flush()
        except (BrokenPipeError, OSError) as e:
            # A dead engine surfaces as end of stream on the next read
            logger.warning(f"Write to engine failed ({e}): {line}")

    def read_line(self, timeout: Optional[float] = None) -> Optional[str]:
        if self._eof:
            return None
        try:
            line = self._lines.get(timeout=timeout)
        except queue.Empty:
            raise EngineTimeoutError("<next line>", timeout) from None
        if line is _EOF:
            self._eof = True
        return line

    def close(self) -> None:
        """Close stdin and wait for the engine to exit, killing it if needed."""
        if self.process.stdin and not self.process.stdin.closed:
            try:
                self.process.stdin.close()
            except (BrokenPipeError, OSError) as e:
                logger.debug(f"Ignoring error on stdin close: {e}")

        try:
            self.process.wait(timeout=self.wait_timeout)
        except subprocess.TimeoutExpired:
            logger.warning(f"Engine pid={self.process.pid} did not exit, killing it")
            self.process.kill()
            self.process.wait()

        logger.info(f"Engine exited with code {self.process.returncode}")


class ResponseReader:
    """
    Reads engine output up to and including a terminal line.

    Example:
        >>> reader = ResponseReader(channel)
        >>> channel.write_line("isready")
        >>> reader.read_until("readyok")
        ['readyok']
    """

    def __init__(self, channel: LineChannel):
        self.channel = channel

    def read_until(self, marker: str, timeout: Optional[float] = None) -> List[str]:
        """
        Collect lines until one starts with marker.

        Args:
            marker: Prefix of the terminal line (e.g. "uciok", "bestmove")
            timeout: Overall deadline in seconds; None waits forever

        Returns:
            Every line read, in order, including the terminal line. If the
            stream ends first, the lines read so far.

        Raises:
            EngineTimeoutError: If the deadline elapses first
        """
        lines: List[str] = []
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            remaining = None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise EngineTimeoutError(marker, timeout, lines)

            try:
                line = self.channel.read_line(timeout=remaining)
            except EngineTimeoutError:
                raise EngineTimeoutError(marker, timeout, lines) from None

            if line is None:
                logger.warning(
                    f"Engine output ended before '{marker}' ({len(lines)} lines read)"
                )
                return lines

            logger.debug(f"<<< {line}")
            lines.append(line)

            if line.startswith(marker):
                return lines
