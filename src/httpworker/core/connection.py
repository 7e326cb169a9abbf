"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with a line-oriented read API and a
plain write() so the request parser and the renderers never touch the
raw socket.

=============================================================================
TCP IS A BYTE STREAM, NOT A LINE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. The request

    GET /index.html HTTP/1.1\r\n
    Host: localhost\r\n
    \r\n

might arrive as

    recv() → "GET /ind"
    recv() → "ex.html HTTP/1.1\r\nHost: loc"
    recv() → "alhost\r\n\r\n"

so we buffer received bytes and cut lines out at each "\n". Whatever
follows the last "\n" stays in the buffer for the next read.

=============================================================================
BLOCKING WITH A TIMEOUT (NO BUSY-WAITING)
=============================================================================

A worker waiting for request bytes does not spin:

    while not ready():      # ✗ burns a CPU core per idle client
        sleep(0.001)

Instead recv() blocks in the kernel, bounded by the socket timeout:

    socket.settimeout(30.0)
    recv()                   # ✓ sleeps until data, EOF, or 30s pass

When the timeout fires, iter_lines() simply ends. The parser treats that
like the end of the header block and the worker answers with whatever
request line it has.

=============================================================================
OVER-LONG LINES
=============================================================================

A line is never buffered past max_line_size. The first max_line_size
bytes are kept and the rest is read and dropped up to the next "\n":

    Cookie: aaaa...(9000 bytes)...aaaa\r\n
    └──── kept (8192) ────┘└─ dropped ─┘

An ignored header loses nothing that matters, and a cut request line
names a file that does not exist, so the client still gets a response.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► WRITING ──────► CLOSING ──────► CLOSED
     │             │                               ▲
     └─────────────┴───────────────────────────────┘
                  (errors go straight to closing)

There is no keep-alive state: one connection, one request, one response.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Iterator, Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"              # Just accepted, nothing read yet
    READING = "reading"      # Reading the request header block
    WRITING = "writing"      # Sending the response
    CLOSING = "closing"      # Shutdown sequence in progress
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. BUFFERED LINE READING                                            │
    │     └── _buffer holds partial data between recv() calls              │
    │     └── iter_lines() yields decoded lines without CR/LF             │
    │                                                                      │
    │  2. TIMEOUT MANAGEMENT                                               │
    │     └── Reads block at most `timeout` seconds                        │
    │                                                                      │
    │  3. WRITING                                                          │
    │     └── write() sends everything with sendall()                      │
    │     └── bytes_sent counts body + header bytes for access logs       │
    │                                                                      │
    │  4. GRACEFUL CLOSE                                                   │
    │     └── shutdown(SHUT_WR), drain, close                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        bytes_sent: Total bytes written so far.
    """

    # Required parameters
    socket: socket.socket
    address: tuple

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    bytes_sent: int = 0

    # Configuration (passed from ServerConfig)
    buffer_size: int = 8192
    timeout: Optional[float] = 30.0
    max_line_size: int = 8192

    # Internal state (not shown in repr for cleaner logs)
    _buffer: bytes = field(default=b"", repr=False)
    _eof: bool = field(default=False, repr=False)

    def __post_init__(self):
        # Blocking mode; recv() waits at most `timeout` seconds
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0] if self.address else "-"

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_line(self) -> Optional[bytes]:
        """
        Read one line from the socket.

        Returns:
            The line WITHOUT its "\\n" (a trailing "\\r" is also removed),
            or None once the client has closed the connection and the
            buffer is empty. A final unterminated fragment is returned as
            a line of its own. A line longer than max_line_size is cut to
            max_line_size bytes and the rest of it is read and discarded.

        Raises:
            TimeoutError: No complete line arrived within the timeout.
        """
        self.state = ConnectionState.READING

        while b"\n" not in self._buffer:
            if self._eof:
                if not self._buffer:
                    return None
                line, self._buffer = self._buffer, b""
                return self._truncate(line).rstrip(b"\r")

            if len(self._buffer) > self.max_line_size:
                return self._discard_rest_of_line()

            chunk = self._recv_or_timeout()
            if not chunk:
                self._eof = True
            else:
                self._buffer += chunk

        line, _, self._buffer = self._buffer.partition(b"\n")
        return self._truncate(line).rstrip(b"\r")

    def _truncate(self, line: bytes) -> bytes:
        if len(line) <= self.max_line_size:
            return line
        logger.warning(f"[{self.id}] Line of {len(line)} bytes cut to {self.max_line_size}")
        return line[:self.max_line_size]

    def _discard_rest_of_line(self) -> bytes:
        """
        Keep the first max_line_size bytes of an over-long line and drop
        everything up to its "\\n" without buffering it.
        """
        line = self._buffer[:self.max_line_size]
        self._buffer = b""
        logger.warning(f"[{self.id}] Line over {self.max_line_size} bytes cut, rest discarded")

        while True:
            chunk = self._recv_or_timeout()
            if not chunk:
                self._eof = True
                break
            _, newline, rest = chunk.partition(b"\n")
            if newline:
                self._buffer = rest
                break

        return line.rstrip(b"\r")

    def _recv_or_timeout(self) -> bytes:
        try:
            return self._recv()
        except socket.timeout:
            raise TimeoutError("Request read timeout")

    def iter_lines(self) -> Iterator[str]:
        """
        Yield request lines as text until EOF or the read timeout.

        Lines are decoded as ISO-8859-1, which maps every byte to a
        character, so decoding never fails.
        """
        while True:
            try:
                line = self.read_line()
            except TimeoutError:
                logger.warning(f"[{self.id}] Timed out waiting for request headers")
                return
            if line is None:
                return
            yield line.decode("iso-8859-1")

    def _recv(self) -> bytes:
        """
        Receive data from the socket.

        Returns:
            Received bytes, or empty bytes if the connection was closed.
        """
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            # Client disconnected abruptly
            return b""

    # =========================================================================
    # WRITING
    # =========================================================================

    def write(self, data: bytes) -> int:
        """
        Send data to the client.

        Uses sendall() so a partial send never truncates a response.
        Errors propagate; a worker that cannot write has nothing left to do.

        Returns:
            Number of bytes written.
        """
        self.state = ConnectionState.WRITING
        self.socket.sendall(data)
        self.bytes_sent += len(data)
        return len(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): send FIN, the client sees end of body
        2. Drain anything the client still sends (ignored headers)
        3. close(): release the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except (socket.timeout, OSError):
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
