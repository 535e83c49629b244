"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with the stream API the request parser
and response writer need, and guarantees the socket is released exactly
once.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A client that sends

    GET /index.html HTTP/1.0\r\n
    Host: localhost\r\n
    \r\n

might arrive in one recv(), or as "GET /ind" + "ex.html HTTP/1.0\r\nHo"
+ ... We don't want to reassemble lines by hand, so the connection
hands out buffered file objects from socket.makefile():

    reader  (makefile("rb"))   readline() blocks until a full line
                               (or EOF) is available
    writer  (makefile("wb"))   write() + flush() sends everything

=============================================================================
ONE REQUEST PER CONNECTION (HTTP/1.0)
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │                    Connection: close                             │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   Request 1:   TCP Connect → Send → Receive → TCP Close        │
    │   Request 2:   TCP Connect → Send → Receive → TCP Close        │
    │                                                                  │
    │   No keep-alive: every connection carries exactly one          │
    │   request/response cycle and is then closed.                   │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    ACCEPTED ──► PARSING ──┬──► SERVING ───────────┐
                  │        │                       │
                  │        └──► ERROR_RESPONDING ──┤
                  │                                ▼
                  └───────────────────────────► CLOSED

Every path ends in CLOSED. The `with conn:` block in the connection
handler is what makes that true even when something raises.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    Used for logging and debugging, and to make close() idempotent.
    """
    ACCEPTED = "accepted"                  # Just accepted, nothing read yet
    PARSING = "parsing"                    # Reading the request line and headers
    SERVING = "serving"                    # Sending a 200 with a file
    ERROR_RESPONDING = "error_responding"  # Sending a 400/404 page
    CLOSED = "closed"                      # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. BUFFERED STREAMS                                                 │
    │     └── reader/writer file objects over the socket                  │
    │     └── created lazily on first use                                  │
    │                                                                      │
    │  2. STATE TRACKING                                                   │
    │     └── Know what phase of handling we're in                         │
    │                                                                      │
    │  3. CLOSE EXACTLY ONCE                                               │
    │     └── Flush, send FIN, drain, release the descriptor              │
    │     └── Second and later close() calls do nothing                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    # Required parameters
    socket: socket.socket
    address: tuple

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)

    # How long close() waits for leftover client data, and how much of it
    drain_timeout: float = 0.5
    drain_limit: int = 64 * 1024

    # Lazily created stream wrappers (not shown in repr for cleaner logs)
    _reader: Optional[BinaryIO] = field(default=None, repr=False)
    _writer: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        # Blocking I/O with no timeout: a silent client holds its worker
        # until it disconnects.
        self.socket.setblocking(True)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0] if self.address else ""

    @property
    def client_port(self) -> int:
        """Get the client port."""
        return self.address[1] if self.address else 0

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    @property
    def reader(self) -> BinaryIO:
        """Buffered binary reader over the socket (readline() per line)."""
        if self._reader is None:
            self._reader = self.socket.makefile("rb")
        return self._reader

    @property
    def writer(self) -> BinaryIO:
        """Buffered binary writer over the socket (remember to flush())."""
        if self._writer is None:
            self._writer = self.socket.makefile("wb")
        return self._writer

    # =========================================================================
    # CLOSING: Properly terminate the connection
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. Close the stream wrappers (flushes anything still buffered)
        2. shutdown(SHUT_WR): tell the client we're done sending (FIN)
        3. Drain whatever the client sent that we never read, so the
           kernel doesn't answer our close with a RST that could destroy
           the response before the client reads it
        4. close(): release the file descriptor

        Safe to call more than once; only the first call does anything.
        """
        if self.state == ConnectionState.CLOSED:
            return  # Already closed

        for stream in (self._writer, self._reader):
            if stream is None:
                continue
            try:
                stream.close()
            except OSError as e:
                # Flushing to a client that already hung up
                logger.debug(f"[{self.id}] Error closing stream: {e}")
        self._writer = None
        self._reader = None

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected, that's fine

        try:
            self.socket.settimeout(self.drain_timeout)
            drained = 0
            while drained < self.drain_limit:
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Timeout or reset; we're closing anyway

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER: For use with 'with' statement
    # =========================================================================

    def __enter__(self) -> "Connection":
        """
        Context manager entry.

        Usage:
            with conn:
                request = parser.parse(conn.reader)
                writer.write_file(conn.writer, ...)
            # Connection automatically closed here
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
