"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

The listener: binds the port, accepts connections in a loop, and hands
each one off without waiting for it to be processed.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    socket() ─► bind() ─► listen() ─► accept() ─┬─► Connection ─► callback
                 │                      ▲         │
                 │                      └─────────┘  one per client
                 └─ port taken → BindError

    The listening socket never carries request data. Every accept()
    returns a fresh client socket, wrapped in a Connection and handed
    to the callback; the loop is back in accept() right away.

=============================================================================
SOCKET OPTIONS
=============================================================================

SO_REUSEADDR:
    Restarting the server right after stopping it would otherwise fail
    with "Address already in use" while old sockets sit in TIME_WAIT.

TCP_NODELAY:
    Disables Nagle's algorithm so small responses go out immediately.

=============================================================================
ACCEPT ERRORS
=============================================================================

accept() can fail while the server is healthy, most commonly with
EMFILE (out of file descriptors) under heavy load. Those failures are
logged and the loop keeps accepting. Only a closed listening socket
ends the loop.

=============================================================================
"""

import socket
import signal
import logging
import threading
import time
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from ..errors import BindError
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    Manages the listening socket and connection acceptance. The HTTP
    layer supplies a callback that receives each new Connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    start(callback)                                                   │
    │        ├──► _create_socket()   socket() + setsockopt()              │
    │        ├──► bind()             raises BindError on failure          │
    │        ├──► listen()                                                 │
    │        ├──► _setup_signals()   SIGTERM/SIGINT → shutdown()          │
    │        └──► _accept_loop()     BLOCKS here                          │
    │                 └──► while running:                                  │
    │                         accept()         (1s timeout)                │
    │                         Connection(...)  wrap client socket          │
    │                         callback(conn)   must return quickly        │
    │                                                                      │
    │    shutdown()        _running = False, accept loop exits            │
    │    _cleanup()        restore signals, close socket                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        def handle_connection(conn: Connection):
            pool.submit(handler.handle, args=(conn,))

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    # accept() timeout, so the loop notices shutdown() promptly
    ACCEPT_TIMEOUT = 1.0

    # Pause after an accept() error so fd exhaustion doesn't spin the CPU
    ACCEPT_ERROR_BACKOFF = 0.1

    def __init__(self, config: ServerConfig):
        """
        Initialize the socket server.

        Note: This does NOT create the socket. That happens in start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound_address: Optional[Tuple[str, int]] = None

        # Set once the socket is listening; tests wait on it
        self._ready_event = threading.Event()

        # Save original signal handlers so we can restore them
        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        Get the server's bound address (IP, port).

        After binding this is the real address, so port 0 in the config
        shows up here as the port the OS picked.
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.settimeout(self.ACCEPT_TIMEOUT)
        return sock

    def _setup_signals(self):
        """
        Setup signal handlers for graceful shutdown.

        SIGTERM (15): docker stop, systemd stop, kill <pid>
        SIGINT (2):   Ctrl+C in terminal

        Python only allows signal handlers in the main thread. When the
        server runs in a background thread (tests, embedding) we skip
        this and rely on shutdown() being called directly.
        """
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not in main thread, skipping signal handlers")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and accept connections until shutdown() is called.

        This method BLOCKS.

        Args:
            connection_handler: Called with each new Connection. It runs
                                on the accept loop, so it must only hand
                                the connection off, never process it.

        Raises:
            BindError: If the address can't be bound.
        """
        self._socket = self._create_socket()

        try:
            # bind() tells the OS: "When packets arrive for this IP:PORT,
            # deliver them to this socket."
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise BindError(self.config.host, self.config.port, str(e)) from e

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._setup_signals()

        host, port = self._bound_address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Main loop for accepting connections.

        ┌─────────────────────────────────────────────────────────────────┐
        │                     Accept Loop Flow                             │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   while self._running:                                           │
        │       ├──► accept()          BLOCKS (1s timeout)                 │
        │       ├──► Connection(...)   wrap the client socket              │
        │       └──► connection_handler(conn)                              │
        │               └── submits to the worker pool, returns at once   │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Normal: lets us re-check self._running once a second
                continue
            except OSError as e:
                if not self._running or self._socket is None or self._socket.fileno() == -1:
                    break  # Listening socket closed under us: shutting down
                logger.error(f"Accept error: {e}")
                time.sleep(self.ACCEPT_ERROR_BACKOFF)
                continue

            conn = Connection(socket=client_socket, address=client_address)
            logger.debug(f"[{conn.id}] Accepted connection from {client_address[0]}:{client_address[1]}")

            try:
                connection_handler(conn)
            except Exception as e:
                # Dispatch failed (e.g. can't start a thread): drop this
                # connection, keep serving the others
                logger.exception(f"[{conn.id}] Failed to dispatch connection: {e}")
                conn.close()

    def shutdown(self):
        """
        Initiate graceful shutdown.

        Can be called from a signal handler or another thread. It's safe
        to call multiple times.
        """
        logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Clean up resources on shutdown."""
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass  # Already closed
            self._socket = None

        self._running = False
        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the socket is bound and listening.

        Returns:
            True if the server is ready, False on timeout.
        """
        return self._ready_event.wait(timeout)
