"""
=============================================================================
STATIC FILE SERVER
=============================================================================

The orchestrator: ties the listener, the worker pool and the connection
handler together into a running server.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      STATIC SERVER ARCHITECTURE                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        │ (Orchestrator)  │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌───────────────────┐   │
    │    │ SocketServer │    │  WorkerPool  │    │ ConnectionHandler │   │
    │    │  (Listener)  │    │ (Concurrency)│    │ parse/resolve/    │   │
    │    └──────────────┘    └──────────────┘    │ respond/close     │   │
    │                                             └───────────────────┘   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. CLIENT CONNECTS
       └── SocketServer accepts the TCP connection

    2. HAND OFF
       └── WorkerPool.submit() runs the handler on another thread;
           the accept loop goes straight back to accept()

    3. PARSE REQUEST (worker thread)
       └── Request line → method, target, version; headers discarded

    4. RESPOND
       └── GET + existing file   → 200 with the file bytes
           GET + missing file    → 404 HTML page
           anything but GET      → 400 HTML page

    5. CLOSE
       └── One request per connection (HTTP/1.0, Connection: close)

=============================================================================
"""

import logging
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, WorkerPool
from .handlers import ConnectionHandler, StaticFileResolver


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Concurrent HTTP/1.0 static file server.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(port=6789, document_root="./public"))
        server.run()  # Blocks until SIGINT/SIGTERM or shutdown()

    Embedding (tests, other programs):

        server = HTTPServer(ServerConfig(port=0, document_root=root))
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        server.wait_until_ready(timeout=5)
        host, port = server.address
        ...
        server.shutdown()
        thread.join()

    =========================================================================
    """

    # How long shutdown waits for in-flight connections
    SHUTDOWN_TIMEOUT = 5.0

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Initialize the server.

        Args:
            config: Server configuration. Uses defaults if not provided.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        # ─────────────────────────────────────────────────────────────────
        # CORE COMPONENTS
        # ─────────────────────────────────────────────────────────────────

        self._socket_server = SocketServer(self.config)
        self._pool = WorkerPool(max_workers=self.config.max_workers)
        self._handler = ConnectionHandler(
            StaticFileResolver(self.config.document_root, self.config.index_file),
            log_format=self.config.log_format,
        )

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port). The real port once listening, even for port 0."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    @property
    def stats(self) -> dict:
        """Worker pool statistics."""
        return self._pool.stats

    def run(self):
        """
        Start the server (blocking).

        Blocks until the server is stopped (Ctrl+C, SIGTERM or shutdown()).

        Raises:
            BindError: If the port can't be bound. Nothing is left running.
        """
        self._setup_logging()

        self._pool.start()

        logger.info(
            f"Serving {self._handler.resolver.root_dir} on "
            f"{self.config.host}:{self.config.port}"
        )

        try:
            # Blocks; _handle_connection is called for each new client
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask a running server to stop. Safe from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Wait until the listening socket is bound. False on timeout."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = self.config.log_level_value

        # No-op if the host application already configured the root logger
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("staticserver").setLevel(level)

    def _shutdown(self):
        """
        Graceful shutdown.

        The listener is already closed when we get here, so no new
        connections arrive; connections in flight get SHUTDOWN_TIMEOUT
        seconds to finish.
        """
        logger.info("Initiating graceful shutdown...")
        self._socket_server.shutdown()
        self._pool.shutdown(wait=True, timeout=self.SHUTDOWN_TIMEOUT)
        logger.info("Server shutdown complete")

    def _handle_connection(self, conn: Connection):
        """
        Hand a new connection to the worker pool.

        Called on the accept loop, so it only submits and returns.
        """
        self._pool.submit(self._handler.handle, args=(conn,))


def serve(port: int = 6789, document_root: str = ".", **kwargs) -> None:
    """
    Serve document_root on port until interrupted.

    Extra keyword arguments are passed through to ServerConfig.

    Example:
        from staticserver import serve
        serve(8000, "./public", max_workers=16)
    """
    config = ServerConfig(port=port, document_root=document_root, **kwargs)
    HTTPServer(config).run()
