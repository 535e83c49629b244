"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the static file server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m staticserver --port 8000 --root ./public        │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── STATICSERVER_PORT=8000 python -m staticserver             │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The two things that matter are the port and the document root.
Everything else is tuning for the listener, the worker pool and logging.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


ENV_PREFIX = "STATICSERVER_"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the static file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog

    FILES
    - document_root, index_file

    CONCURRENCY
    - max_workers

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to.
    - "0.0.0.0" - All network interfaces
    - "127.0.0.1" - Localhost only
    """

    port: int = 6789
    """
    The port number to listen on. 0 asks the OS for any free port
    (handy in tests; the bound port is then on HTTPServer.address).
    """

    backlog: int = 128
    """
    Maximum number of queued connections waiting for accept().
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "."
    """
    Directory files are served from. Nothing outside it is reachable.
    """

    index_file: str = "index.html"
    """
    Default document served for the target "/".
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY
    # ─────────────────────────────────────────────────────────────────────

    max_workers: Optional[int] = None
    """
    None = one thread per connection, no limit.
    N = N worker threads; extra connections wait in a queue.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    DEBUG also logs every request header line.
    """

    log_format: str = "text"
    """
    Access log format: 'text' (Apache-style line) or 'json'.
    """

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        STATICSERVER_HOST        Bind address (default: 0.0.0.0)
        STATICSERVER_PORT        Port (default: 6789)
        STATICSERVER_ROOT        Document root (default: .)
        STATICSERVER_WORKERS     Worker threads (default: unbounded)
        STATICSERVER_LOG_LEVEL   Logging level (default: INFO)
        STATICSERVER_LOG_FORMAT  Access log format (default: text)

        =====================================================================
        """
        workers = os.getenv(ENV_PREFIX + "WORKERS")
        return cls(
            host=os.getenv(ENV_PREFIX + "HOST", "0.0.0.0"),
            port=int(os.getenv(ENV_PREFIX + "PORT", "6789")),
            document_root=os.getenv(ENV_PREFIX + "ROOT", "."),
            max_workers=int(workers) if workers else None,
            log_level=os.getenv(ENV_PREFIX + "LOG_LEVEL", "INFO"),
            log_format=os.getenv(ENV_PREFIX + "LOG_FORMAT", "text"),
        )

    @property
    def log_level_value(self) -> int:
        """The log level as a `logging` constant."""
        return getattr(logging, self.log_level.upper(), logging.INFO)

    def validate(self) -> None:
        """
        Validate configuration values.

        Fail fast at startup rather than on the first request.

        Raises:
            ValueError: On the first invalid setting found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if not Path(self.document_root).is_dir():
            raise ValueError(f"Document root is not a directory: {self.document_root}")

        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be >= 1 (or unset for no limit)")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Unknown log format: {self.log_format}. Use 'text' or 'json'.")
