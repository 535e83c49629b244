"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing under the HTTP layer: the listening socket, the
accepted client connections, and the threads that process them.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Creates the TCP listening socket                                 │
    │  • Binds to IP:PORT (BindError if taken) and listens                │
    │  • Runs the accept() loop; accept errors don't stop it              │
    │  • Graceful shutdown via signals (SIGTERM, SIGINT)                  │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ Hands off new connections
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          WORKER POOL                                 │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • submit() never blocks the accept loop                            │
    │  • Default: a new thread per connection                             │
    │  • max_workers=N: N threads pulling from an unbounded queue         │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ Worker processes connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Wraps a client socket with buffered reader/writer streams        │
    │  • Tracks state (ACCEPTED → PARSING → SERVING → CLOSED)             │
    │  • close() is idempotent and always releases the socket             │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .workers import WorkerPool, Worker, Task

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "WorkerPool",
    "Worker",
    "Task",
]
