"""
=============================================================================
SERVER ERRORS
=============================================================================

Every failure the server knows how to name, grouped by how far it spreads:

    ┌──────────────────────────┬──────────────┬──────────────────────────┐
    │ Exception                │ Scope        │ Outcome                  │
    ├──────────────────────────┼──────────────┼──────────────────────────┤
    │ BindError                │ process      │ server exits, status 1   │
    │ MalformedRequestError    │ connection   │ closed, no response      │
    │ UnsupportedMethodError   │ connection   │ 400 Bad Request          │
    │ NotFoundError            │ connection   │ 404 Not Found            │
    │ OSError (builtin)        │ connection   │ logged, closed           │
    └──────────────────────────┴──────────────┴──────────────────────────┘

Nothing scoped to a connection is allowed to escape its handler.

This module imports nothing from the rest of the package, so any layer
can raise these without creating an import cycle.

=============================================================================
"""


class ServerError(Exception):
    """Base class for errors raised by staticserver."""


class BindError(ServerError):
    """
    Raised when the listening socket can't be bound.

    Usually "Address already in use" or "Permission denied" (ports below
    1024 need root). The original OSError is chained as __cause__.
    """

    def __init__(self, host: str, port: int, reason: str):
        super().__init__(f"Cannot bind to {host}:{port}: {reason}")
        self.host = host
        self.port = port


class MalformedRequestError(ServerError):
    """
    Raised when a request line can't be parsed.

    Covers a connection that closes before sending a line, and a request
    line with fewer than two tokens (no method or no target).
    """


class ClientError(ServerError):
    """
    A request we understood but refuse, answered with an error page.

    Carries the HTTP status code to send and a human-readable message
    for the page body.
    """

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnsupportedMethodError(ClientError):
    status_code = 400

    def __init__(self, method: str):
        super().__init__("This server only supports the GET method.")
        self.method = method


class NotFoundError(ClientError):
    status_code = 404

    def __init__(self, target: str):
        super().__init__(f"File {target} not found.")
        self.target = target
