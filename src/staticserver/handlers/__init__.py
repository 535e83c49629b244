"""
=============================================================================
HANDLERS MODULE
=============================================================================

What the server does with a connection once a worker picks it up.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                  CONNECTION → HANDLER → RESPONSE                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   ConnectionHandler                                                  │
    │     ├── RequestParser        "GET /a.gif HTTP/1.0"                   │
    │     ├── StaticFileResolver   "/a.gif" → <root>/a.gif, image/gif     │
    │     └── ResponseWriter       200 + bytes, or 400/404 HTML page      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
USAGE
=============================================================================

    from staticserver.handlers import ConnectionHandler, StaticFileResolver

    resolver = StaticFileResolver("/var/www")
    resolver.resolve("/index.html")     # ResolvedFile or None

    handler = ConnectionHandler(resolver)
    pool.submit(handler.handle, args=(conn,))

=============================================================================
"""

from .static import StaticFileResolver, ResolvedFile
from .connection import ConnectionHandler

__all__ = [
    "StaticFileResolver",
    "ResolvedFile",
    "ConnectionHandler",
]
