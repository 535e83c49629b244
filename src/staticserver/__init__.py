"""
=============================================================================
STATICSERVER: A CONCURRENT HTTP/1.0 STATIC FILE SERVER
=============================================================================

Serves files from one directory over HTTP/1.0, one request per
connection, each connection on its own thread. Built on raw sockets
and the standard library only.

=============================================================================
QUICK START
=============================================================================

    # From the command line
    python -m staticserver --port 6789 --root ./public

    # From Python
    from staticserver import serve
    serve(6789, "./public")

    # With full control
    from staticserver import HTTPServer, ServerConfig
    server = HTTPServer(ServerConfig(port=6789, document_root="./public"))
    server.run()

=============================================================================
PACKAGE LAYOUT
=============================================================================

    staticserver/
    ├── server.py          HTTPServer: wires everything together
    ├── config.py          ServerConfig (defaults, env vars, validation)
    ├── errors.py          Exception hierarchy
    ├── access_log.py      One access log line per response
    ├── core/
    │   ├── socket_server.py   Listener: bind, listen, accept loop
    │   ├── connection.py      One accepted client socket
    │   └── workers.py         WorkerPool: thread per task, or bounded
    ├── http/
    │   ├── request.py         RequestParser: request line, skip headers
    │   ├── response.py        ResponseWriter: 200 / error frames
    │   ├── status_codes.py    HTTPStatus
    │   └── mime_types.py      Suffix → Content-Type
    └── handlers/
        ├── static.py          StaticFileResolver: target → file
        └── connection.py      ConnectionHandler: parse, respond, close

=============================================================================
WHAT A RESPONSE LOOKS LIKE
=============================================================================

    GET /index.html HTTP/1.0

    HTTP/1.0 200 OK
    Content-Type: text/html
    Connection: close
    Content-Length: 2

    hi

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, serve
from .config import ServerConfig
from .errors import (
    ServerError,
    BindError,
    MalformedRequestError,
    ClientError,
    UnsupportedMethodError,
    NotFoundError,
)

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "serve",
    "ServerError",
    "BindError",
    "MalformedRequestError",
    "ClientError",
    "UnsupportedMethodError",
    "NotFoundError",
    "__version__",
]
