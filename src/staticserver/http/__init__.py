"""
=============================================================================
HTTP/1.0 PROTOCOL IMPLEMENTATION
=============================================================================

The protocol half of the server: turning bytes from a TCP stream into a
request, and a file (or an error) back into response bytes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP/1.0 Request-Response Cycle                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   CLIENT                                         SERVER              │
    │      │   GET /index.html HTTP/1.0                  │                │
    │      │   Host: localhost                            │                │
    │      │  ─────────────────────────────────────────►  │                │
    │      │                                              │                │
    │      │               HTTP/1.0 200 OK                │                │
    │      │               Content-Type: text/html        │                │
    │      │               Connection: close              │                │
    │      │               Content-Length: 2              │                │
    │      │  ◄─────────────────────────────────────────  │                │
    │      │                                           close()            │
    │                                                                      │
    │   One request, one response, then the socket is closed.             │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
MODULE COMPONENTS
=============================================================================

    request.py       RequestParser: request line → HTTPRequest
    response.py      ResponseWriter: file / error page → bytes on stream
    status_codes.py  HTTPStatus: the codes we answer with
    mime_types.py    get_content_type(): extension → Content-Type

=============================================================================
"""

from .request import HTTPRequest, RequestParser, parse_request
from .response import HTTPResponse, ResponseWriter, ErrorStatus, error_html
from .status_codes import HTTPStatus
from .mime_types import get_content_type

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "parse_request",

    # Response writing
    "HTTPResponse",
    "ResponseWriter",
    "ErrorStatus",
    "error_html",

    # Status codes
    "HTTPStatus",

    # MIME types
    "get_content_type",
]
