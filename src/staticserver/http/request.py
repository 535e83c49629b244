"""
=============================================================================
HTTP/1.0 REQUEST PARSER
=============================================================================

Reads an HTTP/1.0 request off a byte stream and turns its request line
into a structured HTTPRequest.

=============================================================================
WHAT WE READ
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP/1.0 REQUEST (no body)                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │    GET /images/logo.gif HTTP/1.0\r\n                           │ │
    │  │    ─┬─ ────────┬──────── ───┬────                              │ │
    │  │   Method     Target      Version (optional, default HTTP/1.0)  │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS (read and discarded) ─────────────────────────────────┐ │
    │  │    Host: localhost:6789\r\n                                    │ │
    │  │    User-Agent: curl/8.0\r\n                                    │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                   ← end of the request                  │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Only the request line matters for serving a static file, but the header
lines still have to be consumed: the blank line is the only thing that
tells us where this request ends on the stream.

=============================================================================
TOKENIZING THE REQUEST LINE
=============================================================================

The line is split on RUNS of ASCII whitespace (space, tab, CR, LF,
form feed), not on single spaces, so "GET    /a.html\tHTTP/1.0" parses
the same as "GET /a.html HTTP/1.0". Other characters, U+00A0 included,
stay inside their token.

    tokens          result
    ──────          ──────
    0 or 1          MalformedRequestError (no method or no target)
    2               method, target, version defaults to "HTTP/1.0"
    3 or more       method, target, version (extras ignored)

Method and version are not validated here. Deciding that POST gets a
400 is the connection handler's job, not the parser's.

=============================================================================
"""

import io
import logging
import re
from dataclasses import dataclass
from typing import BinaryIO, Tuple

from ..errors import MalformedRequestError


logger = logging.getLogger(__name__)


DEFAULT_VERSION = "HTTP/1.0"

# ASCII whitespace only: U+00A0 and friends stay inside a token
_TOKEN_SEPARATOR = re.compile(r"[ \t\n\r\f]+")


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request line.

    Built once per connection and never modified afterwards (frozen).

    Attributes:
        method:         The HTTP method exactly as sent ("GET", "POST", ...)
        target:         The request target exactly as sent ("/", "/a.html")
        version:        Protocol version, "HTTP/1.0" if the client omitted it
        client_address: (ip, port) of the client, for logging
    """

    method: str
    target: str
    version: str = DEFAULT_VERSION
    client_address: Tuple[str, int] = ("", 0)

    @property
    def request_line(self) -> str:
        """The request line as we understood it, e.g. 'GET / HTTP/1.0'."""
        return f"{self.method} {self.target} {self.version}"


class RequestParser:
    """
    Parses the request line off a binary stream and drains the headers.

    =========================================================================
    STREAM CONTRACT
    =========================================================================

    `stream` is anything with a bytes `readline(limit)` method: the
    buffered reader from socket.makefile("rb"), or io.BytesIO in tests.
    readline() returns b"" at end of stream.

    =========================================================================
    LIMITS
    =========================================================================

    A client that never sends a newline would otherwise make readline()
    buffer forever. Each line is capped at max_line_size bytes and the
    header block at max_headers lines. A request line over the cap is
    malformed; a header over either cap just ends the drain, and the
    request is served from its request line.

    =========================================================================
    """

    def __init__(self, max_line_size: int = 65536, max_headers: int = 100):
        self.max_line_size = max_line_size
        self.max_headers = max_headers

    def parse(
        self,
        stream: BinaryIO,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Read one request from the stream.

        Args:
            stream: Binary stream positioned at the start of a request.
            client_address: Client's (ip, port) tuple for logging.

        Returns:
            The parsed HTTPRequest.

        Raises:
            MalformedRequestError: The stream ended before a request line,
                the request line has fewer than two tokens, or the request
                line is longer than max_line_size.
        """
        # ─────────────────────────────────────────────────────────────────
        # STEP 1: Request line
        # ─────────────────────────────────────────────────────────────────
        raw_line = self._read_line(stream)
        if not raw_line:
            raise MalformedRequestError(
                "Empty request: connection closed before a request line"
            )

        line = self._decode(raw_line)
        logger.debug(f"Request line: {line!r}")

        tokens = [t for t in _TOKEN_SEPARATOR.split(line) if t]
        if len(tokens) < 2:
            raise MalformedRequestError(f"Incomplete request line: {line!r}")

        method, target = tokens[0], tokens[1]
        version = tokens[2] if len(tokens) > 2 else DEFAULT_VERSION

        # ─────────────────────────────────────────────────────────────────
        # STEP 2: Drain headers up to and including the blank line
        # ─────────────────────────────────────────────────────────────────
        self._drain_headers(stream)

        return HTTPRequest(
            method=method,
            target=target,
            version=version,
            client_address=client_address,
        )

    def _read_line(self, stream: BinaryIO) -> bytes:
        """Read the request line, refusing one longer than max_line_size."""
        raw_line = stream.readline(self.max_line_size + 1)
        if len(raw_line) > self.max_line_size:
            raise MalformedRequestError(
                f"Line too long: more than {self.max_line_size} bytes"
            )
        return raw_line

    def _drain_headers(self, stream: BinaryIO) -> None:
        """
        Consume header lines until the empty line or end of stream.

        Header content is not kept, only logged at DEBUG level. A stream
        that ends without the blank line is tolerated: a bare
        "GET /\\r\\n" from a simple client is still a request we can serve.
        Hitting max_headers or max_line_size just stops the drain; the
        request line is already parsed and still gets its response.
        """
        for _ in range(self.max_headers + 1):
            raw_line = stream.readline(self.max_line_size + 1)
            if not raw_line:
                return  # end of stream
            if len(raw_line) > self.max_line_size:
                logger.debug(f"Header line over {self.max_line_size} bytes, not draining further")
                return
            line = self._decode(raw_line)
            if not line:
                return  # blank line: end of headers
            logger.debug(f"Header: {line}")

        logger.debug(f"More than {self.max_headers} header lines, not draining further")

    @staticmethod
    def _decode(raw_line: bytes) -> str:
        """Decode a line and strip its CRLF (or bare LF) terminator."""
        return raw_line.decode("utf-8", errors="replace").rstrip("\r\n")


def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """
    Convenience function to parse a request from raw bytes.

    Example:
        >>> parse_request(b"GET /index.html HTTP/1.0\\r\\n\\r\\n").target
        '/index.html'
    """
    return RequestParser().parse(io.BytesIO(data), client_address)
