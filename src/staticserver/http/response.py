"""
=============================================================================
HTTP/1.0 RESPONSE WRITER
=============================================================================

Builds HTTP/1.0 responses and writes them onto a connection's output
stream.

=============================================================================
RESPONSE FRAME
=============================================================================

Every response we send has exactly this shape, headers in this order:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HTTP/1.0 200 OK\r\n                    ← Status line               │
    │  Content-Type: text/html\r\n                                         │
    │  Connection: close\r\n                  ← Always: no keep-alive      │
    │  Content-Length: 2\r\n                  ← File responses only        │
    │  \r\n                                   ← End of headers             │
    │  hi                                     ← Body bytes, verbatim       │
    └─────────────────────────────────────────────────────────────────────┘

Error responses leave out Content-Length. Under HTTP/1.0 with
"Connection: close" the client knows the body ends when we close the
socket.

=============================================================================
ERROR PAGES
=============================================================================

Error bodies are a small synthesized HTML page:

    <HTML><HEAD><TITLE>404 Not Found</TITLE></HEAD>
    <BODY><H1>404 Not Found</H1><P>File /missing.png not found.</P></BODY>
    </HTML>

(shown wrapped here; the real page is a single line)

The message is inserted as-is, so a 404 page carries the request target
exactly as the client sent it.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Union

from .status_codes import HTTPStatus


CRLF = "\r\n"
HTTP_VERSION = "HTTP/1.0"


@dataclass(frozen=True)
class ErrorStatus:
    """
    The three pieces an error page is made of.

    Attributes:
        code:    Status code as text, e.g. "404"
        reason:  Reason phrase, e.g. "Not Found"
        message: Human-readable explanation for the page body
    """

    code: str
    reason: str
    message: str

    @classmethod
    def from_status(cls, status: HTTPStatus, message: str) -> "ErrorStatus":
        return cls(code=f"{status:d}", reason=status.phrase, message=message)


def error_html(code: Union[int, str], reason: str, message: str) -> str:
    """Render the HTML body of an error response."""
    return (
        f"<HTML><HEAD><TITLE>{code} {reason}</TITLE></HEAD>"
        f"<BODY><H1>{code} {reason}</H1><P>{message}</P></BODY></HTML>"
    )


@dataclass
class HTTPResponse:
    """
    An HTTP/1.0 response ready to be serialized.

    Headers are kept in insertion order, which is also the order they
    go out on the wire.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        ResponseWriter           to_bytes()              Stream
        builds HTTPResponse ───► serializes ───────────► write + flush
            │                       │                        │
        HTTPResponse(            b"HTTP/1.0 200 OK\\r\\n    stream.write(
          code="200",              Content-Type: ...\\r\\n     response_bytes
          reason="OK",             \\r\\n                    )
          headers={...},           <file bytes>"
          body=b"..."
        )

    =========================================================================
    """

    code: Union[int, str] = "200"
    reason: str = "OK"
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = HTTP_VERSION

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.0 404 Not Found"
        """
        return f"{self.version} {self.code} {self.reason}"

    def to_bytes(self) -> bytes:
        """
        Serialize the response for sending over the socket.

        Unlike a general-purpose HTTP/1.1 server we add no headers of
        our own here (no Date, no Server): the frame is exactly the
        status line, the headers given, a blank line, then the body.
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        # Empty line separates headers from body
        lines.append("")

        header_bytes = CRLF.join(lines).encode("utf-8") + CRLF.encode("ascii")
        return header_bytes + self.body


class ResponseWriter:
    """
    Writes file and error responses onto an output stream.

    The writer holds no per-connection state, so a single instance is
    shared by every connection handler. Write failures (broken pipe,
    connection reset) surface as OSError to the caller and are not
    retried.

    Usage:
        writer = ResponseWriter()
        writer.write_file(stream, "text/html", b"hi")
        writer.write_error(stream, "404", "Not Found", "File /x not found.")
    """

    def write_file(self, stream: BinaryIO, content_type: str, body: bytes) -> int:
        """
        Send a 200 OK response carrying a file.

        Returns:
            Number of body bytes written.
        """
        response = HTTPResponse(
            code=f"{HTTPStatus.OK:d}",
            reason=HTTPStatus.OK.phrase,
            headers={
                "Content-Type": content_type,
                "Connection": "close",
                "Content-Length": str(len(body)),
            },
            body=body,
        )
        self._send(stream, response)
        return len(body)

    def write_error(
        self,
        stream: BinaryIO,
        code: Union[int, str],
        reason: str,
        message: str,
    ) -> int:
        """
        Send an error response with a synthesized HTML page.

        Returns:
            Number of body bytes written.
        """
        body = error_html(code, reason, message).encode("utf-8")
        response = HTTPResponse(
            code=code,
            reason=reason,
            headers={
                "Content-Type": "text/html",
                "Connection": "close",
            },
            body=body,
        )
        self._send(stream, response)
        return len(body)

    def write_error_status(self, stream: BinaryIO, status: ErrorStatus) -> int:
        """Same as write_error(), taking an ErrorStatus."""
        return self.write_error(stream, status.code, status.reason, status.message)

    @staticmethod
    def _send(stream: BinaryIO, response: HTTPResponse) -> None:
        stream.write(response.to_bytes())
        stream.flush()
