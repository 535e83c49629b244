"""
=============================================================================
CONNECTION HANDLER
=============================================================================

Runs one connection from accept to close: parse, resolve, respond, close.
This runs on a worker thread, one call per accepted connection.

=============================================================================
FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         handle(conn)                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   with conn:                         ← close() on EVERY exit path   │
    │       │                                                              │
    │       ├──► PARSING                                                   │
    │       │       parser.parse(conn.reader)                              │
    │       │       └── MalformedRequestError → log, close, no response   │
    │       │                                                              │
    │       ├──► method != "GET"                                           │
    │       │       └── ERROR_RESPONDING: 400 Bad Request                 │
    │       │                                                              │
    │       ├──► resolver.resolve(target)                                  │
    │       │       ├── None      → ERROR_RESPONDING: 404 Not Found       │
    │       │       └── file      → SERVING: 200 OK + file bytes          │
    │       │                                                              │
    │       └──► CLOSED                                                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ERROR CONTAINMENT
=============================================================================

Nothing raised while handling a connection leaves handle():

    MalformedRequestError   WARNING, no response
    OSError                 WARNING (client hung up, disk read failed...)
    anything else           ERROR with traceback

The accept loop and every other connection carry on regardless.

=============================================================================
"""

import logging
import time
from typing import Optional

from ..access_log import RequestLog, log_request
from ..core.connection import Connection, ConnectionState
from ..errors import ClientError, MalformedRequestError, NotFoundError, UnsupportedMethodError
from ..http.request import HTTPRequest, RequestParser
from ..http.response import ErrorStatus, ResponseWriter
from ..http.status_codes import HTTPStatus
from .static import StaticFileResolver


logger = logging.getLogger(__name__)


class ConnectionHandler:
    """
    Serves exactly one request per connection, then closes it.

    Holds no per-connection state: one instance is shared by all worker
    threads, and everything about a single connection lives in local
    variables of handle().

    Usage:
        handler = ConnectionHandler(StaticFileResolver("/var/www"))
        pool.submit(handler.handle, args=(conn,))
    """

    SUPPORTED_METHOD = "GET"

    def __init__(
        self,
        resolver: StaticFileResolver,
        parser: Optional[RequestParser] = None,
        writer: Optional[ResponseWriter] = None,
        log_format: str = "text",
    ):
        self.resolver = resolver
        self.parser = parser or RequestParser()
        self.writer = writer or ResponseWriter()
        self.log_format = log_format

    def handle(self, conn: Connection) -> None:
        """
        Handle one connection from start to finish.

        Never raises. The connection is always closed on return.
        """
        with conn:  # Context manager ensures connection is closed
            try:
                self._process(conn)
            except MalformedRequestError as e:
                logger.warning(f"[{conn.id}] Malformed request from {conn.client_ip}: {e}")
            except OSError as e:
                logger.warning(f"[{conn.id}] I/O error while {conn.state.value}: {e}")
            except Exception as e:
                logger.exception(f"[{conn.id}] Unexpected error: {e}")

    def _process(self, conn: Connection) -> None:
        """Parse the request, pick a response, send it."""
        conn.state = ConnectionState.PARSING
        request = self.parser.parse(conn.reader, conn.address)

        logger.debug(f"[{conn.id}] {request.request_line}")

        try:
            resolved = self._resolve(request)
        except ClientError as e:
            conn.state = ConnectionState.ERROR_RESPONDING
            status = HTTPStatus(e.status_code)
            error = ErrorStatus.from_status(status, e.message)
            sent = self.writer.write_error_status(conn.writer, error)
            self._log_access(conn, request, status, sent)
            return

        conn.state = ConnectionState.SERVING
        sent = self.writer.write_file(conn.writer, resolved.content_type, resolved.content)
        self._log_access(conn, request, HTTPStatus.OK, sent)

    def _resolve(self, request: HTTPRequest):
        """
        Map a parsed request to a file.

        Raises:
            UnsupportedMethodError: Method is not GET.
            NotFoundError: No regular file at the target.
        """
        if request.method != self.SUPPORTED_METHOD:
            raise UnsupportedMethodError(request.method)

        resolved = self.resolver.resolve(request.target)
        if resolved is None:
            raise NotFoundError(self.resolver.lookup_path(request.target))
        return resolved

    def _log_access(self, conn: Connection, request: HTTPRequest, status: HTTPStatus, sent: int) -> None:
        entry = RequestLog.for_request(
            connection_id=conn.id,
            request=request,
            status_code=int(status),
            content_length=sent,
            duration_ms=(time.time() - conn.created_at) * 1000,
        )
        log_request(entry, self.log_format)
