"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The handful of status codes this server can answer with, plus their
reason phrases.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  Code  │ When we send it                                           │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  200   │ GET for a file that exists under the document root       │
    │  400   │ Any method other than GET                                 │
    │  404   │ GET for a path that is missing, a directory, or outside  │
    │        │ the document root                                         │
    └────────┴───────────────────────────────────────────────────────────┘

A malformed request line gets no status code at all: the connection is
simply closed, because we can't trust anything the client sent.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Extends IntEnum, so members compare and format as plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> f"{HTTPStatus.NOT_FOUND:d}"
        '404'
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                     # File found and served
    BAD_REQUEST = 400            # Unsupported method
    NOT_FOUND = 404              # No regular file at that path
    INTERNAL_SERVER_ERROR = 500  # Reserved for unexpected failures

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

        The reason phrase is the text after the code in the status line:

            HTTP/1.0 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
