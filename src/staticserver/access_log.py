"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log line per response sent, on the "staticserver.access" logger.

Keeping access lines on their own namespaced logger lets operators route
them separately from diagnostics:

    logging.getLogger("staticserver.access").addHandler(file_handler)
    logging.getLogger("staticserver.access").propagate = False

=============================================================================
FORMATS
=============================================================================

    text (Apache common-log style, human readable):

        127.0.0.1 - - [18/Oct/2026:13:07:02 +0000] "GET /index.html HTTP/1.0" 200 2 0.41ms

    json (one object per line, for log aggregators):

        {"connection_id": "3f2a9c1e", "client_ip": "127.0.0.1", ...}

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass, asdict

from .http.request import HTTPRequest


logger = logging.getLogger("staticserver.access")


@dataclass
class RequestLog:
    """
    Structured log entry for one request/response cycle.

    Attributes:
        connection_id:  Id of the connection that carried the request
        client_ip:      Client's IP address
        method:         HTTP method as sent
        target:         Request target as sent
        version:        Protocol version
        status_code:    Status code of the response we sent
        content_length: Response body size in bytes
        duration_ms:    Time from accept to response written
        timestamp:      When the response was written
    """

    connection_id: str
    client_ip: str
    method: str
    target: str
    version: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    @classmethod
    def for_request(
        cls,
        connection_id: str,
        request: HTTPRequest,
        status_code: int,
        content_length: int,
        duration_ms: float,
    ) -> "RequestLog":
        return cls(
            connection_id=connection_id,
            client_ip=request.client_address[0] or "-",
            method=request.method,
            target=request.target,
            version=request.version,
            status_code=status_code,
            content_length=content_length,
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        """Format as an Apache common-log style line."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.target} {self.version}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


def log_request(entry: RequestLog, log_format: str = "text", level: int = logging.INFO) -> None:
    """Emit an access log entry in the given format ('text' or 'json')."""
    if log_format == "json":
        logger.log(level, json.dumps(entry.to_dict()))
    else:
        logger.log(level, entry.to_text())
