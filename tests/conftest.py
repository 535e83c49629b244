"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Tuple

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from staticserver import HTTPServer, ServerConfig


# Smallest valid GIF, so content checks compare real image bytes
GIF_BYTES = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!"
    b"\xf9\x04\x01\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00"
    b"\x00\x02\x02D\x01\x00;"
)
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + bytes(range(256)) + b"\xff\xd9"


@pytest.fixture
def document_root(tmp_path: Path) -> Path:
    """
    A small document root:

        index.html          "hi"
        a.gif               GIF bytes
        photo.jpg           JPEG bytes
        notes.txt           plain text
        docs/page.htm       "<p>page</p>"
        docs/               a directory, never served
    """
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(b"hi")
    (root / "a.gif").write_bytes(GIF_BYTES)
    (root / "photo.jpg").write_bytes(JPEG_BYTES)
    (root / "notes.txt").write_bytes(b"plain text\n")
    (root / "docs").mkdir()
    (root / "docs" / "page.htm").write_bytes(b"<p>page</p>")

    # Sits next to the root, reachable only by escaping it
    (tmp_path / "secret.txt").write_bytes(b"top secret")
    return root


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class RunningServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self) -> Tuple[str, int]:
        return self.server.address

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, data: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes, then read the response until the server closes."""
        with socket.create_connection(self.address, timeout=timeout) as sock:
            sock.sendall(data)
            return recv_all(sock)


def recv_all(sock: socket.socket) -> bytes:
    """Read from sock until EOF."""
    chunks = []
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def split_response(raw: bytes) -> Tuple[str, dict, bytes]:
    """Split a raw response into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return lines[0], headers, body


@pytest.fixture
def server_config(document_root: Path) -> ServerConfig:
    """Test server configuration on an OS-assigned port."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        document_root=str(document_root),
        log_level="WARNING",
    )


@pytest.fixture
def running_server(server_config: ServerConfig) -> Generator[RunningServer, None, None]:
    """A server on a free port, serving document_root."""
    srv = RunningServer(HTTPServer(server_config))
    srv.start()

    yield srv

    srv.stop()
