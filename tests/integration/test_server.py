"""
Integration tests: a real server on a real port.
"""

import socket
import threading
from pathlib import Path

import pytest

from staticserver import BindError, HTTPServer, ServerConfig

from conftest import GIF_BYTES, JPEG_BYTES, RunningServer, recv_all, split_response


class TestScenarios:
    """End-to-end request/response exchanges."""

    def test_get_index(self, running_server: RunningServer):
        raw = running_server.request(b"GET /index.html HTTP/1.0\r\n\r\n")

        assert raw == (
            b"HTTP/1.0 200 OK\r\n"
            b"Content-Type: text/html\r\n"
            b"Connection: close\r\n"
            b"Content-Length: 2\r\n"
            b"\r\n"
            b"hi"
        )

    def test_root_is_index(self, running_server: RunningServer):
        raw = running_server.request(b"GET / HTTP/1.0\r\n\r\n")

        assert raw.endswith(b"\r\n\r\nhi")

    def test_missing_file(self, running_server: RunningServer):
        raw = running_server.request(b"GET /missing.png HTTP/1.0\r\n\r\n")
        status, _, body = split_response(raw)

        assert status == "HTTP/1.0 404 Not Found"
        assert b"missing.png" in body

    def test_post(self, running_server: RunningServer):
        raw = running_server.request(b"POST / HTTP/1.0\r\n\r\n")
        status, _, _ = split_response(raw)

        assert status == "HTTP/1.0 400 Bad Request"

    def test_traversal(self, running_server: RunningServer):
        raw = running_server.request(b"GET /../secret.txt HTTP/1.0\r\n\r\n")

        assert raw.startswith(b"HTTP/1.0 404 Not Found\r\n")
        assert b"top secret" not in raw

    def test_with_headers(self, running_server: RunningServer):
        raw = running_server.request(
            b"GET /a.gif HTTP/1.0\r\n"
            b"Host: localhost\r\n"
            b"User-Agent: pytest\r\n"
            b"Accept: */*\r\n"
            b"\r\n"
        )
        _, headers, body = split_response(raw)

        assert headers["Content-Type"] == "image/gif"
        assert body == GIF_BYTES

    def test_large_file_round_trip(self, running_server: RunningServer, document_root: Path):
        """Bytes served == bytes on disk, for a file bigger than any buffer."""
        data = bytes(range(256)) * 8192  # 2 MiB
        (document_root / "big.jpg").write_bytes(data)

        raw = running_server.request(b"GET /big.jpg HTTP/1.0\r\n\r\n", timeout=10.0)
        _, headers, body = split_response(raw)

        assert headers["Content-Length"] == str(len(data))
        assert body == data

    def test_server_closes_connection(self, running_server: RunningServer):
        """One request per connection: a second request is never answered."""
        with socket.create_connection(running_server.address, timeout=5.0) as sock:
            sock.sendall(b"GET / HTTP/1.0\r\n\r\n")
            first = recv_all(sock)  # returns only because the server closed

        assert first.startswith(b"HTTP/1.0 200 OK\r\n")

    def test_garbage_does_not_kill_server(self, running_server: RunningServer):
        with socket.create_connection(running_server.address, timeout=5.0) as sock:
            sock.sendall(b"\r\n")
            sock.shutdown(socket.SHUT_WR)
            assert recv_all(sock) == b""

        raw = running_server.request(b"GET / HTTP/1.0\r\n\r\n")
        assert raw.startswith(b"HTTP/1.0 200 OK\r\n")

    def test_client_hangs_up_early(self, running_server: RunningServer):
        sock = socket.create_connection(running_server.address, timeout=5.0)
        sock.close()

        raw = running_server.request(b"GET / HTTP/1.0\r\n\r\n")
        assert raw.startswith(b"HTTP/1.0 200 OK\r\n")


class TestConcurrency:
    """Connections are handled independently of each other."""

    def test_two_clients_different_files(self, running_server: RunningServer):
        results = {}

        def fetch(target: str):
            raw = running_server.request(f"GET {target} HTTP/1.0\r\n\r\n".encode())
            results[target] = split_response(raw)[2]

        threads = [
            threading.Thread(target=fetch, args=("/a.gif",)),
            threading.Thread(target=fetch, args=("/photo.jpg",)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert results["/a.gif"] == GIF_BYTES
        assert results["/photo.jpg"] == JPEG_BYTES

    def test_silent_client_does_not_block_others(self, running_server: RunningServer):
        """A client that connects and sends nothing holds only its own worker."""
        with socket.create_connection(running_server.address, timeout=5.0):
            raw = running_server.request(b"GET / HTTP/1.0\r\n\r\n")

        assert raw.startswith(b"HTTP/1.0 200 OK\r\n")

    def test_many_clients(self, running_server: RunningServer):
        errors = []

        def fetch():
            try:
                raw = running_server.request(b"GET /a.gif HTTP/1.0\r\n\r\n")
                assert split_response(raw)[2] == GIF_BYTES
            except Exception as e:  # collected and asserted below
                errors.append(e)

        threads = [threading.Thread(target=fetch) for _ in range(25)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert errors == []


class TestBoundedWorkers:
    """max_workers=N behaves the same from the client's side."""

    def test_serves_with_bounded_pool(self, server_config: ServerConfig):
        server_config.max_workers = 2
        srv = RunningServer(HTTPServer(server_config))
        srv.start()
        try:
            for _ in range(5):
                raw = srv.request(b"GET / HTTP/1.0\r\n\r\n")
                assert raw.startswith(b"HTTP/1.0 200 OK\r\n")
        finally:
            srv.stop()

        assert srv.server.stats["completed"] == 5


class TestLifecycle:
    """Startup and shutdown."""

    def test_port_zero_reports_real_port(self, running_server: RunningServer):
        host, port = running_server.address

        assert host == "127.0.0.1"
        assert port != 0

    def test_port_in_use(self, document_root: Path):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind(("127.0.0.1", 0))
            blocker.listen(1)
            port = blocker.getsockname()[1]

            server = HTTPServer(ServerConfig(
                host="127.0.0.1",
                port=port,
                document_root=str(document_root),
                log_level="WARNING",
            ))

            with pytest.raises(BindError) as exc_info:
                server.run()

        assert exc_info.value.port == port
        assert not server.is_running

    def test_invalid_root_fails_fast(self, tmp_path: Path):
        with pytest.raises(ValueError):
            HTTPServer(ServerConfig(document_root=str(tmp_path / "nope")))

    def test_shutdown_stops_accepting(self, server_config: ServerConfig):
        srv = RunningServer(HTTPServer(server_config))
        srv.start()
        address = srv.address
        srv.stop()

        assert not srv.server.is_running
        with pytest.raises(OSError):
            socket.create_connection(address, timeout=1.0)
