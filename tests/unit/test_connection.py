"""
Unit tests for Connection.
"""

import socket

import pytest

from staticserver.core.connection import Connection, ConnectionState


@pytest.fixture
def pair():
    client, server = socket.socketpair()
    yield client, server
    client.close()
    server.close()


class TestConnection:
    """Tests for Connection class."""

    def test_initial_state(self, pair):
        _, server = pair
        conn = Connection(socket=server, address=("127.0.0.1", 4321))

        assert conn.state == ConnectionState.ACCEPTED
        assert conn.client_ip == "127.0.0.1"
        assert conn.client_port == 4321
        assert len(conn.id) == 8
        assert not conn.is_closed

    def test_ids_are_unique(self, pair):
        _, server = pair
        ids = {Connection(socket=server, address=("", 0)).id for _ in range(100)}

        assert len(ids) == 100

    def test_streams(self, pair):
        client, server = pair
        conn = Connection(socket=server, address=("127.0.0.1", 1))

        client.sendall(b"GET / HTTP/1.0\r\n")
        assert conn.reader.readline() == b"GET / HTTP/1.0\r\n"

        conn.writer.write(b"pong")
        conn.writer.flush()
        assert client.recv(4) == b"pong"

    def test_close_flushes_and_sends_eof(self, pair):
        client, server = pair
        conn = Connection(socket=server, address=("127.0.0.1", 1), drain_timeout=0.1)
        conn.writer.write(b"buffered")
        client.shutdown(socket.SHUT_WR)

        conn.close()

        assert client.recv(64) == b"buffered"
        assert client.recv(64) == b""
        assert conn.is_closed
        assert server.fileno() == -1

    def test_close_is_idempotent(self, pair):
        _, server = pair
        conn = Connection(socket=server, address=("127.0.0.1", 1), drain_timeout=0.1)

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_close_after_peer_vanished(self, pair):
        client, server = pair
        conn = Connection(socket=server, address=("127.0.0.1", 1), drain_timeout=0.1)
        conn.writer.write(b"x" * 1024)
        client.close()

        conn.close()  # must not raise

        assert conn.is_closed

    def test_context_manager_closes_on_error(self, pair):
        _, server = pair
        conn = Connection(socket=server, address=("127.0.0.1", 1), drain_timeout=0.1)

        with pytest.raises(RuntimeError):
            with conn:
                raise RuntimeError("oops")

        assert conn.is_closed
