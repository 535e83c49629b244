"""
Unit tests for HTTP request parsing.
"""

import io

import pytest

from staticserver.errors import MalformedRequestError
from staticserver.http.request import (
    DEFAULT_VERSION,
    HTTPRequest,
    RequestParser,
    parse_request,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        raw = b"GET /index.html HTTP/1.0\r\nHost: localhost\r\n\r\n"
        request = parser.parse(io.BytesIO(raw), ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.target == "/index.html"
        assert request.version == "HTTP/1.0"
        assert request.client_address == ("127.0.0.1", 12345)

    def test_version_defaults_when_missing(self):
        """A two-token request line gets the default version."""
        request = parse_request(b"GET /\r\n\r\n")

        assert request.target == "/"
        assert request.version == DEFAULT_VERSION == "HTTP/1.0"

    def test_tokens_split_on_whitespace_runs(self):
        """Runs of spaces and tabs separate tokens."""
        request = parse_request(b"GET  \t /a.gif   HTTP/1.1\r\n\r\n")

        assert request.method == "GET"
        assert request.target == "/a.gif"
        assert request.version == "HTTP/1.1"

    def test_method_and_target_kept_verbatim(self):
        """The parser does not judge the method or touch the target."""
        request = parse_request(b"post /a%20b?x=1 HTTP/1.0\r\n\r\n")

        assert request.method == "post"
        assert request.target == "/a%20b?x=1"

    def test_bare_lf_line_endings(self):
        """Lines ending in LF alone are accepted."""
        request = parse_request(b"GET /x HTTP/1.0\nAccept: */*\n\n")

        assert request.target == "/x"

    def test_missing_blank_line_is_tolerated(self):
        """A request that ends without the header terminator still parses."""
        request = parse_request(b"GET /index.html HTTP/1.0\r\nHost: a\r\n")

        assert request.target == "/index.html"

    def test_headers_drained_but_not_beyond_blank_line(self):
        """Headers are consumed up to the blank line, nothing after it."""
        stream = io.BytesIO(
            b"GET / HTTP/1.0\r\n"
            b"Host: localhost\r\n"
            b"User-Agent: pytest\r\n"
            b"\r\n"
            b"leftover"
        )
        RequestParser().parse(stream)

        assert stream.read() == b"leftover"

    def test_empty_stream(self):
        """Test that a closed-before-sending client is malformed."""
        with pytest.raises(MalformedRequestError):
            parse_request(b"")

    def test_single_token_request_line(self):
        """Test handling of a request line with only a method."""
        with pytest.raises(MalformedRequestError):
            parse_request(b"GET\r\nHost: test\r\n\r\n")

    def test_blank_request_line(self):
        """A blank first line has no tokens at all."""
        with pytest.raises(MalformedRequestError):
            parse_request(b"\r\n\r\n")

    def test_line_too_long(self):
        """A request line beyond max_line_size is rejected."""
        parser = RequestParser(max_line_size=32)
        raw = b"GET /" + b"a" * 64 + b" HTTP/1.0\r\n\r\n"

        with pytest.raises(MalformedRequestError, match="too long"):
            parser.parse(io.BytesIO(raw))

    def test_long_header_line_ends_draining(self):
        """An over-long header line is left unread, the request still stands."""
        parser = RequestParser(max_line_size=32)
        raw = b"GET /a.gif HTTP/1.0\r\nCookie: " + b"c" * 64 + b"\r\n\r\n"

        request = parser.parse(io.BytesIO(raw))

        assert request.target == "/a.gif"

    def test_many_headers_end_draining(self):
        """Past max_headers the parser stops reading, without an error."""
        parser = RequestParser(max_headers=3)
        raw = b"GET / HTTP/1.0\r\n" + b"X-H: v\r\n" * 4 + b"\r\n"

        request = parser.parse(io.BytesIO(raw))

        assert request.method == "GET"
        assert request.target == "/"

    def test_hundred_and_one_headers(self):
        raw = b"GET /index.html HTTP/1.0\r\n" + b"X-H: v\r\n" * 101 + b"\r\n"

        assert parse_request(raw).target == "/index.html"

    def test_no_break_space_stays_in_target(self):
        """Only ASCII whitespace separates tokens."""
        request = parse_request(b"GET /a\xc2\xa0b.html HTTP/1.0\r\n\r\n")

        assert request.target == "/a\u00a0b.html"
        assert request.version == "HTTP/1.0"

    def test_non_utf8_bytes_do_not_crash(self):
        """Undecodable bytes are replaced, not fatal."""
        request = parse_request(b"GET /caf\xe9.html HTTP/1.0\r\n\r\n")

        assert request.method == "GET"
        assert request.target.startswith("/caf")


class TestHTTPRequest:
    """Tests for HTTPRequest class."""

    def test_request_line(self):
        request = HTTPRequest(method="GET", target="/a.gif")

        assert request.request_line == "GET /a.gif HTTP/1.0"

    def test_frozen(self):
        """Requests are immutable once parsed."""
        request = HTTPRequest(method="GET", target="/")

        with pytest.raises(AttributeError):
            request.target = "/other"
