"""Tests for adapters/http/codec.py — request bytes and response de-framing."""

import json

import pytest

from conftest import ScriptedTransport, http_response, split_every
from echobot.adapters.http.codec import (
    HttpResponse,
    body_framing,
    build_get,
    build_post,
    decode_chunked,
    parse_head,
    parse_status_line,
    post_body,
    read_response,
)
from echobot.errors import AgentError, ErrorKind


class TestBuildGet:
    def test_exact_bytes(self):
        req = build_get("/api/users/@me", "discord.com", "tok")
        assert req == (
            b"GET /api/users/@me HTTP/1.1\r\n"
            b"Host: discord.com\r\n"
            b"Authorization: Bearer tok\r\n"
            b"\r\n"
        )

    def test_custom_scheme(self):
        req = build_get("/x", "h", "tok", scheme="Bot")
        assert b"Authorization: Bot tok\r\n" in req


class TestBuildPost:
    def test_body_shape(self):
        assert post_body("hi") == b'{"content": "hi"}\r\n\r\n'

    def test_content_length_matches_body(self):
        req = build_post("/api/channels/9/messages", "discord.com", "tok", "echo: ann - hello")
        head, _, body = req.partition(b"\r\n\r\n")
        assert body == b'{"content": "echo: ann - hello"}\r\n\r\n'
        assert f"Content-Length: {len(body)}".encode() in head
        assert b"Content-Type: application/json" in head
        assert head.startswith(b"POST /api/channels/9/messages HTTP/1.1\r\nHost: discord.com\r\n")

    def test_escapes_quotes_and_newlines(self):
        body = post_body('say "hi"\nbye')
        assert json.loads(body) == {"content": 'say "hi"\nbye'}

    def test_content_length_counts_utf8_bytes(self):
        req = build_post("/p", "h", "t", "héllo ✓")
        head, _, body = req.partition(b"\r\n\r\n")
        assert f"Content-Length: {len(body)}".encode() in head
        assert json.loads(body) == {"content": "héllo ✓"}


class TestParseHead:
    def test_status_line(self):
        assert parse_status_line("HTTP/1.1 200 OK") == (200, "OK")
        assert parse_status_line("HTTP/1.1 429 Too Many Requests") == (429, "Too Many Requests")
        assert parse_status_line("HTTP/1.1 204") == (204, "")

    @pytest.mark.parametrize("line", ["", "garbage", "HTTP/2 200 OK", "HTTP/1.1 abc OK"])
    def test_bad_status_line(self, line):
        with pytest.raises(AgentError) as exc:
            parse_status_line(line)
        assert exc.value.kind is ErrorKind.MALFORMED_RESPONSE

    def test_headers_keep_order(self):
        code, reason, headers = parse_head(b"HTTP/1.1 200 OK\r\nB: 2\r\nA: 1\r\nB: 3\r\n")
        assert code == 200
        assert headers == [("B", "2"), ("A", "1"), ("B", "3")]

    def test_header_without_colon_is_malformed(self):
        with pytest.raises(AgentError) as exc:
            parse_head(b"HTTP/1.1 200 OK\r\nnot a header\r\n")
        assert exc.value.kind is ErrorKind.MALFORMED_RESPONSE


class TestBodyFraming:
    def test_chunked(self):
        assert body_framing([("Transfer-Encoding", "chunked")]) == ("chunked", 0)

    def test_length(self):
        assert body_framing([("content-length", "12")]) == ("length", 12)

    def test_first_match_wins(self):
        headers = [("Content-Length", "5"), ("Transfer-Encoding", "chunked")]
        assert body_framing(headers) == ("length", 5)

    def test_none(self):
        assert body_framing([("Server", "x")]) == ("none", 0)

    def test_bad_length(self):
        with pytest.raises(AgentError):
            body_framing([("Content-Length", "many")])


class TestDecodeChunked:
    def test_incomplete_returns_none(self):
        assert decode_chunked(b"5\r\nhel") is None
        assert decode_chunked(b"5\r\nhello\r\n0\r\n") is None

    def test_complete(self):
        assert decode_chunked(b"5\r\nhello\r\n6\r\n world\r\n0\r\n\r\nrest") == (b"hello world", 26)

    def test_extensions_and_trailers(self):
        raw = b"3;name=v\r\nabc\r\n0\r\nX-Trailer: 1\r\n\r\n"
        assert decode_chunked(raw) == (b"abc", len(raw))

    def test_bad_size(self):
        with pytest.raises(AgentError) as exc:
            decode_chunked(b"zz\r\nabc\r\n")
        assert exc.value.kind is ErrorKind.MALFORMED_RESPONSE


class TestReadResponse:
    @pytest.mark.parametrize("split", [1, 2, 7, 64, 1024])
    def test_content_length_any_split(self, split):
        body = json.dumps([{"id": str(i)} for i in range(30)]).encode()
        transport = ScriptedTransport(split_every(http_response(200, body), split))
        response, leftover = read_response(transport.read_chunk)
        assert response.status_code == 200
        assert response.body == body
        assert len(response.body) == int(response.header("content-length"))
        assert leftover == b""

    @pytest.mark.parametrize("split", [1, 3, 5, 16, 4096])
    def test_chunked_any_split(self, split):
        body = b"data with 0\r\n\r\n inside, then more data"
        raw = http_response(200, body, chunk_sizes=[4, 9, 1])
        transport = ScriptedTransport(split_every(raw, split))
        response, leftover = read_response(transport.read_chunk)
        assert response.body == body
        assert leftover == b""

    def test_terminator_delivered_alone(self):
        raw = http_response(200, b"abcdef", chunk_sizes=[6])
        head_and_data, terminator = raw[:-5], raw[-5:]
        assert terminator == b"0\r\n\r\n"
        transport = ScriptedTransport([head_and_data, terminator])
        response, _ = read_response(transport.read_chunk)
        assert response.body == b"abcdef"
        assert transport.reads == 2

    def test_no_framing_headers_means_empty_body(self):
        transport = ScriptedTransport([b"HTTP/1.1 204 No Content\r\nServer: x\r\n\r\n"])
        response, leftover = read_response(transport.read_chunk)
        assert response.status_code == 204
        assert response.body == b""
        assert leftover == b""

    def test_leftover_feeds_next_response(self):
        first = http_response(200, b'{"a": 1}')
        second = http_response(200, b'{"b": 2}')
        transport = ScriptedTransport([first + second[:10], second[10:]])
        r1, leftover = read_response(transport.read_chunk)
        r2, leftover = read_response(transport.read_chunk, leftover)
        assert r1.body == b'{"a": 1}'
        assert r2.body == b'{"b": 2}'
        assert leftover == b""

    def test_buffered_complete_response_needs_no_read(self):
        transport = ScriptedTransport()
        response, _ = read_response(transport.read_chunk, http_response(200, b"{}"))
        assert response.body == b"{}"
        assert transport.reads == 0

    def test_every_iteration_reads(self):
        raw = http_response(200, b"x" * 100)
        transport = ScriptedTransport(split_every(raw, 10))
        read_response(transport.read_chunk)
        assert transport.reads == len(split_every(raw, 10))

    def test_read_errors_propagate(self):
        transport = ScriptedTransport([b"HTTP/1.1 200 OK\r\nContent-Length: 10\r\n\r\nabc"])
        with pytest.raises(AgentError) as exc:
            read_response(transport.read_chunk)
        assert exc.value.kind is ErrorKind.EMPTY_READ

    def test_malformed_status(self):
        transport = ScriptedTransport([b"SSH-2.0-OpenSSH\r\n\r\n"])
        with pytest.raises(AgentError) as exc:
            read_response(transport.read_chunk)
        assert exc.value.kind is ErrorKind.MALFORMED_RESPONSE


class TestHttpResponse:
    def test_header_lookup_case_insensitive(self):
        r = HttpResponse(200, "OK", [("Content-Type", "application/json")], b"")
        assert r.header("content-type") == "application/json"
        assert r.header("x-missing") is None
