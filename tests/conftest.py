"""Shared fakes: a scripted byte-stream transport and response builders."""

import json
from typing import Iterable, List, Optional

import pytest

from echobot.errors import AgentError, ErrorKind


class ScriptedTransport:
    """TransportPort that replays pre-split byte chunks and records writes."""

    def __init__(self, chunks: Iterable[bytes] = ()):
        self.chunks: List[bytes] = list(chunks)
        self.writes: List[bytes] = []
        self.reads = 0
        self.closed = False

    def feed(self, *chunks: bytes) -> None:
        self.chunks.extend(chunks)

    def write(self, data: bytes) -> None:
        self.writes.append(data)

    def read_chunk(self) -> bytes:
        self.reads += 1
        if not self.chunks:
            raise AgentError(ErrorKind.EMPTY_READ, "script exhausted")
        return self.chunks.pop(0)

    def close(self) -> None:
        self.closed = True


def http_response(status: int = 200, body=b"", reason: str = "OK", chunk_sizes: Optional[List[int]] = None) -> bytes:
    """Serialize a response; ``body`` may be bytes or a JSON-able object.

    With ``chunk_sizes`` the body is sent chunked using those segment sizes
    (the remainder goes into a final segment).
    """
    if not isinstance(body, bytes):
        body = json.dumps(body).encode("utf-8")
    if chunk_sizes is None:
        head = f"HTTP/1.1 {status} {reason}\r\nContent-Type: application/json\r\nContent-Length: {len(body)}\r\n\r\n"
        return head.encode() + body

    head = f"HTTP/1.1 {status} {reason}\r\nContent-Type: application/json\r\nTransfer-Encoding: chunked\r\n\r\n"
    out = head.encode()
    pos = 0
    for size in chunk_sizes:
        piece = body[pos:pos + size]
        pos += size
        if piece:
            out += f"{len(piece):x}\r\n".encode() + piece + b"\r\n"
    if pos < len(body):
        piece = body[pos:]
        out += f"{len(piece):x}\r\n".encode() + piece + b"\r\n"
    return out + b"0\r\n\r\n"


def split_every(data: bytes, size: int) -> List[bytes]:
    return [data[i:i + size] for i in range(0, len(data), size)]


@pytest.fixture
def transport():
    return ScriptedTransport()


@pytest.fixture
def no_sleep():
    """Injectable sleep that records requested delays instead of waiting."""
    delays: List[float] = []

    def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep
