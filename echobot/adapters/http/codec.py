"""HTTP/1.1 message codec over a raw byte stream.

Requests: exactly two shapes, GET and a JSON ``{"content": ...}`` POST.

Responses: the head ends at the first CRLFCRLF; the body is framed by the
first of ``Transfer-Encoding: chunked`` / ``Content-Length`` found in the
headers, or is empty when neither is present. Chunked bodies are decoded
(size prefixes and the ``0\\r\\n\\r\\n`` terminator removed), so the result
does not depend on how chunk boundaries line up with reads. Bytes read past
the end of a message are handed back as leftover for the next response.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from echobot.errors import AgentError, ErrorKind

CRLF = b"\r\n"
HEADER_END = b"\r\n\r\n"

_STATUS_RE = re.compile(r"^HTTP/1\.[01] (\d{3})(?: (.*))?$")

Headers = List[Tuple[str, str]]


@dataclass
class HttpResponse:
    status_code: int
    reason: str = ""
    headers: Headers = field(default_factory=list)
    body: bytes = b""

    def header(self, name: str) -> Optional[str]:
        """First value of header ``name`` (case-insensitive)."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None


def _malformed(msg: str) -> AgentError:
    return AgentError(ErrorKind.MALFORMED_RESPONSE, msg)


# -- Requests --


def build_get(path: str, host: str, token: str, scheme: str = "Bearer") -> bytes:
    request = (
        f"GET {path} HTTP/1.1\r\n"
        f"Host: {host}\r\n"
        f"Authorization: {scheme} {token}\r\n"
        "\r\n"
    )
    return request.encode("utf-8")


def post_body(payload: str) -> bytes:
    """``{"content": "<payload>"}`` followed by CRLFCRLF, JSON-escaped."""
    return json.dumps({"content": payload}, ensure_ascii=False).encode("utf-8") + HEADER_END


def build_post(path: str, host: str, token: str, payload: str, scheme: str = "Bearer") -> bytes:
    body = post_body(payload)
    head = (
        f"POST {path} HTTP/1.1\r\n"
        f"Host: {host}\r\n"
        f"Authorization: {scheme} {token}\r\n"
        f"Content-Length: {len(body)}\r\n"
        "Content-Type: application/json\r\n"
        "\r\n"
    )
    return head.encode("utf-8") + body


# -- Responses --


def parse_status_line(line: str) -> Tuple[int, str]:
    match = _STATUS_RE.match(line.strip())
    if not match:
        raise _malformed(f"Wrong HTTP response: bad status line {line[:80]!r}")
    return int(match.group(1)), match.group(2) or ""


def split_lines(head: bytes) -> List[str]:
    """Split a header block on CRLF; the block keeps one trailing CRLF."""
    text = head.decode("iso-8859-1")
    lines = text.split("\r\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def parse_head(head: bytes) -> Tuple[int, str, Headers]:
    lines = split_lines(head)
    if not lines:
        raise _malformed("Wrong HTTP response: empty header block")
    status_code, reason = parse_status_line(lines[0])
    headers: Headers = []
    for line in lines[1:]:
        name, sep, value = line.partition(":")
        if not sep or not name.strip():
            raise _malformed(f"Wrong HTTP response: bad header line {line[:80]!r}")
        headers.append((name.strip(), value.strip()))
    return status_code, reason, headers


def body_framing(headers: Headers) -> Tuple[str, int]:
    """Return ("chunked", 0), ("length", n) or ("none", 0); first match wins."""
    for name, value in headers:
        key = name.lower()
        if key == "transfer-encoding" and value.lower() == "chunked":
            return "chunked", 0
        if key == "content-length":
            try:
                length = int(value)
            except ValueError:
                raise _malformed(f"Wrong HTTP response: bad Content-Length {value!r}") from None
            if length < 0:
                raise _malformed(f"Wrong HTTP response: negative Content-Length {length}")
            return "length", length
    return "none", 0


def decode_chunked(raw: bytes) -> Optional[Tuple[bytes, int]]:
    """Decode a chunked body.

    Returns ``(body, consumed)`` once the zero-length chunk and the trailer
    section are complete, or ``None`` when more bytes are needed.
    """
    parts: List[bytes] = []
    pos = 0
    while True:
        eol = raw.find(CRLF, pos)
        if eol == -1:
            return None
        size_field = raw[pos:eol].split(b";", 1)[0].strip()
        try:
            size = int(size_field, 16)
        except ValueError:
            raise _malformed(f"Wrong HTTP response: bad chunk size {size_field[:20]!r}") from None
        if size < 0:
            raise _malformed(f"Wrong HTTP response: negative chunk size {size}")
        pos = eol + 2

        if size == 0:
            # trailer section, ends with an empty line
            while True:
                eol = raw.find(CRLF, pos)
                if eol == -1:
                    return None
                line = raw[pos:eol]
                pos = eol + 2
                if not line:
                    return b"".join(parts), pos

        if len(raw) < pos + size + 2:
            return None
        parts.append(raw[pos:pos + size])
        if raw[pos + size:pos + size + 2] != CRLF:
            raise _malformed("Wrong HTTP response: chunk data not followed by CRLF")
        pos += size + 2


def read_response(read_chunk: Callable[[], bytes], buffered: bytes = b"") -> Tuple[HttpResponse, bytes]:
    """Read one response; returns it together with any unconsumed bytes.

    Every loop iteration calls ``read_chunk`` once, so a stalled peer blocks
    in the transport rather than spinning here.
    """
    buffer = buffered
    end = buffer.find(HEADER_END)
    while end == -1:
        buffer += read_chunk()
        end = buffer.find(HEADER_END)

    status_code, reason, headers = parse_head(buffer[:end + 2])
    rest = buffer[end + 4:]
    framing, length = body_framing(headers)

    if framing == "chunked":
        decoded = decode_chunked(rest)
        while decoded is None:
            rest += read_chunk()
            decoded = decode_chunked(rest)
        body, used = decoded
        leftover = rest[used:]
    elif framing == "length":
        while len(rest) < length:
            rest += read_chunk()
        body, leftover = rest[:length], rest[length:]
    else:
        body, leftover = b"", rest

    return HttpResponse(status_code, reason, headers, body), leftover
