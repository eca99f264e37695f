"""TLS transport — one verified, persistent byte stream to the API host.

Implements ``TransportPort``. Every failure is raised as ``AgentError`` with
a kind that tells the supervisor which stage broke.
"""

import socket
import ssl
import sys
from typing import Optional

from echobot.config import MAX_READ_RETRIES, READ_CHUNK_SIZE
from echobot.errors import AgentError, ErrorKind

# OpenSSL X509_V_ERR_HOSTNAME_MISMATCH
_HOSTNAME_MISMATCH = 62

_TRANSIENT = (ssl.SSLWantReadError, ssl.SSLWantWriteError, InterruptedError)


def _log(msg: str):
    print(msg, file=sys.stderr)


def create_context() -> ssl.SSLContext:
    """Client context: system trust store, hostname check, TLS 1.2+."""
    try:
        context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
        context.minimum_version = ssl.TLSVersion.TLSv1_2
    except (ssl.SSLError, OSError, ValueError) as e:
        raise AgentError(ErrorKind.TLS_SETUP, f"Couldn't set up a trust store: {e}") from e
    return context


class TlsTransport:
    """Blocking TLS socket with chunked reads and full-flush writes."""

    def __init__(
        self,
        sock: ssl.SSLSocket,
        host: str,
        read_size: int = READ_CHUNK_SIZE,
        max_read_retries: int = MAX_READ_RETRIES,
    ):
        self._sock: Optional[ssl.SSLSocket] = sock
        self.host = host
        self._read_size = read_size
        self._max_read_retries = max_read_retries

    @classmethod
    def connect(
        cls,
        host: str,
        port: int = 443,
        context: Optional[ssl.SSLContext] = None,
    ) -> "TlsTransport":
        """Open TCP, handshake with SNI, and verify chain + hostname."""
        if context is None:
            context = create_context()

        try:
            raw = socket.create_connection((host, port))
        except OSError as e:
            raise AgentError(ErrorKind.CONNECT, f"Couldn't connect to {host}:{port}: {e}") from e

        try:
            sock = context.wrap_socket(raw, server_hostname=host)
        except ssl.SSLCertVerificationError as e:
            raw.close()
            if e.verify_code == _HOSTNAME_MISMATCH:
                raise AgentError(ErrorKind.HOSTNAME_MISMATCH, f"Hostnames are not matching: {e}") from e
            raise AgentError(ErrorKind.TLS_VERIFY, f"Certificate verification error: {e}") from e
        except OSError as e:
            raw.close()
            raise AgentError(ErrorKind.HANDSHAKE, f"TLS handshake with {host} failed: {e}") from e

        if not sock.getpeercert():
            sock.close()
            raise AgentError(ErrorKind.NO_CERTIFICATE, "No certificate was presented by the server.")

        _log(f"[echobot] connected to {host}:{port} ({sock.version()})")
        return cls(sock, host)

    def _require_open(self) -> ssl.SSLSocket:
        if self._sock is None:
            raise AgentError(ErrorKind.TRANSPORT_IO, f"Connection to {self.host} is closed.")
        return self._sock

    def write(self, data: bytes) -> None:
        sock = self._require_open()
        try:
            sock.sendall(data)
        except OSError as e:
            raise AgentError(ErrorKind.TRANSPORT_IO, f"Error writing to {self.host}: {e}") from e

    def read_chunk(self) -> bytes:
        """One successful ``recv``; transient TLS conditions re-issue it."""
        sock = self._require_open()
        for _ in range(self._max_read_retries + 1):
            try:
                data = sock.recv(self._read_size)
            except _TRANSIENT:
                continue
            except ssl.SSLZeroReturnError as e:
                raise AgentError(ErrorKind.EMPTY_READ, f"TLS session closed by {self.host}.") from e
            except OSError as e:
                raise AgentError(ErrorKind.TRANSPORT_IO, f"Error reading from {self.host}: {e}") from e
            if data:
                return data
            raise AgentError(ErrorKind.EMPTY_READ, f"Empty read: {self.host} closed the connection.")
        raise AgentError(
            ErrorKind.EMPTY_READ,
            f"Empty read: no data from {self.host} after {self._max_read_retries} retries.",
        )

    def close(self) -> None:
        if self._sock is None:
            return
        sock, self._sock = self._sock, None
        try:
            sock.close()
        except OSError:
            pass

    def __enter__(self) -> "TlsTransport":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
