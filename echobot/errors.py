"""Failure taxonomy shared by every layer.

All layers raise :class:`AgentError`; the supervisor in :mod:`echobot.app`
decides from the kind whether to rebuild the session or exit.
"""

from enum import Enum


class ErrorKind(Enum):
    """Failure kind -> (process exit status, group)."""

    TLS_SETUP = (10, "transport-setup")
    CONNECT = (21, "transport-setup")
    HANDSHAKE = (30, "tls-verification")
    TLS_VERIFY = (40, "tls-verification")
    NO_CERTIFICATE = (41, "tls-verification")
    HOSTNAME_MISMATCH = (42, "tls-verification")
    TRANSPORT_IO = (100, "transport-io")
    EMPTY_READ = (101, "transport-io")
    MALFORMED_RESPONSE = (200, "protocol-framing")
    HTTP_BAD_REQUEST = (220, "http-status")
    HTTP_UNAUTHORIZED = (221, "http-status")
    HTTP_FORBIDDEN = (223, "http-status")
    HTTP_NOT_FOUND = (224, "http-status")
    HTTP_METHOD_NOT_ALLOWED = (225, "http-status")
    HTTP_BAD_GATEWAY = (226, "http-status")
    HTTP_UNEXPECTED = (230, "http-status")
    FIELD_EXTRACTION = (240, "field-extraction")
    NO_GUILDS = (250, "logical-precondition")
    CHANNEL_NOT_FOUND = (251, "logical-precondition")

    @property
    def exit_code(self) -> int:
        return self.value[0]

    @property
    def group(self) -> str:
        return self.value[1]

    @property
    def is_soft(self) -> bool:
        """Soft kinds restart the whole session instead of exiting."""
        return self in SOFT_KINDS


SOFT_KINDS = frozenset(
    {
        ErrorKind.TRANSPORT_IO,
        ErrorKind.EMPTY_READ,
        ErrorKind.MALFORMED_RESPONSE,
        ErrorKind.FIELD_EXTRACTION,
    }
)


class AgentError(Exception):
    """Raised for any transport, protocol, HTTP or extraction failure."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def exit_code(self) -> int:
        return self.kind.exit_code

    @property
    def is_soft(self) -> bool:
        return self.kind.is_soft

    def __str__(self) -> str:
        return f"{self.message} [{self.kind.name}]"
