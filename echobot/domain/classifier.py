"""HTTP status classification — pure, idempotent, no I/O."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from echobot.errors import AgentError, ErrorKind


class Verdict(Enum):
    PROCEED = "proceed"
    RETRY_AFTER_DELAY = "retry-after-delay"
    RETRY_NOW = "retry-now"
    FATAL = "fatal"


@dataclass(frozen=True)
class Classification:
    verdict: Verdict
    reason: str = ""
    kind: Optional[ErrorKind] = None

    @property
    def is_retry(self) -> bool:
        return self.verdict in (Verdict.RETRY_AFTER_DELAY, Verdict.RETRY_NOW)

    def raise_if_fatal(self, status_code: int) -> None:
        if self.verdict is Verdict.FATAL:
            raise AgentError(self.kind or ErrorKind.HTTP_UNEXPECTED, f"{self.reason} ({status_code})")


_SOFT: Dict[int, str] = {
    204: "No content yet",
    # Retry-After is ignored; the fixed backoff applies.
    429: "Rate limited",
}

_FATAL: Dict[int, Tuple[ErrorKind, str]] = {
    400: (ErrorKind.HTTP_BAD_REQUEST, "Bad request HTTP response"),
    401: (ErrorKind.HTTP_UNAUTHORIZED, "Unauthorized HTTP response"),
    403: (ErrorKind.HTTP_FORBIDDEN, "Forbidden HTTP response"),
    404: (ErrorKind.HTTP_NOT_FOUND, "Not found HTTP response"),
    405: (ErrorKind.HTTP_METHOD_NOT_ALLOWED, "Method not allowed HTTP response"),
    502: (ErrorKind.HTTP_BAD_GATEWAY, "Gateway unavailable HTTP response"),
}

_PROCEED = Classification(Verdict.PROCEED)


def classify(status_code: int) -> Classification:
    """Map a status code to proceed / soft retry / fatal."""
    if status_code == 200:
        return _PROCEED
    if status_code in _SOFT:
        return Classification(Verdict.RETRY_AFTER_DELAY, _SOFT[status_code])
    if status_code in _FATAL:
        kind, reason = _FATAL[status_code]
        return Classification(Verdict.FATAL, reason, kind)
    return Classification(Verdict.FATAL, "Unexpected HTTP response", ErrorKind.HTTP_UNEXPECTED)
