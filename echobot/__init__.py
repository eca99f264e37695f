"""echobot — polls a chat channel over raw HTTP/1.1 + TLS and echoes it."""

__version__ = "0.1.0"

from echobot.config import AgentConfig
from echobot.errors import AgentError, ErrorKind
from echobot.ports.inbound import IncomingMessage

__all__ = [
    "__version__",
    "AgentConfig",
    "AgentError",
    "ErrorKind",
    "IncomingMessage",
]
