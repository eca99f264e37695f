"""Port interfaces (Hexagonal Architecture)."""

from echobot.ports.inbound import IncomingMessage
from echobot.ports.outbound import ChatApiPort, EchoSinkPort, TransportPort

__all__ = [
    "IncomingMessage",
    "ChatApiPort",
    "EchoSinkPort",
    "TransportPort",
]
