"""Outbound ports — interfaces for external system adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Protocol, runtime_checkable

if TYPE_CHECKING:
    from echobot.domain.models import Channel, ChannelMessage, Guild, User


@runtime_checkable
class TransportPort(Protocol):
    """Ordered byte stream to a single remote endpoint."""

    def write(self, data: bytes) -> None: ...

    def read_chunk(self) -> bytes: ...

    def close(self) -> None: ...


@runtime_checkable
class ChatApiPort(Protocol):
    """Remote chat service calls used by discovery and the poll loop.

    Every call already ran the classify/retry loop: it returns parsed
    payloads or raises ``AgentError``.
    """

    def current_user(self) -> User: ...

    def guilds(self) -> List[Guild]: ...

    def channels(self, guild_id: int) -> List[Channel]: ...

    def messages_after(self, channel_id: int, after: int) -> List[ChannelMessage]: ...

    def create_message(self, channel_id: int, content: str) -> None: ...


@runtime_checkable
class EchoSinkPort(Protocol):
    """Where verbose mode reports synthesized replies."""

    def emit(self, text: str) -> None: ...
