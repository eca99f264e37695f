"""Poll loop — fetch new messages, advance the cursor, echo human messages.

Pure control logic over :class:`ChatApiPort`; sleeping is injected so tests
never wait.
"""

import sys
import time
from enum import Enum
from typing import Callable, Iterable, List, Optional

from echobot.domain.models import ChannelMessage
from echobot.ports.inbound import IncomingMessage
from echobot.ports.outbound import ChatApiPort, EchoSinkPort


def _log(msg: str):
    print(msg, file=sys.stderr)


class PollState(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    DISPATCHING = "dispatching"


class StdoutEchoSink:
    """EchoSinkPort writing each reply to stdout."""

    def emit(self, text: str) -> None:
        print(text, flush=True)


def format_echo(message: IncomingMessage) -> str:
    return f"echo: {message.author_name} - {message.content}"


def to_incoming(messages: Iterable[ChannelMessage]) -> List[IncomingMessage]:
    """Convert a newest-first API batch into oldest-first IncomingMessages."""
    converted = [
        IncomingMessage(
            message_id=m.id,
            author_id=m.author.id,
            author_name=m.author.username,
            content=m.content,
        )
        for m in messages
    ]
    converted.reverse()
    return converted


def looks_like_bot(author_name: str, marker: str = "bot") -> bool:
    return marker.lower() in author_name.lower()


def select_replies(
    messages: Iterable[IncomingMessage], bot_id: int, marker: str = "bot"
) -> List[IncomingMessage]:
    """Drop our own messages and anything that looks bot-authored."""
    return [
        m for m in messages
        if m.author_id != bot_id and not looks_like_bot(m.author_name, marker)
    ]


class PollLoop:
    """Single-channel poll/echo state machine.

    The cursor only moves forward: it is set to the newest id of every
    non-empty batch, whether or not those messages end up echoed.
    """

    def __init__(
        self,
        api: ChatApiPort,
        channel_id: int,
        bot_id: int,
        cursor: int,
        poll_interval: float = 1.0,
        bot_marker: str = "bot",
        verbose: bool = False,
        sink: Optional[EchoSinkPort] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._api = api
        self.channel_id = channel_id
        self.bot_id = bot_id
        self.cursor = cursor
        self._poll_interval = poll_interval
        self._bot_marker = bot_marker
        self._verbose = verbose
        self._sink = sink or StdoutEchoSink()
        self._sleep = sleep
        self.state = PollState.IDLE
        self.cycles = 0

    def advance_cursor(self, batch: List[ChannelMessage]) -> None:
        if batch:
            self.cursor = max(self.cursor, max(m.id for m in batch))

    def fetch(self) -> List[IncomingMessage]:
        """One fetch: returns chronologically ordered messages to echo."""
        self.state = PollState.FETCHING
        batch = self._api.messages_after(self.channel_id, self.cursor)
        if not batch:
            self.state = PollState.IDLE
            return []

        self.state = PollState.EXTRACTING
        self.advance_cursor(batch)
        return select_replies(to_incoming(batch), self.bot_id, self._bot_marker)

    def dispatch(self, messages: List[IncomingMessage]) -> None:
        self.state = PollState.DISPATCHING
        for message in messages:
            reply = format_echo(message)
            self._api.create_message(self.channel_id, reply)
            if self._verbose:
                self._sink.emit(reply)
        self.state = PollState.IDLE

    def poll_once(self) -> List[IncomingMessage]:
        self._sleep(self._poll_interval)
        messages = self.fetch()
        if messages:
            self.dispatch(messages)
        self.cycles += 1
        return messages

    def run(self, max_cycles: Optional[int] = None) -> None:
        """Poll forever, or for ``max_cycles`` cycles when given."""
        _log(f"[echobot] polling channel {self.channel_id} after {self.cursor}")
        while max_cycles is None or self.cycles < max_cycles:
            self.poll_once()
