"""Inbound port — transport-agnostic message representation."""

from dataclasses import dataclass


@dataclass
class IncomingMessage:
    """One channel message as seen by the poll loop."""

    message_id: int
    author_id: int
    author_name: str
    content: str
