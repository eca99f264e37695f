"""Domain layer — pure Python, no socket or TLS dependencies."""

from echobot.domain.classifier import Classification, Verdict, classify
from echobot.domain.models import Author, Channel, ChannelMessage, Guild, User
from echobot.domain.discovery import ChannelTarget, Discovery, discover
from echobot.domain.poller import PollLoop, PollState, format_echo, select_replies

__all__ = [
    "Author",
    "Channel",
    "ChannelMessage",
    "ChannelTarget",
    "Classification",
    "Discovery",
    "Guild",
    "PollLoop",
    "PollState",
    "User",
    "Verdict",
    "classify",
    "discover",
    "format_echo",
    "select_replies",
]
