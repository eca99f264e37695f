"""Discord REST adapter — implements ChatApiPort over an HttpConnection.

Each call is one logical exchange: send, receive, classify, and repeat the
identical request while the classifier says soft retry.
"""

import sys
import time
from typing import Any, Callable, List, Optional

from echobot.adapters.http.codec import HttpResponse
from echobot.adapters.http.connection import HttpConnection
from echobot.domain.classifier import Verdict, classify
from echobot.domain.models import (
    Channel,
    ChannelMessage,
    Guild,
    User,
    decode_json,
    parse_model,
    parse_model_list,
)


def _log(msg: str):
    print(msg, file=sys.stderr)


def strip_permission_overwrites(channels: Any) -> Any:
    """Remove the nested ``permission_overwrites`` lists from channel payloads."""
    if isinstance(channels, list):
        for channel in channels:
            if isinstance(channel, dict):
                channel.pop("permission_overwrites", None)
    return channels


class DiscordRest:
    """ChatApiPort backed by raw HTTP/1.1 on a single connection."""

    def __init__(
        self,
        http: HttpConnection,
        api_prefix: str = "/api",
        backoff: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._http = http
        self._prefix = api_prefix.rstrip("/")
        self._backoff = backoff
        self._sleep = sleep

    def _path(self, path: str) -> str:
        return f"{self._prefix}{path}"

    def exchange(self, path: str, payload: Optional[str] = None) -> HttpResponse:
        """GET ``path`` (or POST ``payload`` to it) until a non-retry outcome."""
        method = "GET" if payload is None else "POST"
        while True:
            if payload is None:
                self._http.send_get(path)
            else:
                self._http.send_post(path, payload)
            response = self._http.receive()

            result = classify(response.status_code)
            result.raise_if_fatal(response.status_code)
            if result.verdict is Verdict.PROCEED:
                return response

            if result.verdict is Verdict.RETRY_AFTER_DELAY:
                _log(
                    f"[echobot] {method} {path}: {result.reason} ({response.status_code}), "
                    f"retrying in {self._backoff:.1f}s"
                )
                self._sleep(self._backoff)

    def _get_json(self, path: str) -> Any:
        return decode_json(self.exchange(self._path(path)).body)

    def current_user(self) -> User:
        return parse_model(User, self._get_json("/users/@me"))

    def guilds(self) -> List[Guild]:
        return parse_model_list(Guild, self._get_json("/users/@me/guilds"))

    def channels(self, guild_id: int) -> List[Channel]:
        data = strip_permission_overwrites(self._get_json(f"/guilds/{guild_id}/channels"))
        return parse_model_list(Channel, data)

    def messages_after(self, channel_id: int, after: int) -> List[ChannelMessage]:
        data = self._get_json(f"/channels/{channel_id}/messages?after={after}")
        return parse_model_list(ChannelMessage, data)

    def create_message(self, channel_id: int, content: str) -> None:
        self.exchange(self._path(f"/channels/{channel_id}/messages"), payload=content)
