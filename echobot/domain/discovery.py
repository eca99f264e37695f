"""Resource discovery — who am I, where am I, which channel do I watch.

Runs once per session; the results are never re-resolved.
"""

import sys
from dataclasses import dataclass
from typing import List

from echobot.errors import AgentError, ErrorKind
from echobot.ports.outbound import ChatApiPort


def _log(msg: str):
    print(msg, file=sys.stderr)


@dataclass(frozen=True)
class ChannelTarget:
    guild_id: int
    channel_id: int
    name: str
    last_message_id: int


@dataclass(frozen=True)
class Discovery:
    bot_id: int
    target: ChannelTarget


def resolve_bot_id(api: ChatApiPort) -> int:
    return api.current_user().id


def resolve_guild_ids(api: ChatApiPort) -> List[int]:
    guild_ids = [guild.id for guild in api.guilds()]
    if not guild_ids:
        raise AgentError(ErrorKind.NO_GUILDS, "Bot is not a member of any guild.")
    return guild_ids


def find_channel(api: ChatApiPort, guild_ids: List[int], name: str) -> ChannelTarget:
    """Return the first channel called ``name``, scanning guilds in order."""
    for guild_id in guild_ids:
        for channel in api.channels(guild_id):
            if channel.name != name:
                continue
            if not channel.reports_last_message:
                raise AgentError(
                    ErrorKind.FIELD_EXTRACTION,
                    f"Channel {channel.id} has no last_message_id field",
                )
            return ChannelTarget(
                guild_id=guild_id,
                channel_id=channel.id,
                name=name,
                last_message_id=channel.last_message_id or 0,
            )
    raise AgentError(
        ErrorKind.CHANNEL_NOT_FOUND,
        f"No channel named {name} was found in guilds bot is a part of.",
    )


def discover(api: ChatApiPort, channel_name: str) -> Discovery:
    bot_id = resolve_bot_id(api)
    guild_ids = resolve_guild_ids(api)
    target = find_channel(api, guild_ids, channel_name)
    _log(
        f"[echobot] bot={bot_id} watching #{target.name} "
        f"(guild={target.guild_id} channel={target.channel_id} cursor={target.last_message_id})"
    )
    return Discovery(bot_id=bot_id, target=target)
