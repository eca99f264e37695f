from echobot.adapters.discord.rest import DiscordRest

__all__ = ["DiscordRest"]
