"""Configuration and shared constants."""

import os
import sys
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


# Remote endpoint
API_HOST = os.getenv("ECHOBOT_HOST", "discord.com").strip() or "discord.com"
API_PORT = _env_int("ECHOBOT_PORT", 443)
API_PREFIX = os.getenv("ECHOBOT_API_PREFIX", "/api").rstrip("/")

# Credential header scheme. The wire format is "Authorization: <scheme> <token>";
# Discord bot tokens need "Bot", OAuth2 access tokens need "Bearer".
AUTH_SCHEME = os.getenv("ECHOBOT_AUTH_SCHEME", "Bearer").strip() or "Bearer"

TARGET_CHANNEL_NAME = os.getenv("ECHOBOT_CHANNEL_NAME", "isa-bot").strip() or "isa-bot"

# Poll cadence and soft-retry backoff (seconds)
POLL_INTERVAL_SECONDS = _env_float("ECHOBOT_POLL_INTERVAL", 1.0)
BACKOFF_SECONDS = _env_float("ECHOBOT_BACKOFF", 2.0)

# Crude third-party bot heuristic: authors whose display name contains this
# substring (case-insensitive) are never echoed.
BOT_NAME_MARKER = os.getenv("ECHOBOT_BOT_MARKER", "bot").strip().lower() or "bot"

# Consecutive soft session failures tolerated before giving up
MAX_SESSION_RESTARTS = _env_int("ECHOBOT_MAX_RESTARTS", 3)

# Transport tuning
READ_CHUNK_SIZE = 1024
MAX_READ_RETRIES = 50


@dataclass
class AgentConfig:
    """Typed runtime configuration handed to the agent entry point."""

    token: str = ""
    verbose: bool = False
    host: str = "discord.com"
    port: int = 443
    api_prefix: str = "/api"
    auth_scheme: str = "Bearer"
    channel_name: str = "isa-bot"
    poll_interval: float = 1.0
    backoff: float = 2.0
    bot_marker: str = "bot"
    max_restarts: int = 3

    @property
    def is_configured(self) -> bool:
        return bool(self.token)

    @classmethod
    def from_env(cls, token: str = "", verbose: bool = False) -> "AgentConfig":
        """Create AgentConfig from environment variables.

        Explicit ``token``/``verbose`` (usually from the command line) win over
        ``DISCORD_BOT_TOKEN`` / ``ECHOBOT_VERBOSE``.
        """
        return cls(
            token=token or os.getenv("DISCORD_BOT_TOKEN", "").strip(),
            verbose=verbose or _env_bool("ECHOBOT_VERBOSE"),
            host=API_HOST,
            port=API_PORT,
            api_prefix=API_PREFIX,
            auth_scheme=AUTH_SCHEME,
            channel_name=TARGET_CHANNEL_NAME,
            poll_interval=POLL_INTERVAL_SECONDS,
            backoff=BACKOFF_SECONDS,
            bot_marker=BOT_NAME_MARKER,
            max_restarts=MAX_SESSION_RESTARTS,
        )
