"""Command-line entry point: ``echobot -t <token> [-v]``."""

import argparse
import sys
from typing import List, Optional

from echobot import __version__
from echobot.app import run_agent
from echobot.config import TARGET_CHANNEL_NAME, AgentConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="echobot",
        description=f"Echoes user messages posted in the #{TARGET_CHANNEL_NAME} channel.",
    )
    parser.add_argument(
        "-t", "--token",
        default="",
        help="bot access token (default: $DISCORD_BOT_TOKEN)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="print every echoed message to stdout",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not AgentConfig.from_env(token=args.token).is_configured:
        parser.error("a bot token is required (-t <token> or DISCORD_BOT_TOKEN)")

    try:
        return run_agent(args.token, verbose=args.verbose)
    except KeyboardInterrupt:
        print("[echobot] interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
