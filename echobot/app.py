"""Session assembly and the top-level supervisor loop.

A session owns one TLS connection: connect, discover, then poll until
something fails. The supervisor turns failures into either a fresh session
(soft kinds, bounded by ``max_restarts`` consecutive failures) or a process
exit status (everything else).
"""

import sys
import time
from typing import Callable, Optional

from echobot.adapters.discord.rest import DiscordRest
from echobot.adapters.http.connection import HttpConnection
from echobot.adapters.transport.tls import TlsTransport
from echobot.config import AgentConfig
from echobot.domain.discovery import discover
from echobot.domain.poller import PollLoop
from echobot.errors import AgentError
from echobot.ports.outbound import EchoSinkPort, TransportPort


def _log(msg: str):
    print(msg, file=sys.stderr)


class Session:
    """One connection, one discovery, one poll loop."""

    def __init__(
        self,
        config: AgentConfig,
        connect: Callable[[str, int], TransportPort] = TlsTransport.connect,
        sleep: Callable[[float], None] = time.sleep,
        sink: Optional[EchoSinkPort] = None,
    ):
        self._config = config
        self._connect = connect
        self._sleep = sleep
        self._sink = sink
        self.loop: Optional[PollLoop] = None

    @property
    def made_progress(self) -> bool:
        """True once discovery succeeded and at least one poll cycle ran."""
        return self.loop is not None and self.loop.cycles > 0

    def run(self, max_cycles: Optional[int] = None) -> None:
        cfg = self._config
        transport = self._connect(cfg.host, cfg.port)
        http = HttpConnection(transport, cfg.host, cfg.token, cfg.auth_scheme)
        try:
            api = DiscordRest(http, api_prefix=cfg.api_prefix, backoff=cfg.backoff, sleep=self._sleep)
            found = discover(api, cfg.channel_name)
            self.loop = PollLoop(
                api,
                channel_id=found.target.channel_id,
                bot_id=found.bot_id,
                cursor=found.target.last_message_id,
                poll_interval=cfg.poll_interval,
                bot_marker=cfg.bot_marker,
                verbose=cfg.verbose,
                sink=self._sink,
                sleep=self._sleep,
            )
            self.loop.run(max_cycles)
        finally:
            http.close()


def supervise(
    config: AgentConfig,
    session_factory: Callable[[AgentConfig], Session] = Session,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Run sessions until a fatal failure; return the process exit status.

    The restart budget counts consecutive soft failures and is reset by any
    session that got as far as polling.
    """
    failures = 0
    while True:
        session = session_factory(config)
        try:
            session.run()
            return 0
        except AgentError as e:
            if session.made_progress:
                failures = 0
            if not e.is_soft:
                _log(f"[echobot] {e} Fatal error.")
                return e.exit_code
            failures += 1
            if failures > config.max_restarts:
                _log(f"[echobot] {e} Giving up after {failures} consecutive failures.")
                return e.exit_code
            _log(
                f"[echobot] {e} ..restarting session "
                f"({failures}/{config.max_restarts}, potential data loss)"
            )
            sleep(config.backoff)


def run_agent(token: str, verbose: bool = False) -> int:
    """Entry point: ``{token, verbose}`` in, process exit status out."""
    config = AgentConfig.from_env(token=token, verbose=verbose)
    return supervise(config)
