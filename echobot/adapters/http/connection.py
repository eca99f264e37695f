"""HttpConnection — the codec bound to one transport and one credential."""

from echobot.adapters.http.codec import HttpResponse, build_get, build_post, read_response
from echobot.ports.outbound import TransportPort


class HttpConnection:
    """Sends GET/POST requests and reads responses in order, one at a time."""

    def __init__(self, transport: TransportPort, host: str, token: str, scheme: str = "Bearer"):
        self._transport = transport
        self.host = host
        self._token = token
        self._scheme = scheme
        self._pending = b""

    def send_get(self, path: str) -> None:
        self._transport.write(build_get(path, self.host, self._token, self._scheme))

    def send_post(self, path: str, payload: str) -> None:
        self._transport.write(build_post(path, self.host, self._token, payload, self._scheme))

    def receive(self) -> HttpResponse:
        response, self._pending = read_response(self._transport.read_chunk, self._pending)
        return response

    def close(self) -> None:
        self._pending = b""
        self._transport.close()
