from echobot.adapters.transport.tls import TlsTransport, create_context

__all__ = ["TlsTransport", "create_context"]
