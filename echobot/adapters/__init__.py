"""Adapters — socket, TLS and HTTP bound implementations of the ports."""
