from echobot.adapters.http.codec import HttpResponse, build_get, build_post, read_response
from echobot.adapters.http.connection import HttpConnection

__all__ = ["HttpConnection", "HttpResponse", "build_get", "build_post", "read_response"]
