"""Payload models for the chat API — pydantic, no I/O.

Ids are transmitted as JSON strings ("snowflakes") and coerced to ``int``.
Fields the agent does not use are ignored.
"""

import json
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from echobot.errors import AgentError, ErrorKind

M = TypeVar("M", bound=BaseModel)


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class User(_Payload):
    id: int
    username: str = ""


class Guild(_Payload):
    id: int
    name: str = ""


class Channel(_Payload):
    id: int
    name: Optional[str] = None
    # Absent on categories and voice channels, null on empty text channels.
    last_message_id: Optional[int] = None

    @property
    def reports_last_message(self) -> bool:
        return "last_message_id" in self.model_fields_set


class Author(_Payload):
    id: int
    username: str


class ChannelMessage(_Payload):
    id: int
    author: Author
    content: str


def decode_json(body: bytes) -> Any:
    """Decode a response body, raising FIELD_EXTRACTION on invalid JSON."""
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise AgentError(ErrorKind.FIELD_EXTRACTION, f"Response body is not JSON: {e}") from e


def parse_model(model: Type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        missing = ", ".join(".".join(str(p) for p in err["loc"]) or "<root>" for err in e.errors())
        raise AgentError(
            ErrorKind.FIELD_EXTRACTION,
            f"{model.__name__} payload is missing or has invalid fields: {missing}",
        ) from e


def parse_model_list(model: Type[M], data: Any) -> List[M]:
    if not isinstance(data, list):
        raise AgentError(
            ErrorKind.FIELD_EXTRACTION,
            f"Expected a JSON array of {model.__name__}, got {type(data).__name__}",
        )
    return [parse_model(model, item) for item in data]
