"""JSON encoding and decoding for chat completion records.

Every decode failure is raised as SchemaError with the underlying
pydantic ValidationError or JSONDecodeError chained.
"""

import json
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import SchemaError
from .models import ChatCompletionRequest, ChatCompletionResponse, ChatMessage

ModelT = TypeVar("ModelT", bound=BaseModel)


def to_dict(record: BaseModel) -> dict[str, Any]:
    """JSON-ready dict of a record.

    Declared optional fields that are None are omitted; unknown fields and
    values nested inside free-form mappings are emitted as they are.
    """
    return record.model_dump(mode="json")


def request_to_dict(request: ChatCompletionRequest) -> dict[str, Any]:
    """Request body as sent by transports."""
    return to_dict(request)


def encode_request(request: ChatCompletionRequest) -> str:
    """Serialize a request to compact JSON text."""
    return json.dumps(request_to_dict(request), separators=(",", ":"), ensure_ascii=False)


def encode_response(response: ChatCompletionResponse) -> str:
    """Serialize a response (or streamed chunk) to compact JSON text."""
    return json.dumps(to_dict(response), separators=(",", ":"), ensure_ascii=False)


def load_json(payload: str | bytes) -> Any:
    """Parse JSON text, raising SchemaError on malformed input."""
    try:
        return json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SchemaError(f"Payload is not valid JSON: {e}", payload=payload) from e


def decode(model: type[ModelT], data: Any) -> ModelT:
    """Decode a JSON mapping, or JSON text, into ``model``.

    Args:
        model: Target record type.
        data: Already parsed JSON (a dict) or JSON text.

    Returns:
        A new instance of ``model``.

    Raises:
        SchemaError: Invalid JSON, missing required field, wrong type or
            unknown enum value.
    """
    if isinstance(data, (str, bytes, bytearray)):
        data = load_json(data)
    if not isinstance(data, dict):
        raise SchemaError(
            f"Expected a JSON object for {model.__name__}, got {type(data).__name__}",
            payload=data,
        )
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise SchemaError(
            f"Invalid {model.__name__}: {e.error_count()} validation error(s): "
            + "; ".join(_describe(err) for err in e.errors()),
            payload=data,
        ) from e


def _describe(err: dict[str, Any]) -> str:
    loc = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
    return f"{loc}: {err.get('msg', 'invalid')}"


def decode_response(data: Any) -> ChatCompletionResponse:
    """Decode a chat completion response or streamed chunk."""
    return decode(ChatCompletionResponse, data)


def decode_request(data: Any) -> ChatCompletionRequest:
    """Decode a chat completion request body."""
    return decode(ChatCompletionRequest, data)


def decode_message(data: Any) -> ChatMessage:
    """Decode a single chat message."""
    return decode(ChatMessage, data)
