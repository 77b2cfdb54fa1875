"""Typed client for the chat completion HTTP API.

This package provides request/response models with their JSON mapping,
a server-sent event stream decoder, and a client bound to the
chat/completions endpoint over a pluggable transport.
"""

from .client import (
    CHAT_COMPLETIONS_ENDPOINT,
    ChatCompletionClient,
    get_client,
    send_chat_completion,
    send_chat_completion_stream,
)
from .codec import (
    decode_message,
    decode_request,
    decode_response,
    encode_request,
    encode_response,
    request_to_dict,
)
from .errors import (
    AuthenticationError,
    ChatClientError,
    ConnectionError,
    InvalidRequestError,
    NotFoundError,
    ProviderError,
    RateLimitError,
    RequestTimeoutError,
    SchemaError,
    TransportError,
)
from .models import (
    ChatChoice,
    ChatChoiceDelta,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatCompletionUsage,
    ChatMessage,
    ChatMessageRole,
)
from .streaming import STREAM_SENTINEL, accumulate_stream, decode_stream, iter_sse_data
from .transport import ChatTransport, HTTPTransport

__all__ = [
    "ChatCompletionClient",
    "CHAT_COMPLETIONS_ENDPOINT",
    "get_client",
    "send_chat_completion",
    "send_chat_completion_stream",
    "ChatMessage",
    "ChatMessageRole",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatChoice",
    "ChatChoiceDelta",
    "ChatCompletionUsage",
    "encode_request",
    "encode_response",
    "request_to_dict",
    "decode_request",
    "decode_response",
    "decode_message",
    "STREAM_SENTINEL",
    "iter_sse_data",
    "decode_stream",
    "accumulate_stream",
    "ChatTransport",
    "HTTPTransport",
    "ChatClientError",
    "SchemaError",
    "TransportError",
    "AuthenticationError",
    "NotFoundError",
    "RateLimitError",
    "InvalidRequestError",
    "ProviderError",
    "RequestTimeoutError",
    "ConnectionError",
]
