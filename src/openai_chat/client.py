"""Chat completion client.

Binds the chat/completions endpoint to an explicitly supplied transport.
No retries are attempted; transport and schema failures propagate to the
caller as raised.
"""

import inspect
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing

from .codec import decode_response, request_to_dict
from .errors import TransportError
from .models import ChatCompletionRequest, ChatCompletionResponse
from .streaming import accumulate_stream, decode_stream
from .transport.base import ChatTransport
from .transport.http import HTTPTransport

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_ENDPOINT = "chat/completions"

EventHandler = Callable[[ChatCompletionResponse], Awaitable[None] | None]


class ChatCompletionClient:
    """Client for the chat completion endpoint.

    Holds no per-call state, so one instance can serve concurrent calls.
    """

    def __init__(self, transport: ChatTransport):
        """Initialize client.

        Args:
            transport: Carries requests to the service.
        """
        self._transport = transport

    @property
    def transport(self) -> ChatTransport:
        return self._transport

    async def create(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        """Send a non-streaming completion request.

        Args:
            request: Request with stream unset or False.

        Returns:
            The decoded response, choices carrying full messages.

        Raises:
            ValueError: The request asks for streaming.
            TransportError: The transport failed.
            SchemaError: The response body does not match the schema.
        """
        if request.stream:
            raise ValueError("Streaming requests must use stream() or create_stream()")

        start_time = time.perf_counter()
        logger.debug(
            "Sending chat completion request",
            extra={"endpoint": CHAT_COMPLETIONS_ENDPOINT, "model": request.model, "stream": False},
        )

        try:
            data = await self._transport.send_request(
                CHAT_COMPLETIONS_ENDPOINT, request_to_dict(request)
            )
        except TransportError as e:
            logger.error(
                "Chat completion request failed: %s",
                str(e),
                extra={"model": request.model, "error_type": type(e).__name__},
            )
            raise

        response = decode_response(data)
        latency_ms = int((time.perf_counter() - start_time) * 1000)

        logger.info(
            "Chat completion succeeded",
            extra={
                "completion_id": response.id,
                "model": request.model,
                "latency_ms": latency_ms,
                "prompt_tokens": response.usage.prompt_tokens if response.usage else None,
                "completion_tokens": response.usage.completion_tokens if response.usage else None,
                "finish_reason": response.choices[0].finish_reason if response.choices else None,
            },
        )

        return response

    async def stream(self, request: ChatCompletionRequest) -> AsyncIterator[ChatCompletionResponse]:
        """Send a streaming completion request and yield each chunk.

        The request is sent with stream=True whatever its own setting.

        Yields:
            Chunk events with delta choices, in arrival order, up to the
            ``[DONE]`` sentinel or the end of the stream.

        Raises:
            TransportError: The transport failed.
            SchemaError: A frame did not decode; no later frame is yielded.
        """
        if not request.stream:
            request = request.model_copy(update={"stream": True})

        start_time = time.perf_counter()
        logger.debug(
            "Sending chat completion request",
            extra={"endpoint": CHAT_COMPLETIONS_ENDPOINT, "model": request.model, "stream": True},
        )

        frames = self._transport.stream_request(CHAT_COMPLETIONS_ENDPOINT, request_to_dict(request))
        delivered = 0
        async with aclosing(decode_stream(frames)) as events:
            async for event in events:
                delivered += 1
                yield event

        logger.info(
            "Chat completion stream finished",
            extra={
                "model": request.model,
                "frames": delivered,
                "latency_ms": int((time.perf_counter() - start_time) * 1000),
            },
        )

    async def create_stream(
        self,
        request: ChatCompletionRequest,
        on_event: EventHandler | None = None,
    ) -> None:
        """Stream a completion, handing each chunk to ``on_event``.

        The handler is called once per chunk, in order, and is awaited when
        it returns an awaitable before the next frame is read, so it never
        runs concurrently with itself.

        Args:
            request: Request to send.
            on_event: Sync or async callable receiving each chunk.

        Raises:
            TransportError: The transport failed.
            SchemaError: A frame did not decode.
        """
        async with aclosing(self.stream(request)) as events:
            async for event in events:
                if on_event is None:
                    continue
                result = on_event(event)
                if inspect.isawaitable(result):
                    await result

    async def create_streamed(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        """Stream a completion and return it assembled into full messages."""
        events = []
        async with aclosing(self.stream(request)) as chunks:
            async for event in chunks:
                events.append(event)
        return accumulate_stream(events)


async def send_chat_completion(
    transport: ChatTransport,
    request: ChatCompletionRequest,
) -> ChatCompletionResponse:
    """Send a non-streaming completion request over ``transport``."""
    return await ChatCompletionClient(transport).create(request)


async def send_chat_completion_stream(
    transport: ChatTransport,
    request: ChatCompletionRequest,
    on_event: EventHandler | None = None,
) -> None:
    """Stream a completion over ``transport``, handing each chunk to ``on_event``."""
    await ChatCompletionClient(transport).create_stream(request, on_event)


# Convenience functions for module-level access
_default_client: ChatCompletionClient | None = None


def get_client() -> ChatCompletionClient:
    """Get the default client, built on an env-configured HTTPTransport."""
    global _default_client
    if _default_client is None:
        _default_client = ChatCompletionClient(HTTPTransport())
    return _default_client


async def create(request: ChatCompletionRequest) -> ChatCompletionResponse:
    """Send a non-streaming completion request using the default client."""
    return await get_client().create(request)


def stream(request: ChatCompletionRequest) -> AsyncIterator[ChatCompletionResponse]:
    """Stream a completion using the default client."""
    return get_client().stream(request)


async def create_stream(
    request: ChatCompletionRequest,
    on_event: EventHandler | None = None,
) -> None:
    """Stream a completion into ``on_event`` using the default client."""
    await get_client().create_stream(request, on_event)
