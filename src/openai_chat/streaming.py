"""Server-sent event decoding for streamed chat completions.

A streamed completion arrives as SSE frames whose data payload is either a
JSON chunk (a ChatCompletionResponse with delta choices) or the literal
sentinel ``[DONE]``. The pipeline is:

    raw lines -> iter_sse_data() -> frame payloads -> decode_stream() -> events

decode_stream() stops at the sentinel and raises SchemaError on the first
frame that does not decode; nothing after a bad frame is delivered.
"""

import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable

from .codec import decode, decode_response
from .errors import SchemaError
from .models import ChatChoice, ChatCompletionResponse, ChatMessage, ChatMessageRole

logger = logging.getLogger(__name__)

STREAM_SENTINEL = "[DONE]"


async def iter_sse_data(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """Group SSE lines into frames and yield each frame's data payload.

    Comment lines (``:``) and the event/id/retry fields are ignored.
    Multiple data lines in one frame are joined with newlines. A frame left
    open when the line stream ends is still yielded.
    """
    data: list[str] = []
    async for line in lines:
        line = line.rstrip("\r\n")
        if not line:
            if data:
                yield "\n".join(data)
                data = []
            continue
        if line.startswith(":"):
            continue

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "data":
            data.append(value)

    if data:
        yield "\n".join(data)


async def decode_stream(frames: AsyncIterable[str]) -> AsyncIterator[ChatCompletionResponse]:
    """Decode frame payloads into chunk events, in arrival order.

    Args:
        frames: Raw data payloads, sentinel included.

    Yields:
        One ChatCompletionResponse per non-empty, non-sentinel frame.

    Raises:
        SchemaError: A frame is not JSON or does not match the schema.
            The stream is abandoned at that frame.
    """
    delivered = 0
    try:
        async for frame in frames:
            payload = frame.strip()
            if not payload:
                continue
            if payload == STREAM_SENTINEL:
                logger.debug(
                    "Stream sentinel received after %d frames",
                    delivered,
                    extra={"frames": delivered},
                )
                return

            try:
                event = decode_response(payload)
            except SchemaError as e:
                logger.error(
                    "Aborting stream on malformed frame %d: %s",
                    delivered,
                    str(e),
                    extra={"frame_index": delivered},
                )
                raise

            logger.debug("Stream frame %d decoded", delivered, extra={"frame_index": delivered})
            delivered += 1
            yield event

        logger.debug(
            "Stream closed without sentinel after %d frames",
            delivered,
            extra={"frames": delivered},
        )
    finally:
        # Release the underlying transport stream when stopping early
        aclose = getattr(frames, "aclose", None)
        if aclose is not None:
            await aclose()


def accumulate_stream(events: Iterable[ChatCompletionResponse]) -> ChatCompletionResponse:
    """Fold streamed chunk events into one complete response.

    Deltas are concatenated per choice index. The role comes from the first
    delta that names one (assistant if none does), the last non-null
    finish_reason wins, and usage is taken from the last chunk carrying it.

    Args:
        events: Chunk events in arrival order.

    Returns:
        A response whose choices carry full messages, ordered by index.

    Raises:
        ValueError: No events were given.
        SchemaError: An accumulated role is not a valid message role.
    """
    first: ChatCompletionResponse | None = None
    usage = None
    roles: dict[int, str] = {}
    parts: dict[int, list[str]] = {}
    finish: dict[int, str | None] = {}

    for event in events:
        if first is None:
            first = event
        if event.usage is not None:
            usage = event.usage
        for choice in event.choices:
            parts.setdefault(choice.index, [])
            finish.setdefault(choice.index, None)
            fragment = choice.delta if choice.delta is not None else choice.message
            if fragment is not None:
                if fragment.role and choice.index not in roles:
                    roles[choice.index] = fragment.role
                if fragment.content:
                    parts[choice.index].append(fragment.content)
            if choice.finish_reason is not None:
                finish[choice.index] = choice.finish_reason

    if first is None:
        raise ValueError("Cannot accumulate an empty stream")

    choices = [
        ChatChoice(
            index=index,
            message=decode(
                ChatMessage,
                {
                    "role": roles.get(index, ChatMessageRole.assistant.value),
                    "content": "".join(parts[index]),
                },
            ),
            finish_reason=finish[index],
        )
        for index in sorted(parts)
    ]
    return ChatCompletionResponse(
        id=first.id,
        object=first.object,
        created=first.created,
        choices=choices,
        usage=usage,
    )
