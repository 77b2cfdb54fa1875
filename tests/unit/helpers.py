"""Shared test helpers: an in-memory transport and chunk builders."""

import json
from collections.abc import AsyncIterator
from typing import Any

from openai_chat.transport.base import ChatTransport


class StubTransport(ChatTransport):
    """In-memory transport recording what was sent and which frames were read."""

    def __init__(
        self,
        response: Any = None,
        frames: list[str] | None = None,
        error: Exception | None = None,
    ):
        self.response = response
        self.frames = list(frames or [])
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.pulled: list[str] = []
        self.closed = False

    async def send_request(self, endpoint: str, body: dict[str, Any]) -> Any:
        self.calls.append((endpoint, body))
        if self.error is not None:
            raise self.error
        return self.response

    async def stream_request(self, endpoint: str, body: dict[str, Any]) -> AsyncIterator[str]:
        self.calls.append((endpoint, body))
        try:
            for frame in self.frames:
                self.pulled.append(frame)
                yield frame
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True


def make_chunk(
    content: str | None = None,
    role: str | None = None,
    index: int = 0,
    finish_reason: str | None = None,
    usage: dict[str, int] | None = None,
) -> str:
    """Build one streamed chunk payload as JSON text."""
    delta: dict[str, Any] = {}
    if content is not None:
        delta["content"] = content
    if role is not None:
        delta["role"] = role
    chunk: dict[str, Any] = {
        "id": "chatcmpl-123",
        "object": "chat.completion.chunk",
        "created": 1677652288,
        "choices": [{"index": index, "delta": delta, "finish_reason": finish_reason}],
    }
    if usage is not None:
        chunk["usage"] = usage
    return json.dumps(chunk)
