"""Pytest fixtures for testing."""

from typing import Any

import pytest


@pytest.fixture
def sample_request_data() -> dict[str, Any]:
    """Minimal request body."""
    return {"model": "gpt-3.5-turbo", "messages": [{"role": "user", "content": "Hi"}]}


@pytest.fixture
def sample_response_data() -> dict[str, Any]:
    """Non-streaming response body."""
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1677652288,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": "Hello"},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 9, "completion_tokens": 12, "total_tokens": 21},
    }


@pytest.fixture
def sample_chunk_data() -> dict[str, Any]:
    """Streamed chunk body."""
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion.chunk",
        "created": 1677652288,
        "choices": [{"index": 0, "delta": {"content": "Hel"}, "finish_reason": None}],
    }
