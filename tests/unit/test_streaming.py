"""Unit tests for server-sent event decoding.

Tests cover:
- SSE line grouping into data payloads
- Sentinel termination
- Abort on the first malformed frame
- Stream accumulation into complete messages
"""

import pytest

from helpers import make_chunk
from openai_chat.codec import decode_response
from openai_chat.errors import SchemaError
from openai_chat.streaming import (
    STREAM_SENTINEL,
    accumulate_stream,
    decode_stream,
    iter_sse_data,
)


async def aiter_list(items):
    for item in items:
        yield item


async def collect(aiterable):
    return [item async for item in aiterable]


class TestIterSSEData:
    """Tests for SSE line parsing."""

    @pytest.mark.asyncio
    async def test_data_frames(self):
        """Test each blank-line-terminated frame yields its data."""
        lines = ["data: {\"a\": 1}", "", "data: [DONE]", ""]
        assert await collect(iter_sse_data(aiter_list(lines))) == ['{"a": 1}', "[DONE]"]

    @pytest.mark.asyncio
    async def test_no_space_after_colon(self):
        """Test the space after data: is optional."""
        lines = ["data:{\"a\": 1}", ""]
        assert await collect(iter_sse_data(aiter_list(lines))) == ['{"a": 1}']

    @pytest.mark.asyncio
    async def test_multiline_data(self):
        """Test multiple data lines in one frame are joined by newlines."""
        lines = ["data: {\"a\":", "data: 1}", ""]
        assert await collect(iter_sse_data(aiter_list(lines))) == ['{"a":\n1}']

    @pytest.mark.asyncio
    async def test_comments_and_other_fields_ignored(self):
        """Test comments and event/id/retry fields do not produce data."""
        lines = [": keep-alive", "", "event: message", "id: 7", "retry: 100", "data: x", ""]
        assert await collect(iter_sse_data(aiter_list(lines))) == ["x"]

    @pytest.mark.asyncio
    async def test_unterminated_final_frame(self):
        """Test a frame without a trailing blank line is still yielded."""
        lines = ["data: first", "", "data: last"]
        assert await collect(iter_sse_data(aiter_list(lines))) == ["first", "last"]

    @pytest.mark.asyncio
    async def test_crlf_lines(self):
        """Test carriage returns are stripped."""
        lines = ["data: x\r", "\r"]
        assert await collect(iter_sse_data(aiter_list(lines))) == ["x"]


class TestDecodeStream:
    """Tests for frame decoding."""

    @pytest.mark.asyncio
    async def test_stops_at_sentinel(self):
        """Test frames after [DONE] are never decoded."""
        frames = [make_chunk("He"), make_chunk("llo"), STREAM_SENTINEL, make_chunk("late")]
        pulled = []

        async def source():
            for frame in frames:
                pulled.append(frame)
                yield frame

        events = await collect(decode_stream(source()))

        assert [e.choices[0].delta.content for e in events] == ["He", "llo"]
        assert pulled == frames[:3]

    @pytest.mark.asyncio
    async def test_natural_end_without_sentinel(self):
        """Test a stream ending without [DONE] completes normally."""
        events = await collect(decode_stream(aiter_list([make_chunk("a"), make_chunk("b")])))
        assert len(events) == 2

    @pytest.mark.asyncio
    async def test_empty_frames_skipped(self):
        """Test empty payloads are ignored."""
        events = await collect(decode_stream(aiter_list(["", "  ", make_chunk("a")])))
        assert len(events) == 1

    @pytest.mark.asyncio
    async def test_aborts_on_malformed_frame(self):
        """Test the first bad frame raises and nothing after it is read."""
        frames = [make_chunk("ok"), "not json", make_chunk("never")]
        pulled = []
        received = []

        async def source():
            for frame in frames:
                pulled.append(frame)
                yield frame

        with pytest.raises(SchemaError) as exc_info:
            async for event in decode_stream(source()):
                received.append(event)

        assert len(received) == 1
        assert received[0].choices[0].delta.content == "ok"
        assert pulled == frames[:2]
        assert exc_info.value.payload == "not json"

    @pytest.mark.asyncio
    async def test_aborts_on_schema_mismatch(self):
        """Test valid JSON missing required fields aborts the stream."""
        with pytest.raises(SchemaError):
            await collect(decode_stream(aiter_list(['{"choices": []}'])))

    @pytest.mark.asyncio
    async def test_source_closed_after_sentinel(self):
        """Test the frame source is closed once the sentinel is seen."""
        closed = []

        async def source():
            try:
                yield make_chunk("a")
                yield STREAM_SENTINEL
                yield make_chunk("b")
            finally:
                closed.append(True)

        await collect(decode_stream(source()))

        assert closed == [True]

    @pytest.mark.asyncio
    async def test_final_chunk_usage(self):
        """Test usage on the last chunk is decoded."""
        usage = {"prompt_tokens": 1, "completion_tokens": 2, "total_tokens": 3}
        frames = [make_chunk("a"), make_chunk(finish_reason="stop", usage=usage), STREAM_SENTINEL]

        events = await collect(decode_stream(aiter_list(frames)))

        assert events[0].usage is None
        assert events[1].usage.total_tokens == 3


class TestAccumulateStream:
    """Tests for folding chunks into a full response."""

    def test_concatenates_deltas(self):
        """Test deltas are joined per choice."""
        usage = {"prompt_tokens": 9, "completion_tokens": 2, "total_tokens": 11}
        events = [
            decode_response(make_chunk(role="assistant", content="")),
            decode_response(make_chunk("Hel")),
            decode_response(make_chunk("lo")),
            decode_response(make_chunk(finish_reason="stop", usage=usage)),
        ]

        response = accumulate_stream(events)

        assert response.id == "chatcmpl-123"
        assert response.created == 1677652288
        assert len(response.choices) == 1
        assert response.choices[0].message.role == "assistant"
        assert response.choices[0].message.content == "Hello"
        assert response.choices[0].delta is None
        assert response.choices[0].finish_reason == "stop"
        assert response.usage.total_tokens == 11

    def test_multiple_choices(self):
        """Test interleaved choices are kept apart and ordered by index."""
        events = [
            decode_response(make_chunk("b", index=1)),
            decode_response(make_chunk("a", index=0)),
            decode_response(make_chunk("c", index=1)),
        ]

        response = accumulate_stream(events)

        assert [c.index for c in response.choices] == [0, 1]
        assert response.choices[0].message.content == "a"
        assert response.choices[1].message.content == "bc"
        assert response.usage is None

    def test_default_role(self):
        """Test assistant is used when no delta names a role."""
        response = accumulate_stream([decode_response(make_chunk("x"))])
        assert response.choices[0].message.role == "assistant"

    def test_invalid_role(self):
        """Test an unknown streamed role fails with SchemaError."""
        with pytest.raises(SchemaError):
            accumulate_stream([decode_response(make_chunk("x", role="tool"))])

    def test_empty_stream(self):
        """Test accumulating nothing is an error."""
        with pytest.raises(ValueError):
            accumulate_stream([])
