"""Chat completion data models.

Request and response records for the chat/completions endpoint.
Field names are the wire's snake_case keys, so model_validate() and
model_dump() are the JSON mapping in both directions.

Pydantic v2. Records are frozen. Unknown fields are kept so responses from
newer service versions still decode.
"""

from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    StrictBool,
    StrictFloat,
    StrictInt,
    model_serializer,
    model_validator,
)


# JSON number: ints stay ints, strings and booleans are rejected
Number = StrictInt | StrictFloat


class WireModel(BaseModel):
    """Base for every record exchanged with the service.

    Serialization drops declared fields that are None. Unknown fields are
    emitted as received, nulls included.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    @model_serializer(mode="wrap")
    def _omit_unset(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for name in type(self).model_fields:
            if name in data and data[name] is None:
                del data[name]
        return data


class ChatMessageRole(str, Enum):
    """Author of a chat message."""
    system = "system"
    assistant = "assistant"
    user = "user"


class ChatMessage(WireModel):
    """A single message in the conversation."""

    role: ChatMessageRole
    content: str


class ChatCompletionRequest(WireModel):
    """Request body for the chat completion endpoint.

    Only model and messages are required. Optional fields left as None are
    omitted from the encoded body.
    """

    model: str = Field(description="ID of the model to use")
    messages: list[ChatMessage] = Field(description="Conversation so far, oldest first")
    temperature: Number | None = Field(
        default=None,
        description="Sampling temperature between 0 and 2; alter this or top_p, not both",
    )
    top_p: Number | None = Field(
        default=None,
        description="Nucleus sampling probability mass",
    )
    n: StrictInt | None = Field(default=None, description="Number of choices to generate")
    stream: StrictBool | None = Field(
        default=None,
        description="Send partial deltas as server-sent events, terminated by data: [DONE]",
    )
    stop: list[str] | None = Field(
        default=None,
        description="Up to 4 sequences where generation stops",
    )
    max_tokens: StrictInt | None = Field(
        default=None,
        description="Maximum number of tokens to generate",
    )
    presence_penalty: Number | None = Field(
        default=None,
        description="-2.0 to 2.0; positive values favour new topics",
    )
    frequency_penalty: Number | None = Field(
        default=None,
        description="-2.0 to 2.0; positive values penalise repeated tokens",
    )
    logit_bias: dict[str, Any] | None = Field(
        default=None,
        description="Token ID to bias value (-100 to 100)",
    )
    user: str | None = Field(default=None, description="End-user identifier")


class ChatChoiceDelta(WireModel):
    """Incremental message fragment carried by a streamed choice."""

    content: str | None = None
    role: str | None = None


class ChatChoice(WireModel):
    """One candidate completion.

    Non-streaming responses set message; streamed chunks set delta.
    A choice never carries both.
    """

    index: StrictInt
    message: ChatMessage | None = None
    delta: ChatChoiceDelta | None = None
    finish_reason: str | None = None

    @model_validator(mode="after")
    def _message_or_delta(self) -> "ChatChoice":
        if self.message is not None and self.delta is not None:
            raise ValueError("choice carries both message and delta")
        return self

    @property
    def is_partial(self) -> bool:
        """True for a streamed (delta) choice."""
        return self.delta is not None


class ChatCompletionUsage(WireModel):
    """Token usage statistics."""

    prompt_tokens: StrictInt
    completion_tokens: StrictInt
    total_tokens: StrictInt


class ChatCompletionResponse(WireModel):
    """Response body of the chat completion endpoint, or one streamed chunk.

    ```json
    {
      "id": "chatcmpl-123",
      "object": "chat.completion",
      "created": 1677652288,
      "choices": [{
        "index": 0,
        "message": {"role": "assistant", "content": "Hello"},
        "finish_reason": "stop"
      }],
      "usage": {"prompt_tokens": 9, "completion_tokens": 12, "total_tokens": 21}
    }
    ```

    usage is absent on most streamed chunks.
    """

    id: str
    object: str
    created: StrictInt = Field(description="Unix timestamp (seconds)")
    choices: list[ChatChoice]
    usage: ChatCompletionUsage | None = None
