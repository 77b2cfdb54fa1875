"""Chat completion error hierarchy.

Two kinds of failure reach callers:
- SchemaError: a payload that does not match the chat completion schema.
- TransportError (and subclasses): the request could not be completed.

Neither kind is retried or recovered from by this package.
"""

from typing import Any


class ChatClientError(Exception):
    """Base exception for chat completion operations."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        request_id: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.request_id = request_id

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.request_id:
            parts.append(f"request_id={self.request_id}")
        return " ".join(parts)


class SchemaError(ChatClientError):
    """Payload is not valid JSON or does not match the expected schema.

    Raised for missing required fields, wrong types, non-integral integers
    and unknown role tags. Unknown extra fields are NOT schema errors.
    """

    def __init__(
        self,
        message: str,
        payload: Any = None,
        status_code: int | None = None,
        request_id: str | None = None,
    ):
        super().__init__(message, status_code, request_id)
        self.payload = payload


class TransportError(ChatClientError):
    """Request failed before a decodable body was received.

    The client passes these through untouched; status code policy belongs
    to the transport.
    """

    pass


class AuthenticationError(TransportError):
    """401/403 - Invalid or missing API key."""

    pass


class NotFoundError(TransportError):
    """404 - Unknown endpoint or model."""

    pass


class RateLimitError(TransportError):
    """429 - Rate limit exceeded.

    retry_after holds the server's Retry-After hint in seconds, if any.
    """

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        status_code: int | None = None,
        request_id: str | None = None,
    ):
        super().__init__(message, status_code, request_id)
        self.retry_after = retry_after


class InvalidRequestError(TransportError):
    """400 and other 4xx - Request rejected by the service."""

    pass


class ProviderError(TransportError):
    """5xx - Service-side failure."""

    pass


class RequestTimeoutError(TransportError):
    """Request exceeded the transport timeout."""

    pass


class ConnectionError(TransportError):
    """Network failure: connection refused, reset, DNS, TLS."""

    pass
