"""HTTP transport implementation.

Implements the ChatTransport interface on top of httpx.AsyncClient.
Streams are read as server-sent events.
"""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

import httpx

from ..errors import (
    AuthenticationError,
    ConnectionError,
    InvalidRequestError,
    NotFoundError,
    ProviderError,
    RateLimitError,
    RequestTimeoutError,
    SchemaError,
    TransportError,
)
from ..streaming import iter_sse_data
from .base import ChatTransport

logger = logging.getLogger(__name__)


class HTTPTransport(ChatTransport):
    """Transport for an OpenAI-compatible HTTP API.

    Configuration (env vars, used when the argument is omitted):
    - OPENAI_BASE_URL: API root (default: https://api.openai.com/v1)
    - OPENAI_API_KEY: Bearer token (no Authorization header if unset)
    - OPENAI_TIMEOUT_SECONDS: Request timeout (default: 60)
    - OPENAI_ORGANIZATION: Sent as the OpenAI-Organization header
    """

    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_TIMEOUT = 60.0

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        organization: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize HTTP transport.

        Args:
            base_url: API root URL. Defaults to OPENAI_BASE_URL env var.
            api_key: API key. Defaults to OPENAI_API_KEY env var.
            timeout: Request timeout in seconds. Defaults to OPENAI_TIMEOUT_SECONDS env var.
            organization: Organization ID. Defaults to OPENAI_ORGANIZATION env var.
            client: Pre-built httpx client. The transport does not close a
                client it did not create.
        """
        self._base_url = (
            base_url or os.environ.get("OPENAI_BASE_URL", self.DEFAULT_BASE_URL)
        ).rstrip("/")
        self._api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self._timeout = (
            timeout
            if timeout is not None
            else float(os.environ.get("OPENAI_TIMEOUT_SECONDS", self.DEFAULT_TIMEOUT))
        )
        self._organization = organization or os.environ.get("OPENAI_ORGANIZATION")
        self._client = client
        self._owns_client = client is None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-initialized httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    def url_for(self, endpoint: str) -> str:
        """Resolve an endpoint path against the base URL."""
        return f"{self._base_url}/{endpoint.lstrip('/')}"

    def _headers(self, stream: bool = False) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "text/event-stream" if stream else "application/json",
        }
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        if self._organization:
            headers["OpenAI-Organization"] = self._organization
        return headers

    async def send_request(self, endpoint: str, body: dict[str, Any]) -> Any:
        """POST a JSON body and return the parsed JSON response."""
        url = self.url_for(endpoint)
        logger.debug("POST %s", url, extra={"endpoint": endpoint, "stream": False})

        try:
            response = await self.client.post(url, json=body, headers=self._headers())
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(f"Request to {url} timed out after {self._timeout}s") from e
        except httpx.TransportError as e:
            raise ConnectionError(f"Failed to connect to {url}: {e}") from e

        if not response.is_success:
            self._handle_status_error(response)

        try:
            return response.json()
        except ValueError as e:
            raise SchemaError(
                f"Response body from {url} is not valid JSON",
                payload=response.text,
                status_code=response.status_code,
                request_id=response.headers.get("x-request-id"),
            ) from e

    async def stream_request(self, endpoint: str, body: dict[str, Any]) -> AsyncIterator[str]:
        """POST a JSON body and yield the SSE data payloads of the response."""
        url = self.url_for(endpoint)
        logger.debug("POST %s", url, extra={"endpoint": endpoint, "stream": True})

        try:
            async with self.client.stream(
                "POST", url, json=body, headers=self._headers(stream=True)
            ) as response:
                if not response.is_success:
                    await response.aread()
                    self._handle_status_error(response)
                content_type = response.headers.get("content-type", "")
                if content_type and not content_type.startswith("text/event-stream"):
                    await response.aread()
                    raise SchemaError(
                        f"Expected an event stream from {url}, got {content_type}",
                        payload=response.text,
                        status_code=response.status_code,
                        request_id=response.headers.get("x-request-id"),
                    )
                async with aclosing(iter_sse_data(response.aiter_lines())) as payloads:
                    async for payload in payloads:
                        yield payload
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(f"Stream from {url} timed out after {self._timeout}s") from e
        except httpx.TransportError as e:
            raise ConnectionError(f"Stream from {url} failed: {e}") from e

    async def aclose(self) -> None:
        """Close the httpx client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _handle_status_error(self, response: httpx.Response) -> None:
        """Convert a non-success HTTP response to a TransportError."""
        status_code = response.status_code
        message = _error_message(response)
        request_id = response.headers.get("x-request-id")

        logger.warning(
            "Chat completion request failed with status %d: %s",
            status_code,
            message,
            extra={"status_code": status_code, "request_id": request_id},
        )

        if status_code in (401, 403):
            raise AuthenticationError(
                f"Authentication failed: {message}",
                status_code=status_code,
                request_id=request_id,
            )

        if status_code == 404:
            raise NotFoundError(
                f"Not found: {message}",
                status_code=status_code,
                request_id=request_id,
            )

        if status_code == 429:
            retry_after = None
            retry_after_str = response.headers.get("retry-after")
            if retry_after_str:
                try:
                    retry_after = float(retry_after_str)
                except ValueError:
                    retry_after = None

            raise RateLimitError(
                f"Rate limit exceeded: {message}",
                retry_after=retry_after,
                status_code=status_code,
                request_id=request_id,
            )

        if 400 <= status_code < 500:
            raise InvalidRequestError(
                f"Invalid request: {message}",
                status_code=status_code,
                request_id=request_id,
            )

        if status_code >= 500:
            raise ProviderError(
                f"Server error: {message}",
                status_code=status_code,
                request_id=request_id,
            )

        # Unexpected 1xx/3xx
        raise TransportError(
            f"Unexpected response status: {message}",
            status_code=status_code,
            request_id=request_id,
        )


def _error_message(response: httpx.Response) -> str:
    """Best available error text: error.message from a JSON body, else raw text."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:500] or response.reason_phrase
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        message = data["error"].get("message")
        if message:
            return str(message)
    return response.text[:500] or response.reason_phrase
