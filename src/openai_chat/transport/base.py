"""Abstract base class for chat completion transports.

Defines the interface the client needs from whatever carries requests to
the service.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any


class ChatTransport(ABC):
    """Base interface for transports.

    A transport owns connection management, authentication, base URL
    resolution and timeouts. It knows nothing about the chat schema.
    """

    @abstractmethod
    async def send_request(self, endpoint: str, body: dict[str, Any]) -> Any:
        """Send one request and return the decoded JSON body.

        Args:
            endpoint: Path relative to the configured base URL.
            body: JSON-ready request body.

        Returns:
            The fully buffered response body, parsed as JSON.

        Raises:
            TransportError: Network failure or non-success status.
            SchemaError: The body is not JSON.
        """
        ...

    @abstractmethod
    def stream_request(self, endpoint: str, body: dict[str, Any]) -> AsyncIterator[str]:
        """Send one request and yield its server-sent data payloads.

        Payloads are yielded raw and in arrival order, the ``[DONE]``
        sentinel included. The iterator ends when the server closes the
        stream.

        Raises:
            TransportError: Network failure or non-success status.
        """
        ...

    async def aclose(self) -> None:
        """Release held connections."""
        return None

    async def __aenter__(self) -> "ChatTransport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
