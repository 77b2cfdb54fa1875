"""Transport implementations.

This package contains the transport interface and its HTTP implementation.
"""

from .base import ChatTransport
from .http import HTTPTransport

__all__ = [
    "ChatTransport",
    "HTTPTransport",
]
