"""HTTP layer: client factory and retrying transport."""

from .client import create_httpx_client, default_headers
from .transport import RetryingTransport, TransportResponse

__all__ = ["create_httpx_client", "default_headers", "RetryingTransport", "TransportResponse"]
