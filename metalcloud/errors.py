"""
Error taxonomy for the Metal Cloud client.

Every error raised by this package derives from MetalCloudError and carries
a stable ``error_code`` plus a ``details`` dict for diagnostics:

    - INVALID_CONFIGURATION: empty user/API key, empty or invalid endpoint.
      Raised at construction time only.
    - MALFORMED_CREDENTIAL: the API key has an account prefix that is not
      a non-negative integer. Raised at construction time only.
    - MALFORMED_REQUEST: the outgoing request's query string cannot be
      parsed. Raised per request; the request is not sent.
    - INVALID_RESPONSE: the reply is not a JSON-RPC 2.0 response envelope.
    - RPC_ERROR: the server answered with a JSON-RPC error object.

Network failures are NOT wrapped. Whatever the underlying httpx transport
raises reaches the caller unchanged; TransportFailure is exported as an
alias of httpx.TransportError for callers that want to catch them by name.
"""

from __future__ import annotations

from typing import Any

import httpx

__all__ = [
    "MetalCloudError",
    "InvalidConfiguration",
    "MalformedCredential",
    "MalformedRequest",
    "InvalidResponse",
    "RpcError",
    "TransportFailure",
]


class MetalCloudError(Exception):
    """Base class for all client errors."""

    default_code = "METALCLOUD_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}


class InvalidConfiguration(MetalCloudError):
    default_code = "INVALID_CONFIGURATION"


class MalformedCredential(MetalCloudError):
    default_code = "MALFORMED_CREDENTIAL"


class MalformedRequest(MetalCloudError):
    default_code = "MALFORMED_REQUEST"


class InvalidResponse(MetalCloudError):
    default_code = "INVALID_RESPONSE"


class RpcError(MetalCloudError):
    """The server returned a JSON-RPC error object.

    Attributes:
        code: JSON-RPC error code from the server.
        data: Optional ``data`` member of the error object.
    """

    default_code = "RPC_ERROR"

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(
            message,
            details={"code": code, "data": data},
        )
        self.code = code
        self.data = data

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


TransportFailure = httpx.TransportError
