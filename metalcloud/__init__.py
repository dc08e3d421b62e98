"""
metalcloud: signed JSON-RPC client for Bigstep Metal Cloud.

Every outbound request carries a ``verify`` query parameter:
hex(HMAC-MD5(api_key, body)), prefixed with ``"<account_id>:"`` when the
API key has one. Signing happens in an httpx transport, so any httpx client
can use it.
"""

from metalcloud.client import AsyncMetalCloudClient, MetalCloudClient, get_metalcloud_client
from metalcloud.config import ClientConfig, default_endpoint
from metalcloud.credentials import Credential, parse_api_key
from metalcloud.errors import (
    InvalidConfiguration,
    InvalidResponse,
    MalformedCredential,
    MalformedRequest,
    MetalCloudError,
    RpcError,
    TransportFailure,
)
from metalcloud.signature import compute_signature
from metalcloud.transport import (
    AsyncSigningTransport,
    SigningTransport,
    TransportOptions,
    is_dry_run,
)

__all__ = [
    "AsyncMetalCloudClient",
    "AsyncSigningTransport",
    "ClientConfig",
    "Credential",
    "InvalidConfiguration",
    "InvalidResponse",
    "MalformedCredential",
    "MalformedRequest",
    "MetalCloudClient",
    "MetalCloudError",
    "RpcError",
    "SigningTransport",
    "TransportFailure",
    "TransportOptions",
    "compute_signature",
    "default_endpoint",
    "get_metalcloud_client",
    "is_dry_run",
    "parse_api_key",
]
__version__ = "0.1.0"
