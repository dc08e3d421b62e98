"""
Metal Cloud JSON-RPC client.

Construction validates the configuration, parses the API key and installs a
signing transport under an httpx client. Callers never deal with signing:

    with get_metalcloud_client("me@example.com", "42:secret") as client:
        client.call("infrastructures", client.user_id)

The client ships no method catalog. ``call`` sends any method name with
positional params and returns the decoded ``result`` member.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx

from metalcloud.config import ClientConfig, default_endpoint
from metalcloud.credentials import Credential, parse_api_key
from metalcloud.jsonrpc import encode_request, parse_response
from metalcloud.transport import AsyncSigningTransport, SigningTransport, is_dry_run

logger = logging.getLogger(__name__)

_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def _decode_reply(response: httpx.Response) -> Any:
    if is_dry_run(response):
        return None
    return parse_response(response.content, response.status_code)


class _ClientBase:
    def __init__(self, config: ClientConfig) -> None:
        config.validate()
        self._config = config
        self._credential = parse_api_key(config.api_key)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def user_email(self) -> str:
        """The user configured for this connection."""
        return self._config.user

    @property
    def endpoint(self) -> str:
        """The endpoint configured for this connection."""
        return self._config.endpoint

    @property
    def user_id(self) -> int | None:
        """Account ID from the API key prefix, or None if the key has none."""
        return self._credential.account_id

    @property
    def credential(self) -> Credential:
        return self._credential


class MetalCloudClient(_ClientBase):
    """Synchronous client.

    Args:
        config: Client configuration. Validated here; an invalid config
            raises before any resources are created.
        transport: Network transport to wrap with signing. Defaults to
            httpx.HTTPTransport().

    Raises:
        InvalidConfiguration: Bad user, API key or endpoint.
        MalformedCredential: API key prefix is not a non-negative integer.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(config)
        self._transport = SigningTransport(
            self._credential,
            options=config.transport_options(),
            transport=transport,
        )
        self._http = httpx.Client(transport=self._transport, timeout=config.timeout_s)
        logger.debug("Metal Cloud client for %s at %s", config.user, config.endpoint)

    def call(self, method: str, *params: Any) -> Any:
        """Invoke a JSON-RPC method.

        Returns:
            The ``result`` member of the reply, or None in dry-run mode.

        Raises:
            RpcError: The server returned an error object.
            InvalidResponse: The reply is not a JSON-RPC 2.0 response.
            MalformedRequest: The endpoint's query string cannot be parsed.
            httpx.TransportError: Network failure, passed through as is.
        """
        response = self._http.post(
            self._config.endpoint,
            content=encode_request(method, list(params) if params else None),
            headers=_HEADERS,
        )
        return _decode_reply(response)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> MetalCloudClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class AsyncMetalCloudClient(_ClientBase):
    """Asynchronous client. Same contract as MetalCloudClient."""

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(config)
        self._transport = AsyncSigningTransport(
            self._credential,
            options=config.transport_options(),
            transport=transport,
        )
        self._http = httpx.AsyncClient(transport=self._transport, timeout=config.timeout_s)
        logger.debug("Async Metal Cloud client for %s at %s", config.user, config.endpoint)

    async def call(self, method: str, *params: Any) -> Any:
        response = await self._http.post(
            self._config.endpoint,
            content=encode_request(method, list(params) if params else None),
            headers=_HEADERS,
        )
        return _decode_reply(response)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> AsyncMetalCloudClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def get_metalcloud_client(
    user: str,
    api_key: str,
    endpoint: str | None = None,
    logging_enabled: bool = False,
) -> MetalCloudClient:
    """Build a client from plain arguments.

    Args:
        user: Account email address.
        api_key: API key as issued by the service.
        endpoint: JSON-RPC endpoint. None means default_endpoint().
        logging_enabled: Log request and response bodies.
    """
    config = ClientConfig(
        user=user,
        api_key=api_key,
        endpoint=default_endpoint() if endpoint is None else endpoint,
        logging_enabled=logging_enabled,
    )
    return MetalCloudClient(config)
