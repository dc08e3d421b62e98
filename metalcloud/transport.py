"""
Signing transports: authenticate every outbound request.

SigningTransport (sync) and AsyncSigningTransport wrap a real httpx
transport and are drop-in replacements for it:

    client = httpx.Client(transport=SigningTransport(credential))

For each request they:

    1. buffer the request body (empty when absent)
    2. log method, URL and body when logging is enabled (before signing)
    3. compute the verify signature over the exact body bytes
    4. add ``verify`` to the query string (MalformedRequest on a bad query,
       raised before the request is touched)
    5. set ``Connection: close`` unless close_connections is off
    6. give the request a fresh stream over the buffered body
    7. forward to the wrapped transport, or fabricate a 204 in dry-run mode
    8. buffer, log and rebuild the reply when logging is enabled

Transports hold no per-request state: the credential and options are frozen
values set at construction, so one instance may serve concurrent requests.
Exceptions from the wrapped transport propagate unchanged. Nothing here
retries or applies timeouts; that belongs to the wrapped transport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from metalcloud.credentials import Credential
from metalcloud.payload import Payload
from metalcloud.signature import add_verify_param, compute_signature

logger = logging.getLogger(__name__)

DRY_RUN_EXTENSION = "dry_run"


@dataclass(frozen=True)
class TransportOptions:
    """Behaviour switches for the signing transports.

    Attributes:
        logging_enabled: Log request and response bodies.
        dry_run: Sign but never send; return an empty 204 instead.
        close_connections: Send ``Connection: close`` on every request.
    """

    logging_enabled: bool = False
    dry_run: bool = False
    close_connections: bool = True


# =========================================================================
# Shared request/response handling
# =========================================================================


def _sign_request(
    request: httpx.Request,
    payload: Payload,
    credential: Credential,
    options: TransportOptions,
) -> httpx.Request:
    if options.logging_enabled:
        logger.info("%s call to:%s", request.method, request.url)
        logger.info("%s", payload.text())

    # Nothing on the request changes until the query has parsed.
    signature = compute_signature(credential, payload.data)
    query = add_verify_param(request.url.query.decode("ascii"), signature)

    if options.close_connections:
        request.headers["Connection"] = "close"

    # The original stream was spent by read(); hand the wrapped transport a new one.
    request.stream = payload.stream()

    request.url = request.url.copy_with(query=query.encode("ascii"))
    return request


def _dry_run_response(request: httpx.Request) -> httpx.Response:
    return httpx.Response(204, request=request, extensions={DRY_RUN_EXTENSION: True})


def _rebuilt_response(
    response: httpx.Response,
    payload: Payload,
    request: httpx.Request,
) -> httpx.Response:
    logger.info("%s", payload.text())
    return httpx.Response(
        response.status_code,
        headers=response.headers,
        stream=payload.stream(),
        request=request,
        extensions=response.extensions,
    )


def is_dry_run(response: httpx.Response) -> bool:
    """True if the response was fabricated by a dry-run transport."""
    return bool(response.extensions.get(DRY_RUN_EXTENSION, False))


# =========================================================================
# Transports
# =========================================================================


class SigningTransport(httpx.BaseTransport):
    """Synchronous signing transport.

    Args:
        credential: Parsed API key.
        options: Logging / dry-run / keep-alive switches.
        transport: The transport that actually talks to the network.
            Defaults to httpx.HTTPTransport().
    """

    def __init__(
        self,
        credential: Credential,
        *,
        options: TransportOptions | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._credential = credential
        self._options = options or TransportOptions()
        self._transport = transport or httpx.HTTPTransport()

    @property
    def credential(self) -> Credential:
        return self._credential

    @property
    def options(self) -> TransportOptions:
        return self._options

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        payload = Payload(request.read())
        signed = _sign_request(request, payload, self._credential, self._options)

        if self._options.dry_run:
            return _dry_run_response(signed)

        response = self._transport.handle_request(signed)

        if self._options.logging_enabled:
            return _rebuilt_response(response, Payload.drain(response), signed)
        return response

    def close(self) -> None:
        self._transport.close()


class AsyncSigningTransport(httpx.AsyncBaseTransport):
    """Asynchronous signing transport. Same semantics as SigningTransport."""

    def __init__(
        self,
        credential: Credential,
        *,
        options: TransportOptions | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credential = credential
        self._options = options or TransportOptions()
        self._transport = transport or httpx.AsyncHTTPTransport()

    @property
    def credential(self) -> Credential:
        return self._credential

    @property
    def options(self) -> TransportOptions:
        return self._options

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        payload = Payload(await request.aread())
        signed = _sign_request(request, payload, self._credential, self._options)

        if self._options.dry_run:
            return _dry_run_response(signed)

        response = await self._transport.handle_async_request(signed)

        if self._options.logging_enabled:
            return _rebuilt_response(response, await Payload.adrain(response), signed)
        return response

    async def aclose(self) -> None:
        await self._transport.aclose()
