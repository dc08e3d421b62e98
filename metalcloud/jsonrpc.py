"""
JSON-RPC 2.0 envelopes.

Builds request envelopes and checks that a reply is a well-formed response
envelope before anything looks at ``result``. Individual method results are
returned as decoded JSON; no per-method schema is applied.

Response handling:
    - Body is not JSON, or not a JSON-RPC 2.0 response: InvalidResponse
    - ``{"error": {...}}``: RpcError(code, message, data)
    - ``{"result": ...}``: the result value
"""

from __future__ import annotations

import itertools
import json
from typing import Any

import jsonschema  # type: ignore[import-untyped]

from metalcloud.errors import InvalidResponse, RpcError

JSONRPC_VERSION = "2.0"

# itertools.count is safe to advance from several threads under the GIL
_request_ids = itertools.count(1)


def next_request_id() -> int:
    return next(_request_ids)


RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["jsonrpc", "id"],
    "properties": {
        "jsonrpc": {"const": JSONRPC_VERSION},
        "id": {"type": ["integer", "string", "null"]},
        "error": {
            "type": "object",
            "required": ["code", "message"],
            "properties": {
                "code": {"type": "integer"},
                "message": {"type": "string"},
            },
        },
    },
    "oneOf": [
        {"required": ["result"], "not": {"required": ["error"]}},
        {"required": ["error"], "not": {"required": ["result"]}},
    ],
}


def build_request(method: str, params: list[Any] | None = None) -> dict[str, Any]:
    """Build a JSON-RPC 2.0 request envelope.

    ``params`` is omitted entirely when not given; JSON-RPC 2.0 allows that.
    """
    if not method:
        raise ValueError("method cannot be an empty string")
    request: dict[str, Any] = {
        "jsonrpc": JSONRPC_VERSION,
        "method": method,
        "id": next_request_id(),
    }
    if params is not None:
        request["params"] = params
    return request


def encode_request(method: str, params: list[Any] | None = None) -> bytes:
    """Build a request envelope and encode it for the wire.

    Sorted keys, no whitespace, UTF-8: identical calls produce identical
    bytes, and so identical verify signatures.
    """
    return json.dumps(
        build_request(method, params),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def validate_response(envelope: Any) -> None:
    """Raise InvalidResponse unless envelope matches RESPONSE_SCHEMA."""
    try:
        jsonschema.validate(instance=envelope, schema=RESPONSE_SCHEMA)
    except jsonschema.ValidationError as e:
        raise InvalidResponse(
            "Response is not a JSON-RPC 2.0 envelope",
            details={"reason": e.message},
        ) from e


def parse_response(body: bytes, status_code: int | None = None) -> Any:
    """Decode a JSON-RPC reply body and return its result.

    Args:
        body: Raw response bytes.
        status_code: HTTP status, recorded in error details only.

    Raises:
        InvalidResponse: Body is not JSON or not a response envelope.
        RpcError: The envelope carries an error object.
    """
    try:
        envelope = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidResponse(
            "Response was not valid JSON",
            details={
                "status_code": status_code,
                "body_preview": body[:200].decode("utf-8", errors="replace"),
            },
        ) from e

    validate_response(envelope)

    if "error" in envelope:
        error = envelope["error"]
        raise RpcError(error["code"], error["message"], error.get("data"))

    return envelope["result"]
