"""
Request signature computation and ``verify`` query injection.

Wire contract:

    verify = [<account_id> ":"] hex(HMAC-MD5(secret, body))

where ``secret`` is the full API key and ``body`` is the exact request body
bytes (empty for bodiless requests). Hex is lowercase.

The query string is parsed strictly: an invalid percent-escape or a ``;``
separator is a MalformedRequest rather than something to guess around.
Re-encoding sorts parameters by key (stable for repeated keys), so the
resulting URL is deterministic for a given input.
"""

from __future__ import annotations

import hashlib
import hmac
import re
from urllib.parse import unquote_plus, urlencode

from metalcloud.credentials import Credential
from metalcloud.errors import MalformedRequest

VERIFY_PARAM = "verify"

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def compute_mac(secret: str, body: bytes) -> str:
    """Lowercase hex HMAC-MD5 of body keyed with secret."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.md5).hexdigest()


def compute_signature(credential: Credential, body: bytes) -> str:
    """Compute the ``verify`` value for a request body.

    Deterministic: the same (credential, body) pair always yields the same
    string. The account prefix is written as it appears in the key, so
    ``"007:abc"`` signs as ``007:<mac>``.
    """
    signature = compute_mac(credential.secret, body)
    if credential.account_prefix is not None:
        signature = f"{credential.account_prefix}:{signature}"
    return signature


def parse_query(raw_query: str) -> list[tuple[str, str]]:
    """Parse a raw query string into ordered (key, value) pairs.

    Empty segments are skipped. A segment without ``=`` becomes a key with
    an empty value.

    Raises:
        MalformedRequest: On a ``;`` separator or an invalid percent-escape.
    """
    pairs: list[tuple[str, str]] = []
    for segment in raw_query.split("&"):
        if not segment:
            continue
        if ";" in segment:
            raise MalformedRequest(
                "invalid semicolon separator in query",
                details={"segment": segment},
            )
        if _BAD_ESCAPE.search(segment):
            raise MalformedRequest(
                "invalid URL escape in query",
                details={"segment": segment},
            )
        key, _, value = segment.partition("=")
        pairs.append((unquote_plus(key), unquote_plus(value)))
    return pairs


def add_verify_param(raw_query: str, signature: str) -> str:
    """Return raw_query with ``verify=<signature>`` added.

    Every existing parameter is kept except a previous ``verify``, which is
    replaced so that exactly one is present.
    """
    pairs = [(k, v) for k, v in parse_query(raw_query) if k != VERIFY_PARAM]
    pairs.append((VERIFY_PARAM, signature))
    pairs.sort(key=lambda pair: pair[0])
    return urlencode(pairs)
