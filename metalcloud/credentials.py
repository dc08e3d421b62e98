"""
API key parsing.

A Metal Cloud API key is an opaque string, optionally of the form
``"<account_id>:<rest>"``. The account identifier is extracted for the
``verify`` signature prefix; the secret used as the MAC key is always the
ENTIRE raw key, including any ``"<account_id>:"`` prefix. The server
verifies signatures the same way, so this must not be "fixed".
"""

from __future__ import annotations

from dataclasses import dataclass

from metalcloud.errors import InvalidConfiguration, MalformedCredential

KEY_DELIMITER = ":"


@dataclass(frozen=True)
class Credential:
    """Signing material derived from an API key.

    Attributes:
        secret: The full raw API key, used verbatim as the HMAC key.
        account_id: Numeric account prefix, or None when the key has no
            delimiter.
        account_prefix: The prefix exactly as written in the key, leading
            zeros included. This is what goes on the wire in ``verify``.
    """

    secret: str
    account_id: int | None = None
    account_prefix: str | None = None

    def __repr__(self) -> str:
        return f"Credential(account_id={self.account_id!r}, secret='***')"


def parse_api_key(raw_key: str) -> Credential:
    """Split an API key into account identifier and signing secret.

    Args:
        raw_key: The API key as issued by the service. Must be non-empty.

    Returns:
        Credential with ``secret == raw_key``.

    Raises:
        InvalidConfiguration: If raw_key is empty.
        MalformedCredential: If the segment before the first delimiter is
            not a non-negative decimal integer.
    """
    if not raw_key:
        raise InvalidConfiguration("apiKey cannot be an empty string")

    components = raw_key.split(KEY_DELIMITER)
    if len(components) == 1:
        return Credential(secret=raw_key)

    prefix = components[0]
    # str.isdigit() accepts non-ASCII digits that int() may reject
    if not (prefix.isascii() and prefix.isdigit()):
        raise MalformedCredential(
            "API key account prefix must be a non-negative integer",
            details={"prefix_length": len(prefix)},
        )

    return Credential(secret=raw_key, account_id=int(prefix), account_prefix=prefix)
