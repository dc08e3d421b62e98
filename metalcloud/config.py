"""
Client configuration.

ClientConfig is an immutable value validated before any client is built.
It can be created directly or loaded from the environment:

    METALCLOUD_USER_EMAIL       account email (required)
    METALCLOUD_API_KEY          API key (required)
    METALCLOUD_ENDPOINT         JSON-RPC endpoint (default: default_endpoint())
    METALCLOUD_LOGGING_ENABLED  log request/response bodies (1/true/yes/on)
    METALCLOUD_DRY_RUN          sign requests but never send them
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from metalcloud.errors import InvalidConfiguration
from metalcloud.transport import TransportOptions

ENV_PREFIX = "METALCLOUD_"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def default_endpoint() -> str:
    """The public Bigstep Metal Cloud endpoint."""
    return "https://api.bigstep.com/metal-cloud"


def _env_flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class ClientConfig:
    """Everything needed to construct a client.

    Attributes:
        user: Account email. Metadata only, not used for signing.
        api_key: API key, optionally ``"<account_id>:<secret>"``.
        endpoint: Absolute http(s) URL of the JSON-RPC endpoint.
        logging_enabled: Log request and response bodies.
        dry_run: Sign requests but never send them.
        timeout_s: Request timeout in seconds, applied by the HTTP client.
    """

    user: str
    api_key: str
    endpoint: str = default_endpoint()
    logging_enabled: bool = False
    dry_run: bool = False
    timeout_s: float = 30.0

    def __repr__(self) -> str:
        return (
            f"ClientConfig(user={self.user!r}, api_key='***', "
            f"endpoint={self.endpoint!r}, logging_enabled={self.logging_enabled!r}, "
            f"dry_run={self.dry_run!r}, timeout_s={self.timeout_s!r})"
        )

    def validate(self) -> None:
        """Check the configuration.

        Raises:
            InvalidConfiguration: Empty user, empty api_key, or an endpoint
                that is empty or not an absolute http(s) URL.
        """
        if not self.user:
            raise InvalidConfiguration(
                "user cannot be an empty string! It is typically in the form of user's email address"
            )
        if not self.api_key:
            raise InvalidConfiguration("apiKey cannot be an empty string")
        if not self.endpoint:
            raise InvalidConfiguration("endpoint cannot be an empty string")

        try:
            url = httpx.URL(self.endpoint)
        except httpx.InvalidURL as e:
            raise InvalidConfiguration(
                f"endpoint is not a valid URL: {e}",
                details={"endpoint": self.endpoint},
            ) from e

        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidConfiguration(
                "endpoint must be an absolute http(s) URL",
                details={"endpoint": self.endpoint},
            )

        if not self.timeout_s > 0:
            raise InvalidConfiguration(
                "timeout_s must be positive",
                details={"timeout_s": self.timeout_s},
            )

    def transport_options(self) -> TransportOptions:
        return TransportOptions(
            logging_enabled=self.logging_enabled,
            dry_run=self.dry_run,
        )

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> ClientConfig:
        """Load configuration from METALCLOUD_* variables.

        Keyword overrides win over the environment. The result is not
        validated; the client validates on construction.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {
            "user": env.get(f"{ENV_PREFIX}USER_EMAIL", ""),
            "api_key": env.get(f"{ENV_PREFIX}API_KEY", ""),
            "endpoint": env.get(f"{ENV_PREFIX}ENDPOINT") or default_endpoint(),
            "logging_enabled": _env_flag(env.get(f"{ENV_PREFIX}LOGGING_ENABLED")),
            "dry_run": _env_flag(env.get(f"{ENV_PREFIX}DRY_RUN")),
        }
        values.update(overrides)
        return cls(**values)
