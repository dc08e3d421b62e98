"""
Buffered request/response bodies.

httpx streams are single-use: once the signing transport has read a body,
the original stream is spent. A Payload holds the bytes as a plain value and
hands out a fresh ByteStream each time one is needed, so the wrapped
transport (or the caller, for responses) can read the body again.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx


@dataclass(frozen=True)
class Payload:
    data: bytes = b""

    def __len__(self) -> int:
        return len(self.data)

    def stream(self) -> httpx.ByteStream:
        """A new readable stream over the buffered bytes (sync and async)."""
        return httpx.ByteStream(self.data)

    def text(self) -> str:
        """Render for logs. Never raises on undecodable bytes."""
        return self.data.decode("utf-8", errors="replace")

    @classmethod
    def drain(cls, response: httpx.Response) -> Payload:
        """Read the raw bytes of a transport-level response and close it."""
        try:
            data = b"".join(response.stream)  # type: ignore[arg-type]
        finally:
            response.close()
        return cls(data)

    @classmethod
    async def adrain(cls, response: httpx.Response) -> Payload:
        """Async counterpart of drain()."""
        try:
            data = b"".join([chunk async for chunk in response.stream])  # type: ignore[union-attr]
        finally:
            await response.aclose()
        return cls(data)
