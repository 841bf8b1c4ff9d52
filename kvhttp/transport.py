"""HTTP transport for the remote key-value store.

The store speaks a small protocol over a single base URL:

- ``GET {base}/{key}`` returns the stored text, or 404.
- ``POST {base}`` with form body ``{key}={text}`` creates or replaces.
- ``DELETE {base}/{key}`` removes the key.
- ``GET {base}?prefix={prefix}`` returns matching keys, one per line.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable
from urllib.parse import quote

import httpx

from .errors import NotFound, TransportFailure

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0

# Left unescaped by JavaScript's encodeURIComponent.
_UNRESERVED = "-_.!~*'()"

_FORM = {"Content-Type": "application/x-www-form-urlencoded"}


def encode_component(text: str) -> str:
    """Percent-encode a key, prefix or value for a URL or form body."""
    return quote(text, safe=_UNRESERVED)


@runtime_checkable
class Transport(Protocol):
    """What a ``Client`` needs from the wire: text in, text out."""

    async def read(self, key: str) -> str: ...
    async def write(self, key: str, text: str) -> None: ...
    async def remove(self, key: str) -> None: ...
    async def keys(self, prefix: str) -> list[str]: ...


class HttpTransport:
    """``Transport`` over HTTP using ``httpx``.

    Without a shared ``client`` every call opens a short-lived
    ``httpx.AsyncClient``, so the transport holds no connection state.
    A shared client is used as-is and is never closed here.

    Args:
        base_url: The store's base URL. It may embed credentials, so
            it is never logged.
        timeout: Per-request timeout in seconds.
        client: Optional shared ``httpx.AsyncClient``.
        transport: Optional ``httpx`` transport for the per-call
            clients (e.g. ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._transport = transport

    def _key_url(self, key: str) -> str:
        # "." and ".." would be removed from the path as dot segments.
        if not key.strip("."):
            segment = "%2E" * len(key)
        else:
            segment = encode_component(key)
        return f"{self.base_url}/{segment}"

    async def _send(
        self,
        method: str,
        url: str,
        subject: str,
        *,
        content: str | None = None,
    ) -> httpx.Response:
        logger.debug("%s %r", method, subject)
        headers = _FORM if content is not None else None
        try:
            if self._client is not None:
                return await self._client.request(
                    method, url, content=content, headers=headers
                )
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                return await client.request(
                    method, url, content=content, headers=headers
                )
        except httpx.HTTPError as e:
            raise TransportFailure(
                f"{method} {subject!r} failed: {type(e).__name__}: {e}"
            ) from e

    @staticmethod
    def _check(response: httpx.Response, method: str, subject: str) -> None:
        if response.is_success:
            return
        raise TransportFailure(
            f"{method} {subject!r} returned HTTP {response.status_code}",
            status=response.status_code,
            body=response.text,
        )

    async def read(self, key: str) -> str:
        """Fetch the stored text for ``key``.

        Raises:
            NotFound: The store answered 404.
            TransportFailure: Any other failure.
        """
        response = await self._send("GET", self._key_url(key), key)
        if response.status_code == 404:
            raise NotFound(key)
        self._check(response, "GET", key)
        return response.text

    async def write(self, key: str, text: str) -> None:
        """Create or replace ``key`` with ``text``."""
        body = f"{encode_component(key)}={encode_component(text)}"
        response = await self._send("POST", self.base_url, key, content=body)
        self._check(response, "POST", key)

    async def remove(self, key: str) -> None:
        """Delete ``key``. A 404 counts as already deleted."""
        response = await self._send("DELETE", self._key_url(key), key)
        if response.status_code == 404:
            logger.debug("DELETE %r: key was already absent", key)
            return
        self._check(response, "DELETE", key)

    async def keys(self, prefix: str) -> list[str]:
        """Keys starting with ``prefix``, in the order the store lists them."""
        url = f"{self.base_url}?prefix={encode_component(prefix)}"
        response = await self._send("GET", url, f"prefix={prefix}")
        self._check(response, "GET", f"prefix={prefix}")
        return [line for line in response.text.split("\n") if line]
