"""Client: async operations against a remote key-value store."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from .bulk import fan_out, resolve_values
from .codec import JSON, Codec
from .config import ClientConfig
from .errors import InvalidArgument, NotFound
from .patch import (
    MISSING,
    Scalar,
    as_document,
    classify,
    merge_fields,
    parse_patch,
)
from .transport import DEFAULT_TIMEOUT, HttpTransport, Transport

logger = logging.getLogger(__name__)


def _check_key(key: Any) -> None:
    if not isinstance(key, str):
        raise InvalidArgument(f"Key must be a str, not {type(key).__name__}")
    if not key:
        raise InvalidArgument("Key must not be empty")


def _check_prefix(prefix: Any) -> None:
    if not isinstance(prefix, str):
        raise InvalidArgument(
            f"Prefix must be a str, not {type(prefix).__name__}"
        )


class Client:
    """Async client for a key-value store served over HTTP.

    Every operation is a single round trip (two for ``update`` and
    ``patch``). The client keeps no cache; its only state is the base
    URL and how to reach it.

    Args:
        base_url: The store's base URL. Required and non-empty.
        timeout: Per-request timeout in seconds.
        http_client: Optional shared ``httpx.AsyncClient``.
        http_transport: Optional ``httpx`` transport, e.g. a
            ``LocalServer`` transport or ``httpx.MockTransport``.
        codec: Encode/decode pair for stored values (JSON by default).

    Raises:
        InvalidArgument: If ``base_url`` is missing or not a string.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
        codec: Codec = JSON,
    ) -> None:
        if not isinstance(base_url, str):
            raise InvalidArgument(
                f"Base URL must be a str, not {type(base_url).__name__}"
            )
        if not base_url:
            raise InvalidArgument("Base URL must not be empty")
        self.base_url = base_url
        self._codec = codec
        self._transport: Transport = HttpTransport(
            base_url,
            timeout=timeout,
            client=http_client,
            transport=http_transport,
        )

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> Client:
        """Build a client from a ``ClientConfig``.

        Raises:
            InvalidArgument: If the config has no base URL.
        """
        if config.base_url is None:
            raise InvalidArgument(
                "No base URL configured; pass one or set REPLIT_DB_URL"
            )
        config.apply_logging()
        return cls(config.base_url, timeout=config.timeout, **kwargs)

    @classmethod
    def from_env(cls, **kwargs: Any) -> Client:
        """Build a client from ``REPLIT_DB_URL`` and friends."""
        return cls.from_config(ClientConfig.from_env(), **kwargs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(<base_url hidden>)"

    # -- Read operations --

    async def _fetch(self, key: str) -> Any:
        """Decoded value for ``key``, or ``MISSING`` when absent."""
        _check_key(key)
        try:
            text = await self._transport.read(key)
        except NotFound:
            return MISSING
        return self._codec.decode(text)

    async def get(self, key: str, default: Any = None) -> Any:
        """Get a key's value, or ``default`` if the key does not exist."""
        value = await self._fetch(key)
        return default if value is MISSING else value

    async def has(self, key: str) -> bool:
        """True if the key exists (a stored ``null`` counts)."""
        return await self._fetch(key) is not MISSING

    check = has

    async def empty(self, key: str) -> bool:
        """True if the key does not exist."""
        return not await self.has(key)

    async def list(self, prefix: str = "") -> list[str]:
        """All keys starting with ``prefix`` (every key by default)."""
        _check_prefix(prefix)
        return await self._transport.keys(prefix)

    prefix = list

    # -- Write operations --

    async def set(self, key: str, value: Any) -> str:
        """Create or replace a key. Returns the key."""
        _check_key(key)
        text = self._codec.encode(value)
        await self._transport.write(key, text)
        return key

    post = set
    put = set

    async def delete(self, key: str) -> str:
        """Delete a key. Deleting an absent key succeeds. Returns the key."""
        _check_key(key)
        await self._transport.remove(key)
        return key

    remove = delete

    # -- Read-modify-write --

    async def update(self, key: str, patch: Any) -> str:
        """Apply an operator patch to the object stored at ``key``.

        ``patch`` maps operator names to single-field instructions
        and plain field names to new values::

            await client.update("user", {"$add": {"visits": 1}, "seen": True})

        A non-mapping ``patch`` replaces the value outright, with no read.
        A missing key is patched as an empty object. Returns the key.

        Raises:
            InvalidArgument: Bad key or malformed operator payload.
            InvalidValue: The stored value is not an object.
        """
        _check_key(key)
        patch = classify(patch)
        if isinstance(patch, Scalar):
            return await self.set(key, patch.value)
        parsed = parse_patch(patch.fields)
        document = as_document(key, await self._fetch(key))
        return await self.set(key, parsed.apply(document))

    edit = update

    async def patch(self, key: str, fields: Any) -> str:
        """Merge ``fields`` into the object stored at ``key``.

        No operator names are interpreted. A non-mapping ``fields``
        replaces the value outright. Returns the key.
        """
        _check_key(key)
        fields = classify(fields)
        if isinstance(fields, Scalar):
            return await self.set(key, fields.value)
        document = as_document(key, await self._fetch(key))
        return await self.set(key, merge_fields(document, fields.fields))

    # -- Bulk operations --

    async def _resolve_keys(self, prefix_or_keys: str | Sequence[str]) -> list[str]:
        if isinstance(prefix_or_keys, str):
            return await self.list(prefix_or_keys)
        if isinstance(prefix_or_keys, (list, tuple)):
            for key in prefix_or_keys:
                _check_key(key)
            return list(prefix_or_keys)
        raise InvalidArgument(
            f"Expected a prefix or a list of keys, "
            f"not {type(prefix_or_keys).__name__}"
        )

    async def get_all(self, prefix: str = "") -> dict[str, Any]:
        """Map every key starting with ``prefix`` to its value."""
        keys = await self.list(prefix)
        values = await fan_out(self.get(key) for key in keys)
        return dict(zip(keys, values))

    async def set_all(
        self, prefix_or_keys: str | Sequence[str] = "", values: Any = None
    ) -> list[str]:
        """Set many keys concurrently.

        Keys are either listed explicitly or resolved from a prefix.
        See ``bulk.resolve_values`` for the accepted ``values`` forms.
        Returns the keys that were set.
        """
        keys = await self._resolve_keys(prefix_or_keys)
        resolved = resolve_values(keys, values)
        logger.debug("Setting %d keys", len(keys))
        await fan_out(self.set(k, v) for k, v in zip(keys, resolved))
        return keys

    async def delete_all(
        self, prefix_or_keys: str | Sequence[str] = ""
    ) -> list[str]:
        """Delete many keys concurrently. Returns the keys deleted."""
        keys = await self._resolve_keys(prefix_or_keys)
        logger.debug("Deleting %d keys", len(keys))
        await fan_out(self.delete(k) for k in keys)
        return keys

    remove_all = delete_all
