"""LocalServer: the remote store's HTTP protocol served in-process."""

from __future__ import annotations

import logging
from urllib.parse import parse_qsl, unquote

import httpx

from .kv.base import KVStore
from .kv.memory import Memory

logger = logging.getLogger(__name__)

LOCAL_BASE_URL = "http://kvhttp.local"


class LocalServer:
    """Answers store requests from a ``KVStore`` instead of the network.

    Mount it at the root of a base URL (``LOCAL_BASE_URL`` by default)
    and hand ``transport()`` to a ``Client``::

        server = LocalServer()
        client = Client(LOCAL_BASE_URL, http_transport=server.transport())

    Keys are listed in sorted order.
    """

    def __init__(self, backend: KVStore | None = None) -> None:
        self.backend = backend if backend is not None else Memory()

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        raw_path = request.url.raw_path.decode("ascii").split("?", 1)[0]
        segment = raw_path.strip("/")
        logger.debug("%s %s", request.method, segment or "<root>")

        if not segment:
            if request.method == "GET":
                return self._list(request)
            if request.method == "POST":
                return self._write(request)
        elif "/" not in segment:
            key = unquote(segment)
            if request.method == "GET":
                return self._read(key)
            if request.method == "DELETE":
                self.backend.remove(key)
                return httpx.Response(204)
        else:
            return httpx.Response(404, text="Not found")
        return httpx.Response(405, text="Method not allowed")

    def _read(self, key: str) -> httpx.Response:
        value = self.backend.get(key)
        if value is None:
            return httpx.Response(404, text="Not found")
        return httpx.Response(200, content=value)

    def _write(self, request: httpx.Request) -> httpx.Response:
        body = request.content.decode("utf-8")
        pairs = parse_qsl(body, keep_blank_values=True)
        if not pairs:
            return httpx.Response(400, text="Empty body")
        for key, text in pairs:
            if not key:
                return httpx.Response(400, text="Empty key")
            self.backend.set(key, text.encode("utf-8"))
        return httpx.Response(200)

    def _list(self, request: httpx.Request) -> httpx.Response:
        prefix = request.url.params.get("prefix", "")
        keys = self.backend.keys_with_prefix(prefix)
        return httpx.Response(200, text="\n".join(keys))
