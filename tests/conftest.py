"""Shared fixtures: clients wired to in-process stores."""

from __future__ import annotations

import asyncio
from typing import Callable

import httpx
import pytest

from kvhttp import LOCAL_BASE_URL, Client, LocalServer


class Recorder:
    """Wraps a request handler and records every request it sees."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def methods(self) -> list[str]:
        return [r.method for r in self.requests]


@pytest.fixture
def server() -> LocalServer:
    return LocalServer()


@pytest.fixture
def recorder(server: LocalServer) -> Recorder:
    return Recorder(server.handle)


@pytest.fixture
def client(recorder: Recorder) -> Client:
    return Client(LOCAL_BASE_URL, http_transport=httpx.MockTransport(recorder))


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> Client:
    return Client(LOCAL_BASE_URL, http_transport=httpx.MockTransport(handler))


async def drain() -> None:
    """Wait for background tasks left running by a failed fan-out."""
    pending = asyncio.all_tasks() - {asyncio.current_task()}
    await asyncio.gather(*pending, return_exceptions=True)
