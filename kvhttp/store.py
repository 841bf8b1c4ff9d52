"""Client factory function."""

from __future__ import annotations

from .client import Client
from .config import ClientConfig
from .errors import InvalidArgument
from .local import LOCAL_BASE_URL, LocalServer


def connect(
    storage: str = "remote",
    *,
    base_url: str | None = None,
    config: ClientConfig | None = None,
) -> Client:
    """Create a Client with sensible defaults.

    Args:
        storage: ``"remote"`` (default) to talk to a store over HTTP,
            or ``"memory"`` for an in-process store that lives as long
            as the client.
        base_url: Remote only. Overrides the configured base URL.
        config: Settings to use instead of reading the environment.

    Returns:
        A ``Client``.

    Raises:
        InvalidArgument: Unknown storage, or no base URL for a remote
            store.
    """
    if config is None:
        config = ClientConfig.from_env()

    if storage == "remote":
        if base_url is not None:
            config = config.model_copy(update={"base_url": base_url})
        return Client.from_config(config)

    if storage != "memory":
        raise InvalidArgument(f"Unknown storage: {storage!r}")

    config.apply_logging()
    server = LocalServer()
    return Client(
        LOCAL_BASE_URL, timeout=config.timeout, http_transport=server.transport()
    )
