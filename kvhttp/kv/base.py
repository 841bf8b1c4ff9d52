"""Abstract KV store interface."""

from abc import ABC, abstractmethod
from typing import Iterable


class KVStore(ABC):
    """Key-value store operating on bytes only.

    Backs the local emulation of the remote store. Values are the
    stored JSON text, UTF-8 encoded; decoding happens client-side.
    """

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Get bytes value for key, or None if not found."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Set bytes value for key."""

    @abstractmethod
    def keys(self) -> Iterable[str]:
        """Iterate over all keys."""

    @abstractmethod
    def __contains__(self, key: str) -> bool:
        """Check if key exists in store."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key if present."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all items from the store."""

    def keys_with_prefix(self, prefix: str) -> list[str]:
        """Sorted keys starting with ``prefix`` (empty prefix matches all)."""
        return sorted(key for key in self.keys() if key.startswith(prefix))
