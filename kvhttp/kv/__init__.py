"""KV store backends for the local store emulation."""

from .base import KVStore
from .memory import Memory

__all__ = ["KVStore", "Memory"]
